"""Image provider implementations.

Each provider module exposes an async ``generate_image`` that returns raw
PNG bytes; persisting the file is left to the caller.
"""


class ImageGenerationError(RuntimeError):
    """The vendor returned an error body or no usable image."""
