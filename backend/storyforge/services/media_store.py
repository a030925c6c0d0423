from __future__ import annotations
"""Local media volume — generated files are written here and served under /media."""

import os

from storyforge.config import get_settings

settings = get_settings()


def save_bytes(data: bytes, subfolder: str, filename: str) -> str:
    """Write bytes to ``<MEDIA_VOLUME>/<subfolder>/<filename>`` and return its public URL."""
    dir_path = os.path.join(settings.MEDIA_VOLUME, subfolder)
    os.makedirs(dir_path, exist_ok=True)

    with open(os.path.join(dir_path, filename), "wb") as f:
        f.write(data)

    return media_url(subfolder, filename)


def media_url(subfolder: str, filename: str) -> str:
    return f"{settings.MEDIA_URL_PREFIX}/{subfolder}/{filename}"


def media_dir(subfolder: str) -> str:
    dir_path = os.path.join(settings.MEDIA_VOLUME, subfolder)
    os.makedirs(dir_path, exist_ok=True)
    return dir_path


def url_to_path(url: str | None) -> str | None:
    """Map a public media URL back to its file, or None if it is not a local media URL."""
    if not url:
        return None
    prefix = settings.MEDIA_URL_PREFIX.rstrip("/") + "/"
    if not url.startswith(prefix):
        return None
    rel_path = url[len(prefix):]
    full_path = os.path.normpath(os.path.join(settings.MEDIA_VOLUME, rel_path))
    media_root = os.path.normpath(settings.MEDIA_VOLUME)
    if os.path.commonpath([full_path, media_root]) != media_root:
        return None
    return full_path


def read_media(url: str | None) -> bytes | None:
    """Read a media file by URL; None when it is missing."""
    path = url_to_path(url)
    if not path or not os.path.exists(path):
        return None
    with open(path, "rb") as f:
        return f.read()


def delete_media(url: str | None) -> bool:
    """Remove a media file by URL. Returns False when there was nothing to remove."""
    path = url_to_path(url)
    if not path or not os.path.isfile(path):
        return False
    os.remove(path)
    return True
