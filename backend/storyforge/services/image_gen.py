from __future__ import annotations
"""Image generation service — assets, asset variants and composed scenes.

The vendor is picked by IMAGE_PROVIDER (``bedrock`` or ``flux``); with
USE_MOCK_API set, Pillow placeholders are written instead. Generated PNGs
land in the media volume and are referenced by their public URL.
"""

import base64
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

from storyforge.config import get_settings
from storyforge.services import media_store
from storyforge.services.base_gen_service import BaseGenService, GenServiceConfig
from storyforge.services.prompt_builder import (
    AssetRef,
    build_scene_prompt,
    prompt_limit,
    truncate_prompt,
)
from storyforge.services.providers import (
    ImageGenerationError,
    bedrock_image,
    flux_image,
    mock_image,
)

logger = logging.getLogger(__name__)
settings = get_settings()

MAX_SEED = 2147483647
VARIANT_SEED_STEP = 7919

# Module-level httpx client for connection reuse (lazy init)
_http_client: httpx.AsyncClient | None = None


def _get_http_client(timeout: float) -> httpx.AsyncClient:
    """Return a module-level httpx.AsyncClient, creating it on first use."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=timeout)
    return _http_client


@dataclass
class GeneratedImage:
    url: str
    seed: int


def random_seed() -> int:
    return random.randrange(0, MAX_SEED)


def asset_dimensions(asset_type: str) -> tuple[int, int]:
    """Environments render widescreen, everything else square."""
    if asset_type == "environment":
        return bedrock_image.snap_dimension(1280), bedrock_image.snap_dimension(720)
    return bedrock_image.snap_dimension(1024), bedrock_image.snap_dimension(1024)


SCENE_DIMENSIONS = (bedrock_image.snap_dimension(1024), bedrock_image.snap_dimension(576))


class ImageGenService(BaseGenService[bytes]):
    """Routes image requests to the configured provider and returns PNG bytes."""

    service_name = "image_gen"

    def __init__(self) -> None:
        super().__init__(GenServiceConfig(
            max_retries=settings.IMAGE_GEN_MAX_RETRIES,
            timeout=settings.IMAGE_GEN_TIMEOUT,
            fallback_enabled=settings.IMAGE_FALLBACK_TO_MOCK,
        ))
        self._bedrock_client = None

    def provider_name(self) -> str:
        if settings.USE_MOCK_API:
            return "mock"
        return settings.IMAGE_PROVIDER.strip().lower()

    def model_id(self) -> str:
        provider = self.provider_name()
        if provider == "bedrock":
            return settings.BEDROCK_MODEL_ID
        if provider == "flux":
            return settings.FLUX_MODEL
        return "mock"

    def engine_label(self) -> str:
        """Human-readable engine name recorded in render metadata."""
        provider = self.provider_name()
        if provider == "mock":
            return "Mock"
        labels = {"bedrock": "AWS Bedrock", "flux": "Flux"}
        return f"{labels.get(provider, provider)} / {self.model_id()}"

    def prompt_limit(self) -> int:
        return prompt_limit(self.model_id())

    def _get_bedrock_client(self):
        if self._bedrock_client is None:
            self._bedrock_client = bedrock_image.create_client(
                settings.AWS_REGION,
                settings.AWS_ACCESS_KEY_ID,
                settings.AWS_SECRET_ACCESS_KEY,
            )
        return self._bedrock_client

    async def _generate(self, **kwargs: Any) -> bytes:
        provider = self.provider_name()

        if provider == "mock":
            return await mock_image.generate_image(
                prompt=kwargs["prompt"],
                seed=kwargs["seed"],
                width=kwargs["width"],
                height=kwargs["height"],
                label=kwargs.get("label", ""),
            )

        if provider == "bedrock":
            return await bedrock_image.generate_image(
                client=self._get_bedrock_client(),
                model_id=settings.BEDROCK_MODEL_ID,
                prompt=kwargs["prompt"],
                negative_prompt=kwargs.get("negative_prompt"),
                seed=kwargs["seed"],
                width=kwargs["width"],
                height=kwargs["height"],
                reference_images=kwargs.get("reference_images"),
            )

        if provider == "flux":
            return await flux_image.generate_image(
                prompt=kwargs["prompt"],
                model=settings.FLUX_MODEL,
                api_base=settings.FLUX_API_BASE,
                api_key=settings.FLUX_API_KEY,
                seed=kwargs["seed"],
                width=kwargs["width"],
                height=kwargs["height"],
                http_client=_get_http_client(float(settings.FLUX_TIMEOUT)),
            )

        raise ImageGenerationError(f"Unknown image provider: {provider}")

    async def _fallback(self, **kwargs: Any) -> bytes:
        """Fallback to a placeholder image."""
        logger.info("image_gen: using mock fallback (%s)", kwargs.get("label", ""))
        return await mock_image.generate_image(
            prompt=kwargs["prompt"],
            seed=kwargs["seed"],
            width=kwargs["width"],
            height=kwargs["height"],
            label=kwargs.get("label", ""),
        )


# Module-level singleton for metrics aggregation
_image_service = ImageGenService()


def get_image_service() -> ImageGenService:
    """Return the singleton ImageGenService."""
    return _image_service


async def generate_asset_image(
    asset_id: str,
    prompt: str,
    negative_prompt: str | None = None,
    seed: int | None = None,
    asset_type: str = "character",
) -> GeneratedImage:
    """Generate one image for an asset; saved as ``assets/{asset_id}_{seed}.png``."""
    seed = random_seed() if seed is None else seed
    width, height = asset_dimensions(asset_type)

    result = await _image_service.execute(
        prompt=truncate_prompt(prompt, _image_service.prompt_limit()),
        negative_prompt=negative_prompt,
        seed=seed,
        width=width,
        height=height,
        label=f"Asset {asset_id}",
    )
    url = media_store.save_bytes(result.data, "assets", f"{asset_id}_{seed}.png")
    logger.info("Asset %s image saved: %s (%d bytes)", asset_id, url, len(result.data))
    return GeneratedImage(url=url, seed=seed)


async def generate_variant_images(
    asset_id: str,
    prompt: str,
    negative_prompt: str | None,
    base_seed: int,
    count: int,
    asset_type: str = "character",
) -> list[GeneratedImage]:
    """Generate ``count`` candidates sequentially; variant i uses base_seed + i * 7919."""
    width, height = asset_dimensions(asset_type)
    truncated = truncate_prompt(prompt, _image_service.prompt_limit())

    results: list[GeneratedImage] = []
    for i in range(1, count + 1):
        variant_seed = base_seed + i * VARIANT_SEED_STEP
        result = await _image_service.execute(
            prompt=truncated,
            negative_prompt=negative_prompt,
            seed=variant_seed,
            width=width,
            height=height,
            label=f"Asset {asset_id} variant {i}",
        )
        url = media_store.save_bytes(
            result.data, "variants", f"{asset_id}_var{i}_{variant_seed}.png"
        )
        results.append(GeneratedImage(url=url, seed=variant_seed))

    return results


def load_reference_images(assets: list[AssetRef]) -> list[str]:
    """Base64 thumbnails of up to five assets; missing files are skipped."""
    images: list[str] = []
    for asset in assets[: bedrock_image.MAX_REFERENCE_IMAGES]:
        data = media_store.read_media(asset.thumbnail_url)
        if data is None:
            if asset.thumbnail_url:
                logger.warning("Reference image not found: %s", asset.thumbnail_url)
            continue
        images.append(base64.b64encode(data).decode("utf-8"))
    return images


async def generate_scene_image(
    scene_id: str,
    assets: list[AssetRef],
    description: str = "",
    mood: str = "",
    camera_angle: str = "",
    lighting: str = "",
    visual_style: str = "",
    seed: int | None = None,
) -> GeneratedImage:
    """Render a scene frame, using asset thumbnails as reference images."""
    seed = random_seed() if seed is None else seed
    out_seed = seed % MAX_SEED
    width, height = SCENE_DIMENSIONS

    prompt = build_scene_prompt(
        assets=assets,
        description=description,
        mood=mood,
        camera_angle=camera_angle,
        lighting=lighting,
        visual_style=visual_style,
        limit=_image_service.prompt_limit(),
    )
    reference_images = load_reference_images(assets)
    logger.info(
        "Scene %s render: %d reference images, prompt (%d chars): %s",
        scene_id, len(reference_images), len(prompt), prompt,
    )

    result = await _image_service.execute(
        prompt=prompt,
        seed=out_seed,
        width=width,
        height=height,
        reference_images=reference_images,
        label=f"Scene {scene_id}",
    )
    url = media_store.save_bytes(result.data, "scenes", f"{scene_id}_{out_seed}.png")
    return GeneratedImage(url=url, seed=out_seed)
