"""AWS Bedrock image generation provider.

Supports Amazon Nova Canvas / Titan Image Generator (default), Stability
SD3 / SD3.5 / Ultra and legacy SDXL. boto3 is synchronous, so the
``invoke_model`` call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any

import boto3

from storyforge.services.providers import ImageGenerationError

logger = logging.getLogger(__name__)

DEFAULT_NEGATIVE_PROMPT = (
    "low quality, blurry, deformed, disfigured, bad anatomy, bad proportions, "
    "extra limbs, mutated hands, poorly drawn face, poorly drawn hands, text, "
    "watermark, logo, signature, cropped, out of frame, ugly, tiling, grainy, "
    "oversaturated"
)
VARIATION_NEGATIVE_PROMPT = (
    "low quality, blurry, deformed, disfigured, bad anatomy, text, watermark, "
    "logo, signature, cropped, ugly, grainy"
)
MAX_REFERENCE_IMAGES = 5


def is_amazon_model(model_id: str) -> bool:
    return model_id.startswith("amazon.")


def is_sd3_model(model_id: str) -> bool:
    return model_id.startswith("stability.sd3") or model_id == "stability.sd3-ultra-v1:1"


def is_sdxl_model(model_id: str) -> bool:
    return model_id == "stability.stable-diffusion-xl-v1"


def aspect_ratio(width: int, height: int) -> str:
    """Closest Stability aspect ratio token for a width/height pair."""
    ratio = width / height
    if ratio >= 2.2:
        return "21:9"
    if ratio >= 1.7:
        return "16:9"
    if ratio >= 1.4:
        return "3:2"
    if ratio >= 1.1:
        return "4:3"
    if ratio >= 0.9:
        return "1:1"
    if ratio >= 0.7:
        return "5:4"
    if ratio >= 0.55:
        return "2:3"
    if ratio >= 0.45:
        return "9:16"
    return "9:21"


def snap_dimension(value: int) -> int:
    """Round to a multiple of 64 within Nova Canvas' 320..4096 range."""
    snapped = round(value / 64) * 64
    return max(320, min(4096, snapped))


def build_text_to_image_payload(
    model_id: str,
    prompt: str,
    negative_prompt: str,
    seed: int,
    width: int,
    height: int,
) -> dict[str, Any]:
    """Request body for a text-to-image call, shaped per model family."""
    if is_sd3_model(model_id):
        return {
            "prompt": prompt,
            "negative_prompt": negative_prompt,
            "mode": "text-to-image",
            "aspect_ratio": aspect_ratio(width, height),
            "output_format": "png",
            "seed": seed % 4294967295,
        }

    if is_sdxl_model(model_id):
        text_prompts = [{"text": prompt, "weight": 1}]
        if negative_prompt:
            text_prompts.append({"text": negative_prompt, "weight": -1})
        return {
            "text_prompts": text_prompts,
            "cfg_scale": 10,
            "seed": seed % 4294967295,
            "steps": 50,
            "width": width,
            "height": height,
            "style_preset": "cinematic",
        }

    text_params: dict[str, Any] = {"text": prompt}
    if negative_prompt:
        text_params["negativeText"] = negative_prompt
    return {
        "taskType": "TEXT_IMAGE",
        "textToImageParams": text_params,
        "imageGenerationConfig": _nova_generation_config(seed, width, height),
    }


def build_image_variation_payload(
    prompt: str,
    reference_images: list[str],
    seed: int,
    width: int,
    height: int,
    similarity: float = 0.9,
) -> dict[str, Any]:
    """Nova Canvas IMAGE_VARIATION body; reference images are base64 strings."""
    return {
        "taskType": "IMAGE_VARIATION",
        "imageVariationParams": {
            "images": reference_images[:MAX_REFERENCE_IMAGES],
            "text": prompt,
            "similarityStrength": similarity,
            "negativeText": VARIATION_NEGATIVE_PROMPT,
        },
        "imageGenerationConfig": _nova_generation_config(seed, width, height),
    }


def _nova_generation_config(seed: int, width: int, height: int) -> dict[str, Any]:
    return {
        "numberOfImages": 1,
        "quality": "premium",
        "height": height,
        "width": width,
        "cfgScale": 7.5,
        "seed": seed % 2147483647,
    }


def extract_image(model_id: str, body: dict[str, Any]) -> bytes:
    """Decode the first image of a Bedrock response body."""
    if body.get("error"):
        raise ImageGenerationError(f"Bedrock generation error: {body['error']}")

    try:
        if is_sdxl_model(model_id):
            b64_data = body["artifacts"][0]["base64"]
        else:
            b64_data = body["images"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ImageGenerationError(
            f"Bedrock returned no image data. Response keys: {list(body.keys())}"
        ) from e

    return base64.b64decode(b64_data)


def create_client(
    region: str,
    access_key_id: str = "",
    secret_access_key: str = "",
):
    """bedrock-runtime client; empty keys fall back to the default credential chain."""
    kwargs: dict[str, Any] = {"region_name": region}
    if access_key_id and secret_access_key:
        kwargs["aws_access_key_id"] = access_key_id
        kwargs["aws_secret_access_key"] = secret_access_key
    return boto3.client("bedrock-runtime", **kwargs)


async def invoke(client, model_id: str, payload: dict[str, Any]) -> bytes:
    """Call ``invoke_model`` off the event loop and return the decoded image."""

    def _call() -> dict[str, Any]:
        response = client.invoke_model(
            modelId=model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(payload),
        )
        return json.loads(response["body"].read())

    body = await asyncio.to_thread(_call)
    return extract_image(model_id, body)


async def generate_image(
    *,
    client,
    model_id: str,
    prompt: str,
    seed: int,
    width: int,
    height: int,
    negative_prompt: str | None = None,
    reference_images: list[str] | None = None,
) -> bytes:
    """Generate one image.

    With reference images and an Amazon model the request is an
    IMAGE_VARIATION; otherwise plain text-to-image.
    """
    if reference_images and is_amazon_model(model_id):
        payload = build_image_variation_payload(prompt, reference_images, seed, width, height)
        logger.info(
            "Bedrock IMAGE_VARIATION model=%s refs=%d seed=%d",
            model_id, len(payload["imageVariationParams"]["images"]), seed,
        )
    else:
        payload = build_text_to_image_payload(
            model_id,
            prompt,
            DEFAULT_NEGATIVE_PROMPT if negative_prompt is None else negative_prompt,
            seed,
            width,
            height,
        )
        logger.info("Bedrock TEXT_IMAGE model=%s size=%dx%d seed=%d", model_id, width, height, seed)

    return await invoke(client, model_id, payload)
