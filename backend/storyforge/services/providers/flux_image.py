"""Flux provider — OpenAI-compatible ``/images/generations`` endpoint."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from storyforge.services.providers import ImageGenerationError

logger = logging.getLogger(__name__)


async def generate_image(
    *,
    prompt: str,
    model: str,
    api_base: str,
    api_key: str,
    seed: int,
    width: int,
    height: int,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 120.0,
) -> bytes:
    """Generate one image and return its bytes (b64_json or downloaded URL)."""
    url = f"{api_base.rstrip('/')}/images/generations"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload: dict[str, Any] = {
        "model": model,
        "prompt": prompt,
        "n": 1,
        "size": f"{width}x{height}",
        "seed": seed,
    }

    client = http_client or httpx.AsyncClient(timeout=timeout)
    own_client = http_client is None

    try:
        logger.info("Calling Flux image model=%s (seed=%d)", model, seed)
        response = await client.post(url, headers=headers, json=payload)
        response.raise_for_status()

        result = response.json()
        data_list = result.get("data", [])
        if not data_list:
            raise ImageGenerationError(f"Flux returned empty data. Response keys: {list(result.keys())}")

        item = data_list[0]
        if item.get("b64_json"):
            return base64.b64decode(item["b64_json"])

        if item.get("url"):
            download = await client.get(item["url"])
            download.raise_for_status()
            return download.content

        raise ImageGenerationError("Flux returned no image data (no b64_json or url)")
    finally:
        if own_client:
            await client.aclose()
