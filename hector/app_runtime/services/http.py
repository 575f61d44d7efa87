"""HTTP generation service.

Talks to the platform's generation API with one JSON ``POST`` per call::

    POST {base_url}/ai/generateText    {"prompt": ..., "model": ..., ...options}
    POST {base_url}/ai/generateObject  {"prompt": ..., "schema": {...}, ...}
    POST {base_url}/ai/generateImage   ...
    POST {base_url}/ai/generateAudio   ...
    POST {base_url}/ai/generateVideo   ...

Responses are JSON objects shaped like the ``*Generation`` models in
``services.base`` (``filepath`` is accepted as an alias of ``path``).

Transport errors, non-2xx responses and undecodable bodies all raise
``GenerationError``.  Timeouts are the client's transport timeout; there are
no retries.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from hector.app_runtime.errors import GenerationError
from hector.app_runtime.services.base import (
    AudioGeneration,
    ImageGeneration,
    ObjectGeneration,
    TextGeneration,
    VideoGeneration,
)

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)

_ERROR_BODY_LIMIT = 500


class HttpGenerationService:
    """``GenerationService`` backed by an ``httpx.AsyncClient``.

    Pass ``client`` to reuse an existing client (or a mock transport in
    tests); otherwise one is created and closed by ``aclose``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            headers = {"Content-Type": "application/json"}
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
            client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=httpx.Timeout(timeout),
            )
        self._client = client

    # -- Lifecycle -------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpGenerationService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- GenerationService -----------------------------------------------------

    async def generate_text(self, *, prompt: str, model: str | None = None, **options: Any) -> TextGeneration:
        data = await self._post("generateText", _payload(prompt, model, options))
        return _decode(TextGeneration, data, "generateText")

    async def generate_object(
        self,
        *,
        prompt: str,
        schema: dict[str, Any],
        model: str | None = None,
        **options: Any,
    ) -> ObjectGeneration:
        data = await self._post("generateObject", _payload(prompt, model, {**options, "schema": schema}))
        return _decode(ObjectGeneration, data, "generateObject")

    async def generate_image(self, *, prompt: str, model: str | None = None, **options: Any) -> ImageGeneration:
        data = await self._post("generateImage", _payload(prompt, model, options))
        return _decode(ImageGeneration, data, "generateImage")

    async def generate_audio(self, *, prompt: str, model: str | None = None, **options: Any) -> AudioGeneration:
        data = await self._post("generateAudio", _payload(prompt, model, options))
        return _decode(AudioGeneration, data, "generateAudio")

    async def generate_video(self, *, prompt: str, model: str | None = None, **options: Any) -> VideoGeneration:
        data = await self._post("generateVideo", _payload(prompt, model, options))
        return _decode(VideoGeneration, data, "generateVideo")

    # -- Transport -------------------------------------------------------------

    async def _post(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("POST /ai/%s (model=%s)", method, payload.get("model"))
        try:
            response = await self._client.post(f"/ai/{method}", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:_ERROR_BODY_LIMIT]
            msg = f"{method} failed with HTTP {e.response.status_code}: {body}"
            raise GenerationError(msg) from e
        except httpx.HTTPError as e:
            msg = f"{method} request failed: {e}"
            raise GenerationError(msg) from e

        try:
            data = response.json()
        except ValueError as e:
            msg = f"{method} returned a non-JSON body"
            raise GenerationError(msg) from e
        if not isinstance(data, dict):
            msg = f"{method} returned {type(data).__name__}, expected an object"
            raise GenerationError(msg)
        return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _payload(prompt: str, model: str | None, options: dict[str, Any]) -> dict[str, Any]:
    """Build the request body.  ``None`` options are dropped."""
    payload = {k: v for k, v in options.items() if v is not None}
    payload["prompt"] = prompt
    if model is not None:
        payload["model"] = model
    return payload


def _decode(model: type[_M], data: dict[str, Any], method: str) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        msg = f"{method} returned an unusable payload: {e.error_count()} validation error(s)"
        raise GenerationError(msg) from e
