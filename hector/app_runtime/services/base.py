"""Generation service interface.

The generation service is the external platform that runs the actual model
calls.  The runtime only depends on this protocol; the concrete service is
passed in explicitly (see ``ExecutionOrchestrator``).

Every call is async and may raise.  Implementations should raise
``GenerationError`` for rejected calls and unusable payloads; anything else
raised is still caught at the action boundary.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import AliasChoices, BaseModel, Field, field_validator

_PATH_ALIASES = AliasChoices("path", "filepath")

# -- Responses ---------------------------------------------------------------


class TextGeneration(BaseModel):
    text: str
    path: str | None = Field(default=None, validation_alias=_PATH_ALIASES)


class ObjectGeneration(BaseModel):
    object: Any
    path: str | None = Field(default=None, validation_alias=_PATH_ALIASES)


class ImageGeneration(BaseModel):
    images: list[str] = Field(default_factory=list)
    path: str | None = Field(default=None, validation_alias=_PATH_ALIASES)


class AudioGeneration(BaseModel):
    audios: list[str] = Field(default_factory=list)
    path: str | None = Field(default=None, validation_alias=_PATH_ALIASES)

    @field_validator("path", mode="before")
    @classmethod
    def _first_path(cls, value: Any) -> Any:
        # Some providers return one path per generated clip.
        if isinstance(value, list):
            return value[0] if value else None
        return value


class VideoGeneration(BaseModel):
    video: str | None = None
    path: str | None = Field(default=None, validation_alias=_PATH_ALIASES)


# -- Protocol ----------------------------------------------------------------


@runtime_checkable
class GenerationService(Protocol):
    """Async text / object / media generation.

    ``model=None`` means "let the provider pick" (the editor's "Best").
    Extra keyword options (``temperature``, ``maxTokens``, ``size`` ...) are
    passed through from the action config unchanged.
    """

    async def generate_text(self, *, prompt: str, model: str | None = None, **options: Any) -> TextGeneration:
        """Generate free text for *prompt*."""
        ...

    async def generate_object(
        self,
        *,
        prompt: str,
        schema: dict[str, Any],
        model: str | None = None,
        **options: Any,
    ) -> ObjectGeneration:
        """Generate a JSON value conforming to *schema* (a JSON Schema document)."""
        ...

    async def generate_image(self, *, prompt: str, model: str | None = None, **options: Any) -> ImageGeneration: ...

    async def generate_audio(self, *, prompt: str, model: str | None = None, **options: Any) -> AudioGeneration: ...

    async def generate_video(self, *, prompt: str, model: str | None = None, **options: Any) -> VideoGeneration: ...
