"""Generation service interface and implementations."""

from hector.app_runtime.services.base import (
    AudioGeneration,
    GenerationService,
    ImageGeneration,
    ObjectGeneration,
    TextGeneration,
    VideoGeneration,
)
from hector.app_runtime.services.http import HttpGenerationService

__all__ = [
    "AudioGeneration",
    "GenerationService",
    "HttpGenerationService",
    "ImageGeneration",
    "ObjectGeneration",
    "TextGeneration",
    "VideoGeneration",
]
