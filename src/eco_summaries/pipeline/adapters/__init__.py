"""Provider adapters for the generation endpoint."""

from .base import GenerationAdapter
from .gemini import GoogleGenAIAdapter
from .rest import RestGenerationAdapter

__all__ = ["GenerationAdapter", "GoogleGenAIAdapter", "RestGenerationAdapter"]
