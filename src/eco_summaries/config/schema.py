"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment, project files and programmatic overrides into the
correct types with proper defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_MODELS = ("gemini-2.5-flash-lite", "gemini-2.0-flash")
DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class PromptStyleSettings(BaseModel):
    """Length bounds requested from the model for one category."""

    min_sentences: int = Field(default=2, ge=1)
    max_sentences: int = Field(default=4, ge=1)
    min_words: int | None = Field(default=None, ge=1)
    max_words: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_bounds(self) -> "PromptStyleSettings":
        """Reject inverted sentence or word ranges."""
        if self.min_sentences > self.max_sentences:
            raise ValueError("min_sentences must not exceed max_sentences")
        if (
            self.min_words is not None
            and self.max_words is not None
            and self.min_words > self.max_words
        ):
            raise ValueError("min_words must not exceed max_words")
        return self


def default_prompt_styles() -> dict[str, PromptStyleSettings]:
    """Bounds used by the field-guide prompts unless configured otherwise."""
    return {
        "biome": PromptStyleSettings(min_sentences=3, max_sentences=6),
        "plant": PromptStyleSettings(
            min_sentences=2, max_sentences=3, min_words=40, max_words=60
        ),
        "pest": PromptStyleSettings(min_sentences=2, max_sentences=4),
    }


class SummarySettings(BaseSettings):
    """Pydantic settings schema for the summary pipeline.

    Handles validation, type coercion and defaults for every configuration
    field. Environment variables (``ECO_SUMMARIES_*``) are read by
    ``EnvironmentConfigLoader`` and passed in as explicit values.
    """

    model_config = SettingsConfigDict(
        env_file=None,
        extra="ignore",  # Ignore unknown keys for forward compatibility
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Validate explicit values only.

        Environment variables are collected by ``EnvironmentConfigLoader`` so
        that the resolver can record where each value came from.
        """
        return (init_settings,)

    # --- Core Configuration Fields ---

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key; absent means template fallback only",
    )

    models: tuple[str, ...] = Field(
        default=DEFAULT_MODELS,
        description="Candidate model identifiers, tried in order",
    )

    transport: Literal["sdk", "rest"] = Field(
        default="sdk",
        description="Use the google-genai SDK or the raw REST endpoint",
    )

    request_timeout_s: float = Field(
        default=30.0,
        description="Timeout for a single generation call",
        gt=0,
    )

    temperature: float = Field(default=0.4, ge=0.0, le=2.0)

    cache_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one summary document per category",
    )

    api_base_url: str = Field(default=DEFAULT_API_BASE_URL, min_length=1)

    prompt_styles: dict[str, PromptStyleSettings] = Field(
        default_factory=default_prompt_styles
    )

    # --- Validation Rules ---

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v: Any) -> Any:
        """Treat an empty key as no key at all."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("models", mode="before")
    @classmethod
    def parse_models(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a sequence."""
        if isinstance(v, str):
            v = [part for part in (p.strip() for p in v.split(",")) if part]
        if isinstance(v, list | tuple):
            cleaned = tuple(str(m).strip() for m in v if str(m).strip())
            if not cleaned:
                raise ValueError("models must name at least one model identifier")
            return cleaned
        return v

    @field_validator("prompt_styles", mode="before")
    @classmethod
    def merge_prompt_styles(cls, v: Any) -> Any:
        """Overlay configured styles onto the defaults, per category and field."""
        if v is None:
            return default_prompt_styles()
        if not isinstance(v, dict):
            return v
        merged: dict[str, Any] = {
            name: style.model_dump() for name, style in default_prompt_styles().items()
        }
        for name, style in v.items():
            if isinstance(style, PromptStyleSettings):
                style = style.model_dump()
            if isinstance(style, dict):
                merged[name] = {**merged.get(name, {}), **style}
            else:
                merged[name] = style
        return merged

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for origin tracking."""
        return {
            "api_key": self.api_key,
            "models": self.models,
            "transport": self.transport,
            "request_timeout_s": self.request_timeout_s,
            "temperature": self.temperature,
            "cache_dir": self.cache_dir,
            "api_base_url": self.api_base_url,
            "prompt_styles": self.prompt_styles,
        }
