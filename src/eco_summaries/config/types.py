"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: the resolver
produces a :class:`ResolvedConfig` (values plus origin metadata) which is
frozen into a :class:`FrozenConfig` before it reaches the executor.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Literal, NamedTuple

from pydantic import ValidationError

from eco_summaries.core.exceptions import ConfigurationError

from . import schema

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

FIELD_ORDER = (
    "api_key",
    "models",
    "transport",
    "request_timeout_s",
    "temperature",
    "cache_dir",
    "api_base_url",
    "prompt_styles",
)


@dataclass(frozen=True, slots=True)
class PromptStyle:
    """Sentence and word bounds requested of the model for one category."""

    min_sentences: int
    max_sentences: int
    min_words: int | None = None
    max_words: int | None = None


def default_prompt_styles() -> dict[str, PromptStyle]:
    """Frozen counterparts of the schema defaults."""
    return {
        name: PromptStyle(**style.model_dump())
        for name, style in schema.default_prompt_styles().items()
    }


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    api_key: str | None
    models: tuple[str, ...]
    transport: Literal["sdk", "rest"]
    request_timeout_s: float
    temperature: float
    cache_dir: Path
    api_base_url: str
    prompt_styles: Mapping[str, PromptStyle]

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, models={self.models!r}, "
            f"transport={self.transport!r}, request_timeout_s={self.request_timeout_s!r}, "
            f"cache_dir={str(self.cache_dir)!r}, origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        """Repr with redacted API key for safe debugging."""
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by the executor."""
        return FrozenConfig(
            api_key=self.api_key,
            models=self.models,
            transport=self.transport,
            request_timeout_s=self.request_timeout_s,
            temperature=self.temperature,
            cache_dir=self.cache_dir,
            api_base_url=self.api_base_url,
            prompt_styles=MappingProxyType(dict(self.prompt_styles)),
        )

    @classmethod
    def from_settings(
        cls, settings: schema.SummarySettings, origin: SourceMap
    ) -> "ResolvedConfig":
        """Build from validated settings, converting prompt styles to PromptStyle."""
        values = settings.to_dict()
        values["prompt_styles"] = {
            name: PromptStyle(**style.model_dump())
            for name, style in settings.prompt_styles.items()
        }
        return cls(**values, origin=origin)

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a revalidated copy with programmatic overrides applied.

        Unknown fields are ignored and ``prompt_styles`` merge per category,
        as in :class:`~eco_summaries.config.resolver.ConfigResolver`.

        Raises:
            ConfigurationError: If the overridden values fail validation.
        """
        values = self._asdict()
        new_origin = dict(values.pop("origin"))
        values["prompt_styles"] = {
            name: asdict(style) for name, style in self.prompt_styles.items()
        }
        for name, value in overrides.items():
            if name not in FIELD_ORDER:
                continue
            if name == "prompt_styles" and isinstance(value, Mapping):
                value = {**values["prompt_styles"], **value}
            values[name] = value
            new_origin[name] = "programmatic"
        try:
            settings = schema.SummarySettings(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        return ResolvedConfig.from_settings(settings, new_origin)

    def audit(self) -> str:
        """Human-readable report of each field's origin, with the key redacted."""
        lines = []
        for name in FIELD_ORDER:
            origin = self.origin.get(name, "default")
            value = getattr(self, name)
            if name == "api_key":
                display = f"{origin}:None" if value is None else f"{origin}:<redacted>"
            elif name == "prompt_styles":
                display = f"{origin}:{sorted(value)}"
            else:
                display = f"{origin}:{value}"
            lines.append(f"{name}: {display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to the executor and its stages."""

    api_key: str | None = None
    models: tuple[str, ...] = schema.DEFAULT_MODELS
    transport: Literal["sdk", "rest"] = "sdk"
    request_timeout_s: float = 30.0
    temperature: float = 0.4
    cache_dir: Path = Path("data")
    api_base_url: str = schema.DEFAULT_API_BASE_URL
    prompt_styles: Mapping[str, PromptStyle] = field(
        default_factory=lambda: MappingProxyType(default_prompt_styles())
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, models={self.models!r}, "
            f"transport={self.transport!r}, request_timeout_s={self.request_timeout_s!r}, "
            f"cache_dir={str(self.cache_dir)!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()
