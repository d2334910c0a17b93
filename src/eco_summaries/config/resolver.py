"""Configuration resolution with precedence handling.

Merges configuration in the documented precedence order:
Programmatic > Environment > Project file > Defaults
"""

from collections.abc import Mapping
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from eco_summaries.core.exceptions import ConfigurationError

from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .schema import SummarySettings
from .types import FIELD_ORDER, ConfigOrigin, ResolvedConfig

logger = logging.getLogger(__name__)


class ConfigResolver:
    """Resolves configuration from every source with proper precedence."""

    def __init__(
        self,
        file_loader: FileConfigLoader | None = None,
        env_loader: EnvironmentConfigLoader | None = None,
    ) -> None:
        """Initialize the resolver, optionally with custom loaders."""
        self.file_loader = file_loader or FileConfigLoader()
        self.env_loader = env_loader or EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: Mapping[str, Any] | None = None,
        *,
        profile: str | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources.

        Raises:
            ConfigurationError: If the merged values fail validation or the
                project file is malformed.
        """
        origins: dict[str, ConfigOrigin] = dict.fromkeys(FIELD_ORDER, "default")
        merged: dict[str, Any] = {}

        if profile is None:
            profile = os.getenv("ECO_SUMMARIES_PROFILE")

        layers: tuple[tuple[ConfigOrigin, Mapping[str, Any]], ...] = (
            ("file", self._load_file(project_root, profile)),
            ("env", self.env_loader.load_env_config()),
            ("programmatic", programmatic or {}),
        )
        for origin, values in layers:
            for name, value in values.items():
                if name not in origins:
                    logger.debug("Ignoring unknown config field %r from %s", name, origin)
                    continue
                if name == "prompt_styles" and isinstance(value, Mapping):
                    merged[name] = {**merged.get(name, {}), **value}
                else:
                    merged[name] = value
                origins[name] = origin

        try:
            settings = SummarySettings(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return ResolvedConfig.from_settings(settings, origins)

    def _load_file(self, project_root: Path | None, profile: str | None) -> dict[str, Any]:
        try:
            return self.file_loader.load_project_config(
                project_root=project_root, profile=profile
            )
        except ConfigFileError as e:
            raise ConfigurationError(str(e)) from e
