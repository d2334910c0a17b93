"""File-based configuration loading with profile support.

Reads the ``[tool.eco_summaries]`` table of the nearest ``pyproject.toml``;
named profiles live under ``[tool.eco_summaries.profiles.<name>]``.
"""

from pathlib import Path
import tomllib
from typing import Any


class ConfigFileError(Exception):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause."""
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration from the project's ``pyproject.toml``."""

    TOOL_SECTION = "eco_summaries"

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Load the tool section, or one of its profiles.

        Returns an empty dict when no ``pyproject.toml`` or no tool section
        exists.

        Raises:
            ConfigFileError: If the file cannot be parsed or the profile is unknown.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        section = data.get("tool", {}).get(self.TOOL_SECTION, {})
        if not section:
            return {}
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, f"[tool.{self.TOOL_SECTION}] must be a table"
            )

        config = dict(section)
        profiles = config.pop("profiles", {}) or {}
        if profile:
            if profile not in profiles:
                raise ConfigFileError(
                    pyproject_path,
                    f"Profile '{profile}' not found. Available profiles: {sorted(profiles)}",
                )
            config.update(profiles[profile])

        # Relative cache directories are anchored at the project root.
        cache_dir = config.get("cache_dir")
        if isinstance(cache_dir, str) and not Path(cache_dir).is_absolute():
            config["cache_dir"] = pyproject_path.parent / cache_dir
        return config

    def list_profiles(self, project_root: Path | None = None) -> list[str]:
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return []
        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            return []
        section = data.get("tool", {}).get(self.TOOL_SECTION, {})
        return sorted(section.get("profiles", {}) or {})

    def _find_pyproject_toml(self, start: Path | None) -> Path | None:
        current = Path(start) if start is not None else Path.cwd()
        for directory in (current, *current.parents):
            candidate = directory / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None
