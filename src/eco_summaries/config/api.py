"""Public API for the configuration system.

Entry points for configuration resolution, scoped overrides and the small
inspection helpers used by the command line.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
import contextvars
from pathlib import Path
from typing import Any

from .env_loader import EnvironmentConfigLoader
from .resolver import ConfigResolver
from .types import ResolvedConfig

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("eco_summaries_resolved_config")
)


def resolve_config(
    programmatic: Mapping[str, Any] | None = None,
    *,
    profile: str | None = None,
    project_root: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Programmatic > Environment > Project file > Defaults. Inside a
    :func:`config_scope` the scoped configuration is returned instead, with
    ``programmatic`` applied on top of it.

    Args:
        programmatic: Explicit overrides (highest precedence). Unknown fields
            are ignored.
        profile: Profile under ``[tool.eco_summaries.profiles]``. Defaults to
            ``ECO_SUMMARIES_PROFILE`` when set.
        project_root: Directory to start the ``pyproject.toml`` search from.
        environ: Environment mapping to read instead of ``os.environ``.

    Returns:
        ResolvedConfig with merged values and per-field origins.

    Raises:
        ConfigurationError: If validation fails or the project file is malformed.

    Example:
        config = resolve_config({"models": ["gemini-2.0-flash"]})
        executor = create_executor(config.to_frozen())
    """
    try:
        ambient = _ambient_resolved_config.get()
    except LookupError:
        resolver = ConfigResolver(env_loader=EnvironmentConfigLoader(environ))
        return resolver.resolve(
            programmatic, profile=profile, project_root=project_root
        )
    if programmatic:
        return ambient.with_overrides(**programmatic)
    return ambient


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Make ``resolve_config()`` return ``config`` within the block.

    Only resolution at entry time is affected; an executor that already holds
    a FrozenConfig does not see the change.
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)


def list_available_profiles(project_root: Path | None = None) -> list[str]:
    """Profile names declared in the nearest ``pyproject.toml``."""
    return ConfigResolver().file_loader.list_profiles(project_root)


def check_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Currently set configuration variables, with secrets redacted."""
    return EnvironmentConfigLoader(environ).get_env_summary()
