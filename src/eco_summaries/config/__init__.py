"""Configuration management for the summary pipeline.

Resolve-once, freeze-then-flow:

- ResolvedConfig: post-resolution configuration with origin metadata
- FrozenConfig: immutable configuration handed to the executor
- SourceMap: where each field's value came from
"""

from .api import check_environment, config_scope, list_available_profiles, resolve_config
from .env_loader import API_KEY_ENV_VARS, EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver
from .schema import DEFAULT_MODELS, PromptStyleSettings, SummarySettings
from .types import ConfigOrigin, FrozenConfig, PromptStyle, ResolvedConfig, SourceMap

__all__ = [  # noqa: RUF022
    # Resolution
    "resolve_config",
    "config_scope",
    "list_available_profiles",
    "check_environment",
    "ConfigResolver",
    # Types
    "ResolvedConfig",
    "FrozenConfig",
    "PromptStyle",
    "SourceMap",
    "ConfigOrigin",
    # Loading
    "EnvironmentConfigLoader",
    "FileConfigLoader",
    "ConfigFileError",
    "API_KEY_ENV_VARS",
    # Schema
    "SummarySettings",
    "PromptStyleSettings",
    "DEFAULT_MODELS",
]
