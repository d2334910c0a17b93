"""Environment variable configuration loading.

Reads ``ECO_SUMMARIES_*`` variables. The API key additionally falls back to
``GEMINI_API_KEY`` and ``GOOGLE_GEMINI_API_KEY`` so existing deployments keep
working without renaming their secrets.
"""

import os
from collections.abc import Mapping
from typing import Any

ENV_FIELDS: Mapping[str, str] = {
    "ECO_SUMMARIES_MODELS": "models",
    "ECO_SUMMARIES_TRANSPORT": "transport",
    "ECO_SUMMARIES_REQUEST_TIMEOUT_S": "request_timeout_s",
    "ECO_SUMMARIES_TEMPERATURE": "temperature",
    "ECO_SUMMARIES_CACHE_DIR": "cache_dir",
    "ECO_SUMMARIES_API_BASE_URL": "api_base_url",
}

# First non-empty variable wins.
API_KEY_ENV_VARS = ("ECO_SUMMARIES_API_KEY", "GEMINI_API_KEY", "GOOGLE_GEMINI_API_KEY")


class EnvironmentConfigLoader:
    """Loads configuration values from environment variables.

    Values are returned as raw strings; type coercion is left to the schema
    so that errors point at the final merged configuration.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Use ``environ`` instead of ``os.environ`` (mainly for tests)."""
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def load_env_config(self) -> dict[str, Any]:
        """Return only the fields actually set in the environment."""
        env = self.environ
        values: dict[str, Any] = {}
        for env_var, field_name in ENV_FIELDS.items():
            raw = env.get(env_var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()

        api_key = self.resolve_api_key()
        if api_key:
            values["api_key"] = api_key
        return values

    def resolve_api_key(self) -> str | None:
        env = self.environ
        for env_var in API_KEY_ENV_VARS:
            value = env.get(env_var)
            if value and value.strip():
                return value.strip()
        return None

    def get_env_summary(self) -> dict[str, str]:
        """Relevant variables that are set, with secrets redacted."""
        env = self.environ
        summary: dict[str, str] = {}
        for env_var in (*API_KEY_ENV_VARS, *ENV_FIELDS):
            if env_var in env:
                summary[env_var] = "<redacted>" if "API_KEY" in env_var else env[env_var]
        return summary
