"""Reporter configuration loader for lambda-report.

Resolution order (later sources override earlier ones):
  1. Built-in defaults (``_DEFAULTS``)
  2. YAML file: the ``explicit_path`` argument, else the file named by the
     LAMBDA_REPORT_CONFIG environment variable
  3. LAMBDA_REPORT_* environment variables
  4. ``overrides`` passed by the caller

Environment variables:

  Variable                        Config key
  ──────────────────────────────  ───────────────
  LAMBDA_REPORT_TOKEN             client_id
  LAMBDA_REPORT_CLIENTID          client_id
  LAMBDA_REPORT_INSTALL_METHOD    install_method
  LAMBDA_REPORT_HOST              host
  LAMBDA_REPORT_PATH              path
  LAMBDA_REPORT_NETWORK_TIMEOUT   network_timeout (milliseconds)
  LAMBDA_REPORT_DEBUG             debug
  LAMBDA_REPORT_ENABLED           enabled
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator,
)


_CONFIG_ENV = "LAMBDA_REPORT_CONFIG"

DEFAULT_HOST = "metrics-api.lambda-report.dev"
DEFAULT_PATH = "/v0/event"
DEFAULT_NETWORK_TIMEOUT_MS = 5000

_DEFAULTS: dict[str, Any] = {
    "client_id":       None,
    "install_method":  "manual",
    "host":            DEFAULT_HOST,
    "path":            DEFAULT_PATH,
    "network_timeout": DEFAULT_NETWORK_TIMEOUT_MS,
    "debug":           False,
    "enabled":         True,
}

# Token variable comes first so an explicit CLIENTID wins when both are set.
_ENV_KEYS: list[tuple[str, str]] = [
    ("LAMBDA_REPORT_TOKEN",           "client_id"),
    ("LAMBDA_REPORT_CLIENTID",        "client_id"),
    ("LAMBDA_REPORT_INSTALL_METHOD",  "install_method"),
    ("LAMBDA_REPORT_HOST",            "host"),
    ("LAMBDA_REPORT_PATH",            "path"),
    ("LAMBDA_REPORT_NETWORK_TIMEOUT", "network_timeout"),
    ("LAMBDA_REPORT_DEBUG",           "debug"),
    ("LAMBDA_REPORT_ENABLED",         "enabled"),
]


class ReporterConfig(BaseModel):
    """Read-only configuration consumed by the report lifecycle."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    # camelCase spellings are accepted for mappings written against the wire format.
    client_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("client_id", "clientId"),
    )
    install_method: Optional[str] = Field(
        default="manual", validation_alias=AliasChoices("install_method", "installMethod"),
    )
    host: str = DEFAULT_HOST
    path: str = DEFAULT_PATH
    network_timeout: int = Field(
        default=DEFAULT_NETWORK_TIMEOUT_MS,
        validation_alias=AliasChoices("network_timeout", "networkTimeout"),
    )
    debug: bool = False
    enabled: bool = True

    @field_validator("network_timeout")
    @classmethod
    def _positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("network_timeout must be a positive number of milliseconds")
        return value

    @field_validator("path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @property
    def timeout_seconds(self) -> float:
        return self.network_timeout / 1000.0


# ── YAML loading ──────────────────────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return its top-level mapping."""
    import yaml
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}: {path}")
    return data


# ── environment ───────────────────────────────────────────────────────────────

def _from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect config keys from LAMBDA_REPORT_* variables.

    Values are left as strings; pydantic coerces "true"/"1"/"5000" etc.
    Empty variables are ignored.
    """
    env = os.environ if environ is None else environ
    found: dict[str, Any] = {}
    for var, key in _ENV_KEYS:
        value = env.get(var)
        if value:
            found[key] = value
    return found


# ── public API ────────────────────────────────────────────────────────────────

def load_config(
    explicit_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReporterConfig:
    """Load and return the resolved reporter configuration.

    Args:
        explicit_path: YAML file to read. When provided it must exist.
            If ``None`` the file named by LAMBDA_REPORT_CONFIG is used when
            that variable is set and the file exists.
        overrides: Keys applied last, e.g. from CLI flags. ``None`` values
            are skipped so unset flags do not clobber the file or env.

    Raises:
        FileNotFoundError: If ``explicit_path`` is given but does not exist.
        ValueError: If the YAML file is not a mapping.
        pydantic.ValidationError: If a value has the wrong type.
    """
    raw: dict[str, Any] = {}

    if explicit_path is not None:
        p = Path(explicit_path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")
        raw = _load_yaml(p)
    else:
        env_path_str = os.environ.get(_CONFIG_ENV)
        if env_path_str:
            env_p = Path(env_path_str)
            if env_p.exists():
                raw = _load_yaml(env_p)

    merged = dict(_DEFAULTS)
    merged.update(raw)
    merged.update(_from_env())
    for key, val in (overrides or {}).items():
        if val is not None:
            merged[key] = val

    return ReporterConfig.model_validate(merged)


def coerce_config(config: ReporterConfig | dict | None) -> ReporterConfig:
    """Accept a ready config, a plain mapping, or nothing (defaults).

    Never raises. Keys holding invalid values are dropped and their defaults
    used instead; a warning naming them goes to stderr.
    """
    if isinstance(config, ReporterConfig):
        return config
    if config is None:
        return ReporterConfig()

    raw = dict(config)
    try:
        return ReporterConfig.model_validate(raw)
    except ValidationError as exc:
        bad = {err["loc"][0] for err in exc.errors() if err.get("loc")}
        print(
            f"  [config] Warning: ignoring invalid config values for "
            f"{', '.join(sorted(map(str, bad)))}",
            file=sys.stderr,
            flush=True,
        )

    try:
        return ReporterConfig.model_validate(
            {k: v for k, v in raw.items() if k not in bad}
        )
    except ValidationError:
        return ReporterConfig()
