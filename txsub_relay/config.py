"""
Relay configuration.

Configuration is a frozen dataclass validated against ``CONFIG_SCHEMA``
(JSON Schema) on construction from a mapping. Environment variables use
the ``TXSUB_`` prefix and the upper-cased field name:

    TXSUB_CORE_URL=http://localhost:11626
    TXSUB_NETWORK_PASSPHRASE="Public Global Stellar Network ; September 2015"
    TXSUB_DISABLE_TX_SUB=true
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, fields
from typing import Any, Mapping

import jsonschema  # type: ignore[import-untyped]

from txsub_relay.errors import ConfigError

ENV_PREFIX = "TXSUB_"

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["core_url", "network_passphrase"],
    "properties": {
        "core_url": {
            "type": "string",
            "pattern": "^https?://",
            "description": "stellar-core HTTP command endpoint",
        },
        "network_passphrase": {
            "type": "string",
            "minLength": 1,
            "description": "Passphrase of the network envelopes are hashed for",
        },
        "disable_tx_sub": {
            "type": "boolean",
            "default": False,
            "description": "Reject all submissions with 405",
        },
        "submit_timeout_s": {
            "type": "number",
            "exclusiveMinimum": 0,
            "default": 30.0,
            "description": "Deadline for a single stellar-core submission",
        },
        "core_poll_interval_s": {
            "type": "number",
            "exclusiveMinimum": 0,
            "default": 5.0,
            "description": "Interval between /info readiness polls",
        },
        "metrics_namespace": {
            "type": "string",
            "pattern": "^[a-zA-Z_][a-zA-Z0-9_]*$",
            "default": "txsub",
        },
        "host": {"type": "string", "default": "127.0.0.1"},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535, "default": 8000},
        "log_level": {
            "type": "string",
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            "default": "INFO",
        },
    },
}


@dataclass(frozen=True)
class RelayConfig:
    core_url: str
    network_passphrase: str
    disable_tx_sub: bool = False
    submit_timeout_s: float = 30.0
    core_poll_interval_s: float = 5.0
    metrics_namespace: str = "txsub"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RelayConfig:
        """Validate ``data`` against CONFIG_SCHEMA and build a config.

        Raises:
            ConfigError: If validation fails.
        """
        instance = dict(data)
        try:
            jsonschema.validate(instance=instance, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as exc:
            field = ".".join(str(p) for p in exc.absolute_path) or "<root>"
            raise ConfigError(f"invalid config at {field}: {exc.message}") from exc
        return cls(**instance)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build a config from ``TXSUB_*`` environment variables."""
        env = os.environ if environ is None else environ
        properties = CONFIG_SCHEMA["properties"]
        data: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            data[f.name] = _coerce(f.name, raw, properties[f.name]["type"])
        return cls.from_mapping(data)


def _coerce(name: str, raw: str, json_type: str) -> Any:
    if json_type == "boolean":
        lowered = raw.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off", ""):
            return False
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} is not a boolean: {raw!r}")
    try:
        if json_type == "integer":
            return int(raw)
        if json_type == "number":
            return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} is not a {json_type}: {raw!r}") from exc
    if name == "log_level":
        return raw.upper()
    return raw


def configure_logging(level: str = "INFO") -> None:
    """Send relay logs to stderr with a single handler."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        force=True,
    )
