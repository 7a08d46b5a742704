# pharmalink/config.py
"""
Runtime configuration.

Values come from environment variables. A JSON file named by
PHARMALINK_CONFIG may seed them using the legacy config.json keys
(phacts_host, phacts_base, app_id, app_key, sparql, port, debug);
environment variables always win over the file.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

APP_VERSION = os.getenv("APP_VERSION", "2016.05")

# legacy config.json key -> Settings field
_FILE_KEYS: Dict[str, str] = {
    "phacts_host": "phacts_host",
    "phacts_base": "phacts_base",
    "app_id": "app_id",
    "app_key": "app_key",
    "sparql": "sparql_endpoint",
    "port": "port",
    "debug": "debug",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    phacts_host: str = "https://beta.openphacts.org"
    phacts_base: str = "/2.1/"
    app_id: str = ""
    app_key: str = ""
    sparql_endpoint: str = "http://localhost:8890/sparql"
    port: int = 8000
    debug: bool = False
    debug_item_limit: int = 25
    debug_target_limit: int = 5
    http_timeout_s: float = 30.0
    http_connect_timeout_s: float = 5.0
    fanout_timeout_s: Optional[float] = 120.0
    max_concurrency: int = 16
    user_agent: str = f"pharmalink/{APP_VERSION}"


def _read_file(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return {_FILE_KEYS[k]: v for k, v in raw.items() if k in _FILE_KEYS}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _timeout(value: Any) -> Optional[float]:
    t = float(value)
    return t if t > 0 else None


def load_settings(environ: Optional[Dict[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    base = Settings()
    seeded = _read_file(env.get("PHARMALINK_CONFIG"))

    def pick(env_key: str, field_name: str) -> Any:
        if env_key in env and env[env_key] != "":
            return env[env_key]
        return seeded.get(field_name, getattr(base, field_name))

    return Settings(
        phacts_host=str(pick("PHACTS_HOST", "phacts_host")),
        phacts_base=str(pick("PHACTS_BASE", "phacts_base")),
        app_id=str(pick("PHACTS_APP_ID", "app_id")),
        app_key=str(pick("PHACTS_APP_KEY", "app_key")),
        sparql_endpoint=str(pick("SPARQL_ENDPOINT", "sparql_endpoint")),
        port=int(pick("PORT", "port")),
        debug=_as_bool(pick("DEBUG", "debug")),
        debug_item_limit=int(pick("DEBUG_ITEM_LIMIT", "debug_item_limit")),
        debug_target_limit=int(pick("DEBUG_TARGET_LIMIT", "debug_target_limit")),
        http_timeout_s=float(pick("HTTP_TIMEOUT_S", "http_timeout_s")),
        http_connect_timeout_s=float(pick("HTTP_CONNECT_TIMEOUT_S", "http_connect_timeout_s")),
        fanout_timeout_s=_timeout(pick("FANOUT_TIMEOUT_S", "fanout_timeout_s") or 0),
        max_concurrency=max(1, int(pick("MAX_CONCURRENCY", "max_concurrency"))),
        user_agent=str(pick("OUTBOUND_USER_AGENT", "user_agent")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
