# pharmalink/clients/sources.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..config import Settings

PHACTS_SOURCE = "OpenPHACTS"
SPARQL_SOURCE = "triple store"

# Open PHACTS API commands
MAP_URI = "mapUri"
COMPOUND_PHARMACOLOGY = "compound/pharmacology/pages"
TARGET_PHARMACOLOGY = "target/pharmacology/pages"

SPARQL_RESULTS_JSON = "application/sparql-results+json"


def _join_url(base: str, path: str) -> str:
    if not base:
        return path
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if base.endswith("/") and path.startswith("/"):
        return f"{base}{path[1:]}"
    if not base.endswith("/") and not path.startswith("/"):
        return f"{base}/{path}"
    return f"{base}{path}"


@dataclass(frozen=True)
class PhactsSource:
    host: str
    base: str
    app_id: str = ""
    app_key: str = ""
    name: str = PHACTS_SOURCE

    def url(self, cmd: str) -> str:
        return _join_url(_join_url(self.host, self.base), cmd)

    def params(self, key: str, iri: str) -> Dict[str, Any]:
        # httpx keeps insertion order, so the query string reads like the legacy one
        return {
            "app_id": self.app_id,
            "app_key": self.app_key,
            key: iri,
            "_format": "json",
            "_pageSize": "all",
        }


@dataclass(frozen=True)
class SparqlSource:
    endpoint: str
    name: str = SPARQL_SOURCE
    default_headers: Dict[str, str] = field(
        default_factory=lambda: {"Accept": f"{SPARQL_RESULTS_JSON}, application/json"}
    )


def sources_from_settings(settings: Settings) -> Tuple[PhactsSource, SparqlSource]:
    return (
        PhactsSource(
            host=settings.phacts_host,
            base=settings.phacts_base,
            app_id=settings.app_id,
            app_key=settings.app_key,
        ),
        SparqlSource(endpoint=settings.sparql_endpoint),
    )
