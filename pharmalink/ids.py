# pharmalink/ids.py
from __future__ import annotations

import logging
from typing import Optional

import httpx

from .clients.sources import MAP_URI, PhactsSource
from .errors import BadRequest
from .models import MappingResponse, parse_envelope
from .net import aget_json

log = logging.getLogger("pharmalink.ids")

# ----------------------------- Namespaces -------------------------------------

CONCEPTWIKI_NS = "http://www.conceptwiki.org/"
OBO_NS = "http://purl.obolibrary.org/obo/"
UNIPROT_NS = "http://www.uniprot.org/"

CHEBI_PREFIX = "CHEBI"

# ----------------------------- Validation -------------------------------------

def require_identifier(value: Optional[str], field_name: str = "identifier") -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise BadRequest(f"400 Bad Request: missing {field_name}")
    return value.strip()


def normalize_drug_id(value: str) -> str:
    """CHEBI_1234 style ids become full OBO IRIs; everything else is left alone."""
    if value.startswith(CHEBI_PREFIX):
        return OBO_NS + value
    return value

# ----------------------------- Mapping ----------------------------------------

async def map_identifier(
    http: httpx.AsyncClient,
    phacts: PhactsSource,
    iri: str,
    target_prefix: str,
) -> Optional[str]:
    """
    Resolve `iri` to its first equivalent identifier under `target_prefix`.

    Returns None when the mapping service knows no equivalent in that
    namespace. Raises UpstreamError when the service fails, reports an error
    or answers without result.primaryTopic.exactMatch.
    """
    data = await aget_json(
        http,
        phacts.url(MAP_URI),
        params=phacts.params("Uri", iri),
        source=phacts.name,
    )
    mapping = parse_envelope(
        MappingResponse,
        data,
        source=phacts.name,
        message="OpenPHACTS MapURI sent a result with unexpected format",
    )
    for candidate in mapping.candidates():
        if candidate.startswith(target_prefix):
            return candidate
    log.debug("No %s equivalent for %s", target_prefix, iri)
    return None
