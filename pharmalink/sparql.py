# pharmalink/sparql.py
from __future__ import annotations

from typing import List

import httpx

from .clients.sources import SparqlSource
from .models import SparqlResponse, Triple, parse_envelope
from .net import aget_json


def build_object_query(iri: str) -> str:
    return "SELECT ?s ?p ?o WHERE {?s ?p ?o . FILTER(?o=<" + iri + ">)}"


async def query_by_object(http: httpx.AsyncClient, source: SparqlSource, iri: str) -> List[Triple]:
    """Every (s, p, o) in the store whose object is `iri`."""
    data = await aget_json(
        http,
        source.endpoint,
        params={"query": build_object_query(iri)},
        headers=source.default_headers,
        source=source.name,
    )
    parsed = parse_envelope(
        SparqlResponse,
        data,
        source=source.name,
        message="One of the triple-store response-sets had unexpected structure",
    )
    return parsed.results.bindings
