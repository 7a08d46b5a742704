# pharmalink/pipelines.py
"""
Drug and protein pipelines.

    protein: IRI -> ConceptWiki -> target pharmacology -> molecules -> ChEBI -> SPARQL
    drug:    id (CHEBI rewritten) -> compound pharmacology -> targets -> UniProt -> SPARQL

Each pipeline gets its own RequestContext; nothing here outlives a request.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

from .clients.sources import (
    COMPOUND_PHARMACOLOGY,
    TARGET_PHARMACOLOGY,
    PhactsSource,
    SparqlSource,
    sources_from_settings,
)
from .config import Settings
from .ids import CONCEPTWIKI_NS, OBO_NS, UNIPROT_NS, map_identifier, normalize_drug_id
from .join import OnComplete, run_fan_out
from .models import PharmacologyResponse, Triple, assay_target_ids, molecule_ids, parse_envelope
from .net import aget_json
from .sparql import query_by_object

log = logging.getLogger("pharmalink.pipelines")


@dataclass(frozen=True)
class RequestContext:
    http: httpx.AsyncClient
    settings: Settings
    phacts: PhactsSource
    sparql: SparqlSource

    @classmethod
    def build(cls, http: httpx.AsyncClient, settings: Settings) -> "RequestContext":
        phacts, sparql = sources_from_settings(settings)
        return cls(http=http, settings=settings, phacts=phacts, sparql=sparql)


async def _pharmacology(ctx: RequestContext, cmd: str, iri: str) -> List[Any]:
    data = await aget_json(
        ctx.http,
        ctx.phacts.url(cmd),
        params=ctx.phacts.params("uri", iri),
        source=ctx.phacts.name,
    )
    return parse_envelope(
        PharmacologyResponse,
        data,
        source=ctx.phacts.name,
        message="OpenPHACTS result did not have the expected format",
    ).items


def _map_then_query(ctx: RequestContext, target_prefix: str):
    async def branch(iri: str) -> Optional[List[Triple]]:
        mapped = await map_identifier(ctx.http, ctx.phacts, iri, target_prefix)
        if mapped is None:
            return None
        return await query_by_object(ctx.http, ctx.sparql, mapped)
    return branch


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


async def resolve_protein(iri: str, ctx: RequestContext, on_complete: Optional[OnComplete] = None) -> List[Triple]:
    mapped = await map_identifier(ctx.http, ctx.phacts, iri, CONCEPTWIKI_NS)
    if mapped is None:
        log.info("No ConceptWiki mapping for %s", iri)
        return []

    items = await _pharmacology(ctx, TARGET_PHARMACOLOGY, mapped)
    if ctx.settings.debug:
        items = items[: ctx.settings.debug_item_limit]

    molecules = molecule_ids(items)
    log.info("Got %d molecules for %s.  Converting to ChEBI...", len(molecules), mapped)

    return await run_fan_out(
        molecules,
        _map_then_query(ctx, OBO_NS),
        on_complete,
        timeout=ctx.settings.fanout_timeout_s,
        max_concurrency=ctx.settings.max_concurrency,
    )


async def resolve_drug(drug_id: str, ctx: RequestContext, on_complete: Optional[OnComplete] = None) -> List[Triple]:
    iri = normalize_drug_id(drug_id)
    items = await _pharmacology(ctx, COMPOUND_PHARMACOLOGY, iri)

    targets = _dedupe(assay_target_ids(items))
    if ctx.settings.debug:
        targets = targets[: ctx.settings.debug_target_limit]
    log.info("Got %d non-uniprot IDs.  Converting to uniprot...", len(targets))

    return await run_fan_out(
        targets,
        _map_then_query(ctx, UNIPROT_NS),
        on_complete,
        timeout=ctx.settings.fanout_timeout_s,
        max_concurrency=ctx.settings.max_concurrency,
    )
