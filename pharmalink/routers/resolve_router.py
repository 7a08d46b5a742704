# pharmalink/routers/resolve_router.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request

from ..config import Settings, get_settings
from ..ids import require_identifier
from ..pipelines import RequestContext, resolve_drug, resolve_protein

log = logging.getLogger("pharmalink.routers.resolve")

router = APIRouter(tags=["Resolve"])


def get_http(request: Request) -> httpx.AsyncClient:
    """Shared AsyncClient from `app.state.http`."""
    http = getattr(request.app.state, "http", None)
    if http is None:
        raise HTTPException(status_code=503, detail="HTTP client not initialised")
    return http


def get_context(
    http: httpx.AsyncClient = Depends(get_http),
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    return RequestContext.build(http, settings)


@router.get("/drug/{drug_id:path}")
async def resolve_drug_endpoint(drug_id: str, ctx: RequestContext = Depends(get_context)) -> List[Dict[str, Any]]:
    drug_id = require_identifier(drug_id, "drug identifier")
    log.info("Got request: /drug/%s", drug_id)
    triples = await resolve_drug(drug_id, ctx)
    return [t.to_binding() for t in triples]


@router.get("/protein/{iri:path}")
async def resolve_protein_endpoint(iri: str, ctx: RequestContext = Depends(get_context)) -> List[Dict[str, Any]]:
    iri = require_identifier(iri, "protein IRI")
    log.info("Got request: /protein/%s", iri)
    triples = await resolve_protein(iri, ctx)
    return [t.to_binding() for t in triples]
