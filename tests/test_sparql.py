"""Tests for pharmalink.sparql: the object-constrained triple query."""

from __future__ import annotations

import pytest

from fakes import FakeUpstream, bindings, triple
from pharmalink.errors import UpstreamError
from pharmalink.sparql import build_object_query, query_by_object

CHEBI = "http://purl.obolibrary.org/obo/CHEBI_15365"


def test_build_object_query():
    assert build_object_query(CHEBI) == (
        "SELECT ?s ?p ?o WHERE {?s ?p ?o . FILTER(?o=<http://purl.obolibrary.org/obo/CHEBI_15365>)}"
    )


@pytest.mark.asyncio
async def test_returns_bindings(upstream: FakeUpstream, ctx):
    upstream.sparql[CHEBI] = bindings(triple("http://ex/a", "http://ex/treats", CHEBI))
    result = await query_by_object(ctx.http, ctx.sparql, CHEBI)
    assert [t.key for t in result] == [("http://ex/a", "http://ex/treats", CHEBI)]
    (req,) = upstream.calls
    assert "application/sparql-results+json" in req.headers["Accept"]


@pytest.mark.asyncio
async def test_empty_result_set(upstream: FakeUpstream, ctx):
    assert await query_by_object(ctx.http, ctx.sparql, CHEBI) == []


@pytest.mark.asyncio
async def test_unexpected_structure(upstream: FakeUpstream, ctx):
    upstream.sparql[CHEBI] = {"boolean": True}
    with pytest.raises(UpstreamError) as exc:
        await query_by_object(ctx.http, ctx.sparql, CHEBI)
    assert "unexpected structure" in exc.value.detail
    assert exc.value.source == "triple store"
