"""
Shared pytest fixtures for pharmalink tests.

Pipelines and routes run against FakeUpstream (see fakes.py), which serves
canned Open PHACTS and SPARQL payloads without touching the network.
"""

from __future__ import annotations

import pytest

from fakes import PHACTS_HOST, SPARQL_ENDPOINT, FakeUpstream
from pharmalink.config import Settings
from pharmalink.pipelines import RequestContext


@pytest.fixture
def settings() -> Settings:
    return Settings(
        phacts_host=PHACTS_HOST,
        phacts_base="/2.1/",
        app_id="test-id",
        app_key="test-key",
        sparql_endpoint=SPARQL_ENDPOINT,
        fanout_timeout_s=5.0,
        max_concurrency=4,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def ctx(upstream: FakeUpstream, settings: Settings) -> RequestContext:
    return RequestContext.build(upstream.client(), settings)
