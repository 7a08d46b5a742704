
from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import APP_VERSION, get_settings
from .errors import UpstreamError
from .net import build_client
from .routers import resolve_router

# ------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger("pharmalink.main")

# ------------------------------------------------------------------------------
# App metadata / env
# ------------------------------------------------------------------------------
APP_TITLE = os.getenv("APP_TITLE", "Pharmalink Gateway")
ROOT_PATH = os.getenv("ROOT_PATH", "")
DOCS_URL = os.getenv("DOCS_URL", "/docs")
OPENAPI_URL = os.getenv("OPENAPI_URL", "/openapi.json")

# ------------------------------------------------------------------------------
# Lifespan: one shared outbound client per process
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.http = build_client(settings)
    log.info("Outbound client ready (OpenPHACTS %s, SPARQL %s)", settings.phacts_host, settings.sparql_endpoint)
    try:
        yield
    finally:
        await app.state.http.aclose()
        app.state.http = None

# ------------------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------------------
app = FastAPI(
    title=APP_TITLE,
    version=APP_VERSION,
    docs_url=DOCS_URL,
    openapi_url=OPENAPI_URL,
    root_path=ROOT_PATH,
    lifespan=lifespan,
)

# CORS (default permissive; tighten in prod with CORS_ALLOW_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(resolve_router.router)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    log.warning("Upstream failure for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content=exc.to_payload())

# ------------------------------------------------------------------------------
# Health
# ------------------------------------------------------------------------------
@app.get("/healthz")
async def healthz():
    return {"ok": True, "version": APP_VERSION}

@app.get("/livez")
async def livez():
    return {"ok": True, "http_client": getattr(app.state, "http", None) is not None}

@app.get("/readyz")
async def readyz():
    s = get_settings()
    return {
        "ok": True,
        "env": {
            "PHACTS_HOST": s.phacts_host,
            "PHACTS_BASE": s.phacts_base,
            "PHACTS_APP_ID_SET": bool(s.app_id),
            "SPARQL_ENDPOINT": s.sparql_endpoint,
            "HTTP_TIMEOUT_S": s.http_timeout_s,
            "FANOUT_TIMEOUT_S": s.fanout_timeout_s,
            "MAX_CONCURRENCY": s.max_concurrency,
            "DEBUG": s.debug,
        },
    }

# ------------------------------------------------------------------------------
# Root
# ------------------------------------------------------------------------------
@app.get("/", include_in_schema=False)
async def root():
    return {"ok": True, "service": APP_TITLE, "docs": DOCS_URL, "routes": ["/drug/{id}", "/protein/{iri}"]}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pharmalink.main:app", host="0.0.0.0", port=get_settings().port)
