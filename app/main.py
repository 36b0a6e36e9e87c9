"""Entry point for the FastAPI-powered catalog service."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Awaitable, TypeVar

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .catalog.enrichment import Enricher
from .config import settings
from .errors import NotFoundError, UpstreamError
from .models import CatalogItem, CatalogPage, SearchRequest
from .services.catalog_service import CatalogService
from .services.kodik import KodikClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

T = TypeVar("T")

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    kodik_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.kodik_api_url),
            timeout=httpx.Timeout(settings.upstream_timeout_seconds, connect=5.0),
        )
    )
    kodik = KodikClient(settings, kodik_http_client)
    enricher = Enricher(kodik, settings)
    fastapi_app.state.catalog_service = CatalogService(settings, kodik, enricher)

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Normalized, de-duplicated anime catalog backed by Kodik",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_catalog_service(app: FastAPI) -> CatalogService:
    service = getattr(app.state, "catalog_service", None)
    if not isinstance(service, CatalogService):
        raise RuntimeError("Catalog service not initialised")
    return service


async def _with_deadline(call: Awaitable[T]) -> T:
    """Run ``call`` under the request deadline and map failures to HTTP errors."""

    try:
        return await asyncio.wait_for(call, timeout=settings.request_timeout_seconds)
    except asyncio.TimeoutError as exc:
        raise HTTPException(status_code=504, detail="Upstream catalog timed out") from exc
    except NotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail={
                "error": str(exc),
                "id": exc.identifier,
                "examples": exc.examples,
            },
        ) from exc
    except UpstreamError as exc:
        logger.warning("Upstream catalog failure: %s", exc)
        raise HTTPException(
            status_code=502,
            detail={"error": str(exc), "retryable": exc.retryable},
        ) from exc


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/v1/search", response_model=CatalogPage)
    async def search(request: SearchRequest) -> CatalogPage:
        service = get_catalog_service(fastapi_app)
        return await _with_deadline(
            service.search(request.query, request.page, request.page_size)
        )

    @fastapi_app.get("/v1/anime/{kodik_id}", response_model=CatalogItem)
    async def get_anime(kodik_id: str, raw: bool = False) -> CatalogItem:
        kodik_id = kodik_id.strip()
        if not kodik_id:
            raise HTTPException(status_code=400, detail="kodik_id required")
        service = get_catalog_service(fastapi_app)
        return await _with_deadline(service.get_item(kodik_id, include_raw=raw))


app = create_app()
