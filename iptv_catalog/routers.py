from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
import logging

from iptv_catalog import __version__
from iptv_catalog.schemas import CatalogRequest, CatalogResponse, catalog_to_response
from iptv_catalog.services import CatalogMergePipeline, render_playlist
from iptv_catalog.services.catalog_types import Catalog, SourceText


logger = logging.getLogger(__name__)

main_router = APIRouter()


async def _build_catalog(request: CatalogRequest) -> Catalog:
    sources = [SourceText(content=source.content, name=source.name) for source in request.sources]
    pipeline = CatalogMergePipeline(sources)
    return await pipeline.run()


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "IPTV Catalog",
        "version": __version__,
        "endpoints": {
            "catalog": "/catalog - Build a catalog from playlist sources (POST)",
            "playlist": "/catalog/playlist - Build a catalog and render it as M3U (POST)",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    return {"status": "ok"}


@main_router.post("/catalog", response_model=CatalogResponse)
async def build_catalog(request: CatalogRequest) -> CatalogResponse:
    """
    Parse and merge playlist sources into a typed catalog

    Sources that fail to parse are reported in the response instead of failing the request.
    An empty result is returned with status 'empty'.
    """
    logger.info("Catalog build requested for %s source(s)", len(request.sources))
    catalog = await _build_catalog(request)
    if catalog.is_empty:
        logger.warning("Catalog build produced no items")
    return catalog_to_response(catalog)


@main_router.post("/catalog/playlist", response_class=PlainTextResponse)
async def build_playlist(request: CatalogRequest) -> PlainTextResponse:
    """Parse and merge playlist sources, then render the catalog as extended M3U"""
    catalog = await _build_catalog(request)
    return PlainTextResponse(render_playlist(catalog), media_type="audio/x-mpegurl")
