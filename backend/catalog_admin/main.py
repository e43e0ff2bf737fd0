"""
Reference catalog service exposing the component REST contract.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_admin.config import settings
from catalog_admin.database import create_tables, get_db
from catalog_admin.exceptions import ComponentNotFoundError, InvalidComponentError, ScrapeError
from catalog_admin.logging_config import get_logger, setup_logging
from catalog_admin.schemas import (
    ComponentPage,
    ComponentPayload,
    ErrorResponse,
    FetchSpecsRequest,
    PageMeta,
    ScrapedSpecs,
)
from catalog_admin.scraper import SpecScraper
from catalog_admin.service import ComponentService, component_to_dict, known_type

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown events."""
    setup_logging(settings.LOG_LEVEL)
    await create_tables()
    app.state.spec_scraper = SpecScraper()
    logger.info("[Startup] Catalog service ready")

    yield

    logger.info("[Shutdown] Closing scraper client")
    await app.state.spec_scraper.close()


app = FastAPI(
    title="Component Catalog API",
    description="Hardware component catalog with typed dynamic fields",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global service instance
component_service = ComponentService()

ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Component not found"},
}


@app.get("/")
async def root() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "Component Catalog API",
        "version": "1.0.0",
    }


@app.get("/api/health")
async def health_check() -> dict:
    """Detailed health check."""
    return {"status": "healthy", "database": "connected"}


@app.get("/api/components", response_model=ComponentPage, responses={400: ERROR_RESPONSES[400]})
async def list_components(
    type: Optional[str] = Query(None, description="Component type filter ('All' for none)"),
    search: Optional[str] = Query(None, description="Search manufacturer, model and vendor"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sortKey: str = Query("updatedAt"),
    sortDir: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
) -> ComponentPage:
    """List components with filtering, search, sorting and pagination."""
    component_type = known_type(type)
    if type and type.upper() != "ALL" and component_type is None:
        raise HTTPException(status_code=400, detail=f"Unknown component type: {type}")

    components, total_items, total_pages, current_page = await component_service.list_components(
        db,
        component_type=component_type.value if component_type else None,
        search=search,
        page=page,
        limit=limit,
        sort_key=sortKey,
        sort_dir=sortDir,
    )
    return ComponentPage(
        data=[component_to_dict(c) for c in components],
        meta=PageMeta(totalItems=total_items, totalPages=total_pages, currentPage=current_page),
    )


@app.post("/api/components/fetch-specs", response_model=ScrapedSpecs, responses={502: {"model": ErrorResponse}})
async def fetch_specs(body: FetchSpecsRequest, request: Request) -> ScrapedSpecs:
    """Scrape a product page for attribute hints."""
    try:
        return await request.app.state.spec_scraper.scrape(body.url)
    except ScrapeError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch specs: {e}")


@app.get("/api/components/{component_id}", responses={404: ERROR_RESPONSES[404]})
async def get_component(component_id: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Full component record including its type-specific sub-record."""
    try:
        component = await component_service.get_component(db, component_id)
    except ComponentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return component_to_dict(component, include_type_data=True)


@app.post("/api/components", status_code=201, responses=ERROR_RESPONSES)
async def create_component(payload: ComponentPayload, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Create a component from a recomposed payload."""
    try:
        component = await component_service.create_component(db, payload)
    except InvalidComponentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return component_to_dict(component, include_type_data=True)


@app.patch("/api/components/{component_id}", responses=ERROR_RESPONSES)
async def update_component(
    component_id: str, payload: ComponentPayload, db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """Update a component. Fields absent from the body are left unchanged."""
    try:
        component = await component_service.update_component(db, component_id, payload)
    except ComponentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidComponentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return component_to_dict(component, include_type_data=True)


@app.delete("/api/components/{component_id}", responses={404: ERROR_RESPONSES[404]})
async def delete_component(component_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    """Delete a component."""
    try:
        await component_service.delete_component(db, component_id)
    except ComponentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "success"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog_admin.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG
    )
