"""Content fetch and create endpoints"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ideapage_api.core.content_store import ContentStore
from ideapage_api.core.services import Services, get_services
from ideapage_api.models.errors import ApplicationError, RecordSchemaError
from ideapage_api.models.schemas import DynamicPageRequest

router = APIRouter()
logger = logging.getLogger(__name__)


async def _fetch(store: ContentStore, record_id: str) -> JSONResponse:
    try:
        record = await store.get(record_id)
    except RecordSchemaError as e:
        logger.warning(f"Stored {store.name} record {record_id} is invalid: {e.message}")
        return JSONResponse({"error": "Content not found"}, status_code=404)
    except ApplicationError as e:
        logger.error(f"Error fetching {store.name} record {record_id}: {e.message}")
        return JSONResponse({"error": "Failed to fetch content"}, status_code=500)

    if record is None:
        return JSONResponse({"error": "Content not found"}, status_code=404)
    return JSONResponse(record.model_dump(mode="json", by_alias=True))


@router.get("/preview/{record_id}")
async def get_preview(record_id: str, services: Services = Depends(get_services)) -> JSONResponse:
    """Get a preview landing page record"""
    return await _fetch(services.preview_store, record_id)


@router.get("/dynamic-lp/{slug}")
async def get_dynamic_page(slug: str, services: Services = Depends(get_services)) -> JSONResponse:
    """Get a dynamic landing page record"""
    return await _fetch(services.dynamic_store, slug)


@router.post("/dynamic-lp")
async def create_dynamic_page(request: DynamicPageRequest, services: Services = Depends(get_services)) -> JSONResponse:
    """Create a dynamic landing page from (possibly partial) content"""
    try:
        record = await services.dynamic_store.create(request.to_payload())
    except RecordSchemaError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=422)
    except ApplicationError as e:
        logger.error(f"Failed to create dynamic landing page: {e.message}")
        return JSONResponse({"success": False, "error": e.message}, status_code=e.http_status)
    return JSONResponse({"success": True, "id": record.id})
