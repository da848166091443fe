"""Server-rendered landing pages"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ideapage_api.core.content_store import ContentStore
from ideapage_api.core.retry import linear_backoff, retry_with_backoff
from ideapage_api.core.services import Services, get_services
from ideapage_api.core.telemetry import LoggingObserver
from ideapage_api.models.errors import RecordSchemaError, StoreUnavailableError

router = APIRouter()
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


# Fetches with bounded retries (a just-generated record may not be readable yet), then renders.
# Sections render in fixed order: hero, features, pricing, testimonials, FAQ, CTA.
async def _render_record(request: Request, store: ContentStore, record_id: str, services: Services) -> HTMLResponse:
    settings = services.settings
    try:
        record = await retry_with_backoff(
            lambda: store.get(record_id),
            attempts=settings.page_fetch_attempts,
            delay=linear_backoff(settings.page_retry_delay_seconds),
            retry_on=(StoreUnavailableError,),
            retry_if=lambda found: found is None,
            name=f"{store.name}.page",
            observer=LoggingObserver(logger, component="PAGES"),
        )
    except RecordSchemaError as e:
        logger.warning(f"[PAGES] {store.name} record {record_id} is invalid: {e.message}")
        record = None
    except StoreUnavailableError as e:
        logger.error(f"[PAGES] ✗ Could not load {store.name} record {record_id}: {e.message}")
        return templates.TemplateResponse(
            request,
            "error.html",
            {"message": "Failed to load content. Please try refreshing the page."},
            status_code=500,
        )

    if record is None:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"attempts": settings.page_fetch_attempts},
            status_code=404,
        )

    return templates.TemplateResponse(request, "landing.html", {"record": record, "variant": store.name})


@router.get("/preview/{record_id}", response_class=HTMLResponse)
async def preview_page(request: Request, record_id: str, services: Services = Depends(get_services)):
    return await _render_record(request, services.preview_store, record_id, services)


@router.get("/dynamic-lp/{slug}", response_class=HTMLResponse)
async def dynamic_page(request: Request, slug: str, services: Services = Depends(get_services)):
    return await _render_record(request, services.dynamic_store, slug, services)


@router.get("/generator", response_class=HTMLResponse)
async def generator_page(request: Request):
    """Idea form that streams generation progress"""
    return templates.TemplateResponse(request, "generator.html", {})
