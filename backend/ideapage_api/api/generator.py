"""POST /api/generator (SSE) and POST /api/generator/idea endpoints"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Set

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from ideapage_api.core.pipeline import GenerationPipeline
from ideapage_api.core.services import Services, get_services
from ideapage_api.core.state_machine import GenerationSession
from ideapage_api.core.streaming import StreamSignal
from ideapage_api.core.telemetry import CompositeObserver, LoggingObserver
from ideapage_api.models.errors import ApplicationError
from ideapage_api.models.schemas import GenerateRequest, IdeaResponse

router = APIRouter()
logger = logging.getLogger(__name__)

# Strong references so running generations are not garbage collected.
# A generation keeps running after the client disconnects; nothing cancels it.
_generation_tasks: Set[asyncio.Task] = set()


def sse_format(data: Dict[str, Any]) -> str:
    """Format one SSE data frame"""
    return f"data: {json.dumps(data, ensure_ascii=False)}\n\n"


SSE_DONE = "data: [DONE]\n\n"
SSE_PING = ": ping\n\n"


# Runs the pipeline against a session and always closes it, so the SSE stream ends with [DONE].
# Store errors become an error frame; the HTTP status is already committed at this point.
async def _run_generation(pipeline: GenerationPipeline, idea: str, session: GenerationSession) -> None:
    observer = CompositeObserver([session, LoggingObserver(logger, component="GENERATOR")])
    try:
        result = await pipeline.run(idea, observer)
        if result is not None:
            session.complete(result)
    except ApplicationError as e:
        logger.error(f"[GENERATOR] ✗ Generation failed | session={session.session_id} | {e.code.value}: {e.message}")
        session.fail(e)
    except Exception as e:
        logger.exception(f"[GENERATOR] Unexpected error in generation | session={session.session_id}")
        session.fail(e)
    finally:
        session.close()


async def _event_stream(session: GenerationSession) -> AsyncIterator[str]:
    while True:
        frame = await session.frames.get()
        if frame is StreamSignal.DONE:
            yield SSE_DONE
            return
        if frame is StreamSignal.IDLE:
            yield SSE_PING
            continue
        yield sse_format(frame)


@router.post("/generator")
async def generate(request: GenerateRequest, services: Services = Depends(get_services)) -> StreamingResponse:
    """
    Generate landing page content for a business idea.

    Streams ``data: {"log": ...}`` progress frames, then
    ``data: {"generatedId": ..., "dynamicId": ...}``, then ``data: [DONE]``.
    """
    session = GenerationSession()
    logger.info(f"POST /api/generator | session={session.session_id} | idea_length={len(request.idea)}")

    task = asyncio.create_task(_run_generation(services.pipeline, request.idea, session))
    _generation_tasks.add(task)
    task.add_done_callback(_generation_tasks.discard)

    return StreamingResponse(
        _event_stream(session),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/generator/idea", response_model=IdeaResponse)
async def suggest_idea(services: Services = Depends(get_services)):
    """Suggest a random business idea"""
    try:
        idea = await services.openai_client.suggest_idea()
    except ApplicationError as e:
        logger.error(f"Error generating idea: {e.code.value}: {e.message}")
        return JSONResponse({"error": "Failed to generate idea"}, status_code=500)
    return IdeaResponse(idea=idea)
