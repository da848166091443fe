"""Generation session state machine"""

import asyncio
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ideapage_api.core.streaming import StreamSignal
from ideapage_api.core.telemetry import PipelineObserver
from ideapage_api.models.errors import ApplicationError
from ideapage_api.models.schemas import GenerationResult

logger = logging.getLogger(__name__)

Frame = Union[Dict[str, Any], StreamSignal]


class GenerationPhase(str, Enum):
    """Generation phases

    IDLE → STARTING → GENERATING → NORMALIZING → STORING → READY
                 ↘───────────────ERROR──────────────↗
    """
    IDLE = "IDLE"
    STARTING = "STARTING"
    GENERATING = "GENERATING"
    NORMALIZING = "NORMALIZING"
    STORING = "STORING"
    READY = "READY"
    ERROR = "ERROR"


# Pipeline operations reported through start() and the phase each one enters
OPERATION_PHASES = {
    "generation": GenerationPhase.STARTING,
    "stream": GenerationPhase.GENERATING,
    "normalize": GenerationPhase.NORMALIZING,
    "preview.create": GenerationPhase.STORING,
    "dynamic.create": GenerationPhase.STORING,
}


class GenerationSession(PipelineObserver):
    """
    Observer for one generation request.

    Keeps the phase and a timestamped event log, and queues outbound frames
    for the SSE response: progress dicts ({"log": ...}), the terminal result,
    keep-alive signals and the final DONE.
    """

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.phase = GenerationPhase.IDLE
        self.started_at: Optional[datetime] = None
        self.last_updated: Optional[datetime] = None
        self.metadata: Dict[str, Any] = {}
        self.event_log: List[Dict[str, str]] = []
        self.frames: "asyncio.Queue[Frame]" = asyncio.Queue()
        self.closed = False

    def is_terminal(self) -> bool:
        """Check if generation is in terminal state"""
        return self.phase in (GenerationPhase.READY, GenerationPhase.ERROR)

    def log_event(self, phase: GenerationPhase, event: str) -> None:
        """Log a new event - adds to log, updates phase and queues a progress frame"""
        if not isinstance(event, str):
            logger.warning(f"log_event received non-string event: {type(event)}, converting to string")
            event = str(event) if event is not None else ""

        # Terminal states are final; only ERROR may still add detail
        if self.is_terminal() and phase != GenerationPhase.ERROR:
            return

        now = datetime.utcnow()

        # An exact repeat of the previous event within one second is kept out of
        # event_log only; the client still receives every frame.
        duplicate = False
        if self.event_log and self.last_updated:
            recent = self.event_log[-1]
            duplicate = (recent["phase"] == phase.value
                         and recent["detail"].strip().lower() == event.strip().lower()
                         and (now - self.last_updated).total_seconds() < 1.0)

        if duplicate:
            logger.debug(f"Duplicate event not recorded: {event} (phase: {phase.value})")
        else:
            self.event_log.append({
                "ts": now.isoformat() + "Z",
                "phase": phase.value,
                "detail": event,
            })
        self.phase = phase
        self.last_updated = now
        if not self.started_at:
            self.started_at = now

        self._emit({"log": event})
        logger.debug(f"Logged event: {event} (phase: {phase.value})")

    def _emit(self, frame: Frame) -> None:
        if self.closed:
            logger.debug(f"Session {self.session_id} closed - dropping frame")
            return
        self.frames.put_nowait(frame)

    # --- PipelineObserver -------------------------------------------------

    def log(self, message: str) -> None:
        phase = self.phase if self.phase != GenerationPhase.IDLE else GenerationPhase.STARTING
        self.log_event(phase, message)

    def start(self, operation: str, **details: Any) -> None:
        phase = OPERATION_PHASES.get(operation)
        if phase is not None and not self.is_terminal():
            self.phase = phase

    def error(self, operation: str, error: BaseException, **details: Any) -> None:
        self.metadata.setdefault("errors", []).append(
            {"operation": operation, "type": type(error).__name__, "message": str(error)}
        )

    def idle(self) -> None:
        self._emit(StreamSignal.IDLE)

    # --- Terminal transitions ---------------------------------------------

    def complete(self, result: GenerationResult) -> None:
        """Queue the identifiers frame and enter READY"""
        self.metadata["success"] = True
        self.metadata["result"] = result.model_dump(by_alias=True)
        self._emit(result.model_dump(by_alias=True))
        self.log_event(GenerationPhase.READY, "Generation complete!")

    def fail(self, error: BaseException) -> None:
        """Queue an error frame and enter ERROR"""
        if isinstance(error, ApplicationError):
            info = error.model_dump()
            info["status"] = error.http_status
        else:
            info = {"message": str(error), "type": type(error).__name__, "retryable": True, "status": 500}
        self.metadata["success"] = False
        self.metadata["error"] = info
        self.event_log.append({
            "ts": datetime.utcnow().isoformat() + "Z",
            "phase": GenerationPhase.ERROR.value,
            "detail": f"Error: {error}",
        })
        self.phase = GenerationPhase.ERROR
        self._emit({"log": f"Error: {error}", "error": info})

    def close(self) -> None:
        """Queue DONE; nothing is emitted afterwards"""
        if self.closed:
            return
        self.frames.put_nowait(StreamSignal.DONE)
        self.closed = True
