"""Accumulates streamed fragments into one JSON document"""

import copy
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from ideapage_api.core.streaming import Fragment, StreamSignal
from ideapage_api.core.telemetry import PipelineObserver

logger = logging.getLogger(__name__)

# Content substituted when the model output cannot be parsed as a JSON object
FALLBACK_DOCUMENT: Dict[str, Any] = {
    "heroTitle": "AI Developer Filter",
    "heroDescription": "A powerful tool to help companies find the right AI developers",
    "ctaTitle": "Start Filtering Today",
    "ctaDescription": "Find the perfect AI developer for your team",
    "features": [
        "Smart candidate filtering",
        "AI skill assessment",
        "Experience verification",
        "Cultural fit analysis",
    ],
}

_CODE_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)


@dataclass
class AccumulatedResponse:
    """Full text of one streamed completion"""
    text: str
    completed: bool  # upstream sent its terminator
    chunk_count: int
    idle_count: int

    @property
    def empty(self) -> bool:
        return not self.text.strip()


class ResponseAccumulator:
    """Concatenates text fragments in arrival order, dropping keep-alive signals"""

    def __init__(self, observer: Optional[PipelineObserver] = None):
        self.observer = observer or PipelineObserver()
        self._parts = []
        self.completed = False
        self.chunk_count = 0
        self.idle_count = 0

    def feed(self, fragment: Fragment) -> None:
        if fragment is StreamSignal.IDLE:
            self.idle_count += 1
            self.observer.idle()
            return
        if fragment is StreamSignal.DONE:
            self.completed = True
            return
        self.chunk_count += 1
        self._parts.append(fragment)

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def result(self) -> AccumulatedResponse:
        return AccumulatedResponse(
            text=self.text,
            completed=self.completed,
            chunk_count=self.chunk_count,
            idle_count=self.idle_count,
        )

    async def consume(self, fragments: AsyncIterator[Fragment]) -> AccumulatedResponse:
        """Drain a fragment stream and return what was accumulated"""
        async for fragment in fragments:
            self.feed(fragment)
        result = self.result()
        if not result.completed:
            logger.warning(
                f"[ACCUMULATOR] Stream ended without completion signal | chunks={result.chunk_count}"
            )
            self.observer.log("Stream ended early - continuing with what was received.")
        return result


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any"""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


# Parses accumulated model text into a JSON object; never raises.
# Anything that is not a JSON object (garbage, empty, arrays) yields a copy of FALLBACK_DOCUMENT.
def parse_document(text: str, observer: Optional[PipelineObserver] = None) -> Dict[str, Any]:
    """Parse model output as a JSON object, falling back to fixed content"""
    observer = observer or PipelineObserver()
    candidate = strip_code_fence(text)
    try:
        document = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"[ACCUMULATOR] ✗ Could not parse accumulated text ({len(candidate)} chars): {e}")
        observer.log(f"Error parsing accumulated text: {e}")
        return copy.deepcopy(FALLBACK_DOCUMENT)

    if not isinstance(document, dict):
        logger.error(f"[ACCUMULATOR] ✗ Accumulated JSON is a {type(document).__name__}, expected object")
        observer.log("Accumulated text is not a JSON object - using fallback content.")
        return copy.deepcopy(FALLBACK_DOCUMENT)

    return document
