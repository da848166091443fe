"""
Observer hooks for the generation pipeline and content stores.

Core code reports notable events (start, retry, error, success, progress
narration, keep-alive) to an observer instead of logging directly. Production
wiring decides what an event becomes:

- LoggingObserver: structured log lines
- GenerationSession (core.state_machine): SSE progress frames
- PipelineObserver: no-op base, used when nobody is listening
"""

import logging
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


class PipelineObserver:
    """No-op observer. Subclasses override the events they care about."""

    def start(self, operation: str, **details: Any) -> None:
        pass

    def success(self, operation: str, **details: Any) -> None:
        pass

    def error(self, operation: str, error: BaseException, **details: Any) -> None:
        pass

    def retry(self, operation: str, attempt: int, delay: float, reason: str) -> None:
        pass

    def log(self, message: str) -> None:
        """Human-readable progress narration"""
        pass

    def idle(self) -> None:
        """Upstream is still working but sent nothing for a keep-alive interval"""
        pass


class LoggingObserver(PipelineObserver):
    """Turns observer events into log lines"""

    def __init__(self, log: Optional[logging.Logger] = None, component: str = "PIPELINE"):
        self.logger = log or logger
        self.component = component

    def _fmt(self, details: dict) -> str:
        return " | ".join(f"{k}={v}" for k, v in details.items())

    def start(self, operation: str, **details: Any) -> None:
        self.logger.info(f"[{self.component}] {operation}:start | {self._fmt(details)}")

    def success(self, operation: str, **details: Any) -> None:
        self.logger.info(f"[{self.component}] ✓ {operation}:complete | {self._fmt(details)}")

    def error(self, operation: str, error: BaseException, **details: Any) -> None:
        self.logger.error(
            f"[{self.component}] ✗ {operation}:error | {type(error).__name__}: {error} | {self._fmt(details)}"
        )

    def retry(self, operation: str, attempt: int, delay: float, reason: str) -> None:
        self.logger.warning(
            f"[{self.component}] {operation}:retry | attempt={attempt} | delay={delay:.1f}s | reason={reason}"
        )

    def log(self, message: str) -> None:
        self.logger.info(f"[{self.component}] {message}")

    def idle(self) -> None:
        self.logger.debug(f"[{self.component}] keep-alive")


class CompositeObserver(PipelineObserver):
    """Fans every event out to several observers"""

    def __init__(self, observers: Iterable[PipelineObserver]):
        self.observers = list(observers)

    def start(self, operation: str, **details: Any) -> None:
        for o in self.observers:
            o.start(operation, **details)

    def success(self, operation: str, **details: Any) -> None:
        for o in self.observers:
            o.success(operation, **details)

    def error(self, operation: str, error: BaseException, **details: Any) -> None:
        for o in self.observers:
            o.error(operation, error, **details)

    def retry(self, operation: str, attempt: int, delay: float, reason: str) -> None:
        for o in self.observers:
            o.retry(operation, attempt, delay, reason)

    def log(self, message: str) -> None:
        for o in self.observers:
            o.log(message)

    def idle(self) -> None:
        for o in self.observers:
            o.idle()
