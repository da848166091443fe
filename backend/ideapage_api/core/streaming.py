"""Streaming chat-completion client"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional, Union

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI

from ideapage_api.core.telemetry import PipelineObserver

logger = logging.getLogger(__name__)


class StreamSignal(str, Enum):
    """Out-of-band values yielded alongside text fragments.

    Consumers compare with ``is`` so model text that happens to read
    "[ping]" or "[DONE]" is never taken for a signal.
    """
    IDLE = "[ping]"
    DONE = "[DONE]"


Fragment = Union[str, StreamSignal]

# Marks the end of the reader task inside the internal queue
_EOF = object()


class ChatStreamClient:
    """
    Opens a streaming chat completion and yields text fragments as they arrive.

    Yields StreamSignal.IDLE every ``keepalive_interval`` seconds of wall-clock
    time, whether or not text is arriving, and StreamSignal.DONE once the model
    reports a finish reason. HTTP and transport failures are logged and end the
    stream without DONE.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4",
        temperature: float = 0.7,
        keepalive_interval: float = 15.0,
        timeout: float = 300.0,
        client: Optional[AsyncOpenAI] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.keepalive_interval = keepalive_interval
        if client is None and api_key:
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
                http_client=httpx.AsyncClient(transport=transport, timeout=timeout) if transport else None,
            )
        self.client = client

    async def stream(
        self,
        messages: List[Dict[str, str]],
        observer: Optional[PipelineObserver] = None,
    ) -> AsyncIterator[Fragment]:
        """Yield fragments from the upstream model, interleaved with keep-alive signals"""
        observer = observer or PipelineObserver()

        if self.client is None:
            observer.log("No OPENAI_API_KEY found. Please provide it in your env.")
            logger.error("[STREAM] ✗ OPENAI_API_KEY not configured")
            return

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        reader = asyncio.create_task(self._read(messages, queue, observer))
        # Pings follow a fixed schedule, independent of upstream text
        next_ping = loop.time() + self.keepalive_interval
        try:
            while True:
                remaining = next_ping - loop.time()
                if remaining <= 0:
                    yield StreamSignal.IDLE
                    next_ping = loop.time() + self.keepalive_interval
                    continue
                try:
                    item = await asyncio.wait_for(queue.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    continue
                if item is _EOF:
                    break
                yield item
                if item is StreamSignal.DONE:
                    break
        finally:
            # The reader must not outlive the stream, otherwise it keeps the
            # upstream connection open after the consumer has gone away.
            if not reader.done():
                reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass

    async def _read(
        self,
        messages: List[Dict[str, str]],
        queue: asyncio.Queue,
        observer: PipelineObserver,
    ) -> None:
        """Read completion chunks into ``queue``; always finishes with _EOF"""
        try:
            observer.log("Initiating streaming fetch to OpenAI...")
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                stream=True,
            )
            finished = False
            async for chunk in response:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                content = choice.delta.content if choice.delta is not None else None
                if content:
                    await queue.put(content)
                if choice.finish_reason:
                    finished = True
            if finished:
                observer.log("OpenAI streaming ended.")
                await queue.put(StreamSignal.DONE)
        except APIStatusError as e:
            body = e.response.text
            logger.error(f"[STREAM] ✗ Upstream error | status={e.status_code} | body={body}")
            observer.log(f"OpenAI error. Status: {e.status_code}, body: {body}")
        except (APIError, ValueError) as e:
            # ValueError covers chunks that are not valid JSON
            logger.error(f"[STREAM] ✗ Transport error: {e!r}")
            observer.log(f"Error streaming from OpenAI: {e}")
        finally:
            await queue.put(_EOF)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
