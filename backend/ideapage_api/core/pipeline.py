"""Generation pipeline: idea → streamed completion → normalized content → stores"""

import json
import logging
from typing import Optional

from ideapage_api.core.accumulator import ResponseAccumulator, parse_document
from ideapage_api.core.content_store import ContentStore
from ideapage_api.core.normalizer import ContentNormalizer
from ideapage_api.core.prompts import build_generation_messages
from ideapage_api.core.streaming import ChatStreamClient
from ideapage_api.core.telemetry import PipelineObserver
from ideapage_api.models.schemas import GenerationResult

logger = logging.getLogger(__name__)


class GenerationPipeline:
    """Runs one landing page generation and writes the result to both stores"""

    def __init__(
        self,
        stream_client: ChatStreamClient,
        preview_store: ContentStore,
        dynamic_store: ContentStore,
        normalizer: Optional[ContentNormalizer] = None,
    ):
        self.stream_client = stream_client
        self.preview_store = preview_store
        self.dynamic_store = dynamic_store
        self.normalizer = normalizer or ContentNormalizer()

    async def run(self, idea: Optional[str], observer: Optional[PipelineObserver] = None) -> Optional[GenerationResult]:
        """
        Generate, normalize and store landing page content for ``idea``.

        Returns:
            Identifiers of the preview and dynamic records, or None when no
            idea was given

        Raises:
            ApplicationError: store write or verification failures
        """
        observer = observer or PipelineObserver()

        if not idea or not idea.strip():
            observer.log("No idea provided.")
            return None
        idea = idea.strip()

        logger.info(f"[PIPELINE] Generation started | idea_length={len(idea)}")
        observer.start("generation", idea_length=len(idea))
        observer.log(f"Starting generation with idea: {idea}")

        messages = build_generation_messages(idea)
        observer.log("Prepared GPT messages: " + json.dumps({
            "messageCount": len(messages),
            "systemMessageLength": len(messages[0]["content"]),
            "userMessageLength": len(messages[1]["content"]),
        }))

        # Step 1: Stream the completion
        observer.start("stream")
        observer.log("Invoking GPT in streaming mode...")
        accumulator = ResponseAccumulator(observer)
        response = await accumulator.consume(self.stream_client.stream(messages, observer))
        observer.log(f"Stream complete. Total chunks: {response.chunk_count}")
        observer.log(f"Accumulated text length: {len(response.text)}")
        observer.success("stream", chunks=response.chunk_count, completed=response.completed)

        # Step 2: Parse and normalize
        observer.start("normalize")
        observer.log("Attempting to parse complete content...")
        document = parse_document(response.text, observer)
        content = self.normalizer.normalize(document, idea=idea, observer=observer)
        observer.log("Content normalized.")

        # Step 3: Persist in both stores
        observer.log("Creating record in preview store...")
        preview = await self.preview_store.create(content)

        observer.log("Creating record in dynamic store...")
        dynamic = await self.dynamic_store.create(content.model_copy(update={"idea": None, "logo_url": None}))

        observer.log("Successfully stored landing pages in both stores!")
        observer.log(f"Preview ID: {preview.id}")
        observer.log(f"Dynamic ID: {dynamic.id}")

        result = GenerationResult(generated_id=preview.id, dynamic_id=dynamic.id)
        observer.success("generation", generated_id=preview.id, dynamic_id=dynamic.id)
        logger.info(f"[PIPELINE] ✓ Generation stored | preview={preview.id} | dynamic={dynamic.id}")
        return result
