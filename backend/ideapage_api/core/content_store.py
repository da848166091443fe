"""Content store - persists landing page records in a key-value backend"""

import logging
import uuid
from typing import Callable, Optional

from pydantic import ValidationError

from ideapage_api.core.config import THIRTY_DAYS_SECONDS
from ideapage_api.core.kv import KVBackend
from ideapage_api.core.normalizer import HERO_TITLE_LENGTH
from ideapage_api.core.telemetry import PipelineObserver
from ideapage_api.models.errors import RecordSchemaError, StoreVerificationError
from ideapage_api.models.schemas import ContentPayload, ContentRecord

logger = logging.getLogger(__name__)


class ContentStore:
    """
    Write-once, read-many store for ContentRecords under a key prefix.

    Records expire after ``ttl_seconds``; there is no update or delete.
    A ``strict`` store validates hero fields before writing and reads every
    write back, raising StoreVerificationError on any difference.
    """

    def __init__(
        self,
        backend: KVBackend,
        key_prefix: str,
        ttl_seconds: int = THIRTY_DAYS_SECONDS,
        strict: bool = False,
        name: str = "content",
        observer: Optional[PipelineObserver] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.backend = backend
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self.strict = strict
        self.name = name
        self.observer = observer or PipelineObserver()
        self.id_factory = id_factory

    def key_for(self, record_id: str) -> str:
        return f"{self.key_prefix}{record_id}"

    @staticmethod
    def serialize(record: ContentRecord) -> str:
        return record.model_dump_json(by_alias=True)

    def _check_hero(self, record: ContentPayload, key: str) -> None:
        if len(record.hero_title) != HERO_TITLE_LENGTH:
            raise RecordSchemaError(
                f"heroTitle must have exactly {HERO_TITLE_LENGTH} items, got {len(record.hero_title)}", key=key
            )
        if not record.hero_description.strip():
            raise RecordSchemaError("heroDescription is required", key=key)

    async def create(self, payload: ContentPayload) -> ContentRecord:
        """Assign a fresh identifier, write the record with expiry and return it"""
        record_id = self.id_factory()
        key = self.key_for(record_id)
        record = ContentRecord.from_payload(record_id, payload)
        serialized = self.serialize(record)

        operation = f"{self.name}.create"
        self.observer.start(operation, id=record_id, payload_size=len(serialized))
        try:
            if self.strict:
                self._check_hero(record, key)

            await self.backend.set(key, serialized, ex=self.ttl_seconds)

            if self.strict:
                stored = await self.backend.get(key)
                if stored is None:
                    raise StoreVerificationError(key, "no_data")
                if stored.encode("utf-8") != serialized.encode("utf-8"):
                    raise StoreVerificationError(key, "content_mismatch")
        except Exception as e:
            self.observer.error(operation, e, id=record_id)
            raise

        self.observer.success(operation, id=record_id, verified=self.strict)
        return record

    async def get(self, record_id: str) -> Optional[ContentRecord]:
        """
        Read a record by identifier.

        Returns:
            The record, or None when the key is absent or expired

        Raises:
            RecordSchemaError: stored data is not a valid record (schema drift)
            StoreUnavailableError: the backend could not be reached
        """
        key = self.key_for(record_id)
        operation = f"{self.name}.get"
        self.observer.start(operation, id=record_id)
        try:
            raw = await self.backend.get(key)
        except Exception as e:
            self.observer.error(operation, e, id=record_id)
            raise

        if raw is None:
            self.observer.success(operation, id=record_id, found=False)
            return None

        try:
            record = ContentRecord.model_validate_json(raw)
        except ValidationError as e:
            error = RecordSchemaError(
                f"Stored record {key} does not match the content schema: {e.error_count()} error(s)", key=key
            )
            self.observer.error(operation, error, id=record_id)
            raise error from e

        if self.strict:
            try:
                self._check_hero(record, key)
            except RecordSchemaError as e:
                self.observer.error(operation, e, id=record_id)
                raise

        self.observer.success(operation, id=record_id, found=True, size=len(raw))
        return record
