"""Tests for the generation session"""
import pytest

from ideapage_api.core.state_machine import GenerationPhase, GenerationSession
from ideapage_api.core.streaming import StreamSignal
from ideapage_api.models.errors import StoreVerificationError
from ideapage_api.models.schemas import GenerationResult


def drain(session):
    frames = []
    while not session.frames.empty():
        frames.append(session.frames.get_nowait())
    return frames


class TestGenerationSession:

    @pytest.mark.asyncio
    async def test_log_emits_progress_frames(self):
        session = GenerationSession()
        session.log("Starting generation with idea: tea")
        session.start("stream")
        session.log("Invoking GPT in streaming mode...")

        assert drain(session) == [
            {"log": "Starting generation with idea: tea"},
            {"log": "Invoking GPT in streaming mode..."},
        ]
        assert session.phase == GenerationPhase.GENERATING
        assert [e["phase"] for e in session.event_log] == ["STARTING", "GENERATING"]

    @pytest.mark.asyncio
    async def test_repeated_events_emitted_but_logged_once(self):
        session = GenerationSession()
        session.log("Same")
        session.log("same ")

        assert drain(session) == [{"log": "Same"}, {"log": "same "}]
        assert len(session.event_log) == 1

    @pytest.mark.asyncio
    async def test_complete_emits_ids_then_final_log(self):
        session = GenerationSession()
        session.complete(GenerationResult(generated_id="p1", dynamic_id="d1"))
        session.close()

        assert drain(session) == [
            {"generatedId": "p1", "dynamicId": "d1"},
            {"log": "Generation complete!"},
            StreamSignal.DONE,
        ]
        assert session.phase == GenerationPhase.READY
        assert session.is_terminal()

    @pytest.mark.asyncio
    async def test_no_progress_after_ready(self):
        session = GenerationSession()
        session.complete(GenerationResult(generated_id="p", dynamic_id="d"))
        drain(session)
        session.log("late message")
        assert drain(session) == []

    @pytest.mark.asyncio
    async def test_fail_emits_error_frame_with_status(self):
        session = GenerationSession()
        session.fail(StoreVerificationError("dynamic_landing_page:x", "no_data"))

        frame = drain(session)[0]
        assert frame["log"].startswith("Error: Stored content for dynamic_landing_page:x failed verification")
        assert frame["error"]["code"] == "STORE_VERIFICATION_FAILED"
        assert frame["error"]["status"] == 500
        assert session.phase == GenerationPhase.ERROR

    @pytest.mark.asyncio
    async def test_fail_with_unexpected_exception(self):
        session = GenerationSession()
        session.fail(RuntimeError("boom"))
        frame = drain(session)[0]
        assert frame == {
            "log": "Error: boom",
            "error": {"message": "boom", "type": "RuntimeError", "retryable": True, "status": 500},
        }

    @pytest.mark.asyncio
    async def test_idle_and_close(self):
        session = GenerationSession()
        session.idle()
        session.close()
        session.close()
        session.log("after close")
        assert drain(session) == [StreamSignal.IDLE, StreamSignal.DONE]
