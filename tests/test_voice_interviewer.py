"""Tests for the voice interviewer adapter and the per-user session store."""

import asyncio
import random

import pytest

from careerhub.core.errors import ConfigurationError, SessionStateError, VoiceCallError
from careerhub.schemas.schemas import CallStatus, InterviewBackend
from careerhub.services.feedback_synthesizer import RandomFeedbackSynthesizer
from careerhub.services.interview_repository import outcome_to_row
from careerhub.services.interview_session import InterviewSession
from careerhub.services.question_bank import DEFAULT_VOICE_QUESTIONS
from careerhub.services.session_store import SessionStore
from careerhub.services.voice_interviewer import VoiceInterviewer, format_questions

from tests.fakes import FakeCallClient


def transcript_event(role: str, text: str, kind: str = "final") -> dict:
    return {"type": "transcript", "role": role, "transcript": text, "transcriptType": kind}


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, transcript):
        self.calls.append(list(transcript))


def make_interviewer(on_finish=None, client=None):
    return VoiceInterviewer(call_client=client or FakeCallClient(), on_finish=on_finish, token="live-token")


async def run_call(interviewer, *events):
    await interviewer.start()
    for event in events:
        await interviewer.handle_event(event)


# ---------------------------------------------------------------------------
# Configuration and start
# ---------------------------------------------------------------------------


class TestStart:
    @pytest.mark.parametrize("token", ["", "dummy-token"])
    def test_missing_token_rejected(self, token: str) -> None:
        client = FakeCallClient()
        interviewer = VoiceInterviewer(call_client=client, token=token)
        with pytest.raises(ConfigurationError):
            asyncio.run(interviewer.start(["Q?"]))
        assert interviewer.status is CallStatus.inactive
        assert client.started == []

    def test_token_read_from_settings(self, fast_settings, monkeypatch) -> None:
        monkeypatch.setattr(fast_settings, "vapi_api_key", "settings-token")
        interviewer = VoiceInterviewer(call_client=FakeCallClient())
        asyncio.run(interviewer.start())
        assert interviewer.status is CallStatus.connecting

    def test_default_questions_passed_to_provider(self) -> None:
        client = FakeCallClient()
        asyncio.run(make_interviewer(client=client).start())
        assert client.started == [{"questions": format_questions(DEFAULT_VOICE_QUESTIONS)}]

    def test_custom_questions_formatted_as_list(self) -> None:
        client = FakeCallClient()
        asyncio.run(make_interviewer(client=client).start(["Why us?", "  ", "Five-year plan?"]))
        assert client.started[0]["questions"] == "- Why us?\n- Five-year plan?"

    def test_start_twice_rejected(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(interviewer.start())
        with pytest.raises(SessionStateError):
            asyncio.run(interviewer.start())

    def test_provider_failure_reverts_to_inactive(self) -> None:
        interviewer = make_interviewer(client=FakeCallClient(fail_with=VoiceCallError("503 from provider")))
        with pytest.raises(VoiceCallError):
            asyncio.run(interviewer.start())
        assert interviewer.status is CallStatus.inactive


# ---------------------------------------------------------------------------
# Provider events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_call_start_activates(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(interviewer, {"type": "call-start"}))
        assert interviewer.status is CallStatus.active
        assert interviewer.snapshot().call_id == "call-1"

    def test_final_transcripts_recorded_in_order(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(
            interviewer,
            {"type": "call-start"},
            transcript_event("assistant", "Tell me about yourself."),
            transcript_event("user", "I am a final", "partial"),
            transcript_event("user", "I am a final year student."),
        ))
        assert [(m.role, m.content) for m in interviewer.messages] == [
            ("assistant", "Tell me about yourself."),
            ("user", "I am a final year student."),
        ]
        assert interviewer.last_message == "I am a final year student."

    def test_speech_events_toggle_speaking(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(interviewer, {"type": "speech-start"}))
        assert interviewer.is_speaking is True
        asyncio.run(interviewer.handle_event({"type": "speech-end"}))
        assert interviewer.is_speaking is False

    def test_webhook_envelope_unwrapped(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(
            interviewer,
            {"message": {"type": "status-update", "status": "in-progress"}},
            {"message": transcript_event("assistant", "Hello!")},
            {"message": {"type": "speech-update", "status": "started", "role": "assistant"}},
        ))
        assert interviewer.status is CallStatus.active
        assert interviewer.is_speaking is True
        assert interviewer.transcript()[0].content == "Hello!"

    def test_unknown_events_ignored(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(interviewer, {"type": "volume-level", "volume": 0.4}))
        assert interviewer.status is CallStatus.connecting


# ---------------------------------------------------------------------------
# Finishing
# ---------------------------------------------------------------------------


class TestFinish:
    def test_stop_ends_call_and_emits_transcript_once(self) -> None:
        recorder = Recorder()
        client = FakeCallClient()
        interviewer = make_interviewer(on_finish=recorder, client=client)
        asyncio.run(run_call(interviewer, {"type": "call-start"}, transcript_event("assistant", "Hi")))

        asyncio.run(interviewer.stop())
        asyncio.run(interviewer.handle_event({"type": "call-end"}))

        assert interviewer.status is CallStatus.finished
        assert client.ended == ["call-1"]
        assert len(recorder.calls) == 1
        assert recorder.calls[0][0].content == "Hi"

    def test_call_end_event_emits(self) -> None:
        recorder = Recorder()
        interviewer = make_interviewer(on_finish=recorder)
        asyncio.run(run_call(
            interviewer,
            {"type": "call-start"},
            transcript_event("user", "Thanks"),
            {"type": "call-end"},
        ))
        assert interviewer.status is CallStatus.finished
        assert len(recorder.calls) == 1

    def test_stop_after_provider_end_does_not_end_again(self) -> None:
        client = FakeCallClient()
        interviewer = make_interviewer(client=client)
        asyncio.run(run_call(interviewer, {"type": "call-start"}, {"type": "call-end"}))
        asyncio.run(interviewer.stop())
        assert client.ended == []

    def test_empty_transcript_not_emitted(self) -> None:
        recorder = Recorder()
        interviewer = make_interviewer(on_finish=recorder)
        asyncio.run(run_call(interviewer, {"type": "call-start"}, {"type": "call-end"}))
        assert recorder.calls == []

    def test_async_consumer_awaited(self) -> None:
        received = []

        async def consumer(transcript):
            await asyncio.sleep(0)
            received.append(len(transcript))

        interviewer = make_interviewer(on_finish=consumer)
        asyncio.run(run_call(interviewer, transcript_event("assistant", "Hi"), {"type": "call-end"}))
        assert received == [1]

    def test_stop_when_inactive_rejected(self) -> None:
        with pytest.raises(SessionStateError):
            asyncio.run(make_interviewer().stop())

    def test_restart_after_finish_emits_again(self) -> None:
        recorder = Recorder()
        interviewer = make_interviewer(on_finish=recorder)
        asyncio.run(run_call(interviewer, transcript_event("user", "one"), {"type": "call-end"}))
        asyncio.run(run_call(interviewer, transcript_event("user", "two"), {"type": "call-end"}))
        assert [calls[0].content for calls in recorder.calls] == ["one", "two"]

    def test_finished_call_ignores_late_events(self) -> None:
        recorder = Recorder()
        interviewer = make_interviewer(on_finish=recorder)
        asyncio.run(run_call(interviewer, {"type": "call-start"}, transcript_event("user", "a")))
        asyncio.run(interviewer.stop())

        asyncio.run(interviewer.handle_event({"type": "call-start"}))
        asyncio.run(interviewer.handle_event(transcript_event("user", "late")))

        assert interviewer.status is CallStatus.finished
        assert not interviewer.is_running
        assert [m.content for m in interviewer.messages] == ["a"]
        assert len(recorder.calls) == 1

    def test_late_in_progress_webhook_does_not_revive(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(interviewer, {"type": "call-start"}, {"type": "call-end"}))
        asyncio.run(interviewer.handle_event({"message": {"type": "status-update", "status": "in-progress"}}))
        assert interviewer.status is CallStatus.finished
        assert not interviewer.is_running

    def test_outcome_pairs_into_history_row(self) -> None:
        interviewer = make_interviewer()
        asyncio.run(run_call(
            interviewer,
            transcript_event("assistant", "Why this role?"),
            transcript_event("user", "I enjoy backend work."),
            {"type": "call-end"},
        ))
        outcome = interviewer.outcome()
        assert outcome.backend is InterviewBackend.voice
        assert outcome.feedback is None

        row = outcome_to_row(1, outcome)
        assert row["type"] == "voice"
        assert row["overall_score"] is None
        assert row["questions"] == '[{"question": "Why this role?", "answer": "I enjoy backend work.", "score": null}]'


# ---------------------------------------------------------------------------
# SessionStore
# ---------------------------------------------------------------------------


class TestSessionStore:
    def _local(self):
        return InterviewSession(RandomFeedbackSynthesizer(random.Random(0)), synthesis_delay=0)

    def test_same_session_returned(self) -> None:
        store = SessionStore()
        assert store.local_for(1, self._local) is store.local_for(1, self._local)
        assert store.local_for(1, self._local) is not store.local_for(2, self._local)

    def test_running_voice_blocks_local(self) -> None:
        store = SessionStore()
        interviewer = store.voice_for(1, make_interviewer)
        asyncio.run(interviewer.start())
        with pytest.raises(SessionStateError):
            store.local_for(1, self._local)

    def test_running_local_blocks_voice(self) -> None:
        store = SessionStore()
        store.local_for(1, self._local).start("technical")
        with pytest.raises(SessionStateError):
            store.voice_for(1, make_interviewer)
        assert store.running(1).backend is InterviewBackend.local

    def test_finished_session_frees_the_slot(self) -> None:
        store = SessionStore()
        session = store.local_for(1, self._local)
        session.start("custom", ["Only?"])
        asyncio.run(session.submit_answer("Yes"))
        assert store.running(1) is None
        assert store.voice_for(1, make_interviewer) is not None

    def test_discard(self) -> None:
        store = SessionStore()
        store.local_for(1, self._local)
        store.discard(1)
        assert store.get_local(1) is None
