"""
Voice Interviewer - adapter for a third-party real-time voice call (Vapi).

    inactive --start()--> connecting --call-start--> active --stop()/call-end--> finished

The adapter keeps its own transcript, fed by provider events. When the call
finishes the transcript is handed to the on_finish consumer exactly once.
No feedback report is synthesized for voice interviews.
"""

import inspect
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union

import httpx

from careerhub.core.config import get_settings
from careerhub.core.errors import ConfigurationError, SessionStateError, VoiceCallError
from careerhub.schemas.schemas import (
    CallStatus,
    InterviewBackend,
    InterviewOutcome,
    TranscriptEntry,
    VoiceInterviewResponse,
)
from careerhub.services.question_bank import DEFAULT_VOICE_QUESTIONS, clean_questions

logger = logging.getLogger(__name__)

TranscriptConsumer = Callable[[List[TranscriptEntry]], Union[None, Awaitable[None]]]


# ============================================================
# PROVIDER CLIENTS
# ============================================================

class VoiceCallClient(ABC):
    """Starts and ends calls on the voice provider."""

    @abstractmethod
    async def start_call(self, variable_values: dict) -> dict:
        """Create a call; returns the provider's call object."""

    @abstractmethod
    async def end_call(self, call: dict) -> None:
        """End a call previously returned by start_call."""


class VapiCallClient(VoiceCallClient):
    """
    Vapi REST client.

    Calls are created with the configured assistant; the interview questions
    are passed as the `questions` template variable. Calls are ended through
    the live-call control URL returned at creation.
    """

    def __init__(self, api_key: str, base_url: str, assistant_id: str, timeout: float = 30.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.assistant_id = assistant_id
        self.timeout = timeout

    @property
    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def start_call(self, variable_values: dict) -> dict:
        payload = {
            "assistantId": self.assistant_id,
            "assistantOverrides": {"variableValues": variable_values},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/call/web", json=payload, headers=self._headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise VoiceCallError(f"Failed to start voice interview: {e}") from e

    async def end_call(self, call: dict) -> None:
        control_url = (call.get("monitor") or {}).get("controlUrl")
        if not control_url:
            logger.warning("Call %s has no control URL, cannot end remotely", call.get("id"))
            return
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(control_url, json={"type": "end-call"})
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Ending call %s failed: %s", call.get("id"), e)


def get_voice_call_client() -> VoiceCallClient:
    settings = get_settings()
    return VapiCallClient(
        api_key=settings.vapi_api_key,
        base_url=settings.vapi_base_url,
        assistant_id=settings.vapi_assistant_id,
    )


# ============================================================
# ADAPTER
# ============================================================

def format_questions(questions: List[str]) -> str:
    return "\n".join(f"- {q}" for q in questions)


class VoiceInterviewer:
    backend = InterviewBackend.voice

    def __init__(
        self,
        call_client: Optional[VoiceCallClient] = None,
        on_finish: Optional[TranscriptConsumer] = None,
        token: Optional[str] = None,
    ):
        self.call_client = call_client
        self.on_finish = on_finish
        self.token = token
        self.status = CallStatus.inactive
        self.call: Optional[dict] = None
        self.messages: List[TranscriptEntry] = []
        self.last_message = ""
        self.is_speaking = False
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self._emitted = False

    def _require_token(self) -> None:
        settings = get_settings()
        token = self.token if self.token is not None else settings.vapi_api_key
        if not token or token == "dummy-token":
            raise ConfigurationError("Voice interviewer token not configured. Set VAPI_API_KEY.")

    @property
    def is_running(self) -> bool:
        return self.status in (CallStatus.connecting, CallStatus.active)

    async def start(self, questions: Optional[List[str]] = None) -> None:
        self._require_token()
        if self.is_running:
            raise SessionStateError(f"Voice interview already {self.status.value}")

        questions = clean_questions(questions) or list(DEFAULT_VOICE_QUESTIONS)
        if self.call_client is None:
            self.call_client = get_voice_call_client()

        self.messages = []
        self.last_message = ""
        self.is_speaking = False
        self._emitted = False
        self.status = CallStatus.connecting
        try:
            self.call = await self.call_client.start_call({"questions": format_questions(questions)})
        except Exception:
            self.status = CallStatus.inactive
            raise

        self.started_at = time.monotonic()
        self.finished_at = None
        logger.info("Voice interview connecting: call=%s", (self.call or {}).get("id"))

    async def handle_event(self, event: dict) -> None:
        """
        Apply one provider event. Accepts client SDK events
        (call-start, call-end, speech-start, speech-end, transcript) and
        server webhook envelopes ({"message": {...}}).

        A finished call ignores further events until start() or reset().
        """
        if isinstance(event.get("message"), dict):
            event = event["message"]
        event_type = event.get("type")

        if self.status is CallStatus.finished:
            logger.debug("Ignoring voice event %s after the call finished", event_type)
            return

        if event_type == "call-start":
            self._activate()
        elif event_type == "call-end":
            await self._finish()
        elif event_type == "status-update":
            status = event.get("status")
            if status == "in-progress":
                self._activate()
            elif status == "ended":
                await self._finish()
        elif event_type == "speech-start":
            self.is_speaking = True
        elif event_type == "speech-end":
            self.is_speaking = False
        elif event_type == "speech-update":
            self.is_speaking = event.get("status") == "started"
        elif event_type == "transcript" and event.get("transcriptType") == "final":
            role = "user" if event.get("role") == "user" else "assistant"
            content = event.get("transcript", "")
            self.messages.append(TranscriptEntry(role=role, content=content))
            self.last_message = content
        else:
            logger.debug("Ignoring voice event %s", event_type)

    def _activate(self) -> None:
        if self.status is CallStatus.connecting:
            self.status = CallStatus.active
        elif self.status is not CallStatus.active:
            logger.debug("Ignoring call start while %s", self.status.value)

    async def stop(self) -> None:
        if self.status is CallStatus.inactive:
            raise SessionStateError("No voice interview in progress")
        if self.call is not None and self.status is not CallStatus.finished:
            await self.call_client.end_call(self.call)
        await self._finish()

    async def _finish(self) -> None:
        self.status = CallStatus.finished
        self.is_speaking = False
        if self.finished_at is None:
            self.finished_at = time.monotonic()
        if self._emitted or not self.messages or self.on_finish is None:
            return
        self._emitted = True
        result = self.on_finish(list(self.messages))
        if inspect.isawaitable(result):
            await result

    def reset(self) -> None:
        self.status = CallStatus.inactive
        self.call = None
        self.messages = []
        self.last_message = ""
        self.is_speaking = False
        self.started_at = None
        self.finished_at = None
        self._emitted = False

    def transcript(self) -> List[TranscriptEntry]:
        return list(self.messages)

    def outcome(self) -> InterviewOutcome:
        duration = 0
        if self.started_at is not None:
            end = self.finished_at if self.finished_at is not None else time.monotonic()
            duration = int(end - self.started_at)
        return InterviewOutcome(backend=self.backend, transcript=self.transcript(), duration_seconds=duration)

    def snapshot(self) -> VoiceInterviewResponse:
        return VoiceInterviewResponse(
            status=self.status,
            call_id=(self.call or {}).get("id"),
            is_speaking=self.is_speaking,
            last_message=self.last_message,
            transcript=self.transcript(),
        )
