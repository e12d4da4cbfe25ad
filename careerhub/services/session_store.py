"""
In-memory registry of interview sessions, one slot per user.

A user runs at most one interview at a time, whichever backend it uses
(local Q&A or voice). Sessions live for the lifetime of the process;
finished ones are persisted by the routes.
"""

from typing import Callable, Dict, Optional, Union

from careerhub.core.errors import SessionStateError
from careerhub.services.interview_session import InterviewSession
from careerhub.services.voice_interviewer import VoiceInterviewer

Interview = Union[InterviewSession, VoiceInterviewer]


class SessionStore:

    def __init__(self):
        self._local: Dict[int, InterviewSession] = {}
        self._voice: Dict[int, VoiceInterviewer] = {}

    def get_local(self, user_id: int) -> Optional[InterviewSession]:
        return self._local.get(user_id)

    def get_voice(self, user_id: int) -> Optional[VoiceInterviewer]:
        return self._voice.get(user_id)

    def running(self, user_id: int) -> Optional[Interview]:
        for session in (self._local.get(user_id), self._voice.get(user_id)):
            if session is not None and session.is_running:
                return session
        return None

    def _ensure_free(self, user_id: int, backend) -> None:
        current = self.running(user_id)
        if current is not None and current.backend is not backend:
            raise SessionStateError(
                f"A {current.backend.value} interview is already in progress"
            )

    def local_for(self, user_id: int, factory: Callable[[], InterviewSession]) -> InterviewSession:
        """Get the user's local session, creating it with factory() if absent."""
        self._ensure_free(user_id, InterviewSession.backend)
        if user_id not in self._local:
            self._local[user_id] = factory()
        return self._local[user_id]

    def voice_for(self, user_id: int, factory: Callable[[], VoiceInterviewer]) -> VoiceInterviewer:
        self._ensure_free(user_id, VoiceInterviewer.backend)
        if user_id not in self._voice:
            self._voice[user_id] = factory()
        return self._voice[user_id]

    def discard(self, user_id: int) -> None:
        self._local.pop(user_id, None)
        self._voice.pop(user_id, None)


_store: SessionStore = None


def get_session_store() -> SessionStore:
    """Get or create the process-wide store (singleton pattern)"""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
