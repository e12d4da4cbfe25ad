"""
Interview Session - local question/answer state machine.

    setup --start()--> active --submit_answer()*--> analyzing --> feedback
      ^                                                              |
      +---------------------------reset()----------------------------+

While active, len(answers) == current_index. The synthesizer runs exactly
once per session, after the last answer. A reset() during synthesis
discards the result when it arrives.
"""

import asyncio
import logging
import time
from typing import List, Optional

from careerhub.core.config import get_settings
from careerhub.core.errors import InvalidAnswerError, SessionStateError
from careerhub.schemas.schemas import (
    FeedbackReport,
    InterviewBackend,
    InterviewMode,
    InterviewOutcome,
    InterviewSessionResponse,
    InterviewState,
    TranscriptEntry,
)
from careerhub.services.feedback_synthesizer import FeedbackSynthesizer
from careerhub.services.question_bank import get_questions

logger = logging.getLogger(__name__)


class InterviewSession:
    backend = InterviewBackend.local

    def __init__(self, synthesizer: FeedbackSynthesizer, synthesis_delay: Optional[float] = None):
        self.synthesizer = synthesizer
        if synthesis_delay is None:
            synthesis_delay = get_settings().synthesis_delay_seconds
        self.synthesis_delay = synthesis_delay

        self.mode: Optional[InterviewMode] = None
        self.questions: List[str] = []
        self.answers: List[str] = []
        self.current_index = 0
        self.state = InterviewState.setup
        self.feedback: Optional[FeedbackReport] = None
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        # Bumped on every start/reset so late synthesis results can be recognised
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self.state in (InterviewState.active, InterviewState.analyzing)

    @property
    def current_question(self) -> Optional[str]:
        if self.state is not InterviewState.active or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def duration_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return int(end - self.started_at)

    def start(self, mode, custom_questions: Optional[List[str]] = None) -> bool:
        """
        Begin a session. Returns False (and changes nothing) when a session
        is already running.
        """
        if self.is_running:
            logger.debug("start() ignored, session already %s", self.state.value)
            return False

        questions = get_questions(mode, custom_questions)
        self.mode = InterviewMode(mode)
        self.questions = questions
        self.answers = []
        self.current_index = 0
        self.feedback = None
        self.started_at = time.monotonic()
        self.finished_at = None
        self.state = InterviewState.active
        self._generation += 1

        logger.info("Interview started: mode=%s questions=%d", self.mode.value, len(questions))
        return True

    async def submit_answer(self, text: str) -> Optional[str]:
        """
        Record an answer. Returns the next question, or None once the last
        answer is in and the feedback report has been built.
        """
        if self.state is not InterviewState.active:
            raise SessionStateError(f"Cannot submit an answer while {self.state.value}")
        if text is None or not text.strip():
            raise InvalidAnswerError("Answer cannot be empty")

        if self.current_index < len(self.questions):
            self.answers.append(text)
            if self.current_index + 1 < len(self.questions):
                self.current_index += 1
                return self.questions[self.current_index]

        await self._synthesize()
        return None

    async def _synthesize(self) -> None:
        self.state = InterviewState.analyzing
        self.finished_at = time.monotonic()
        generation = self._generation
        questions = list(self.questions)
        answers = list(self.answers)

        if self.synthesis_delay > 0:
            await asyncio.sleep(self.synthesis_delay)
        report = await self.synthesizer.synthesize(questions, answers, self.mode)

        if generation != self._generation:
            logger.info("Discarding feedback for a session that was reset")
            return

        self.feedback = report
        self.state = InterviewState.feedback
        logger.info("Interview feedback ready: overall=%d", report.overall_score)

    def reset(self) -> None:
        self.mode = None
        self.questions = []
        self.answers = []
        self.current_index = 0
        self.feedback = None
        self.started_at = None
        self.finished_at = None
        self.state = InterviewState.setup
        self._generation += 1

    def transcript(self) -> List[TranscriptEntry]:
        entries = []
        for question, answer in zip(self.questions, self.answers):
            entries.append(TranscriptEntry(role="assistant", content=question))
            entries.append(TranscriptEntry(role="user", content=answer))
        return entries

    def outcome(self) -> InterviewOutcome:
        return InterviewOutcome(
            backend=self.backend,
            mode=self.mode,
            transcript=self.transcript(),
            feedback=self.feedback,
            duration_seconds=self.duration_seconds,
        )

    def snapshot(self) -> InterviewSessionResponse:
        return InterviewSessionResponse(
            mode=self.mode,
            state=self.state,
            questions=list(self.questions),
            current_index=self.current_index,
            current_question=self.current_question,
            answers=list(self.answers),
            feedback=self.feedback,
        )
