"""
Interview Repository - durable interview history in PostgreSQL.

Each finished interview (either backend) is written once to
interview_sessions, with its questions, answers and scores denormalized
into a JSONB array.
"""

import json
import uuid
from typing import List

from sqlalchemy import text

from careerhub.db.postgres import get_db_session, execute_raw_sql
from careerhub.schemas.schemas import InterviewBackend, InterviewOutcome


def outcome_to_row(student_id: int, outcome: InterviewOutcome) -> dict:
    """Flatten an outcome into interview_sessions column values."""
    report = outcome.feedback
    if report is not None:
        questions = [
            {"question": item.question, "answer": item.answer, "score": item.score}
            for item in report.per_question
        ]
    else:
        # Pair up assistant/user turns from the transcript
        questions = []
        pending = None
        for entry in outcome.transcript:
            if entry.role == "assistant":
                pending = entry.content
            elif pending is not None:
                questions.append({"question": pending, "answer": entry.content, "score": None})
                pending = None

    if outcome.backend is InterviewBackend.voice or outcome.mode is None:
        session_type = outcome.backend.value
    else:
        session_type = outcome.mode.value

    return {
        "id": str(uuid.uuid4()),
        "student_id": student_id,
        "type": session_type,
        "questions": json.dumps(questions),
        "overall_score": report.overall_score if report else None,
        "confidence_score": report.confidence_score if report else None,
        "clarity_score": report.clarity_score if report else None,
        "pace_score": report.pace_score if report else None,
        "feedback": report.overall_feedback if report else None,
        "duration": outcome.duration_seconds,
    }


class InterviewSessionRepository:

    def save(self, student_id: int, outcome: InterviewOutcome) -> str:
        """Persist a finished interview. Returns the new row id."""
        row = outcome_to_row(student_id, outcome)
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO interview_sessions
                        (id, student_id, type, questions, overall_score, confidence_score,
                         clarity_score, pace_score, feedback, duration)
                    VALUES
                        (:id, :student_id, :type, CAST(:questions AS JSONB), :overall_score,
                         :confidence_score, :clarity_score, :pace_score, :feedback, :duration)
                """),
                row
            )
        return row["id"]

    def list_for_student(self, student_id: int) -> List[dict]:
        return execute_raw_sql("""
            SELECT id, type, overall_score, confidence_score, clarity_score, pace_score,
                   feedback, duration, created_at
            FROM interview_sessions
            WHERE student_id = :id ORDER BY created_at DESC
        """, {"id": student_id})


def get_interview_repository() -> InterviewSessionRepository:
    return InterviewSessionRepository()
