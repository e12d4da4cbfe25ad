"""
Interview Practice Routes

GET /interviews/questions/{mode} - Built-in questions for a mode
POST /interviews/questions/generate - Generate custom questions with AI
POST /interviews/sessions - Start an interview
GET /interviews/sessions/current - Current session state
POST /interviews/sessions/current/answers - Submit an answer
DELETE /interviews/sessions/current - Reset to setup
GET /interviews/history - Past interviews (both backends)
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from careerhub.core.auth import get_current_user
from careerhub.core.errors import SessionStateError
from careerhub.services.activity_hub import ActivityHub, get_activity_hub
from careerhub.services.deepseek_client import get_deepseek_client
from careerhub.services.feedback_synthesizer import FeedbackSynthesizer, get_feedback_synthesizer
from careerhub.services.interview_repository import InterviewSessionRepository, get_interview_repository
from careerhub.services.interview_session import InterviewSession
from careerhub.services.question_bank import get_questions
from careerhub.services.session_store import SessionStore, get_session_store
from careerhub.schemas.schemas import (
    ActivityCategory, GenerateQuestionsRequest, InterviewHistoryItem, InterviewMode,
    InterviewSessionResponse, InterviewState, QuestionListResponse, StartInterviewRequest,
    SubmitAnswerRequest
)

router = APIRouter(prefix="/interviews", tags=["Interviews"])
logger = logging.getLogger(__name__)


@router.get("/questions/{mode}", response_model=QuestionListResponse)
async def list_questions(mode: InterviewMode):
    """Built-in question set for a mode. `custom` has none."""
    return QuestionListResponse(mode=mode, questions=get_questions(mode))


@router.post("/questions/generate", response_model=QuestionListResponse)
async def generate_questions(data: GenerateQuestionsRequest, user: dict = Depends(get_current_user)):
    """
    Generate questions for a custom interview.
    Pass the result as `questions` when starting a `custom` session.
    """
    client = get_deepseek_client()
    try:
        questions = await run_in_threadpool(
            client.generate_questions, data.role, data.level, data.techstack, data.focus, data.amount
        )
    except Exception as e:
        logger.error("Question generation failed: %s", e)
        raise HTTPException(status_code=502, detail="Interview generation failed.")

    if not questions:
        raise HTTPException(status_code=500, detail="No interview questions generated.")

    return QuestionListResponse(mode=InterviewMode.custom, questions=questions)


@router.post("/sessions", response_model=InterviewSessionResponse)
async def start_session(
    data: StartInterviewRequest,
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store),
    synthesizer: FeedbackSynthesizer = Depends(get_feedback_synthesizer)
):
    """
    Start an interview. Starting while one is already running changes
    nothing and returns the running session.
    """
    session = store.local_for(user["user_id"], lambda: InterviewSession(synthesizer))
    session.start(data.mode, data.questions)
    return session.snapshot()


@router.get("/sessions/current", response_model=InterviewSessionResponse)
async def current_session(
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store)
):
    session = store.get_local(user["user_id"])
    if session is None:
        return InterviewSessionResponse(state=InterviewState.setup)
    return session.snapshot()


@router.post("/sessions/current/answers", response_model=InterviewSessionResponse)
async def submit_answer(
    data: SubmitAnswerRequest,
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store),
    repository: InterviewSessionRepository = Depends(get_interview_repository),
    hub: ActivityHub = Depends(get_activity_hub)
):
    """
    Submit the answer to the current question.

    The last answer triggers feedback synthesis; the response then carries
    the feedback report and the interview is saved to history.
    """
    session = store.get_local(user["user_id"])
    if session is None:
        raise SessionStateError("No interview in progress")

    next_question = await session.submit_answer(data.answer)

    if next_question is None and session.state is InterviewState.feedback:
        report = session.feedback
        try:
            await run_in_threadpool(repository.save, user["user_id"], session.outcome())
        except SQLAlchemyError:
            logger.exception("Failed to save interview for user %s", user["user_id"])
        await hub.publish_activity(
            ActivityCategory.system,
            user.get("full_name") or user.get("email", "student"),
            f"Completed {session.mode.value} mock interview (score {report.overall_score})"
        )

    return session.snapshot()


@router.delete("/sessions/current", response_model=InterviewSessionResponse)
async def reset_session(
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store)
):
    """Discard the current interview and return to setup."""
    session = store.get_local(user["user_id"])
    if session is None:
        return InterviewSessionResponse(state=InterviewState.setup)
    session.reset()
    return session.snapshot()


@router.get("/history", response_model=List[InterviewHistoryItem])
async def interview_history(
    user: dict = Depends(get_current_user),
    repository: InterviewSessionRepository = Depends(get_interview_repository)
):
    """Past interviews, newest first."""
    rows = await run_in_threadpool(repository.list_for_student, user["user_id"])
    return [InterviewHistoryItem(**row) for row in rows]
