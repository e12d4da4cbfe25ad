"""
Voice Interview Routes

POST /interviews/voice/start - Start a voice call (requires VAPI_API_KEY)
POST /interviews/voice/events - Relay a call event (transcript, speech, call status)
POST /interviews/voice/stop - End the call
GET /interviews/voice - Current call state
GET /interviews/voice/transcripts - Archived transcripts
GET /interviews/voice/transcripts/{id} - One archived transcript

When a call finishes its transcript is archived in MongoDB and the
interview is saved to history, once.
"""

import logging
from typing import List

from bson.errors import InvalidId
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError

from careerhub.core.auth import get_current_user
from careerhub.core.errors import SessionStateError
from careerhub.services.interview_repository import InterviewSessionRepository, get_interview_repository
from careerhub.services.mongo_service import VoiceTranscriptService, get_transcript_service
from careerhub.services.session_store import SessionStore, get_session_store
from careerhub.services.voice_interviewer import VoiceCallClient, VoiceInterviewer, get_voice_call_client
from careerhub.schemas.schemas import (
    CallStatus, StartVoiceInterviewRequest, TranscriptEntry, VoiceInterviewResponse
)

router = APIRouter(prefix="/interviews/voice", tags=["Voice Interviews"])
logger = logging.getLogger(__name__)


@router.post("/start", response_model=VoiceInterviewResponse)
async def start_voice_interview(
    data: StartVoiceInterviewRequest,
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store),
    repository: InterviewSessionRepository = Depends(get_interview_repository),
    transcripts: VoiceTranscriptService = Depends(get_transcript_service),
    call_client: VoiceCallClient = Depends(get_voice_call_client)
):
    """
    Start a voice interview with the given questions, or the default
    prompts when none are given.
    """
    user_id = user["user_id"]
    interviewer = store.voice_for(user_id, VoiceInterviewer)
    interviewer.call_client = call_client

    async def archive(transcript: List[TranscriptEntry]) -> None:
        call_id = (interviewer.call or {}).get("id")
        try:
            await run_in_threadpool(transcripts.insert, user_id, transcript, call_id=call_id)
            logger.info("Archived voice transcript for user %s (%d turns)", user_id, len(transcript))
        except PyMongoError:
            logger.exception("Archiving voice transcript failed for user %s", user_id)
        try:
            await run_in_threadpool(repository.save, user_id, interviewer.outcome())
        except SQLAlchemyError:
            logger.exception("Saving voice interview failed for user %s", user_id)

    interviewer.on_finish = archive
    await interviewer.start(data.questions)
    return interviewer.snapshot()


def _require_interviewer(store: SessionStore, user_id: int) -> VoiceInterviewer:
    interviewer = store.get_voice(user_id)
    if interviewer is None or interviewer.status is CallStatus.inactive:
        raise SessionStateError("No voice interview in progress")
    return interviewer


@router.post("/events", response_model=VoiceInterviewResponse)
async def voice_event(
    event: dict = Body(...),
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store)
):
    """Apply one event from the voice provider to the current call."""
    interviewer = _require_interviewer(store, user["user_id"])
    await interviewer.handle_event(event)
    return interviewer.snapshot()


@router.post("/stop", response_model=VoiceInterviewResponse)
async def stop_voice_interview(
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store)
):
    interviewer = _require_interviewer(store, user["user_id"])
    await interviewer.stop()
    return interviewer.snapshot()


@router.get("", response_model=VoiceInterviewResponse)
async def voice_interview_state(
    user: dict = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store)
):
    interviewer = store.get_voice(user["user_id"])
    if interviewer is None:
        return VoiceInterviewResponse(status=CallStatus.inactive)
    return interviewer.snapshot()


@router.get("/transcripts", response_model=List[dict])
async def list_transcripts(
    limit: int = Query(20, ge=1, le=100),
    user: dict = Depends(get_current_user),
    transcripts: VoiceTranscriptService = Depends(get_transcript_service)
):
    """Archived voice transcripts, newest first."""
    return await run_in_threadpool(transcripts.get_by_user, user["user_id"], limit)


@router.get("/transcripts/{transcript_id}", response_model=dict)
async def get_transcript(
    transcript_id: str,
    user: dict = Depends(get_current_user),
    transcripts: VoiceTranscriptService = Depends(get_transcript_service)
):
    try:
        doc = await run_in_threadpool(transcripts.get_by_id, transcript_id)
    except InvalidId:
        doc = None

    # Other users' transcripts are reported as missing
    if doc is None or doc.get("user_id") != user["user_id"]:
        raise HTTPException(status_code=404, detail="Transcript not found")
    return doc
