"""
Pydantic Schemas - Request/Response Validation

All API request/response schemas and socket frames in one file for simplicity.
Interview and live-feed models serialize with camelCase keys to match the
web client's contract.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List, Literal, Union
from datetime import datetime, timezone
from enum import Enum
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for models exchanged with the web client (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    recruiter = "recruiter"
    admin = "admin"


class InterviewMode(str, Enum):
    technical = "technical"
    behavioral = "behavioral"
    hr = "hr"
    custom = "custom"


class InterviewState(str, Enum):
    setup = "setup"
    active = "active"
    analyzing = "analyzing"
    feedback = "feedback"


class InterviewBackend(str, Enum):
    local = "local"
    voice = "voice"


class CallStatus(str, Enum):
    inactive = "inactive"
    connecting = "connecting"
    active = "active"
    finished = "finished"


class ActivityCategory(str, Enum):
    login = "login"
    registration = "registration"
    application = "application"
    system = "system"


class Severity(str, Enum):
    success = "success"
    warning = "warning"
    error = "error"


class ChannelHealth(str, Enum):
    connecting = "connecting"
    healthy = "healthy"
    degraded = "degraded"
    failed = "failed"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=100)
    role: UserRole = UserRole.student

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class QuestionFeedback(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    question: str
    answer: str = ""
    score: int = Field(..., ge=0, le=100)
    feedback_text: str
    strengths: List[str] = []
    improvements: List[str] = []


class FeedbackReport(CamelModel):
    """Result of one synthesis run. Frozen once built."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    overall_score: int = Field(..., ge=0, le=100)
    confidence_score: int = Field(..., ge=0, le=100)
    clarity_score: int = Field(..., ge=0, le=100)
    correctness_score: int = Field(..., ge=0, le=100)
    pace_score: int = Field(..., ge=0, le=100)
    per_question: List[QuestionFeedback] = []
    overall_feedback: str
    recommendations: List[str] = []


class TranscriptEntry(CamelModel):
    role: Literal["assistant", "user"]
    content: str


class InterviewOutcome(CamelModel):
    """Common shape produced by both interview backends."""
    backend: InterviewBackend
    mode: Optional[InterviewMode] = None
    transcript: List[TranscriptEntry] = []
    feedback: Optional[FeedbackReport] = None
    duration_seconds: int = 0


class StartInterviewRequest(CamelModel):
    mode: InterviewMode
    questions: Optional[List[str]] = None


class SubmitAnswerRequest(CamelModel):
    answer: str


class InterviewSessionResponse(CamelModel):
    mode: Optional[InterviewMode] = None
    state: InterviewState
    questions: List[str] = []
    current_index: int = 0
    current_question: Optional[str] = None
    answers: List[str] = []
    feedback: Optional[FeedbackReport] = None


class QuestionListResponse(CamelModel):
    mode: InterviewMode
    questions: List[str]


class GenerateQuestionsRequest(CamelModel):
    role: str = Field(..., min_length=1)
    level: str = Field(..., min_length=1)
    techstack: List[str] = Field(..., min_length=1)
    focus: str = "balanced"
    amount: int = Field(5, ge=1, le=20)


class InterviewHistoryItem(CamelModel):
    id: str
    type: str
    overall_score: Optional[int] = None
    confidence_score: Optional[int] = None
    clarity_score: Optional[int] = None
    pace_score: Optional[int] = None
    feedback: Optional[str] = None
    duration: Optional[int] = None
    created_at: Optional[datetime] = None


# ============================================================
# VOICE INTERVIEW SCHEMAS
# ============================================================

class StartVoiceInterviewRequest(CamelModel):
    questions: List[str] = []


class VoiceInterviewResponse(CamelModel):
    status: CallStatus
    call_id: Optional[str] = None
    is_speaking: bool = False
    last_message: str = ""
    transcript: List[TranscriptEntry] = []


# ============================================================
# LIVE ACTIVITY SCHEMAS
# ============================================================

class ActivityEvent(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    category: ActivityCategory
    actor: str
    description: str
    timestamp: datetime = Field(default_factory=utcnow)
    severity: Severity = Severity.success


class LiveStats(CamelModel):
    total_users: int = 0
    active_today: int = 0
    total_applications: int = 0
    system_uptime_percent: float = 100.0


class LiveStatsUpdate(CamelModel):
    """Partial stats; only fields present in the payload are merged."""
    total_users: Optional[int] = None
    active_today: Optional[int] = None
    total_applications: Optional[int] = None
    system_uptime_percent: Optional[float] = None


class ActivityFrame(CamelModel):
    type: Literal["activity"] = "activity"
    activity_type: ActivityCategory
    user: str
    action: str
    status: Severity = Severity.success


class StatsUpdateFrame(CamelModel):
    type: Literal["stats_update"] = "stats_update"
    stats: LiveStatsUpdate


class AnnouncementFrame(CamelModel):
    type: Literal["announcement"] = "announcement"
    title: str
    message: str
    priority: Literal["low", "normal", "high"] = "normal"
    timestamp: datetime = Field(default_factory=utcnow)


LiveFrame = Annotated[
    Union[ActivityFrame, StatsUpdateFrame, AnnouncementFrame],
    Field(discriminator="type"),
]
live_frame_adapter = TypeAdapter(LiveFrame)


class AnnouncementRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: Literal["low", "normal", "high"] = "normal"


class DeliveryResponse(CamelModel):
    delivered: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
