"""
Schemas module - Request/Response schemas for API endpoints and socket frames.

All models live in careerhub.schemas.schemas:
- Interview: InterviewSessionResponse, FeedbackReport, InterviewOutcome
- Voice: VoiceInterviewResponse, TranscriptEntry
- Live feed: ActivityEvent, LiveStats, ActivityFrame, StatsUpdateFrame, AnnouncementFrame
"""
