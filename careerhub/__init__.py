"""
CareerHub
Interview practice and admin live feed for a placement platform.

Architecture:
- InterviewSession: local Q&A state machine, feedback from a FeedbackSynthesizer
- VoiceInterviewer: third-party voice call with its own transcript
- ActivityHub / LiveActivityClient: admin live feed over WebSocket
- PostgreSQL: interview history; MongoDB: voice transcripts
"""

__version__ = "1.0.0"
