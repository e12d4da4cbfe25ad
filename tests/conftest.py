"""Shared fixtures: in-memory collaborators and an app client with dependency overrides."""

import random

import pytest
from fastapi.testclient import TestClient

import careerhub.main as main_module
from careerhub.core.auth import get_current_user
from careerhub.core.config import get_settings
from careerhub.services.activity_hub import ActivityHub, get_activity_hub
from careerhub.services.feedback_synthesizer import RandomFeedbackSynthesizer, get_feedback_synthesizer
from careerhub.services.interview_repository import get_interview_repository
from careerhub.services.mongo_service import get_transcript_service
from careerhub.services.session_store import SessionStore, get_session_store
from careerhub.services.voice_interviewer import get_voice_call_client

from tests.fakes import STUDENT, FakeCallClient, FakeRepository, FakeTranscripts


class AuthState:
    """Who the overridden get_current_user returns."""

    def __init__(self):
        self.user = dict(STUDENT)


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "synthesis_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "feedback_backend", "mock")
    monkeypatch.setattr(settings, "vapi_api_key", "")
    return settings


@pytest.fixture
def auth():
    return AuthState()


@pytest.fixture
def hub():
    return ActivityHub(history_limit=50)


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def transcripts():
    return FakeTranscripts()


@pytest.fixture
def call_client():
    return FakeCallClient()


@pytest.fixture
def client(monkeypatch, auth, hub, store, repository, transcripts, call_client):
    monkeypatch.setattr(main_module, "init_postgres_schema", lambda: None)
    monkeypatch.setattr(main_module, "init_mongo_indexes", lambda: None)

    app = main_module.app
    app.dependency_overrides.update({
        get_current_user: lambda: auth.user,
        get_activity_hub: lambda: hub,
        get_session_store: lambda: store,
        get_interview_repository: lambda: repository,
        get_transcript_service: lambda: transcripts,
        get_voice_call_client: lambda: call_client,
        get_feedback_synthesizer: lambda: RandomFeedbackSynthesizer(random.Random(7)),
    })
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
