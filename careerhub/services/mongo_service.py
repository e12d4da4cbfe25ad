"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. voice_transcripts - Transcript of each finished voice interview
"""

from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pymongo.collection import Collection

from careerhub.db.mongodb import get_collection, COLLECTIONS
from careerhub.schemas.schemas import TranscriptEntry


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_docs(docs: list) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# VOICE TRANSCRIPTS COLLECTION
# One document per finished voice interview
# ============================================================

class VoiceTranscriptService:
    """
    Handles voice transcript storage.
    Written once when a voice call finishes.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["voice_transcripts"])

    def insert(self, user_id: int, transcript: List[TranscriptEntry], call_id: str = None) -> str:
        """
        Insert a transcript.

        Returns:
            MongoDB ObjectId as string
        """
        doc = {
            "user_id": user_id,
            "call_id": call_id,
            "messages": [entry.model_dump() for entry in transcript],
            "turns": len(transcript),
            "created_at": datetime.now(timezone.utc),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, mongo_id: str) -> Optional[dict]:
        doc = self.collection.find_one({"_id": ObjectId(mongo_id)})
        return serialize_doc(doc)

    def get_by_user(self, user_id: int, limit: int = 20) -> List[dict]:
        """Most recent transcripts for a user."""
        docs = self.collection.find({"user_id": user_id}).sort("created_at", -1).limit(limit)
        return serialize_docs(list(docs))


def get_transcript_service() -> VoiceTranscriptService:
    return VoiceTranscriptService()
