"""
DeepSeek API Client

DeepSeek uses OpenAI-compatible API, so we use the openai library.

AI is used for two things only:
- scoring a single interview answer (AIFeedbackSynthesizer)
- generating questions for a custom interview

COST OPTIMIZATION:
- Use deepseek-chat model (cheapest)
- Keep prompts short and structured
- Strict JSON output
"""
import json
import logging
from typing import List

from openai import OpenAI

from careerhub.core.config import get_settings
from careerhub.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _clamp_score(value) -> int:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return 0


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v and str(v).strip()]


def validate_answer_analysis(data: dict) -> dict:
    """
    Validate and sanitize an answer analysis.
    Ensures all fields exist and every score sits in [0, 100].
    """
    return {
        "score": _clamp_score(data.get("score")),
        "confidence_score": _clamp_score(data.get("confidence_score")),
        "clarity_score": _clamp_score(data.get("clarity_score")),
        "content_score": _clamp_score(data.get("content_score")),
        "feedback": str(data.get("feedback") or "").strip() or "No feedback returned.",
        "strengths": _string_list(data.get("strengths")),
        "improvements": _string_list(data.get("improvements")),
    }


class DeepSeekClient:
    """
    Wrapper for DeepSeek API with cost-optimized methods.
    """

    def __init__(self):
        settings = get_settings()
        if not settings.deepseek_api_key:
            raise ConfigurationError("DeepSeek API key not configured. Set DEEPSEEK_API_KEY.")
        self.client = OpenAI(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url
        )
        # Use the cheapest model
        self.model = "deepseek-chat"

    def _call_api(self, system_prompt: str, user_content: str, max_tokens: int = 1000) -> str:
        """
        Internal method to call DeepSeek API.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content}
            ],
            max_tokens=max_tokens,
            temperature=0.1  # Low temp for consistent structured output
        )
        return response.choices[0].message.content

    def _extract_json(self, text: str):
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def analyze_answer(self, question: str, answer: str, category: str) -> dict:
        """
        Score one interview answer.
        """
        system_prompt = """You are an interview coach. Evaluate the candidate's answer and return ONLY valid JSON.
Output format:
{
  "score": number 0-100,
  "confidence_score": number 0-100,
  "clarity_score": number 0-100,
  "content_score": number 0-100,
  "feedback": "one or two sentences",
  "strengths": ["string"],
  "improvements": ["string"]
}
Judge correctness and relevance to the question. Return ONLY the JSON, no explanation."""

        user_content = f"Category: {category}\nQuestion: {question}\nAnswer: {answer}"
        response = self._call_api(system_prompt, user_content, max_tokens=500)
        return validate_answer_analysis(self._extract_json(response))

    def generate_questions(
        self,
        role: str,
        level: str,
        techstack: List[str],
        focus: str = "balanced",
        amount: int = 5
    ) -> List[str]:
        """
        Generate interview questions for a role.
        Questions are read aloud by the voice interviewer, so no special characters.
        """
        system_prompt = """You prepare questions for a job interview.
The questions are read by a voice assistant: do not use "/" or "*" or other special characters.
Return ONLY JSON formatted like: {"questions": ["Question 1", "Question 2"]}"""

        user_content = (
            f"Role: {role}\n"
            f"Experience level: {level}\n"
            f"Tech stack: {', '.join(techstack)}\n"
            f"Lean towards: {focus} questions\n"
            f"Number of questions: {amount}"
        )
        response = self._call_api(system_prompt, user_content, max_tokens=800)
        data = self._extract_json(response)

        questions = data.get("questions", []) if isinstance(data, dict) else data
        if not isinstance(questions, list):
            return []
        cleaned = [" ".join(str(q).split()) for q in questions]
        return [q for q in cleaned if q][:amount]

    def test_connection(self) -> bool:
        """Test if DeepSeek API is reachable"""
        try:
            response = self._call_api(
                "You are a test assistant.",
                "Reply with exactly: OK",
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.warning("DeepSeek connection failed: %s", e)
            return False


# Singleton instance
_deepseek_client: DeepSeekClient = None


def get_deepseek_client() -> DeepSeekClient:
    """Get or create DeepSeek client (singleton pattern)"""
    global _deepseek_client
    if _deepseek_client is None:
        _deepseek_client = DeepSeekClient()
    return _deepseek_client
