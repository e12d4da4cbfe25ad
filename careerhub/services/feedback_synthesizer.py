"""
Feedback Synthesizer - turns a finished answer set into a FeedbackReport.

Two backends behind one interface:
- RandomFeedbackSynthesizer: mock scorer. Samples scores and phrases from
  fixed vocabularies and ignores answer content. Stand-in for a real scorer.
- AIFeedbackSynthesizer: scores each answer with DeepSeek, falling back to a
  length-based score when a single call fails.

The state machine only sees FeedbackSynthesizer, so the backend can be
swapped through settings.feedback_backend.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool

from careerhub.core.config import get_settings
from careerhub.schemas.schemas import FeedbackReport, InterviewMode, QuestionFeedback

logger = logging.getLogger(__name__)


# ============================================================
# VOCABULARIES
# ============================================================

STRENGTHS = [
    "Clear and structured response",
    "Good use of specific examples",
    "Confident delivery",
    "Strong technical vocabulary",
    "Stayed focused on the question",
    "Showed ownership of outcomes",
    "Explained reasoning step by step",
    "Concise and to the point",
]

IMPROVEMENTS = [
    "Add more concrete metrics or results",
    "Structure the answer using the STAR method",
    "Slow down and pause between key points",
    "Connect the answer back to the role",
    "Mention trade-offs you considered",
    "Reduce filler words",
    "Give a short summary at the end",
    "Go one level deeper on the technical details",
]

QUESTION_FEEDBACK = [
    "Solid answer that covers the main points.",
    "Good foundation; a concrete example would make it stronger.",
    "Well reasoned, though the conclusion could be sharper.",
    "Relevant answer with room for more depth.",
    "Clear explanation that stays on topic.",
]

SESSION_SUMMARIES = [
    "Great job! You demonstrated strong communication skills and good technical knowledge.",
    "Solid performance overall. Your answers were relevant and mostly well structured.",
    "Good effort. You showed understanding of the topics, with room to add more detail.",
    "Impressive session. You stayed composed and gave thoughtful answers throughout.",
]

RECOMMENDATIONS = [
    "Practice the STAR method for behavioral questions",
    "Prepare two or three stories that show leadership",
    "Review core data structures and their complexities",
    "Record yourself to check pace and filler words",
    "Research the company before each interview",
    "Practice explaining technical concepts to a non-technical audience",
    "Do timed mock interviews with a peer",
    "Keep a list of measurable achievements to reference",
    "Work on whiteboarding system design problems",
]

# Tiered summaries for the AI backend, keyed by minimum overall score
TIERED_FEEDBACK = [
    (80, "Excellent performance! You demonstrated strong knowledge and communication skills throughout the interview.", [
        "Continue practicing with more advanced questions",
        "Focus on leadership and behavioral scenarios",
        "Practice whiteboarding complex problems",
    ]),
    (60, "Good performance with room for improvement. You showed solid understanding but could enhance your responses.", [
        "Practice providing more concrete examples",
        "Work on structuring answers using frameworks like STAR",
        "Study common interview patterns for your field",
        "Practice explaining technical concepts clearly",
    ]),
    (40, "Fair performance. Focus on improving response quality and providing more relevant content.", [
        "Study fundamental concepts more thoroughly",
        "Practice basic interview questions extensively",
        "Work on communication and presentation skills",
        "Prepare specific examples from your experience",
        "Practice explaining your thought process step-by-step",
    ]),
    (0, "Needs significant improvement. Consider reviewing fundamental concepts and practicing more before real interviews.", [
        "Review basic concepts in your field",
        "Practice with simple questions first",
        "Work on providing relevant answers to questions asked",
        "Focus on clear communication",
        "Consider taking additional courses or training",
        "Practice mock interviews with peers or mentors",
    ]),
]


def _dedupe(items: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _mean(values: Sequence[int]) -> int:
    if not values:
        return 0
    return int(round(sum(values) / len(values)))


# ============================================================
# INTERFACE
# ============================================================

class FeedbackSynthesizer(ABC):
    """Produces a FeedbackReport from the full question/answer lists."""

    @abstractmethod
    async def synthesize(
        self,
        questions: Sequence[str],
        answers: Sequence[str],
        mode: Optional[InterviewMode] = None
    ) -> FeedbackReport:
        ...


# ============================================================
# MOCK BACKEND
# ============================================================

class RandomFeedbackSynthesizer(FeedbackSynthesizer):
    """
    Mock scorer. Scores are sampled, not derived from the answers:
    per-question, confidence, clarity and correctness in [70, 100],
    overall in [75, 100], pace in [80, 100].
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _pick(self, vocabulary: Sequence[str], low: int, high: int) -> List[str]:
        return self.rng.sample(list(vocabulary), self.rng.randint(low, high))

    async def synthesize(self, questions, answers, mode=None) -> FeedbackReport:
        per_question = [
            QuestionFeedback(
                question=question,
                answer=answer,
                score=self.rng.randint(70, 100),
                feedback_text=self.rng.choice(QUESTION_FEEDBACK),
                strengths=self._pick(STRENGTHS, 2, 4),
                improvements=self._pick(IMPROVEMENTS, 2, 4),
            )
            for question, answer in zip(questions, answers)
        ]

        return FeedbackReport(
            overall_score=self.rng.randint(75, 100),
            confidence_score=self.rng.randint(70, 100),
            clarity_score=self.rng.randint(70, 100),
            correctness_score=self.rng.randint(70, 100),
            pace_score=self.rng.randint(80, 100),
            per_question=per_question,
            overall_feedback=self.rng.choice(SESSION_SUMMARIES),
            recommendations=_dedupe(self._pick(RECOMMENDATIONS, 4, 7)),
        )


# ============================================================
# DEEPSEEK BACKEND
# ============================================================

class AIFeedbackSynthesizer(FeedbackSynthesizer):
    """
    Scores every answer with DeepSeek.

    Empty answers score 0 without an AI call. A failed call for one answer
    gets a length-based fallback score; the rest of the session still runs.
    """

    def __init__(self, client):
        self.client = client

    @staticmethod
    def _fallback(question: str, answer: str) -> dict:
        score = 50 if len(answer) > 20 else 20
        return {
            "score": score,
            "confidence_score": score,
            "clarity_score": score,
            "content_score": score,
            "feedback": "AI analysis temporarily unavailable. Basic scoring applied based on response length.",
            "strengths": ["Provided detailed response"] if len(answer) > 50 else ["Attempted to answer"],
            "improvements": ["Add more specific details", "Provide concrete examples"],
        }

    async def _analyze(self, question: str, answer: str, category: str) -> dict:
        try:
            return await run_in_threadpool(self.client.analyze_answer, question, answer, category)
        except Exception as e:
            logger.warning("Answer analysis failed, using fallback score: %s", e)
            return self._fallback(question, answer)

    async def synthesize(self, questions, answers, mode=None) -> FeedbackReport:
        category = mode.value if isinstance(mode, InterviewMode) else str(mode or "general")
        per_question = []
        scores, confidence, clarity, content = [], [], [], []

        for question, answer in zip(questions, answers):
            if not answer or not answer.strip():
                per_question.append(QuestionFeedback(
                    question=question,
                    answer=answer or "",
                    score=0,
                    feedback_text="No answer provided",
                    improvements=["Provide an answer to the question", "Take time to think before responding"],
                ))
                continue

            analysis = await self._analyze(question, answer, category)
            per_question.append(QuestionFeedback(
                question=question,
                answer=answer,
                score=analysis["score"],
                feedback_text=analysis["feedback"],
                strengths=_dedupe(analysis["strengths"]),
                improvements=_dedupe(analysis["improvements"]),
            ))
            scores.append(analysis["score"])
            confidence.append(analysis["confidence_score"])
            clarity.append(analysis["clarity_score"])
            content.append(analysis["content_score"])

        # Skipped answers count as zero towards the overall score
        overall = int(round(sum(scores) / len(answers))) if answers else 0
        avg_confidence = _mean(confidence)
        avg_clarity = _mean(clarity)

        summary, recommendations = next(
            (text, recs) for threshold, text, recs in TIERED_FEEDBACK if overall >= threshold
        )

        return FeedbackReport(
            overall_score=overall,
            confidence_score=avg_confidence,
            clarity_score=avg_clarity,
            correctness_score=_mean(content),
            pace_score=int(round((avg_confidence + avg_clarity) / 2)),
            per_question=per_question,
            overall_feedback=summary,
            recommendations=list(recommendations),
        )


def get_feedback_synthesizer() -> FeedbackSynthesizer:
    """Build the synthesizer selected by settings.feedback_backend."""
    backend = get_settings().feedback_backend.lower()
    if backend == "deepseek":
        from careerhub.services.deepseek_client import get_deepseek_client
        return AIFeedbackSynthesizer(get_deepseek_client())
    if backend != "mock":
        logger.warning("Unknown feedback backend '%s', using mock scorer", backend)
    return RandomFeedbackSynthesizer()
