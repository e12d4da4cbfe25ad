"""
Question Bank - built-in interview prompts per mode.

`custom` has no built-in questions; they come from the caller
(typed in, or generated with DeepSeek).
"""

from typing import Dict, List, Optional

from careerhub.core.errors import InvalidModeError
from careerhub.schemas.schemas import InterviewMode


QUESTION_SETS: Dict[InterviewMode, List[str]] = {
    InterviewMode.technical: [
        "Explain the difference between let, const, and var in JavaScript.",
        "What is the time complexity of searching in a binary search tree?",
        "How would you implement a rate limiter for an API?",
        "Explain the concept of closure in programming.",
        "What are the differences between SQL and NoSQL databases?",
    ],
    InterviewMode.behavioral: [
        "Tell me about a time when you had to work with a difficult team member.",
        "Describe a challenging project you worked on and how you overcame obstacles.",
        "How do you handle stress and pressure in tight deadlines?",
        "Give an example of when you had to learn a new technology quickly.",
        "Tell me about a time when you failed and what you learned from it.",
    ],
    InterviewMode.hr: [
        "Why are you interested in this position?",
        "Where do you see yourself in 5 years?",
        "What are your greatest strengths and weaknesses?",
        "Why are you leaving your current job?",
        "What motivates you to do your best work?",
    ],
    InterviewMode.custom: [],
}

# Used by the voice interviewer when started without questions
DEFAULT_VOICE_QUESTIONS: List[str] = [
    "Tell me about yourself and your background.",
    "What are your key strengths and how do they relate to this role?",
    "Describe a challenging project you've worked on and how you overcame the obstacles.",
    "Why are you interested in this position and our company?",
    "What is your ideal work environment?",
]


def clean_questions(questions: Optional[List[str]]) -> List[str]:
    """Collapse whitespace and drop empty prompts."""
    if not questions:
        return []
    cleaned = [" ".join(str(q).split()) for q in questions]
    return [q for q in cleaned if q]


def get_questions(mode, custom: Optional[List[str]] = None) -> List[str]:
    """
    Return the question sequence for a mode.

    Built-in modes always use their fixed set. `custom` uses the
    supplied questions and falls back to an empty sequence.
    """
    try:
        mode = InterviewMode(mode)
    except ValueError:
        raise InvalidModeError(f"Unknown interview mode '{mode}'")

    if mode is InterviewMode.custom:
        return clean_questions(custom)
    return list(QUESTION_SETS[mode])
