"""Interview questions.

Open-ended questions grouped by category, and LLM-generated follow-ups
that dig into the reasoning behind a response.
"""
import logging
import random
from typing import Optional

from hlsa.config import get_settings
from hlsa.services.judges import CompletionClient

logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "Tell me about a challenging situation you faced and how you handled it."

QUESTION_BANK: dict[str, tuple[str, ...]] = {
    "Workplace Conflicts": (
        "How would you handle a disagreement with a colleague about a project approach?",
        "What would you do if your manager assigned you a task that you believe is outside your job description?",
        "How would you address a team member who consistently misses deadlines?",
    ),
    "Emergency Responses": (
        "How would you respond if a critical system went down during a major client presentation?",
        "What would you do if you discovered a major security vulnerability just before a product launch?",
        "How would you handle an unexpected crisis that requires immediate attention?",
    ),
    "Ethical Dilemmas": (
        "What would you do if you noticed a friend taking credit for someone else's work?",
        "How would you react if a customer offered you a gift in exchange for special treatment?",
        "Describe a time when doing the right thing cost you something.",
    ),
    "Creative Problem Solving": (
        "How would you organize a memorable event with almost no budget?",
        "What is an everyday object you would redesign, and why?",
        "How would you explain a complicated idea to a ten-year-old?",
    ),
    "Personal Growth": (
        "What is a belief you held strongly a few years ago that you no longer hold?",
        "Tell me about a mistake that changed the way you work.",
        "What habit have you tried to build, and how did it go?",
    ),
    "Leadership Challenges": (
        "How would you motivate a team that just lost an important project?",
        "What would you do if two of your best people refused to work together?",
        "Describe how you would take over a team that liked their previous leader.",
    ),
    "Technical Decisions": (
        "How would you decide between rewriting a legacy system and patching it?",
        "Tell me about a tool you stopped using and why.",
        "How do you handle a technical decision when the data is incomplete?",
    ),
    "Cultural Sensitivity": (
        "How would you approach working with a team from a culture you know little about?",
        "Describe a misunderstanding caused by different expectations, and how it was resolved.",
        "What would you change in a meeting where some people never speak up?",
    ),
    "Future Planning": (
        "Where do you see yourself in five years, and what might derail that plan?",
        "How do you decide what to learn next?",
        "What would you do with an unplanned free year?",
    ),
    "Interpersonal Relationships": (
        "How do you repair a relationship after an argument?",
        "Tell me about someone who changed your mind about something important.",
        "How do you tell a close friend something they do not want to hear?",
    ),
}

FOLLOW_UP_PROMPT = (
    "You are an interviewer conducting a deep conversation. Generate a thoughtful "
    "follow-up question (depth level {depth}/3) based on the original question and "
    "the response. The follow-up should dig deeper into the reasoning, experiences, "
    "or values behind the response."
)


class QuestionBank:
    """Random access to the interview questions."""

    def __init__(
        self,
        questions: Optional[dict[str, tuple[str, ...]]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.questions = questions if questions is not None else QUESTION_BANK
        self._rng = rng or random.Random()

    @property
    def categories(self) -> list[str]:
        return list(self.questions)

    def random_question(self, category: Optional[str] = None) -> tuple[str, Optional[str]]:
        """Pick a question.

        Args:
            category: Category to draw from; a random category when omitted

        Returns:
            Tuple of (question, category); the default question with
            category None when the category is unknown or empty
        """
        if category is None:
            if not self.questions:
                return DEFAULT_QUESTION, None
            category = self._rng.choice(self.categories)

        pool = self.questions.get(category, ())
        if not pool:
            return DEFAULT_QUESTION, None
        return self._rng.choice(pool), category


class FollowUpGenerator:
    """Asks the language model for a follow-up question."""

    def __init__(self, client: CompletionClient):
        self.client = client
        self.settings = get_settings()

    async def generate(self, original_question: str, user_response: str, depth: int = 1) -> str:
        """Generate a follow-up question.

        Args:
            original_question: The question that was answered
            user_response: The user's answer
            depth: Follow-up depth, 1 to 3

        Returns:
            Follow-up question, or an empty string if the model call fails
        """
        depth = min(max(depth, 1), 3)
        messages = [
            {"role": "system", "content": FOLLOW_UP_PROMPT.format(depth=depth)},
            {
                "role": "user",
                "content": f"Original question: {original_question}\n\nResponse: {user_response}",
            },
        ]
        try:
            reply = await self.client.complete(
                messages=messages,
                temperature=self.settings.follow_up_temperature,
                max_tokens=self.settings.follow_up_max_tokens,
            )
        except Exception as e:
            logger.warning(f"Error generating follow-up question: {e!r}")
            return ""
        return reply.strip()


# Singleton instance
_question_bank: Optional[QuestionBank] = None


def get_question_bank() -> QuestionBank:
    """Get or create question bank singleton."""
    global _question_bank
    if _question_bank is None:
        _question_bank = QuestionBank()
    return _question_bank
