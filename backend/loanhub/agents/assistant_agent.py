import json
import logging

from openai import RateLimitError
from sqlalchemy.orm import Session

from loanhub.core.security import CurrentUser
from loanhub.services.context import get_database_context
from loanhub.services.embedding import ScoredMatch
from loanhub.services.llm import complete

logger = logging.getLogger(__name__)

SYSTEM = """You are "Loan Assistant", a helpful AI chatbot for VehicleLoanHub, a vehicle loan management platform.

ROLE OF THE CURRENT USER: {role}
USER NAME: {name}

LIVE DATABASE INFORMATION:
{context}

RELATED FAQ ENTRIES (best match first):
{faqs}

INSTRUCTIONS:
- You answer questions about vehicle loans, the platform, loan applications, interest rates, eligibility, and more.
- Use the LIVE DATABASE INFORMATION above to answer factual questions (how many loans exist, what loans are available, application status, etc.).
- Prefer the RELATED FAQ ENTRIES when they answer the question; do not contradict them.
- If the user is a "user", help them understand their loan applications, guide them to apply, and answer loan-related questions.
- If the user is an "admin", help them with platform stats, user management insights, and loan application overviews.
- Be friendly, concise, and professional. Use emojis sparingly.
- Use bullet points or numbered lists when listing items.
- If you don't know something or it's not in the data, say so honestly.
- Never reveal raw database IDs, passwords, or sensitive internal data.
- Keep answers under 200 words unless the user asks for detailed information.
"""

EMPTY_REPLY = "I couldn't generate a response. Please try again."
BUSY_REPLY = "⚠️ AI service is temporarily busy. Please try again in a moment."


def _faq_lines(matches: list[ScoredMatch]) -> str:
    lines = [
        f"- Q: {m.candidate.question}\n  A: {m.candidate.answer} (confidence: {m.confidence})"
        for m in matches
        if m.confidence != "low"
    ]
    return "\n".join(lines) or "(none)"


def build_system_prompt(user: CurrentUser, db_context: dict, matches: list[ScoredMatch]) -> str:
    return SYSTEM.format(
        role=user.role,
        name=user.name or "Unknown",
        context=json.dumps(db_context, indent=2, ensure_ascii=False),
        faqs=_faq_lines(matches),
    )


def handle(db: Session, message: str, user: CurrentUser, matches: list[ScoredMatch]) -> dict:
    db_context = get_database_context(db, user.id, user.role)
    system = build_system_prompt(user, db_context, matches)

    try:
        text = complete(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": message},
            ],
            temperature=0.7,
            max_tokens=500,
        )
    except RateLimitError as exc:
        logger.warning("LLM rate limited: %s", exc)
        return {"message": BUSY_REPLY, "type": "error", "confidence": "low"}

    return {"message": text or EMPTY_REPLY, "type": "answer", "confidence": "high"}
