from loanhub.services.embedding import ScoredMatch

GREETING = (
    "👋 Hello! I'm your Vehicle Loan Assistant. Ask me anything about vehicle loans, "
    "interest rates, your applications, or the platform!"
)

SUGGESTIONS = [
    "What loans are available?",
    "What's the interest rate?",
    "How many loans are there?",
    "Show my application status",
    "How do I apply for a loan?",
]

FALLBACK = (
    "I couldn't find a close answer to that. "
    "Try asking about one of these topics, or rephrase your question."
)

MAX_RELATED = 3


def greeting() -> dict:
    return {"message": GREETING, "type": "greeting", "suggestions": list(SUGGESTIONS)}


def _related(matches: list[ScoredMatch]) -> list[str]:
    return [m.candidate.question for m in matches[1:] if m.confidence != "low"][:MAX_RELATED]


def handle(matches: list[ScoredMatch]) -> dict:
    """Answer straight from the ranked FAQs (no LLM)."""
    best = matches[0] if matches else None

    if best is None or best.confidence == "low":
        return {
            "message": FALLBACK,
            "type": "fallback",
            "confidence": "low",
            "suggestions": list(SUGGESTIONS),
            "score": round(best.hybrid_score, 3) if best else None,
        }

    faq = best.candidate
    if best.confidence == "high":
        text = faq.answer
    else:
        text = f"Here's the closest match I found for \"{faq.question}\":\n\n{faq.answer}"

    return {
        "message": text,
        "type": "answer",
        "confidence": best.confidence,
        "matched_question": faq.question,
        "score": round(best.hybrid_score, 3),
        "related_questions": _related(matches),
    }
