import logging

from sqlalchemy import delete
from sqlalchemy.orm import Session

from loanhub.core.config import settings
from loanhub.models.faq import FAQ
from loanhub.services.embedding import ScoredMatch, embed, rank

logger = logging.getLogger(__name__)

DEFAULT_FAQS = [
    (
        "What types of vehicle loans are available?",
        "We offer several types of vehicle loans including: Car Loans (new and used), Two-Wheeler Loans, "
        "Commercial Vehicle Loans, and Electric Vehicle Loans. Each type has different interest rates and "
        "terms tailored to your needs.",
        "loan-types",
    ),
    (
        "What is the interest rate for vehicle loans?",
        "Our interest rates vary by loan type: Car Loans start from 7.5% p.a., Two-Wheeler Loans from 8.5% p.a., "
        "Commercial Vehicle Loans from 9% p.a., and Electric Vehicle Loans from 7% p.a. Actual rates depend on "
        "your credit score, loan amount, and tenure.",
        "interest-rates",
    ),
    (
        "What documents are required for a vehicle loan?",
        "Required documents include: Valid ID Proof (Aadhar/PAN/Passport), Address Proof, Income Proof "
        "(salary slips for last 3 months or ITR for self-employed), Bank Statements (last 6 months), "
        "Vehicle quotation from the dealer, and passport-sized photographs.",
        "documents",
    ),
    (
        "What is the maximum loan amount I can get?",
        "The maximum loan amount depends on the vehicle type and your eligibility. Generally, we finance up to "
        "90% of the on-road price for new vehicles and up to 75% for used vehicles. The exact amount is "
        "determined based on your income, credit score, and repayment capacity.",
        "eligibility",
    ),
    (
        "How do I apply for a vehicle loan?",
        "You can apply for a vehicle loan in 3 easy steps: 1) Log in to your account and go to 'View All Loans' "
        "to browse available options. 2) Select your preferred loan and click 'Apply'. 3) Fill in the "
        "application form with your details and submit. Our team will review and process your application "
        "within 2-3 business days.",
        "application",
    ),
    (
        "What is the loan tenure period?",
        "Loan tenure ranges from 1 to 7 years depending on the loan type. Car loans typically have a tenure of "
        "1-7 years, two-wheeler loans 1-5 years, and commercial vehicle loans 1-5 years. You can choose an "
        "EMI plan that suits your budget.",
        "tenure",
    ),
    (
        "Can I prepay or close my loan early?",
        "Yes, you can prepay or foreclose your vehicle loan. After completing 6 months of regular EMI payments, "
        "you can make a prepayment without any charges. Full loan closure is allowed after 12 months with "
        "minimal foreclosure charges as per RBI guidelines.",
        "prepayment",
    ),
    (
        "What is the eligibility criteria for a vehicle loan?",
        "Eligibility criteria include: Age between 21-65 years, minimum monthly income of ₹15,000 (salaried) "
        "or ₹2,00,000 annual income (self-employed), at least 1 year of work experience, and a good credit "
        "score (650+). Both salaried and self-employed individuals can apply.",
        "eligibility",
    ),
    (
        "How can I check my loan application status?",
        "You can check your loan application status by logging into your account and navigating to "
        "'Applied Loans' section. Here you'll see the real-time status of all your loan applications "
        "including: Pending, Under Review, Approved, or Rejected, along with any comments from our team.",
        "status",
    ),
    (
        "What happens if I miss an EMI payment?",
        "Missing an EMI payment may result in late payment charges and can affect your credit score. If you "
        "anticipate difficulty in making a payment, please contact our support team in advance. We may be "
        "able to offer a revised payment schedule or a brief grace period.",
        "payments",
    ),
]


def list_faqs(db: Session) -> list[FAQ]:
    return (
        db.query(FAQ)
        .filter_by(is_active=True)
        .order_by(FAQ.created_at.desc(), FAQ.id.desc())
        .all()
    )


def get_faq(db: Session, faq_id: int) -> FAQ | None:
    faq = db.get(FAQ, faq_id)
    if not faq or not faq.is_active:
        return None
    return faq


def create_faq(db: Session, question: str, answer: str, category: str | None = None) -> FAQ:
    faq = FAQ(
        question=question.strip(),
        answer=answer.strip(),
        category=(category or "general").strip() or "general",
        embedding=embed(question.strip()),
    )
    db.add(faq)
    db.commit()
    db.refresh(faq)
    logger.info("FAQ %s created (category=%s)", faq.id, faq.category)
    return faq


def update_faq(
    db: Session,
    faq_id: int,
    question: str | None = None,
    answer: str | None = None,
    category: str | None = None,
) -> FAQ | None:
    faq = get_faq(db, faq_id)
    if not faq:
        return None

    if question:
        faq.question = question.strip()
        faq.embedding = embed(faq.question)
    if answer:
        faq.answer = answer.strip()
    if category:
        faq.category = category.strip()

    db.commit()
    db.refresh(faq)
    logger.info("FAQ %s updated", faq.id)
    return faq


def delete_faq(db: Session, faq_id: int) -> bool:
    faq = get_faq(db, faq_id)
    if not faq:
        return False
    faq.is_active = False
    db.commit()
    logger.info("FAQ %s deleted", faq_id)
    return True


def seed_faqs(db: Session) -> int:
    """Replace every FAQ with the default vehicle-loan set."""
    db.execute(delete(FAQ))
    db.add_all(
        [
            FAQ(question=q, answer=a, category=c, embedding=embed(q))
            for q, a, c in DEFAULT_FAQS
        ]
    )
    db.commit()
    logger.info("Seeded %d FAQs", len(DEFAULT_FAQS))
    return len(DEFAULT_FAQS)


def search_faq(db: Session, query: str, k: int | None = None) -> list[ScoredMatch]:
    faqs = list_faqs(db)
    matches = rank(
        query,
        embed(query),
        faqs,
        embedding_weight=settings.FAQ_EMBEDDING_WEIGHT,
        text_weight=settings.FAQ_TEXT_WEIGHT,
        k=k if k is not None else settings.FAQ_TOP_K,
    )
    if matches:
        best = matches[0]
        logger.debug(
            "FAQ search %r: best=%s score=%.3f (%s) of %d",
            query, best.candidate.id, best.hybrid_score, best.confidence, len(faqs),
        )
    return matches
