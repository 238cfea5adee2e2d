import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loanhub.models.loan import Loan
from loanhub.models.loan_application import (
    APPROVED, PENDING, REJECTED, STATUS_LABELS, LoanApplication,
)
from loanhub.models.user import User

logger = logging.getLogger(__name__)


def format_inr(amount) -> str:
    """Indian digit grouping: 1234567 -> '₹12,34,567'."""
    value = float(amount or 0)
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.2f}".partition(".")
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    digits = ",".join(groups + [tail])
    if frac.strip("0"):
        digits += "." + frac.rstrip("0")
    return f"₹{sign}{digits}"


def _status(app: LoanApplication) -> str:
    return STATUS_LABELS.get(app.loan_status, "Rejected")


def _status_counts(apps: list[LoanApplication]) -> dict:
    return {
        "pendingApplications": sum(1 for a in apps if a.loan_status == PENDING),
        "approvedApplications": sum(1 for a in apps if a.loan_status == APPROVED),
        "rejectedApplications": sum(1 for a in apps if a.loan_status == REJECTED),
    }


def get_database_context(db: Session, user_id: str | None, role: str) -> dict:
    """
    Live facts for the assistant prompt. A database error leaves whatever was
    gathered so far.
    """
    context: dict = {}
    try:
        loans = db.query(Loan).filter_by(is_active=True).order_by(Loan.id.asc()).all()
        context["availableLoans"] = [
            {
                "name": l.loan_type,
                "category": l.category,
                "description": l.description,
                "interestRate": f"{float(l.interest_rate):g}%",
                "maxAmount": format_inr(l.maximum_amount),
            }
            for l in loans
        ]
        context["totalLoans"] = len(loans)

        if role == "user" and user_id and user_id.isdigit():
            apps = (
                db.query(LoanApplication)
                .filter_by(user_id=int(user_id), is_active=True)
                .order_by(LoanApplication.id.asc())
                .all()
            )
            context["myApplications"] = [
                {
                    "loanType": a.loan_type,
                    "status": _status(a),
                    "income": format_inr(a.income),
                    "purchasePrice": format_inr(a.purchase_price),
                    "submissionDate": a.submission_date.strftime("%d/%m/%Y") if a.submission_date else "N/A",
                    "address": a.address,
                }
                for a in apps
            ]
            context["totalMyApplications"] = len(apps)
            context.update(_status_counts(apps))

        if role == "admin":
            apps = (
                db.query(LoanApplication)
                .filter_by(is_active=True)
                .order_by(LoanApplication.id.asc())
                .all()
            )
            context["totalUsers"] = db.query(User).filter_by(role="user", is_active=True).count()
            context["totalApplications"] = len(apps)
            context.update(_status_counts(apps))
            context["recentApplications"] = [
                {
                    "userName": a.user_name,
                    "loanType": a.loan_type,
                    "status": _status(a),
                    "purchasePrice": format_inr(a.purchase_price),
                }
                for a in apps[-5:]
            ]
    except SQLAlchemyError as exc:
        logger.error("Error gathering DB context: %s", exc)

    return context
