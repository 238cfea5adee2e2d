from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from loanhub.core.db import Base

PENDING, APPROVED, REJECTED = 0, 1, 2
STATUS_LABELS = {PENDING: "Pending", APPROVED: "Approved", REJECTED: "Rejected"}

class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    user_name: Mapped[str] = mapped_column(String(120))
    loan_type: Mapped[str] = mapped_column(String(160))
    income: Mapped[float] = mapped_column(Numeric(12, 2))
    purchase_price: Mapped[float] = mapped_column(Numeric(12, 2))
    address: Mapped[str] = mapped_column(Text, default="")
    loan_status: Mapped[int] = mapped_column(Integer, default=PENDING, index=True)
    submission_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
