from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from loanhub.core.db import Base

LOAN_CATEGORIES = (
    "Two Wheeler",
    "Four Wheeler",
    "Commercial Vehicle",
    "Electric Vehicle",
    "Used Vehicle",
    "Other",
)

class Loan(Base):
    __tablename__ = "loans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    loan_type: Mapped[str] = mapped_column(String(160), index=True)
    category: Mapped[str] = mapped_column(String(40), default="Four Wheeler", index=True)
    description: Mapped[str] = mapped_column(Text)
    interest_rate: Mapped[float] = mapped_column(Numeric(5, 2))
    maximum_amount: Mapped[float] = mapped_column(Numeric(12, 2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
