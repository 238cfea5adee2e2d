from datetime import date
from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from loanhub.core.db import Base

# one row per user per calendar day; older rows simply stop being read
class ChatUsage(Base):
    __tablename__ = "chat_usage"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_chat_usage_user_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    day: Mapped[date] = mapped_column(Date, index=True)
    count: Mapped[int] = mapped_column(Integer, default=0)
