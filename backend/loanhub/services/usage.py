import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from loanhub.models.chat_usage import ChatUsage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Usage:
    count: int
    remaining: int


class UsageTracker:
    """
    Daily chatbot quota kept in the ``chat_usage`` table, one row per
    (user, day). A new day has no row yet, so the count starts over on its own
    and every app instance sharing the database sees the same numbers.

    A message is reserved before it is answered (``reserve``) and handed back
    when the answer fails (``release``).
    """

    def __init__(self, db: Session, limit: int, today: Callable[[], date] = date.today):
        self.db = db
        self.limit = limit
        self._today = today

    def _query(self, user_id: str, day: date):
        return self.db.query(ChatUsage).filter_by(user_id=user_id, day=day)

    def get_usage(self, user_id: str) -> Usage:
        row = self._query(user_id, self._today()).populate_existing().first()
        count = row.count if row else 0
        return Usage(count=count, remaining=max(0, self.limit - count))

    def _take(self, user_id: str, day: date) -> int:
        # single statement: concurrent requests cannot both take the last message
        return (
            self._query(user_id, day)
            .filter(ChatUsage.count < self.limit)
            .update({ChatUsage.count: ChatUsage.count + 1}, synchronize_session=False)
        )

    def reserve(self, user_id: str) -> Usage | None:
        """Take one message from today's quota; None when it is used up."""
        day = self._today()
        taken = self.limit > 0 and bool(self._take(user_id, day))

        if not taken and self.limit > 0 and self._query(user_id, day).first() is None:
            self.db.add(ChatUsage(user_id=user_id, day=day, count=1))
            try:
                self.db.flush()
                taken = True
            except IntegrityError:
                # another request created today's row first
                self.db.rollback()
                taken = bool(self._take(user_id, day))
        self.db.commit()

        if not taken:
            logger.info("User %s reached the daily chat limit (%d)", user_id, self.limit)
            return None
        return self.get_usage(user_id)

    def release(self, user_id: str) -> Usage:
        self._query(user_id, self._today()).filter(ChatUsage.count > 0).update(
            {ChatUsage.count: ChatUsage.count - 1}, synchronize_session=False
        )
        self.db.commit()
        return self.get_usage(user_id)
