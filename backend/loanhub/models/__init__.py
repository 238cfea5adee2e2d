from loanhub.models.user import User
from loanhub.models.loan import Loan
from loanhub.models.loan_application import LoanApplication
from loanhub.models.faq import FAQ
from loanhub.models.chat_usage import ChatUsage

__all__ = ["User", "Loan", "LoanApplication", "FAQ", "ChatUsage"]
