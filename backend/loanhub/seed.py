from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session

from loanhub.core.db import Base, engine, SessionLocal
from loanhub.core.security import create_access_token
import loanhub.models  # noqa
from loanhub.models.loan import Loan
from loanhub.models.loan_application import APPROVED, PENDING, REJECTED, LoanApplication
from loanhub.models.user import User
from loanhub.services.faq_store import seed_faqs


def reset_db(db: Session):
    # Drops & recreates all tables
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_loans(db: Session):
    loans = [
        Loan(
            loan_type="New Car Loan",
            category="Four Wheeler",
            description="Finance up to 90% of the on-road price of a new car, tenure up to 7 years.",
            interest_rate=7.5,
            maximum_amount=2500000,
        ),
        Loan(
            loan_type="Two-Wheeler Loan",
            category="Two Wheeler",
            description="Quick approval for scooters and motorcycles, tenure up to 5 years.",
            interest_rate=8.5,
            maximum_amount=300000,
        ),
        Loan(
            loan_type="Commercial Vehicle Loan",
            category="Commercial Vehicle",
            description="Trucks, vans and buses for business use, tenure up to 5 years.",
            interest_rate=9,
            maximum_amount=5000000,
        ),
        Loan(
            loan_type="Electric Vehicle Loan",
            category="Electric Vehicle",
            description="Lower rates for electric cars and two-wheelers.",
            interest_rate=7,
            maximum_amount=3000000,
        ),
        Loan(
            loan_type="Used Car Loan",
            category="Used Vehicle",
            description="Finance up to 75% of the valuation of a pre-owned car.",
            interest_rate=10.5,
            maximum_amount=1500000,
        ),
    ]
    db.add_all(loans)


def seed_users(db: Session) -> tuple[User, User]:
    admin = User(user_name="admin", email="admin@vehicleloanhub.local", role="admin")
    demo = User(user_name="demo", email="demo@vehicleloanhub.local", role="user")
    db.add_all([admin, demo])
    db.flush()
    return admin, demo


def seed_applications(db: Session, user: User):
    now = datetime.now(timezone.utc)
    db.add_all(
        [
            LoanApplication(
                user_id=user.id,
                user_name=user.user_name,
                loan_type="New Car Loan",
                income=85000,
                purchase_price=950000,
                address="12 MG Road, Bengaluru",
                loan_status=PENDING,
                submission_date=now - timedelta(days=2),
            ),
            LoanApplication(
                user_id=user.id,
                user_name=user.user_name,
                loan_type="Two-Wheeler Loan",
                income=85000,
                purchase_price=120000,
                address="12 MG Road, Bengaluru",
                loan_status=APPROVED,
                submission_date=now - timedelta(days=30),
            ),
            LoanApplication(
                user_id=user.id,
                user_name=user.user_name,
                loan_type="Used Car Loan",
                income=85000,
                purchase_price=450000,
                address="12 MG Road, Bengaluru",
                loan_status=REJECTED,
                submission_date=now - timedelta(days=90),
            ),
        ]
    )


def main():
    db = SessionLocal()
    try:
        reset_db(db)
        seed_loans(db)
        admin, demo = seed_users(db)
        seed_applications(db, demo)
        db.commit()
        count = seed_faqs(db)

        print(f"Seed complete ({count} FAQs).")
        print(f"Admin token: {create_access_token(admin.id)}")
        print(f"User token:  {create_access_token(demo.id)}")
        print("Try: GET /chatbot?q=interest rate for car loan")
    finally:
        db.close()


if __name__ == "__main__":
    main()
