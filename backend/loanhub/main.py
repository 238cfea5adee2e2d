import logging

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from loanhub.core.config import settings
from loanhub.core.db import Base, engine, get_db
from loanhub.core.logging import setup_logging
from loanhub.core.security import CurrentUser, get_current_user, require_admin
from loanhub.schemas.chat import ChatResponse
from loanhub.schemas.faq import FAQCreate, FAQOut, FAQUpdate
from loanhub.agents.graph import build_graph
from loanhub.agents.faq_agent import greeting

from fastapi.middleware.cors import CORSMiddleware

# Import models so Base.metadata knows them
import loanhub.models  # noqa
from loanhub.services import faq_store
from loanhub.services.usage import UsageTracker

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="VehicleLoanHub Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=600,
)


# Create tables (Alembic optional)
Base.metadata.create_all(bind=engine)

graph = build_graph()

@app.get("/")
def health():
    return {"status": "ok"}


@app.get("/chatbot", response_model=ChatResponse)
def chatbot(
    q: str | None = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    query = (q or "").strip()
    if not query:
        return greeting()

    limit = settings.CHAT_DAILY_LIMIT
    tracker = UsageTracker(db, limit)

    # Admins are unlimited and never counted
    usage = None if user.is_admin else tracker.reserve(user.id)
    if not user.is_admin and usage is None:
        return {
            "message": (
                f"⚠️ You've reached your daily limit of {limit} messages. "
                "Your quota resets tomorrow."
            ),
            "type": "limit",
            "remaining": 0,
            "daily_limit": limit,
        }

    try:
        out = graph.invoke(
            {
                "message": query,
                "user": user,
                "db": db,
                "matches": [],
                "route": "",
                "reply": {},
            }
        )
    except Exception:
        logger.exception("Chatbot error for user %s", user.id)
        if usage is not None:
            db.rollback()
            tracker.release(user.id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "⚠️ Something went wrong. Please try again.", "type": "error"},
        )

    reply = dict(out["reply"])
    if user.is_admin:
        reply.update(remaining=-1, daily_limit=None)
    else:
        # only successful answers use up quota
        if reply.get("type") == "error":
            usage = tracker.release(user.id)
        reply.update(remaining=usage.remaining, daily_limit=limit)
    return reply


# ---------------- FAQ admin ----------------

def _faq_or_404(faq):
    if not faq:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="FAQ not found")
    return faq


@app.get("/chatbot/faqs", response_model=list[FAQOut])
def list_faqs(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return faq_store.list_faqs(db)


@app.get("/chatbot/faqs/{faq_id}", response_model=FAQOut)
def get_faq(faq_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return _faq_or_404(faq_store.get_faq(db, faq_id))


@app.post("/chatbot/faqs", status_code=status.HTTP_201_CREATED)
def add_faq(req: FAQCreate, db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    faq = faq_store.create_faq(db, req.question, req.answer, req.category)
    return {"message": "FAQ added successfully", "faq": FAQOut.model_validate(faq)}


@app.put("/chatbot/faqs/{faq_id}")
def update_faq(
    faq_id: int,
    req: FAQUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    faq = _faq_or_404(faq_store.update_faq(db, faq_id, req.question, req.answer, req.category))
    return {"message": "FAQ updated successfully", "faq": FAQOut.model_validate(faq)}


@app.delete("/chatbot/faqs/{faq_id}")
def delete_faq(faq_id: int, db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    if not faq_store.delete_faq(db, faq_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="FAQ not found")
    return {"message": "FAQ deleted successfully"}


@app.post("/chatbot/faqs/seed")
def seed_faqs(db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    count = faq_store.seed_faqs(db)
    return {"message": f"Seeded {count} FAQs", "count": count}
