import os
import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))

# must be set before loanhub.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes!")
os.environ["OPENAI_API_KEY"] = ""

from loanhub.core import config  # noqa: E402
from loanhub.core.db import Base, SessionLocal, engine  # noqa: E402
import loanhub.models  # noqa: E402,F401

Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def no_llm(monkeypatch):
    # FAQ-only answers unless a test opts in
    monkeypatch.setattr(config.settings, "OPENAI_API_KEY", "", raising=False)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()
