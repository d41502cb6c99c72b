# identity_service/dependencies/db.py
from typing import Iterator

from sqlalchemy.orm import Session

from identity_service.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    """Yield one request-scoped database session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
