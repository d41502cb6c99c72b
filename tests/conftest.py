import os
from datetime import datetime, timedelta, timezone

# Configure settings before anything imports identity_service
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only-do-not-use-in-production")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1")
os.environ.setdefault("PASSWORD_HASH_MEMORY_KIB", "1024")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from identity_service.auth import models  # noqa: E402,F401
from identity_service.auth.notifications import NotificationError  # noqa: E402
from identity_service.auth.services.auth_services import AuthenticationEngine  # noqa: E402
from identity_service.auth.services.identity_services import IdentityResolver  # noqa: E402
from identity_service.auth.stores import (  # noqa: E402
    SqlAlchemyCredentialStore,
    SqlAlchemyResetTokenStore,
)
from identity_service.core.security import PasswordHasher, TokenIssuer  # noqa: E402
from identity_service.db.base import Base  # noqa: E402
from identity_service.dependencies.auth import get_auth_engine  # noqa: E402
from identity_service.main import create_app  # noqa: E402

TEST_SECRET = "Test-Secret-Key_for-Automation-Only-987654321!"


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingNotificationSender:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, notification) -> None:
        if self.fail:
            raise NotificationError("notifications service unavailable")
        self.sent.append(notification)

    def last_token(self) -> str:
        message = self.sent[-1].message
        return message.rsplit("token=", 1)[1].strip()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(db_engine):
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def credential_store(db):
    return SqlAlchemyCredentialStore(db)


@pytest.fixture
def reset_token_store(db):
    return SqlAlchemyResetTokenStore(db)


@pytest.fixture
def password_hasher():
    # Minimum Argon2 cost keeps the suite fast
    return PasswordHasher(rounds=1, memory_kib=1024)


@pytest.fixture
def token_issuer():
    return TokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def clock():
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def notifier():
    return RecordingNotificationSender()


@pytest.fixture
def identity_resolver(credential_store, clock):
    return IdentityResolver(credential_store, clock=clock)


@pytest.fixture
def auth_engine(credential_store, reset_token_store, password_hasher, token_issuer, notifier, clock):
    return AuthenticationEngine(
        credential_store=credential_store,
        reset_token_store=reset_token_store,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        notification_sender=notifier,
        clock=clock,
        reset_link_base="https://app.example.com",
    )


@pytest.fixture
def client(auth_engine):
    app = create_app()
    app.dependency_overrides[get_auth_engine] = lambda: auth_engine
    return TestClient(app)
