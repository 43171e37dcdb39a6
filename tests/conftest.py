import os

# Settings are read at import time; point them at test values first.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PLATFORM_URL", "https://platform.test")
os.environ.setdefault("SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("CORS_ORIGINS", "https://app.shop.com")

import uuid
import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from shop_finance.core.exceptions import InvalidTokenException, InviteFailedException
from shop_finance.database import get_db
from shop_finance.dependencies import get_identity_client_factory
from shop_finance.models.base import Base
from shop_finance.models.principal import Principal
from shop_finance.models.role import Role
# Import all model classes to ensure they're registered with SQLAlchemy
from shop_finance.models.profile import Profile
from shop_finance.models.transaction import Transaction
from shop_finance.models.bill import Bill
from shop_finance.models.savings import SavingsGoal, SavingsContribution
from shop_finance.models.audit_log import AuditLog
# Import FastAPI app AFTER model imports
from shop_finance.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeIdentityClient:
    """
    In-memory stand-in for the platform auth API.

    Tokens are real JWTs; the 'sub' claim selects a registered user.
    """

    def __init__(self):
        self.users: dict[str, Principal] = {}
        self.confirmed_emails: set[str] = set()
        self.token_exchanges: list[str] = []
        self.invites: list[tuple[str, dict]] = []

    def add_user(self, email: str, full_name: str | None = None, confirmed: bool = True) -> Principal:
        principal = Principal(id=str(uuid.uuid4()), email=email, full_name=full_name)
        self.users[principal.id] = principal
        if confirmed:
            self.confirmed_emails.add(email)
        return principal

    async def get_user(self, access_token: str) -> Principal:
        self.token_exchanges.append(access_token)
        sub = jwt.get_unverified_claims(access_token).get("sub")
        principal = self.users.get(sub)
        if principal is None:
            raise InvalidTokenException("Invalid token")
        return principal

    async def invite_user_by_email(self, email: str, data: dict | None = None) -> Principal:
        self.invites.append((email, data or {}))
        if email in self.confirmed_emails:
            raise InviteFailedException("A user with this email address has already been registered")
        for principal in self.users.values():
            if principal.email == email:
                return principal
        principal = Principal(id=str(uuid.uuid4()), email=email, full_name=(data or {}).get("full_name"))
        self.users[principal.id] = principal
        return principal


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def identity():
    """Fake identity provider shared by the app and the test"""
    return FakeIdentityClient()


@pytest.fixture(scope="function")
def client(db_session, identity):
    """FastAPI test client with test database and fake identity provider"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client_factory] = lambda: (lambda: identity)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "test-user-123", expired: bool = False, **claims) -> str:
    """
    Generate a JWT for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        **claims: Extra claims (e.g. role="admin" to prove they are ignored)

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC), **claims}

    return jwt.encode(payload, "test-signing-key", algorithm="HS256")


def headers_for(principal: Principal, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_test_token(principal.id, **claims)}"}


def _provisioned(db_session, identity, email: str, full_name: str, role: Role) -> Principal:
    principal = identity.add_user(email, full_name)
    db_session.add(Profile(id=principal.id, full_name=full_name, role=role))
    db_session.commit()
    return principal


@pytest.fixture
def admin_user(db_session, identity):
    return _provisioned(db_session, identity, "owner@shop.com", "Rhea Admin", Role.ADMIN)


@pytest.fixture
def editor_user(db_session, identity):
    return _provisioned(db_session, identity, "editor@shop.com", "Eddie Editor", Role.EDITOR)


@pytest.fixture
def viewer_user(db_session, identity):
    return _provisioned(db_session, identity, "viewer@shop.com", "Vic Viewer", Role.VIEWER)


@pytest.fixture
def unprovisioned_user(identity):
    """Signed-up identity with no profile row"""
    return identity.add_user("new@shop.com", "No Profile")


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def editor_headers(editor_user):
    return headers_for(editor_user)


@pytest.fixture
def viewer_headers(viewer_user):
    return headers_for(viewer_user)


@pytest.fixture
def unprovisioned_headers(unprovisioned_user):
    return headers_for(unprovisioned_user)
