import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from tenant_gate.database import get_db
from tenant_gate.models.base import Base
from tenant_gate.config import settings
from tenant_gate.core.cache import TTLFlagCache
from tenant_gate.dependencies import get_flag_cache
# Import all model classes to ensure they're registered with SQLAlchemy
from tenant_gate.models.user import User
from tenant_gate.models.organization import Organization, SubscriptionTier
from tenant_gate.models.attraction import Attraction
from tenant_gate.models.membership import Membership
from tenant_gate.models.feature_flag import FeatureFlag
from tenant_gate.models.role import MembershipStatus, OrgRole
# Import FastAPI app AFTER model imports
from tenant_gate.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def flag_cache():
    """Fresh flag definition cache per test"""
    return TTLFlagCache(ttl_seconds=60.0)


@pytest.fixture(scope="function")
def client(db_session, flag_cache):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_flag_cache] = lambda: flag_cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "test-user-123", expired: bool = False, **claims) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        **claims: Extra claims (e.g. email)

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC), **claims}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


@pytest.fixture
def make_token():
    """The token factory, for tests that need custom claims"""
    return create_test_token


@pytest.fixture
def headers_for():
    """Build Authorization headers for a user ID"""

    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_test_token(user_id=user_id)}"}

    return _headers


@pytest.fixture
def auth_headers(headers_for):
    """Authorization headers for authenticated requests"""
    return headers_for("test-user-123")


@pytest.fixture
def organization(db_session):
    """A pro-tier organization reachable by slug 'nightmare-manor'"""
    org = Organization(name="Nightmare Manor", slug="nightmare-manor", subscription_tier=SubscriptionTier.PRO)
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def other_organization(db_session):
    org = Organization(name="Pumpkin Patch Co", slug="pumpkin-patch")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def add_user(db_session):
    """Get or create a user row"""

    def _add(user_id: str, is_super_admin: bool = False) -> User:
        user = db_session.get(User, user_id)
        if user is None:
            user = User(id=user_id, email=f"{user_id}@example.com", is_super_admin=is_super_admin)
            db_session.add(user)
        elif is_super_admin:
            user.is_super_admin = True
        db_session.commit()
        db_session.refresh(user)
        return user

    return _add


@pytest.fixture
def add_member(db_session, organization, add_user):
    """Create a membership (active by default) in the organization fixture"""

    def _add(
        user_id: str,
        role: OrgRole,
        is_owner: bool = False,
        status: MembershipStatus = MembershipStatus.ACTIVE,
        org: Organization | None = None,
    ) -> Membership:
        add_user(user_id)
        membership = Membership(
            org_id=(org or organization).id,
            user_id=user_id,
            role=role,
            is_owner=is_owner,
            status=status,
        )
        db_session.add(membership)
        db_session.commit()
        db_session.refresh(membership)
        return membership

    return _add


@pytest.fixture
def owner_membership(add_member):
    return add_member("owner-user", OrgRole.OWNER, is_owner=True)


@pytest.fixture
def super_admin(add_user):
    return add_user("platform-admin", is_super_admin=True)


@pytest.fixture
def add_flag(db_session):
    """Create a feature flag row"""

    def _add(
        key: str,
        enabled: bool = True,
        rollout_percentage: int = 100,
        org_ids: list[str] | None = None,
        user_ids: list[str] | None = None,
        metadata: dict | None = None,
    ) -> FeatureFlag:
        flag = FeatureFlag(
            key=key,
            name=key.replace("_", " ").title(),
            enabled=enabled,
            rollout_percentage=rollout_percentage,
            org_ids=org_ids or [],
            user_ids=user_ids or [],
            flag_metadata=metadata or {},
        )
        db_session.add(flag)
        db_session.commit()
        db_session.refresh(flag)
        return flag

    return _add


@pytest.fixture
def attraction(db_session, organization):
    haunt = Attraction(org_id=organization.id, name="The Asylum", slug="the-asylum")
    db_session.add(haunt)
    db_session.commit()
    db_session.refresh(haunt)
    return haunt


@pytest.fixture
def janitor_membership(db_session, organization, add_user):
    """An active membership row whose stored role is not an OrgRole"""
    add_user("janitor-user")
    db_session.execute(
        insert(Membership.__table__).values(
            org_id=organization.id,
            user_id="janitor-user",
            role="janitor",
            is_owner=False,
            status=MembershipStatus.ACTIVE,
        )
    )
    db_session.commit()
