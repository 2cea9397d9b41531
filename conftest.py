# conftest.py
import pytest
from rest_framework.test import APIClient

from em_core.common.context import RequestContext
from em_core.common.permissions import ROLE_ADMIN, ROLE_ATTENDEE, ROLE_SUPER_ADMIN
from em_core.iam.hashers import PasswordHasher
from em_core.iam.models import Role, User
from em_core.iam.tokens import TokenService

DEFAULT_PASSWORD = "secret123"


def make_user(username: str, role: Role, *, password: str = DEFAULT_PASSWORD, active: bool = True, **extra) -> User:
    """
    Create an iam.User directly (no audit rows), email derived from username.
    """
    return User.objects.create(
        username=username,
        email=extra.pop("email", f"{username}@example.com"),
        password=PasswordHasher.hash(password),
        full_name=extra.pop("full_name", username.title()),
        active=active,
        role=role,
        **extra,
    )


def ctx_for(user: User | None) -> RequestContext:
    """Service-level caller context, as the API would build it."""
    if user is None:
        return RequestContext(ip="127.0.0.1", device_id="pytest", user_agent="pytest", session_id="test")
    return RequestContext(
        user=user,
        role=user.role.name,
        permissions=user.permission_names,
        ip="127.0.0.1",
        device_id="pytest",
        user_agent="pytest",
        session_id="test",
    )


def bearer_client(user: User) -> APIClient:
    """
    APIClient carrying a real token for `user`.
    """
    client = APIClient()
    token = TokenService().issue(user.username, user.role.name)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


# -----------------------------
# Roles
# -----------------------------
@pytest.fixture
def super_admin_role(db):
    return Role.objects.create(name=ROLE_SUPER_ADMIN, description="Full system access")


@pytest.fixture
def admin_role(db):
    return Role.objects.create(name=ROLE_ADMIN, description="Administrative read access")


@pytest.fixture
def attendee_role(db):
    return Role.objects.create(name=ROLE_ATTENDEE, description="Event attendee")


# -----------------------------
# Users
# -----------------------------
@pytest.fixture
def root(super_admin_role):
    return make_user("root", super_admin_role)


@pytest.fixture
def admin(admin_role):
    return make_user("admin", admin_role)


@pytest.fixture
def alice(attendee_role):
    return make_user("alice", attendee_role)


@pytest.fixture
def bob(attendee_role):
    return make_user("bob", attendee_role)


@pytest.fixture
def carol(attendee_role):
    return make_user("carol", attendee_role)


# -----------------------------
# Clients
# -----------------------------
@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def root_client(root):
    return bearer_client(root)


@pytest.fixture
def admin_client(admin):
    return bearer_client(admin)


@pytest.fixture
def alice_client(alice):
    return bearer_client(alice)


@pytest.fixture
def bob_client(bob):
    return bearer_client(bob)


@pytest.fixture
def carol_client(carol):
    return bearer_client(carol)


# -----------------------------
# Factories (for tests that need extra users or contexts)
# -----------------------------
@pytest.fixture
def user_factory(db):
    return make_user


@pytest.fixture
def context_for():
    return ctx_for


@pytest.fixture
def client_for():
    return bearer_client
