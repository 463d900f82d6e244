import os
import pytest
from types import SimpleNamespace
from fastapi.testclient import TestClient
from firebase_admin import auth, firestore, messaging

# Set required environment variables for testing
os.environ["API_V1_STR"] = "/api/v1"
os.environ["FIREBASE_PROJECT_ID"] = "fridgy-test"
os.environ["LOG_LEVEL"] = "WARNING"

from fridgy import dependencies
from fridgy.main import app
from fridgy.database import get_db
from fridgy.dependencies import get_storage_bucket
from fridgy.repositories.product_repository import ProductRepository
from fridgy.repositories.user_repository import UserRepository
from tests.fakes import FakeBucket, FakeFirestore, FakeMessaging

OWNER = "owner-uid"
MANAGER = "manager-uid"
MEMBER = "member-uid"
OUTSIDER = "outsider-uid"
ADMIN = "admin-uid"


def _transactional(func):
    """Run the wrapped function once and commit, like a transaction that never conflicts."""

    def wrapper(transaction, *args, **kwargs):
        result = func(transaction, *args, **kwargs)
        transaction.commit()
        return result

    return wrapper


def _verify_id_token(token, app=None, check_revoked=False):
    if not token or not token.startswith("token-"):
        raise ValueError("Invalid ID token")
    uid = token[len("token-"):]
    return {"uid": uid, "email": f"{uid}@example.com"}


@pytest.fixture(autouse=True)
def clear_caches():
    """User and product caches are process-wide; start every test empty."""
    UserRepository.clear_cache()
    ProductRepository.cache.clear()
    yield
    UserRepository.clear_cache()
    ProductRepository.cache.clear()


@pytest.fixture
def fake_messaging(monkeypatch):
    fake = FakeMessaging()
    monkeypatch.setattr(messaging, "send", fake.send)
    monkeypatch.setattr(messaging, "subscribe_to_topic", fake.subscribe_to_topic)
    monkeypatch.setattr(messaging, "unsubscribe_from_topic", fake.unsubscribe_from_topic)
    return fake


@pytest.fixture
def deleted_auth_users(monkeypatch):
    deleted = []
    monkeypatch.setattr(auth, "delete_user", lambda uid, app=None: deleted.append(uid))
    return deleted


@pytest.fixture(autouse=True)
def firebase_stubs(monkeypatch, fake_messaging, deleted_auth_users):
    """Keep every test away from real Firebase services."""
    monkeypatch.setattr(firestore, "transactional", _transactional)
    monkeypatch.setattr(auth, "verify_id_token", _verify_id_token)
    monkeypatch.setattr(dependencies, "get_firebase_app", lambda: None)


@pytest.fixture
def db():
    """A fresh in-memory Firestore for each test."""
    return FakeFirestore()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def client(db, bucket):
    """Create a FastAPI TestClient backed by the in-memory Firestore."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_storage_bucket] = lambda: bucket
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user ID."""

    def _headers(uid):
        return {"Authorization": f"Bearer token-{uid}"}

    return _headers


@pytest.fixture
def users(db):
    """Four users with profiles, plus an admin."""
    names = {
        OWNER: "alice",
        MANAGER: "bob",
        MEMBER: "carol",
        OUTSIDER: "dave",
        ADMIN: "root",
    }
    for uid, username in names.items():
        db.seed(f"users/{uid}", {"email": f"{uid}@example.com"})
        db.seed(f"userProfiles/{uid}", {"username": username})
    db.seed(f"admins/{ADMIN}", {"grantedBy": "console"})
    return names


@pytest.fixture
def household(db, users):
    """
    "Home" owned by OWNER with a MANAGER and a MEMBER and two fridges,
    plus a second household the others can't see.
    """
    db.seed("households/house-1", {
        "name": "Home",
        "createdBy": OWNER,
        "members": [OWNER, MANAGER, MEMBER],
        "memberRoles": {OWNER: "OWNER", MANAGER: "MANAGER", MEMBER: "MEMBER"},
    })
    db.seed("fridges/fridge-1", {
        "name": "Kitchen",
        "householdId": "house-1",
        "createdBy": OWNER,
        "location": "Kitchen",
    })
    db.seed("fridges/fridge-2", {
        "name": "Garage",
        "householdId": "house-1",
        "createdBy": MANAGER,
        "location": "Garage",
    })
    db.seed("households/house-2", {
        "name": "Elsewhere",
        "createdBy": OUTSIDER,
        "members": [OUTSIDER],
        "memberRoles": {OUTSIDER: "OWNER"},
    })
    db.seed("fridges/fridge-other", {
        "name": "Other",
        "householdId": "house-2",
        "createdBy": OUTSIDER,
    })
    return SimpleNamespace(
        id="house-1",
        other_id="house-2",
        fridge_id="fridge-1",
        second_fridge_id="fridge-2",
        other_fridge_id="fridge-other",
        owner=OWNER,
        manager=MANAGER,
        member=MEMBER,
        outsider=OUTSIDER,
        admin=ADMIN,
    )


@pytest.fixture
def milk(db):
    db.seed("products/0001", {
        "name": "Whole Milk",
        "brand": "Acme",
        "category": "Dairy",
        "size": 1.0,
        "unit": "GALLON",
        "searchTokens": ["whole", "who", "whol", "hole", "ole", "milk", "mil", "ilk", "acme", "acm", "cme"],
    })
    return "0001"
