import os
import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Must be set before app.main is imported: settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-key")
os.environ.setdefault("RATE_LIMIT", "10000/minute")

from app.main import app
from app.core.dependencies import get_auth_service, get_blob_store, get_document_store
from app.database.blob_store import UploadResult
from app.database.document_store import (
    Equal, Limit, ListResult, Offset, OrderDesc, RecordNotFound, Search, StaleRecordError,
    USERS, WORKSHOPS,
)
from app.modules.auth.service import AuthService


class InMemoryStore:
    """DocumentStore double. failing holds method names (or (method, collection) pairs) that raise."""

    def __init__(self):
        self.collections = defaultdict(dict)
        self.calls = []
        self.failing = set()
        self._clock = datetime(2024, 1, 1)

    def _check(self, method, collection):
        self.calls.append((method, collection))
        if method in self.failing or (method, collection) in self.failing:
            raise RuntimeError(f"{method} on {collection} failed")

    def _now(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def create(self, collection, data, record_id=None):
        self._check("create", collection)
        record = {"id": record_id or uuid.uuid4().hex, "created_at": self._now(), **data}
        self.collections[collection][record["id"]] = record
        return dict(record)

    def get(self, collection, record_id):
        self._check("get", collection)
        if record_id not in self.collections[collection]:
            raise RecordNotFound(collection, record_id)
        return dict(self.collections[collection][record_id])

    def list(self, collection, filters=()):
        self._check("list", collection)
        records = list(self.collections[collection].values())
        limit = offset = None
        for f in filters:
            if isinstance(f, Equal):
                records = [r for r in records if r.get(f.field) == f.value]
            elif isinstance(f, Search):
                records = [r for r in records if f.text.lower() in str(r.get(f.field, "")).lower()]
            elif isinstance(f, OrderDesc):
                records.sort(key=lambda r: r.get(f.field) or "", reverse=True)
            elif isinstance(f, Limit):
                limit = f.count
            elif isinstance(f, Offset):
                offset = f.count
        total = len(records)
        records = records[offset or 0:]
        if limit is not None:
            records = records[:limit]
        return ListResult(records=[dict(r) for r in records], total=total)

    def update(self, collection, record_id, data, expected=None):
        self._check("update", collection)
        record = self.collections[collection].get(record_id)
        if record is None:
            raise RecordNotFound(collection, record_id)
        if expected and any(record.get(k) != v for k, v in expected.items()):
            raise StaleRecordError(collection, record_id)
        record.update(data)
        return dict(record)

    def delete(self, collection, record_id):
        self._check("delete", collection)
        self.collections[collection].pop(record_id, None)

    def count_calls(self, method, collection):
        return self.calls.count((method, collection))


class FakeBlobStore:
    def __init__(self):
        self.files = {}
        self.deleted = []
        self.fail_upload = False

    def upload(self, bucket, content, file_id=None, content_type="application/octet-stream"):
        if self.fail_upload:
            raise RuntimeError("upload failed")
        file_id = file_id or uuid.uuid4().hex
        self.files[(bucket, file_id)] = content
        return UploadResult(id=file_id)

    def delete(self, bucket, file_id):
        self.deleted.append((bucket, file_id))
        return self.files.pop((bucket, file_id), None) is not None

    def public_url(self, bucket, file_id):
        return f"https://files.test/{bucket}/{file_id}"


class FakeSupabaseAuth:
    """Just enough of supabase.auth for AuthService."""

    def __init__(self):
        self.accounts = {}
        self.tokens = {}

    def _session_for(self, user):
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = user
        return SimpleNamespace(access_token=token)

    def sign_up(self, payload):
        email = payload["email"]
        if email in self.accounts:
            raise Exception("User already registered")
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata=payload.get("options", {}).get("data", {}),
            created_at="2024-01-01T00:00:00",
        )
        self.accounts[email] = (payload["password"], user)
        return SimpleNamespace(user=user, session=self._session_for(user))

    def sign_in_with_password(self, payload):
        password, user = self.accounts.get(payload["email"], (None, None))
        if user is None or password != payload["password"]:
            raise Exception("Invalid login credentials")
        return SimpleNamespace(user=user, session=self._session_for(user))

    def get_user(self, jwt):
        if jwt not in self.tokens:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.tokens[jwt])

    def sign_out(self):
        return None


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def blobs():
    return FakeBlobStore()


@pytest.fixture
def auth_backend():
    return FakeSupabaseAuth()


@pytest_asyncio.fixture
async def client(store, blobs, auth_backend):
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_blob_store] = lambda: blobs
    app.dependency_overrides[get_auth_service] = lambda: AuthService(SimpleNamespace(auth=auth_backend))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(store, auth_backend):
    """Create an account plus user document with the given role; returns auth headers."""
    def _login(role, name=None):
        name = name or f"{role}-{uuid.uuid4().hex[:6]}"
        result = auth_backend.sign_up({
            "email": f"{name}@example.com",
            "password": "secret-password",
            "options": {"data": {"name": name}},
        })
        store.create(USERS, {
            "email": result.user.email,
            "name": name,
            "role": role,
            "profile": "{}",
        }, record_id=result.user.id)
        return {"Authorization": f"Bearer {result.session.access_token}"}
    return _login


@pytest.fixture
def user_id_for(auth_backend):
    def _user_id(headers):
        return auth_backend.tokens[headers["Authorization"].split(" ", 1)[1]].id
    return _user_id


@pytest.fixture
def make_workshop(store):
    """Insert a workshop row directly, bypassing the API."""
    def _make(master_id, status="published", application_form="[]", auto_approve=False, **extra):
        return store.create(WORKSHOPS, {
            "master_id": master_id,
            "title": extra.pop("title", "Pottery for beginners"),
            "description": "Wheel throwing and glazing basics",
            "category": extra.pop("category", "crafts"),
            "location": "Studio 4",
            "application_form": application_form,
            "auto_approve": auto_approve,
            "status": status,
            **extra,
        })
    return _make
