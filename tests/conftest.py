import os
from datetime import datetime, timedelta, timezone

# Settings read by ``api.v1.config`` at import time. Tests should never need
# a real Supabase project.
os.environ.setdefault("LMS_STORAGE_BACKEND", "memory")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("LOG_FILE", "")

import jwt
import pytest

from api.v1.app import create_app
from api.v1.config import TestingConfig
from api.v1.services.hr.leave_seed import demo_records
from api.v1.services.hr.leave_store import LeaveDataStore, MemoryRecordStore


@pytest.fixture
def records():
    return MemoryRecordStore()


@pytest.fixture
def store(records):
    """Store holding the demo employees, balances, holidays and requests."""
    return LeaveDataStore(records).load(seed=demo_records())


@pytest.fixture
def app(store):
    return create_app(TestingConfig, leave_store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_token():
    def _make(sub="1", role="user", department="Engineering", expires_in=3600, **app_metadata):
        payload = {
            "sub": sub,
            "aud": TestingConfig.JWT_AUDIENCE,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            "app_metadata": {"role": role, "department": department, **app_metadata},
        }
        return jwt.encode(payload, TestingConfig.SUPABASE_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def headers(make_token):
    """Authorization headers for the demo people: john (user), jane (manager), bob (hr_manager)."""
    def _headers(who="john"):
        people = {
            "john": dict(sub="1", role="user", department="Engineering"),
            "jane": dict(sub="2", role="manager", department="Engineering"),
            "bob": dict(sub="3", role="hr_manager", department="HR"),
            "root": dict(sub="99", role="super_admin", department=None),
        }
        return {"Authorization": f"Bearer {make_token(**people[who])}"}

    return _headers
