"""Pytest configuration and fixtures."""

import os
import time
from collections.abc import Callable, Generator
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi.testclient import TestClient
from jwt.algorithms import ECAlgorithm

TEST_USER_ID = "550e8400-e29b-41d4-a716-446655440000"
TEST_EMAIL = "donor@example.com"

# Tokens in tests are signed with a throwaway P-256 key; its public JWK is the configured signing key
TEST_PRIVATE_KEY = ec.generate_private_key(ec.SECP256R1())
TEST_PUBLIC_JWK = ECAlgorithm.to_jwk(TEST_PRIVATE_KEY.public_key())

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ["SUPABASE_SIGNING_KEY_JWK"] = TEST_PUBLIC_JWK


def create_test_token(
    sub: str = TEST_USER_ID,
    email: str | None = TEST_EMAIL,
    exp_offset: int = 3600,
    user_metadata: dict[str, Any] | None = None,
    private_key: Any = None,
) -> str:
    """Create an ES256 JWT shaped like a Supabase access token."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "email": email,
        "role": "authenticated",
        "exp": now + exp_offset,
        "iat": now,
        "aud": "authenticated",
        "iss": "https://test-project.supabase.co/auth/v1",
        "user_metadata": user_metadata or {},
    }
    return jwt.encode(payload, private_key or TEST_PRIVATE_KEY, algorithm="ES256")


class _Result:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


class FakeQuery:
    """Minimal PostgREST query builder over an in-memory table."""

    def __init__(self, table: "FakeTable", action: str, payload: dict[str, Any] | None = None) -> None:
        self.table = table
        self.action = action
        self.payload = payload
        self.filters: list[tuple[str, Any]] = []
        self.row_limit: int | None = None
        self.order_by: tuple[str, bool] | None = None
        self.on_conflict: str | None = None

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self) -> _Result:
        self.table.calls.append(self)
        if self.table.fail_on == self.action:
            raise RuntimeError(f"{self.action} rejected")

        if self.action == "select":
            rows = [dict(row) for row in self.table.rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                rows.sort(key=lambda row: str(row.get(column)), reverse=desc)
            if self.row_limit is not None:
                rows = rows[: self.row_limit]
            return _Result(rows)

        if self.action == "insert":
            row = dict(self.payload or {})
            row.setdefault("id", f"row-{len(self.table.rows) + 1}")
            self.table.rows.append(row)
            return _Result([dict(row)])

        if self.action == "upsert":
            key = self.on_conflict or "id"
            for row in self.table.rows:
                if str(row.get(key)) == str(self.payload[key]):
                    row.update(self.payload)
                    return _Result([dict(row)])
            self.table.rows.append(dict(self.payload))
            return _Result([dict(self.payload)])

        if self.action == "update":
            updated = []
            for row in self.table.rows:
                if self._matches(row):
                    row.update(self.payload or {})
                    updated.append(dict(row))
            return _Result(updated)

        raise AssertionError(f"unsupported action {self.action}")


class FakeTable:
    """In-memory table recording every executed query."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows: list[dict[str, Any]] = rows or []
        self.calls: list[FakeQuery] = []
        self.fail_on: str | None = None

    def select(self, columns: str = "*") -> FakeQuery:
        return FakeQuery(self, "select")

    def insert(self, payload: dict[str, Any]) -> FakeQuery:
        return FakeQuery(self, "insert", payload)

    def update(self, payload: dict[str, Any]) -> FakeQuery:
        return FakeQuery(self, "update", payload)

    def upsert(self, payload: dict[str, Any], on_conflict: str = "id") -> FakeQuery:
        query = FakeQuery(self, "upsert", payload)
        query.on_conflict = on_conflict
        return query

    def writes(self) -> list[FakeQuery]:
        return [call for call in self.calls if call.action in ("insert", "update", "upsert")]


class FakeAdmin:
    """Stand-in for ``client.auth.admin`` keeping user metadata per id."""

    def __init__(self) -> None:
        self.metadata: dict[str, dict[str, Any]] = {}
        self.fail_updates = False
        self.update_calls: list[tuple[str, dict[str, Any]]] = []

    def get_user_by_id(self, uid: str) -> SimpleNamespace:
        return SimpleNamespace(user=SimpleNamespace(id=uid, user_metadata=dict(self.metadata.get(uid, {}))))

    def update_user_by_id(self, uid: str, attributes: dict[str, Any]) -> SimpleNamespace:
        self.update_calls.append((uid, attributes))
        if self.fail_updates:
            raise RuntimeError("auth service unavailable")
        self.metadata.setdefault(uid, {}).update(attributes.get("user_metadata", {}))
        return self.get_user_by_id(uid)


class FakeSupabase:
    """In-memory Supabase client covering the calls the services make."""

    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}
        self.auth = SimpleNamespace(admin=FakeAdmin())

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable())


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()
    yield settings
    get_settings.cache_clear()


@pytest.fixture
def fake_supabase() -> Generator[FakeSupabase, None, None]:
    """Patch every service module to use one in-memory Supabase client.

    Yields:
        FakeSupabase: The shared fake client.
    """
    fake = FakeSupabase()
    with (
        patch("src.core.supabase.get_supabase_client", return_value=fake),
        patch("src.services.profile_service.get_supabase_client", return_value=fake),
        patch("src.services.identity_service.get_supabase_client", return_value=fake),
        patch("src.services.listing_service.get_supabase_client", return_value=fake),
    ):
        yield fake


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client for the health check.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for signed test tokens."""
    return create_test_token


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization header for the default test user."""
    return {"Authorization": f"Bearer {create_test_token()}"}


@pytest.fixture
def client(fake_supabase: FakeSupabase) -> Generator[TestClient, None, None]:
    """Provide a test client wired to the in-memory Supabase client.

    Args:
        fake_supabase: In-memory Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signing_key() -> Any:
    """Private key matching the configured signing JWK."""
    return TEST_PRIVATE_KEY
