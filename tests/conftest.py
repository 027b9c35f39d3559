from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.main import app  # noqa: E402
from app.repos.user_repo import InMemoryUserRepo  # noqa: E402


@pytest.fixture(autouse=True)
def user_repo() -> InMemoryUserRepo:
    """Fresh, empty store for every test (ids restart at 1)."""
    repo = InMemoryUserRepo()
    app.state.user_repo = repo
    return repo


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def user_payload(
    name: object = "Ana Silva",
    email: object = "ana@example.com",
    age: object = 30,
) -> dict[str, object]:
    return {"name": name, "email": email, "age": age}
