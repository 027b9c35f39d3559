from __future__ import annotations

import logging
import threading

import pytest

from app.repos.user_repo import InMemoryUserRepo, UserNotFoundError
from app.services import users_service
from app.services.validation import AGE_OUT_OF_RANGE, EMAIL_DUPLICATE, NAME_TOO_SHORT
from tests.conftest import user_payload


@pytest.fixture
def repo() -> InMemoryUserRepo:
    return InMemoryUserRepo()


# ---- register_user ----


def test_register_user_stores_normalized_record(repo: InMemoryUserRepo) -> None:
    user = users_service.register_user(
        repo, user_payload(name="Ana Silva", email="Ana@Example.com")
    )
    assert user.id == 1
    assert user.name == "Ana Silva"
    assert user.email == "ana@example.com"
    assert users_service.list_users(repo) == [user]


def test_register_user_rejects_invalid_payload(repo: InMemoryUserRepo) -> None:
    users_service.register_user(repo, user_payload())

    with pytest.raises(users_service.UserValidationError) as excinfo:
        users_service.register_user(
            repo, {"name": "Bo", "email": "b@x.com", "age": 200}
        )
    assert excinfo.value.errors == [NAME_TOO_SHORT, AGE_OUT_OF_RANGE]
    assert users_service.count_users(repo) == 1


def test_register_user_rejects_case_variant_duplicate(repo: InMemoryUserRepo) -> None:
    users_service.register_user(repo, user_payload(email="case@example.com"))
    with pytest.raises(users_service.UserValidationError) as excinfo:
        users_service.register_user(
            repo, user_payload(name="Other", email="CASE@EXAMPLE.COM")
        )
    assert excinfo.value.errors == [EMAIL_DUPLICATE]


def test_rejected_payload_does_not_consume_an_id(repo: InMemoryUserRepo) -> None:
    with pytest.raises(users_service.UserValidationError):
        users_service.register_user(repo, {})
    assert users_service.register_user(repo, user_payload()).id == 1


# ---- get / remove ----


def test_get_user_returns_stored_user(repo: InMemoryUserRepo) -> None:
    created = users_service.register_user(repo, user_payload())
    assert users_service.get_user(repo, created.id) == created


def test_get_user_unknown_raises(repo: InMemoryUserRepo) -> None:
    with pytest.raises(UserNotFoundError):
        users_service.get_user(repo, 1)


def test_remove_user_then_add_uses_next_id(repo: InMemoryUserRepo) -> None:
    users_service.register_user(repo, user_payload(email="a@example.com"))
    users_service.register_user(repo, user_payload(email="b@example.com"))
    removed = users_service.remove_user(repo, 1)
    assert removed.email == "a@example.com"

    third = users_service.register_user(repo, user_payload(email="c@example.com"))
    assert third.id == 3


def test_remove_user_frees_email_for_reuse(repo: InMemoryUserRepo) -> None:
    users_service.register_user(repo, user_payload())
    users_service.remove_user(repo, 1)
    again = users_service.register_user(repo, user_payload())
    assert again.id == 2


def test_remove_user_unknown_raises(repo: InMemoryUserRepo) -> None:
    with pytest.raises(UserNotFoundError):
        users_service.remove_user(repo, 7)


# ---- parse_user_id ----


@pytest.mark.parametrize(
    ("raw", "expected"), [("1", 1), ("42", 42), (" 7 ", 7), ("-3", -3), ("+5", 5)]
)
def test_parse_user_id_accepts_integers(raw: str, expected: int) -> None:
    assert users_service.parse_user_id(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "1.5", "1_000", "12abc", "0x10"])
def test_parse_user_id_rejects_non_integers(raw: str) -> None:
    with pytest.raises(users_service.InvalidUserIdError):
        users_service.parse_user_id(raw)


def test_parse_user_id_rejects_overlong_digit_run() -> None:
    with pytest.raises(users_service.InvalidUserIdError):
        users_service.parse_user_id("1" * 5000)


# ---- concurrency ----


def test_concurrent_same_email_registers_once(repo: InMemoryUserRepo) -> None:
    workers = 16
    barrier = threading.Barrier(workers)
    created: list[int] = []
    rejected: list[list[str]] = []

    def submit(n: int) -> None:
        # Alternate SAME@X.COM and Same@X.com
        email = "same@x.com".upper() if n % 2 else "Same@X.com"
        barrier.wait()
        try:
            user = users_service.register_user(repo, user_payload(email=email))
        except users_service.UserValidationError as e:
            rejected.append(e.errors)
        else:
            created.append(user.id)

    threads = [threading.Thread(target=submit, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert created == [1]
    assert rejected == [[EMAIL_DUPLICATE]] * (workers - 1)
    assert users_service.count_users(repo) == 1


# ---- logging ----


def test_register_user_logs_info(
    repo: InMemoryUserRepo, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="app.services.users_service"):
        users_service.register_user(repo, user_payload(email="logged@example.com"))
    assert any(
        "Created user" in m and "logged@example.com" in m for m in caplog.messages
    )


def test_rejected_payload_logs_warning(
    repo: InMemoryUserRepo, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="app.services.users_service"):
        with pytest.raises(users_service.UserValidationError):
            users_service.register_user(repo, {})
    assert any("rejected" in m.lower() for m in caplog.messages)


def test_remove_user_logs_info(
    repo: InMemoryUserRepo, caplog: pytest.LogCaptureFixture
) -> None:
    users_service.register_user(repo, user_payload())
    with caplog.at_level(logging.INFO, logger="app.services.users_service"):
        users_service.remove_user(repo, 1)
    assert any("Removed user id=1" in m for m in caplog.messages)
