import pytest

from authority.domain.password_policy import normalize_email, password_problem, username_problem


def test_normalize_email():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


@pytest.mark.parametrize("password", ["SecurePass123!", "aB3$efgh", "Xx9&Xx9&Xx9&"])
def test_strong_passwords(password):
    assert password_problem(password) is None


@pytest.mark.parametrize(
    "password",
    [
        "aB3$efg",  # too short
        "securepass123!",  # no upper
        "SECUREPASS123!",  # no lower
        "SecurePass!!!",  # no digit
        "SecurePass123",  # no special
    ],
)
def test_weak_passwords(password):
    assert password_problem(password) is not None


def test_username_rules():
    assert username_problem("alice_01") is None
    assert username_problem("ab") is not None
    assert username_problem("has space") is not None
    assert username_problem("x" * 31) is not None
