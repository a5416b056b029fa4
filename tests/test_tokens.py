from types import SimpleNamespace

import pytest

from storefront.accounts.tokens import bearer_credential, issue_token, resolve_credential
from storefront.exceptions import Forbidden, Unauthorized


def _customer(pk=7):
    return SimpleNamespace(pk=pk, email="anne@example.ca")


def test_round_trip_yields_customer_id():
    assert resolve_credential(issue_token(_customer(42))) == 42


@pytest.mark.parametrize("credential", [None, ""])
def test_missing_credential_is_unauthorized(credential):
    with pytest.raises(Unauthorized):
        resolve_credential(credential)


def test_garbage_is_forbidden():
    with pytest.raises(Forbidden):
        resolve_credential("not-a-token")


def test_tampered_token_is_forbidden():
    token = issue_token(_customer())
    with pytest.raises(Forbidden):
        resolve_credential(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))


def test_expired_token_is_forbidden():
    with pytest.raises(Forbidden):
        resolve_credential(issue_token(_customer()), max_age=-1)


def test_token_signed_with_other_key_is_forbidden(settings):
    token = issue_token(_customer())
    settings.SECRET_KEY = "rotated"
    with pytest.raises(Forbidden):
        resolve_credential(token)


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc", "abc"),
        ("bearer   abc ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        (None, None),
    ],
)
def test_bearer_credential(header, expected):
    assert bearer_credential(header) == expected
