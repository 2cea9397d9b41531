from types import SimpleNamespace

from django.db import IntegrityError
from rest_framework.exceptions import NotAuthenticated, ValidationError

from em_core.common.api.exceptions import (
    CONFLICT_MESSAGE,
    SERVER_ERROR_MESSAGE,
    api_exception_handler,
    build_error_envelope,
    field_errors,
)
from em_core.common.errors import AccountDeactivated, Conflict, Forbidden, NotFound, ValidationFailed


def _context(path="/events/1"):
    return {"request": SimpleNamespace(path=path)}


def test_envelope_shape():
    body = build_error_envelope(request=SimpleNamespace(path="/users/7"), status_code=404, message="gone")

    assert body["apiPath"] == "uri=/users/7"
    assert body["errorCode"] == "NOT_FOUND"
    assert body["errorMessage"] == "gone"
    # local wall-clock time without an offset
    assert "+" not in body["errorTime"]
    assert "T" in body["errorTime"]


def test_domain_errors_map_to_their_status():
    cases = [
        (ValidationFailed("bad input"), 400, "BAD_REQUEST"),
        (Conflict("taken"), 400, "BAD_REQUEST"),
        (AccountDeactivated(), 400, "BAD_REQUEST"),
        (NotFound("User not found with id: 3"), 404, "NOT_FOUND"),
        (Forbidden("nope"), 403, "FORBIDDEN"),
    ]
    for exc, status_code, code in cases:
        res = api_exception_handler(exc, _context())
        assert res.status_code == status_code
        assert res.data["errorCode"] == code
        assert res.data["errorMessage"] == exc.message
        assert res.data["apiPath"] == "uri=/events/1"


def test_integrity_error_becomes_generic_conflict():
    res = api_exception_handler(IntegrityError("duplicate key value"), _context())

    assert res.status_code == 400
    assert res.data["errorMessage"] == CONFLICT_MESSAGE


def test_field_validation_is_flattened():
    exc = ValidationError({"username": ["Username is required"], "email": ["Email should be valid"]})

    res = api_exception_handler(exc, _context())

    assert res.status_code == 400
    assert res.data == {"username": "Username is required", "email": "Email should be valid"}


def test_field_errors_takes_first_message():
    assert field_errors({"a": ["one", "two"], "b": {"c": ["nested"]}}) == {"a": "one", "b": "nested"}
    assert field_errors(["plain"]) == {"detail": "plain"}


def test_drf_errors_use_the_envelope():
    res = api_exception_handler(NotAuthenticated("Authentication required"), _context())

    assert res.status_code == 401
    assert res.data["errorCode"] == "UNAUTHORIZED"
    assert res.data["errorMessage"] == "Authentication required"


def test_unexpected_errors_are_generic_500():
    res = api_exception_handler(RuntimeError("kaboom"), _context())

    assert res.status_code == 500
    assert res.data["errorCode"] == "INTERNAL_SERVER_ERROR"
    assert res.data["errorMessage"] == SERVER_ERROR_MESSAGE
    assert "kaboom" not in str(res.data)
