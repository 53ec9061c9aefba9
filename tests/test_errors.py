"""Tests for the error normalizer."""

import pytest

from blogctl.errors import (
    GENERIC_MESSAGE,
    ErrorKind,
    OperationError,
    authentication_rejected,
    no_viable_endpoint,
    normalize_error,
    suggests_bootstrap,
)
from blogctl.transport import Response, TransportFailure


class TestNormalizeTransportFailure:
    def test_unreachable_uses_transport_description(self):
        err = normalize_error(None, TransportFailure("Connection refused"))
        assert err.kind == ErrorKind.UNREACHABLE
        assert err.message == "Connection refused"
        assert err.http_status is None

    def test_unreachable_accepts_plain_string(self):
        err = normalize_error(None, "timed out")
        assert err.message == "timed out"

    def test_unreachable_without_description_uses_generic(self):
        assert normalize_error(None, TransportFailure("")).message == GENERIC_MESSAGE
        assert normalize_error(None).message == GENERIC_MESSAGE


class TestNormalizeResponse:
    def test_message_field_wins(self):
        resp = Response(status=400, body={"message": "Slug taken", "error": "dup"})
        err = normalize_error(resp)
        assert err.kind == ErrorKind.REMOTE_REJECTED
        assert err.message == "Slug taken"
        assert err.http_status == 400

    def test_error_field_used_when_no_message(self):
        err = normalize_error(Response(status=500, body={"error": "boom"}))
        assert err.message == "boom"
        assert err.http_status == 500

    def test_status_kept_even_with_generic_message(self):
        err = normalize_error(Response(status=404, body={}))
        assert err.message == GENERIC_MESSAGE
        assert err.http_status == 404

    @pytest.mark.parametrize(
        "body",
        [
            None,
            {},
            [],
            "plain text",
            b"bytes",
            42,
            {"message": None},
            {"message": ""},
            {"message": "   "},
            {"message": 123, "error": {"nested": "x"}},
            {"error": ["a", "b"]},
        ],
    )
    def test_malformed_bodies_yield_non_empty_message(self, body):
        err = normalize_error(Response(status=422, body=body))
        assert err.message == GENERIC_MESSAGE
        assert err.message

    def test_object_without_status_or_body_never_raises(self):
        err = normalize_error(object())
        assert err.kind == ErrorKind.REMOTE_REJECTED
        assert err.http_status is None
        assert err.message == GENERIC_MESSAGE

    def test_non_integer_status_is_dropped(self):
        class Weird:
            status = "500"
            body = {"message": "x"}

        err = normalize_error(Weird())
        assert err.http_status is None
        assert err.message == "x"


class TestErrorHelpers:
    def test_operation_error_never_has_empty_message(self):
        assert OperationError(ErrorKind.REMOTE_REJECTED, "").message == GENERIC_MESSAGE

    def test_authentication_rejected_default_message(self):
        err = authentication_rejected()
        assert err.kind == ErrorKind.AUTHENTICATION_REJECTED
        assert "no token" in err.message

    def test_no_viable_endpoint_carries_last_message(self):
        last = OperationError(ErrorKind.REMOTE_REJECTED, "Cannot POST /x", 404)
        err = no_viable_endpoint(last)
        assert err.kind == ErrorKind.NO_VIABLE_ENDPOINT
        assert err.message == "Cannot POST /x"

    def test_no_viable_endpoint_without_candidates(self):
        err = no_viable_endpoint(None)
        assert err.kind == ErrorKind.NO_VIABLE_ENDPOINT
        assert err.message

    def test_suggests_bootstrap_matches_raw_message(self):
        err = normalize_error(Response(status=401, body={"message": "Invalid email or password"}))
        assert suggests_bootstrap(err) is True
        assert suggests_bootstrap(OperationError(ErrorKind.REMOTE_REJECTED, "Server down")) is False
