"""Tests for remote rejection classification."""

import pytest

from fairos_core.errors import (
    DecodeFailedError,
    DocumentError,
    FileSystemError,
    InvalidPasswordError,
    InvalidUsernameError,
    KeyValueError,
    PodError,
    RemoteRejectedError,
    TransportUnreachableError,
    UserError,
    UsernameAlreadyExistsError,
    classify_remote_message,
    map_remote_error,
)


class TestClassifyRemoteMessage:
    """Test phrase matching per domain."""

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("user signup: user name already present", UsernameAlreadyExistsError),
            ("user login: invalid user name", InvalidUsernameError),
            ("User Login: Invalid Password", InvalidPasswordError),
            ("user stat: something else", UserError),
        ],
    )
    def test_user_messages(self, message, expected):
        assert classify_remote_message("user", message) is expected

    @pytest.mark.parametrize(
        "domain,expected",
        [
            ("pod", PodError),
            ("filesystem", FileSystemError),
            ("kv", KeyValueError),
            ("document", DocumentError),
        ],
    )
    def test_unmatched_falls_back_to_domain_error(self, domain, expected):
        assert classify_remote_message(domain, "anything at all") is expected

    def test_user_phrase_outside_user_domain_is_generic(self):
        assert classify_remote_message("pod", "user login: invalid password") is PodError

    def test_empty_message(self):
        assert classify_remote_message("kv", "") is KeyValueError

    def test_unknown_domain_raises(self):
        with pytest.raises(ValueError, match="Unknown error domain"):
            classify_remote_message("bogus", "x")


class TestMapRemoteError:
    def test_rejection_becomes_domain_error(self):
        original = RemoteRejectedError("user login: invalid password", code=400, status=400)
        mapped = map_remote_error("user", original)

        assert isinstance(mapped, InvalidPasswordError)
        assert mapped.message == original.message
        assert mapped.code == 400
        assert mapped.status == 400
        assert mapped.context["domain"] == "user"

    def test_transport_failure_unchanged(self):
        err = TransportUnreachableError("connection refused")
        assert map_remote_error("pod", err) is err

    def test_decode_failure_unchanged(self):
        err = DecodeFailedError("bad body")
        assert map_remote_error("kv", err) is err

    def test_domain_error_not_remapped(self):
        err = PodError("pod does not exist", code=400, status=400)
        assert map_remote_error("user", err) is err
