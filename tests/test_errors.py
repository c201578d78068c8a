"""Tests for the error taxonomy and provider error code mapping."""

import pytest

from connections_cloud_oauth.errors import (
    AuthorizationError,
    ConnectionsCloudOAuthError,
    InternalOAuthError,
    ProfileFetchError,
    SessionRequiredError,
    TokenExchangeError,
    describe_error_code,
    status_for_error_code,
)


class TestStatusForErrorCode:
    """Tests for status_for_error_code function."""

    @pytest.mark.parametrize(
        "code,status",
        [
            ("oauth_denied", 403),
            ("server_error", 502),
            ("temporarily_unavailable", 503),
        ],
    )
    def test_known_codes(self, code: str, status: int) -> None:
        """Test that each enumerated code maps to its status."""
        assert status_for_error_code(code) == status

    def test_unknown_code_is_500(self) -> None:
        """Test that unrecognized codes fall through to 500."""
        assert status_for_error_code("oauth_invalid_clientid") == 500
        assert status_for_error_code("something_else") == 500

    def test_missing_code_is_500(self) -> None:
        """Test that a missing code maps to 500."""
        assert status_for_error_code(None) == 500


class TestAuthorizationError:
    """Tests for AuthorizationError."""

    def test_status_derived_from_code(self) -> None:
        """Test that status is derived from the code when not given."""
        error = AuthorizationError("Service down", "temporarily_unavailable")

        assert error.status == 503
        assert error.code == "temporarily_unavailable"
        assert error.message == "Service down"
        assert str(error) == "Service down"

    def test_explicit_status_wins(self) -> None:
        """Test that an explicit status overrides the table."""
        error = AuthorizationError("Denied", "oauth_denied", status=401)
        assert error.status == 401

    def test_code_defaults_to_server_error(self) -> None:
        """Test that code defaults to server_error but status stays 500."""
        error = AuthorizationError("Something failed")

        assert error.code == "server_error"
        assert error.status == 500

    def test_unknown_code_status_500(self) -> None:
        """Test that unknown codes never produce an undefined status."""
        error = AuthorizationError("Bad client", "oauth_invalid_clientid")
        assert error.status == 500

    def test_carries_uri(self) -> None:
        """Test that the error URI is kept."""
        error = AuthorizationError("x", "server_error", "https://example.com/help")

        assert error.uri == "https://example.com/help"
        assert error.to_dict()["uri"] == "https://example.com/help"

    def test_to_dict_omits_missing_uri(self) -> None:
        """Test serialization without a URI."""
        data = AuthorizationError("x", "server_error").to_dict()

        assert data == {"message": "x", "code": "server_error", "status": 502}


class TestErrorHierarchy:
    """Tests for the exception hierarchy."""

    def test_all_errors_share_base(self) -> None:
        """Test that every error derives from the package base class."""
        for cls in (AuthorizationError, SessionRequiredError, TokenExchangeError, ProfileFetchError):
            assert issubclass(cls, ConnectionsCloudOAuthError)

    def test_transport_errors_carry_cause(self) -> None:
        """Test that transport errors keep the underlying cause and status."""
        cause = RuntimeError("connection reset")
        error = TokenExchangeError("Failed to obtain access token", cause=cause, status_code=401)

        assert isinstance(error, InternalOAuthError)
        assert error.cause is cause
        assert error.status_code == 401

    def test_session_required_has_default_message(self) -> None:
        """Test that SessionRequiredError explains the integration fault."""
        assert "session" in str(SessionRequiredError())


class TestDescribeErrorCode:
    """Tests for describe_error_code function."""

    def test_documented_code(self) -> None:
        """Test that documented provider codes have a description."""
        assert "expired" in describe_error_code("oauth_authorization_code_expired")

    def test_unknown_code(self) -> None:
        """Test that unknown codes have no description."""
        assert describe_error_code("not_a_code") == ""
