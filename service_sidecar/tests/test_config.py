"""
Tests for sidecar configuration, logging redaction and error mapping.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from shared.config import SidecarConfig
from shared.errors import (
    ConfigurationError,
    DecryptionError,
    PayloadTooLargeError,
    RateLimitError,
    TokenDecodeError,
    UpstreamError,
    ValidationError,
)
from shared.logging import REDACTED, redact_sensitive_values


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "SIDECAR_PORT",
        "SIDECAR_HOST",
        "SIDECAR_SERVICE_NAME",
        "SIDECAR_MAX_BODY_BYTES",
        "APLOS_AUTH_TIMEOUT",
        "SIDECAR_RATE_LIMIT_WINDOW_SECONDS",
        "SIDECAR_ENV",
        "SIDECAR_LOG_LEVEL",
        "APLOS_API_BASE_URL",
        "APLOS_CLIENT_ID",
        "APLOS_PRIVATE_KEY",
        "SIDECAR_ALLOWED_NETWORKS",
        "SIDECAR_AUTH_TOKEN",
        "SIDECAR_RATE_LIMIT_MAX_REQUESTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSidecarConfig:
    """Test cases for SidecarConfig."""

    def test_defaults(self, clean_env):
        config = SidecarConfig(_env_file=None)

        assert config.port == 3001
        assert config.aplos_api_base_url == "https://app.aplos.com/hermes/api/v1"
        assert config.aplos_client_id == ""
        assert config.aplos_private_key.get_secret_value() == ""
        assert config.aplos_auth_timeout == 30.0
        assert config.max_body_bytes == 16384
        assert config.allowed_network_list == [
            "127.0.0.0/8", "::1/128", "10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16",
        ]
        assert config.service_name == "aplos-sidecar"

    def test_reads_environment(self, clean_env):
        clean_env.setenv("SIDECAR_PORT", "4010")
        clean_env.setenv("APLOS_CLIENT_ID", "client-abc")
        clean_env.setenv("APLOS_PRIVATE_KEY", "MIIEv...")
        clean_env.setenv("SIDECAR_ALLOWED_NETWORKS", "10.1.0.0/16, 127.0.0.1/32")
        clean_env.setenv("SIDECAR_RATE_LIMIT_MAX_REQUESTS", "0")

        config = SidecarConfig(_env_file=None)

        assert config.port == 4010
        assert config.aplos_client_id == "client-abc"
        assert config.aplos_private_key.get_secret_value() == "MIIEv..."
        assert config.allowed_network_list == ["10.1.0.0/16", "127.0.0.1/32"]
        assert config.rate_limit_max_requests == 0

    def test_private_key_hidden_from_repr(self, clean_env):
        config = SidecarConfig(_env_file=None, aplos_private_key="super-secret-key")

        assert "super-secret-key" not in repr(config)
        assert "super-secret-key" not in str(config.model_dump())

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(PydanticValidationError):
            SidecarConfig(_env_file=None, log_level="chatty")


class TestRedaction:
    """Sensitive values never reach log output."""

    def test_redacts_sensitive_keys(self):
        event = redact_sensitive_values(None, "info", {
            "event": "decrypted",
            "token": "plain",
            "encrypted_token": "cipher",
            "private_key": "pem",
            "scheme": "pkcs1v15",
        })

        assert event["token"] == REDACTED
        assert event["encrypted_token"] == REDACTED
        assert event["private_key"] == REDACTED
        assert event["scheme"] == "pkcs1v15"
        assert event["event"] == "decrypted"


class TestErrorStatusCodes:
    """Each failure class maps to its HTTP status."""

    @pytest.mark.parametrize("error,status", [
        (ConfigurationError(), 500),
        (ValidationError(), 400),
        (PayloadTooLargeError(), 400),
        (TokenDecodeError(), 400),
        (RateLimitError(), 429),
        (UpstreamError(), 502),
        (DecryptionError(), 500),
    ])
    def test_status(self, error, status):
        assert error.status_code == status
        assert error.to_response().model_dump() == {"error": error.message}

    def test_rate_limit_retry_after_header(self):
        assert RateLimitError(retry_after=12).headers == {"Retry-After": "12"}

    def test_payload_too_large_closes_connection(self):
        assert PayloadTooLargeError().headers == {"Connection": "close"}
