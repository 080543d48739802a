"""
Tests para config.py - Ajustes del motor.
"""

import re

import pytest
from pydantic import ValidationError

from udyam.config import (
    AADHAAR_PATTERN,
    DEFAULT_API_URL,
    ORGANISATION_TYPES,
    PAN_PATTERN,
    PINCODE_PATTERN,
    Settings,
)


class TestSettings:
    """Tests de Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.api_url == DEFAULT_API_URL
        assert settings.autofill_debounce_ms == 500
        assert settings.autofill_delay == 0.5
        assert settings.log_level == "WARNING"

    def test_strips_trailing_slash(self):
        assert Settings(api_url="http://api.test///").api_url == "http://api.test"

    def test_log_level_upper(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_negative_timeout(self):
        with pytest.raises(ValidationError):
            Settings(read_timeout=-1)

    def test_from_env(self):
        settings = Settings.from_env({
            "UDYAM_API_URL": "http://backend:3001/",
            "UDYAM_AUTOFILL_DEBOUNCE_MS": "250",
            "UDYAM_PUBLIC_PINCODE_FALLBACK": "false",
            "OTHER": "ignored",
        })
        assert settings.api_url == "http://backend:3001"
        assert settings.autofill_delay == 0.25
        assert settings.public_pincode_fallback is False

    def test_from_env_empty(self):
        assert Settings.from_env({}) == Settings()


class TestPatterns:
    """Tests de los patrones del dominio."""

    def test_aadhaar(self):
        assert re.fullmatch(AADHAAR_PATTERN, "123456789012")
        assert not re.fullmatch(AADHAAR_PATTERN, "12345678901")

    def test_pan(self):
        assert re.fullmatch(PAN_PATTERN, "ABCDE1234F")
        assert not re.fullmatch(PAN_PATTERN, "ABCD12345F")

    def test_pincode(self):
        assert re.fullmatch(PINCODE_PATTERN, "400001")
        assert not re.fullmatch(PINCODE_PATTERN, "40001")

    def test_organisation_types(self):
        assert len(ORGANISATION_TYPES) == 10
        assert ORGANISATION_TYPES[0] == "Proprietorship"
