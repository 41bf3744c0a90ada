"""
Unit tests for settings validation.
"""

import pytest
from pydantic import ValidationError

from notesaas.config import DEV_SECRET_KEY, Settings


@pytest.mark.unit
class TestSettings:

    def test_environment_is_lowercased(self):
        assert Settings(environment="Staging").environment == "staging"

    def test_bcrypt_cost_floor(self):
        with pytest.raises(ValidationError):
            Settings(bcrypt_rounds=9)

    def test_plan_limits_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(free_plan_max_notes=0)

    def test_production_refuses_development_secret(self):
        with pytest.raises(ValidationError):
            Settings(environment="production", secret_key=DEV_SECRET_KEY)

    def test_production_with_own_secret(self):
        settings = Settings(environment="production", secret_key="x" * 64)

        assert settings.is_production
        assert not settings.is_development
