"""Tests for application settings."""

import pytest

from domeal.config import Settings


def test_default_database_url_names_psycopg2_driver():
    """The default URL does not depend on SQLAlchemy's default PostgreSQL driver."""
    default = Settings.model_fields["database_url"].default
    assert default.startswith("postgresql+psycopg2://")


def test_upload_lifetime_is_not_a_setting():
    assert "upload_url_expiration_minutes" not in Settings.model_fields


def test_production_rejects_localhost_database():
    with pytest.raises(ValueError):
        Settings(environment="production", database_url="postgresql+psycopg2://u:p@localhost/db")
