"""Tests for configuration and secrets access."""
from unittest.mock import patch

import pytest

from src.utils import config


@pytest.fixture
def secrets():
    """Patch Streamlit secrets with a plain nested dict."""
    values = {}
    with patch.object(config.st, "secrets", values):
        yield values


class TestGetSecret:
    def test_nested_lookup(self, secrets):
        secrets["s3"] = {"bucket_name": "vendor-exports"}

        assert config.get_secret("s3.bucket_name") == "vendor-exports"

    def test_missing_key_returns_default(self, secrets):
        secrets["s3"] = {}

        assert config.get_secret("s3.bucket_name", "fallback") == "fallback"
        assert config.get_secret("nothing.here") is None

    def test_unreadable_secrets_return_default(self):
        class BrokenSecrets:
            def __getitem__(self, key):
                raise FileNotFoundError("No secrets file found")

        with patch.object(config.st, "secrets", BrokenSecrets()):
            assert config.get_secret("search.max_radius_km", 500.0) == 500.0


class TestSearchConfig:
    def test_defaults(self, secrets):
        search_config = config.get_search_config()

        assert search_config == {
            "default_radius_km": 50.0,
            "max_radius_km": 500.0,
            "default_page_size": 20,
            "max_page_size": 100,
            "store_timeout_seconds": 5.0,
            "min_cos_latitude": 1e-6,
            "distance_decimals": 1,
            "featured_min_rating": 4.0,
            "featured_min_rating_count": 5,
        }

    def test_overrides_are_coerced(self, secrets):
        secrets["search"] = {"max_radius_km": "250", "max_page_size": "50"}

        search_config = config.get_search_config()

        assert search_config["max_radius_km"] == 250.0
        assert search_config["max_page_size"] == 50


class TestApiConfig:
    def test_s3_defaults(self, secrets):
        s3_config = config.get_api_config("s3")

        assert s3_config["bucket_name"] == ""
        assert s3_config["vendors_folder"] == "vendors"
        assert s3_config["region_name"] == "us-east-1"

    def test_geocoding_defaults(self, secrets):
        geocoding = config.get_api_config("geocoding")

        assert geocoding["user_agent"] == "vendor_search"
        assert geocoding["max_retries"] == 3

    def test_unknown_api(self, secrets):
        assert config.get_api_config("smtp") == {}
        assert config.is_api_enabled("smtp") is False

    def test_s3_enabled_needs_credentials_and_bucket(self, secrets):
        secrets["s3"] = {"bucket_name": "vendor-exports"}
        assert config.is_api_enabled("s3") is False

        secrets["s3"].update({"aws_access_key_id": "key", "aws_secret_access_key": "secret"})
        assert config.is_api_enabled("s3") is True


class TestValidateConfiguration:
    def test_defaults_are_clean(self, secrets):
        assert config.validate_configuration() == {}

    def test_reports_inconsistent_limits(self, secrets):
        secrets["search"] = {"default_page_size": 200, "default_radius_km": 900, "store_timeout_seconds": 0}

        issues = config.validate_configuration()

        assert set(issues) == {
            "search.default_page_size",
            "search.default_radius_km",
            "search.store_timeout_seconds",
        }

    def test_reports_page_size_above_hard_limit(self, secrets):
        secrets["search"] = {"max_page_size": 250}

        assert set(config.validate_configuration()) == {"search.max_page_size"}

    def test_reports_bucket_without_credentials(self, secrets):
        secrets["s3"] = {"bucket_name": "vendor-exports"}

        assert "s3" in config.validate_configuration()

    def test_reports_unknown_environment(self, secrets):
        secrets["app"] = {"environment": "qa"}

        assert "qa" in config.validate_configuration()["app"]

    def test_app_config_defaults(self, secrets):
        app_config = config.get_app_config()

        assert app_config["log_level"] == "INFO"
        assert app_config["local_vendor_file"] == "data/vendors.csv"
