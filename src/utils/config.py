"""
Configuration and secrets access for the vendor search service.

All settings come from Streamlit's secrets store (``.streamlit/secrets.toml``
or the deployment's secrets UI). Every getter falls back to a default so the
search pipeline and the tests run without a secrets file.

Usage:
    from src.utils.config import get_search_config, get_api_config

    search_config = get_search_config()
    max_radius = search_config["max_radius_km"]

    s3_config = get_api_config("s3")
    bucket = s3_config.get("bucket_name")
"""

import logging
from typing import Any, Dict

import streamlit as st

logger = logging.getLogger(__name__)


def get_secret(key_path: str, default: Any = None) -> Any:
    """
    Safely retrieve a secret from Streamlit's secrets management.

    Args:
        key_path: Dot-notation path to the secret (e.g., 'search.max_radius_km')
        default: Default value if secret is not found

    Returns:
        The secret value or default if not found

    Examples:
        >>> get_secret('search.default_radius_km', 50)
        >>> get_secret('s3.bucket_name', '')
    """
    try:
        keys = key_path.split(".")
        value = st.secrets

        for key in keys:
            try:
                value = value[key]
            except Exception:
                return default

        return value
    except Exception as e:
        logger.warning(f"Failed to retrieve secret '{key_path}': {e}")
        return default


def get_search_config() -> Dict[str, Any]:
    """
    Get limits and defaults for vendor search requests.

    Returns:
        Dictionary containing search configuration
    """
    return {
        "default_radius_km": float(get_secret("search.default_radius_km", 50.0)),
        "max_radius_km": float(get_secret("search.max_radius_km", 500.0)),
        "default_page_size": int(get_secret("search.default_page_size", 20)),
        "max_page_size": int(get_secret("search.max_page_size", 100)),
        "store_timeout_seconds": float(get_secret("search.store_timeout_seconds", 5.0)),
        "min_cos_latitude": float(get_secret("search.min_cos_latitude", 1e-6)),
        "distance_decimals": int(get_secret("search.distance_decimals", 1)),
        "featured_min_rating": float(get_secret("search.featured_min_rating", 4.0)),
        "featured_min_rating_count": int(get_secret("search.featured_min_rating_count", 5)),
    }


def get_api_config(api_name: str) -> Dict[str, Any]:
    """
    Get configuration for a specific API or service.

    Args:
        api_name: Name of the API/service ('s3' or 'geocoding')

    Returns:
        Dictionary containing the API configuration
    """
    if api_name == "s3":
        return {
            "aws_access_key_id": get_secret("s3.aws_access_key_id", ""),
            "aws_secret_access_key": get_secret("s3.aws_secret_access_key", ""),
            "bucket_name": get_secret("s3.bucket_name", ""),
            "region_name": get_secret("s3.region_name", "us-east-1"),
            "vendors_folder": get_secret("s3.vendors_folder", "vendors"),
        }
    elif api_name == "geocoding":
        return {
            "user_agent": get_secret("geocoding.user_agent", "vendor_search"),
            "request_timeout": get_secret("geocoding.request_timeout", 10),
            "rate_limit_delay": get_secret("geocoding.rate_limit_delay", 1.0),
            "max_retries": get_secret("geocoding.max_retries", 3),
        }
    else:
        return {}


def get_app_config() -> Dict[str, Any]:
    """
    Get general application configuration.

    Returns:
        Dictionary containing app configuration
    """
    return {
        "environment": get_secret("app.environment", "production"),
        "debug_mode": get_secret("app.debug_mode", False),
        "log_level": get_secret("app.log_level", "INFO"),
        "local_vendor_file": get_secret("app.local_vendor_file", "data/vendors.csv"),
    }


def is_api_enabled(api_name: str) -> bool:
    """
    Check if a specific API is enabled and properly configured.

    Args:
        api_name: Name of the API to check

    Returns:
        True if the API has its required configuration
    """
    if api_name == "s3":
        config = get_api_config("s3")
        return (
            bool(config["aws_access_key_id"]) and bool(config["aws_secret_access_key"]) and bool(config["bucket_name"])
        )
    elif api_name == "geocoding":
        return bool(get_api_config("geocoding")["user_agent"])
    else:
        return False


def validate_configuration() -> Dict[str, str]:
    """
    Validate the application configuration and return any warnings or errors.

    Returns:
        Dictionary with configuration validation results
    """
    issues = {}

    search_config = get_search_config()
    if search_config["default_page_size"] > search_config["max_page_size"]:
        issues["search.default_page_size"] = "Default page size exceeds the maximum page size"
    if search_config["max_page_size"] > 100:
        issues["search.max_page_size"] = "Maximum page size is capped at 100"
    if search_config["default_radius_km"] > search_config["max_radius_km"]:
        issues["search.default_radius_km"] = "Default radius exceeds the maximum radius"
    if search_config["store_timeout_seconds"] <= 0:
        issues["search.store_timeout_seconds"] = "Store timeout must be positive"

    s3_config = get_api_config("s3")
    if s3_config["bucket_name"] and not is_api_enabled("s3"):
        issues["s3"] = "S3 bucket is set but AWS credentials are missing"

    app_config = get_app_config()
    if app_config["environment"] not in ["development", "staging", "production"]:
        issues["app"] = f"Unknown environment: {app_config['environment']}"

    return issues
