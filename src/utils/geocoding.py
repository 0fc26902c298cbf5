"""Address geocoding for search origins, with caching and rate limiting."""
import logging
from typing import Optional, Tuple

import streamlit as st
from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from src.data.models import GeoPoint
from src.utils.config import get_api_config

logger = logging.getLogger(__name__)

_RATE_LIMITED_GEOCODER = None


def _get_rate_limited_geocoder():
    global _RATE_LIMITED_GEOCODER
    if _RATE_LIMITED_GEOCODER is not None:
        return _RATE_LIMITED_GEOCODER

    config = get_api_config("geocoding")
    geolocator = Nominatim(user_agent=config["user_agent"], timeout=config["request_timeout"])
    _RATE_LIMITED_GEOCODER = RateLimiter(
        geolocator.geocode,
        min_delay_seconds=float(config["rate_limit_delay"]),
        max_retries=int(config["max_retries"]),
    )
    return _RATE_LIMITED_GEOCODER


@st.cache_data(ttl=60 * 60 * 24, show_spinner=False)
def _geocode_cached(address: str) -> Optional[Tuple[float, float]]:
    try:
        location = _get_rate_limited_geocoder()(address)
    except (GeocoderTimedOut, GeocoderServiceError, GeocoderUnavailable) as e:
        logger.warning(f"Geocoding unavailable for '{address}': {type(e).__name__}: {e}")
        raise
    if location is None:
        logger.info(f"No geocoding match for '{address}'")
        return None
    return float(location.latitude), float(location.longitude)


def geocode_address(address: str) -> Optional[GeoPoint]:
    """Resolve a free-text address to a GeoPoint, or None if it can't be found.

    Raises:
        GeocoderServiceError: if the lookup service times out or is unavailable;
            failed lookups are not cached
    """
    if not address or not address.strip():
        return None
    coords = _geocode_cached(address.strip())
    return GeoPoint(*coords) if coords else None


def handle_geocoding_error(address: str, error: Exception) -> str:
    et = str(error).lower()
    if "timeout" in et or "timed out" in et:
        return "Geocoding timeout: the address lookup service is taking too long. Please try again in a moment."
    if "rate" in et or "limit" in et:
        return "Rate limited: too many requests to the geocoding service. Please wait a moment and try again."
    if "unavailable" in et or "service" in et:
        return "Service unavailable: the geocoding service is temporarily unavailable. Please try again later."
    if "network" in et or "connection" in et:
        return "Network error: cannot connect to the geocoding service. Please check your internet connection."
    return f"Geocoding error: unable to find a location for '{address}'. ({type(error).__name__})"
