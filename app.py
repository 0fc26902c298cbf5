"""
Streamlit search console for the vendor search engine.

Searches the vendor store around an address or a coordinate pair, with
category, location, rating and price filters, a sort order and page
controls. The store is the newest S3 snapshot when S3 is configured, and the
local snapshot from ``app.local_vendor_file`` otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st
from geopy.exc import GeocoderServiceError

st.set_page_config(page_title="Vendor Search", page_icon="🔎", layout="wide")

from src.app_logic import (  # noqa: E402 - must import after set_page_config
    build_search_response,
    get_featured_vendors,
    get_vendor_categories,
    parse_search_params,
    search_vendors,
)
from src.data.vendor_store import DataFrameVendorStore, S3VendorStore, VendorStore  # noqa: E402
from src.utils.config import get_app_config, get_search_config  # noqa: E402
from src.utils.errors import SearchError  # noqa: E402
from src.utils.geocoding import geocode_address, handle_geocoding_error  # noqa: E402

logger = logging.getLogger(__name__)

SORT_LABELS = {
    "rating": "Highest rated",
    "distance": "Nearest first",
    "price": "Lowest hourly rate",
}

RESULT_COLUMNS = {
    "displayName": "Vendor",
    "serviceCategories": "Services",
    "city": "City",
    "state": "State",
    "distance": "Distance (km)",
    "rating": "Rating",
    "ratingCount": "Reviews",
    "hourlyRate": "Hourly Rate",
}


def configure_logging() -> None:
    level_name = str(get_app_config()["log_level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@st.cache_resource(show_spinner=False)
def _load_local_store(path: str) -> DataFrameVendorStore:
    return DataFrameVendorStore.from_file(path)


def get_vendor_store() -> VendorStore:
    """S3 snapshot store when configured, otherwise the local snapshot."""
    s3_store = S3VendorStore()
    if s3_store.is_configured():
        return s3_store
    path = get_app_config()["local_vendor_file"]
    logger.info(f"S3 not configured - using local vendor snapshot {path}")
    return _load_local_store(path)


def results_to_frame(response: Dict[str, Any]) -> pd.DataFrame:
    vendors = response["data"]["vendors"]
    if not vendors:
        return pd.DataFrame(columns=list(RESULT_COLUMNS.values()))
    df = pd.DataFrame(vendors)
    df["serviceCategories"] = df["serviceCategories"].apply(", ".join)
    return df[list(RESULT_COLUMNS)].rename(columns=RESULT_COLUMNS)


def render_search_form() -> Optional[Dict[str, Any]]:
    """Sidebar form; returns raw search parameters once submitted."""
    search_config = get_search_config()
    with st.sidebar.form("vendor_search"):
        st.subheader("Search area")
        address = st.text_input("Address or place", placeholder="e.g. 1 Market St, San Francisco, CA")
        use_coordinates = st.checkbox("Use coordinates instead of an address")
        col1, col2 = st.columns(2)
        latitude = col1.number_input("Latitude", min_value=-90.0, max_value=90.0, value=0.0, format="%.5f")
        longitude = col2.number_input("Longitude", min_value=-180.0, max_value=180.0, value=0.0, format="%.5f")
        radius = st.slider(
            "Radius (km)",
            min_value=1,
            max_value=int(search_config["max_radius_km"]),
            value=int(search_config["default_radius_km"]),
        )

        st.subheader("Filters")
        categories = st.multiselect("Service categories", get_vendor_categories())
        city = st.text_input("City contains")
        state = st.text_input("State contains")
        min_rating = st.slider("Minimum rating", min_value=0.0, max_value=5.0, value=0.0, step=0.5)
        max_hourly_rate = st.number_input("Maximum hourly rate (0 for any)", min_value=0.0, value=0.0, step=5.0)

        st.subheader("Results")
        sort_by = st.selectbox("Sort by", list(SORT_LABELS), format_func=SORT_LABELS.get)
        limit = st.selectbox("Results per page", [10, 20, 50, 100], index=1)
        page = st.number_input("Page", min_value=1, value=1, step=1)

        submitted = st.form_submit_button("Search", type="primary")

    if not submitted:
        return None

    params: Dict[str, Any] = {
        "radius": radius,
        "serviceCategories": categories,
        "city": city,
        "state": state,
        "minRating": min_rating or None,
        "maxHourlyRate": max_hourly_rate or None,
        "sortBy": sort_by,
        "limit": limit,
        "page": int(page),
    }

    if use_coordinates:
        params["latitude"], params["longitude"] = latitude, longitude
    elif address.strip():
        try:
            with st.spinner("Looking up address..."):
                origin = geocode_address(address)
        except GeocoderServiceError as e:
            st.sidebar.error(handle_geocoding_error(address, e))
            return None
        if origin is None:
            st.sidebar.error(f"Could not find a location for '{address}'. Try a more specific address.")
            return None
        params["latitude"], params["longitude"] = origin.latitude, origin.longitude

    return params


def render_results(response: Dict[str, Any], title: str) -> None:
    pagination = response["data"]["pagination"]
    st.subheader(title)
    st.caption(
        f"{pagination['total']} vendors found - page {pagination['page']} of {pagination['pages']} "
        f"({pagination['limit']} per page)"
    )
    if pagination["total"] == 0:
        st.info("No vendors match these filters. Try a larger radius or fewer filters.")
        return
    st.dataframe(results_to_frame(response), hide_index=True, use_container_width=True)


def main() -> None:
    configure_logging()

    st.title("🔎 Vendor Search")
    st.markdown("Find active vendors near a location, ranked by rating, distance or price.")

    try:
        store = get_vendor_store()
    except (FileNotFoundError, ValueError) as e:
        st.error("❌ Failed to load vendor data. Configure S3 or provide a local vendor snapshot.")
        st.info(f"**Technical details:** {type(e).__name__}: {e}")
        st.stop()

    params = render_search_form()

    try:
        if params is None:
            query = parse_search_params({})
            envelope = get_featured_vendors(store)
            render_results(build_search_response(envelope, query), "⭐ Featured vendors")
            return

        query = parse_search_params(params)
        envelope = search_vendors(store, query)
        render_results(build_search_response(envelope, query), "Search results")
    except SearchError as e:
        st.error(f"❌ {e.message}")
        if e.recoverable:
            st.info("💡 The vendor store could not be reached. Please try again in a moment.")
        logger.warning(f"Search console request failed: {e.code}: {e.message}")


if __name__ == "__main__":
    main()
