#!/usr/bin/env python3
"""
Google Maps URL helpers

Pure functions for reading the place identifier and coordinates that Google Maps
encodes inside ``/maps/place/`` links, plus the search URL builder used to open
a results feed.

Usage:
    from google_maps_url_parser import extract_id, extract_lat_lng

    place_id = extract_id(href)
    latitude, longitude = extract_lat_lng(href)
"""

import re
from typing import Optional, Tuple
from urllib.parse import quote_plus


SEARCH_URL_TEMPLATE = "https://www.google.com/maps/search/{query}/@{latitude},{longitude},{zoom}z"

PLACE_ID_TOKEN = "!19s"
UNKNOWN_PLACE_ID = "unknown"

# Map tile data block: ...!3d<lat>!4d<lng>...
LAT_LNG_PATTERN = re.compile(r"3d(-?\d+\.\d+)!4d(-?\d+\.\d+)")

UNRESOLVED_LOCATION: Tuple[float, float] = (0.0, 0.0)


def extract_id(url: str) -> str:
    """Return the place identifier following ``!19s``, or ``"unknown"``."""

    parts = (url or "").split("?")
    if len(parts) < 2:
        return UNKNOWN_PLACE_ID

    segments = parts[0].split(PLACE_ID_TOKEN)
    if len(segments) < 2:
        return UNKNOWN_PLACE_ID

    return segments[1]


def parse_lat_lng(url: str) -> Optional[Tuple[float, float]]:
    """Return ``(latitude, longitude)`` embedded in the URL, or None when absent."""

    match = LAT_LNG_PATTERN.search(url or "")
    if match is None:
        return None

    try:
        return float(match.group(1)), float(match.group(2))
    except ValueError:
        return None


def extract_lat_lng(url: str) -> Tuple[float, float]:
    """Like :func:`parse_lat_lng` but falls back to ``(0.0, 0.0)``."""

    coordinates = parse_lat_lng(url)
    if coordinates is None:
        return UNRESOLVED_LOCATION
    return coordinates


def build_search_url(query: str, latitude: float, longitude: float, zoom_level: int) -> str:
    """Build the Google Maps search URL centred on the given coordinates."""

    return SEARCH_URL_TEMPLATE.format(
        query=quote_plus(query.strip()),
        latitude=latitude,
        longitude=longitude,
        zoom=zoom_level,
    )
