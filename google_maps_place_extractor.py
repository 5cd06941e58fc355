#!/usr/bin/env python3
"""
Google Maps Place Extractor

Turns a snapshot of a Google Maps search results page into ``PlaceRecord`` objects.

The results feed has no stable schema: every card is a ``/maps/place/`` link whose
sibling ``div.fontBodyMedium`` holds the metadata lines, and each field is recovered
from a fixed position in that layout. Every field derivation is total; a card that
does not fit the layout is skipped instead of failing the whole snapshot.

Usage:
    from google_maps_place_extractor import extract_places

    places = extract_places(page.content())
"""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from google_maps_url_parser import extract_id, extract_lat_lng


PLACE_LINK_SELECTOR = "a[href*='/maps/place/']"
BODY_CONTAINER_SELECTOR = "div.fontBodyMedium"
THUMBNAIL_SELECTOR = "img"

METADATA_SEPARATOR = "·"

# Layout positions inside the last metadata line of a card:
#   first child -> "<category> · <address>"
#   last child  -> "<opening hours> · <phone>"
CATEGORY_SEGMENT_INDEX = 0
ADDRESS_SEGMENT_INDEX = -1
PHONE_SEGMENT_INDEX = 1

# Aggregate link text: "<rating> <label> <count> <label>", e.g. "4,5 stars 128 reviews"
RATING_TOKEN_INDEX = 0
RATING_COUNT_TOKEN_INDEX = 2

# Optional "+" then ASCII digits; separators, parentheses and minus signs are
# rejected. There is no upper bound, Python ints do not overflow.
_INTEGER_TOKEN = re.compile(r"\+?[0-9]+")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PlaceRecord:
    id: str
    formatted_address: str
    location: Location
    primary_type: str
    maps_uri: str
    thumbnail: Optional[str] = None
    international_phone_number: Optional[str] = None
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the Places API field names."""

        return {
            "id": self.id,
            "formattedAddress": self.formatted_address,
            "location": asdict(self.location),
            "primaryType": self.primary_type,
            "mapsUri": self.maps_uri,
            "thumbnail": self.thumbnail,
            "internationalPhoneNumber": self.international_phone_number,
            "rating": self.rating,
            "userRatingCount": self.user_rating_count,
        }


def extract_places(snapshot: str) -> List[PlaceRecord]:
    """Parse a full page markup snapshot into place records."""

    soup = BeautifulSoup(snapshot or "", "html.parser")
    places = parse_place_cards(soup)
    logger.debug("Extracted %s places from snapshot", len(places))
    return places


def parse_place_cards(soup: BeautifulSoup) -> List[PlaceRecord]:
    """Build one record per well-formed place link in document order."""

    places: List[PlaceRecord] = []

    for link in soup.select(PLACE_LINK_SELECTOR):
        place = _parse_place_link(link)
        if place is not None:
            places.append(place)

    return places


def _parse_place_link(link: Tag) -> Optional[PlaceRecord]:
    url = link.get("href")
    if not url:
        return None

    parent = link.parent
    if not isinstance(parent, Tag) or isinstance(parent, BeautifulSoup):
        logger.debug("Skipping place link without element parent: %s", url)
        return None

    body = parent.select_one(BODY_CONTAINER_SELECTOR)
    if body is None:
        logger.debug("Skipping place link without body container: %s", url)
        return None

    lines = _child_elements(body)
    if not lines:
        logger.debug("Skipping place link with empty body container: %s", url)
        return None

    metadata = _child_elements(lines[-1])
    first_of_last = metadata[0] if metadata else None
    last_of_last = metadata[-1] if metadata else None

    summary_segments = _split_segments(first_of_last)
    contact_segments = _split_segments(last_of_last)

    tokens = _joined_text(link).split()
    latitude, longitude = extract_lat_lng(url)

    return PlaceRecord(
        id=extract_id(url),
        formatted_address=_segment(summary_segments, ADDRESS_SEGMENT_INDEX) or "",
        location=Location(latitude=latitude, longitude=longitude),
        primary_type=(_segment(summary_segments, CATEGORY_SEGMENT_INDEX) or "").lower(),
        maps_uri=url,
        thumbnail=_thumbnail(parent),
        international_phone_number=_segment(contact_segments, PHONE_SEGMENT_INDEX),
        rating=parse_rating(_token(tokens, RATING_TOKEN_INDEX)),
        user_rating_count=parse_rating_count(_token(tokens, RATING_COUNT_TOKEN_INDEX)),
    )


def _child_elements(node: Tag) -> List[Tag]:
    return node.find_all(True, recursive=False)


def _joined_text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return " ".join(node.strings).strip()


def _split_segments(node: Optional[Tag]) -> List[str]:
    if node is None:
        return []
    return _joined_text(node).split(METADATA_SEPARATOR)


def _segment(segments: Sequence[str], index: int) -> Optional[str]:
    try:
        return segments[index].strip()
    except IndexError:
        return None


def _token(tokens: Sequence[str], index: int) -> Optional[str]:
    if index < len(tokens):
        return tokens[index]
    return None


def _thumbnail(parent: Tag) -> Optional[str]:
    image = parent.select_one(THUMBNAIL_SELECTOR)
    if image is None:
        return None
    return image.get("src")


def parse_rating(token: Optional[str]) -> Optional[float]:
    """Parse ``"4,5"`` or ``"4.5"`` into a float."""

    if not token:
        return None
    try:
        return float(token.replace(",", "."))
    except ValueError:
        return None


def parse_rating_count(token: Optional[str]) -> Optional[int]:
    """Parse a plain non-negative integer token."""

    if not token or not _INTEGER_TOKEN.fullmatch(token):
        return None
    return int(token)
