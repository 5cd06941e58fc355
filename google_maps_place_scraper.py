#!/usr/bin/env python3
"""
Google Maps Place Scraper

Runs a Google Maps search centred on a coordinate, scrolls the results feed to the
end and returns the listed places as ``PlaceRecord`` objects.

Usage:
    from google_maps_place_scraper import PlaceSearchScraper, SearchRequest

    scraper = PlaceSearchScraper()
    places = scraper.search(SearchRequest("restaurante", -23.5614, -46.6559, 18))
"""

import json
import logging
import sys
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Mapping, Optional

from google_maps_feed_scroller import (
    FeedScrollPhase,
    ScrollLimitExceeded,
    scroll_feed_until_complete,
)
from google_maps_place_extractor import PlaceRecord, extract_places
from google_maps_session_manager import GoogleMapsSessionManager, NavigationError
from google_maps_url_parser import build_search_url
from scraper_config import ScraperSettings, load_settings


@dataclass(frozen=True)
class SearchRequest:
    query: str
    latitude: float
    longitude: float
    zoom_level: int

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "SearchRequest":
        """Build a request from an invocation payload (``z`` is accepted for ``zoom_level``)."""

        if not isinstance(event, Mapping):
            raise ValueError("Search event must be a mapping")

        query = event.get("query")
        if not isinstance(query, str) or not query.strip():
            raise ValueError("Search event requires a non-empty 'query'")

        zoom = event.get("zoom_level", event.get("zoomLevel", event.get("z")))

        try:
            return cls(
                query=query,
                latitude=float(event["latitude"]),
                longitude=float(event["longitude"]),
                zoom_level=int(zoom),
            )
        except KeyError as exc:
            raise ValueError(f"Search event missing field {exc.args[0]!r}") from None
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid search event: {exc}") from None

    @property
    def url(self) -> str:
        return build_search_url(self.query, self.latitude, self.longitude, self.zoom_level)


class PlaceSearchScraper:
    """
    Scrapes place listings from a Google Maps search results feed.

    One browser session is opened per ``search`` call and closed afterwards.
    Navigation failures propagate as ``NavigationError``; no partial results are
    returned in that case.
    """

    def __init__(self, settings: Optional[ScraperSettings] = None, session_factory=None):
        self.settings = settings or load_settings()
        self.session_factory = session_factory or GoogleMapsSessionManager
        self.logger = logging.getLogger(__name__)

        # Configure logging
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def search(self, request: SearchRequest) -> List[PlaceRecord]:
        """Open a browser, scrape the feed for ``request`` and close the browser."""

        url = request.url
        self.logger.info("Starting place search for %r at %s", request.query, url)

        with self.session_factory(self.settings) as session:
            navigator = session.open_navigator()
            places = self.scrape_feed(navigator, url)

        self.logger.info("Successfully scraped %d places", len(places))
        return places

    def scrape_feed(self, navigator, url: str) -> List[PlaceRecord]:
        """Load ``url`` through ``navigator``, exhaust the feed and extract its places."""

        settings = self.settings

        navigator.navigate_to(url)
        navigator.wait_until_navigated()
        navigator.wait_for_element(settings.search_box_selector)
        navigator.wait_for_element(settings.feed_selector)

        telemetry = scroll_feed_until_complete(
            navigator,
            settings.feed_selector,
            settings.sentinel_selector,
            settings.sentinel_text,
            logger=self.logger,
            growth_wait_ms=settings.growth_wait_ms,
            load_wait_ms=settings.load_wait_ms,
            max_iterations=settings.max_scroll_iterations,
            max_duration_s=settings.max_scroll_seconds,
        )

        if telemetry.phase is FeedScrollPhase.FAILED:
            if settings.strict_scroll_bound:
                raise ScrollLimitExceeded(telemetry)
            self.logger.warning(
                "End of list not reached after %s scrolls; extracting loaded results",
                telemetry.iterations,
            )

        snapshot = navigator.get_content()
        places = extract_places(snapshot)
        self.logger.info(
            "Extracted %s places (scrolls: %s, feed height: %s)",
            len(places),
            telemetry.iterations,
            telemetry.final_height,
        )
        return places

    def save_results(self, places: List[PlaceRecord], request: SearchRequest, filename: Optional[str] = None) -> str:
        """
        Save scraping results to a JSON file.

        Args:
            places: Extracted place records
            request: The search that produced them
            filename: Optional filename (default: google_maps_places.json)

        Returns:
            Path to the saved file
        """

        if not filename:
            filename = 'google_maps_places.json'

        result = {
            'request': asdict(request),
            'url': request.url,
            'scraped_at': time.strftime('%Y-%m-%d %H:%M:%S'),
            'total_places': len(places),
            'places': [place.to_dict() for place in places],
        }

        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2, ensure_ascii=False)

        self.logger.info("Results saved to %s", filename)
        return filename


def handler(event: Mapping[str, Any], context=None) -> List[Dict[str, Any]]:
    """Function-style entry point: search payload in, serialised places out."""

    request = SearchRequest.from_event(event)
    scraper = PlaceSearchScraper()
    return [place.to_dict() for place in scraper.search(request)]


def scroll_iteration_bound(value: str) -> int:
    """argparse type for '--max-iterations': a non-negative integer."""

    bound = int(value)
    if bound < 0:
        raise ValueError(f"scroll iteration bound must be >= 0, got {bound}")
    return bound


def main():
    """Command-line interface for the scraper."""

    import argparse

    parser = argparse.ArgumentParser(description='Scrape place listings from a Google Maps search')
    parser.add_argument('query', help='Search text, e.g. "restaurante"')
    parser.add_argument('--lat', type=float, required=True, help='Latitude of the map centre')
    parser.add_argument('--lng', type=float, required=True, help='Longitude of the map centre')
    parser.add_argument('--zoom', type=int, default=18, help='Map zoom level (default: 18)')
    parser.add_argument('--output', '-o', help='Output JSON file (optional)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--headed', action='store_true', help='Run browser in headed mode (visible)')
    parser.add_argument(
        '--max-iterations',
        type=scroll_iteration_bound,
        help='Maximum scroll iterations before giving up (0: no limit)',
    )

    args = parser.parse_args()

    # Configure logging
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    settings = load_settings().with_overrides(headless=False if args.headed else None)
    if args.max_iterations is not None:
        # 0 lifts the cap, the same as GMAPS_MAX_SCROLL_ITERATIONS=0
        settings = replace(settings, max_scroll_iterations=args.max_iterations or None)
    scraper = PlaceSearchScraper(settings)
    request = SearchRequest(args.query, args.lat, args.lng, args.zoom)

    try:
        places = scraper.search(request)
    except (NavigationError, ScrollLimitExceeded) as exc:
        logging.getLogger(__name__).error("Scraping failed: %s", exc)
        sys.exit(1)

    filename = scraper.save_results(places, request, args.output)

    # Print summary
    print(f"\nScraping completed!")
    print(f"Found {len(places)} places for {request.query!r}")
    print(f"Results saved to: {filename}")

    for place in places:
        print(f"  - {place.id}: {place.primary_type} | {place.formatted_address}")


if __name__ == '__main__':
    main()
