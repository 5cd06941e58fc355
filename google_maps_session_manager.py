#!/usr/bin/env python3
"""
Google Maps Session Manager

Owns the Playwright browser used for one scraping run and exposes the page through
``PlaywrightNavigator``, the small navigation surface the feed scroller and the
place scraper rely on.

Usage:
    from google_maps_session_manager import GoogleMapsSessionManager

    with GoogleMapsSessionManager(settings) as session:
        navigator = session.open_navigator()
        navigator.navigate_to("https://www.google.com/maps")
"""

import logging
import time
from typing import Any, Optional

from playwright.sync_api import (
    sync_playwright,
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
)

from scraper_config import ScraperSettings


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

CONSENT_HOST = "consent.google.com"

CONSENT_BUTTON_SELECTORS = (
    'button:has-text("Accept all")',
    'button:has-text("Aceitar tudo")',
    'button:has-text("I agree")',
    '[aria-label*="Accept"]',
    '[aria-label*="Aceitar"]',
)


class NavigationError(RuntimeError):
    """A browser round-trip failed; the current run cannot continue."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class ElementNotFoundError(NavigationError):
    """No element matched the selector at lookup time."""


class PlaywrightNavigator:
    """Navigation operations over a single Playwright page."""

    def __init__(self, page: Page, *, timeout_ms: int = 30000, logger=None):
        self.page = page
        self.timeout_ms = timeout_ms
        self.logger = logger or logging.getLogger(__name__)

    def navigate_to(self, url: str) -> None:
        self.logger.info("Navigating to: %s", url)
        start_time = time.time()
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError("navigate", str(exc)) from exc
        self.logger.info("Navigation completed in %.1fs", time.time() - start_time)

        if CONSENT_HOST in self.page.url:
            self.logger.info("Consent page detected, handling...")
            self._handle_consent(self.page)

    def wait_until_navigated(self) -> None:
        try:
            self.page.wait_for_load_state("domcontentloaded", timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError("wait_until_navigated", str(exc)) from exc

    def wait_for_element(self, selector: str) -> None:
        try:
            self.page.wait_for_selector(selector, timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError(f"wait_for_element({selector})", str(exc)) from exc

    def evaluate(self, script: str) -> Any:
        try:
            return self.page.evaluate(script)
        except PlaywrightError as exc:
            raise NavigationError("evaluate", str(exc)) from exc

    def find_element(self, selector: str) -> ElementHandle:
        try:
            handle = self.page.query_selector(selector)
        except PlaywrightError as exc:
            raise NavigationError(f"find_element({selector})", str(exc)) from exc
        if handle is None:
            raise ElementNotFoundError(f"find_element({selector})", "no matching element")
        return handle

    def get_inner_text(self, handle: ElementHandle) -> str:
        try:
            return handle.inner_text()
        except PlaywrightError as exc:
            raise NavigationError("get_inner_text", str(exc)) from exc

    def get_content(self) -> str:
        try:
            return self.page.content()
        except PlaywrightError as exc:
            raise NavigationError("get_content", str(exc)) from exc

    def wait_for_timeout(self, ms: int) -> None:
        try:
            self.page.wait_for_timeout(ms)
        except PlaywrightError as exc:
            raise NavigationError("wait_for_timeout", str(exc)) from exc

    def _handle_consent(self, page: Page) -> None:
        """Click through the Google consent interstitial."""
        for selector in CONSENT_BUTTON_SELECTORS:
            try:
                button = page.locator(selector).first
                if button.is_visible(timeout=5000):
                    button.click()
                    self.logger.info("Clicked consent button: %s", selector)
                    break
            except PlaywrightError as exc:
                self.logger.debug("Consent selector %s failed: %s", selector, exc)
                continue

        try:
            page.wait_for_url(lambda url: CONSENT_HOST not in url, timeout=15000)
            self.logger.info("Successfully navigated away from consent page")
        except PlaywrightError:
            self.logger.warning("Still on consent page after attempting acceptance")


class GoogleMapsSessionManager:
    """
    Launches Chromium for a single scraping run.

    The session is exclusively owned by one run; create a new manager per search.
    """

    def __init__(self, settings: Optional[ScraperSettings] = None):
        self.settings = settings or ScraperSettings()
        self.logger = logging.getLogger(__name__)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    def open_navigator(self) -> PlaywrightNavigator:
        """Start the browser if needed and return a navigator over a fresh page."""
        try:
            if self._context is None:
                self._start_browser()
            page = self._context.new_page()
        except PlaywrightError as exc:
            self.cleanup()
            raise NavigationError("launch", str(exc)) from exc

        page.set_default_timeout(self.settings.navigation_timeout_ms)
        return PlaywrightNavigator(page, timeout_ms=self.settings.navigation_timeout_ms, logger=self.logger)

    def _start_browser(self):
        if self._playwright is None:
            self._playwright = sync_playwright().start()

        launch_kwargs = {}
        if self.settings.browser_path:
            launch_kwargs["executable_path"] = self.settings.browser_path

        self.logger.info("Launching Chromium (headless=%s)", self.settings.headless)
        self._browser = self._playwright.chromium.launch(
            headless=self.settings.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
                '--disable-features=VizDisplayCompositor',
            ],
            **launch_kwargs,
        )
        self._context = self._browser.new_context(
            user_agent=USER_AGENT,
            locale=self.settings.locale,
            timezone_id=self.settings.timezone_id,
        )

    def cleanup(self):
        try:
            if self._context:
                self._context.close()
        except PlaywrightError as exc:
            self.logger.debug("Context close failed: %s", exc)
        finally:
            self._context = None

        try:
            if self._browser:
                self._browser.close()
        except PlaywrightError as exc:
            self.logger.debug("Browser close failed: %s", exc)
        finally:
            self._browser = None

        try:
            if self._playwright:
                self._playwright.stop()
        finally:
            self._playwright = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
