#!/usr/bin/env python3
"""Runtime settings for the Google Maps place scraper.

Values come from the process environment, optionally seeded from ``.env`` files
next to this module, its parent directory or the working directory. Existing
environment variables always win over ``.env`` contents.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv


_MODULE_DIR = Path(__file__).resolve().parent
_PARENT_DIR = _MODULE_DIR.parent

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_UNBOUNDED_VALUES = {"", "0", "none", "unbounded"}


def _load_env():
    """Load environment variables from common .env locations."""
    for candidate in (
        _MODULE_DIR / ".env",
        _PARENT_DIR / ".env",
        Path.cwd() / ".env",
    ):
        if candidate.exists():
            load_dotenv(candidate, override=False)


@dataclass(frozen=True)
class ScraperSettings:
    headless: bool = True
    browser_path: Optional[str] = None
    locale: str = "pt-BR"
    timezone_id: str = "America/Sao_Paulo"
    navigation_timeout_ms: int = 30000

    feed_selector: str = "div[role='feed']"
    search_box_selector: str = "input#searchboxinput"
    sentinel_selector: str = "p.fontBodyMedium span span"
    sentinel_text: str = "Você chegou ao final da lista."

    growth_wait_ms: int = 4000
    load_wait_ms: int = 2000
    max_scroll_iterations: Optional[int] = 200
    max_scroll_seconds: Optional[float] = None
    strict_scroll_bound: bool = False

    def with_overrides(self, **changes) -> "ScraperSettings":
        """Return a copy with the non-None ``changes`` applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def _read_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _read_bound(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _UNBOUNDED_VALUES:
        return None
    try:
        parsed = cast(value)
    except ValueError:
        raise ValueError(f"{name} must be a number or 'none', got {raw!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def _read_str(env: Mapping[str, str], name: str, default: Optional[str]) -> Optional[str]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def load_settings(env: Optional[Mapping[str, str]] = None) -> ScraperSettings:
    """Build settings from ``env`` (defaults to ``os.environ`` after loading .env files)."""

    if env is None:
        _load_env()
        env = os.environ

    defaults = ScraperSettings()

    return ScraperSettings(
        headless=_read_bool(env, "GMAPS_HEADLESS", defaults.headless),
        browser_path=_read_str(env, "GMAPS_BROWSER_PATH", defaults.browser_path),
        locale=_read_str(env, "GMAPS_LOCALE", defaults.locale),
        timezone_id=_read_str(env, "GMAPS_TIMEZONE", defaults.timezone_id),
        navigation_timeout_ms=_read_int(env, "GMAPS_NAVIGATION_TIMEOUT_MS", defaults.navigation_timeout_ms),
        feed_selector=_read_str(env, "GMAPS_FEED_SELECTOR", defaults.feed_selector),
        search_box_selector=_read_str(env, "GMAPS_SEARCH_BOX_SELECTOR", defaults.search_box_selector),
        sentinel_selector=_read_str(env, "GMAPS_SENTINEL_SELECTOR", defaults.sentinel_selector),
        sentinel_text=_read_str(env, "GMAPS_SENTINEL_TEXT", defaults.sentinel_text),
        growth_wait_ms=_read_int(env, "GMAPS_GROWTH_WAIT_MS", defaults.growth_wait_ms),
        load_wait_ms=_read_int(env, "GMAPS_LOAD_WAIT_MS", defaults.load_wait_ms),
        max_scroll_iterations=_read_bound(env, "GMAPS_MAX_SCROLL_ITERATIONS", defaults.max_scroll_iterations, int),
        max_scroll_seconds=_read_bound(env, "GMAPS_MAX_SCROLL_SECONDS", defaults.max_scroll_seconds, float),
        strict_scroll_bound=_read_bool(env, "GMAPS_STRICT_SCROLL_BOUND", defaults.strict_scroll_bound),
    )
