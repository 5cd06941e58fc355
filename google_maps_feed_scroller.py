#!/usr/bin/env python3
"""
Google Maps Feed Scroller

Drives the infinite scroll of the search results feed until the end-of-list
sentinel shows up or a safety bound is reached.

The page gives no load-complete signal, so each iteration measures the feed height,
waits a fixed interval when it did not grow, scrolls the last card into view and
waits again before checking the sentinel text.
"""

import enum
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from google_maps_session_manager import ElementNotFoundError, NavigationError


DEFAULT_GROWTH_WAIT_MS = 4000
DEFAULT_LOAD_WAIT_MS = 2000
DEFAULT_MAX_ITERATIONS = 200

FEED_HEIGHT_SCRIPT = "document.querySelector({selector}).scrollHeight"
FEED_SCROLL_SCRIPT = "document.querySelector({selector}).lastElementChild.scrollIntoView()"


class FeedScrollPhase(enum.Enum):
    SCROLLING = "scrolling"
    WAITING_FOR_GROWTH = "waiting_for_growth"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScrollState:
    last_observed_height: int = 0
    stable_iterations: int = 0


@dataclass
class ScrollTelemetry:
    phase: FeedScrollPhase
    iterations: int
    final_height: int
    stable_iterations: int
    height_regressions: int
    sentinel_found: bool
    elapsed_seconds: float
    phase_history: List[FeedScrollPhase] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.phase is FeedScrollPhase.DONE


class ScrollLimitExceeded(RuntimeError):
    """The feed never reported its end within the configured bounds."""

    def __init__(self, telemetry: ScrollTelemetry):
        super().__init__(
            f"Feed scroll stopped after {telemetry.iterations} iterations "
            f"({telemetry.elapsed_seconds:.1f}s) without reaching the end of the list"
        )
        self.telemetry = telemetry


def _coerce_height(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def scroll_feed_until_complete(
    navigator,
    feed_selector: str,
    sentinel_selector: str,
    sentinel_text: str,
    *,
    logger=None,
    growth_wait_ms: int = DEFAULT_GROWTH_WAIT_MS,
    load_wait_ms: int = DEFAULT_LOAD_WAIT_MS,
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
    max_duration_s: Optional[float] = None,
    sleep: Optional[Callable[[int], None]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> ScrollTelemetry:
    """Scroll the feed until ``sentinel_text`` appears in the sentinel element.

    ``navigator`` must provide ``evaluate``, ``find_element`` and ``get_inner_text``;
    a failed sentinel lookup counts as "not finished yet", any other
    ``NavigationError`` propagates to the caller.
    ``sleep`` receives milliseconds and defaults to ``navigator.wait_for_timeout``.
    With ``max_iterations=None`` and no ``max_duration_s`` the loop only ends on
    the sentinel.
    """

    logger = logger or logging.getLogger(__name__)
    sleep = sleep or navigator.wait_for_timeout

    selector_literal = json.dumps(feed_selector)
    height_script = FEED_HEIGHT_SCRIPT.format(selector=selector_literal)
    scroll_script = FEED_SCROLL_SCRIPT.format(selector=selector_literal)

    state = ScrollState()
    phase = FeedScrollPhase.SCROLLING
    history = [phase]
    iterations = 0
    regressions = 0
    sentinel_found = False
    started = clock()

    while True:
        if max_iterations is not None and iterations >= max_iterations:
            phase = FeedScrollPhase.FAILED
            history.append(phase)
            logger.warning("Feed scroll hit iteration cap (%s) before end of list", max_iterations)
            break
        if max_duration_s is not None and clock() - started >= max_duration_s:
            phase = FeedScrollPhase.FAILED
            history.append(phase)
            logger.warning("Feed scroll exceeded %.1fs before end of list", max_duration_s)
            break

        iterations += 1
        new_height = _coerce_height(navigator.evaluate(height_script))

        if new_height <= state.last_observed_height:
            phase = FeedScrollPhase.WAITING_FOR_GROWTH
            history.append(phase)
            if new_height < state.last_observed_height:
                regressions += 1
                logger.warning(
                    "Feed height dropped from %s to %s; feed may have been reloaded",
                    state.last_observed_height,
                    new_height,
                )
            state.stable_iterations += 1
            logger.debug("Feed %s at height %s; waiting %sms", phase.value, new_height, growth_wait_ms)
            sleep(growth_wait_ms)
        else:
            state.stable_iterations = 0

        state.last_observed_height = new_height
        if phase is not FeedScrollPhase.SCROLLING:
            phase = FeedScrollPhase.SCROLLING
            history.append(phase)

        navigator.evaluate(scroll_script)
        sleep(load_wait_ms)

        logger.debug(
            "Scroll iteration %s: height=%s stable=%s",
            iterations,
            state.last_observed_height,
            state.stable_iterations,
        )

        try:
            sentinel = navigator.find_element(sentinel_selector)
        except ElementNotFoundError:
            continue
        except NavigationError as exc:
            logger.debug("Sentinel lookup failed, retrying next iteration: %s", exc)
            continue

        if sentinel_text in navigator.get_inner_text(sentinel):
            sentinel_found = True
            phase = FeedScrollPhase.DONE
            history.append(phase)
            break

    telemetry = ScrollTelemetry(
        phase=phase,
        iterations=iterations,
        final_height=state.last_observed_height,
        stable_iterations=state.stable_iterations,
        height_regressions=regressions,
        sentinel_found=sentinel_found,
        elapsed_seconds=clock() - started,
        phase_history=history,
    )
    logger.info(
        "Feed scroll finished: phase=%s iterations=%s height=%s",
        telemetry.phase.value,
        telemetry.iterations,
        telemetry.final_height,
    )
    return telemetry
