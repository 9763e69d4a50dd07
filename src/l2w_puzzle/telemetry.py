from __future__ import annotations

"""
Fire-and-forget player feedback submission
The endpoint is a Google Apps Script web app read from L2W_FEEDBACK_URL.
Nothing here raises into game code: every failure is logged and reported as False.
"""

import json
import logging
import os
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import FeedbackConfigError


logger = logging.getLogger(__name__)


FEEDBACK_URL_ENV = "L2W_FEEDBACK_URL"
EXPECTED_URL_PART = "script.google.com/macros/s/"
REQUEST_TIMEOUT_SECONDS = 10.0


@dataclass
class FeedbackSubmission:
    question_id: int
    question: str
    answer: str
    level: int

    def to_payload(self) -> dict:
        return {
            "questionId": self.question_id,
            "question": self.question,
            "answer": self.answer,
            "level": self.level,
        }


def resolve_feedback_url(url: Optional[str] = None) -> str:
    """The configured endpoint, or FeedbackConfigError when missing or malformed."""
    url = url if url is not None else os.environ.get(FEEDBACK_URL_ENV, "")
    if not url:
        raise FeedbackConfigError(f"{FEEDBACK_URL_ENV} is not set")
    if not url.startswith("https://") or EXPECTED_URL_PART not in url:
        raise FeedbackConfigError(f"not an Apps Script web app URL: {url}")
    return url


def submit_feedback(
    submission: FeedbackSubmission,
    url: Optional[str] = None,
    opener: Optional[Callable[..., object]] = None,
) -> bool:
    try:
        endpoint = resolve_feedback_url(url)
    except FeedbackConfigError as exc:
        logger.warning("feedback not sent: %s", exc)
        return False

    request = urllib.request.Request(
        endpoint,
        data=json.dumps(submission.to_payload()).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    open_url = opener or urllib.request.urlopen
    try:
        with open_url(request, timeout=REQUEST_TIMEOUT_SECONDS) as response:  # type: ignore[attr-defined]
            body = response.read().decode("utf-8") or "{}"
    except urllib.error.HTTPError as exc:
        logger.warning("feedback endpoint answered HTTP %d", exc.code)
        return False
    except (urllib.error.URLError, OSError) as exc:
        logger.warning("feedback submission failed: %s", exc)
        return False

    try:
        result = json.loads(body)
    except ValueError:
        logger.warning("feedback endpoint returned non-JSON body")
        return False
    return isinstance(result, dict) and result.get("success") is True


def submit_feedback_async(
    submission: FeedbackSubmission,
    url: Optional[str] = None,
    callback: Optional[Callable[[bool], None]] = None,
) -> threading.Thread:
    """Submit on a daemon thread; ``callback`` receives the result there."""

    def _run() -> None:
        ok = submit_feedback(submission, url)
        if callback is not None:
            callback(ok)

    thread = threading.Thread(target=_run, name="l2w-feedback", daemon=True)
    thread.start()
    return thread
