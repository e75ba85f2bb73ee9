"""Outbound HTTP with a fixed attempt count and a fixed pause between attempts."""
from __future__ import annotations

import logging
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)


def is_successful(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def response_json(response: requests.Response) -> Any:
    """Decoded JSON body, or ``None`` when the body is empty or not JSON."""
    try:
        return response.json()
    except requests.exceptions.JSONDecodeError:
        return None


def send_with_retry(
    method: str,
    url: str,
    *,
    attempts: int,
    delay: float,
    **kwargs: Any,
) -> requests.Response:
    """Issue ``method url`` up to ``attempts`` times.

    Both a non-2xx response and a ``requests.RequestException`` count as a failed
    attempt. After the last attempt the final response is returned whatever its
    status; a transport exception from the last attempt propagates unchanged.
    """
    attempts = max(int(attempts), 1)
    for attempt in range(1, attempts):
        try:
            response = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s attempt %d/%d raised %s", method, url, attempt, attempts, exc)
        else:
            if is_successful(response):
                return response
            logger.warning(
                "%s %s attempt %d/%d returned HTTP %s",
                method,
                url,
                attempt,
                attempts,
                response.status_code,
            )
        if delay > 0:
            time.sleep(delay)

    response = requests.request(method, url, **kwargs)
    if not is_successful(response):
        logger.warning("%s %s final attempt returned HTTP %s", method, url, response.status_code)
    return response
