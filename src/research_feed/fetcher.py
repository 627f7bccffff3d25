from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable

import httpx

from .config import AppConfig
from .links import is_trusted_url

logger = logging.getLogger(__name__)

Fetch = Callable[[str, AppConfig], str]

_MAX_REDIRECTS = 5
_POLL_SECONDS = 0.05


def fetch_html(
    url: str,
    config: AppConfig,
    client: httpx.Client | None = None,
    cancel: threading.Event | None = None,
) -> str:
    if cancel is not None and cancel.is_set():
        return ""

    timeout = config.crawl.timeout_seconds
    deadline = time.monotonic() + timeout
    stop = threading.Event()
    owned = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, headers={"User-Agent": config.user_agent})

    # The read runs on a worker so the caller's wait is bounded by the wall clock,
    # whatever the socket does. The worker sees ``stop`` between chunks.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fetch")
    try:
        future = executor.submit(_read, client, url, config, stop, cancel)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.info("Fetch of %s exceeded %gs deadline", url, timeout)
                return ""
            if cancel is not None and cancel.is_set():
                logger.info("Fetch of %s cancelled", url)
                return ""
            try:
                return future.result(timeout=min(remaining, _POLL_SECONDS))
            except FutureTimeout:
                continue
    except httpx.TimeoutException:
        logger.info("Fetch timed out for %s", url)
    except httpx.HTTPError as exc:
        logger.info("Fetch failed for %s: %s", url, exc)
    except Exception as exc:  # any failure means no content
        logger.warning("Fetch failed for %s: %r", url, exc)
    finally:
        stop.set()
        executor.shutdown(wait=False)
        if owned:
            client.close()
    return ""


def _read(
    client: httpx.Client,
    url: str,
    config: AppConfig,
    stop: threading.Event,
    cancel: threading.Event | None,
) -> str:
    headers = {"User-Agent": config.user_agent}
    trusted = config.crawl.trusted_domains
    timeout = config.crawl.timeout_seconds

    for _ in range(_MAX_REDIRECTS + 1):
        with client.stream(
            "GET", url, headers=headers, timeout=timeout, follow_redirects=False
        ) as resp:
            if resp.next_request is not None:
                target = str(resp.next_request.url)
                if trusted and not is_trusted_url(target, trusted):
                    logger.info("Refusing redirect from %s to %s", url, target)
                    return ""
                url = target
                continue
            if not resp.is_success:
                logger.info("Fetch of %s returned HTTP %s", url, resp.status_code)
                return ""
            chunks: list[str] = []
            for chunk in resp.iter_text():
                if stop.is_set() or (cancel is not None and cancel.is_set()):
                    return ""
                chunks.append(chunk)
            return "".join(chunks)

    logger.info("Too many redirects fetching %s", url)
    return ""
