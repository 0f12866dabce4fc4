"""Shared HTTP helpers used by the release index clients.

Encapsulates request/timeout error handling so retrievers avoid duplicating
try/except blocks. Failures are raised as ``NetworkError`` so the version
manager can surface them unchanged.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, BinaryIO, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.errors import DownloadError, NetworkError

logger = logging.getLogger(__name__)

# Simple in-memory cache for metadata responses
_http_cache: Dict[str, Tuple[Any, float]] = {}


def _get_cache_key(method: str, url: str, headers: Optional[Dict[str, str]] = None) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    return f"{method}:{url}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop every cached response."""
    _http_cache.clear()


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout, retries, and caching with DEBUG traces.

    Returns:
        Tuple of (status_code, headers_dict, body_text)

    Raises:
        NetworkError: when every attempt failed at the transport level.
    """
    cache_key = _get_cache_key('GET', url, headers)
    safe_target = safe_url(url)

    if cache_key in _http_cache and _is_cache_valid(_http_cache[cache_key]):
        cached_data, _ = _http_cache[cache_key]
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP cache hit",
                extra=extra_context(
                    event="cache_hit",
                    component="http_client",
                    action="GET",
                    target=safe_target
                )
            )
        return cached_data

    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    **kwargs
                )

                # Server errors are retried and never cached
                if response.status_code >= 500:
                    last_exception = f"HTTP {response.status_code}"
                    continue

                cache_data = (response.status_code, dict(response.headers), response.text)
                _http_cache[cache_key] = (cache_data, time.time())

                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response ok",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            outcome="success",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target
                        )
                    )
                return cache_data

            except requests.Timeout:
                last_exception = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue
            except requests.RequestException as exc:
                last_exception = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue

    raise NetworkError(
        f"Request to {safe_target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"
    )


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Any:
    """Perform GET request and parse JSON response.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Parsed JSON document

    Raises:
        NetworkError: on transport failure, non-200 status or invalid JSON.
    """
    status_code, _, text = robust_get(url, headers=headers, **kwargs)
    if status_code != 200:
        raise NetworkError(f"Unexpected HTTP status {status_code} from {safe_url(url)}")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    status_code=status_code,
                    target=safe_url(url)
                )
            )
        raise NetworkError(f"Invalid JSON from {safe_url(url)}: {exc}") from exc
    return parsed


def get_text(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> str:
    """Perform GET request and return the body of a 200 response.

    Raises:
        NetworkError: on transport failure or non-200 status.
    """
    status_code, _, text = robust_get(url, headers=headers, **kwargs)
    if status_code != 200:
        raise NetworkError(f"Unexpected HTTP status {status_code} from {safe_url(url)}")
    return text


def open_stream(url: str, *, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """Start a streamed GET for an archive download.

    The caller owns the returned response and must close it. No retry is
    attempted and nothing is cached.

    Raises:
        DownloadError: on transport failure or non-200 status.
    """
    safe_target = safe_url(url)
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP download",
            extra=extra_context(
                event="http_request",
                component="http_client",
                action="GET",
                target=safe_target
            )
        )
    try:
        response = requests.get(
            url, headers=headers, stream=True, timeout=Constants.DOWNLOAD_TIMEOUT
        )
    except requests.Timeout as exc:
        raise DownloadError(
            f"Download of {safe_target} timed out after {Constants.DOWNLOAD_TIMEOUT} seconds"
        ) from exc
    except requests.RequestException as exc:  # includes ConnectionError
        raise DownloadError(f"Download of {safe_target} failed: {exc}") from exc

    if response.status_code != 200:
        response.close()
        raise DownloadError(f"Download of {safe_target} failed with HTTP {response.status_code}")
    return response


def download_to(url: str, fileobj: BinaryIO, *, headers: Optional[Dict[str, str]] = None) -> int:
    """Stream the body of ``url`` into ``fileobj``.

    Transport failures while reading the body (connection reset, read
    timeout, truncated chunked encoding) surface from ``iter_content`` as
    ``requests`` exceptions and are raised as ``DownloadError``.

    Returns:
        Number of bytes written.

    Raises:
        DownloadError: on transport failure or non-200 status.
    """
    safe_target = safe_url(url)
    written = 0
    with Timer() as t:
        with open_stream(url, headers=headers) as response:
            try:
                for chunk in response.iter_content(Constants.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fileobj.write(chunk)
                        written += len(chunk)
            except requests.RequestException as exc:
                raise DownloadError(f"Download of {safe_target} interrupted: {exc}") from exc
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP download complete",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="download",
                outcome="success",
                size=written,
                duration_ms=t.duration_ms(),
                target=safe_target
            )
        )
    return written
