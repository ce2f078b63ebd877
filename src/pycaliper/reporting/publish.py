"""Post finished runs to a remote results collector."""
from __future__ import annotations

from http import HTTPStatus
import http.client
import logging
from typing import TYPE_CHECKING
from urllib.parse import ParseResult, quote, urlparse

from pycaliper.errors import PublishError

if TYPE_CHECKING:
    from rich.console import Console

    from pycaliper.domain.models import Run

__all__ = ["DISABLED", "post_results", "results_url"]

logger = logging.getLogger(__name__)

DISABLED = "none"
"""Destination value that turns publishing off."""

TIMEOUT_SECONDS = 30


def results_url(run: Run, post_host: str) -> str:
    """Return ``<post_host><executed_by_uuid>/<suite_name>``."""
    return f"{post_host}{quote(run.executed_by_uuid)}/{quote(run.suite_name)}"


def post_results(
    run: Run,
    post_host: str,
    *,
    console: Console,
    error_console: Console | None = None,
) -> str | None:
    """Submit ``run`` to ``post_host`` and return the results URL when accepted.

    A rejected post is reported on ``error_console`` (``console`` when omitted).
    """
    if post_host == DISABLED:
        logger.debug("Publishing disabled")
        return None

    url = results_url(run, post_host)
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        message = f"Unsupported results destination: {post_host}"
        raise PublishError(message)

    body = run.to_payload().model_dump_json().encode("utf-8")
    logger.info("Posting %d bytes to %s", len(body), url)
    connection = _open_connection(parsed)
    try:
        connection.request(
            "POST",
            _request_path(parsed),
            body=body,
            headers={"Content-Type": "application/json", "User-Agent": "pycaliper"},
        )
        response = connection.getresponse()
        payload = response.read().decode("utf-8", errors="replace")
    except (OSError, http.client.HTTPException) as exc:
        message = f"Posting to {post_host} failed: {exc}"
        raise PublishError(message) from exc
    finally:
        connection.close()

    if response.status == HTTPStatus.OK:
        console.print()
        console.print("View current and previous benchmark results online:")
        console.print(f"  {url}", markup=False)
        return url

    diagnostics = error_console if error_console is not None else console
    diagnostics.print(f"Posting to {post_host} failed: {response.status} {response.reason}", markup=False)
    for line in payload.splitlines():
        diagnostics.print(line, markup=False)
    return None


def _open_connection(parsed: ParseResult) -> http.client.HTTPConnection:
    if parsed.scheme == "https":
        return http.client.HTTPSConnection(parsed.netloc, timeout=TIMEOUT_SECONDS)
    return http.client.HTTPConnection(parsed.netloc, timeout=TIMEOUT_SECONDS)


def _request_path(parsed: ParseResult) -> str:
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return path
