"""Mail service client - fetch candidate records over HTTP.

Talks to a mail service exposing:

    GET {base_url}/api/emails?type=<category>

which answers with a JSON array of email objects (or {"emails": [...]}).
Field names are normalized on the way in:

    id                   → id
    from | sender        → sender
    subject              → subject
    timestamp | date     → timestamp
    body                 → body
    type | category      → category

Failures never degrade to an empty list or canned data. HTTP errors,
connection errors, timeouts and unparseable payloads all raise
UpstreamFetchError.
"""

from __future__ import annotations

__all__ = [
    "MailServiceClient",
    "normalize_record",
]

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from dataguard.constants import DEFAULT_MAIL_SERVICE_URL, DEFAULT_MAIL_TIMEOUT_SECONDS
from dataguard.context import Record
from dataguard.exceptions import UpstreamFetchError

logger = logging.getLogger(__name__)

EMAILS_PATH = "/api/emails"


def normalize_record(raw: dict[str, Any]) -> Record:
    """Map a mail service email object onto a Record.

    Args:
        raw: One email object from the service.

    Returns:
        Validated Record.

    Raises:
        ValueError: If required fields are missing or malformed.
    """
    sender = raw.get("from", raw.get("sender"))
    timestamp = raw.get("timestamp", raw.get("date"))
    try:
        return Record(
            id=str(raw["id"]),
            sender=sender if sender is not None else "",
            subject=raw.get("subject") or "",
            timestamp=timestamp,
            body=raw.get("body") or "",
            category=raw.get("type", raw.get("category")),
        )
    except KeyError as e:
        raise ValueError(f"email is missing field {e}") from e
    except ValidationError as e:
        raise ValueError(f"email {raw.get('id')!r} is malformed: {e.error_count()} error(s)") from e


class MailServiceClient:
    """RecordSource backed by the mail service HTTP API.

    The httpx.Client is created lazily unless one is injected (tests pass a
    client wired to httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_MAIL_SERVICE_URL,
        timeout: float = DEFAULT_MAIL_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "MailServiceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_records(self, category: str, max_age: int) -> list[Record]:
        """Fetch candidate records for a category.

        max_age is not sent upstream; the age filter is re-applied by the
        classifier against the engine's clock.

        Raises:
            UpstreamFetchError: On any transport, HTTP or payload failure.
        """
        url = f"{self.base_url}{EMAILS_PATH}"
        try:
            response = self._get_client().get(url, params={"type": category})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Mail service returned HTTP %s for %s", status, category)
            raise UpstreamFetchError(
                f"Mail service returned HTTP {status}",
                category=category,
                status_code=status,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning("Mail service timed out after %ss for %s", self.timeout, category)
            raise UpstreamFetchError(
                f"Mail service timed out after {self.timeout}s",
                category=category,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Mail service unreachable at %s: %s", self.base_url, e)
            raise UpstreamFetchError(
                f"Mail service unreachable at {self.base_url}: {e}",
                category=category,
            ) from e

        return self._parse(response, category)

    def _parse(self, response: httpx.Response, category: str) -> list[Record]:
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamFetchError("Mail service returned invalid JSON", category=category) from e

        if isinstance(payload, dict):
            payload = payload.get("emails")
        if not isinstance(payload, list):
            raise UpstreamFetchError("Mail service returned an unexpected payload", category=category)

        records: list[Record] = []
        for item in payload:
            if not isinstance(item, dict):
                raise UpstreamFetchError("Mail service returned a non-object email", category=category)
            try:
                records.append(normalize_record(item))
            except ValueError as e:
                raise UpstreamFetchError(f"Mail service returned bad data: {e}", category=category) from e

        logger.debug("Fetched %d %s records from mail service", len(records), category)
        return records
