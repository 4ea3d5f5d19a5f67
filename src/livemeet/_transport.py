"""HTTP transport for the upstream meet document store."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from livemeet._constants import ALL_DOCS_PATH, USER_AGENT
from livemeet.config import LiveMeetConfig
from livemeet.exceptions import SourceError

_logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    """Structural interface for anything that can list a meet's raw documents.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpDocumentSource`) concrete.
    """

    async def fetch_rows(self, meet_id: str) -> list[dict[str, Any]]:
        ...


class HttpDocumentSource:
    """Fetches the bulk document listing of a meet over HTTP."""

    def __init__(self, config: LiveMeetConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def build_url(self, meet_id: str) -> str:
        base = self._config.source_base_url.rstrip("/")
        return f"{base}/{meet_id}_readonly{ALL_DOCS_PATH}"

    async def fetch_rows(self, meet_id: str) -> list[dict[str, Any]]:
        """Return the ``rows`` of the meet's ``_all_docs`` listing.

        Raises
        ------
        SourceError
            On network failure, a non-2xx status, an undecodable or invalid
            JSON body, or a body without a ``rows`` list.
        """
        url = self.build_url(meet_id)
        origin = self._config.source_origin
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json",
            "origin": origin,
            "referer": f"{origin.rstrip('/')}/",
            "user-agent": USER_AGENT,
        }
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise SourceError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except SourceError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SourceError(f"Request to {url} failed: {exc!r}", url=url) from exc
        except UnicodeDecodeError as exc:
            raise SourceError(f"Undecodable body from {url}: {exc}", url=url) from exc

        try:
            body: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        rows = body.get("rows") if isinstance(body, dict) else None
        if not isinstance(rows, list):
            raise SourceError(f"Missing 'rows' list in response from {url}", url=url)

        _logger.info("Received %d documents for meet %s", len(rows), meet_id)
        return [row for row in rows if isinstance(row, dict)]
