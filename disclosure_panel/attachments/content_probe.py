"""Header-only probing of attachment content types."""

import logging
from contextlib import asynccontextmanager

import httpx

from disclosure_panel.app_config import PanelConfig
from disclosure_panel.attachments.url_classifier import extract_inline_mime_type
from disclosure_panel.attachments.url_classifier import is_absolute
from disclosure_panel.attachments.url_classifier import is_inline_data
from disclosure_panel.attachments.url_classifier import resolve

logger = logging.getLogger(__name__)


class ContentTypeProber:
    """Determine the MIME type of an attachment without downloading it.

    Inline ``data:`` references are answered from their own header. Remote
    references are fetched with a streaming GET whose response is closed as
    soon as the headers arrive, so no body bytes are transferred to the
    caller.

    Args:
        config: Panel settings providing the base URL, environment and
            probe timeout.
        client: Optional shared ``httpx.AsyncClient``. When omitted a client
            is created for each probe and closed afterwards.
    """

    def __init__(self, config: PanelConfig | None = None, client=None):
        self.config = config if config is not None else PanelConfig()
        self._client = client

    @asynccontextmanager
    async def _open_client(self):
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            timeout=self.config.probe_timeout, follow_redirects=True
        ) as client:
            yield client

    def _credential_headers(self, url: str) -> dict[str, str]:
        cookies = self.config.cookies
        if not cookies:
            return {}
        if self.config.is_development or self.config.is_same_origin(url):
            return {"Cookie": "; ".join(f"{k}={v}" for k, v in cookies.items())}
        return {}

    async def probe(self, ref: str) -> str:
        """Return the declared content type of ``ref``, or ``""`` if unknown."""
        if is_inline_data(ref):
            return extract_inline_mime_type(ref)
        url = resolve(ref, self.config.base_url)
        if not is_absolute(url):
            logger.warning("Cannot probe %s: no base URL configured", ref)
            return ""
        try:
            async with self._open_client() as client:
                async with client.stream(
                    "GET", url, headers=self._credential_headers(url)
                ) as response:
                    content_type = response.headers.get("content-type", "")
                    # Headers are all we need; drop the body before it is read.
                    await response.aclose()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Content-type probe failed for %s: %s", url, exc)
            return ""
        if response.is_error:
            logger.debug(
                "Content-type probe for %s returned HTTP %s", url, response.status_code
            )
            return ""
        return content_type
