"""HTTP probe confirming that the internet is actually reachable."""

import logging
from typing import Any, Optional

import httpx

from .exceptions import ConnectivityProbeError

logger = logging.getLogger(__name__)

DEFAULT_PROBE_URL = "https://www.google.com/favicon.ico"


class ConnectivityProbe:
    """Async HEAD request against a well-known URL."""

    def __init__(
        self,
        url: str = DEFAULT_PROBE_URL,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize connectivity probe.

        Args:
            url: URL to send the HEAD request to
            timeout: Overall request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

        logger.debug(f"Connectivity probe initialized for {url}")

    async def __aenter__(self) -> "ConnectivityProbe":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client exists."""
        if self.client is None or self.client.is_closed:
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "Cache-Control": "no-cache",
                    "Pragma": "no-cache",
                },
            )

    async def close(self) -> None:
        """Close HTTP client."""
        if self.client and not self.client.is_closed:
            await self.client.aclose()

    async def check(self) -> bool:
        """Send the probe request.

        Returns:
            True when the probe URL answered with a 2xx status

        Raises:
            ConnectivityProbeError: On timeout, transport failure or a non-2xx answer
        """
        await self._ensure_client()
        if self.client is None:
            raise ConnectivityProbeError("HTTP client not initialized")

        try:
            response = await self.client.head(self.url)
        except httpx.TimeoutException as e:
            raise ConnectivityProbeError(f"Probe timed out after {self.timeout}s: {e}")
        except httpx.HTTPError as e:
            raise ConnectivityProbeError(f"Probe request failed: {e}")

        if not response.is_success:
            raise ConnectivityProbeError(
                f"Probe returned HTTP {response.status_code}", response.status_code
            )

        logger.debug(f"Probe succeeded: HTTP {response.status_code}")
        return True
