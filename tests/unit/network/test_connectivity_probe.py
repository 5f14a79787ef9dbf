"""Unit tests for the HTTP connectivity probe."""

import httpx
import pytest

from sahwsync.network.exceptions import ConnectivityProbeError
from sahwsync.network.probe import DEFAULT_PROBE_URL, ConnectivityProbe


def make_probe(handler):
    return ConnectivityProbe(DEFAULT_PROBE_URL, timeout=5.0, transport=httpx.MockTransport(handler))


class TestConnectivityProbe:
    """Test ConnectivityProbe.check outcomes."""

    @pytest.mark.asyncio
    async def test_sends_uncached_head_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        async with make_probe(handler) as probe:
            assert await probe.check() is True

        assert requests[0].method == "HEAD"
        assert str(requests[0].url) == DEFAULT_PROBE_URL
        assert requests[0].headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_any_2xx_is_success(self):
        async with make_probe(lambda request: httpx.Response(204)) as probe:
            assert await probe.check() is True

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        async with make_probe(lambda request: httpx.Response(503)) as probe:
            with pytest.raises(ConnectivityProbeError) as exc_info:
                await probe.check()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_probe(handler) as probe:
            with pytest.raises(ConnectivityProbeError, match="timed out"):
                await probe.check()

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        async with make_probe(handler) as probe:
            with pytest.raises(ConnectivityProbeError):
                await probe.check()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        probe = make_probe(lambda request: httpx.Response(200))
        await probe.check()

        await probe.close()
        await probe.close()

        assert probe.client.is_closed
