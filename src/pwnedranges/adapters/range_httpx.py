from __future__ import annotations
import httpx
from ..domain.errors import FetchError, SetupError
from ..domain.value_types import ShardKey
from ..ports.fetch import RangeFetcher


def _pool_size(concurrency: int) -> int: return max(1, concurrency)

class HttpxRangeFetcher(RangeFetcher):
    """GET `<base_url><KEY>` and hand back the whole body.

    Each call is two awaits: the response head, then the full body. The
    streamed response is closed as soon as the body has been read, so a
    cancelled fetch leaves nothing behind.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 5.0,
        concurrency: int = 1000,
        http2: bool = True,
        keepalive_expiry_s: float = 10.0,
        user_agent: str = "pwnedranges",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        size = _pool_size(concurrency)
        try:
            self.client = httpx.AsyncClient(
                http2=http2,
                timeout=httpx.Timeout(timeout_s),
                # one pooled connection per in-flight request
                limits=httpx.Limits(
                    max_connections=size,
                    max_keepalive_connections=size,
                    keepalive_expiry=keepalive_expiry_s,
                ),
                headers={"User-Agent": user_agent},
                transport=transport,
            )
        except ImportError as e:
            # http2=True without the `h2` package installed
            raise SetupError(f"failed to build http client: {e}") from e

    async def fetch(self, key: ShardKey) -> tuple[ShardKey, bytes]:
        request = self.client.build_request("GET", self.base_url + key)

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise FetchError(key, f"failed to get response: {type(e).__name__}: {e}") from e

        try:
            if not response.is_success:
                raise FetchError(key, f"HTTP {response.status_code}")
            body = await response.aread()
        except httpx.HTTPError as e:
            raise FetchError(key, f"failed to get response body: {type(e).__name__}: {e}") from e
        finally:
            await response.aclose()

        return key, body

    async def aclose(self) -> None:
        await self.client.aclose()
