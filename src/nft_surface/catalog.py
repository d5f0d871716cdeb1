import asyncio
import json
from typing import Dict, List, Optional

import aiohttp
from loguru import logger

from nft_surface.constants import TIMEOUT_WAIT_RPC
from nft_surface.exceptions import CatalogError
from nft_surface.models import Catalog


class CatalogLoader:
    """
    Load the published catalog once and keep it for the lifetime of the
    loader.

    Args:
        url: Catalog JSON URL
        path: Local catalog file, takes precedence over ``url``
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        url: Optional[str] = None,
        path: Optional[str] = None,
        timeout: float = TIMEOUT_WAIT_RPC,
    ):
        self.url = url
        self.path = path
        self.timeout = timeout
        self._catalog: Optional[Catalog] = None
        self._lock: Optional[asyncio.Lock] = None
        self._client: Optional[aiohttp.ClientSession] = None
        self.fetch_count = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def shutdown(self):
        if self._client is not None and not self._client.closed:
            await self._client.close()
        self._client = None

    @property
    def cached(self) -> Optional[Catalog]:
        return self._catalog

    async def _fetch(self) -> dict:
        if self._client is None or self._client.closed:
            self._client = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        async with self._client.get(self.url) as r:
            text = await r.text()
            if r.status != 200:
                raise CatalogError(f"Catalog request failed, status {r.status}: {self.url}")
            return json.loads(text)

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    async def load(self) -> Catalog:
        """
        Get the catalog, fetching it on first use.

        Raises:
            CatalogError: If the catalog can not be fetched or is invalid
        """
        if self._catalog is not None:
            return self._catalog
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._catalog is not None:
                return self._catalog
            if not self.path and not self.url:
                raise CatalogError("Neither catalog url nor catalog path is configured")
            try:
                self.fetch_count += 1
                data = self._read() if self.path else await self._fetch()
                catalog = Catalog.model_validate(data)
            except CatalogError:
                logger.error(f"Couldn't fetch catalog {self.path or self.url}")
                raise
            except (OSError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.error(f"Couldn't fetch catalog {self.path or self.url}")
                logger.exception(e)
                raise CatalogError(str(e)) from e
            logger.info(f"Catalog loaded: {len(catalog.nfts)} NFTs on chain {catalog.context.chain_id}")
            self._catalog = catalog
            return catalog

    async def static_paths(self) -> List[str]:
        catalog = await self.load()
        return [str(token_id) for token_id in catalog.token_ids]

    async def page(self, token_id: int) -> Dict:
        """
        Everything a token page needs: record, chain context and navigation.

        Raises:
            KeyError: If the token is not listed
        """
        catalog = await self.load()
        record = catalog.get(token_id)
        if record is None:
            raise KeyError(token_id)
        return dict(
            nft=record,
            context=catalog.context,
            nav=catalog.navigation(token_id),
        )
