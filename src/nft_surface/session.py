from typing import Any, Callable, Optional

from nft_surface.catalog import CatalogLoader
from nft_surface.config import StorefrontConfig
from nft_surface.exceptions import CatalogError
from nft_surface.gateway import ContractGateway
from nft_surface.models import Catalog, ChainContext
from nft_surface.providers import ProviderPool
from nft_surface.view import NftView
from nft_surface.wallet import BaseWallet


class Session:
    """
    Application context of a storefront client.

    Owns the configuration, the catalog loader, the provider pool and the
    wallet. Nothing is shared between sessions.

    Example:
        >>> async with Session(StorefrontConfig(catalog_url=url), wallet=wallet) as session:
        ...     view = await session.view(5)
        ...     async with view:
        ...         print(view.status)
    """

    def __init__(
        self,
        config: Optional[StorefrontConfig] = None,
        wallet: Optional[BaseWallet] = None,
        web3_factory: Optional[Callable[[str, float], Any]] = None,
        catalog_loader: Optional[CatalogLoader] = None,
    ):
        self.config = config or StorefrontConfig()
        self.pool = ProviderPool(self.config, web3_factory=web3_factory)
        self.pool.attach_wallet(wallet)
        self.catalog_loader = catalog_loader or CatalogLoader(
            url=self.config.catalog_url,
            path=self.config.catalog_path,
            timeout=self.config.request_timeout,
        )

    async def __aenter__(self):
        await self.startup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def startup(self):
        await self.catalog_loader.load()

    async def shutdown(self):
        await self.pool.shutdown()
        await self.catalog_loader.shutdown()

    @property
    def wallet(self) -> Optional[BaseWallet]:
        return self.pool.wallet

    def attach_wallet(self, wallet: Optional[BaseWallet]):
        self.pool.attach_wallet(wallet)

    async def catalog(self) -> Catalog:
        return await self.catalog_loader.load()

    @property
    def context(self) -> ChainContext:
        catalog = self.catalog_loader.cached
        if catalog is None:
            raise CatalogError("Catalog is not loaded, call startup() first")
        return catalog.context

    def gateway(self) -> ContractGateway:
        return ContractGateway(
            self.pool,
            self.context,
            receipt_timeout=self.config.receipt_timeout,
            poll_latency=self.config.poll_latency,
        )

    async def view(self, token_id: int) -> NftView:
        """
        Build the view of a listed token; it still has to be mounted.

        Raises:
            KeyError: If the token is not in the catalog
        """
        catalog = await self.catalog()
        record = catalog.get(token_id)
        if record is None:
            raise KeyError(token_id)
        return NftView(self, record)
