from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

import aiohttp
from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from nft_surface.abi import NFT_SURFACE_ABI
from nft_surface.config import StorefrontConfig
from nft_surface.exceptions import ChainMismatchError, RpcNotAvailableError

if TYPE_CHECKING:
    from nft_surface.wallet import BaseWallet


def default_web3_factory(rpc_url: str, timeout: float) -> AsyncWeb3:
    """Build an AsyncWeb3 client over HTTP for a read-only endpoint."""
    return AsyncWeb3(
        AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
        )
    )


@dataclass
class ContractBinding:
    """A contract instance bound to a web3 client of a verified network."""

    chain_id: int
    address: str
    web3: Any
    contract: Any


class ProviderPool:
    """
    Cache of web3 clients and contract bindings.

    Clients are kept per chain id and bindings per ``(chain_id, address)``,
    so repeated calls do not redo the network handshake. When a wallet is
    attached its client is preferred for reads, otherwise the read-only RPC
    endpoint configured for the chain is used. ``invalidate()`` drops
    everything bound to a network, it has to be called when the wallet
    switches networks.
    """

    def __init__(
        self,
        config: Optional[StorefrontConfig] = None,
        web3_factory: Optional[Callable[[str, float], Any]] = None,
    ):
        self.config = config or StorefrontConfig()
        self._web3_factory = web3_factory or default_web3_factory
        self._clients: Dict[int, Any] = {}
        self._bindings: Dict[Tuple[int, str], ContractBinding] = {}
        self._wallet: Optional["BaseWallet"] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def shutdown(self):
        """Close every cached client and forget all bindings."""
        await self.invalidate()

    def attach_wallet(self, wallet: Optional["BaseWallet"]):
        if wallet is not self._wallet:
            self._bindings.clear()
        self._wallet = wallet

    @property
    def wallet(self) -> Optional["BaseWallet"]:
        return self._wallet

    def web3_for(self, chain_id: int):
        """
        Get a web3 client able to read ``chain_id``.

        Raises:
            RpcNotAvailableError: If neither a wallet nor an RPC endpoint is available
        """
        if self._wallet is not None and self._wallet.web3 is not None:
            return self._wallet.web3
        client = self._clients.get(chain_id)
        if client is None:
            rpc_url = self.config.rpc_url(chain_id)
            if not rpc_url:
                raise RpcNotAvailableError(f"No RPC endpoint configured for chain {chain_id}")
            client = self._web3_factory(rpc_url, self.config.request_timeout)
            self._clients[chain_id] = client
            logger.debug(f"New web3 client for chain {chain_id}")
        return client

    async def binding(self, chain_id: int, address: str) -> ContractBinding:
        """
        Get the cached contract binding, creating it on first use.

        The network of the client is checked once, when the binding is created.

        Raises:
            ChainMismatchError: If the client is connected to another network
        """
        address = Web3.to_checksum_address(address)
        key = (chain_id, address)
        binding = self._bindings.get(key)
        if binding is not None:
            return binding
        web3 = self.web3_for(chain_id)
        connected_chain_id = await web3.eth.chain_id
        if connected_chain_id != chain_id:
            raise ChainMismatchError(chain_id, connected_chain_id)
        contract = web3.eth.contract(address=address, abi=NFT_SURFACE_ABI)
        binding = ContractBinding(chain_id, address, web3, contract)
        self._bindings[key] = binding
        return binding

    async def invalidate(self, chain_id: Optional[int] = None):
        """
        Drop cached bindings and clients.

        Args:
            chain_id: Only drop what belongs to this chain, everything if None
        """
        for key in list(self._bindings):
            if chain_id is None or key[0] == chain_id:
                del self._bindings[key]
        for cid in list(self._clients):
            if chain_id is None or cid == chain_id:
                client = self._clients.pop(cid)
                await self._close_client(client)

    @staticmethod
    async def _close_client(client):
        disconnect = getattr(getattr(client, "provider", None), "disconnect", None)
        if disconnect is None:
            return
        try:
            await disconnect()
        except Exception as e:
            logger.warning(f"Failed to close web3 provider: {e}")

    @property
    def cached_bindings(self):
        return list(self._bindings)
