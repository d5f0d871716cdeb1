from typing import List, Optional

from loguru import logger
from web3 import Web3
from web3.exceptions import LogTopicError, MismatchedABI

from nft_surface.abi import SUCCESS_EVENTS
from nft_surface.constants import (
    POLL_LATENCY,
    TIMEOUT_WAIT_RECEIPT,
    ZERO_ADDRESS,
)
from nft_surface.exceptions import (
    ChainMismatchError,
    ErrorKind,
    NftSurfaceError,
    PreconditionError,
    RpcNotAvailableError,
    TransactionFailedError,
    WalletUnavailableError,
    classify_error,
    error_message,
)
from nft_surface.models import (
    ChainContext,
    NftRecord,
    TransactionReceipt,
    TransactionRecord,
    WalletSession,
)
from nft_surface.providers import ContractBinding, ProviderPool
from nft_surface.wallet import BaseWallet


def signature_bytes(signature: Optional[str]) -> bytes:
    if not signature:
        return b""
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature)
    return Web3.to_bytes(hexstr=signature)


class ContractGateway:
    """
    Typed access to the deployed NFTsurface contract.

    Reads go through the provider pool binding of the catalog deployment.
    Writes additionally require a connected wallet on the catalog network;
    those preconditions are checked before any provider is touched. Raw
    provider errors never leave this class: they are classified into the
    ``ErrorKind`` taxonomy.
    """

    def __init__(
        self,
        pool: ProviderPool,
        context: ChainContext,
        wallet: Optional[BaseWallet] = None,
        receipt_timeout: float = TIMEOUT_WAIT_RECEIPT,
        poll_latency: float = POLL_LATENCY,
    ):
        self._pool = pool
        self.context = context
        self._wallet = wallet
        self.receipt_timeout = receipt_timeout
        self.poll_latency = poll_latency

    @property
    def wallet(self) -> Optional[BaseWallet]:
        if self._wallet is not None:
            return self._wallet
        return self._pool.wallet

    async def _binding(self) -> ContractBinding:
        """
        Raises:
            ChainMismatchError: If the client is connected to another network
            RpcNotAvailableError: If no endpoint is configured or the node can
                not be reached
        """
        try:
            return await self._pool.binding(
                self.context.chain_id, self.context.contract_address
            )
        except NftSurfaceError:
            raise
        except Exception as e:
            raise RpcNotAvailableError(
                f"Chain {self.context.chain_id} is not reachable: {error_message(e)}"
            ) from e

    async def _call(self, method_name: str, *args):
        binding = await self._binding()
        try:
            return await getattr(binding.contract.functions, method_name)(*args).call()
        except NftSurfaceError:
            raise
        except Exception as e:
            raise classify_error(e) from e

    async def get_wallet(self, connect: bool = False) -> WalletSession:
        """
        Discover the wallet account and network.

        Args:
            connect: Prompt the user to connect if no account is exposed yet

        Raises:
            WalletUnavailableError: If there is no wallet at all
            WalletRejectedError: If the user rejected the connection
        """
        wallet = self.wallet
        if wallet is None:
            raise WalletUnavailableError("wallet_unavailable")
        try:
            if connect:
                accounts = await wallet.request_accounts()
            else:
                accounts = await wallet.accounts()
            chain_id = await wallet.chain_id()
        except NftSurfaceError:
            raise
        except Exception as e:
            raise classify_error(e) from e
        return WalletSession(address=accounts[0] if accounts else None, chain_id=chain_id)

    async def owner_of(self, token_id: int) -> Optional[str]:
        """
        Existence probe.

        Returns:
            Owner address, or None when the call reverts (token does not exist)

        Raises:
            ChainMismatchError, RpcNotAvailableError: If the contract can not
                be bound, see ``_binding``
        """
        binding = await self._binding()
        try:
            owner = await binding.contract.functions.ownerOf(token_id).call()
        except Exception as e:
            logger.debug(f"ownerOf({token_id}) failed: {error_message(e)}")
            return None
        if not owner or owner == ZERO_ADDRESS:
            return None
        return owner

    async def mintable(
        self, price: int, token_id: int, token_uri: str, signature: Optional[str]
    ) -> bool:
        """
        Availability probe.

        Returns:
            True when the authorization is currently accepted

        Raises:
            SignatureInvalidError, AlreadyMintedError, BelowFloorError,
            UnknownContractError: Classified revert reason
        """
        await self._call(
            "mintable", int(price), token_id, token_uri, signature_bytes(signature)
        )
        return True

    async def mintable_status(
        self, price: int, token_id: int, token_uri: str, signature: Optional[str]
    ) -> Optional[ErrorKind]:
        """Same as ``mintable`` but returns the failure kind, None on success."""
        try:
            await self.mintable(price, token_id, token_uri, signature)
        except (PreconditionError, RpcNotAvailableError):
            raise
        except NftSurfaceError as e:
            logger.debug(f"mintable({token_id}) refused: {e.kind.value} {e.message}")
            return e.kind
        return None

    async def vacant(self, token_id: int) -> bool:
        await self._call("vacant", token_id)
        return True

    async def token_uri(self, token_id: int) -> str:
        return await self._call("tokenURI", token_id)

    async def price_of(self, token_id: int) -> int:
        return int(await self._call("priceOf", token_id))

    async def id_floor(self) -> int:
        return int(await self._call("idFloor"))

    async def total_supply(self) -> int:
        return int(await self._call("totalSupply"))

    async def royalty_basis_points(self) -> int:
        return int(await self._call("royaltyBasisPoints"))

    async def base_mint_price(self) -> int:
        return int(await self._call("mintPrice"))

    async def _require_wallet(self) -> str:
        wallet = self.wallet
        if wallet is None:
            raise WalletUnavailableError("wallet_unavailable")
        accounts = await wallet.accounts()
        if not accounts:
            raise WalletUnavailableError("Wallet is not connected")
        wallet_chain_id = await wallet.chain_id()
        if wallet_chain_id != self.context.chain_id:
            raise ChainMismatchError(self.context.chain_id, wallet_chain_id)
        return accounts[0]

    async def _transact(self, method_name: str, *args, value: int = 0) -> TransactionRecord:
        sender = await self._require_wallet()
        binding = await self._binding()
        try:
            tx = await getattr(binding.contract.functions, method_name)(
                *args
            ).build_transaction({"from": sender, "value": int(value)})
            tx_hash = await self.wallet.send_transaction(tx)
        except NftSurfaceError:
            raise
        except Exception as e:
            raise classify_error(e) from e
        logger.info(f"{method_name} submitted by {sender}: {tx_hash}")
        return TransactionRecord(hash=tx_hash)

    async def mint(
        self,
        record: NftRecord,
        value: Optional[int] = None,
        signature: Optional[str] = None,
    ) -> TransactionRecord:
        """
        Mint at the contract base price.

        Args:
            record: Catalog record carrying tokenId, tokenURI and signature
            value: Value sent, defaults to the catalog base mint price
            signature: Overrides the record signature
        """
        if value is None:
            value = self.context.base_mint_price
        return await self._transact(
            "mint",
            record.token_id,
            record.token_uri,
            signature_bytes(signature or record.signature),
            value=value,
        )

    async def mint_at_price(
        self, price: int, record: NftRecord, signature: Optional[str] = None
    ) -> TransactionRecord:
        """Mint with a specially signed price, paying exactly that price."""
        return await self._transact(
            "mintAtPrice",
            int(price),
            record.token_id,
            record.token_uri,
            signature_bytes(signature or record.signature),
            value=int(price),
        )

    async def set_price(self, token_id: int, price: int) -> TransactionRecord:
        return await self._transact("setPrice", token_id, int(price))

    async def buy(self, token_id: int, value: int) -> TransactionRecord:
        return await self._transact("buy", token_id, value=int(value))

    async def safe_transfer_from(
        self, from_address: str, to_address: str, token_id: int
    ) -> TransactionRecord:
        return await self._transact(
            "safeTransferFrom",
            Web3.to_checksum_address(from_address),
            Web3.to_checksum_address(to_address),
            token_id,
        )

    async def withdraw(self) -> TransactionRecord:
        return await self._transact("withdraw")

    async def set_id_floor(self, floor: int) -> TransactionRecord:
        return await self._transact("setIdFloor", int(floor))

    async def set_base_mint_price(self, price: int) -> TransactionRecord:
        return await self._transact("setBaseMintPrice", int(price))

    async def wait_for_transaction(self, tx_hash: str) -> TransactionRecord:
        """
        Wait until the transaction is mined.

        No timeout is imposed here beyond the configured ``receipt_timeout``.

        Raises:
            TransactionFailedError: If the wait fails, or the receipt has no
                block number or a failed status
        """
        binding = await self._binding()
        try:
            data = await binding.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout, poll_latency=self.poll_latency
            )
        except Exception as e:
            raise TransactionFailedError(error_message(e), trx_hash=tx_hash) from e
        receipt = TransactionReceipt.build(data)
        if not receipt.block_number:
            raise TransactionFailedError("Receipt has no block number", trx_hash=tx_hash)
        if receipt.status == 0:
            raise TransactionFailedError("Transaction reverted", trx_hash=tx_hash)
        return TransactionRecord(hash=tx_hash, receipt=receipt)

    async def events_in(self, record: TransactionRecord) -> List[dict]:
        """
        Decode the success events (Transfer, PriceSet, Bought, Withdrawal)
        emitted by a mined transaction.
        """
        if not record.receipt or not record.receipt.logs:
            return []
        binding = await self._binding()
        decoded = []
        for log in record.receipt.logs:
            for name in SUCCESS_EVENTS:
                event = getattr(binding.contract.events, name)()
                try:
                    processed = event.process_log(log)
                except (MismatchedABI, LogTopicError, ValueError):
                    continue
                decoded.append(dict(event=name, args=dict(processed["args"])))
                break
        return decoded
