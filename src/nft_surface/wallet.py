import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from eth_account import Account
from loguru import logger
from web3 import Web3

from nft_surface.constants import WALLET_EVENT_QUEUE_SIZE
from nft_surface.exceptions import WalletRejectedError, WalletUnavailableError


class WalletEventType(str, Enum):
    ACCOUNT_CHANGED = "account_changed"
    CHAIN_CHANGED = "chain_changed"


@dataclass
class WalletEvent:
    type: WalletEventType
    value: Any = None


class WalletSubscription:
    """
    Handle of a wallet event subscription.

    Events are delivered through a bounded queue. When the consumer falls
    behind the oldest event is dropped. ``unsubscribe()`` must be called by
    the owner when it is torn down.
    """

    def __init__(self, wallet: "BaseWallet", maxsize: int = WALLET_EVENT_QUEUE_SIZE):
        self._wallet = wallet
        self.events: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.active = True

    def push(self, event: WalletEvent):
        if not self.active:
            return
        if self.events.full():
            dropped = self.events.get_nowait()
            logger.warning(f"Wallet event queue full, dropping {dropped.type.value}")
        self.events.put_nowait(event)

    async def get(self) -> WalletEvent:
        return await self.events.get()

    def unsubscribe(self):
        if not self.active:
            return
        self.active = False
        self._wallet._remove_subscription(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unsubscribe()


class BaseWallet:
    """
    Wallet provider interface.

    A wallet exposes its accounts, the network it is connected to, signs
    and broadcasts transactions, and notifies subscribers about account and
    network changes.
    """

    web3: Any = None

    def __init__(self):
        self._subscriptions: List[WalletSubscription] = []

    async def accounts(self) -> List[str]:
        """Accounts already exposed to the storefront, no prompt."""
        raise NotImplementedError("accounts is not implemented")

    async def request_accounts(self) -> List[str]:
        """Ask the user to connect, may raise WalletRejectedError."""
        raise NotImplementedError("request_accounts is not implemented")

    async def chain_id(self) -> Optional[int]:
        raise NotImplementedError("chain_id is not implemented")

    async def send_transaction(self, tx: dict) -> str:
        raise NotImplementedError("send_transaction is not implemented")

    def subscribe(self, maxsize: int = WALLET_EVENT_QUEUE_SIZE) -> WalletSubscription:
        subscription = WalletSubscription(self, maxsize=maxsize)
        self._subscriptions.append(subscription)
        return subscription

    def _remove_subscription(self, subscription: WalletSubscription):
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def emit(self, event_type: WalletEventType, value=None):
        event = WalletEvent(event_type, value)
        for subscription in list(self._subscriptions):
            subscription.push(event)


ApproveHook = Callable[[str, dict], Awaitable[bool]]


class LocalWallet(BaseWallet):
    """
    Wallet backed by a local private key and an AsyncWeb3 client.

    Args:
        private_key: Hex private key of the account
        web3: AsyncWeb3 client of the network the wallet is connected to
        approve: Optional coroutine ``approve(request, payload)`` standing in
            for the user prompt; returning False rejects the request
        connected: Whether the account is already exposed without a prompt
    """

    def __init__(
        self,
        private_key=None,
        web3=None,
        approve: Optional[ApproveHook] = None,
        connected: bool = False,
    ):
        super().__init__()
        self._account = Account.from_key(private_key) if private_key else None
        self.web3 = web3
        self._approve = approve
        self._connected = connected and self._account is not None

    @property
    def address(self) -> Optional[str]:
        if self._account is None:
            return None
        return self._account.address

    async def _confirm(self, request: str, payload: dict):
        if self._approve is not None and not await self._approve(request, payload):
            raise WalletRejectedError("User rejected the request.")

    async def accounts(self) -> List[str]:
        if self._connected and self.address:
            return [self.address]
        return []

    async def request_accounts(self) -> List[str]:
        if self._account is None:
            raise WalletUnavailableError("Wallet has no account")
        if not self._connected:
            await self._confirm("connect", dict(address=self.address))
            self._connected = True
            logger.info(f"Wallet connected: {self.address}")
        return [self.address]

    async def chain_id(self) -> Optional[int]:
        if self.web3 is None:
            return None
        return await self.web3.eth.chain_id

    async def send_transaction(self, tx: dict) -> str:
        """
        Sign and broadcast a transaction.

        Missing ``from``, ``nonce`` and ``chainId`` fields are filled in.

        Returns:
            0x-prefixed transaction hash
        """
        if self.web3 is None or not self._connected:
            raise WalletUnavailableError("Wallet is not connected")
        await self._confirm("transaction", tx)
        tx = dict(tx)
        tx.setdefault("from", self.address)
        if "nonce" not in tx:
            tx["nonce"] = await self.web3.eth.get_transaction_count(
                self.address, "pending"
            )
        if "chainId" not in tx:
            tx["chainId"] = await self.web3.eth.chain_id
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def disconnect(self):
        self._connected = False
        self.emit(WalletEventType.ACCOUNT_CHANGED, None)

    async def switch_account(self, private_key):
        self._account = Account.from_key(private_key)
        self._connected = True
        self.emit(WalletEventType.ACCOUNT_CHANGED, self.address)

    async def switch_chain(self, web3):
        self.web3 = web3
        self.emit(WalletEventType.CHAIN_CHANGED, await self.chain_id())
