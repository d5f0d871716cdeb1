from typing import Awaitable, Callable, Optional

from loguru import logger

from nft_surface.exceptions import (
    ErrorKind,
    NftSurfaceError,
    WalletUnavailableError,
    classify_error,
)
from nft_surface.gateway import ContractGateway
from nft_surface.models import (
    NftRecord,
    TransactionAction,
    TransactionFailure,
    TransactionRecord,
    TransactionState,
)
from nft_surface.resolver import StatusResolver
from nft_surface.signatures import select_mint_call

BUSY_STATES = (TransactionState.CONFIRM_PENDING, TransactionState.SUBMITTED)


def submission_failure(error: Exception) -> TransactionFailure:
    """
    Classify an error raised while submitting.

    "insufficient funds" becomes InsufficientFunds; other messages are
    passed through verbatim.
    """
    error = classify_error(error)
    if "insufficient funds" in error.message.lower():
        return TransactionFailure(ErrorKind.INSUFFICIENT_FUNDS, error.message)
    return TransactionFailure(error.kind, error.message)


class TransactionOrchestrator:
    """
    Drive one user action through ``idle -> confirm_pending -> submitted ->
    mined | failed``.

    Only one action runs at a time: a call made while a transaction is
    awaiting confirmation or being mined is ignored. Failures never raise,
    they end in the ``failed`` state with a ``TransactionFailure``.
    """

    def __init__(
        self,
        gateway: ContractGateway,
        record: NftRecord,
        resolver: Optional[StatusResolver] = None,
        on_change: Optional[Callable[["TransactionOrchestrator"], None]] = None,
    ):
        self._gateway = gateway
        self.record = record
        self.resolver = resolver
        self.on_change = on_change
        self.state = TransactionState.IDLE
        self.action: Optional[TransactionAction] = None
        self.tx: Optional[TransactionRecord] = None
        self.failure: Optional[TransactionFailure] = None
        self.wallet_address: Optional[str] = None
        self.owner: Optional[str] = resolver.owner if resolver else None
        self.sale_price: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self.state in BUSY_STATES

    def _transition(self, state: TransactionState):
        self.state = state
        logger.info(
            f"Token {self.record.token_id} {self.action.value if self.action else ''}: {state.value}"
        )
        if self.on_change is not None:
            self.on_change(self)

    def _fail(self, failure: TransactionFailure) -> TransactionState:
        self.failure = failure
        self._transition(TransactionState.FAILED)
        return self.state

    def finish(self):
        """Return to idle after a mined or failed transaction."""
        if not self.busy:
            self.state = TransactionState.IDLE
            self.action = None
            self.failure = None

    async def _ensure_wallet(self) -> str:
        session = await self._gateway.get_wallet()
        if not session.is_connected:
            session = await self._gateway.get_wallet(connect=True)
        if not session.is_connected:
            raise WalletUnavailableError("Wallet is not connected")
        if self.resolver is not None:
            self.resolver.set_wallet(session)
        self.wallet_address = session.address
        return session.address

    async def _run(
        self,
        action: TransactionAction,
        submit: Callable[[str], Awaitable[TransactionRecord]],
        on_mined: Callable[[str], None],
    ) -> Optional[TransactionState]:
        if self.busy:
            logger.warning(
                f"Token {self.record.token_id}: {action.value} ignored, "
                f"{self.action.value} is {self.state.value}"
            )
            return None
        self.action = action
        self.tx = None
        self.failure = None
        self._transition(TransactionState.CONFIRM_PENDING)

        try:
            address = await self._ensure_wallet()
            self.tx = await submit(address)
        except Exception as e:
            return self._fail(submission_failure(e))
        self._transition(TransactionState.SUBMITTED)

        try:
            self.tx = await self._gateway.wait_for_transaction(self.tx.hash)
        except NftSurfaceError as e:
            return self._fail(TransactionFailure(ErrorKind.TRANSACTION_FAILED, e.message))

        on_mined(address)
        self._transition(TransactionState.MINED)
        try:
            for signal in await self._gateway.events_in(self.tx):
                logger.info(f"Token {self.record.token_id}: {signal['event']} {signal['args']}")
        except NftSurfaceError as e:
            logger.warning(f"Token {self.record.token_id}: events not decoded, {e.message}")
        if self.resolver is not None:
            if self.owner:
                self.resolver.set_owner(self.owner)
            await self.resolver.resolve()
        return self.state

    async def mint(
        self, price: Optional[int] = None, signature: Optional[str] = None
    ) -> Optional[TransactionState]:
        """
        Mint the token for the connected wallet.

        Args:
            price: Specially signed price in wei, used together with ``signature``
            signature: Signature authorizing ``price``; without it the catalog
                authorization is minted at the base price

        Raises:
            ValueError: If only one of ``price`` and ``signature`` is given
        """
        call = select_mint_call(self.record, self._gateway.context, price, signature)

        async def submit(address):
            if call.action == TransactionAction.MINT:
                return await self._gateway.mint(
                    self.record, value=call.value, signature=call.signature
                )
            return await self._gateway.mint_at_price(call.price, self.record, call.signature)

        def on_mined(address):
            self.owner = address
            self.sale_price = None

        return await self._run(call.action, submit, on_mined)

    async def buy(self, price: Optional[int] = None) -> Optional[TransactionState]:
        """Buy the token at its sale price, read from the contract when not given."""

        async def submit(address):
            value = price
            if value is None:
                value = await self._gateway.price_of(self.record.token_id)
            return await self._gateway.buy(self.record.token_id, value)

        def on_mined(address):
            self.owner = address
            self.sale_price = None

        return await self._run(TransactionAction.BUY, submit, on_mined)

    async def set_price(self, price: int) -> Optional[TransactionState]:
        """Put the token on sale, a zero price takes it off sale."""

        async def submit(address):
            return await self._gateway.set_price(self.record.token_id, price)

        def on_mined(address):
            self.owner = self.owner or address
            self.sale_price = int(price) or None

        return await self._run(TransactionAction.SET_PRICE, submit, on_mined)

    async def transfer(self, to_address: str) -> Optional[TransactionState]:
        async def submit(address):
            return await self._gateway.safe_transfer_from(
                address, to_address, self.record.token_id
            )

        def on_mined(address):
            self.owner = to_address
            self.sale_price = None

        return await self._run(TransactionAction.TRANSFER, submit, on_mined)
