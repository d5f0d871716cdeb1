import asyncio
from typing import Optional, TYPE_CHECKING

from loguru import logger

from nft_surface.chains import explorer_address_link
from nft_surface.exceptions import NftSurfaceError
from nft_surface.models import (
    NftRecord,
    Offer,
    ResolvedStatus,
    TokenStatus,
    TransactionState,
    WalletSession,
)
from nft_surface.notifications import (
    Notification,
    NotificationKind,
    from_error,
    from_failure,
    render,
    status_message,
)
from nft_surface.orchestrator import TransactionOrchestrator
from nft_surface.resolver import StatusResolver
from nft_surface.wallet import WalletEvent, WalletEventType, WalletSubscription

if TYPE_CHECKING:
    from nft_surface.session import Session


class NftView:
    """
    Storefront view of a single token.

    ``mount()`` installs one wallet subscription, discovers the wallet and
    resolves the token status; wallet events are consumed in the background:
    an account change re-resolves, a network change reloads everything.
    ``unmount()`` removes the subscription; results arriving afterwards are
    dropped.
    """

    def __init__(self, session: "Session", record: NftRecord):
        self._session = session
        self.record = record
        self.mounted = False
        self.detached = False
        self.wallet_session = WalletSession()
        self.status = ResolvedStatus()
        self.notification: Optional[Notification] = None
        self.reloads = 0
        self._subscription: Optional[WalletSubscription] = None
        self._consumer: Optional[asyncio.Task] = None
        self._build()

    def _build(self):
        self.gateway = self._session.gateway()
        self.resolver = StatusResolver(self.gateway, self.record, self.wallet_session)
        self.orchestrator = TransactionOrchestrator(
            self.gateway, self.record, self.resolver, on_change=self._on_transaction
        )

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.unmount()

    @property
    def context(self):
        return self.gateway.context

    @property
    def owner(self) -> Optional[str]:
        return self.status.owner

    @property
    def offer(self) -> Offer:
        if self.orchestrator.busy:
            return Offer.PENDING
        return self.status.offer()

    @property
    def owner_link(self) -> Optional[str]:
        if not self.owner:
            return None
        return explorer_address_link(self.context.chain_id, self.owner)

    @property
    def is_owner(self) -> bool:
        address = self.wallet_session.address
        return bool(address and self.owner and address.lower() == self.owner.lower())

    @property
    def status_text(self) -> str:
        return status_message(
            self.status, self.record, self.context, self.wallet_session.address
        )

    @property
    def notification_text(self) -> Optional[str]:
        if self.notification is None:
            return None
        return render(self.notification, self.context.chain_id)

    async def mount(self):
        if self.mounted:
            return
        self.mounted = True
        self.detached = False
        wallet = self._session.wallet
        try:
            if wallet is not None:
                self._subscription = wallet.subscribe(
                    self._session.config.wallet_event_queue_size
                )
                self._consumer = asyncio.create_task(self._consume(self._subscription))
            await self.refresh_wallet()
            await self.update_status()
        except Exception:
            await self.unmount()
            raise

    async def unmount(self):
        self.mounted = False
        self.detached = True
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def _consume(self, subscription: WalletSubscription):
        while not self.detached:
            event = await subscription.get()
            if self.detached:
                break
            try:
                await self.handle_event(event)
            except NftSurfaceError as e:
                self.notification = Notification(NotificationKind.MESSAGE, e.message)
            except Exception as e:
                logger.exception(e)

    async def handle_event(self, event: WalletEvent):
        if event.type == WalletEventType.ACCOUNT_CHANGED:
            self.notification = None
            await self.refresh_wallet()
            await self.update_status()
        elif event.type == WalletEventType.CHAIN_CHANGED:
            await self.reload()

    async def reload(self):
        """Network changed: drop every binding and start over."""
        logger.info(f"Token {self.record.token_id}: network changed, reloading")
        await self._session.pool.invalidate()
        self.reloads += 1
        self.wallet_session = WalletSession()
        self.status = ResolvedStatus()
        self.notification = None
        self._build()
        await self.refresh_wallet()
        await self.update_status()

    async def refresh_wallet(self, connect: bool = False) -> WalletSession:
        try:
            session = await self.gateway.get_wallet(connect=connect)
        except NftSurfaceError as e:
            if not self.detached:
                self.notification = from_error(e)
            return self.wallet_session
        if self.detached:
            return session
        self.wallet_session = session
        self.resolver.set_wallet(session)
        return session

    async def connect_wallet(self) -> WalletSession:
        session = await self.refresh_wallet(connect=True)
        if not session.matches(self.context.chain_id):
            await self.update_status()
        return session

    async def update_status(self) -> ResolvedStatus:
        status = await self.resolver.resolve()
        if not self.detached:
            self.status = status
            if status.status == TokenStatus.CHAIN_MISMATCH:
                self.notification = Notification(NotificationKind.CHAIN_MISMATCH)
            elif self.resolver.last_error is not None:
                self.notification = from_error(self.resolver.last_error)
        return status

    def _on_transaction(self, orchestrator: TransactionOrchestrator):
        if self.detached:
            return
        tx_hash = orchestrator.tx.hash if orchestrator.tx else None
        if orchestrator.state == TransactionState.CONFIRM_PENDING:
            self.notification = Notification(NotificationKind.CONFIRM_IN_WALLET)
        elif orchestrator.state == TransactionState.SUBMITTED:
            self.notification = Notification(NotificationKind.TX_PENDING, tx_hash=tx_hash)
        elif orchestrator.state == TransactionState.MINED:
            self.notification = Notification(NotificationKind.TX_SUCCEEDED, tx_hash=tx_hash)
            if orchestrator.owner:
                self.status = ResolvedStatus(TokenStatus.MINTED, orchestrator.owner)
        elif orchestrator.state == TransactionState.FAILED:
            self.notification = from_failure(orchestrator.failure, tx_hash)

    async def _after_transaction(self, state: Optional[TransactionState]):
        if state is None or self.detached:
            return state
        if self.orchestrator.wallet_address:
            self.wallet_session = self.resolver.wallet
        if state == TransactionState.MINED:
            self.status = self.resolver.status
        return state

    async def mint(self, price: Optional[int] = None, signature: Optional[str] = None):
        return await self._after_transaction(await self.orchestrator.mint(price, signature))

    async def buy(self, price: Optional[int] = None):
        return await self._after_transaction(await self.orchestrator.buy(price))

    async def set_price(self, price: int):
        return await self._after_transaction(await self.orchestrator.set_price(price))

    async def transfer(self, to_address: str):
        return await self._after_transaction(await self.orchestrator.transfer(to_address))
