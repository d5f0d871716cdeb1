from typing import Optional

from loguru import logger

from nft_surface.exceptions import (
    ChainMismatchError,
    ErrorKind,
    NftSurfaceError,
    RpcNotAvailableError,
)
from nft_surface.gateway import ContractGateway
from nft_surface.models import (
    NftRecord,
    ResolvedStatus,
    TokenStatus,
    WalletSession,
)


class StatusResolver:
    """
    Determine the disposition of a token by probing the chain.

    Resolution order:
        1. wallet network differs from the catalog network -> chain_mismatch,
           the contract is not touched at all;
        2. ``ownerOf`` succeeds -> minted (on-chain existence always wins);
        3. token withheld out-of-band -> withheld, probes never override it;
        4. ``mintable`` with the fixed record price (or the max uint256
           sentinel) succeeds -> mintable_confirmed, otherwise
           burnt_or_revoked.

    The contract does not tell apart a token that never existed, was burnt,
    or sits below a raised floor, so neither does the resolver.

    When the chain can not be reached at all the pass keeps the last settled
    status (or ``init``) and records the error in ``last_error``; the next
    pass tries again.
    """

    def __init__(
        self,
        gateway: ContractGateway,
        record: NftRecord,
        wallet: Optional[WalletSession] = None,
    ):
        self._gateway = gateway
        self.record = record
        self.wallet = wallet or WalletSession()
        self._withheld = record.withheld
        self._status = ResolvedStatus(
            TokenStatus.WITHHELD if self._withheld else TokenStatus.INIT
        )
        self.last_refusal: Optional[ErrorKind] = None
        self.last_error: Optional[NftSurfaceError] = None
        self.updated = False
        self.generation = 0

    @property
    def status(self) -> ResolvedStatus:
        return self._status

    @property
    def owner(self) -> Optional[str]:
        return self._status.owner

    def withhold(self):
        """Reserve the token administratively."""
        self._withheld = True
        if self._status.status != TokenStatus.MINTED:
            self._status = ResolvedStatus(TokenStatus.WITHHELD)

    def set_wallet(self, wallet: WalletSession):
        self.wallet = wallet

    def set_owner(self, owner: str):
        self._status = ResolvedStatus(TokenStatus.MINTED, owner)

    def _settle(self, generation: int, status: ResolvedStatus) -> ResolvedStatus:
        if generation != self.generation:
            logger.debug(
                f"Token {self.record.token_id}: dropping superseded {status.status.value}"
            )
            return self._status
        self._status = status
        self.updated = True
        logger.debug(f"Token {self.record.token_id}: {status.status.value}")
        return status

    async def resolve(self) -> ResolvedStatus:
        """
        Run one resolution pass.

        Returns:
            The settled status. When a newer pass started meanwhile, its
            result wins and this pass returns the current status instead.
        """
        self.generation += 1
        generation = self.generation
        self.last_error = None
        context = self._gateway.context

        if not self.wallet.matches(context.chain_id):
            return self._settle(generation, ResolvedStatus(TokenStatus.CHAIN_MISMATCH))

        previous = self._status
        if not self._withheld:
            self._status = ResolvedStatus(TokenStatus.PROBING)

        token_id = self.record.token_id
        try:
            owner = await self._gateway.owner_of(token_id)
            if owner:
                return self._settle(generation, ResolvedStatus(TokenStatus.MINTED, owner))
            if self._withheld:
                return self._settle(generation, ResolvedStatus(TokenStatus.WITHHELD))
            refusal = await self._gateway.mintable_status(
                self.record.probe_price,
                token_id,
                self.record.token_uri,
                self.record.signature,
            )
        except ChainMismatchError as e:
            logger.warning(f"Token {token_id}: {e.message}")
            return self._settle(generation, ResolvedStatus(TokenStatus.CHAIN_MISMATCH))
        except RpcNotAvailableError as e:
            logger.warning(f"Token {token_id}: {e.message}")
            if generation == self.generation:
                self.last_error = e
            stale = previous.status == TokenStatus.CHAIN_MISMATCH
            if stale or not previous.is_settled:
                previous = ResolvedStatus(
                    TokenStatus.WITHHELD if self._withheld else TokenStatus.INIT
                )
            return self._settle(generation, previous)

        if generation == self.generation:
            self.last_refusal = refusal
        if refusal is None:
            return self._settle(generation, ResolvedStatus(TokenStatus.MINTABLE_CONFIRMED))
        return self._settle(generation, ResolvedStatus(TokenStatus.BURNT_OR_REVOKED))
