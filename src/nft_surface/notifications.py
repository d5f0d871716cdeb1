from dataclasses import dataclass
from enum import Enum
from typing import Optional

from nft_surface.chains import chain_params, explorer_tx_link, network_name
from nft_surface.exceptions import ErrorKind, NftSurfaceError
from nft_surface.models import (
    ChainContext,
    NftRecord,
    ResolvedStatus,
    TokenStatus,
    TransactionFailure,
)
from nft_surface.utils import format_ether, short_address


class NotificationKind(str, Enum):
    CONFIRM_IN_WALLET = "confirm_in_wallet"
    TX_PENDING = "tx_pending"
    TX_SUCCEEDED = "tx_succeeded"
    TX_FAILED = "tx_failed"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SIGNATURE_INVALID = "signature_invalid"
    WALLET_UNAVAILABLE = "wallet_unavailable"
    WALLET_REJECTED = "wallet_rejected"
    CHAIN_MISMATCH = "chain_mismatch"
    MESSAGE = "message"


ERROR_KIND_TO_NOTIFICATION = {
    ErrorKind.INSUFFICIENT_FUNDS: NotificationKind.INSUFFICIENT_FUNDS,
    ErrorKind.SIGNATURE_INVALID: NotificationKind.SIGNATURE_INVALID,
    ErrorKind.WALLET_UNAVAILABLE: NotificationKind.WALLET_UNAVAILABLE,
    ErrorKind.WALLET_REJECTED: NotificationKind.WALLET_REJECTED,
    ErrorKind.CHAIN_MISMATCH: NotificationKind.CHAIN_MISMATCH,
    ErrorKind.TRANSACTION_FAILED: NotificationKind.TX_FAILED,
}


@dataclass
class Notification:
    kind: NotificationKind
    message: str = ""
    tx_hash: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self.kind in (NotificationKind.CONFIRM_IN_WALLET, NotificationKind.TX_PENDING)


def from_failure(failure: TransactionFailure, tx_hash: Optional[str] = None) -> Notification:
    kind = ERROR_KIND_TO_NOTIFICATION.get(failure.kind, NotificationKind.MESSAGE)
    return Notification(kind, failure.message, tx_hash)


def from_error(error: NftSurfaceError) -> Notification:
    return from_failure(TransactionFailure(error.kind, error.message), error.trx_hash)


def render(notification: Notification, chain_id: int) -> str:
    """Text shown to the user for a notification, never a stack trace."""
    tx = notification.tx_hash or ""
    link = explorer_tx_link(chain_id, tx) if tx else None
    tx_ref = link or tx
    kind = notification.kind
    if kind == NotificationKind.INSUFFICIENT_FUNDS:
        return "You have insufficient funds in your wallet"
    if kind == NotificationKind.SIGNATURE_INVALID:
        return "Sorry, the signature is not valid for this NFT and price"
    if kind == NotificationKind.TX_PENDING:
        return f"Please be patient while transaction {tx_ref} is added to the blockchain..."
    if kind == NotificationKind.TX_SUCCEEDED:
        return f"Done! Transaction {tx_ref} was successful"
    if kind == NotificationKind.TX_FAILED:
        return f"Sorry, transaction {tx_ref} failed" if tx else "Sorry, the transaction failed"
    if kind == NotificationKind.CONFIRM_IN_WALLET:
        return "Please confirm using your wallet..."
    if kind == NotificationKind.WALLET_UNAVAILABLE:
        return "To mint or buy NFTs you need an Ethereum wallet"
    if kind == NotificationKind.WALLET_REJECTED:
        return "The request was rejected in your wallet"
    if kind == NotificationKind.CHAIN_MISMATCH:
        return (
            "To establish the status of this NFT, please switch your wallet to network: "
            f"{network_name(chain_id)}"
        )
    return notification.message


def price_label(wei: int, chain_id: int) -> str:
    if int(wei) == 0:
        return "FREE"
    return f"{format_ether(wei)} {chain_params(chain_id).currency_symbol}"


def status_message(
    status: ResolvedStatus,
    record: NftRecord,
    context: ChainContext,
    wallet_address: Optional[str] = None,
) -> str:
    """One-line description of the token disposition for display."""
    if status.status == TokenStatus.MINTED:
        if wallet_address and status.owner and wallet_address.lower() == status.owner.lower():
            return "You own this NFT"
        return f"Owned by {short_address(status.owner)}"
    if status.status == TokenStatus.MINTABLE_CONFIRMED:
        price = record.mint_price if record.mint_price is not None else context.base_mint_price
        return (
            "This NFT is available for minting: "
            f"{price_label(price, context.chain_id)} + gas fee"
        )
    if status.status == TokenStatus.WITHHELD:
        return "This NFT is reserved. Please contact the artist."
    if status.status == TokenStatus.BURNT_OR_REVOKED:
        return "Sorry, this NFT has been burnt or revoked."
    if status.status == TokenStatus.CHAIN_MISMATCH:
        return render(Notification(NotificationKind.CHAIN_MISMATCH), context.chain_id)
    return "Checking NFT status …"
