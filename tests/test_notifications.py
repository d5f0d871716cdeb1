from fakes import BUYER, OTHER
from nft_surface.exceptions import ErrorKind, InsufficientFundsError
from nft_surface.models import ResolvedStatus, TokenStatus, TransactionFailure
from nft_surface.notifications import (
    Notification,
    NotificationKind,
    from_error,
    from_failure,
    price_label,
    render,
    status_message,
)
from nft_surface.utils import format_ether, parse_ether, short_address


def test_render_transaction_progress():
    tx = "0xabc"
    assert render(Notification(NotificationKind.TX_PENDING, tx_hash=tx), 1) == (
        "Please be patient while transaction https://etherscan.io/tx/0xabc "
        "is added to the blockchain..."
    )
    assert render(Notification(NotificationKind.TX_FAILED, tx_hash=tx), 31337) == (
        "Sorry, transaction 0xabc failed"
    )
    assert render(Notification(NotificationKind.TX_FAILED), 1) == "Sorry, the transaction failed"
    assert Notification(NotificationKind.CONFIRM_IN_WALLET).pending


def test_failures_map_to_notifications():
    notification = from_failure(TransactionFailure(ErrorKind.INSUFFICIENT_FUNDS, "low"))
    assert render(notification, 1) == "You have insufficient funds in your wallet"
    notification = from_failure(TransactionFailure(ErrorKind.UNKNOWN, "nonce too low"))
    assert notification.kind == NotificationKind.MESSAGE
    assert render(notification, 1) == "nonce too low"
    notification = from_error(InsufficientFundsError("low", trx_hash="0x1"))
    assert notification.kind == NotificationKind.INSUFFICIENT_FUNDS
    assert notification.tx_hash == "0x1"


def test_status_messages(context, open_record):
    minted = ResolvedStatus(TokenStatus.MINTED, OTHER)
    assert status_message(minted, open_record, context, OTHER.lower()) == "You own this NFT"
    assert status_message(minted, open_record, context, BUYER) == (
        f"Owned by {short_address(OTHER)}"
    )
    burnt = ResolvedStatus(TokenStatus.BURNT_OR_REVOKED)
    assert status_message(burnt, open_record, context) == (
        "Sorry, this NFT has been burnt or revoked."
    )
    assert status_message(ResolvedStatus(), open_record, context) == "Checking NFT status …"


def test_free_mint(context, open_record):
    free = context.model_copy(update={"base_mint_price": 0})
    status = ResolvedStatus(TokenStatus.MINTABLE_CONFIRMED)
    assert status_message(status, open_record, free) == (
        "This NFT is available for minting: FREE + gas fee"
    )
    assert price_label(10**18, 137) == "1 MATIC"


def test_ether_helpers():
    assert format_ether(1500000000000000000) == "1.5"
    assert format_ether(100 * 10**18) == "100"
    assert parse_ether("0.25") == 250000000000000000
    assert short_address("0xAbCdEf0123456789aBcDeF0123456789AbCdEf01") == "0xabcd…ef01"
    assert short_address(None) == ""
