import pytest
from web3.exceptions import ContractLogicError

from nft_surface.exceptions import (
    AlreadyMintedError,
    BelowFloorError,
    ChainMismatchError,
    ErrorKind,
    InsufficientFundsError,
    SignatureInvalidError,
    UnknownContractError,
    WalletRejectedError,
    classify_error,
    error_message,
)


@pytest.mark.parametrize(
    "reason,exc_class,kind",
    [
        ("signature invalid or signer unauthorized", SignatureInvalidError, ErrorKind.SIGNATURE_INVALID),
        ("tokenId already minted", AlreadyMintedError, ErrorKind.ALREADY_MINTED),
        ("tokenId below floor", BelowFloorError, ErrorKind.BELOW_FLOOR),
        ("insufficient ETH sent", InsufficientFundsError, ErrorKind.INSUFFICIENT_FUNDS),
    ],
)
def test_revert_reasons(reason, exc_class, kind):
    error = classify_error(ContractLogicError(f"execution reverted: {reason}"))
    assert isinstance(error, exc_class)
    assert error.kind == kind
    assert reason in error.message


def test_node_insufficient_funds():
    error = classify_error(
        ValueError({"code": -32000, "message": "insufficient funds for gas * price + value"})
    )
    assert error.kind == ErrorKind.INSUFFICIENT_FUNDS
    assert error.error_json["code"] == -32000


def test_user_rejected_code():
    error = classify_error(ValueError({"code": 4001, "message": "Request denied"}))
    assert isinstance(error, WalletRejectedError)
    assert error.kind == ErrorKind.WALLET_REJECTED


def test_nested_data_message():
    raw = ValueError(
        {"code": -32603, "message": "Internal error", "data": {"message": "tokenId below floor"}}
    )
    assert error_message(raw) == "tokenId below floor"
    assert classify_error(raw).kind == ErrorKind.BELOW_FLOOR


def test_unknown_message_passes_through():
    error = classify_error(RuntimeError("nonce too low"), trx_hash="0xabc")
    assert isinstance(error, UnknownContractError)
    assert error.message == "nonce too low"
    assert error.trx_hash == "0xabc"


def test_classified_error_unchanged():
    original = ChainMismatchError(1, 5)
    assert classify_error(original) is original
    assert original.kind == ErrorKind.CHAIN_MISMATCH
    assert original.expected == 1 and original.actual == 5
    assert "5" in original.message
