from typing import Optional

from nft_surface.exceptions.exceptions import (
    ErrorKind,
    NftSurfaceError,
    WalletRejectedError,
)


class ContractError(NftSurfaceError):
    """
    A contract call (or its gas estimation) reverted or was refused by the node
    """

    pass


class SignatureInvalidError(ContractError):
    """
    The signature does not match the submitted (price, tokenId, tokenURI)
    or was not produced by an authorized signer
    """

    kind = ErrorKind.SIGNATURE_INVALID


class AlreadyMintedError(ContractError):
    """
    The token id is already owned
    """

    kind = ErrorKind.ALREADY_MINTED


class BelowFloorError(ContractError):
    """
    The token id is below the contract id floor and can not be minted anymore
    """

    kind = ErrorKind.BELOW_FLOOR


class InsufficientFundsError(ContractError):
    """
    Wallet balance too low, or the value sent does not match the price
    """

    kind = ErrorKind.INSUFFICIENT_FUNDS


class TransactionFailedError(ContractError):
    """
    The transaction was submitted but was not mined successfully
    """

    kind = ErrorKind.TRANSACTION_FAILED


class UnknownContractError(ContractError):
    kind = ErrorKind.UNKNOWN


REVERT_REASON_TO_EXCEPTION = {
    "signature invalid or signer unauthorized": SignatureInvalidError,
    "tokenid already minted": AlreadyMintedError,
    "tokenid below floor": BelowFloorError,
    "insufficient eth sent": InsufficientFundsError,
    "insufficient funds": InsufficientFundsError,
    "user rejected": WalletRejectedError,
    "user denied": WalletRejectedError,
}

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


def error_message(error) -> str:
    """
    Extract the most specific human readable message from a provider error.

    Providers nest the revert reason in different places: a ``data.message``
    entry of a JSON-RPC error dict, a ``message`` attribute, or just the
    exception text.
    """
    if error is None:
        return "Error"
    if isinstance(error, str):
        return error
    args = getattr(error, "args", ())
    if args and isinstance(args[0], dict):
        body = args[0]
        data = body.get("data")
        if isinstance(data, dict) and data.get("message"):
            return data["message"]
        if body.get("message"):
            return body["message"]
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


def _error_code(error) -> Optional[int]:
    args = getattr(error, "args", ())
    if args and isinstance(args[0], dict):
        return args[0].get("code")
    return getattr(error, "code", None)


def classify_error(error, trx_hash: Optional[str] = None) -> NftSurfaceError:
    """
    Convert a raw provider error into the closed error taxonomy.

    Args:
        error: Exception raised by web3/eth-account/wallet, or a message
        trx_hash: Hash of the related transaction, if any

    Returns:
        NftSurfaceError subclass instance; already classified errors are
        returned unchanged
    """
    if isinstance(error, NftSurfaceError):
        if trx_hash and not error.trx_hash:
            error.trx_hash = trx_hash
        return error
    message = error_message(error)
    error_json = None
    args = getattr(error, "args", ())
    if args and isinstance(args[0], dict):
        error_json = args[0]
    if _error_code(error) == USER_REJECTED_CODE:
        return WalletRejectedError(message, trx_hash=trx_hash, error_json=error_json)
    lowered = message.lower()
    for reason, exc_class in REVERT_REASON_TO_EXCEPTION.items():
        if reason in lowered:
            return exc_class(message, trx_hash=trx_hash, error_json=error_json)
    return UnknownContractError(message, trx_hash=trx_hash, error_json=error_json)
