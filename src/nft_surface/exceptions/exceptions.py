from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CHAIN_MISMATCH = "chain_mismatch"
    SIGNATURE_INVALID = "signature_invalid"
    ALREADY_MINTED = "already_minted"
    BELOW_FLOOR = "below_floor"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    WALLET_UNAVAILABLE = "wallet_unavailable"
    WALLET_REJECTED = "wallet_rejected"
    TRANSACTION_FAILED = "transaction_failed"
    UNKNOWN = "unknown"


class NftSurfaceError(Exception):
    """
    Base error of the library.

    Every error carries a closed ``kind`` so callers can branch on it without
    looking at provider specific payloads.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    trx_hash: Optional[str] = None
    error_json: Optional[dict] = None

    def __init__(self, message: str = "", *, trx_hash=None, error_json=None):
        super().__init__(message)
        self.message = message
        self.trx_hash = trx_hash
        self.error_json = error_json


class PreconditionError(NftSurfaceError):
    """
    Raised before any provider is touched, when the caller is not allowed
    to perform the call at all
    """

    pass


class ChainMismatchError(PreconditionError):
    """
    The wallet (or the RPC endpoint) is connected to another network than
    the one the catalog was prepared for
    """

    kind = ErrorKind.CHAIN_MISMATCH

    def __init__(self, expected: int, actual: Optional[int], **kwargs):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Connected chain id {actual} does not match catalog chain id {expected}",
            **kwargs,
        )


class WalletUnavailableError(PreconditionError):
    """
    No wallet is available, or it is available but no account is connected
    """

    kind = ErrorKind.WALLET_UNAVAILABLE


class WalletRejectedError(NftSurfaceError):
    """
    The user rejected the connection or the transaction in the wallet
    """

    kind = ErrorKind.WALLET_REJECTED


class CatalogError(NftSurfaceError):
    pass


class RpcNotAvailableError(NftSurfaceError):
    """
    No RPC endpoint is configured or reachable for the requested chain
    """

    pass
