from nft_surface.exceptions.exceptions import (
    ErrorKind,
    NftSurfaceError,
    PreconditionError,
    ChainMismatchError,
    WalletUnavailableError,
    WalletRejectedError,
    CatalogError,
    RpcNotAvailableError,
)
from nft_surface.exceptions.provider import (
    ContractError,
    SignatureInvalidError,
    AlreadyMintedError,
    BelowFloorError,
    InsufficientFundsError,
    TransactionFailedError,
    UnknownContractError,
    classify_error,
    error_message,
)
