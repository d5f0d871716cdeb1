from nft_surface.config import StorefrontConfig
from nft_surface.catalog import CatalogLoader
from nft_surface.gateway import ContractGateway
from nft_surface.models import (
    Catalog,
    ChainContext,
    NftMetadata,
    NftRecord,
    Offer,
    ResolvedStatus,
    TokenStatus,
    TransactionState,
    WalletSession,
)
from nft_surface.orchestrator import TransactionOrchestrator
from nft_surface.providers import ProviderPool
from nft_surface.resolver import StatusResolver
from nft_surface.session import Session
from nft_surface.view import NftView
from nft_surface.wallet import BaseWallet, LocalWallet

__all__ = [
    "StorefrontConfig",
    "CatalogLoader",
    "ContractGateway",
    "Catalog",
    "ChainContext",
    "NftMetadata",
    "NftRecord",
    "Offer",
    "ResolvedStatus",
    "TokenStatus",
    "TransactionState",
    "WalletSession",
    "TransactionOrchestrator",
    "ProviderPool",
    "StatusResolver",
    "Session",
    "NftView",
    "BaseWallet",
    "LocalWallet",
]
