from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from nft_surface.constants import MAX_UINT256
from nft_surface.exceptions import ErrorKind


class NftMetadata(BaseModel):
    """Artwork metadata published in the catalog."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    creator: Optional[str] = None
    collection: Optional[str] = None
    date: Optional[str] = None
    edition: Optional[str] = None
    external_url: Optional[str] = None

    @property
    def display_width(self) -> int:
        return self.width or 100

    @property
    def display_height(self) -> int:
        return self.height or 100

    @property
    def orientation(self) -> str:
        return (
            "landscape" if self.display_width > self.display_height else "portrait"
        )

    @property
    def display_edition(self) -> str:
        return self.edition or "1 / 1"

    @property
    def paragraphs(self) -> List[str]:
        # the catalog tool marks paragraph breaks with a literal "/n"
        return str(self.description or "").split("/n")


class NftRecord(BaseModel):
    """
    Catalog entry of a single token.

    Attributes:
        token_id: On-chain token id.
        token_uri: Pointer to the token metadata, signed by the creator.
        mint_price: Fixed signed price in wei, None when the mint is open at
            the contract base price.
        signature: Creator typed-data signature over (price, tokenId, tokenURI).
        withheld: Administrative reservation, never derived from the chain.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token_id: int = Field(alias="tokenId", ge=0)
    token_uri: str = Field(alias="tokenURI")
    mint_price: Optional[int] = Field(default=None, alias="mintPrice")
    signature: Optional[str] = None
    metadata: NftMetadata = Field(default_factory=NftMetadata)
    web_optimized_image: Optional[str] = Field(
        default=None, alias="webOptimizedImage"
    )
    placeholder_image: Optional[str] = Field(default=None, alias="placeholderImage")
    withheld: bool = False

    @field_validator("mint_price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        if value is None or value == "":
            return None
        return int(value)

    @property
    def probe_price(self) -> int:
        """Price passed to ``mintable``; open mints use the max uint256 sentinel."""
        if self.mint_price is None:
            return MAX_UINT256
        return self.mint_price


class ChainContext(BaseModel):
    """Deployment the catalog was prepared for."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    chain_id: int = Field(alias="chainId")
    contract_address: str = Field(alias="contractAddress")
    creator_address: Optional[str] = Field(default=None, alias="creatorAddress")
    base_mint_price: int = Field(
        default=0,
        validation_alias=AliasChoices("baseMintPrice", "mintPrice", "base_mint_price"),
    )
    royalty_basis_points: int = Field(default=0, alias="royaltyBasisPoints")

    @field_validator("base_mint_price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        return int(value or 0)


class Catalog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    context: ChainContext
    nfts: List[NftRecord] = Field(default_factory=list, alias="NFTs")

    @property
    def token_ids(self) -> List[int]:
        return [nft.token_id for nft in self.nfts]

    def get(self, token_id: int) -> Optional[NftRecord]:
        for nft in self.nfts:
            if nft.token_id == token_id:
                return nft
        return None

    def navigation(self, token_id: int) -> Dict[str, int]:
        """
        Previous/next token ids around ``token_id``, wrapping at both ends.

        Raises:
            KeyError: If the token is not listed
        """
        ids = self.token_ids
        if token_id not in ids:
            raise KeyError(token_id)
        i = ids.index(token_id)
        length = len(ids)
        return dict(next_id=ids[(i + 1) % length], prev_id=ids[(i + length - 1) % length])


@dataclass
class WalletSession:
    address: Optional[str] = None
    chain_id: Optional[int] = None

    @property
    def is_connected(self) -> bool:
        return bool(self.address)

    def matches(self, chain_id: int) -> bool:
        """Unknown wallet network never counts as a mismatch."""
        return self.chain_id is None or self.chain_id == chain_id


@dataclass
class TransactionReceipt:
    block_number: Optional[int]
    transaction_hash: Optional[str] = None
    status: Optional[int] = None
    logs: Optional[list] = None

    @classmethod
    def build(cls, data) -> "TransactionReceipt":
        tx_hash = data.get("transactionHash")
        if isinstance(tx_hash, (bytes, bytearray)):
            tx_hash = "0x" + bytes(tx_hash).hex()
        return cls(
            block_number=data.get("blockNumber"),
            transaction_hash=tx_hash,
            status=data.get("status"),
            logs=list(data.get("logs") or []),
        )


@dataclass
class TransactionRecord:
    hash: str
    receipt: Optional[TransactionReceipt] = None

    @property
    def is_mined(self) -> bool:
        return bool(self.receipt and self.receipt.block_number)


class TokenStatus(str, Enum):
    INIT = "init"
    PROBING = "probing"
    MINTED = "minted"
    MINTABLE_CONFIRMED = "mintable_confirmed"
    BURNT_OR_REVOKED = "burnt_or_revoked"
    WITHHELD = "withheld"
    CHAIN_MISMATCH = "chain_mismatch"


SETTLED_STATUSES = (
    TokenStatus.MINTED,
    TokenStatus.MINTABLE_CONFIRMED,
    TokenStatus.BURNT_OR_REVOKED,
    TokenStatus.WITHHELD,
    TokenStatus.CHAIN_MISMATCH,
)


class Offer(str, Enum):
    """What the storefront offers for a token in its current status."""

    SALE = "sale"
    MINT = "mint"
    RESERVED = "reserved"
    BURNT = "burnt"
    PENDING = "pending"
    SWITCH_NETWORK = "switch_network"


@dataclass(frozen=True)
class ResolvedStatus:
    status: TokenStatus = TokenStatus.INIT
    owner: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    def offer(self) -> Offer:
        if self.status == TokenStatus.MINTED:
            return Offer.SALE
        if self.status == TokenStatus.MINTABLE_CONFIRMED:
            return Offer.MINT
        if self.status == TokenStatus.WITHHELD:
            return Offer.RESERVED
        if self.status == TokenStatus.BURNT_OR_REVOKED:
            return Offer.BURNT
        if self.status == TokenStatus.CHAIN_MISMATCH:
            return Offer.SWITCH_NETWORK
        return Offer.PENDING


class TransactionState(str, Enum):
    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    SUBMITTED = "submitted"
    MINED = "mined"
    FAILED = "failed"


class TransactionAction(str, Enum):
    MINT = "mint"
    MINT_AT_PRICE = "mint_at_price"
    BUY = "buy"
    SET_PRICE = "set_price"
    TRANSFER = "transfer"


@dataclass
class TransactionFailure:
    kind: ErrorKind
    message: str = ""
