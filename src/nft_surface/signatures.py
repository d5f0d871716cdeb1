"""
Lazy-mint authorizations.

The creator signs ``(price, tokenId, tokenURI)`` as EIP-712 typed data
scoped to the contract deployment; the contract accepts a mint only when the
recovered signer is authorized. The helpers below build the exact same
typed data so that the catalog tool can sign and the client can check a
signature before spending gas.
"""

from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_keys.exceptions import BadSignature, ValidationError
from web3 import Web3

from nft_surface.constants import (
    MAX_UINT256,
    SIGNATURE_DOMAIN_NAME,
    SIGNATURE_DOMAIN_VERSION,
    SIGNATURE_PRIMARY_TYPE,
)
from nft_surface.models import ChainContext, NftRecord, TransactionAction

MINT_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    SIGNATURE_PRIMARY_TYPE: [
        {"name": "price", "type": "uint256"},
        {"name": "tokenId", "type": "uint256"},
        {"name": "tokenURI", "type": "string"},
    ],
}


def mint_domain(chain_id: int, contract_address: str) -> dict:
    return {
        "name": SIGNATURE_DOMAIN_NAME,
        "version": SIGNATURE_DOMAIN_VERSION,
        "chainId": chain_id,
        "verifyingContract": Web3.to_checksum_address(contract_address),
    }


def mint_typed_data(
    chain_id: int, contract_address: str, price: int, token_id: int, token_uri: str
) -> dict:
    """
    Build the full EIP-712 message of a mint authorization.

    Args:
        chain_id: Chain id of the deployment
        contract_address: Verifying contract address
        price: Signed price in wei, ``MAX_UINT256`` for the base price path
        token_id: Token id
        token_uri: Token URI

    Returns:
        Dictionary accepted by ``encode_typed_data(full_message=...)``
    """
    return {
        "types": MINT_TYPES,
        "primaryType": SIGNATURE_PRIMARY_TYPE,
        "domain": mint_domain(chain_id, contract_address),
        "message": {"price": int(price), "tokenId": int(token_id), "tokenURI": token_uri},
    }


def sign_mint(
    private_key,
    chain_id: int,
    contract_address: str,
    price: int,
    token_id: int,
    token_uri: str,
) -> str:
    """Sign a mint authorization with the creator key, returns 0x-prefixed hex."""
    signable = encode_typed_data(
        full_message=mint_typed_data(chain_id, contract_address, price, token_id, token_uri)
    )
    signed = Account.sign_message(signable, private_key=private_key)
    return Web3.to_hex(signed.signature)


def recover_mint_signer(
    signature: str,
    chain_id: int,
    contract_address: str,
    price: int,
    token_id: int,
    token_uri: str,
) -> Optional[str]:
    """
    Recover the address that signed a mint authorization.

    Returns:
        Checksum address, or None when the signature is malformed
    """
    signable = encode_typed_data(
        full_message=mint_typed_data(chain_id, contract_address, price, token_id, token_uri)
    )
    try:
        return Account.recover_message(signable, signature=signature)
    except (ValueError, TypeError, BadSignature, ValidationError):
        return None


def is_mint_authorized(
    signature: Optional[str],
    creator_address: str,
    chain_id: int,
    contract_address: str,
    price: int,
    token_id: int,
    token_uri: str,
) -> bool:
    if not signature or not creator_address:
        return False
    signer = recover_mint_signer(
        signature, chain_id, contract_address, price, token_id, token_uri
    )
    return signer is not None and signer.lower() == creator_address.lower()


def record_authorized(record: NftRecord, context: ChainContext) -> bool:
    """Check a catalog record signature the way ``mintable`` would."""
    return is_mint_authorized(
        record.signature,
        context.creator_address,
        context.chain_id,
        context.contract_address,
        record.probe_price,
        record.token_id,
        record.token_uri,
    )


@dataclass
class MintCall:
    action: TransactionAction
    price: int
    value: int
    signature: Optional[str]


def select_mint_call(
    record: NftRecord,
    context: ChainContext,
    price: Optional[int] = None,
    signature: Optional[str] = None,
) -> MintCall:
    """
    Pick the contract call matching the authorization at hand.

    A separately signed price goes through ``mintAtPrice`` and pays exactly
    that price. Everything else goes through ``mint``, which the contract
    checks against the ``MAX_UINT256`` sentinel and the base mint price.

    Raises:
        ValueError: If only one of ``price`` and ``signature`` is given
    """
    if signature:
        if price is None:
            raise ValueError("A signed price requires the price it was signed for")
        return MintCall(TransactionAction.MINT_AT_PRICE, int(price), int(price), signature)
    if price is not None:
        raise ValueError("A price requires the signature authorizing it")
    if record.mint_price is not None and record.mint_price != MAX_UINT256:
        return MintCall(
            TransactionAction.MINT_AT_PRICE,
            record.mint_price,
            record.mint_price,
            record.signature,
        )
    return MintCall(
        TransactionAction.MINT, MAX_UINT256, context.base_mint_price, record.signature
    )
