import asyncio

from fakes import BUYER, CHAIN_ID, OTHER, sign
from nft_surface.constants import ETHER
from nft_surface.config import StorefrontConfig
from nft_surface.exceptions import ErrorKind, RpcNotAvailableError
from nft_surface.gateway import ContractGateway
from nft_surface.models import NftRecord, Offer, TokenStatus, WalletSession
from nft_surface.providers import ProviderPool
from nft_surface.resolver import StatusResolver

WALLET = WalletSession(address=BUYER, chain_id=CHAIN_ID)


async def test_open_mint_confirmed(gateway, open_record):
    resolver = StatusResolver(gateway, open_record, WALLET)
    status = await resolver.resolve()
    assert status.status == TokenStatus.MINTABLE_CONFIRMED
    assert status.offer() == Offer.MINT
    assert resolver.last_refusal is None
    assert status.is_settled
    assert resolver.updated


async def test_mint_then_minted(gateway, chain, open_record):
    resolver = StatusResolver(gateway, open_record, WALLET)
    await resolver.resolve()
    tx = await gateway.mint(open_record)
    await gateway.wait_for_transaction(tx.hash)
    status = await resolver.resolve()
    assert status.status == TokenStatus.MINTED
    assert status.owner == BUYER


async def test_fixed_price_record(gateway, priced_record):
    resolver = StatusResolver(gateway, priced_record, WALLET)
    assert (await resolver.resolve()).status == TokenStatus.MINTABLE_CONFIRMED


async def test_below_floor_is_burnt_or_revoked(gateway, chain, open_record):
    chain.floor = 10
    resolver = StatusResolver(gateway, open_record, WALLET)
    status = await resolver.resolve()
    assert status.status == TokenStatus.BURNT_OR_REVOKED
    assert status.offer() == Offer.BURNT
    assert resolver.last_refusal == ErrorKind.BELOW_FLOOR


async def test_bad_signature_is_burnt_or_revoked(gateway):
    record = NftRecord(tokenId=6, tokenURI="ipfs://six", signature=sign(ETHER, 6, "ipfs://six"))
    resolver = StatusResolver(gateway, record, WALLET)
    assert (await resolver.resolve()).status == TokenStatus.BURNT_OR_REVOKED
    assert resolver.last_refusal == ErrorKind.SIGNATURE_INVALID


async def test_chain_mismatch_touches_nothing(gateway, chain, open_record):
    resolver = StatusResolver(gateway, open_record, WalletSession(BUYER, 5))
    status = await resolver.resolve()
    assert status.status == TokenStatus.CHAIN_MISMATCH
    assert status.offer() == Offer.SWITCH_NETWORK
    assert chain.calls == []


async def test_unknown_wallet_network_probes(gateway, chain, open_record):
    resolver = StatusResolver(gateway, open_record)
    assert (await resolver.resolve()).status == TokenStatus.MINTABLE_CONFIRMED
    assert chain.calls == ["ownerOf", "mintable"]


async def test_existence_wins(gateway, chain, open_record):
    chain.owners[5] = OTHER
    chain.floor = 10
    resolver = StatusResolver(gateway, open_record, WALLET)
    status = await resolver.resolve()
    assert status.status == TokenStatus.MINTED
    assert status.owner == OTHER
    assert chain.calls == ["ownerOf"]


async def test_withheld(gateway, chain, catalog_data):
    record = NftRecord.model_validate(catalog_data["NFTs"][2])
    resolver = StatusResolver(gateway, record, WALLET)
    assert resolver.status.status == TokenStatus.WITHHELD
    status = await resolver.resolve()
    assert status.status == TokenStatus.WITHHELD
    assert status.offer() == Offer.RESERVED
    assert "mintable" not in chain.calls


async def test_withheld_but_minted(gateway, chain, open_record):
    chain.owners[5] = OTHER
    resolver = StatusResolver(gateway, open_record, WALLET)
    resolver.withhold()
    assert resolver.status.status == TokenStatus.WITHHELD
    assert (await resolver.resolve()).status == TokenStatus.MINTED


async def test_idempotent(gateway, chain, open_record):
    resolver = StatusResolver(gateway, open_record, WALLET)
    first = await resolver.resolve()
    second = await resolver.resolve()
    assert first == second


async def test_superseded_pass_dropped(gateway, chain, open_record):
    resolver = StatusResolver(gateway, open_record, WALLET)
    release = asyncio.Event()
    original_owner_of = gateway.owner_of

    async def slow_owner_of(token_id):
        await release.wait()
        return await original_owner_of(token_id)

    gateway.owner_of = slow_owner_of
    stale = asyncio.create_task(resolver.resolve())
    await asyncio.sleep(0)
    resolver.set_wallet(WalletSession(BUYER, 5))
    fresh = await resolver.resolve()
    assert fresh.status == TokenStatus.CHAIN_MISMATCH
    release.set()
    await stale
    assert resolver.status.status == TokenStatus.CHAIN_MISMATCH


async def test_no_rpc_configured(context, open_record):
    gateway = ContractGateway(ProviderPool(StorefrontConfig()), context, poll_latency=0)
    resolver = StatusResolver(gateway, open_record)
    status = await resolver.resolve()
    assert status.status == TokenStatus.INIT
    assert isinstance(resolver.last_error, RpcNotAvailableError)
    assert resolver.last_error.kind == ErrorKind.UNKNOWN


async def test_node_unreachable_then_back(gateway, chain, open_record):
    chain.reachable = False
    resolver = StatusResolver(gateway, open_record, WALLET)
    status = await resolver.resolve()
    assert status.status == TokenStatus.INIT
    assert isinstance(resolver.last_error, RpcNotAvailableError)
    assert "not reachable" in resolver.last_error.message
    assert chain.calls == []

    chain.reachable = True
    assert (await resolver.resolve()).status == TokenStatus.MINTABLE_CONFIRMED
    assert resolver.last_error is None


async def test_node_unreachable_keeps_settled_status(gateway, pool, chain, open_record):
    resolver = StatusResolver(gateway, open_record, WALLET)
    assert (await resolver.resolve()).status == TokenStatus.MINTABLE_CONFIRMED
    await pool.invalidate()
    chain.reachable = False
    status = await resolver.resolve()
    assert status.status == TokenStatus.MINTABLE_CONFIRMED
    assert resolver.last_error is not None


async def test_unreachable_withheld_stays_withheld(gateway, chain, catalog_data):
    chain.reachable = False
    record = NftRecord.model_validate(catalog_data["NFTs"][2])
    resolver = StatusResolver(gateway, record, WALLET)
    assert (await resolver.resolve()).status == TokenStatus.WITHHELD
    assert resolver.last_error is not None
