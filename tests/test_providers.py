import pytest

from fakes import CHAIN_ID, CONTRACT_ADDRESS, RPC_URL, FakeChain, FakeWallet, FakeWeb3
from nft_surface.config import StorefrontConfig
from nft_surface.exceptions import ChainMismatchError, RpcNotAvailableError
from nft_surface.providers import ProviderPool


@pytest.fixture
def created():
    return []


@pytest.fixture
def factory(chain, created):
    def build(url, timeout):
        created.append(url)
        return FakeWeb3(chain)

    return build


async def test_binding_is_cached(config, factory, created):
    pool = ProviderPool(config, web3_factory=factory)
    first = await pool.binding(CHAIN_ID, CONTRACT_ADDRESS.lower())
    second = await pool.binding(CHAIN_ID, CONTRACT_ADDRESS)
    assert first is second
    assert first.address == CONTRACT_ADDRESS
    assert created == [RPC_URL]
    assert pool.cached_bindings == [(CHAIN_ID, CONTRACT_ADDRESS)]


async def test_invalidate_rebuilds(config, factory, created, chain):
    async with ProviderPool(config, web3_factory=factory) as pool:
        first = await pool.binding(CHAIN_ID, CONTRACT_ADDRESS)
        await pool.invalidate()
        assert pool.cached_bindings == []
        assert chain.disconnects == 1
        second = await pool.binding(CHAIN_ID, CONTRACT_ADDRESS)
        assert first is not second
        assert len(created) == 2


async def test_invalidate_one_chain(factory, created):
    config = StorefrontConfig(rpc_urls={1: "http://one", 5: "http://five"})
    pool = ProviderPool(config, web3_factory=factory)
    pool.web3_for(1)
    pool.web3_for(5)
    await pool.invalidate(5)
    pool.web3_for(1)
    pool.web3_for(5)
    assert created == ["http://one", "http://five", "http://five"]


async def test_wrong_network():
    pool = ProviderPool(
        StorefrontConfig(rpc_urls={CHAIN_ID: RPC_URL}),
        web3_factory=lambda url, timeout: FakeWeb3(FakeChain(chain_id=5)),
    )
    with pytest.raises(ChainMismatchError) as e:
        await pool.binding(CHAIN_ID, CONTRACT_ADDRESS)
    assert e.value.actual == 5
    assert pool.cached_bindings == []


def test_no_rpc_endpoint(factory):
    pool = ProviderPool(StorefrontConfig(), web3_factory=factory)
    with pytest.raises(RpcNotAvailableError):
        pool.web3_for(80001)


def test_wallet_client_preferred(config, factory, created, wallet):
    wallet.web3 = object()
    pool = ProviderPool(config, web3_factory=factory)
    pool.attach_wallet(wallet)
    assert pool.web3_for(CHAIN_ID) is wallet.web3
    assert created == []


async def test_attach_other_wallet_drops_bindings(pool, wallet, chain):
    await pool.binding(CHAIN_ID, CONTRACT_ADDRESS)
    pool.attach_wallet(wallet)
    assert pool.cached_bindings == [(CHAIN_ID, CONTRACT_ADDRESS)]
    pool.attach_wallet(FakeWallet(chain))
    assert pool.cached_bindings == []
