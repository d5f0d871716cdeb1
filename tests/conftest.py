import json

import pytest

from fakes import (
    BASE_MINT_PRICE,
    CHAIN_ID,
    CONTRACT_ADDRESS,
    CREATOR,
    RPC_URL,
    FakeChain,
    FakeWallet,
    FakeWeb3,
    sign,
)
from nft_surface.config import StorefrontConfig
from nft_surface.constants import ETHER, MAX_UINT256
from nft_surface.gateway import ContractGateway
from nft_surface.models import ChainContext, NftRecord
from nft_surface.providers import ProviderPool
from nft_surface.session import Session


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def config():
    return StorefrontConfig(rpc_urls={CHAIN_ID: RPC_URL}, poll_latency=0)


@pytest.fixture
def context():
    return ChainContext(
        chainId=CHAIN_ID,
        contractAddress=CONTRACT_ADDRESS,
        creatorAddress=CREATOR,
        baseMintPrice=str(BASE_MINT_PRICE),
        royaltyBasisPoints=495,
    )


@pytest.fixture
def wallet(chain):
    return FakeWallet(chain)


@pytest.fixture
def pool(chain, config, wallet):
    pool = ProviderPool(config, web3_factory=lambda url, timeout: FakeWeb3(chain))
    pool.attach_wallet(wallet)
    return pool


@pytest.fixture
def gateway(pool, context):
    return ContractGateway(pool, context, poll_latency=0)


@pytest.fixture
def open_record():
    return NftRecord(
        tokenId=5,
        tokenURI="ipfs://x",
        signature=sign(MAX_UINT256, 5, "ipfs://x"),
        metadata=dict(name="Untitled 5", creator="GlupoX", width=300, height=200),
    )


@pytest.fixture
def priced_record():
    price = ETHER // 4
    return NftRecord(
        tokenId=7,
        tokenURI="ipfs://seven",
        mintPrice=str(price),
        signature=sign(price, 7, "ipfs://seven"),
    )


@pytest.fixture
def catalog_data(context, open_record, priced_record):
    return {
        "context": context.model_dump(by_alias=True),
        "NFTs": [
            open_record.model_dump(by_alias=True),
            priced_record.model_dump(by_alias=True),
            {
                "tokenId": 9,
                "tokenURI": "ipfs://nine",
                "signature": sign(MAX_UINT256, 9, "ipfs://nine"),
                "withheld": True,
                "metadata": {"name": "Reserved"},
            },
        ],
    }


@pytest.fixture
def catalog_path(tmp_path, catalog_data):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_data))
    return str(path)


@pytest.fixture
async def session(chain, wallet, catalog_path):
    config = StorefrontConfig(
        catalog_path=catalog_path, rpc_urls={CHAIN_ID: RPC_URL}, poll_latency=0
    )
    async with Session(
        config, wallet=wallet, web3_factory=lambda url, timeout: FakeWeb3(chain)
    ) as session:
        yield session
