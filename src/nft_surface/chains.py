from dataclasses import dataclass
from typing import Optional

from nft_surface.constants import LOCAL_CHAIN_ID, RPC_LOCAL


@dataclass
class ChainModel:
    chain_id: int
    chain_name: str
    currency_symbol: str
    explorer_url: Optional[str] = None
    rpc_url: Optional[str] = None


class CHAINS:
    MAINNET = ChainModel(1, "Ethereum Mainnet", "ETH", "https://etherscan.io")
    RINKEBY = ChainModel(4, "Rinkeby Testnet", "ETH", "https://rinkeby.etherscan.io")
    GOERLI = ChainModel(5, "Goerli Testnet", "ETH", "https://goerli.etherscan.io")
    SEPOLIA = ChainModel(
        11155111, "Sepolia Testnet", "ETH", "https://sepolia.etherscan.io"
    )
    POLYGON = ChainModel(137, "Polygon Mainnet", "MATIC", "https://polygonscan.com")
    MUMBAI = ChainModel(
        80001, "Polygon Mumbai Testnet", "MATIC", "https://mumbai.polygonscan.com"
    )
    ARBITRUM_RINKEBY = ChainModel(
        421611, "Arbitrum Rinkeby Testnet", "ETH", "https://testnet.arbiscan.io"
    )
    HARDHAT = ChainModel(LOCAL_CHAIN_ID, "Hardhat Local", "ETH", None, RPC_LOCAL)

    @classmethod
    def all(cls):
        return [v for v in vars(cls).values() if isinstance(v, ChainModel)]


def chain_params(chain_id: int) -> ChainModel:
    """
    Get display parameters of a network.

    Unknown chain ids get a generic entry so that callers never have to
    special-case them.
    """
    for chain in CHAINS.all():
        if chain.chain_id == chain_id:
            return chain
    return ChainModel(chain_id, f"Chain {chain_id}", "ETH")


def network_name(chain_id: int) -> str:
    return chain_params(chain_id).chain_name


def explorer_address_link(chain_id: int, address: str) -> Optional[str]:
    explorer = chain_params(chain_id).explorer_url
    if not explorer:
        return None
    return f"{explorer}/address/{address}"


def explorer_tx_link(chain_id: int, tx_hash: str) -> Optional[str]:
    explorer = chain_params(chain_id).explorer_url
    if not explorer:
        return None
    return f"{explorer}/tx/{tx_hash}"
