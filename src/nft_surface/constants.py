MAX_UINT256 = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ETHER = 1_000_000_000_000_000_000

# Typed-data domain of the deployed contract
SIGNATURE_DOMAIN_NAME = "NFTsurface"
SIGNATURE_DOMAIN_VERSION = "1.0.0"
SIGNATURE_PRIMARY_TYPE = "mint"

LOCAL_CHAIN_ID = 31337
RPC_LOCAL = "http://127.0.0.1:8545"

TIMEOUT_WAIT_RPC = 600
# web3 insists on a receipt timeout, keep it out of the way
TIMEOUT_WAIT_RECEIPT = 24 * 60 * 60
POLL_LATENCY = 2

WALLET_EVENT_QUEUE_SIZE = 16
