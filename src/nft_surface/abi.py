"""ABI surface of the NFTsurface contract consumed by the storefront."""


def _fn(name, inputs=(), outputs=(), mutability="view"):
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t, "internalType": t} for n, t in outputs],
    }


def _event(name, inputs):
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": n, "type": t, "indexed": indexed, "internalType": t}
            for n, t, indexed in inputs
        ],
    }


MINT_INPUTS = (("tokenId", "uint256"), ("tokenURI", "string"), ("signature", "bytes"))
MINT_AT_PRICE_INPUTS = (("price", "uint256"),) + MINT_INPUTS

NFT_SURFACE_ABI = [
    _fn("ownerOf", [("tokenId", "uint256")], [("", "address")]),
    _fn("tokenURI", [("tokenId", "uint256")], [("", "string")]),
    _fn("mintable", MINT_AT_PRICE_INPUTS, [("", "bool")]),
    _fn("vacant", [("tokenId", "uint256")], [("", "bool")]),
    _fn("priceOf", [("tokenId", "uint256")], [("", "uint256")]),
    _fn("idFloor", outputs=[("", "uint256")]),
    _fn("totalSupply", outputs=[("", "uint256")]),
    _fn("royaltyBasisPoints", outputs=[("", "uint256")]),
    _fn("mintPrice", outputs=[("", "uint256")]),
    _fn("mint", MINT_INPUTS, mutability="payable"),
    _fn("mintAtPrice", MINT_AT_PRICE_INPUTS, mutability="payable"),
    _fn("buy", [("tokenId", "uint256")], mutability="payable"),
    _fn("setPrice", [("tokenId", "uint256"), ("price", "uint256")], mutability="nonpayable"),
    _fn(
        "safeTransferFrom",
        [("from", "address"), ("to", "address"), ("tokenId", "uint256")],
        mutability="nonpayable",
    ),
    _fn("withdraw", mutability="nonpayable"),
    _fn("setIdFloor", [("floor", "uint256")], mutability="nonpayable"),
    _fn("setBaseMintPrice", [("price", "uint256")], mutability="nonpayable"),
    _event(
        "Transfer",
        [("from", "address", True), ("to", "address", True), ("tokenId", "uint256", True)],
    ),
    _event("PriceSet", [("tokenId", "uint256", True), ("price", "uint256", False)]),
    _event("Bought", [("tokenId", "uint256", True), ("buyer", "address", True)]),
    _event("Withdrawal", [("value", "uint256", False)]),
]

SUCCESS_EVENTS = ("Transfer", "PriceSet", "Bought", "Withdrawal")
