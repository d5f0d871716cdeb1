"""
Storefront status - prints the disposition of every NFT in a catalog.
Usage: python storefront_status.py [token_id ...]

Reads CATALOG_URL (or CATALOG_PATH) and RPC_URL_<chainId> / NETWORK_KEY
from the environment or a .env file.
"""

import asyncio
import sys

from nft_surface import Session, StorefrontConfig
from nft_surface.utils import short_address


async def main(token_ids):
    config = StorefrontConfig.from_env()
    async with Session(config) as session:
        catalog = await session.catalog()
        context = catalog.context
        print(
            f"Contract {short_address(context.contract_address)} on chain {context.chain_id}, "
            f"{len(catalog.nfts)} NFTs listed"
        )
        for token_id in token_ids or catalog.token_ids:
            view = await session.view(token_id)
            async with view:
                name = view.record.metadata.name or f"#{token_id}"
                print(f"{token_id:>6}  {name:<32} {view.offer.value:<14} {view.status_text}")


if __name__ == "__main__":
    asyncio.run(main([int(arg) for arg in sys.argv[1:]]))
