"""
Lazy mint - mints one catalog NFT with a local key, the way a storefront
visitor would with an injected wallet.
Usage: python lazy_mint.py <token_id>

Needs PRIVATE_KEY of a funded account, plus the catalog and RPC settings
used by storefront_status.py.
"""

import asyncio
import os
import sys

from nft_surface import LocalWallet, Offer, Session, StorefrontConfig
from nft_surface.providers import default_web3_factory


async def approve(request, payload):
    answer = await asyncio.to_thread(input, f"Confirm {request}? [y/N] ")
    return answer.strip().lower() == "y"


async def main(token_id: int):
    config = StorefrontConfig.from_env()
    async with Session(config) as session:
        chain_id = session.context.chain_id
        web3 = default_web3_factory(config.rpc_url(chain_id), config.request_timeout)
        session.attach_wallet(LocalWallet(os.environ["PRIVATE_KEY"], web3=web3, approve=approve))

        async with await session.view(token_id) as view:
            print(view.status_text)
            if view.offer != Offer.MINT:
                return
            await view.mint()
            print(view.notification_text)
            print(view.status_text)


if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1])))
