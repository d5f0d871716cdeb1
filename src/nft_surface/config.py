import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from nft_surface.chains import chain_params
from nft_surface.constants import (
    POLL_LATENCY,
    TIMEOUT_WAIT_RECEIPT,
    TIMEOUT_WAIT_RPC,
    WALLET_EVENT_QUEUE_SIZE,
)

RPC_URL_PREFIX = "RPC_URL_"


class StorefrontConfig(BaseModel):
    """
    Storefront client configuration.

    Attributes:
        catalog_url: URL of the published catalog JSON.
        catalog_path: Local catalog file, used instead of ``catalog_url``.
        rpc_urls: Read-only RPC endpoint by chain id.
        default_rpc_url: Endpoint used for chains missing from ``rpc_urls``.
        request_timeout: HTTP timeout of RPC and catalog requests, seconds.
        receipt_timeout: Upper bound handed to web3 while waiting for a receipt.
        poll_latency: Receipt polling interval, seconds.
        wallet_event_queue_size: Capacity of each wallet event subscription.
    """

    catalog_url: Optional[str] = None
    catalog_path: Optional[str] = None
    rpc_urls: Dict[int, str] = Field(default_factory=dict)
    default_rpc_url: Optional[str] = None
    request_timeout: float = TIMEOUT_WAIT_RPC
    receipt_timeout: float = TIMEOUT_WAIT_RECEIPT
    poll_latency: float = POLL_LATENCY
    wallet_event_queue_size: int = Field(default=WALLET_EVENT_QUEUE_SIZE, ge=1)

    def rpc_url(self, chain_id: int) -> Optional[str]:
        """Read-only endpoint for ``chain_id``, None when nothing is configured."""
        return (
            self.rpc_urls.get(chain_id)
            or self.default_rpc_url
            or chain_params(chain_id).rpc_url
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides) -> "StorefrontConfig":
        """
        Load configuration from the environment (and a ``.env`` file).

        Recognised variables: ``CATALOG_URL``, ``CATALOG_PATH``,
        ``NETWORK_KEY`` (default RPC endpoint), ``RPC_URL_<chainId>``,
        ``RECEIPT_TIMEOUT``, ``POLL_LATENCY``.
        """
        load_dotenv(dotenv_path)
        values = dict(
            catalog_url=os.getenv("CATALOG_URL"),
            catalog_path=os.getenv("CATALOG_PATH"),
            default_rpc_url=os.getenv("NETWORK_KEY"),
        )
        rpc_urls = {}
        for key, value in os.environ.items():
            if key.startswith(RPC_URL_PREFIX) and value:
                suffix = key[len(RPC_URL_PREFIX):]
                if suffix.isdigit():
                    rpc_urls[int(suffix)] = value
        values["rpc_urls"] = rpc_urls
        if os.getenv("RECEIPT_TIMEOUT"):
            values["receipt_timeout"] = float(os.getenv("RECEIPT_TIMEOUT"))
        if os.getenv("POLL_LATENCY"):
            values["poll_latency"] = float(os.getenv("POLL_LATENCY"))
        values.update(overrides)
        return cls(**values)
