"""Factory for wiring clients from settings.

Explorer, fee and web3 instances are cached per process; call
``reset_cache()`` after changing settings (tests do this between cases).
"""

import logging
from typing import Any, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from atomicswap.accounts.ethereum import EthereumAccount
from atomicswap.bitcoin.builder import TransactionBuilder
from atomicswap.bitcoin.fees import FeeEstimator, FeeOracleClient
from atomicswap.config import Settings, get_settings
from atomicswap.ethereum.swap import ContractSwapClient
from atomicswap.explorer.blockcypher import BlockCypherClient
from atomicswap.explorer.insight import ExplorerGateway
from atomicswap.explorer.omni import OmniExplorer

logger = logging.getLogger(__name__)

# Cache for shared instances
_cache: dict[str, Any] = {}


def _settings(settings: Optional[Settings]) -> Settings:
    return settings or get_settings()


def get_blockcypher(settings: Optional[Settings] = None) -> BlockCypherClient:
    if "blockcypher" not in _cache:
        settings = _settings(settings)
        _cache["blockcypher"] = BlockCypherClient(
            testnet=not settings.is_mainnet,
            api_token=settings.blockcypher_api_token,
            base_url=settings.blockcypher_url,
            timeout=settings.http_timeout,
        )
    return _cache["blockcypher"]


def get_explorer(settings: Optional[Settings] = None) -> ExplorerGateway:
    """Get the Insight explorer gateway for the configured network."""
    if "explorer" not in _cache:
        settings = _settings(settings)
        _cache["explorer"] = ExplorerGateway(
            testnet=not settings.is_mainnet,
            base_url=settings.insight_url,
            blockcypher=get_blockcypher(settings),
            omni=get_omni_explorer(settings),
            timeout=settings.http_timeout,
        )
        logger.info(f"Explorer: {settings.insight_url}")
    return _cache["explorer"]


def get_omni_explorer(settings: Optional[Settings] = None) -> OmniExplorer:
    if "omni" not in _cache:
        settings = _settings(settings)
        _cache["omni"] = OmniExplorer(
            base_url=settings.omni_explorer_url, timeout=settings.http_timeout
        )
    return _cache["omni"]


def get_fee_estimator(settings: Optional[Settings] = None) -> FeeEstimator:
    """Get fee estimator (BlockCypher first, fee oracle on mainnet failure)."""
    if "fees" not in _cache:
        settings = _settings(settings)
        _cache["fees"] = FeeEstimator(
            primary=get_blockcypher(settings),
            secondary=FeeOracleClient(url=settings.fee_oracle_url, timeout=settings.http_timeout),
            mainnet=settings.is_mainnet,
        )
    return _cache["fees"]


def get_transaction_builder(settings: Optional[Settings] = None) -> TransactionBuilder:
    settings = _settings(settings)
    return TransactionBuilder(get_explorer(settings), fee_value=settings.btc_fee_value)


def get_web3(settings: Optional[Settings] = None) -> AsyncWeb3:
    """Get a shared AsyncWeb3 connected to the configured RPC."""
    if "web3" not in _cache:
        settings = _settings(settings)
        _cache["web3"] = AsyncWeb3(AsyncHTTPProvider(settings.eth_rpc_url))
        logger.info(f"Ethereum RPC: {settings.eth_rpc_url}")
    return _cache["web3"]


def get_swap_client(
    private_key: str,
    settings: Optional[Settings] = None,
    w3: Optional[Any] = None,
) -> ContractSwapClient:
    """Create a swap contract client signing with ``private_key``.

    Raises:
        ValueError: If the contract or token address is not configured
    """
    settings = _settings(settings)

    if not settings.swap_contract_address:
        raise ValueError("SWAP_CONTRACT_ADDRESS not configured")
    if not settings.token_address:
        raise ValueError("TOKEN_ADDRESS not configured")

    return ContractSwapClient(
        w3 or get_web3(settings),
        EthereumAccount.from_key(private_key),
        settings.swap_contract_address,
        settings.token_address,
        settings.token_decimals,
        gas_limit=settings.gas_limit,
        gas_price=settings.gas_price,
        gas_price_margin=settings.gas_price_margin,
        fallback_gas_price=settings.fallback_gas_price,
        poll_delay=settings.poll_delay,
        poll_retries=settings.poll_retries,
    )


def reset_cache() -> None:
    """Drop cached instances."""
    _cache.clear()
