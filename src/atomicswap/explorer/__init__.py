"""Block explorer and data-source gateways.

Each gateway wraps one REST provider and classifies its failures into
``ProviderRejected`` / ``UnknownProviderError``.
"""

from atomicswap.explorer.base import HTTPGateway, UnspentOutput
from atomicswap.explorer.blockcypher import BlockCypherClient
from atomicswap.explorer.insight import ExplorerGateway
from atomicswap.explorer.omni import OmniExplorer

__all__ = [
    "HTTPGateway",
    "UnspentOutput",
    "BlockCypherClient",
    "ExplorerGateway",
    "OmniExplorer",
]
