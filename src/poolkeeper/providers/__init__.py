"""External collaborators: remote ledger query service and ledger submission."""

from poolkeeper.providers.mirror_provider import MirrorProvider, MirrorNodeProvider
from poolkeeper.providers.ledger_provider import LedgerClient, LedgerReceipt, GatewayLedgerClient
from poolkeeper.providers.stub_provider import StubLedger

__all__ = [
    "MirrorProvider",
    "MirrorNodeProvider",
    "LedgerClient",
    "LedgerReceipt",
    "GatewayLedgerClient",
    "StubLedger",
]
