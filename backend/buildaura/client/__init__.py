"""HTTP client side of BuildAura: session context, generation gateway, records."""

from buildaura.client.gateway import GenerationGateway
from buildaura.client.records import COLLECTIONS, RecordsClient
from buildaura.client.session import SessionContext

__all__ = ["COLLECTIONS", "GenerationGateway", "RecordsClient", "SessionContext"]
