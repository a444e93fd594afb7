"""Service layer exports."""

from .codec import PayloadCodec
from .ingestion import PayloadIngestor
from .rendering import ListingRenderer
from .storage import CloudflareKVStore, InMemoryStore, StorageGateway, build_store
from .transport import TransportSelector

__all__ = [
    "CloudflareKVStore",
    "InMemoryStore",
    "ListingRenderer",
    "PayloadCodec",
    "PayloadIngestor",
    "StorageGateway",
    "TransportSelector",
    "build_store",
]
