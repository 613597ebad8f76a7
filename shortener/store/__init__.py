"""Mapping store backends for URL shortener."""

from .base import MappingStoreBase
from .memory import InMemoryMappingStore
from .redis_store import RedisMappingStore

__all__ = ["MappingStoreBase", "InMemoryMappingStore", "RedisMappingStore"]
