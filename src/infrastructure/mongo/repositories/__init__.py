"""
Repository pattern implementations for MongoDB.

Repositories translate between domain models and database documents.
"""

from .objects import InMemoryObjectRepository, MongoObjectRepository

__all__ = ["InMemoryObjectRepository", "MongoObjectRepository"]
