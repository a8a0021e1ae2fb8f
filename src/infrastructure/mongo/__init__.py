"""
MongoDB persistence for object records.
"""

from .client import create_mongo_client, ping

__all__ = ["create_mongo_client", "ping"]
