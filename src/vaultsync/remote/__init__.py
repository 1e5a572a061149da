"""
Client side of the remote storage facade.
"""

from vaultsync.remote.client import RemoteStoreClient, encode_key

__all__ = ["RemoteStoreClient", "encode_key"]
