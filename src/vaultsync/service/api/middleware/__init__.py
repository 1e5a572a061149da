"""
API middleware components.
"""

from vaultsync.service.api.middleware.error import error_middleware

__all__ = ["error_middleware"]
