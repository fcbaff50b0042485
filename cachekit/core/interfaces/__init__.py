"""
Interfaces - Protocols for Dependency Injection.

Utilities depend on these protocols, never on a concrete backend.

Example:
    def remember_login(cache: CacheProtocol, user: str):
        cache.put(f"login:{user}", True, 3600)
"""

from .cache_protocol import CacheProtocol, TTL

__all__ = [
    'CacheProtocol',
    'TTL',
]
