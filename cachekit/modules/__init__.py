"""
Modules - Utilities built only on CacheProtocol.

- rate_limiter.py: bounded attempts per time window
- verification_code.py: one-time numeric codes
"""

from .rate_limiter import RateLimiter
from .verification_code import VerificationCode, DEFAULT_CODE_LENGTH

__all__ = [
    "RateLimiter",
    "VerificationCode",
    "DEFAULT_CODE_LENGTH",
]
