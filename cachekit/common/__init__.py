"""
Common - Shared utilities.

- logging/  - Structured logging configuration
- random.py - Random string source used by verification codes
"""
