"""
Core - Cache infrastructure.

- interfaces/  - CacheProtocol for DI
- cache/       - Record model, codec, typed coercion, BaseCache
- connectors/  - Cache implementations (file, Redis)
- config/      - Settings and factory functions
- errors.py    - Error hierarchy
"""
