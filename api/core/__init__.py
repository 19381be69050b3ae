"""
Core utilities shared across the accounts API.

This package hosts configuration, logging setup and the password hasher.
Services depend on these primitives instead of reading the environment or
importing argon2 directly.
"""
