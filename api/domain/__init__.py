"""
Pure domain rules (credential validation, use-case result types).

Nothing here talks to FastAPI; the ORM row is only used as a type.
"""
