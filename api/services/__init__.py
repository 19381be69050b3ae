"""
High-level use cases for the accounts API.

Each service module orchestrates repositories/adapters to implement business
rules (register, login, session handling).

Routers (FastAPI endpoints) call these services instead of opening database
sessions or reading cookies directly.
"""
