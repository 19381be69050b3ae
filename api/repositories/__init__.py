"""
Persistence adapters.

Services depend on the repository methods rather than opening SQLAlchemy
sessions themselves.
"""
