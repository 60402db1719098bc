"""
Data layer: SQLAlchemy models backing the storage collaborator and login.
"""
