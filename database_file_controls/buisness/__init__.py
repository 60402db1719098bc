"""
Domain layer for the database file controls.
Holds the slot store, validators, attach/detach protocol and render
materializer, separated from the Flask presentation and SQLAlchemy storage.
"""
