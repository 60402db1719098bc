#!/usr/bin/env python3
"""
Database build for the database file controls
Creates the tables and the admin account used to log in to the attachment forms
"""

import os
from database_file_controls import create_app, db
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.build")


def insert_admin_user(username='admin', password=None):
    """
    Create the admin user if it does not exist yet.

    The password comes from ADMIN_USER_PASSWORD; without one no user is created.
    """
    from database_file_controls.data.user import User

    password = password or os.environ.get('ADMIN_USER_PASSWORD')
    if not password:
        logger.warning("ADMIN_USER_PASSWORD not set, skipping admin user creation")
        return None

    user = User.query.filter_by(username=username).first()
    if user is not None:
        logger.info(f"User {username} already present")
        return user

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info(f"Created user {username}")
    return user


def build_database(app=None, with_admin=True):
    """
    Create every table that does not exist yet.

    Args:
        app: Flask application to build for (a new one is created when None)
        with_admin (bool): Whether to create the admin user as well
    """
    app = app or create_app()

    with app.app_context():
        logger.info("Starting database build")
        from database_file_controls.data.stored_file import StoredFile, ItemAttachment
        from database_file_controls.data.user import User
        db.create_all()

        if with_admin:
            insert_admin_user()

        logger.info("Database build completed successfully")
    return app
