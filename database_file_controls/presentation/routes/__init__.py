"""
Routes package for the database file controls
"""

from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.routes")


def init_app(app):
    """Register the attachment form and download handler blueprints"""
    logger.debug("Initializing route blueprints")

    from . import attachment_form, file_handlers

    app.register_blueprint(attachment_form.bp)
    app.register_blueprint(file_handlers.bp)
