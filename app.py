#!/usr/bin/env python3
#USE VENV: source venv/bin/activate
"""
Run script for the database file controls demo server
"""

import argparse
import os
import sys
from dotenv import load_dotenv

# Load environment variables from .env file before the app reads them
load_dotenv()

from database_file_controls import create_app
from database_file_controls.build import build_database
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Database file controls')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables (and the admin user) only, do not start the web server')
    parser.add_argument('--no-admin', action='store_false', dest='with_admin',
                        help='Do not create the admin user')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    app = create_app()
    build_database(app, with_admin=args.with_admin)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
