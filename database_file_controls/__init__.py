from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from pathlib import Path
from database_file_controls.config import AttachmentSettings, SETTING_KEYS
from database_file_controls.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    """
    Application factory.

    Configuration comes from environment variables (see generate_env.py);
    ``config_overrides`` is applied last, which is how the tests swap in an
    in-memory database.
    """
    base_dir = Path(__file__).parent

    app = Flask(__name__,
                template_folder=str(base_dir / 'presentation' / 'templates'))

    logger = get_logger("database_file_controls")
    logger.info("Initializing Flask application")

    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # DATABASE_URL wins; otherwise keep SQLite inside the project's instance/ directory
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        instance_dir = base_dir.parent / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'database_file_controls.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # HTTPS/TLS Configuration
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'True')
    app.config['FORCE_HTTPS_REDIRECT'] = _env_flag('FORCE_HTTPS_REDIRECT', 'True')

    # Session cookie security configuration
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    # Upload and download handling
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', str(20 * 1024 * 1024)))
    app.config['MAX_ATTACHMENTS'] = int(os.environ.get('MAX_ATTACHMENTS', '6'))
    app.config['DOWNLOAD_RATE_LIMIT'] = os.environ.get('DOWNLOAD_RATE_LIMIT', '120 per minute')

    # Attachment settings use their own key names, e.g. FileAttachmentHandlerUrl
    for key in SETTING_KEYS:
        if key in os.environ:
            app.config[key] = os.environ[key]

    if config_overrides:
        app.config.update(config_overrides)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    app.extensions['attachment_settings'] = AttachmentSettings.from_mapping(app.config)
    logger.debug("Attachment settings loaded")

    if app.config['ENABLE_HTTPS']:
        logger.info("HTTPS enforcement enabled")
    else:
        logger.warning("HTTPS enforcement DISABLED - Acceptable for development only!")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from database_file_controls.data.user import User
    from database_file_controls.data.stored_file import StoredFile, ItemAttachment

    logger.debug("Models imported and registered")

    from database_file_controls.auth import auth
    from database_file_controls.presentation.routes import init_app as init_routes

    app.register_blueprint(auth)
    init_routes(app)

    @app.before_request
    def enforce_https():
        """Redirect HTTP requests to HTTPS if HTTPS enforcement is enabled"""
        if app.config.get('ENABLE_HTTPS') and app.config.get('FORCE_HTTPS_REDIRECT'):
            from flask import request, redirect

            if not request.is_secure and not request.headers.get('X-Forwarded-Proto') == 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    logger.info("Flask application initialized")
    return app


def get_attachment_settings() -> AttachmentSettings:
    """Attachment settings of the running application."""
    return current_app.extensions['attachment_settings']
