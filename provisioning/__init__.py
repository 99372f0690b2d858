"""
Main Flask application factory.
"""
import logging

from flask import Flask, current_app, request

from provisioning import database
from provisioning.config import Config
from provisioning.errors import MethodNotAllowed, ProvisioningError, register_error_handlers
from provisioning.services import account_service

logger = logging.getLogger(__name__)

# Endpoints that must answer even when the database is down
SCHEMA_EXEMPT_ENDPOINTS = {'main.health'}


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    register_error_handlers(app)

    # Register blueprints
    from provisioning.routes.main import main_bp
    from provisioning.routes.accounts import accounts_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(accounts_bp)

    hash_passwords = bool(app.config.get('PASSWORD_HASHING'))
    account_service.configure(hash_passwords=hash_passwords)
    if not hash_passwords:
        logger.warning(
            "PASSWORD_HASHING is disabled: credentials are stored in plaintext "
            "and returned by GET /user"
        )

    database_url = app.config.get('DATABASE_URL')
    if database_url:
        database.configure_engine(database_url)
    else:
        database.dispose_engine()
        logger.error("DATABASE_URL is not set; requests will fail until it is configured")

    # Schema bootstrap runs once here. If it fails, don't crash the app: the
    # health endpoint keeps working and requests retry the bootstrap.
    app.extensions['schema_ready'] = False
    try:
        with app.app_context():
            _initialize_schema(app)
    except ProvisioningError as e:
        logger.error(f"Error during database initialization: {e}")

    app.before_request(_reject_head)
    app.before_request(_ensure_schema)
    return app


def _initialize_schema(app):
    database.init_db()
    app.extensions['schema_ready'] = True
    logger.info("Database schema ready")


def _reject_head():
    # HEAD is implied by every GET rule but is not part of the route table
    if request.method == 'HEAD':
        raise MethodNotAllowed()
    return None


def _ensure_schema():
    """Abort the request with a 500 while the schema cannot be initialized."""
    if current_app.extensions.get('schema_ready'):
        return None
    if request.routing_exception is not None or request.endpoint in SCHEMA_EXEMPT_ENDPOINTS:
        return None
    # Raised errors are converted to responses by the registered handlers
    _initialize_schema(current_app)
    return None
