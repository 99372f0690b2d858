"""
Error taxonomy for the provisioning service and the Flask handlers that turn
each error into a plain-text HTTP response.

Every error carries the HTTP status it maps to. Handlers raise them; the
handlers registered by ``register_error_handlers`` convert them at the request
boundary so a single bad request never escapes as an unhandled exception.
"""
import logging

from werkzeug.exceptions import HTTPException
from werkzeug.exceptions import MethodNotAllowed as RouteMethodNotAllowed
from werkzeug.exceptions import NotFound as RouteNotFound

from provisioning.utils.responses import plain_text

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    """Base exception for all provisioning failures."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


# ─── Infrastructure (500-level) ─────────────────────────────────

class StorageUnavailable(ProvisioningError):
    """No database configured, or it cannot be reached."""
    status_code = 500


class SchemaInitFailed(ProvisioningError):
    """Table creation failed."""
    status_code = 500


class QueryFailed(ProvisioningError):
    """A statement failed at the storage layer. Message carries the driver error."""
    status_code = 500


# ─── Client errors (400-level) ──────────────────────────────────

class MalformedInput(ProvisioningError):
    status_code = 400


class Conflict(ProvisioningError):
    # Reported as 400 to keep the existing client contract
    status_code = 400


class Unauthorized(ProvisioningError):
    status_code = 401


class NotFound(ProvisioningError):
    status_code = 404


class MethodNotAllowed(ProvisioningError):
    status_code = 405

    def __init__(self, message='Method Not Allowed'):
        super().__init__(message)


def register_error_handlers(app):
    """Install the error-to-response mapping on ``app``."""

    @app.errorhandler(ProvisioningError)
    def handle_provisioning_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        else:
            logger.info(f"{type(error).__name__}: {error.message}")
        return plain_text(error.message, error.status_code)

    @app.errorhandler(RouteNotFound)
    @app.errorhandler(RouteMethodNotAllowed)
    def handle_unrouted(error):
        # Every method/path pair outside the route table is answered the same way
        return handle_provisioning_error(MethodNotAllowed())

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return plain_text(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.error(f"Error processing request: {error}", exc_info=True)
        return plain_text(f'Error processing request: {error}', 500)
