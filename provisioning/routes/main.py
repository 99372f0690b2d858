"""
Service routes.
"""
from flask import Blueprint, current_app, jsonify

main_bp = Blueprint('main', __name__)


@main_bp.route('/health', provide_automatic_options=False)
def health():
    """Health check endpoint for uptime monitoring."""
    return jsonify({
        'status': 'healthy',
        'service': 'provisioning',
        'schema_ready': bool(current_app.extensions.get('schema_ready')),
    }), 200
