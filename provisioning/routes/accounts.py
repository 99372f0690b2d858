"""
Client provisioning and user credential routes.
"""
import logging

from flask import Blueprint, current_app, jsonify, request

from provisioning.errors import Conflict, NotFound, Unauthorized
from provisioning.services import account_service
from provisioning.utils.responses import plain_text
from provisioning.utils.validators import (
    normalize_lookup_username,
    parse_json_body,
    validate_credentials,
    validate_new_client,
    validate_new_user,
)

logger = logging.getLogger(__name__)

accounts_bp = Blueprint('accounts', __name__)


@accounts_bp.route('/', methods=['POST'], provide_automatic_options=False)
def create_client():
    """Record the outcome of an account provisioning run."""
    payload = parse_json_body(request)
    status, account_id, name = validate_new_client(
        payload, current_app.config['CLIENT_CREATION_STATUS']
    )

    client_id = account_service.insert_client(status, account_id, name)
    logger.info(f"Client {client_id} created for name '{name}'")
    return plain_text('Data added successfully!', 200)


@accounts_bp.route('/adduser', methods=['POST'], provide_automatic_options=False)
def create_user():
    """
    Create a user credential. Usernames are unique regardless of case.
    """
    payload = parse_json_body(request)
    username, password = validate_new_user(
        payload, current_app.config['MAX_USERNAME_LENGTH']
    )

    if account_service.find_user_id_by_username(username) is not None:
        raise Conflict('User already exists!')

    user_id = account_service.insert_user(username, password)
    logger.info(f"User {user_id} created: '{username}'")
    return plain_text('User added successfully!', 200)


@accounts_bp.route('/user', methods=['GET'], provide_automatic_options=False)
def lookup_account():
    """Return the account id and password linked to ``?username=``."""
    username = normalize_lookup_username(request.args.get('username'))
    logger.debug(f"Searching for username: '{username}'")

    account = account_service.find_account_and_password_by_username(username)
    if account is None:
        raise NotFound('User not found')
    return jsonify(account), 200


@accounts_bp.route('/checkuser', methods=['POST'], provide_automatic_options=False)
def check_user():
    """Verify a username/password pair."""
    payload = parse_json_body(request)
    username, password = validate_credentials(payload)

    if not account_service.verify_credentials(username, password):
        raise Unauthorized('Username or password is incorrect')

    logger.info(f"User verified: '{username}'")
    return plain_text('User verified', 200)
