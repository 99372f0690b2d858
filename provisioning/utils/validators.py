"""
Validation utilities for incoming provisioning requests.
"""
from provisioning.errors import MalformedInput


def parse_json_body(request):
    """
    Parse the request body as a JSON object regardless of Content-Type.

    Raises:
        MalformedInput: the body is not valid JSON or not a JSON object
    """
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise MalformedInput('Invalid data format! Request body must be a JSON object.')
    return payload


def _check_username_length(username, max_length):
    if max_length and len(username) > max_length:
        raise MalformedInput(
            f'Invalid data format! Username must be at most {max_length} characters.'
        )


def validate_new_user(payload, max_username_length=64):
    """
    Validate a user creation payload.

    Both fields only need to be truthy; non-string values are stored as
    their string form.

    Returns:
        (username, password) tuple
    """
    username = payload.get('username')
    password = payload.get('password')
    if not username or not password:
        raise MalformedInput('Invalid data format! Both username and password are required.')

    username = str(username)
    _check_username_length(username, max_username_length)
    return username, str(password)


def validate_new_client(payload, expected_status='CREATION_SUCCESS'):
    """
    Validate a client record payload.

    Returns:
        (status, account_id, name) tuple
    """
    status = payload.get('status')
    account_id = payload.get('account_id')
    name = payload.get('name')

    if status != expected_status or not account_id or not name:
        raise MalformedInput('Invalid data format!')
    return status, str(account_id), str(name)


def validate_credentials(payload):
    """
    Validate a credential check payload. Unlike user creation, both fields
    must be strings; they are trimmed before use.

    Returns:
        (username, password) tuple, both trimmed
    """
    username = payload.get('username')
    password = payload.get('password')

    if not isinstance(username, str) or not isinstance(password, str):
        raise MalformedInput('Invalid data format! Username and password must be strings.')

    username = username.strip()
    password = password.strip()
    if not username or not password:
        raise MalformedInput('Invalid data format! Both username and password are required.')
    return username, password


def normalize_lookup_username(raw_username):
    """
    Normalize the ``username`` query parameter for an account lookup.

    A missing or empty parameter is rejected. A whitespace-only value
    normalizes to an empty string, which simply matches nothing.
    """
    if not raw_username:
        raise MalformedInput('Username is required')
    return raw_username.strip().lower()
