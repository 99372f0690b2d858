"""
Response helpers.
"""
from flask import Response


def plain_text(message, status=200):
    """Build a ``text/plain`` response."""
    return Response(message, status=status, mimetype='text/plain')
