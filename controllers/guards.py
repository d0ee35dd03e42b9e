# controllers/guards.py

from functools import wraps
from flask import request, g
from services.auth_service import AuthService
from services.exceptions import NotFound, Unauthorized


def _bearer_token():
    header = request.headers.get('Authorization', '')
    return header.split(' ', 1)[1].strip() if header.startswith('Bearer ') else None


def token_user():
    """The account behind g.user_id. A token for a deleted account counts as invalid."""
    try:
        return AuthService.get_user(g.user_id)
    except NotFound:
        raise Unauthorized('Invalid or expired token')


def token_required(view):
    """Reject the request unless it carries a valid Bearer token. Sets g.user_id."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.user_id = AuthService.verify_token(_bearer_token())
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    @wraps(view)
    @token_required
    def wrapper(*args, **kwargs):
        user = token_user()
        if not user.is_admin:
            raise Unauthorized('Admin access required')
        g.current_user = user
        return view(*args, **kwargs)
    return wrapper


def self_or_admin_required(view):
    """The token must belong to the user named by the ``user_id`` URL argument, or to an admin."""
    @wraps(view)
    @token_required
    def wrapper(*args, **kwargs):
        user = token_user()
        if user.id != kwargs.get('user_id') and not user.is_admin:
            raise Unauthorized('Not allowed to modify this user')
        return view(*args, **kwargs)
    return wrapper
