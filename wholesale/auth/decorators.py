"""
wholesale/auth/decorators.py
----------------------------
Reusable route-protection decorators and the caller identity.
Usage:
    from wholesale.auth.decorators import login_required, staff_required

    @orders.route('/', methods=['POST'])
    @login_required
    def create():
        identity = current_identity()
        ...
"""
from dataclasses import dataclass
from functools import wraps
from typing import Optional
from flask import session, jsonify


STAFF_ROLES = ('ADMIN', 'MANAGER')


@dataclass(frozen=True)
class Identity:
    """Who is calling, as resolved at login."""
    user_id:    Optional[str]
    company_id: Optional[str]
    role:       Optional[str]

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


def current_identity() -> Identity:
    return Identity(
        user_id=session.get('user_id'),
        company_id=session.get('company_id'),
        role=session.get('role'),
    )


def _unauthorized():
    return jsonify({'status': 'error', 'message': 'Authentication required'}), 401


def login_required(f):
    """Reject with 401 when there is no 'user_id' in the Flask session."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if 'user_id' not in session:
            return _unauthorized()
        return f(*args, **kwargs)
    return decorated


def staff_required(f):
    """
    Allow access only to ADMIN and MANAGER users.
    Unauthenticated callers get 401, authenticated buyers 403.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        if 'user_id' not in session:
            return _unauthorized()
        if session.get('role') not in STAFF_ROLES:
            return jsonify({'status': 'error', 'message': 'Access denied'}), 403
        return f(*args, **kwargs)
    return decorated
