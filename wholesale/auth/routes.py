from flask import Blueprint, request, session, jsonify, current_app
from wholesale import db
from wholesale.auth.decorators import login_required
from wholesale.auth.models import User

auth = Blueprint('auth', __name__)


@auth.route('/login', methods=['POST'])
def login():
    """Validate credentials and populate the session."""
    data     = request.get_json(silent=True) or {}
    username = str(data.get('username', '')).strip()
    password = str(data.get('password', ''))

    if not username or not password:
        return jsonify({'status': 'error', 'message': 'Username and password are required.'}), 400

    user = User.query.filter_by(username=username).first()
    if user is None or not user.check_password(password):
        # Deliberately vague: don't reveal which field was wrong
        current_app.logger.warning(f"Failed login attempt for username: {username}")
        return jsonify({'status': 'error', 'message': 'Invalid username or password.'}), 401

    # ── Populate session (minimal: only what's needed) ──
    session.clear()
    session['user_id']    = user.id
    session['role']       = user.role.value
    session['company_id'] = user.company_id
    session.permanent     = True             # respect PERMANENT_SESSION_LIFETIME

    current_app.logger.info(f"User {user.username} logged in successfully.")
    return jsonify(user.to_dict())


@auth.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'status': 'ok'})


@auth.route('/me')
@login_required
def me():
    user = db.session.get(User, session['user_id'])
    if user is None:
        session.clear()
        return jsonify({'status': 'error', 'message': 'Authentication required'}), 401
    return jsonify(user.to_dict())
