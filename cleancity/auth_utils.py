from functools import wraps
from datetime import datetime, timedelta, timezone
from flask import request, jsonify, current_app
import jwt

from cleancity.storage import get_storage

def require_auth(roles=None):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            auth = request.headers.get('Authorization', '')
            if not auth or not auth.startswith('Bearer '):
                return jsonify({'error': 'Unauthorized'}), 401
            token = auth.split(None, 1)[1]
            try:
                payload = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=['HS256'])
                user_id = int(payload.get('sub'))
            except (jwt.InvalidTokenError, TypeError, ValueError) as e:
                return jsonify({'error': 'Invalid token', 'message': str(e)}), 401
            # role and city can change after the token was issued, so load the user
            user = get_storage().get_user(user_id)
            if user is None or not user.is_active:
                return jsonify({'error': 'Unauthorized', 'message': 'account not available'}), 401
            if roles:
                allowed = roles if isinstance(roles, (list, tuple)) else [roles]
                if user.role not in allowed:
                    return jsonify({'error': 'Forbidden', 'message': 'insufficient role'}), 403
            # attach user to request for handlers
            request.user = user
            return f(*args, **kwargs)
        return wrapper
    return decorator

def generate_token(user):
    exp = datetime.now(timezone.utc) + timedelta(hours=current_app.config.get('TOKEN_EXPIRY_HOURS', 8))
    payload = {
        'sub': str(user.id),
        'role': user.role,
        'exp': int(exp.timestamp())
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')
