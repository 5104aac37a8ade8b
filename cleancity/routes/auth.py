from flask import Blueprint, request, jsonify, current_app
from werkzeug.security import generate_password_hash, check_password_hash
from cleancity.auth_utils import require_auth, generate_token
from cleancity.routes import PROFILE_FIELD_MAP, user_fields
from cleancity.services.onboarding import register_admin
from cleancity.storage import get_storage

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

REQUIRED_FIELDS = ('fullName', 'email', 'password', 'city')

@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json() or {}
    missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
    if missing:
        return jsonify({'error': 'Missing required fields: ' + ', '.join(missing)}), 400

    role = data.get('role') or 'user'
    if role not in ('user', 'admin'):
        return jsonify({'error': 'Invalid role'}), 400

    storage = get_storage()
    fields = user_fields(data, PROFILE_FIELD_MAP)
    fields['role'] = role
    fields['password'] = generate_password_hash(data['password'])

    if role == 'admin':
        if not data.get('secretCode'):
            return jsonify({'error': 'Secret code is required for admin registration'}), 400
        user = register_admin(storage, fields, data['secretCode'],
                              current_app.config.get('MAX_ADMINS_PER_CITY'))
    else:
        if storage.get_user_by_email(fields['email']):
            return jsonify({'error': 'Email already registered', 'kind': 'already_exists'}), 409
        user = storage.create_user(fields)

    return jsonify({'user': user.to_dict(), 'access_token': generate_token(user)}), 201

@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json() or {}
    email = data.get('email')
    password = data.get('password')

    if not email or not password:
        return jsonify({'error': 'Email and password required'}), 400

    user = get_storage().get_user_by_email(email)
    if not user or not check_password_hash(user.password, password):
        return jsonify({'error': 'Invalid credentials'}), 401

    if not user.is_active:
        return jsonify({'error': 'Account is deactivated'}), 403

    role = data.get('role')
    if role and role != user.role:
        return jsonify({'error': f'Account is not registered as {role}'}), 403

    return jsonify({'user': user.to_dict(), 'access_token': generate_token(user)}), 200

@auth_bp.route('/logout', methods=['POST'])
def logout():
    # Tokens are stateless; the client drops its copy
    return jsonify({'message': 'Logged out'}), 200

@auth_bp.route('/me', methods=['GET'])
@require_auth()
def me():
    return jsonify(request.user.to_dict()), 200
