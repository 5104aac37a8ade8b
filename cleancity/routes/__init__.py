from flask import current_app, jsonify

from cleancity.errors import (AdminCodeError, AdminCodeUsedError, CleanCityError, DuplicateError,
                              InvalidStatusError, RewardAwardError, StorageError, StoreUnavailableError)

# Most specific class first wins via the exception MRO
STATUS_CODES = {
    DuplicateError: 409,
    AdminCodeUsedError: 409,
    AdminCodeError: 400,
    InvalidStatusError: 400,
    RewardAwardError: 500,
    StoreUnavailableError: 503,
    StorageError: 500,
    CleanCityError: 400,
}

# JSON (camelCase) -> column names for user payloads.
# role is absent: admins are only created through secret codes
USER_FIELD_MAP = {
    'email': 'email',
    'fullName': 'full_name',
    'phone': 'phone',
    'dob': 'dob',
    'address': 'address',
    'city': 'city',
    'state': 'state',
    'pincode': 'pincode',
    'isActive': 'is_active',
    'rewardPoints': 'reward_points',
}
# What a registrant may set about themselves
PROFILE_FIELD_MAP = {k: v for k, v in USER_FIELD_MAP.items()
                     if k not in ('isActive', 'rewardPoints')}

def user_fields(data, allowed=USER_FIELD_MAP):
    return {column: data[key] for key, column in allowed.items() if key in data}

def error_response(exc):
    status = next(STATUS_CODES[cls] for cls in type(exc).__mro__ if cls in STATUS_CODES)
    if status >= 500:
        current_app.logger.error('%s: %s', type(exc).__name__, exc.message)
    return jsonify({'error': exc.message, 'kind': exc.kind}), status

def register_routes(app):
    from cleancity.routes.auth import auth_bp
    from cleancity.routes.reports import reports_bp
    from cleancity.routes.users import users_bp
    from cleancity.routes.api import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(api_bp)

    app.register_error_handler(CleanCityError, error_response)
