from flask import Blueprint, request, jsonify
from cleancity.auth_utils import require_auth
from cleancity.routes import user_fields
from cleancity.services.city import list_users_by_city
from cleancity.services.rewards import reward_summary
from cleancity.storage import get_storage
from cleancity.utils import same_city

users_bp = Blueprint('users', __name__, url_prefix='/api')

def _city_user(storage, user_id):
    user = storage.get_user(user_id)
    if user is None or not same_city(user.city, request.user.city):
        return None
    return user

@users_bp.route('/users', methods=['GET'])
@require_auth(roles=['admin'])
def admin_list_users():
    users = list_users_by_city(get_storage(), request.user.city)
    return jsonify({'users': [u.to_dict() for u in users]}), 200

@users_bp.route('/users/<int:user_id>', methods=['GET'])
@require_auth(roles=['admin'])
def admin_get_user(user_id):
    storage = get_storage()
    user = _city_user(storage, user_id)
    if user is None:
        return jsonify({'error': 'User not found'}), 404
    reports = storage.get_reports_by_user(user_id)
    return jsonify({'user': user.to_dict(), 'reports': [r.to_dict() for r in reports]}), 200

@users_bp.route('/users/<int:user_id>', methods=['PATCH'])
@require_auth(roles=['admin'])
def admin_update_user(user_id):
    data = request.get_json() or {}
    if 'role' in data:
        return jsonify({'error': 'Role cannot be changed; admins register with a secret code'}), 400
    fields = user_fields(data)
    if not fields:
        return jsonify({'error': 'No updatable fields supplied'}), 400
    if 'reward_points' in fields:
        points = fields['reward_points']
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            return jsonify({'error': 'rewardPoints must be a non-negative integer'}), 400

    storage = get_storage()
    if _city_user(storage, user_id) is None:
        return jsonify({'error': 'User not found'}), 404

    user = storage.update_user(user_id, fields)
    if user is None:
        return jsonify({'error': 'User not found'}), 404
    return jsonify(user.to_dict()), 200

@users_bp.route('/users/<int:user_id>', methods=['DELETE'])
@require_auth(roles=['admin'])
def admin_delete_user(user_id):
    if user_id == request.user.id:
        return jsonify({'error': 'Cannot delete your own account'}), 400

    storage = get_storage()
    if _city_user(storage, user_id) is None:
        return jsonify({'error': 'User not found'}), 404

    # Reports of the deleted user are kept as they are
    if not storage.delete_user(user_id):
        return jsonify({'error': 'User not found'}), 404
    return jsonify({'message': f'User {user_id} deleted successfully'}), 200

@users_bp.route('/rewards', methods=['GET'])
@require_auth()
def rewards():
    return jsonify(reward_summary(get_storage(), request.user)), 200
