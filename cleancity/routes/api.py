from flask import Blueprint, request, jsonify
from sqlalchemy import text
from cleancity.auth_utils import require_auth
from cleancity.extensions import db
from cleancity.services.city import city_report_stats, get_admin_count_for_city
from cleancity.storage import DatabaseStorage, get_storage

api_bp = Blueprint('api', __name__, url_prefix='/api')

@api_bp.route('/notifications', methods=['GET'])
@require_auth()
def get_notifications():
    unread_only = request.args.get('all', '').lower() not in ('1', 'true', 'yes')
    notifs = get_storage().get_notifications(request.user.id, unread_only=unread_only)
    return jsonify({
        'notifications': [n.to_dict() for n in notifs],
        'unread_count': sum(1 for n in notifs if not n.is_read)
    }), 200

@api_bp.route('/notifications/mark-read', methods=['POST'])
@require_auth()
def mark_notifications_read():
    count = get_storage().mark_notifications_read(request.user.id)
    return jsonify({'message': 'Notifications marked as read', 'updated': count}), 200

@api_bp.route('/dashboard-stats', methods=['GET'])
@require_auth(roles=['admin'])
def dashboard_stats():
    storage = get_storage()
    city = request.user.city
    stats = city_report_stats(storage, city)
    stats['admins'] = get_admin_count_for_city(storage, city)
    return jsonify(stats), 200

@api_bp.route('/health', methods=['GET'])
def health():
    storage = get_storage()
    db_ok = None
    if isinstance(storage, DatabaseStorage):
        try:
            db.session.execute(text('SELECT 1'))
            db_ok = True
        except Exception:
            db.session.rollback()
            db_ok = False
    return jsonify({'status': 'ok', 'storage': type(storage).__name__, 'db_ok': db_ok}), 200
