from flask import Blueprint, current_app, request, jsonify
from cleancity.auth_utils import require_auth
from cleancity.services.city import list_reports_by_city
from cleancity.status import ReportStatus
from cleancity.storage import get_storage
from cleancity.utils import same_city

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')

REPORT_FIELDS = ('title', 'description', 'address', 'latitude', 'longitude', 'photo')

def _lifecycle():
    return current_app.extensions['cleancity.lifecycle']

def _in_admin_city(storage, report, admin):
    owner = storage.get_user(report.user_id)
    return owner is not None and same_city(owner.city, admin.city)

def _can_view(storage, report, user):
    if user.role == 'admin':
        return _in_admin_city(storage, report, user)
    return report.user_id == user.id

@reports_bp.route('', methods=['GET'])
@require_auth()
def list_reports():
    """Own reports for citizens, the whole city for admins."""
    storage = get_storage()
    user = request.user
    if user.role == 'admin':
        reports = list_reports_by_city(storage, user.city)
    else:
        reports = storage.get_reports_by_user(user.id)

    status = request.args.get('status')
    if status:
        status = ReportStatus.parse(status).value
        reports = [r for r in reports if r.status == status]

    reports = sorted(reports, key=lambda r: r.created_at, reverse=True)
    return jsonify({'reports': [r.to_dict() for r in reports]}), 200

@reports_bp.route('', methods=['POST'])
@require_auth()
def create_report():
    data = request.get_json() or {}
    missing = [f for f in REPORT_FIELDS if data.get(f) in (None, '')]
    if missing:
        return jsonify({'error': 'Missing required fields: ' + ', '.join(missing)}), 400

    report = _lifecycle().create_report(
        request.user.id,
        data['title'],
        data['description'],
        data['address'],
        str(data['latitude']),
        str(data['longitude']),
        data['photo'],
    )
    return jsonify(report.to_dict()), 201

@reports_bp.route('/<int:report_id>', methods=['GET'])
@require_auth()
def get_report(report_id):
    storage = get_storage()
    report = storage.get_report(report_id)
    if report is None or not _can_view(storage, report, request.user):
        return jsonify({'error': 'Report not found'}), 404
    return jsonify(report.to_dict()), 200

@reports_bp.route('/<int:report_id>/status', methods=['PUT'])
@require_auth(roles=['admin'])
def update_report_status(report_id):
    data = request.get_json() or {}
    if not data.get('status'):
        return jsonify({'error': 'Status is required'}), 400

    storage = get_storage()
    report = storage.get_report(report_id)
    if report is None:
        return jsonify({'error': 'Report not found'}), 404
    if not _in_admin_city(storage, report, request.user):
        return jsonify({'error': 'Forbidden', 'message': 'report is outside your city'}), 403

    updated = _lifecycle().update_status(
        report_id,
        data['status'],
        admin_notes=data.get('adminNotes'),
        assigned_admin_id=data.get('assignedAdminId', request.user.id),
    )
    if updated is None:
        return jsonify({'error': 'Report not found'}), 404
    return jsonify(updated.to_dict()), 200

@reports_bp.route('/<int:report_id>', methods=['DELETE'])
@require_auth(roles=['admin'])
def delete_report(report_id):
    storage = get_storage()
    report = storage.get_report(report_id)
    if report is None:
        return jsonify({'error': 'Report not found'}), 404
    if not _in_admin_city(storage, report, request.user):
        return jsonify({'error': 'Forbidden', 'message': 'report is outside your city'}), 403

    if not storage.delete_report(report_id):
        return jsonify({'error': 'Report not found'}), 404
    return jsonify({'message': f'Report {report_id} deleted successfully'}), 200
