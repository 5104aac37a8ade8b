from cleancity.status import ReportStatus

def list_reports_by_city(storage, city):
    """Reports whose owner's city matches ``city`` case-insensitively."""
    if not city:
        return []
    return storage.get_reports_by_city(city)

def list_users_by_city(storage, city):
    if not city:
        return []
    return storage.get_users_by_city(city)

def get_admin_count_for_city(storage, city):
    if not city:
        return 0
    return storage.get_admin_count_for_city(city)

def city_report_stats(storage, city):
    """Status breakdown and awarded points for an admin's city dashboard."""
    reports = list_reports_by_city(storage, city)
    by_status = {status.value: 0 for status in ReportStatus}
    for report in reports:
        by_status[report.status] = by_status.get(report.status, 0) + 1

    return {
        'city': city,
        'total_reports': len(reports),
        'by_status': by_status,
        'points_awarded': sum(r.reward_points or 0 for r in reports),
        'users': len(list_users_by_city(storage, city)),
    }
