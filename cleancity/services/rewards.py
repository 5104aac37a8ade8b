from cleancity.status import ReportStatus

# (points, cash reward) shown on the rewards page; payouts happen offline
REWARD_TIERS = [
    (500, '$5'),
    (1000, '$12'),
    (2500, '$35'),
]

def reward_summary(storage, user):
    """Point balance, earning history and redeemable tiers for one user."""
    earned = [
        r for r in storage.get_reports_by_user(user.id)
        if r.status == ReportStatus.COMPLETED.value and r.reward_points
    ]
    earned.sort(key=lambda r: r.completed_at, reverse=True)
    points = user.reward_points or 0

    return {
        'rewardPoints': points,
        'history': [{
            'reportId': r.id,
            'title': r.title,
            'points': r.reward_points,
            'completedAt': r.completed_at.isoformat() if r.completed_at else None,
        } for r in earned],
        'tiers': [{
            'points': tier_points,
            'reward': reward,
            'eligible': points >= tier_points,
        } for tier_points, reward in REWARD_TIERS],
    }
