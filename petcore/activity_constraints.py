# activity_constraints.py

import math
from datetime import datetime

DAY_SECONDS = 24 * 3600

constraints = {
    'clean_room': {
        'after': 60
    },
    'training': {
        'after': 90
    },
    'pet_walking': {
        'after': 120
    },
    'grooming': {
        'after': 60
    },
    'weekly_allowance': {
        'after': 7 * DAY_SECONDS
    },
    'daily_check_in': {
        'frequency': {
            'max_per_day': 1
        }
    }
}


def today_key(now_ms):
    """Local calendar date (YYYY-MM-DD) for an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(now_ms / 1000).date().isoformat()


def cooldown_seconds(activity):
    return constraints.get(activity, {}).get('after', 0)


def time_remaining(activity, last_time, now):
    """Whole seconds until `activity` is off cooldown; 0 when it is ready."""
    if not last_time:
        return 0
    elapsed = (now - last_time) / 1000
    return max(0, math.ceil(cooldown_seconds(activity) - elapsed))


def is_activity_allowed(activity, last_time, now, count_today=0):
    constraint = constraints.get(activity, {})

    max_per_day = constraint.get('frequency', {}).get('max_per_day')
    if max_per_day is not None and count_today >= max_per_day:
        return False

    min_interval = constraint.get('after')
    if min_interval and last_time:
        elapsed_time = (now - last_time) / 1000
        if elapsed_time < min_interval:
            return False

    return True
