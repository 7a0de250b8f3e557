"""
Check Eligibility Handler.
GET /eligibility?category=DATA_ENTRY&difficulty=intermediate
Tells the calling worker whether their category badge lets them apply.
"""
from skillgate.auth import get_user_sub
from skillgate.badge_store import DynamoBadgeStore
from skillgate.eligibility import can_apply
from skillgate.logging import logger, log_event
from skillgate.models import TaskDifficulty
from skillgate.utils import format_response, get_query_param


def build_badge_store():
    return DynamoBadgeStore()


def handler(event, context):
    log_event(event)

    try:
        worker_id = get_user_sub(event)
        if not worker_id:
            return format_response(401, {'error': 'Unauthorized'})

        category = get_query_param(event, 'category')
        if not category:
            return format_response(400, {'error': 'Missing category'})
        difficulty = get_query_param(event, 'difficulty', TaskDifficulty.BEGINNER)

        result = can_apply(worker_id, category, difficulty, build_badge_store())
        return format_response(200, {
            'workerId': worker_id,
            'category': category,
            'difficulty': difficulty,
            **result
        })

    except Exception as e:
        logger.error(f"Error checking category eligibility: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
