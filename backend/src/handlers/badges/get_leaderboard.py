"""
Category Leaderboard Handler.
GET /badges/leaderboard?category=DATA_ENTRY&limit=10
"""
from skillgate.badge_store import DynamoBadgeStore
from skillgate.config import config
from skillgate.ledger import BadgeLedger
from skillgate.logging import logger, log_event
from skillgate.utils import format_response, get_query_param

MAX_LIMIT = 100


def build_ledger():
    return BadgeLedger(DynamoBadgeStore())


def handler(event, context):
    log_event(event)

    try:
        category = get_query_param(event, 'category')
        if not category:
            return format_response(400, {'error': 'Missing category'})

        try:
            limit = int(get_query_param(event, 'limit', config.LEADERBOARD_DEFAULT_LIMIT))
        except (TypeError, ValueError):
            return format_response(400, {'error': 'limit must be an integer'})
        limit = max(1, min(limit, MAX_LIMIT))

        leaders = build_ledger().leaderboard(category, limit)
        return format_response(200, {
            'category': category,
            'leaderboard': leaders,
            'count': len(leaders)
        })

    except Exception as e:
        logger.error(f"Error getting category leaderboard: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
