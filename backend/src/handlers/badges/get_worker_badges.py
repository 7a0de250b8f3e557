"""
Get Worker Badges Handler.
GET /workers/{workerId}/badges
Returns the worker's badge summary across all categories.
"""
from skillgate.auth import get_user_sub
from skillgate.badge_store import DynamoBadgeStore
from skillgate.ledger import BadgeLedger
from skillgate.logging import logger, log_event
from skillgate.utils import format_response, get_path_param


def build_ledger():
    return BadgeLedger(DynamoBadgeStore())


def handler(event, context):
    log_event(event)

    try:
        # 'me' resolves to the caller
        worker_id = get_path_param(event, 'workerId')
        if not worker_id or worker_id == 'me':
            worker_id = get_user_sub(event)
        if not worker_id:
            return format_response(400, {'error': 'Missing workerId'})

        summary = build_ledger().summarize(worker_id)
        return format_response(200, summary)

    except Exception as e:
        logger.error(f"Error getting badge summary: {e}")
        return format_response(500, {'error': 'Internal Server Error'})
