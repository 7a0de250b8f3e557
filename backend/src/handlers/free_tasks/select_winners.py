"""
Select Free Task Winners Handler.
POST /free-tasks/{taskId}/winners
Body: { "applicationIds": ["...", "..."] }

Free tasks help new workers earn their first category badges: every selected
application earns (or counts towards) a badge in the task's category.
"""
from skillgate.auth import get_user_sub, is_admin, is_requester
from skillgate.badge_store import DynamoBadgeStore
from skillgate.collaborators import DynamoApplicationLookup
from skillgate.identity import is_provisional_worker
from skillgate.ledger import BadgeLedger
from skillgate.logging import logger, log_event
from skillgate.models import EarnedBy
from skillgate.utils import format_response, get_path_param, parse_body


def build_ledger():
    return BadgeLedger(DynamoBadgeStore())


def build_application_lookup():
    return DynamoApplicationLookup()


def handler(event, context):
    log_event(event)

    try:
        if not (is_requester(event) or is_admin(event)):
            return format_response(403, {'error': 'Only requesters can select winners'})

        task_id = get_path_param(event, 'taskId')
        application_ids = parse_body(event).get('applicationIds')
        if not task_id or not isinstance(application_ids, list) or not application_ids:
            return format_response(400, {'error': 'Missing taskId or applicationIds'})
        if not all(isinstance(a, str) for a in application_ids):
            return format_response(400, {'error': 'applicationIds must be strings'})

        # Each winner counts once per request
        application_ids = list(dict.fromkeys(application_ids))

        requester_id = get_user_sub(event)
        ledger = build_ledger()
        lookup = build_application_lookup()

        results = [award_winner(application_id, task_id, requester_id, lookup, ledger)
                   for application_id in application_ids]

        logger.info(f"Free task {task_id} winners processed: {len(results)}")
        return format_response(200, {
            'message': 'Winners selected and badges awarded successfully!',
            'taskId': task_id,
            'results': results,
            'badgesAwarded': len([r for r in results if r.get('badgeAwarded')])
        })

    except Exception as e:
        logger.error(f"Error selecting free task winners: {e}")
        return format_response(500, {'error': 'Internal Server Error'})


def award_winner(application_id: str, task_id: str, requester_id: str, lookup, ledger) -> dict:
    """
    Award the badge for one winning application.
    Failures are reported per winner so one bad application does not sink the batch.
    """
    application = lookup.get_application(application_id)
    if not application or application.get('taskId') != task_id:
        return {'applicationId': application_id, 'badgeAwarded': False, 'error': 'Application not found for this task'}
    if not application.get('isFreeTask'):
        return {'applicationId': application_id, 'badgeAwarded': False, 'error': 'Not a free task application'}
    if requester_id and application.get('employerId') not in (None, requester_id):
        return {'applicationId': application_id, 'badgeAwarded': False, 'error': 'Not your task'}

    worker_id = application.get('workerId')
    if is_provisional_worker(worker_id):
        return {'applicationId': application_id, 'badgeAwarded': False, 'error': 'Worker is not registered'}

    quality = application.get('qualityScore')
    try:
        outcome = ledger.award(
            worker_id,
            application.get('category'),
            task_id=task_id,
            earned_by=EarnedBy.FREE_TASK,
            quality_snapshot={'qualityScore': quality} if quality is not None else None
        )
    except Exception as e:
        logger.error(f"Error awarding badge to worker {worker_id}: {e}")
        return {'applicationId': application_id, 'workerId': worker_id,
                'badgeAwarded': False, 'error': 'Failed to award badge'}

    return {
        'applicationId': application_id,
        'workerId': worker_id,
        'badgeAwarded': True,
        'created': outcome['created'],
        'badgeLevel': outcome['badge'].badge_level,
        'tasksCompleted': outcome['badge'].tasks_completed
    }
