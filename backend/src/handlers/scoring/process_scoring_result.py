"""
Scoring Result Handler.
Triggered by SQS (Scoring Results Queue) with the external scorer's verdict:
{ submissionId, taskId, workerId, category, passed, accuracyScore, speedScore, qualityScore, feedback }

Passed submissions from registered workers earn (or count towards) a badge.

Submission status flow: PendingScore → Passed/Failed, then awardedAt is set
once the badge write has landed. A redelivered verdict for a Passed
submission without awardedAt re-enters the award step.
"""
import json
import boto3
from botocore.exceptions import ClientError
from skillgate.badge_store import DynamoBadgeStore
from skillgate.collaborators import DynamoTaskLookup
from skillgate.config import config
from skillgate.dynamo import is_conditional_check_failure, to_dynamo
from skillgate.identity import is_provisional_worker
from skillgate.ledger import BadgeLedger
from skillgate.logging import logger
from skillgate.models import EarnedBy, utc_now_iso

PENDING_SCORE = 'PendingScore'
PASSED = 'Passed'
FAILED = 'Failed'

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)


def build_ledger():
    return BadgeLedger(DynamoBadgeStore())


def build_task_lookup():
    return DynamoTaskLookup()


def handler(event, context):
    """
    Process scorer verdicts. Errors propagate so SQS redelivers the batch.
    """
    processed = 0
    for record in event.get('Records', []):
        if process_result(json.loads(record['body'])):
            processed += 1
    return {'processed': processed}


def process_result(result: dict) -> bool:
    """
    Apply one scorer verdict.

    Returns:
        True if a badge was awarded or incremented, False otherwise
    """
    submission_id = result.get('submissionId')
    worker_id = result.get('workerId')
    passed = bool(result.get('passed'))
    quality = {
        'accuracyScore': result.get('accuracyScore'),
        'speedScore': result.get('speedScore'),
        'qualityScore': result.get('qualityScore'),
    }

    submissions_table = dynamodb.Table(config.SUBMISSIONS_TABLE)
    if not mark_scored(submissions_table, submission_id, PASSED if passed else FAILED,
                       quality, result.get('feedback')):
        if not award_pending(submissions_table, submission_id):
            logger.info(f"Submission {submission_id} already scored, skipping")
            return False
        logger.info(f"Resuming badge award for submission {submission_id}")
        passed = True

    if not passed:
        logger.info(f"Submission {submission_id} did not pass scoring")
        return False

    if is_provisional_worker(worker_id):
        logger.info(f"Submission {submission_id} passed for provisional worker {worker_id}; no badge until registration")
        return False

    category = result.get('category')
    if not category:
        task = build_task_lookup().get_task(result.get('taskId'))
        category = task.category if task else None
    if not category:
        logger.warning(f"No category for submission {submission_id}, cannot award badge")
        return False

    outcome = build_ledger().award(
        worker_id,
        category,
        task_id=result.get('taskId'),
        earned_by=EarnedBy.TRIAL_TASK,
        quality_snapshot={k: v for k, v in quality.items() if v is not None}
    )
    mark_awarded(submissions_table, submission_id)
    logger.info(f"Badge for {worker_id} in {category}: created={outcome['created']}, "
                f"level={outcome['badge'].badge_level}")
    return True


def mark_scored(submissions_table, submission_id: str, status: str, quality: dict, feedback) -> bool:
    """Move a submission out of PendingScore. False if it was already moved."""
    try:
        submissions_table.update_item(
            Key={'submissionId': submission_id},
            UpdateExpression='SET #status = :s, scores = :q, feedback = :f, scoredAt = :ts',
            ConditionExpression='#status = :pending',
            ExpressionAttributeNames={'#status': 'status'},
            ExpressionAttributeValues={
                ':s': status,
                ':q': to_dynamo(quality),
                ':f': feedback or '',
                ':ts': utc_now_iso(),
                ':pending': PENDING_SCORE
            }
        )
        return True
    except ClientError as e:
        if is_conditional_check_failure(e):
            return False
        logger.error(f"Error updating submission {submission_id}: {e}")
        raise


def award_pending(submissions_table, submission_id: str) -> bool:
    """True if the submission passed scoring but its badge award never landed."""
    try:
        response = submissions_table.get_item(
            Key={'submissionId': submission_id},
            ConsistentRead=True
        )
    except ClientError as e:
        logger.error(f"Error fetching submission {submission_id}: {e}")
        raise

    item = response.get('Item') or {}
    return item.get('status') == PASSED and not item.get('awardedAt')


def mark_awarded(submissions_table, submission_id: str) -> None:
    try:
        submissions_table.update_item(
            Key={'submissionId': submission_id},
            UpdateExpression='SET awardedAt = :ts',
            ConditionExpression='#status = :passed AND attribute_not_exists(awardedAt)',
            ExpressionAttributeNames={'#status': 'status'},
            ExpressionAttributeValues={':ts': utc_now_iso(), ':passed': PASSED}
        )
    except ClientError as e:
        if is_conditional_check_failure(e):
            logger.warning(f"Submission {submission_id} was already marked awarded")
            return
        logger.error(f"Error marking submission {submission_id} awarded: {e}")
        raise
