"""
Submit Trial Task Handler.
POST /trials/{taskId}/submit
Body: { "workerId": "...", "submittedWork": {...}, "timeSpent": 12, "workerData": {...} }

Rate limit → worker session → validation gate → store → hand off to scorer.
"""
import time
import uuid
import boto3
from botocore.exceptions import ClientError
from skillgate.auth import get_source_ip, get_user_sub
from skillgate.collaborators import DynamoSubmissionHistory, DynamoTaskLookup, DynamoWorkerDirectory
from skillgate.config import config
from skillgate.dynamo import to_decimal, to_dynamo
from skillgate.gatekeeper import SubmissionGatekeeper
from skillgate.identity import check_worker_session
from skillgate.logging import logger, log_event
from skillgate.models import ErrorCode, Submission, utc_now_iso
from skillgate.rate_limit import SubmissionRateLimiter
from skillgate.sqs import build_scoring_request, send_message
from skillgate.utils import format_response, get_path_param, parse_body

PENDING_SCORE = 'PendingScore'

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)


def build_rate_limiter():
    return SubmissionRateLimiter()


def build_worker_directory():
    return DynamoWorkerDirectory()


def build_gatekeeper():
    return SubmissionGatekeeper(DynamoTaskLookup(), DynamoSubmissionHistory())


def handler(event, context):
    log_event(event)

    try:
        task_id = get_path_param(event, 'taskId')
        body = parse_body(event)

        # Registered workers come from Cognito; trial flows send a provisional id
        worker_id = get_user_sub(event) or body.get('workerId')

        decision = build_rate_limiter().hit(get_source_ip(event), worker_id)
        if not decision.allowed:
            return format_response(429, {
                'success': False,
                'error': 'Too many trial task submissions',
                'reason': ErrorCode.RATE_LIMITED,
                'message': (f'Please wait before submitting another trial task. '
                            f'Maximum {decision.limit} submissions per '
                            f'{config.RATE_LIMIT_WINDOW_SECONDS // 60} minutes.'),
                'retryAfter': decision.retry_after
            }, headers={'Retry-After': str(decision.retry_after)})

        session = check_worker_session(worker_id, build_worker_directory())
        if not session['ok']:
            status = 404 if session['code'] == ErrorCode.WORKER_NOT_FOUND else 403
            return format_response(status, {
                'success': False,
                'error': session['message'],
                'reason': session['code']
            })

        submission = Submission.from_request(task_id, body)
        submission.worker_id = worker_id

        outcome = build_gatekeeper().accept_submission(submission)
        if not outcome.valid:
            return format_response(409 if outcome.is_policy_rejection else 400, {
                'success': False,
                'error': 'Validation failed',
                'message': 'Trial task submission validation failed',
                'details': outcome.errors,
                'reasons': outcome.error_codes,
                'warnings': outcome.warnings,
                'timestamp': utc_now_iso()
            })

        clean = outcome.submission
        submission_id = str(uuid.uuid4())
        submitted_at = int(time.time())

        item = {
            'submissionId': submission_id,
            'taskId': clean.task_id,
            'workerId': clean.worker_id or f'anonymous_{submission_id}',
            'submittedWork': to_dynamo(clean.submitted_work),
            'timeSpent': to_decimal(clean.time_spent),
            'status': PENDING_SCORE,
            'warnings': outcome.warnings,
            'submittedAt': submitted_at
        }
        if clean.worker_data:
            item['workerData'] = to_dynamo(clean.worker_data)

        submissions_table = dynamodb.Table(config.SUBMISSIONS_TABLE)
        submissions_table.put_item(Item=item)

        if config.SCORING_QUEUE_URL:
            try:
                send_message(config.SCORING_QUEUE_URL, build_scoring_request(submission_id, clean))
            except ClientError:
                # Unqueued rows are never scored and count as duplicates on retry
                logger.error(f"Removing unqueued submission {submission_id}")
                submissions_table.delete_item(Key={'submissionId': submission_id})
                raise

        return format_response(200, {
            'success': True,
            'message': 'Trial task submitted successfully',
            'submissionId': submission_id,
            'warnings': outcome.warnings
        })

    except Exception as e:
        logger.error(f"Error submitting trial task: {e}")
        return format_response(500, {
            'success': False,
            'error': 'Validation error',
            'message': 'An error occurred during validation'
        })
