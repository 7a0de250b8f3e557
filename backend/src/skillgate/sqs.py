"""
Hand-off of accepted trial submissions to the external scorer.
"""
import boto3
import json
from typing import Dict, Any, Optional
from botocore.exceptions import ClientError
from .config import config
from .logging import logger
from .models import Submission

sqs = boto3.client('sqs', region_name=config.AWS_REGION)


def build_scoring_request(submission_id: str, submission: Submission,
                          category: Optional[str] = None) -> Dict[str, Any]:
    """Message body the scorer expects for one sanitized submission."""
    request = {
        'submissionId': submission_id,
        'taskId': submission.task_id,
        'workerId': submission.worker_id,
        'submittedWork': submission.submitted_work,
        'timeSpent': submission.time_spent,
    }
    if category:
        request['category'] = category
    if isinstance(submission.performance_metrics, dict):
        request['performanceMetrics'] = submission.performance_metrics
    return request


def send_message(queue_url: str, message_body: Dict[str, Any]) -> None:
    """
    Send a scoring request, tagged with its task id so consumers can filter.

    Raises:
        ClientError: if SQS rejects the message
    """
    attributes = {}
    if message_body.get('taskId'):
        attributes['taskId'] = {'DataType': 'String', 'StringValue': str(message_body['taskId'])}

    try:
        sqs.send_message(
            QueueUrl=queue_url,
            MessageBody=json.dumps(message_body, default=str),
            MessageAttributes=attributes
        )
        logger.info(f"Scoring request {message_body.get('submissionId')} sent to {queue_url}")
    except ClientError as e:
        logger.error(f"Error sending scoring request to SQS: {e}")
        raise
