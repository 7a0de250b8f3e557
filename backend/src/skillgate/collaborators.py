"""
Read-only DynamoDB collaborators used by the submission gate and handlers.

Lookups raise on storage faults; a fault must never be mistaken for
"not found" or "no recent submission".
"""
import time
from typing import Any, Dict, Optional

from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import ClientError

from .config import config
from .dynamo import get_table
from .logging import logger
from .models import TrialTask


class DynamoTaskLookup:
    """Trial task metadata keyed by taskId."""

    def __init__(self, table=None):
        self.table = table if table is not None else get_table(config.TRIAL_TASKS_TABLE)

    def get_task(self, task_id: str) -> Optional[TrialTask]:
        try:
            response = self.table.get_item(Key={'taskId': task_id})
        except ClientError as e:
            logger.error(f"Error fetching trial task {task_id}: {e}")
            raise

        item = response.get('Item')
        return TrialTask.from_item(item) if item else None


class DynamoSubmissionHistory:
    """Past trial submissions, queried through the byWorker GSI."""

    def __init__(self, table=None):
        self.table = table if table is not None else get_table(config.SUBMISSIONS_TABLE)

    def has_recent_submission(self, worker_id: str, task_id: str, window_hours: int) -> bool:
        """
        Check whether the worker submitted this task within the trailing window.

        Args:
            worker_id: Durable worker id
            task_id: Trial task id
            window_hours: Size of the trailing window

        Returns:
            True if at least one submission falls in the window
        """
        cutoff = int(time.time()) - window_hours * 3600
        params = {
            'IndexName': 'byWorker',
            'KeyConditionExpression': Key('workerId').eq(worker_id) & Key('submittedAt').gte(cutoff),
            'FilterExpression': Attr('taskId').eq(task_id),
            'Select': 'COUNT',
        }

        try:
            # Filtered pages can be empty while more remain
            while True:
                response = self.table.query(**params)
                if response.get('Count', 0) > 0:
                    return True
                last_key = response.get('LastEvaluatedKey')
                if not last_key:
                    return False
                params['ExclusiveStartKey'] = last_key
        except ClientError as e:
            logger.error(f"Error checking recent submissions for {worker_id}: {e}")
            raise


class DynamoWorkerDirectory:
    """Registered worker profiles keyed by workerId."""

    def __init__(self, table=None):
        self.table = table if table is not None else get_table(config.WORKERS_TABLE)

    def get_worker(self, worker_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.table.get_item(Key={'workerId': worker_id})
        except ClientError as e:
            logger.error(f"Error fetching worker {worker_id}: {e}")
            raise
        return response.get('Item')


class DynamoApplicationLookup:
    """Free-task applications keyed by applicationId."""

    def __init__(self, table=None):
        self.table = table if table is not None else get_table(config.APPLICATIONS_TABLE)

    def get_application(self, application_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.table.get_item(Key={'applicationId': application_id})
        except ClientError as e:
            logger.error(f"Error fetching application {application_id}: {e}")
            raise
        return response.get('Item')
