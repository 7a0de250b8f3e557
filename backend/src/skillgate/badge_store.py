"""
CategoryBadge persistence.

One row per (workerId, category). Both stores expose the same contract:

    get(worker_id, category) -> CategoryBadge | None
    create(badge) -> bool                      False if the row already exists
    replace(badge, expected_tasks_completed)   False if the row changed since read
    list_by_worker(worker_id) -> [CategoryBadge]
    list_by_category(category) -> [CategoryBadge]

`tasksCompleted` grows on every mutation, so it doubles as the row version
for optimistic writes.
"""
import copy
import threading
from typing import Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import ClientError

from .config import config
from .dynamo import get_table, is_conditional_check_failure, query_all
from .logging import logger
from .models import CategoryBadge


class LedgerError(Exception):
    """Base class for badge ledger failures."""


class LedgerConflictError(LedgerError):
    """A badge row could not be updated consistently."""


class DynamoBadgeStore:
    """Badges table: workerId (hash) + category (range), GSI byCategory."""

    def __init__(self, table=None):
        self.table = table if table is not None else get_table(config.BADGES_TABLE)

    def get(self, worker_id: str, category: str) -> Optional[CategoryBadge]:
        try:
            response = self.table.get_item(
                Key={'workerId': worker_id, 'category': category},
                ConsistentRead=True
            )
        except ClientError as e:
            logger.error(f"Error fetching badge {worker_id}/{category}: {e}")
            raise
        item = response.get('Item')
        return CategoryBadge.from_item(item) if item else None

    def create(self, badge: CategoryBadge) -> bool:
        try:
            self.table.put_item(
                Item=badge.to_item(),
                ConditionExpression='attribute_not_exists(workerId)'
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Error creating badge {badge.worker_id}/{badge.category}: {e}")
            raise

    def replace(self, badge: CategoryBadge, expected_tasks_completed: int) -> bool:
        try:
            self.table.put_item(
                Item=badge.to_item(),
                ConditionExpression=Attr('tasksCompleted').eq(expected_tasks_completed)
            )
            return True
        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Error updating badge {badge.worker_id}/{badge.category}: {e}")
            raise

    def list_by_worker(self, worker_id: str) -> List[CategoryBadge]:
        items = query_all(self.table, KeyConditionExpression=Key('workerId').eq(worker_id))
        return [CategoryBadge.from_item(item) for item in items]

    def list_by_category(self, category: str) -> List[CategoryBadge]:
        items = query_all(
            self.table,
            IndexName='byCategory',
            KeyConditionExpression=Key('category').eq(category)
        )
        return [CategoryBadge.from_item(item) for item in items]


class InMemoryBadgeStore:
    """Process-local store with the same conditional semantics, for local runs and tests."""

    def __init__(self):
        self._rows: Dict[Tuple[str, str], CategoryBadge] = {}
        self._lock = threading.Lock()

    def get(self, worker_id: str, category: str) -> Optional[CategoryBadge]:
        with self._lock:
            badge = self._rows.get((worker_id, category))
            return copy.deepcopy(badge) if badge else None

    def create(self, badge: CategoryBadge) -> bool:
        key = (badge.worker_id, badge.category)
        with self._lock:
            if key in self._rows:
                return False
            self._rows[key] = copy.deepcopy(badge)
            return True

    def replace(self, badge: CategoryBadge, expected_tasks_completed: int) -> bool:
        key = (badge.worker_id, badge.category)
        with self._lock:
            current = self._rows.get(key)
            if current is None or current.tasks_completed != expected_tasks_completed:
                return False
            self._rows[key] = copy.deepcopy(badge)
            return True

    def list_by_worker(self, worker_id: str) -> List[CategoryBadge]:
        with self._lock:
            return [copy.deepcopy(b) for (w, _), b in self._rows.items() if w == worker_id]

    def list_by_category(self, category: str) -> List[CategoryBadge]:
        with self._lock:
            return [copy.deepcopy(b) for (_, c), b in self._rows.items() if c == category]
