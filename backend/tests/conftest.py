"""
Shared fixtures for the skill-badge engine tests.
"""
import json
import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError

from skillgate.badge_store import InMemoryBadgeStore
from skillgate.ledger import BadgeLedger
from skillgate.models import TaskCategory, TrialTask


def make_client_error(code='ConditionalCheckFailedException', operation='PutItem'):
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


def make_api_event(body=None, path=None, query=None, sub=None, groups=None, source_ip='10.0.0.1'):
    """Build a minimal API Gateway proxy event."""
    claims = {}
    if sub:
        claims['sub'] = sub
    if groups:
        claims['cognito:groups'] = ','.join(groups)
    return {
        'body': json.dumps(body) if body is not None else None,
        'pathParameters': path or {},
        'queryStringParameters': query,
        'requestContext': {
            'authorizer': {'claims': claims},
            'identity': {'sourceIp': source_ip}
        }
    }


@pytest.fixture
def store():
    return InMemoryBadgeStore()


@pytest.fixture
def ledger(store):
    return BadgeLedger(store)


@pytest.fixture
def active_task():
    return TrialTask(task_id='task-1', category=TaskCategory.DATA_ENTRY, is_active=True,
                     time_limit=15, accuracy_threshold=0.8)


@pytest.fixture
def task_lookup(active_task):
    lookup = MagicMock()
    lookup.get_task.return_value = active_task
    return lookup


@pytest.fixture
def submission_history():
    history = MagicMock()
    history.has_recent_submission.return_value = False
    return history
