"""
Tests for the DynamoDB read collaborators.
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from conftest import make_client_error
from skillgate.collaborators import DynamoSubmissionHistory, DynamoTaskLookup


class TestDynamoTaskLookup:
    """Tests for DynamoTaskLookup.get_task."""

    def test_maps_item(self):
        table = MagicMock()
        table.get_item.return_value = {'Item': {
            'taskId': 'task-1',
            'category': 'DATA_ENTRY',
            'isActive': True,
            'timeLimit': Decimal('15'),
            'accuracyThreshold': Decimal('0.8'),
        }}

        task = DynamoTaskLookup(table).get_task('task-1')

        assert task.task_id == 'task-1'
        assert task.is_active is True
        assert task.time_limit == 15
        assert task.accuracy_threshold == 0.8

    def test_missing_task(self):
        table = MagicMock()
        table.get_item.return_value = {}
        assert DynamoTaskLookup(table).get_task('nope') is None

    def test_fault_is_not_not_found(self):
        table = MagicMock()
        table.get_item.side_effect = make_client_error('InternalServerError', 'GetItem')

        with pytest.raises(ClientError):
            DynamoTaskLookup(table).get_task('task-1')


class TestDynamoSubmissionHistory:
    """Tests for DynamoSubmissionHistory.has_recent_submission."""

    @patch('skillgate.collaborators.time.time', return_value=100000)
    def test_queries_window_on_worker_index(self, _time):
        table = MagicMock()
        table.query.return_value = {'Count': 1}

        assert DynamoSubmissionHistory(table).has_recent_submission('worker-1', 'task-1', 24) is True

        kwargs = table.query.call_args.kwargs
        assert kwargs['IndexName'] == 'byWorker'
        assert kwargs['Select'] == 'COUNT'

    def test_keeps_paging_through_empty_filtered_pages(self):
        table = MagicMock()
        table.query.side_effect = [
            {'Count': 0, 'LastEvaluatedKey': {'k': 1}},
            {'Count': 1},
        ]

        assert DynamoSubmissionHistory(table).has_recent_submission('worker-1', 'task-1', 24) is True
        assert table.query.call_count == 2

    def test_no_submissions(self):
        table = MagicMock()
        table.query.return_value = {'Count': 0}
        assert DynamoSubmissionHistory(table).has_recent_submission('worker-1', 'task-1', 24) is False

    def test_fault_propagates(self):
        table = MagicMock()
        table.query.side_effect = make_client_error('InternalServerError', 'Query')

        with pytest.raises(ClientError):
            DynamoSubmissionHistory(table).has_recent_submission('worker-1', 'task-1', 24)
