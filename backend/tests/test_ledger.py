"""
Tests for the badge ledger: tier calculation, awards, accumulation and reports.
"""
import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from skillgate.badge_store import InMemoryBadgeStore, LedgerConflictError
from skillgate.ledger import BadgeLedger, calculate_badge_level
from skillgate.models import BadgeLevel, CategoryBadge, EarnedBy, TaskCategory


class TestCalculateBadgeLevel:
    """Tests for the tier cascade."""

    @pytest.mark.parametrize('tasks,rating,expected', [
        (30, 4.8, BadgeLevel.PLATINUM),
        (29, 4.9, BadgeLevel.GOLD),
        (15, 4.7, BadgeLevel.GOLD),
        (14, 4.7, BadgeLevel.SILVER),
        (15, 4.69, BadgeLevel.SILVER),
        (5, 4.5, BadgeLevel.SILVER),
        (4, 5.0, BadgeLevel.BRONZE),
        (100, 4.49, BadgeLevel.BRONZE),
        (100, None, BadgeLevel.BRONZE),
        (0, None, BadgeLevel.BRONZE),
    ])
    def test_thresholds(self, tasks, rating, expected):
        assert calculate_badge_level(tasks, rating) == expected

    def test_monotonic_in_tasks_and_rating(self):
        ranks = {level: i for i, level in enumerate(BadgeLevel.ALL)}
        ratings = [None, 1.0, 4.5, 4.7, 4.8, 5.0]
        for tasks in range(0, 40):
            for i, rating in enumerate(ratings):
                level = ranks[calculate_badge_level(tasks, rating)]
                assert level <= ranks[calculate_badge_level(tasks + 1, rating)]
                if i + 1 < len(ratings):
                    assert level <= ranks[calculate_badge_level(tasks, ratings[i + 1])]


class TestAward:
    """Tests for BadgeLedger.award."""

    def test_first_award_creates_bronze(self, ledger, store):
        result = ledger.award('worker-1', 'data entry', task_id='task-1',
                              earned_by=EarnedBy.TRIAL_TASK,
                              quality_snapshot={'accuracyScore': 0.9})

        assert result['created'] is True
        badge = store.get('worker-1', TaskCategory.DATA_ENTRY)
        assert badge.badge_level == BadgeLevel.BRONZE
        assert badge.tasks_completed == 1
        assert badge.average_rating is None
        assert badge.total_earnings == Decimal('0')
        assert badge.earned_by == EarnedBy.TRIAL_TASK
        assert badge.task_id == 'task-1'
        assert badge.submission_quality == {'accuracyScore': 0.9}

    def test_second_award_increments_instead_of_duplicating(self, ledger, store):
        first = ledger.award('worker-1', TaskCategory.CONTENT, earned_by=EarnedBy.TRIAL_TASK)
        second = ledger.award('worker-1', TaskCategory.CONTENT, earned_by=EarnedBy.FREE_TASK)

        assert second['created'] is False
        assert second['badge'].tasks_completed == 2
        badges = store.list_by_worker('worker-1')
        assert len(badges) == 1
        # Provenance stays with the first award
        assert badges[0].earned_by == EarnedBy.TRIAL_TASK
        assert badges[0].earned_at == first['badge'].earned_at

    def test_categories_are_independent(self, ledger, store):
        ledger.award('worker-1', TaskCategory.CONTENT)
        ledger.award('worker-1', TaskCategory.RESEARCH)

        assert len(store.list_by_worker('worker-1')) == 2

    def test_concurrent_first_awards_make_one_row(self):
        store = InMemoryBadgeStore()
        ledger = BadgeLedger(store)
        barrier = threading.Barrier(2)
        results = []

        def award():
            barrier.wait()
            results.append(ledger.award('worker-1', TaskCategory.DATA_ENTRY))

        threads = [threading.Thread(target=award) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(r['created'] for r in results) == [False, True]
        badges = store.list_by_worker('worker-1')
        assert len(badges) == 1
        assert badges[0].tasks_completed == 2

    def test_vanished_row_raises_conflict(self):
        store = MagicMock()
        store.create.return_value = False
        store.get.return_value = None

        with pytest.raises(LedgerConflictError):
            BadgeLedger(store).award('worker-1', TaskCategory.CONTENT)


class TestAccumulate:
    """Tests for BadgeLedger.accumulate."""

    def test_no_badge_is_a_no_op(self, ledger, store):
        assert ledger.accumulate('worker-1', TaskCategory.CONTENT, 100, rating=5) is None
        assert store.list_by_worker('worker-1') == []

    def test_first_rating_and_earnings(self, ledger):
        ledger.award('worker-1', TaskCategory.CONTENT)

        badge = ledger.accumulate('worker-1', TaskCategory.CONTENT, '250.50', rating=4)

        assert badge.tasks_completed == 2
        assert badge.average_rating == 4.0
        assert badge.total_earnings == Decimal('250.50')

    def test_rating_is_weighted_running_mean(self, store):
        store.create(CategoryBadge(worker_id='worker-1', category=TaskCategory.CONTENT,
                                   tasks_completed=3, average_rating=4.0))
        ledger = BadgeLedger(store)

        badge = ledger.accumulate('worker-1', TaskCategory.CONTENT, 10, rating=5)

        assert badge.tasks_completed == 4
        assert badge.average_rating == pytest.approx(4.25)

    def test_missing_rating_keeps_mean(self, store):
        store.create(CategoryBadge(worker_id='worker-1', category=TaskCategory.CONTENT,
                                   tasks_completed=3, average_rating=4.0))

        badge = BadgeLedger(store).accumulate('worker-1', TaskCategory.CONTENT, 10)

        assert badge.tasks_completed == 4
        assert badge.average_rating == 4.0
        assert badge.total_earnings == Decimal('10')

    def test_promotes_when_thresholds_met(self, store):
        store.create(CategoryBadge(worker_id='worker-1', category=TaskCategory.CONTENT,
                                   tasks_completed=4, average_rating=5.0))

        badge = BadgeLedger(store).accumulate('worker-1', TaskCategory.CONTENT, 10, rating=5)

        assert badge.tasks_completed == 5
        assert badge.badge_level == BadgeLevel.SILVER

    def test_tier_follows_rating_down(self, store):
        """Tier is a pure function of the counters, so it can drop."""
        store.create(CategoryBadge(worker_id='worker-1', category=TaskCategory.CONTENT,
                                   badge_level=BadgeLevel.SILVER, tasks_completed=5,
                                   average_rating=4.6))

        badge = BadgeLedger(store).accumulate('worker-1', TaskCategory.CONTENT, 10, rating=3.4)

        # (4.6 * 5 + 3.4) / 6 = 4.4
        assert badge.average_rating == pytest.approx(4.4)
        assert badge.badge_level == BadgeLevel.BRONZE

    @pytest.mark.parametrize('rating', [0, 5.5, -1])
    def test_rejects_out_of_range_rating(self, ledger, rating):
        ledger.award('worker-1', TaskCategory.CONTENT)
        with pytest.raises(ValueError):
            ledger.accumulate('worker-1', TaskCategory.CONTENT, 10, rating=rating)

    def test_rejects_negative_pay(self, ledger):
        ledger.award('worker-1', TaskCategory.CONTENT)
        with pytest.raises(ValueError):
            ledger.accumulate('worker-1', TaskCategory.CONTENT, -5)

    def test_concurrent_accumulations_lose_nothing(self):
        store = InMemoryBadgeStore()
        ledger = BadgeLedger(store, max_retries=50)
        ledger.award('worker-1', TaskCategory.CONTENT)

        def work():
            for _ in range(5):
                ledger.accumulate('worker-1', TaskCategory.CONTENT, 10, rating=5)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        badge = store.get('worker-1', TaskCategory.CONTENT)
        assert badge.tasks_completed == 21
        assert badge.total_earnings == Decimal('200')
        assert badge.average_rating == pytest.approx(5.0)

    def test_gives_up_after_max_retries(self):
        store = MagicMock()
        store.get.return_value = CategoryBadge(worker_id='worker-1', category=TaskCategory.CONTENT,
                                               tasks_completed=1)
        store.replace.return_value = False

        with pytest.raises(LedgerConflictError):
            BadgeLedger(store, max_retries=3).accumulate('worker-1', TaskCategory.CONTENT, 10)

        assert store.replace.call_count == 3


class TestReports:
    """Tests for summarize and leaderboard."""

    def _seed(self, store, worker_id, category, tasks, rating, earnings='0', earned_at='2024-01-01T00:00:00+00:00'):
        store.create(CategoryBadge(
            worker_id=worker_id, category=category,
            badge_level=calculate_badge_level(tasks, rating),
            tasks_completed=tasks, average_rating=rating,
            total_earnings=Decimal(earnings), earned_at=earned_at,
        ))

    def test_summary_aggregates(self, ledger, store):
        self._seed(store, 'worker-1', TaskCategory.CONTENT, 6, 4.6, '120', '2024-01-01T00:00:00+00:00')
        self._seed(store, 'worker-1', TaskCategory.RESEARCH, 2, 4.0, '30.5', '2024-03-01T00:00:00+00:00')
        self._seed(store, 'worker-1', TaskCategory.DATA_ENTRY, 1, None, '0', '2024-02-01T00:00:00+00:00')

        summary = ledger.summarize('worker-1')

        assert summary['totalBadges'] == 3
        assert summary['totalTasksCompleted'] == 9
        assert summary['totalEarnings'] == Decimal('150.5')
        assert summary['averageRating'] == pytest.approx(4.3)
        assert summary['silver'] == 1
        assert summary['bronze'] == 2
        assert summary['gold'] == 0
        assert summary['platinum'] == 0
        assert [b['category'] for b in summary['badges']] == [
            TaskCategory.RESEARCH, TaskCategory.DATA_ENTRY, TaskCategory.CONTENT
        ]

    def test_summary_for_worker_without_badges(self, ledger):
        summary = ledger.summarize('nobody')

        assert summary['totalBadges'] == 0
        assert summary['averageRating'] is None
        assert summary['badges'] == []

    def test_leaderboard_ordering(self, ledger, store):
        self._seed(store, 'gold', TaskCategory.CONTENT, 16, 4.75)
        self._seed(store, 'silver-high', TaskCategory.CONTENT, 6, 4.9)
        self._seed(store, 'silver-low', TaskCategory.CONTENT, 40, 4.5)
        self._seed(store, 'unrated', TaskCategory.CONTENT, 50, None)
        self._seed(store, 'bronze', TaskCategory.CONTENT, 2, 3.0)
        self._seed(store, 'elsewhere', TaskCategory.RESEARCH, 40, 5.0)

        board = ledger.leaderboard('content')

        assert [row['workerId'] for row in board] == [
            'gold', 'silver-high', 'silver-low', 'bronze', 'unrated'
        ]
        assert [row['rank'] for row in board] == [1, 2, 3, 4, 5]

    def test_leaderboard_limit(self, ledger, store):
        for i in range(5):
            self._seed(store, f'worker-{i}', TaskCategory.CONTENT, i + 1, 4.0)

        board = ledger.leaderboard(TaskCategory.CONTENT, limit=2)

        assert [row['workerId'] for row in board] == ['worker-4', 'worker-3']

    def test_leaderboard_zero_limit(self, ledger, store):
        self._seed(store, 'worker-1', TaskCategory.CONTENT, 3, 4.0)

        assert ledger.leaderboard(TaskCategory.CONTENT, limit=0) == []
        assert len(ledger.leaderboard(TaskCategory.CONTENT)) == 1
