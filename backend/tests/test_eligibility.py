"""
Tests for the eligibility gate.
"""
import pytest

from skillgate.eligibility import can_apply
from skillgate.ledger import calculate_badge_level
from skillgate.models import BadgeLevel, CategoryBadge, TaskCategory


def seed(store, tasks, rating, stored_level=None):
    store.create(CategoryBadge(
        worker_id='worker-1', category=TaskCategory.CONTENT,
        badge_level=stored_level or calculate_badge_level(tasks, rating),
        tasks_completed=tasks, average_rating=rating,
    ))


class TestWithoutBadge:
    """Workers with no badge in the category."""

    def test_beginner_allowed(self, store):
        result = can_apply('worker-1', TaskCategory.CONTENT, 'beginner', store)
        assert result == {
            'allowed': True,
            'badgeLevel': None,
            'reason': 'Can apply to beginner tasks without badge',
        }

    @pytest.mark.parametrize('difficulty', ['intermediate', 'advanced', 'expert', 'unheard-of'])
    def test_anything_else_denied(self, store, difficulty):
        result = can_apply('worker-1', TaskCategory.CONTENT, difficulty, store)
        assert result['allowed'] is False
        assert result['reason'] == 'Need to earn a badge in CONTENT first'


class TestWithBadge:
    """Workers holding a badge in the category."""

    @pytest.mark.parametrize('tasks,rating,difficulty,allowed', [
        (1, None, 'beginner', True),
        (1, None, 'intermediate', False),
        (5, 4.5, 'intermediate', True),
        (5, 4.5, 'advanced', False),
        (15, 4.7, 'advanced', True),
        (15, 4.7, 'expert', False),
        (30, 4.8, 'expert', True),
    ])
    def test_difficulty_table(self, store, tasks, rating, difficulty, allowed):
        seed(store, tasks, rating)
        assert can_apply('worker-1', TaskCategory.CONTENT, difficulty, store)['allowed'] is allowed

    def test_denial_names_required_tier(self, store):
        seed(store, 1, None)
        result = can_apply('worker-1', TaskCategory.CONTENT, 'advanced', store)
        assert result['badgeLevel'] == BadgeLevel.BRONZE
        assert result['reason'] == 'Need GOLD or higher badge for advanced tasks'

    def test_tier_recomputed_from_counters(self, store):
        seed(store, 2, 3.0, stored_level=BadgeLevel.PLATINUM)
        result = can_apply('worker-1', TaskCategory.CONTENT, 'expert', store)
        assert result['allowed'] is False
        assert result['badgeLevel'] == BadgeLevel.BRONZE

    def test_unknown_difficulty_fails_open(self, store):
        seed(store, 1, None)
        result = can_apply('worker-1', TaskCategory.CONTENT, 'legendary', store)
        assert result['allowed'] is True
        assert 'unrecognized difficulty' in result['reason']

    def test_difficulty_and_category_normalized(self, store):
        seed(store, 5, 4.5)
        assert can_apply('worker-1', 'content writing', ' Intermediate ', store)['allowed'] is True
