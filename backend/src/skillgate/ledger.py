"""
Badge Ledger - per (worker, category) badge accounting.

The ledger owns the CategoryBadge lifecycle: a row is created once on the
first qualifying award and mutated in place afterwards. Every mutation is an
optimistic read-modify-write against the store, and the tier is recomputed
from (tasksCompleted, averageRating) each time.
"""
import copy
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .badge_store import LedgerConflictError
from .config import config
from .logging import logger
from .models import BADGE_LEVEL_RANK, BadgeLevel, CategoryBadge, EarnedBy, utc_now_iso
from .validators import normalize_category

# Tier thresholds, most demanding first
TIER_THRESHOLDS = (
    (BadgeLevel.PLATINUM, {'min_tasks': 30, 'min_rating': 4.8}),
    (BadgeLevel.GOLD, {'min_tasks': 15, 'min_rating': 4.7}),
    (BadgeLevel.SILVER, {'min_tasks': 5, 'min_rating': 4.5}),
)

MIN_RATING = 1
MAX_RATING = 5


def calculate_badge_level(tasks_completed: int, average_rating: Optional[float]) -> str:
    """
    Calculate badge tier from completed tasks and average rating.

    Rules (first match wins):
    - PLATINUM: tasks >= 30 AND rating >= 4.8
    - GOLD: tasks >= 15 AND rating >= 4.7
    - SILVER: tasks >= 5 AND rating >= 4.5
    - BRONZE: default, and always when there is no rating yet

    The result depends only on the arguments, so a stored tier can always be
    re-derived for audits.
    """
    if average_rating is None:
        return BadgeLevel.BRONZE

    for level, thresholds in TIER_THRESHOLDS:
        if tasks_completed >= thresholds['min_tasks'] and average_rating >= thresholds['min_rating']:
            return level
    return BadgeLevel.BRONZE


class BadgeLedger:
    """
    Award, accumulate and report category badges.

    Args:
        store: a badge store (see badge_store.py)
        max_retries: optimistic write attempts before giving up
    """

    def __init__(self, store, max_retries: Optional[int] = None):
        self.store = store
        self.max_retries = max_retries or config.LEDGER_MAX_RETRIES

    def award(self, worker_id: str, category: str, task_id: Optional[str] = None,
              earned_by: str = EarnedBy.REGULAR_TASK,
              quality_snapshot: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Award a category badge for a qualifying task.

        Creates a BRONZE badge on first award. If the worker already holds a
        badge in the category, its tasksCompleted is incremented instead;
        a second row is never created.

        Returns:
            dict: {'created': bool, 'badge': CategoryBadge}
        """
        category = normalize_category(category)
        logger.info(f"Awarding badge for worker {worker_id} in category {category}")

        now = utc_now_iso()
        new_badge = CategoryBadge(
            worker_id=worker_id,
            category=category,
            badge_level=calculate_badge_level(1, None),
            tasks_completed=1,
            earned_at=now,
            earned_by=earned_by,
            task_id=task_id,
            submission_quality=quality_snapshot,
            updated_at=now,
        )
        if self.store.create(new_badge):
            logger.info(f"New {new_badge.badge_level} badge awarded to {worker_id} in {category}")
            return {'created': True, 'badge': new_badge}

        def count_task(badge: CategoryBadge) -> None:
            badge.tasks_completed += 1

        result = self._mutate(worker_id, category, count_task)
        if result is None:
            # create() saw a row that get() can no longer find
            raise LedgerConflictError(f"Badge {worker_id}/{category} vanished during award")

        _, badge = result
        logger.info(f"Worker already has {badge.badge_level} badge in {category}, "
                    f"tasksCompleted={badge.tasks_completed}")
        return {'created': False, 'badge': badge}

    def accumulate(self, worker_id: str, category: str, pay_amount,
                   rating: Optional[float] = None) -> Optional[CategoryBadge]:
        """
        Record a completed paid task against an existing badge.

        Folds the rating into the running mean (weighted by the prior task
        count), adds the pay to totalEarnings, increments tasksCompleted and
        recomputes the tier.

        Returns:
            The updated badge, or None if the worker has no badge in the category
        """
        if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")

        amount = Decimal(str(pay_amount or 0))
        if amount < 0:
            raise ValueError(f"Pay amount cannot be negative, got {pay_amount}")

        category = normalize_category(category)

        def apply(badge: CategoryBadge) -> None:
            prior_tasks = badge.tasks_completed
            if rating is not None:
                if badge.average_rating is not None:
                    badge.average_rating = (badge.average_rating * prior_tasks + rating) / (prior_tasks + 1)
                else:
                    badge.average_rating = float(rating)
            badge.total_earnings = badge.total_earnings + amount
            badge.tasks_completed = prior_tasks + 1

        result = self._mutate(worker_id, category, apply)
        if result is None:
            logger.info(f"No badge found for worker {worker_id} in {category}; nothing to accumulate")
            return None

        previous, badge = result
        if previous.badge_level != badge.badge_level:
            logger.info(f"Badge for {worker_id} in {category} changed "
                        f"from {previous.badge_level} to {badge.badge_level}")
        return badge

    def summarize(self, worker_id: str) -> Dict[str, Any]:
        """Aggregate a worker's badges across all categories."""
        badges = sorted(self.store.list_by_worker(worker_id), key=lambda b: b.earned_at, reverse=True)
        rated = [b.average_rating for b in badges if b.average_rating is not None]

        summary = {
            'workerId': worker_id,
            'totalBadges': len(badges),
            'totalTasksCompleted': sum(b.tasks_completed for b in badges),
            'totalEarnings': sum((b.total_earnings for b in badges), Decimal('0')),
            'averageRating': sum(rated) / len(rated) if rated else None,
            'badges': [b.to_dict() for b in badges],
        }
        for level in BadgeLevel.ALL:
            summary[level.lower()] = sum(1 for b in badges if b.badge_level == level)
        return summary

    def leaderboard(self, category: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Rank workers in a category by tier, then average rating, then volume.

        Badges without a rating rank below any rated badge of the same tier.
        """
        if limit is None:
            limit = config.LEADERBOARD_DEFAULT_LIMIT
        badges = self.store.list_by_category(normalize_category(category))

        ranked = sorted(
            badges,
            key=lambda b: (
                BADGE_LEVEL_RANK.get(b.badge_level, 0),
                b.average_rating if b.average_rating is not None else float('-inf'),
                b.tasks_completed,
            ),
            reverse=True,
        )

        return [
            {'rank': position, **badge.to_dict()}
            for position, badge in enumerate(ranked[:limit], start=1)
        ]

    def _mutate(self, worker_id: str, category: str,
                apply: Callable[[CategoryBadge], None]):
        """
        Read-modify-write one badge row, retrying on concurrent updates.

        Returns:
            (previous, updated) badges, or None if no row exists
        """
        for attempt in range(1, self.max_retries + 1):
            current = self.store.get(worker_id, category)
            if current is None:
                return None

            updated = copy.deepcopy(current)
            apply(updated)
            updated.badge_level = calculate_badge_level(updated.tasks_completed, updated.average_rating)
            updated.updated_at = utc_now_iso()

            if self.store.replace(updated, current.tasks_completed):
                return current, updated

            logger.info(f"Concurrent update on badge {worker_id}/{category}, retry {attempt}")

        raise LedgerConflictError(
            f"Could not update badge {worker_id}/{category} after {self.max_retries} attempts"
        )
