"""
Eligibility Gate - may a worker apply to a paid task in a category?
"""
from typing import Any, Dict

from .logging import logger
from .models import BadgeLevel, TaskDifficulty
from .ledger import calculate_badge_level
from .validators import normalize_category

# Tiers accepted for each task difficulty
DIFFICULTY_REQUIREMENTS = {
    TaskDifficulty.BEGINNER: (BadgeLevel.BRONZE, BadgeLevel.SILVER, BadgeLevel.GOLD, BadgeLevel.PLATINUM),
    TaskDifficulty.INTERMEDIATE: (BadgeLevel.SILVER, BadgeLevel.GOLD, BadgeLevel.PLATINUM),
    TaskDifficulty.ADVANCED: (BadgeLevel.GOLD, BadgeLevel.PLATINUM),
    TaskDifficulty.EXPERT: (BadgeLevel.PLATINUM,),
}

# Unknown difficulties fail open to the beginner policy
DEFAULT_REQUIREMENT = DIFFICULTY_REQUIREMENTS[TaskDifficulty.BEGINNER]


def can_apply(worker_id: str, category: str, task_difficulty: str, store) -> Dict[str, Any]:
    """
    Check if a worker can apply to a task based on their category badge.

    The tier is recomputed from the badge's counters rather than read from
    the cached badgeLevel.

    Args:
        worker_id: The worker's ID
        category: The task's category
        task_difficulty: beginner / intermediate / advanced / expert
        store: badge store providing get(worker_id, category)

    Returns:
        dict: {'allowed': bool, 'reason': str, 'badgeLevel': str or None}
    """
    category = normalize_category(category)
    difficulty = str(task_difficulty or '').strip().lower()
    badge = store.get(worker_id, category)

    if badge is None:
        allowed = difficulty == TaskDifficulty.BEGINNER
        return {
            'allowed': allowed,
            'badgeLevel': None,
            'reason': 'Can apply to beginner tasks without badge' if allowed
            else f'Need to earn a badge in {category} first',
        }

    level = calculate_badge_level(badge.tasks_completed, badge.average_rating)
    if level != badge.badge_level:
        logger.warning(f"Stored badge level {badge.badge_level} for {worker_id}/{category} "
                       f"differs from recomputed {level}")

    known = difficulty in DIFFICULTY_REQUIREMENTS
    allowed_levels = DIFFICULTY_REQUIREMENTS.get(difficulty, DEFAULT_REQUIREMENT)
    allowed = level in allowed_levels

    if allowed:
        reason = f'Has {level} badge in {category}'
        if not known:
            reason += f' (unrecognized difficulty "{task_difficulty}", any badge accepted)'
    else:
        reason = f'Need {allowed_levels[0]} or higher badge for {difficulty} tasks'

    return {'allowed': allowed, 'badgeLevel': level, 'reason': reason}
