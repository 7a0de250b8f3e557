"""
Data models and constants for the skill-badge engine.
Based on the trial flow: Submitted → Validated → Scored → Badge awarded → Badge accumulated
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional


class TaskCategory:
    """Task categories that carry their own badge."""
    DATA_ENTRY = 'DATA_ENTRY'
    CONTENT = 'CONTENT'
    ORGANIZATION = 'ORGANIZATION'
    RESEARCH = 'RESEARCH'
    COMMUNICATION = 'COMMUNICATION'

    ALL = (DATA_ENTRY, CONTENT, ORGANIZATION, RESEARCH, COMMUNICATION)


class BadgeLevel:
    """Category badge tiers, lowest first."""
    BRONZE = 'BRONZE'
    SILVER = 'SILVER'
    GOLD = 'GOLD'
    PLATINUM = 'PLATINUM'

    ALL = (BRONZE, SILVER, GOLD, PLATINUM)


# Tier hierarchy for comparison (higher = more permissions)
BADGE_LEVEL_RANK = {
    BadgeLevel.BRONZE: 0,
    BadgeLevel.SILVER: 1,
    BadgeLevel.GOLD: 2,
    BadgeLevel.PLATINUM: 3,
}


class TaskDifficulty:
    """Difficulty of a paid task, used for badge gating."""
    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    EXPERT = 'expert'


class EarnedBy:
    """Provenance tags recorded on a badge at first award."""
    FREE_TASK = 'free_task_submission'
    TRIAL_TASK = 'trial_task_submission'
    REGULAR_TASK = 'regular_task'


class ApplicationStatus:
    """Paid task application statuses relevant to badge accounting."""
    SELECTED = 'Selected'
    COMPLETED = 'Completed'


class ErrorCode:
    """Machine-readable classification of blocking validation errors."""
    INVALID_INPUT = 'INVALID_INPUT'
    TASK_NOT_FOUND = 'TASK_NOT_FOUND'
    TASK_INACTIVE = 'TASK_INACTIVE'
    CONTENT = 'CONTENT'
    DUPLICATE_SUBMISSION = 'DUPLICATE_SUBMISSION'
    RATE_LIMITED = 'RATE_LIMITED'
    WORKER_NOT_FOUND = 'WORKER_NOT_FOUND'
    WORKER_INACTIVE = 'WORKER_INACTIVE'

    # Codes that mean "try a different task" rather than "fix your input"
    POLICY = (DUPLICATE_SUBMISSION, RATE_LIMITED)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_number(value):
    """DynamoDB hands numbers back as Decimal."""
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


@dataclass
class Submission:
    """A worker's attempt at a trial task, as received from the API layer."""
    task_id: Any
    worker_id: Optional[str]
    submitted_work: Any
    time_spent: Any
    category: Optional[str] = None
    worker_data: Any = None
    performance_metrics: Any = None

    @classmethod
    def from_request(cls, task_id: str, body: Dict[str, Any]) -> 'Submission':
        """Build a submission from a parsed request body."""
        return cls(
            task_id=task_id,
            worker_id=body.get('workerId'),
            submitted_work=body.get('submittedWork'),
            time_spent=body.get('timeSpent'),
            category=body.get('category'),
            worker_data=body.get('workerData'),
            performance_metrics=body.get('performanceMetrics'),
        )


@dataclass
class TrialTask:
    """Task metadata returned by the task lookup collaborator."""
    task_id: str
    category: Optional[str]
    is_active: bool
    time_limit: Optional[int] = None
    accuracy_threshold: Optional[float] = None
    difficulty: str = TaskDifficulty.BEGINNER

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'TrialTask':
        return cls(
            task_id=item['taskId'],
            category=item.get('category'),
            is_active=bool(item.get('isActive', False)),
            time_limit=_to_number(item.get('timeLimit')),
            accuracy_threshold=_to_number(item.get('accuracyThreshold')),
            difficulty=item.get('difficulty', TaskDifficulty.BEGINNER),
        )


@dataclass
class ValidationOutcome:
    """
    Result of validating a submission.

    Errors block acceptance; warnings are advisory only. `error_codes` runs
    parallel to `errors` so callers can tell policy rejections from input
    problems without parsing messages.
    """
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    submission: Optional[Submission] = None

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def is_policy_rejection(self) -> bool:
        return any(code in ErrorCode.POLICY for code in self.error_codes)

    def add_error(self, message: str, code: str = ErrorCode.CONTENT) -> None:
        self.errors.append(message)
        self.error_codes.append(code)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: 'ValidationOutcome') -> None:
        """Append another outcome's errors and warnings, keeping order."""
        self.errors.extend(other.errors)
        self.error_codes.extend(other.error_codes)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'errors': list(self.errors),
            'errorCodes': list(self.error_codes),
            'warnings': list(self.warnings),
        }


@dataclass
class CategoryBadge:
    """A worker's proficiency badge in one task category."""
    worker_id: str
    category: str
    badge_level: str = BadgeLevel.BRONZE
    tasks_completed: int = 0
    average_rating: Optional[float] = None
    total_earnings: Decimal = Decimal('0')
    earned_at: str = field(default_factory=utc_now_iso)
    earned_by: str = EarnedBy.REGULAR_TASK
    task_id: Optional[str] = None
    submission_quality: Optional[Dict[str, Any]] = None
    updated_at: Optional[str] = None

    def to_item(self) -> Dict[str, Any]:
        """Serialize to a DynamoDB item (camelCase, Decimal numbers, no nulls)."""
        item = {
            'workerId': self.worker_id,
            'category': self.category,
            'badgeLevel': self.badge_level,
            'tasksCompleted': self.tasks_completed,
            'totalEarnings': Decimal(str(self.total_earnings)),
            'earnedAt': self.earned_at,
            'earnedBy': self.earned_by,
            'updatedAt': self.updated_at or self.earned_at,
        }
        if self.average_rating is not None:
            item['averageRating'] = Decimal(str(round(self.average_rating, 4)))
        if self.task_id:
            item['taskId'] = self.task_id
        if self.submission_quality is not None:
            item['submissionQuality'] = {
                k: Decimal(str(v)) if isinstance(v, float) else v
                for k, v in self.submission_quality.items()
            }
        return item

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'CategoryBadge':
        rating = item.get('averageRating')
        quality = item.get('submissionQuality')
        return cls(
            worker_id=item['workerId'],
            category=item['category'],
            badge_level=item.get('badgeLevel', BadgeLevel.BRONZE),
            tasks_completed=int(item.get('tasksCompleted', 0)),
            average_rating=float(rating) if rating is not None else None,
            total_earnings=Decimal(str(item.get('totalEarnings', '0'))),
            earned_at=item.get('earnedAt') or utc_now_iso(),
            earned_by=item.get('earnedBy', EarnedBy.REGULAR_TASK),
            task_id=item.get('taskId'),
            submission_quality={k: _to_number(v) for k, v in quality.items()} if quality else None,
            updated_at=item.get('updatedAt'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """API representation."""
        return {
            'workerId': self.worker_id,
            'category': self.category,
            'badgeLevel': self.badge_level,
            'tasksCompleted': self.tasks_completed,
            'averageRating': self.average_rating,
            'totalEarnings': self.total_earnings,
            'earnedAt': self.earned_at,
            'earnedBy': self.earned_by,
        }
