"""
Submission Gatekeeper - decides whether a trial submission may go to scoring.

Flow:
0. Sanitize submitted work and worker profile (always runs, result goes
   into outcome.submission for storage)
1. Structural checks (all collected, no short-circuit)
2. Task exists and is active (short-circuits category validation)
3. Category-specific validation (on the raw payload; sanitizing truncates)
4. Duplicate suppression for durable workers

Rate limiting happens before this runs (see rate_limit.py).
"""
import re
from dataclasses import replace
from numbers import Number
from typing import Optional

from .config import config
from .identity import is_durable_worker
from .logging import logger
from .models import ErrorCode, Submission, ValidationOutcome
from .sanitizer import sanitize_submitted_work, sanitize_worker_data
from .validators import normalize_category, validate_category

_EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
_MOBILE_PATTERN = re.compile(r'^[6-9]\d{9}$')


class SubmissionGatekeeper:
    """
    Orchestrates validation of one trial submission.

    Args:
        task_lookup: provides ``get_task(task_id) -> TrialTask | None``
        submission_history: provides
            ``has_recent_submission(worker_id, task_id, window_hours) -> bool``
    """

    def __init__(self, task_lookup, submission_history,
                 duplicate_window_hours: Optional[int] = None,
                 max_time_spent: Optional[int] = None):
        self.task_lookup = task_lookup
        self.submission_history = submission_history
        self.duplicate_window_hours = duplicate_window_hours or config.DUPLICATE_WINDOW_HOURS
        self.max_time_spent = max_time_spent or config.MAX_TIME_SPENT_MINUTES

    def accept_submission(self, submission: Submission) -> ValidationOutcome:
        """
        Validate a submission.

        The returned outcome carries the sanitized submission in
        ``outcome.submission`` whether or not it is valid.
        """
        logger.info(f"Validating trial task submission: {submission.task_id}")
        outcome = ValidationOutcome()

        sanitized_work = sanitize_submitted_work(submission.submitted_work)
        outcome.submission = replace(
            submission,
            submitted_work=sanitized_work,
            worker_data=sanitize_worker_data(submission.worker_data) if submission.worker_data else None,
        )

        self._check_structure(submission, outcome)

        task = None
        if submission.task_id and isinstance(submission.task_id, str):
            task = self.task_lookup.get_task(submission.task_id)
            if task is None:
                outcome.add_error('Trial task not found', ErrorCode.TASK_NOT_FOUND)
            elif not task.is_active:
                outcome.add_error('Trial task is not currently active', ErrorCode.TASK_INACTIVE)

        if task is not None and task.is_active:
            category = task.category or submission.category
            if (submission.category and task.category
                    and normalize_category(submission.category) != normalize_category(task.category)):
                outcome.add_warning(
                    f'Submission category {submission.category} does not match task category '
                    f'{task.category}; validating as {task.category}'
                )
            raw_work = submission.submitted_work if isinstance(submission.submitted_work, dict) else {}
            outcome.merge(validate_category(category, raw_work))

        if is_durable_worker(submission.worker_id) and submission.task_id:
            if self.submission_history.has_recent_submission(
                    submission.worker_id, submission.task_id, self.duplicate_window_hours):
                outcome.add_error(
                    'You have already submitted this trial task today. Please try a different task.',
                    ErrorCode.DUPLICATE_SUBMISSION,
                )

        if outcome.valid:
            logger.info(f"Trial submission validation passed ({len(outcome.warnings)} warnings)")
        else:
            logger.info(f"Trial submission validation failed: {outcome.errors}")
        return outcome

    def _check_structure(self, submission: Submission, outcome: ValidationOutcome) -> None:
        if not submission.task_id or not isinstance(submission.task_id, str):
            outcome.add_error('Valid task ID is required', ErrorCode.INVALID_INPUT)

        if not isinstance(submission.submitted_work, dict) or not submission.submitted_work:
            outcome.add_error('Submitted work data is required', ErrorCode.INVALID_INPUT)

        time_spent = submission.time_spent
        if (isinstance(time_spent, bool) or not isinstance(time_spent, Number)
                or not 0 <= time_spent <= self.max_time_spent):
            outcome.add_error(
                f'Time spent must be between 0 and {self.max_time_spent} minutes',
                ErrorCode.INVALID_INPUT,
            )

        worker_data = submission.worker_data
        if worker_data is not None and not isinstance(worker_data, dict):
            outcome.add_error('Worker data must be an object', ErrorCode.INVALID_INPUT)
        elif worker_data:
            self._check_worker_data(worker_data, outcome)

        if submission.performance_metrics is not None and not isinstance(submission.performance_metrics, dict):
            outcome.add_error('Performance metrics must be an object', ErrorCode.INVALID_INPUT)

    @staticmethod
    def _check_worker_data(worker_data: dict, outcome: ValidationOutcome) -> None:
        name = worker_data.get('name')
        if name and (not isinstance(name, str) or len(name.strip()) < 2):
            outcome.add_error('Worker name must be at least 2 characters', ErrorCode.INVALID_INPUT)

        phone = worker_data.get('phone')
        if phone and not _MOBILE_PATTERN.match(re.sub(r'\D', '', str(phone))):
            outcome.add_error('Invalid mobile number format', ErrorCode.INVALID_INPUT)

        email = worker_data.get('email')
        if email and (not isinstance(email, str) or not _EMAIL_PATTERN.match(email.strip())):
            outcome.add_error('Invalid email format', ErrorCode.INVALID_INPUT)
