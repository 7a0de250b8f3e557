"""
Configuration module for the skill-badge engine and its Lambda handlers.
Loads all environment variables needed by the platform.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    TRIAL_TASKS_TABLE = os.environ.get('TRIAL_TASKS_TABLE', '')
    SUBMISSIONS_TABLE = os.environ.get('SUBMISSIONS_TABLE', '')
    BADGES_TABLE = os.environ.get('BADGES_TABLE', '')
    WORKERS_TABLE = os.environ.get('WORKERS_TABLE', '')
    APPLICATIONS_TABLE = os.environ.get('APPLICATIONS_TABLE', '')
    RATE_LIMIT_TABLE = os.environ.get('RATE_LIMIT_TABLE', '')

    # SQS Queues
    SCORING_QUEUE_URL = os.environ.get('SCORING_QUEUE_URL', '')

    # Submission rate limiting (per source IP + worker)
    RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get('RATE_LIMIT_WINDOW_SECONDS', '900'))
    RATE_LIMIT_MAX_ATTEMPTS = int(os.environ.get('RATE_LIMIT_MAX_ATTEMPTS', '10'))

    # Submission gate
    DUPLICATE_WINDOW_HOURS = int(os.environ.get('DUPLICATE_WINDOW_HOURS', '24'))
    MAX_TIME_SPENT_MINUTES = int(os.environ.get('MAX_TIME_SPENT_MINUTES', '300'))

    # Worker ids with one of these prefixes belong to trial/anonymous flows
    PROVISIONAL_WORKER_PREFIXES = tuple(
        p.strip()
        for p in os.environ.get('PROVISIONAL_WORKER_PREFIXES', 'trial_,temp_').split(',')
        if p.strip()
    )

    # Badge ledger
    LEDGER_MAX_RETRIES = int(os.environ.get('LEDGER_MAX_RETRIES', '5'))
    LEADERBOARD_DEFAULT_LIMIT = int(os.environ.get('LEADERBOARD_DEFAULT_LIMIT', '10'))


config = Config()
