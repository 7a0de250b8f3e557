"""
Fixed-window rate limiting for trial submissions.

Keyed on caller IP + worker id, counted with an atomic DynamoDB ADD so
concurrent Lambdas share one counter per window. Items expire through the
table's TTL on ``expiresAt``.
"""
import time
from dataclasses import dataclass
from typing import Optional

from botocore.exceptions import ClientError

from .config import config
from .dynamo import get_table
from .logging import logger


@dataclass
class RateLimitDecision:
    allowed: bool
    attempts: int
    limit: int
    retry_after: int = 0


class SubmissionRateLimiter:
    """Max N attempts per window for each (source IP, worker) pair."""

    def __init__(self, table=None, window_seconds: Optional[int] = None,
                 max_attempts: Optional[int] = None):
        self.table = table if table is not None else get_table(config.RATE_LIMIT_TABLE)
        self.window_seconds = window_seconds or config.RATE_LIMIT_WINDOW_SECONDS
        self.max_attempts = max_attempts or config.RATE_LIMIT_MAX_ATTEMPTS

    @staticmethod
    def build_key(source_ip: Optional[str], worker_id: Optional[str]) -> str:
        return f"{source_ip or 'unknown'}_{worker_id or 'anonymous'}"

    def hit(self, source_ip: Optional[str], worker_id: Optional[str],
            now: Optional[float] = None) -> RateLimitDecision:
        """
        Count one attempt and decide whether it is allowed.

        Args:
            source_ip: Caller network origin
            worker_id: Worker id from the request (may be provisional or absent)
            now: Epoch seconds, for tests

        Returns:
            RateLimitDecision; retry_after is seconds until the window resets
        """
        now = int(now if now is not None else time.time())
        window_start = now - (now % self.window_seconds)
        window_end = window_start + self.window_seconds
        limit_key = f"{self.build_key(source_ip, worker_id)}#{window_start}"

        try:
            response = self.table.update_item(
                Key={'limitKey': limit_key},
                UpdateExpression='ADD attempts :one SET expiresAt = if_not_exists(expiresAt, :exp)',
                ExpressionAttributeValues={':one': 1, ':exp': window_end},
                ReturnValues='UPDATED_NEW'
            )
        except ClientError as e:
            logger.error(f"Error updating rate limit counter {limit_key}: {e}")
            raise

        attempts = int(response.get('Attributes', {}).get('attempts', 1))
        if attempts <= self.max_attempts:
            return RateLimitDecision(True, attempts, self.max_attempts)

        logger.warning(f"Rate limit exceeded for {limit_key}: {attempts}/{self.max_attempts}")
        return RateLimitDecision(False, attempts, self.max_attempts, retry_after=window_end - now)
