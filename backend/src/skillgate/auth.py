"""
Authentication utilities for extracting caller info from API Gateway events.
"""
from typing import Optional


def get_user_sub(event: dict) -> Optional[str]:
    """
    Extract user sub (unique ID) from Cognito authorizer claims.

    Returns:
        User sub string or None if not authenticated
    """
    try:
        return event['requestContext']['authorizer']['claims']['sub']
    except (KeyError, TypeError):
        return None


def get_user_groups(event: dict) -> list:
    """Extract user groups (requester, worker, admin) from Cognito claims."""
    try:
        groups = event['requestContext']['authorizer']['claims'].get('cognito:groups', '')
        if isinstance(groups, str):
            return groups.split(',') if groups else []
        return groups or []
    except (KeyError, TypeError):
        return []


def is_admin(event: dict) -> bool:
    """Check if user belongs to admin group."""
    return 'admin' in get_user_groups(event)


def is_requester(event: dict) -> bool:
    """Check if user belongs to requester group."""
    return 'requester' in get_user_groups(event)


def get_source_ip(event: dict) -> Optional[str]:
    """Caller network origin as seen by API Gateway."""
    try:
        return event['requestContext']['identity']['sourceIp']
    except (KeyError, TypeError):
        return None
