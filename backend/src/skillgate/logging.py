"""
Logging for the engine and its Lambda handlers.

Request bodies carry worker contact details (phone, email), so only the
routing part of an API Gateway event is ever logged.
"""
import logging
import json
import os

logger = logging.getLogger('skillgate')
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)

# Event keys safe to log as-is
_ROUTING_KEYS = ('httpMethod', 'resource', 'path', 'pathParameters', 'queryStringParameters')


def log_event(event: dict) -> None:
    """Log the route, parameters and caller of an API request."""
    try:
        summary = {k: event.get(k) for k in _ROUTING_KEYS if event.get(k) is not None}
        context = event.get('requestContext') or {}
        source_ip = (context.get('identity') or {}).get('sourceIp')
        if source_ip:
            summary['sourceIp'] = source_ip
        summary['authenticated'] = bool((context.get('authorizer') or {}).get('claims'))
        logger.info(f"Lambda event: {json.dumps(summary, default=str)}")
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Could not log event: {e}")
