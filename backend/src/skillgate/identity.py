"""
Worker identity classification.

Trial flows let people attempt a task before registering; those workers carry
a provisional id (``trial_...``/``temp_...``). Everything that depends on the
distinction goes through this module.
"""
from typing import Optional

from .config import config
from .logging import logger
from .models import ErrorCode


def is_provisional_worker(worker_id: Optional[str]) -> bool:
    """True for missing ids and ids using a provisional prefix."""
    if not worker_id:
        return True
    return str(worker_id).startswith(config.PROVISIONAL_WORKER_PREFIXES)


def is_durable_worker(worker_id: Optional[str]) -> bool:
    return not is_provisional_worker(worker_id)


def check_worker_session(worker_id: Optional[str], directory) -> dict:
    """
    Check that a durable worker exists and is active.

    Provisional workers always pass. `directory` must provide
    ``get_worker(worker_id) -> dict | None``.

    Returns:
        dict: {'ok': bool, 'code': ErrorCode or None, 'message': str}
    """
    if is_provisional_worker(worker_id):
        return {'ok': True, 'code': None, 'message': 'Provisional worker'}

    worker = directory.get_worker(worker_id)
    if not worker:
        logger.info(f"Worker {worker_id} not found")
        return {'ok': False, 'code': ErrorCode.WORKER_NOT_FOUND, 'message': 'Worker account not found'}

    if not worker.get('isActive', True):
        logger.info(f"Worker {worker_id} is inactive")
        return {'ok': False, 'code': ErrorCode.WORKER_INACTIVE, 'message': 'Worker account is not active'}

    return {'ok': True, 'code': None, 'message': 'Worker session valid'}
