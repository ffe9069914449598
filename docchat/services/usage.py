"""
Usage recorder: token and cost accounting per API call
"""

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from docchat.core.config import settings
from docchat.models.settings import ApiUsage

logger = logging.getLogger(__name__)


def calculate_cost(tokens_used: int) -> int:
    """Cost in cents, rounded up"""
    return math.ceil(tokens_used * settings.cost_per_token)


def record_usage(
    db: Session,
    user_id: str,
    endpoint: str,
    status: str,
    tokens_used: int = 0,
    error_message: Optional[str] = None,
) -> Optional[ApiUsage]:
    """
    Store a usage row. Failures are logged and never raised to the caller.

    Returns:
        The stored ApiUsage, or None when recording failed
    """
    try:
        usage = ApiUsage(
            user_id=user_id,
            endpoint=endpoint,
            tokens_used=tokens_used,
            cost=calculate_cost(tokens_used),
            status=status,
            error_message=error_message,
        )
        db.add(usage)
        db.commit()
        return usage
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to record API usage for user {user_id}: {str(e)}")
        return None
