"""
Celery tasks for chat app.

This module defines background tasks for:
- Request chat reconciliation

Related files:
    - services.py: ChatProvisioningService
    - migrations/0002_add_chat_reconciliation_schedule.py: Beat schedule

Usage:
    from chat.tasks import reconcile_request_chats

    reconcile_request_chats.delay()
"""

import logging

from celery import shared_task
from django.db import DatabaseError

from chat.constants import PROVISIONING_CONFIG

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def reconcile_request_chats(
    self, batch_size: int = PROVISIONING_CONFIG.RECONCILE_BATCH_SIZE
) -> int:
    """
    Create the chat of every transport request that lacks one.

    Scheduled hourly by django-celery-beat.

    Args:
        batch_size: Maximum number of requests handled in one run

    Returns:
        Number of chats created
    """
    from chat.services import ChatProvisioningService

    created = ChatProvisioningService.reconcile_missing_chats(batch_size=batch_size)
    logger.info(f"reconcile_request_chats created {created} chats")
    return created
