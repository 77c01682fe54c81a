"""Celery tasks for the credit ledger."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from shared.domain.exceptions import DomainError

from . import services

logger = logging.getLogger(__name__)


@shared_task(name="ledger.reconcile_balances")
def reconcile_balances() -> dict[str, int]:
    """Rebuild every cached balance that no longer matches its ledger sum."""

    repaired = services.reconcile_balances()
    if repaired:
        logger.warning(f"Reconciled {repaired} credit balances")
    return {"repaired": repaired}


@shared_task(name="ledger.allocate_monthly_credits")
def allocate_monthly_credits() -> dict[str, int]:
    """Grant this month's plan credits to every patient that has not had them."""

    User = get_user_model()
    allocated = 0
    failed = 0
    for user in User.objects.filter(role=User.Role.PATIENT, is_active=True).iterator():
        try:
            row = services.allocate_monthly(user)
        except DomainError as e:
            failed += 1
            logger.error(f"Monthly allocation failed for user {user.pk}: {e}")
            continue
        if row is not None:
            allocated += 1
    logger.info(f"Monthly allocation granted to {allocated} patients")
    return {"allocated": allocated, "failed": failed}
