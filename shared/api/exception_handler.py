"""DRF exception handler that turns domain errors into JSON error bodies."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):  # type: ignore
    """
    Map ``DomainError`` subclasses to ``{"detail": message}`` with the
    status code carried by the exception class.

    Everything else is left to DRF; exceptions DRF does not know about
    propagate and end up as a 500.
    """
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.warning(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response({"detail": exc.message}, status=exc.status_code)
    return drf_exception_handler(exc, context)
