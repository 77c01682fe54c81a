"""URL declarations for the ledger app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import CreditViewSet, PayoutViewSet

router = SimpleRouter()
router.register(r'payouts', PayoutViewSet, basename='payout')
router.register(r'', CreditViewSet, basename='credit')

urlpatterns = [
    path('', include(router.urls)),
]
