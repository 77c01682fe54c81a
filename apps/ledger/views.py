"""API views for credits and payouts."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsDoctor, IsPatient, IsVerifiedDoctor

from . import services
from .models import Payout
from .serializers import (
    AllocationSerializer,
    BalanceSerializer,
    CreditTransactionSerializer,
    EarningsSerializer,
    PayoutRequestSerializer,
    PayoutSerializer,
)

logger = logging.getLogger(__name__)


class CreditViewSet(viewsets.GenericViewSet):
    """Balance, ledger history and monthly allocation of the caller."""

    serializer_class = CreditTransactionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        return services.history(self.request.user)

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(self.get_queryset(), many=True).data)

    @action(detail=False, methods=["get"])
    def balance(self, request):
        return Response(BalanceSerializer(request.user).data)

    @action(detail=False, methods=["post"], permission_classes=[IsPatient])
    def allocate(self, request):
        serializer = AllocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        row = services.allocate_monthly(request.user, serializer.validated_data.get("plan"))
        payload = BalanceSerializer(request.user).data
        payload["allocated"] = row.amount if row is not None else 0
        return Response(payload, status=status.HTTP_201_CREATED if row is not None else status.HTTP_200_OK)

    @action(detail=False, methods=["get"], permission_classes=[IsVerifiedDoctor])
    def earnings(self, request):
        return Response(EarningsSerializer(services.doctor_earnings(request.user)).data)


class PayoutViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Doctors request payouts; admins approve them."""

    serializer_class = PayoutSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        qs = Payout.objects.select_related("doctor").all()
        user = self.request.user
        if not user.is_admin():
            qs = qs.filter(doctor_id=user.pk)
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsDoctor()]
        if self.action == "approve":
            return [IsAdmin()]
        return super().get_permissions()

    def create(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payout = services.request_payout(request.user, serializer.validated_data["paypal_email"])
        return Response(PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        payout = services.approve_payout(int(pk), request.user)
        return Response(PayoutSerializer(payout).data)
