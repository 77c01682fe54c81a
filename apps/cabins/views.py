"""API views for cabins, their calendars and bookings."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsAdminOrReadOnly

from . import services
from .filters import CabinBookingFilterSet, CabinFilterSet
from .models import Cabin, CabinAvailability, CabinBooking
from .serializers import (
    BookingStatusSerializer,
    CabinAvailabilitySerializer,
    CabinBookingCreateSerializer,
    CabinBookingSerializer,
    CabinSerializer,
    CancelSerializer,
    DateRangeSerializer,
    PaymentSerializer,
    StayQuerySerializer,
)


class CabinViewSet(viewsets.ModelViewSet):
    """Cabin catalogue; writes are admin-only."""

    serializer_class = CabinSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = CabinFilterSet
    ordering_fields = ["price_per_night", "capacity", "created_at"]

    def get_queryset(self):  # type: ignore
        qs = Cabin.objects.all()
        user = self.request.user
        if not (user.is_authenticated and user.is_admin()):
            qs = qs.filter(is_active=True)
        return qs

    def list(self, request, *args, **kwargs):  # type: ignore
        amenities = [item for item in request.query_params.get("amenities", "").split(",") if item]
        if not amenities:
            return super().list(request, *args, **kwargs)
        cabins = services.filter_by_amenities(self.filter_queryset(self.get_queryset()), amenities)
        return Response(self.get_serializer(cabins, many=True).data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_cabin(instance)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        """``?check_in=&check_out=`` -> whether the stay can be booked."""
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = services.check_availability(
            self.get_object(),
            query.validated_data["check_in"],
            query.validated_data["check_out"],
        )
        return Response({"available": result.available, "reason": result.reason})

    @action(detail=True, methods=["get"], url_path="free-ranges")
    def free_ranges(self, request, pk=None):  # type: ignore
        ranges = services.free_ranges(self.get_object())
        return Response(
            {
                "has_restrictions": ranges is not None,
                "available_ranges": None if ranges is None else DateRangeSerializer(ranges, many=True).data,
            }
        )

    @action(detail=True, methods=["get"], url_path="disabled-dates")
    def disabled_dates(self, request, pk=None):  # type: ignore
        cabin = self.get_object()
        return Response({"disabled_dates": [day.isoformat() for day in services.disabled_dates(cabin)]})

    @action(detail=False, methods=["get"])
    def available(self, request):
        """Cabins free for ``?check_in=&check_out=``, honouring the list filters."""
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        cabins = services.available_cabins(
            query.validated_data["check_in"],
            query.validated_data["check_out"],
            self.filter_queryset(self.get_queryset()),
        )
        return Response(self.get_serializer(cabins, many=True).data)


class CabinCalendarMixin:
    """Resolves the cabin from the URL for nested calendar routes."""

    cabin_lookup_url_kwarg = "cabin_id"

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        self.cabin_object = get_object_or_404(Cabin, pk=kwargs.get(self.cabin_lookup_url_kwarg))

    def get_cabin(self) -> Cabin:
        return self.cabin_object


class CabinAvailabilityViewSet(CabinCalendarMixin, viewsets.ModelViewSet):
    """Admin management of a cabin's availability periods."""

    serializer_class = CabinAvailabilitySerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):  # type: ignore
        return CabinAvailability.objects.filter(cabin=self.get_cabin()).order_by("start_date")

    def perform_create(self, serializer):  # type: ignore
        data = serializer.validated_data
        serializer.instance = services.create_period(
            self.get_cabin(),
            data["start_date"],
            data["end_date"],
            data.get("reason", ""),
        )

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.update_period(serializer.instance, **serializer.validated_data)


class CabinBookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Own cabin bookings; admins see and manage all of them."""

    serializer_class = CabinBookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"
    filter_backends = [DjangoFilterBackend]
    filterset_class = CabinBookingFilterSet

    def get_queryset(self):  # type: ignore
        qs = CabinBooking.objects.select_related("cabin", "patient").all()
        if not self.request.user.is_admin():
            qs = qs.filter(patient=self.request.user)
        return qs

    def get_permissions(self):  # type: ignore
        if self.action in ("set_status", "payment", "stats"):
            return [IsAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = CabinBookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        booking = services.book_cabin(
            data.pop("cabin"),
            data.pop("check_in_date"),
            data.pop("check_out_date"),
            request.user,
            services.GuestDetails(**data),
        )
        return Response(CabinBookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_cabin_booking(int(pk), request.user, serializer.validated_data.get("reason", ""))
        return Response(CabinBookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.update_booking_status(
            int(pk),
            serializer.validated_data["status"],
            serializer.validated_data.get("notes", ""),
        )
        return Response(CabinBookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def payment(self, request, pk=None):  # type: ignore
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.record_payment(
            int(pk),
            serializer.validated_data["payment_status"],
            serializer.validated_data.get("paid_amount"),
        )
        return Response(CabinBookingSerializer(booking).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.booking_stats())
