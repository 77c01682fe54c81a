"""API views for the medicine catalogue and orders."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsAdminOrReadOnly

from . import services
from .filters import MedicineFilterSet, OrderFilterSet
from .models import Medicine, Order
from .serializers import (
    CancelSerializer,
    MedicineSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    RestockSerializer,
)


class MedicineViewSet(viewsets.ModelViewSet):
    """Medicine catalogue. Shoppers see what is in stock; admins manage everything."""

    serializer_class = MedicineSerializer
    permission_classes = [IsAdminOrReadOnly]
    lookup_value_regex = r"\d+"
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = MedicineFilterSet
    ordering_fields = ["price", "name", "created_at"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        if user.is_authenticated and user.is_admin():
            return Medicine.objects.all()
        if self.action == "list":
            return services.in_stock()
        return Medicine.objects.filter(is_active=True)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_medicine(instance)

    @action(detail=True, methods=["post"])
    def restock(self, request, pk=None):  # type: ignore
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        medicine = services.restock(self.get_object(), serializer.validated_data["quantity"])
        return Response(MedicineSerializer(medicine).data)


class OrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Own orders; admins see and manage all of them."""

    serializer_class = OrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilterSet

    def get_queryset(self):  # type: ignore
        qs = Order.objects.prefetch_related("items__medicine").all()
        if not self.request.user.is_admin():
            qs = qs.filter(customer=self.request.user)
        return qs

    def get_permissions(self):  # type: ignore
        if self.action in ("set_status", "stats"):
            return [IsAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        lines = services.order_lines(data.pop("items"))
        charges = services.Charges(
            **{key: data.pop(key) for key in ("shipping_cost", "tax_amount", "discount_amount") if key in data}
        )
        order = services.create_order(request.user, lines, services.ShippingDetails(**data), charges)
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.cancel_order(int(pk), request.user, serializer.validated_data.get("reason", ""))
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.update_order_status(
            int(pk),
            serializer.validated_data["status"],
            serializer.validated_data.get("notes", ""),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.order_stats())
