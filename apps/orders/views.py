from rest_framework import generics
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from apps.accounts.permissions import IsAdmin, IsAdminOrOwner
from apps.accounts.services import UserService
from apps.utils.exceptions import ValidationFailed
from apps.utils.responses import success_response

from .serializers import (
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    OrderUpdateSerializer,
)
from .services import OrderService


def _idempotency_key(request):
    return request.headers.get("Idempotency-Key") or request.headers.get("X-Idempotency-Key")


class OrderListCreateView(generics.GenericAPIView):
    """
    GET    /api/orders?userId=&status=&page=&limit=
    POST   /api/orders                 (checkout; 409 if Idempotency-Key is reused
                                        with a different payload)
    PUT    /api/orders   {id, status}  (admin)
    DELETE /api/orders?id=             (admin)
    """
    serializer_class = OrderSerializer

    def get_permissions(self):
        if self.request.method in ("PUT", "DELETE"):
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get(self, request):
        qs = OrderService.list_orders(
            user_id=request.query_params.get("userId"),
            status=request.query_params.get("status"),
            viewer=request.user,
        )
        page = self.paginate_queryset(qs)
        return self.get_paginated_response(OrderSerializer(page, many=True).data)

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        user_id = data.pop("user_id", None) or request.user.id
        if str(user_id) != str(request.user.id):
            if not request.user.is_admin:
                raise PermissionDenied("You can only place orders for your own account")
            customer = UserService.get_user(user_id)
        else:
            customer = request.user

        _, payload = OrderService.place_order(
            customer,
            total_amount=data["total_amount"],
            shipping_address=data["shipping_address"],
            phone=data["phone"],
            payment_method=data["payment_method"],
            items=data["items"],
            notes=data.get("notes"),
            idempotency_key=_idempotency_key(request),
        )
        return success_response(payload, message="Order created successfully")

    def put(self, request):
        order_id = request.data.get("id")
        if not order_id:
            raise ValidationFailed("Order ID is required")

        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.update_status(order_id, serializer.validated_data["status"])
        return success_response(
            OrderService.read_back(order),
            message="Order updated successfully",
        )

    def delete(self, request):
        order_id = request.query_params.get("id")
        if not order_id:
            raise ValidationFailed("Order ID is required")

        OrderService.delete_order(order_id)
        return success_response(message="Order deleted successfully")


class OrderDetailView(generics.GenericAPIView):
    """
    GET /api/orders/<id>   owner or admin
    PUT /api/orders/<id>   admin; {status?, shipping_address?}
    """
    serializer_class = OrderDetailSerializer

    def get_permissions(self):
        if self.request.method == "PUT":
            return [IsAdmin()]
        return [IsAuthenticated(), IsAdminOrOwner()]

    def get(self, request, pk):
        order = OrderService.get_order(pk)
        self.check_object_permissions(request, order)
        return success_response(OrderDetailSerializer(order).data)

    def put(self, request, pk):
        serializer = OrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        OrderService.update_order(pk, **serializer.validated_data)
        return success_response(
            OrderService.get_order_detail(pk),
            message="Order updated successfully",
        )
