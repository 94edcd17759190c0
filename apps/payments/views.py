from rest_framework import generics
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from apps.accounts.services import UserService
from apps.utils.exceptions import ValidationFailed
from apps.utils.responses import success_response

from .serializers import PaymentMethodSerializer
from .services import PaymentMethodService


class PaymentMethodView(generics.GenericAPIView):
    """
    GET    /api/payment-methods[?userId=]
    POST   /api/payment-methods
    PUT    /api/payment-methods   {id, ...}
    DELETE /api/payment-methods?id=

    Customers manage their own methods; admins may pass userId.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentMethodSerializer

    def _target_user(self, request, user_id):
        if not user_id or str(user_id) == str(request.user.id):
            return request.user
        if not request.user.is_admin:
            raise PermissionDenied("You can only manage your own payment methods")
        return UserService.get_user(user_id)

    def _scope(self, request):
        # Admins can reach any method by id
        return None if request.user.is_admin else request.user

    def get(self, request):
        user = self._target_user(request, request.query_params.get("userId"))
        methods = PaymentMethodService.list_for_user(user)
        return success_response(PaymentMethodSerializer(methods, many=True).data)

    def post(self, request):
        user = self._target_user(request, request.data.get("userId"))

        serializer = PaymentMethodSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        method = PaymentMethodService.create_method(user, **serializer.validated_data)
        return success_response(
            PaymentMethodSerializer(method).data,
            message="Payment method created successfully",
        )

    def put(self, request):
        method_id = request.data.get("id")
        if not method_id:
            raise ValidationFailed("Payment method ID is required")

        method = PaymentMethodService.get_method(method_id, user=self._scope(request))
        serializer = PaymentMethodSerializer(method, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        method = PaymentMethodService.update_method(method, **serializer.validated_data)
        return success_response(
            PaymentMethodSerializer(method).data,
            message="Payment method updated successfully",
        )

    def delete(self, request):
        method_id = request.query_params.get("id")
        if not method_id:
            raise ValidationFailed("Payment method ID is required")

        method = PaymentMethodService.get_method(method_id, user=self._scope(request))
        PaymentMethodService.delete_method(method)
        return success_response(message="Payment method deleted successfully")
