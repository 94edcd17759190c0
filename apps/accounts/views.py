from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.utils.responses import success_response
from apps.utils.throttle import LoginRateThrottle

from .models import User
from .permissions import IsAdmin
from .serializers import LoginSerializer, RegisterSerializer, UserSerializer, UserWriteSerializer
from .services import AuthService, UserService


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.register(**serializer.validated_data)
        return success_response(UserSerializer(user).data, message="User created successfully")


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.authenticate(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
        )

        return Response({
            "success": True,
            "message": "Login successful",
            "token": result['token'],
            "user": UserSerializer(result['user']).data,
        }, status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data)


class UserViewSet(viewsets.GenericViewSet):
    """
    Admin user management.
    GET/POST /api/users, GET/PUT/DELETE /api/users/<id>
    """
    permission_classes = [IsAdmin]
    queryset = User.objects.all()
    serializer_class = UserSerializer

    def list(self, request):
        qs = User.objects.all().order_by("-created_at")
        search = request.query_params.get("search", "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search))

        page = self.paginate_queryset(qs)
        return self.get_paginated_response(UserSerializer(page, many=True).data)

    def create(self, request):
        serializer = UserWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response(UserSerializer(user).data, message="User created successfully")

    def retrieve(self, request, pk=None):
        return success_response(UserSerializer(UserService.get_user(pk)).data)

    def update(self, request, pk=None):
        user = UserService.get_user(pk)
        serializer = UserWriteSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response(UserSerializer(user).data, message="User updated successfully")

    partial_update = update

    def destroy(self, request, pk=None):
        UserService.delete_user(pk)
        return success_response(message="User deleted successfully")

