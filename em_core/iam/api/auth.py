# em_core/iam/api/auth.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from em_core.common.api.views import ContextAPIView
from em_core.common.permissions import AnyRole
from em_core.iam.api.serializers import LoginRequestSerializer, LoginResponseSerializer, MessageSerializer
from em_core.iam.services import AuthenticationService


class LoginView(ContextAPIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: LoginResponseSerializer},
        tags=["Authentication"],
    )
    def post(self, request):
        ser = LoginRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = AuthenticationService.login(
            username=ser.validated_data["username"],
            password=ser.validated_data["password"],
            ctx=request.ctx,
        )
        return Response(LoginResponseSerializer(result).data, status=status.HTTP_200_OK)


class LogoutView(ContextAPIView):
    permission_classes = [AnyRole]

    @extend_schema(request=None, responses={200: MessageSerializer}, tags=["Authentication"])
    def post(self, request):
        AuthenticationService.logout(token=getattr(request, "token", ""))
        return Response({"message": "Logged out successfully"}, status=status.HTTP_200_OK)
