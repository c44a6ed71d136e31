from rest_framework import generics, permissions
from rest_framework_simplejwt import views as jwt_views
from drf_yasg.utils import swagger_auto_schema

from . import serializers as my_serializers


class CustomTokenObtainPairView(jwt_views.TokenObtainPairView):
    serializer_class = my_serializers.CustomTokenObtainPairSerializer


class UserProfileRetrieveAPIView(generics.RetrieveAPIView):
    """Return the identity the bearer token resolves to."""
    serializer_class = my_serializers.UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(operation_summary="Current user")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_object(self):
        return self.request.user
