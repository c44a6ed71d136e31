from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import CustomUser


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Serializer for user login and token generation.

    Fields:
        - email (required)
        - password (required)
    Checks if account is active before issuing tokens.
    """
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        return token

    def validate(self, attrs):
        user = CustomUser.objects.filter(email=attrs.get('email')).first()
        if user is not None and not user.is_active:
            raise AuthenticationFailed("Your account is deactivated.")
        return super().validate(attrs)


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for lightweight user references.

    Used when embedding poster/claimer details in job payloads.
    """
    class Meta:
        model = CustomUser
        fields = ['id', 'first_name', 'last_name', 'email', 'phone_number', 'brokerage']
        read_only_fields = fields
