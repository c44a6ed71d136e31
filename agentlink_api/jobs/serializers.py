from decimal import Decimal

from rest_framework import serializers

from accounts.serializers import UserSerializer
from .geofence import quantize_coordinate
from .models import CheckIn, Job


class JobCreateSerializer(serializers.ModelSerializer):
    """
    Serializer for posters creating a job.

    Fields:
        - property_address, property_type, scheduled_date, scheduled_time,
          duration_minutes, fee (required inputs)
        - property_latitude / property_longitude (optional, but only together)
    The platform fee and payout are derived by the service, not accepted from input.
    """
    property_latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    property_longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))

    class Meta:
        model = Job
        fields = [
            'property_address', 'property_type', 'property_latitude', 'property_longitude',
            'scheduled_date', 'scheduled_time', 'duration_minutes', 'description',
            'special_instructions', 'fee',
        ]

    def validate_duration_minutes(self, value):
        if value <= 0:
            raise serializers.ValidationError("Duration must be at least one minute.")
        return value

    def validate(self, attrs):
        lat = attrs.get('property_latitude')
        lng = attrs.get('property_longitude')
        if (lat is None) != (lng is None):
            raise serializers.ValidationError("Latitude and longitude must be provided together.")
        if lat is not None:
            attrs['property_latitude'] = quantize_coordinate(lat)
            attrs['property_longitude'] = quantize_coordinate(lng)
        return attrs


class JobSerializer(serializers.ModelSerializer):
    """
    Read-only job representation, with embedded poster and claimer summaries.
    """
    poster = UserSerializer(read_only=True)
    claimer = UserSerializer(read_only=True)

    class Meta:
        model = Job
        fields = [
            'id', 'poster', 'claimer', 'property_address', 'property_type',
            'property_latitude', 'property_longitude', 'scheduled_date', 'scheduled_time',
            'duration_minutes', 'description', 'special_instructions',
            'fee', 'platform_fee_amount', 'payout_amount', 'status',
            'claimer_checked_in', 'claimer_checked_in_at', 'claimer_checked_out', 'claimer_checked_out_at',
            'escrow_held', 'payment_released',
            'created_at', 'updated_at', 'claimed_at', 'completed_at', 'cancelled_at',
        ]
        read_only_fields = fields


class LocationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)


class CheckInSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckIn
        fields = ['id', 'job', 'user', 'type', 'latitude', 'longitude', 'distance_from_property', 'verified', 'timestamp']
        read_only_fields = fields


class PresenceResultSerializer(serializers.Serializer):
    job = JobSerializer()
    check_in = CheckInSerializer()
    distance = serializers.FloatField()
    verified = serializers.BooleanField()
    outcome = serializers.CharField()


class CheckoutSerializer(serializers.Serializer):
    job_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    client_secret = serializers.CharField(allow_null=True)
