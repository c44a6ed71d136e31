from decimal import Decimal

from rest_framework import serializers

from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = [
            'id', 'job', 'payer', 'payee', 'type', 'amount', 'platform_fee_amount', 'net_amount',
            'description', 'external_reference', 'status', 'created_at', 'settled_at',
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))


class BalanceSerializer(serializers.Serializer):
    available_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
