import logging

from rest_framework import generics, permissions, status, views
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema

from escrow.services import EscrowSettlement
from .ledger import Ledger
from .serializers import BalanceSerializer, PayoutSerializer, TransactionSerializer


logger = logging.getLogger(__name__)


class TransactionListView(generics.ListAPIView):
    """Ledger entries where the caller is the payer or the payee, newest first."""
    serializer_class = TransactionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['type', 'status', 'job']

    def get_queryset(self):
        return Ledger().entries_for_user(self.request.user)


class BalanceView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Available balance derived from the ledger",
        responses={200: BalanceSerializer()}
    )
    def get(self, request):
        available = Ledger().available_balance(request.user)
        return Response(BalanceSerializer({'available_balance': available}).data)


class PayoutView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Withdraw from the available balance",
        request_body=PayoutSerializer,
        responses={201: TransactionSerializer(), 400: "Insufficient balance"}
    )
    def post(self, request):
        serializer = PayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = EscrowSettlement().payout(request.user, serializer.validated_data['amount'])
        return Response(TransactionSerializer(entry).data, status=status.HTTP_201_CREATED)
