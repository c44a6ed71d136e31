from django.urls import path

from .views import BalanceView, PayoutView, TransactionListView

urlpatterns = [
    path("transactions/", TransactionListView.as_view(), name="transaction-list"),
    path("balance/", BalanceView.as_view(), name="balance"),
    path("payouts/", PayoutView.as_view(), name="payout"),
]
