from django.urls import path

from . import views

urlpatterns = [
    path("", views.JobListCreateAPIView.as_view(), name="job-list-create"),
    path("mine/posted/", views.MyPostedJobsAPIView.as_view(), name="job-mine-posted"),
    path("mine/claimed/", views.MyClaimedJobsAPIView.as_view(), name="job-mine-claimed"),
    path("<int:pk>/", views.JobDetailAPIView.as_view(), name="job-detail"),
    path("<int:pk>/claim/", views.ClaimJobAPIView.as_view(), name="job-claim"),
    path("<int:pk>/unclaim/", views.UnclaimJobAPIView.as_view(), name="job-unclaim"),
    path("<int:pk>/checkout/", views.JobCheckoutAPIView.as_view(), name="job-checkout"),
    path("<int:pk>/confirm-payment/", views.ConfirmPaymentAPIView.as_view(), name="job-confirm-payment"),
    path("<int:pk>/check-in/", views.CheckInJobAPIView.as_view(), name="job-check-in"),
    path("<int:pk>/check-out/", views.CheckOutJobAPIView.as_view(), name="job-check-out"),
    path("<int:pk>/check-ins/", views.JobCheckInListAPIView.as_view(), name="job-check-ins"),
    path("<int:pk>/complete/", views.CompleteJobAPIView.as_view(), name="job-complete"),
    path("<int:pk>/cancel/", views.CancelJobAPIView.as_view(), name="job-cancel"),
]
