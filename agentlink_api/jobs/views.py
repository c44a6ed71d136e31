from rest_framework import generics, permissions, status, views
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from agentlink_api.middleware import client_ip
from . import serializers as my_serializers
from .filters import JobFilter
from .models import CheckIn, Job
from .permissions import IsJobParticipant
from .services import JobService


job_id_param = openapi.Parameter(
    'pk',
    openapi.IN_PATH,
    description="Job ID",
    type=openapi.TYPE_INTEGER,
)


class JobListCreateAPIView(generics.ListCreateAPIView):
    """
    GET lists the marketplace (open jobs unless a status filter is given).
    POST creates a job owned by the caller.
    """
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = JobFilter
    ordering_fields = ['scheduled_date', 'fee', 'created_at']
    ordering = ['scheduled_date']

    def get_queryset(self):
        queryset = Job.objects.select_related('poster', 'claimer')
        if 'status' not in self.request.query_params:
            queryset = queryset.filter(status=Job.OPEN)
        return queryset

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return my_serializers.JobCreateSerializer
        return my_serializers.JobSerializer

    @swagger_auto_schema(
        operation_summary="Post a new job",
        request_body=my_serializers.JobCreateSerializer,
        responses={201: my_serializers.JobSerializer(), 400: "Validation error"}
    )
    def post(self, request, *args, **kwargs):
        serializer = my_serializers.JobCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = JobService().create_job(poster=request.user, **serializer.validated_data)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_201_CREATED)


class JobDetailAPIView(generics.RetrieveAPIView):
    serializer_class = my_serializers.JobSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    queryset = Job.objects.select_related('poster', 'claimer')


class MyPostedJobsAPIView(generics.ListAPIView):
    serializer_class = my_serializers.JobSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = JobFilter

    def get_queryset(self):
        return Job.objects.select_related('poster', 'claimer').filter(poster=self.request.user).order_by('-created_at')


class MyClaimedJobsAPIView(generics.ListAPIView):
    serializer_class = my_serializers.JobSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = JobFilter

    def get_queryset(self):
        return Job.objects.select_related('poster', 'claimer').filter(claimer=self.request.user).order_by('scheduled_date')


class JobCheckInListAPIView(generics.ListAPIView):
    serializer_class = my_serializers.CheckInSerializer
    permission_classes = [permissions.IsAuthenticated, IsJobParticipant]
    filter_backends = []

    def get_queryset(self):
        job = generics.get_object_or_404(Job, pk=self.kwargs['pk'])
        self.check_object_permissions(self.request, job)
        return CheckIn.objects.filter(job=job)


class ClaimJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Claim an open job",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.JobSerializer(), 404: "Not found", 409: "Not claimable", 503: "Processor unavailable"}
    )
    def post(self, request, pk):
        job = JobService().claim(pk, request.user)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_200_OK)


class UnclaimJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Release a claimed job back to the marketplace",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.JobSerializer(), 403: "Forbidden", 409: "Invalid transition"}
    )
    def post(self, request, pk):
        job = JobService().unclaim(pk, request.user)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_200_OK)


class JobCheckoutAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Client secret for paying the escrow hold",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.CheckoutSerializer(), 403: "Forbidden", 409: "No active hold"}
    )
    def get(self, request, pk):
        job, client_secret = JobService().checkout_secret(pk, request.user)
        data = {'job_id': job.id, 'amount': job.fee, 'client_secret': client_secret}
        return Response(my_serializers.CheckoutSerializer(data).data, status=status.HTTP_200_OK)


class ConfirmPaymentAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Confirm the poster's escrow hold after checkout",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.JobSerializer(), 403: "Forbidden", 409: "Payment not ready"}
    )
    def post(self, request, pk):
        job = JobService().confirm_payment(pk, request.user)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_200_OK)


class CheckInJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Geofenced check-in at the property",
        manual_parameters=[job_id_param],
        request_body=my_serializers.LocationSerializer,
        responses={200: my_serializers.PresenceResultSerializer(), 400: "Missing coordinates", 403: "Forbidden"}
    )
    def post(self, request, pk):
        serializer = my_serializers.LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = JobService().check_in(
            pk, request.user,
            serializer.validated_data['latitude'],
            serializer.validated_data['longitude'],
            ip_address=client_ip(request),
        )
        data = my_serializers.PresenceResultSerializer(result).data
        if not result.verified:
            data['detail'] = "Not in range of the property."
        return Response(data, status=status.HTTP_200_OK)


class CheckOutJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Geofenced check-out at the property",
        manual_parameters=[job_id_param],
        request_body=my_serializers.LocationSerializer,
        responses={200: my_serializers.PresenceResultSerializer(), 400: "Missing coordinates", 403: "Forbidden"}
    )
    def post(self, request, pk):
        serializer = my_serializers.LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = JobService().check_out(
            pk, request.user,
            serializer.validated_data['latitude'],
            serializer.validated_data['longitude'],
            ip_address=client_ip(request),
        )
        data = my_serializers.PresenceResultSerializer(result).data
        if not result.verified:
            data['detail'] = "Not in range of the property."
        return Response(data, status=status.HTTP_200_OK)


class CompleteJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Complete a job and release escrow to the claimer",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.JobSerializer(), 403: "Forbidden", 409: "Invalid transition or payment not ready"}
    )
    def post(self, request, pk):
        job = JobService().complete(pk, request.user)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_200_OK)


class CancelJobAPIView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Cancel an open or claimed job and void its hold",
        manual_parameters=[job_id_param],
        responses={200: my_serializers.JobSerializer(), 403: "Forbidden", 409: "Invalid transition"}
    )
    def post(self, request, pk):
        job = JobService().cancel(pk, request.user)
        return Response(my_serializers.JobSerializer(job).data, status=status.HTTP_200_OK)
