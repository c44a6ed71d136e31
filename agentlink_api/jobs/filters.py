from django_filters import rest_framework as filters

from .models import Job


class JobFilter(filters.FilterSet):
    min_fee = filters.NumberFilter(field_name='fee', lookup_expr='gte')
    scheduled_after = filters.IsoDateTimeFilter(field_name='scheduled_date', lookup_expr='gte')

    class Meta:
        model = Job
        fields = ['status', 'property_type']
