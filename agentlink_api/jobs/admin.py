from django.contrib import admin

from .models import CheckIn, Job


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ('id', 'property_address', 'poster', 'claimer', 'fee', 'status', 'escrow_held', 'payment_released', 'scheduled_date')
    list_filter = ('status', 'property_type', 'escrow_held', 'payment_released')
    search_fields = ('property_address', 'poster__email', 'claimer__email', 'external_payment_reference')
    readonly_fields = (
        'fee', 'platform_fee_amount', 'payout_amount', 'status', 'claim_generation',
        'claimer', 'external_payment_reference', 'escrow_held', 'payment_released',
    )


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ('id', 'job', 'user', 'type', 'distance_from_property', 'verified', 'timestamp')
    list_filter = ('type', 'verified')
    search_fields = ('user__email',)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False
