from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'job', 'type', 'amount', 'payer', 'payee', 'status', 'created_at', 'settled_at')
    list_filter = ('type', 'status')
    search_fields = ('external_reference', 'payer__email', 'payee__email')
    readonly_fields = [field.name for field in Transaction._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
