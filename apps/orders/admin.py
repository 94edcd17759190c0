from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'quantity', 'price_per_unit')

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'status', 'total_amount', 'payment_method', 'created_at')
    list_filter = ('status', 'payment_method', 'created_at')
    search_fields = ('id', 'user__email', 'user__name', 'phone')
    inlines = [OrderItemInline]

    # Ledger rows are edited through the API; only status is adjustable here
    readonly_fields = (
        'id',
        'user',
        'total_amount',
        'shipping_address',
        'phone',
        'payment_method',
        'notes',
        'idempotency_key',
        'created_at',
        'updated_at',
    )
