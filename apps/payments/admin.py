from django.contrib import admin
from .models import PaymentMethod


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "provider", "card_number", "is_default", "created_at")
    list_filter = ("type", "is_default")
    search_fields = ("user__email", "provider", "holder_name")
    readonly_fields = ("card_number", "created_at", "updated_at")
