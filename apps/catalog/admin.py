# apps/catalog/admin.py
from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "parent", "created_at")
    list_filter = ("parent",)
    search_fields = ("name",)
    ordering = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock_quantity", "updated_at")
    search_fields = ("name", "description")
    list_filter = ("category",)
    list_editable = ("price", "stock_quantity")
    readonly_fields = ("created_at", "updated_at")
