from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from apps.accounts.permissions import IsAdminOrReadOnly
from apps.utils.responses import success_response

from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer
from .services import CategoryService, ProductService


class CategoryViewSet(viewsets.GenericViewSet):
    """
    Categories ordered by name. Any signed-in user may read; admins write.
    """
    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def list(self, request):
        return success_response(CategorySerializer(self.get_queryset(), many=True).data)

    def create(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        return success_response(CategorySerializer(category).data, message="Category created successfully")

    def retrieve(self, request, pk=None):
        return success_response(CategorySerializer(CategoryService.get_category(pk)).data)

    def update(self, request, pk=None):
        category = CategoryService.get_category(pk)
        serializer = CategorySerializer(category, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        return success_response(CategorySerializer(category).data, message="Category updated successfully")

    partial_update = update

    def destroy(self, request, pk=None):
        CategoryService.delete_category(pk)
        return success_response(message="Category deleted successfully")


class ProductViewSet(viewsets.GenericViewSet):
    """
    Product master list with stock levels.
    GET ?search=&category=&page=&limit=
    """
    queryset = Product.objects.select_related("category").order_by("-created_at")
    serializer_class = ProductSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["category"]
    search_fields = ["name", "description"]

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        return self.get_paginated_response(ProductSerializer(page, many=True).data)

    def create(self, request):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        return success_response(ProductSerializer(product).data, message="Product created successfully")

    def retrieve(self, request, pk=None):
        return success_response(ProductSerializer(ProductService.get_product(pk)).data)

    def update(self, request, pk=None):
        product = ProductService.get_product(pk)
        serializer = ProductSerializer(product, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        return success_response(ProductSerializer(product).data, message="Product updated successfully")

    partial_update = update

    def destroy(self, request, pk=None):
        ProductService.delete_product(pk)
        return success_response(message="Product deleted successfully")
