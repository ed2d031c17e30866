"""
Serializers para gestión de productos
"""
from django.db.models import Count
from rest_framework import serializers

from ..models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Serializer para crear y editar productos del catálogo"""

    class Meta:
        model = Product
        fields = "__all__"
        read_only_fields = ["created_at", "updated_at", "created_by"]
        # La unicidad (name, category) se valida en validate() tras normalizar
        validators = []

    def validate_name(self, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise serializers.ValidationError("El nombre no puede estar vacío.")
        return value

    def validate(self, attrs):
        name = attrs.get("name", getattr(self.instance, "name", None))
        category = attrs.get("category", getattr(self.instance, "category", None))
        duplicates = Product.objects.filter(name=name, category=category)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({"name": "Ya existe un producto con ese nombre en la categoría."})
        return attrs


class ProductReadSerializer(ProductSerializer):
    """Producto con unidades vendidas"""
    units_sold = serializers.SerializerMethodField()

    def get_units_sold(self, obj):
        if hasattr(obj, "sales_count"):
            return obj.sales_count
        return obj.sales.aggregate(total=Count("id"))["total"]
