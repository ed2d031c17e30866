"""
Serializers para gestión de ventas
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from ..core.warranty import WarrantyDetails
from ..models import Category, Product, Sale, Warranty

DATE_INPUT_FORMATS = ["iso-8601", "%Y-%m-%d"]


class WarrantyDetailsSerializer(serializers.Serializer):
    """Datos del equipo y del cliente de una venta con garantía"""
    customer_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    imei = serializers.CharField(max_length=50, required=False, allow_blank=True)
    color = serializers.CharField(max_length=100, required=False, allow_blank=True)
    storage = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def to_internal_value(self, data):
        # Acepta "imei_number" de formularios antiguos
        if isinstance(data, dict) and "imei" not in data and "imei_number" in data:
            data = {**data, "imei": data["imei_number"]}
        return super().to_internal_value(data)

    def to_representation(self, instance):
        if isinstance(instance, dict):
            instance = WarrantyDetails.from_data(instance)
        return super().to_representation(instance)


class SaleWriteSerializer(serializers.ModelSerializer):
    """Serializer para crear y actualizar ventas"""
    product_id = serializers.PrimaryKeyRelatedField(
        source="product",
        queryset=Product.objects.filter(active=True),
        required=False,
        allow_null=True,
    )
    salesman_id = serializers.PrimaryKeyRelatedField(
        source="salesman",
        queryset=get_user_model().objects.filter(is_active=True),
        required=False,
        allow_null=True,
    )
    warranty_id = serializers.PrimaryKeyRelatedField(
        source="warranty",
        queryset=Warranty.objects.all(),
        required=False,
        allow_null=True,
    )
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    selling_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    cost_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    offers = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    category = serializers.ChoiceField(choices=Category.choices, required=False, allow_blank=True)
    sale_date = serializers.DateTimeField(input_formats=DATE_INPUT_FORMATS, required=False, allow_null=True)
    has_warranty = serializers.BooleanField(required=False)
    warranty_months = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    warranty_start = serializers.DateTimeField(
        input_formats=DATE_INPUT_FORMATS, required=False, allow_null=True
    )
    warranty_details = WarrantyDetailsSerializer(required=False, allow_null=True)

    class Meta:
        model = Sale
        fields = [
            "product_id",
            "product_name",
            "salesman_id",
            "warranty_id",
            "customer_name",
            "customer_phone",
            "quantity",
            "unit_price",
            "selling_price",
            "cost_price",
            "offers",
            "sale_date",
            "reference_store",
            "category",
            "phone_name",
            "imei",
            "color",
            "storage",
            "has_warranty",
            "warranty_months",
            "warranty_start",
            "warranty_details",
        ]

    def validate_product_name(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        if self.instance is None and not attrs.get("product") and not attrs.get("product_name"):
            raise serializers.ValidationError(
                {"product": "Se requiere product_id o product_name"}
            )
        return attrs


class SaleReadSerializer(serializers.ModelSerializer):
    """Serializer para leer datos de ventas"""
    product_id = serializers.IntegerField(read_only=True)
    salesman_id = serializers.IntegerField(read_only=True)
    salesman_name = serializers.SerializerMethodField()
    warranty_id = serializers.IntegerField(read_only=True)
    warranty_details = WarrantyDetailsSerializer(read_only=True)

    class Meta:
        model = Sale
        exclude = ["product", "salesman", "warranty"]

    def get_salesman_name(self, obj):
        if not obj.salesman:
            return None
        return obj.salesman.get_full_name() or obj.salesman.get_username()


class SaleWarrantyStatusSerializer(serializers.Serializer):
    """Estado de garantía de una venta evaluado contra el reloj"""
    has_warranty = serializers.BooleanField()
    warranty_months = serializers.IntegerField(allow_null=True)
    warranty_start = serializers.DateTimeField(allow_null=True)
    warranty_end = serializers.DateTimeField(allow_null=True)
    stored_status = serializers.CharField(allow_null=True)
    current_status = serializers.CharField(allow_null=True)
    is_active = serializers.BooleanField()
    days_remaining = serializers.IntegerField(allow_null=True)
