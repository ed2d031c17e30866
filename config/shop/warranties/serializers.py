"""
Serializers para garantías registradas
"""
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from ..models import Warranty


class WarrantyCreateSerializer(serializers.ModelSerializer):
    """Serializer para registrar una garantía; todos los campos son obligatorios"""
    warranty_period = serializers.IntegerField(min_value=0)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    class Meta:
        model = Warranty
        fields = [
            "phone_name",
            "customer_name",
            "customer_email",
            "customer_phone",
            "store_name",
            "color",
            "storage",
            "price",
            "imei_number",
            "warranty_period",
        ]


class WarrantyReadSerializer(serializers.ModelSerializer):
    """Garantía con estado y vencimiento calculados al momento de la consulta"""
    status = serializers.SerializerMethodField()
    stored_status = serializers.CharField(source="status", read_only=True)
    expiry_date = serializers.SerializerMethodField()

    class Meta:
        model = Warranty
        fields = [
            "id",
            "phone_name",
            "customer_name",
            "customer_email",
            "customer_phone",
            "store_name",
            "color",
            "storage",
            "price",
            "imei_number",
            "warranty_period",
            "status",
            "stored_status",
            "expiry_date",
            "created_at",
            "updated_at",
            "created_by",
        ]

    def to_representation(self, instance):
        # Estado y vencimiento salen del mismo cálculo
        self._result = instance.warranty_result()
        return super().to_representation(instance)

    @extend_schema_field(OpenApiTypes.STR)
    def get_status(self, obj):
        return self._result.warranty_status

    @extend_schema_field(OpenApiTypes.DATE)
    def get_expiry_date(self, obj):
        expiry = Warranty.expiry_from(self._result)
        return expiry.isoformat() if expiry else None
