from django.conf import settings
from django.db import models
from django.utils import timezone

from .core.warranty import WarrantyStatus, calculate


class Category(models.TextChoices):
    PHONES = "phones", "Teléfonos"
    ACCESSORIES = "accessories", "Accesorios"
    LAPTOPS = "laptops", "Laptops"


class Product(models.Model):
    """Producto del catálogo de la tienda

    Attributes:
        name (CharField): Nombre normalizado en minúsculas
        category (CharField): Categoría (teléfonos, accesorios, laptops)
        brand (CharField): Marca
        cost_price (DecimalField): Precio de compra
        selling_price (DecimalField): Precio de venta sugerido
        stock_quantity (PositiveIntegerField): Unidades disponibles
        active (BooleanField): Estado del producto
        created_at (DateTimeField): Fecha de creación
        updated_at (DateTimeField): Fecha de actualización
        created_by (CharField): Usuario que creó el producto
    """

    name = models.CharField(max_length=255)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.PHONES,
    )
    brand = models.CharField(max_length=100, blank=True)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    stock_quantity = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["name", "category"], name="unique_product_name_per_category"),
        ]

    def save(self, *args, **kwargs):
        # Evita duplicados por mayúsculas ("iPhone 13" vs "iphone 13")
        self.name = (self.name or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Warranty(models.Model):
    """Garantía registrada para un equipo vendido.

    Es un registro independiente de la venta; su creación dispara el correo
    de confirmación al cliente. El estado se calcula a partir de la fecha de
    registro y ``warranty_period`` (meses).
    """

    phone_name = models.CharField(max_length=255)
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=50)
    store_name = models.CharField(max_length=255)
    color = models.CharField(max_length=100)
    storage = models.CharField(max_length=50)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    imei_number = models.CharField(max_length=50)
    warranty_period = models.IntegerField(help_text="Duración de la garantía en meses")
    status = models.CharField(
        max_length=10,
        choices=WarrantyStatus.choices,
        default=WarrantyStatus.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "warranties"

    def __str__(self):
        return f"{self.phone_name} - {self.customer_name}"

    def warranty_result(self, now=None):
        return calculate(
            {"warranty_start": self.created_at, "warranty_months": self.warranty_period},
            now=now,
        )

    @staticmethod
    def expiry_from(result):
        """Fecha local de vencimiento de un resultado ya calculado."""
        end = result.warranty_end
        return timezone.localtime(end).date() if end else None

    @property
    def calculated_status(self) -> str:
        return self.warranty_result().warranty_status

    @property
    def expiry_date(self):
        return self.expiry_from(self.warranty_result())


class Sale(models.Model):
    """Venta registrada por un vendedor.

    Attributes:
        product (ForeignKey): Producto del catálogo (opcional)
        product_name (CharField): Nombre libre del producto, en minúsculas
        salesman (ForeignKey): Vendedor que registró la venta
        quantity / unit_price / selling_price / cost_price / offers: Importes
        total_amount (DecimalField): quantity * selling_price
        ganji (DecimalField): Ganancia de la línea
        has_warranty (BooleanField): Si la venta lleva garantía en línea
        warranty_start / warranty_end / warranty_status: Resultado del cálculo
        warranty_details (JSONField): Datos estructurados del equipo y cliente
        warranty (ForeignKey): Garantía registrada por separado (opcional)
    """

    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, blank=True, related_name="sales"
    )
    product_name = models.CharField(max_length=255, blank=True)
    salesman = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )
    customer_name = models.CharField(max_length=255, blank=True)
    customer_phone = models.CharField(max_length=50, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    selling_price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    offers = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    ganji = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    sale_date = models.DateTimeField()
    reference_store = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=20, choices=Category.choices, blank=True)

    # Datos del equipo
    phone_name = models.CharField(max_length=255, blank=True)
    imei = models.CharField(max_length=50, blank=True)
    color = models.CharField(max_length=100, blank=True)
    storage = models.CharField(max_length=50, blank=True)

    # Garantía en línea
    warranty_months = models.IntegerField(null=True, blank=True)
    has_warranty = models.BooleanField(default=False)
    warranty_start = models.DateTimeField(null=True, blank=True)
    warranty_end = models.DateTimeField(null=True, blank=True)
    warranty_status = models.CharField(
        max_length=10, choices=WarrantyStatus.choices, null=True, blank=True
    )
    warranty_details = models.JSONField(null=True, blank=True)
    warranty = models.ForeignKey(
        Warranty, on_delete=models.SET_NULL, null=True, blank=True, related_name="sales"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        ordering = ["-sale_date"]
        indexes = [
            models.Index(fields=["salesman", "sale_date"], name="shop_sale_salesma_6f0b2e_idx"),
            models.Index(fields=["has_warranty", "warranty_status"], name="shop_sale_has_war_9c4d1a_idx"),
        ]

    def __str__(self):
        return f"Sale #{self.pk} - {self.product_name or self.product}"


class AuditLog(models.Model):
    action = models.CharField(max_length=50)
    entity = models.CharField(max_length=50)
    entity_id = models.IntegerField()
    performed_by = models.CharField(max_length=150)
    created_at = models.DateTimeField(auto_now_add=True)
    extra_data = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action} {self.entity}#{self.entity_id}"
