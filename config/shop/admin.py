from django.contrib import admin

from .models import AuditLog, Product, Sale, Warranty


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'brand', 'selling_price', 'stock_quantity', 'active')
    list_filter = ('category', 'active')
    search_fields = ('name', 'brand')


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'product_name', 'customer_name', 'salesman', 'total_amount',
        'has_warranty', 'warranty_status', 'warranty_end', 'sale_date',
    )
    list_filter = ('has_warranty', 'warranty_status', 'category')
    search_fields = ('product_name', 'customer_name', 'imei')
    readonly_fields = ('warranty_start', 'warranty_end', 'warranty_status', 'total_amount', 'ganji')


@admin.register(Warranty)
class WarrantyAdmin(admin.ModelAdmin):
    list_display = ('id', 'phone_name', 'customer_name', 'customer_email', 'warranty_period', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('customer_name', 'customer_email', 'imei_number')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'entity', 'entity_id', 'performed_by', 'created_at')
    list_filter = ('action', 'entity')
