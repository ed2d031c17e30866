"""
Rutas de WingaPlus.

- /api/            ventas, garantías, productos, dashboard y exportaciones
- /api/token/      login JWT (access + refresh)
- /api/docs/       Swagger; /api/redoc/ y /api/schema/ para el esquema OpenAPI
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView
from rest_framework import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from shop.dashboard.views import DashboardViewSet
from shop.export.views import ExportViewSet
from shop.products import ProductViewSet
from shop.sales import SaleViewSet
from shop.warranties import WarrantyViewSet


@extend_schema(tags=['Authentication'], summary='Login de vendedores y dueños de tienda')
class LoginView(TokenObtainPairView):
    """Devuelve el par access/refresh a partir de usuario y contraseña."""


@extend_schema(tags=['Authentication'], summary='Renovar token de acceso')
class RefreshView(TokenRefreshView):
    pass


router = routers.DefaultRouter()
router.register(r'sales', SaleViewSet, basename='sales')
router.register(r'warranties', WarrantyViewSet, basename='warranties')
router.register(r'products', ProductViewSet, basename='products')
router.register(r'dashboard', DashboardViewSet, basename='dashboard')
router.register(r'export', ExportViewSet, basename='export')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api-auth/', include('rest_framework.urls', namespace='rest_framework')),
    path('api/token/', LoginView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', RefreshView.as_view(), name='token_refresh'),
    path('api/', include(router.urls)),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
