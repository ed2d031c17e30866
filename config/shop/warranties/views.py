"""
Views para garantías registradas
"""
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action

from ..core.api_responses import error_response, success_response
from ..core.notifications import display_name
from ..core.services import WarrantyService
from ..models import Warranty
from ..permissions import IsSalesmanOrOwner
from .serializers import WarrantyCreateSerializer, WarrantyReadSerializer


@extend_schema(tags=["Warranties"])
class WarrantyViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet para garantías registradas

    - Registro: guarda la garantía y envía la confirmación al cliente
    - Lectura: estado (active/expired/unknown) y vencimiento calculados
    """

    queryset = Warranty.objects.all()
    permission_classes = [IsSalesmanOrOwner]
    search_fields = ["customer_name", "customer_email", "customer_phone", "imei_number", "phone_name"]
    ordering_fields = ["created_at", "warranty_period"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.action == "create":
            return WarrantyCreateSerializer
        return WarrantyReadSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        warranty = WarrantyService.file_warranty(
            serializer.validated_data,
            user=request.user,
            sender_name=display_name(request.user),
        )
        return success_response(
            detail="Garantía registrada",
            code="WARRANTY_FILED",
            http_status=status.HTTP_201_CREATED,
            warranty=WarrantyReadSerializer(warranty).data,
        )

    @action(detail=True, methods=["post"])
    def resend(self, request, pk=None):
        """Reenvía el correo de confirmación de la garantía"""
        warranty = self.get_object()
        if not WarrantyService.resend_warranty_email(warranty, display_name(request.user)):
            return error_response(
                detail="No se pudo enviar el correo de garantía",
                code="WARRANTY_EMAIL_NOT_SENT",
                http_status=status.HTTP_409_CONFLICT,
            )
        return success_response(detail="Correo de garantía reenviado", code="WARRANTY_EMAIL_SENT")
