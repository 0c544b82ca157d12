# clients/views.py
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .cache import client_cache
from .models import Client
from .serializers import ClientSerializer
from .services import client_service, vm_service


def _truthy(value):
    return str(value or "").lower() in ("1", "true", "t", "yes", "y")


class ClientViewSet(viewsets.ModelViewSet):
    """
    Registro de clientes. Toda escritura pasa por client_service; la vista solo
    arma la respuesta. Los errores los convierte el exception handler global.
    """
    queryset = Client.objects.all()
    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated]

    search_fields = ["name", "email", "address"]
    ordering_fields = ["name", "email", "created_at"]

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        clients = client_service.list_clients(
            limit=request.query_params.get("limit"),
            newest_first=_truthy(request.query_params.get("newest")),
            queryset=qs,
        )
        return Response(ClientSerializer(clients, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        cached = client_cache.get(pk)
        if cached is not None:
            return Response(cached)
        # version tomada antes de leer: si hubo un write en medio no se cachea
        version = client_cache.version(pk)
        client = client_service.get_client(pk)
        data = dict(ClientSerializer(client).data)
        client_cache.set(pk, data, version=version)
        return Response(data)

    def create(self, request, *args, **kwargs):
        client = client_service.create_client(request.data)
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None, *args, **kwargs):
        # PUT y PATCH mezclan los campos enviados
        client = client_service.update_client(pk, request.data)
        return Response(ClientSerializer(client).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        return Response(client_service.delete_client(pk))

    # ---------- VM ----------
    @action(detail=True, methods=["get"], url_path="vm")
    def vm(self, request, pk=None):
        return Response(vm_service.vm_status(pk))

    @action(detail=True, methods=["post"], url_path="vm/credentials")
    def vm_credentials(self, request, pk=None):
        client = vm_service.set_ip_and_password(
            pk, request.data.get("vm_ip"), request.data.get("vm_password")
        )
        return Response({
            "message": "VM IP and password updated successfully",
            "client": ClientSerializer(client).data,
        })

    @action(detail=True, methods=["post"], url_path="vm/ip")
    def vm_ip(self, request, pk=None):
        client = vm_service.set_ip(pk, request.data.get("vm_ip"))
        return Response({
            "message": "VM IP updated successfully",
            "client": ClientSerializer(client).data,
        })

    @action(detail=True, methods=["delete"], url_path="vm/password")
    def vm_password(self, request, pk=None):
        client = vm_service.clear_password(pk)
        return Response({
            "message": "VM password cleared",
            "client": ClientSerializer(client).data,
        })

    @action(
        detail=True, methods=["get", "post", "delete"], url_path="vm/pem",
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def vm_pem(self, request, pk=None):
        if request.method == "POST":
            result = vm_service.upload_pem(pk, request.FILES.get("file"))
            return Response(
                {"message": "PEM file uploaded successfully", **result},
                status=status.HTTP_201_CREATED,
            )
        if request.method == "DELETE":
            result = vm_service.delete_pem(pk)
            return Response({"message": "PEM file deleted successfully", **result})
        return Response(vm_service.check_pem(pk))
