# fleet/views.py
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from clients.serializers import ClientSummarySerializer
from commons.exceptions import ValidationError
from .models import ClientDroneAssignment, Drone, Payload
from .serializers import (
    AssignmentCreateSerializer, AssignmentUpdateSerializer, DroneAssignmentSerializer,
    DroneSerializer, PayloadAssignmentSerializer, PayloadIdsSerializer, PayloadSerializer,
)
from .services import assignment_service


# =========================
# Catalogo (solo lectura)
# =========================
class DroneViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Drone.objects.all()
    serializer_class = DroneSerializer
    permission_classes = [IsAuthenticated]
    search_fields = ["name"]

    def get_queryset(self):
        return assignment_service.list_drones()

    @action(detail=True, methods=["get"])
    def clients(self, request, pk=None):
        clients = assignment_service.clients_for_drone(pk)
        return Response(ClientSummarySerializer(clients, many=True).data)


class PayloadViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Payload.objects.all()
    serializer_class = PayloadSerializer
    permission_classes = [IsAuthenticated]
    search_fields = ["name"]

    def get_queryset(self):
        return assignment_service.list_payloads()

    @action(detail=True, methods=["get"])
    def clients(self, request, pk=None):
        clients = assignment_service.clients_for_payload(pk)
        return Response(ClientSummarySerializer(clients, many=True).data)

    @action(detail=True, methods=["delete"], url_path="assignments")
    def remove_everywhere(self, request, pk=None):
        removed = assignment_service.delete_payload_from_assignment(pk)
        return Response({"payload_id": int(pk), "removed": removed})


# =========================
# Asignaciones
# =========================
class ClientAssignmentsView(APIView):
    """GET lista las asignaciones del cliente, POST crea una (con payloads opcionales)."""
    permission_classes = [IsAuthenticated]

    def get(self, request, client_id):
        return Response(assignment_service.list_assignments_for_client(client_id))

    def post(self, request, client_id):
        ser = AssignmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assignment = assignment_service.create_assignment(
            client_id,
            ser.validated_data["drone_id"],
            ser.validated_data["quantity"],
            ser.validated_data["payload_ids"],
        )
        return Response(DroneAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class AssignmentViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = ClientDroneAssignment.objects.select_related("drone")
    serializer_class = DroneAssignmentSerializer
    permission_classes = [IsAuthenticated]

    def retrieve(self, request, pk=None, *args, **kwargs):
        assignment = assignment_service.get_assignment(pk)
        return Response(DroneAssignmentSerializer(assignment).data)

    def partial_update(self, request, pk=None, *args, **kwargs):
        ser = AssignmentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if "payload_ids" in data:
            quantity = data.get("quantity")
            if quantity is None:
                quantity = assignment_service.get_assignment(pk).quantity
            assignment = assignment_service.update_assignment(pk, quantity, data["payload_ids"])
        elif "quantity" in data:
            assignment = assignment_service.update_quantity(pk, data["quantity"])
        else:
            raise ValidationError("quantity or payload_ids is required")

        if assignment is None:
            return Response({"id": pk, "deleted": True})
        return Response(DroneAssignmentSerializer(assignment).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        return Response(assignment_service.delete_assignment(pk))

    @action(detail=True, methods=["post"])
    def payloads(self, request, pk=None):
        ser = PayloadIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        rows = assignment_service.assign_payloads(pk, ser.validated_data["payload_ids"])
        return Response(
            PayloadAssignmentSerializer(rows, many=True).data,
            status=status.HTTP_201_CREATED if rows else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["delete"], url_path=r"payloads/(?P<payload_id>[^/.]+)")
    def remove_payload(self, request, pk=None, payload_id=None):
        removed = assignment_service.delete_payload_from_assignment(payload_id, assignment_id=pk)
        return Response({"id": pk, "payload_id": payload_id, "removed": removed})
