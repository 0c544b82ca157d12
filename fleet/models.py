# fleet/models.py
import uuid

from django.db import models
from django.db.models import Q


class Drone(models.Model):
    """Catalogo de modelos de dron. No pertenece a ningun cliente."""
    name = models.CharField(max_length=150)

    class Meta:
        db_table = "drone"
        ordering = ["id"]

    def __str__(self):
        return self.name


class Payload(models.Model):
    name = models.CharField(max_length=150)

    class Meta:
        db_table = "payload"
        ordering = ["id"]

    def __str__(self):
        return self.name


class ClientDroneAssignment(models.Model):
    """
    El cliente tiene N unidades de un modelo de dron.
    Los FK son PROTECT: borrar en cascada lo hace el servicio, en transaccion.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        "clients.Client", related_name="drone_assignments", on_delete=models.PROTECT,
    )
    drone = models.ForeignKey(
        Drone, related_name="assignments", on_delete=models.PROTECT,
    )
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "client_drone_assignment"
        ordering = ["drone_id", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="assignment_quantity_at_least_one",
            ),
        ]

    def __str__(self):
        return f"{self.client_id} x{self.quantity} {self.drone_id}"


class DronePayloadAssignment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(
        ClientDroneAssignment, related_name="payload_assignments", on_delete=models.PROTECT,
    )
    payload = models.ForeignKey(
        Payload, related_name="assignments", on_delete=models.PROTECT,
    )

    class Meta:
        db_table = "drone_payload_assignment"
        unique_together = (("assignment", "payload"),)

    def __str__(self):
        return f"{self.assignment_id} + payload {self.payload_id}"
