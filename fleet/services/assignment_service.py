# fleet/services/assignment_service.py
from __future__ import annotations

import logging
from collections import abc
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction

from clients.models import Client
from clients.services.client_service import get_client
from commons.exceptions import NotFoundError, ValidationError
from commons.validators import clean_int, clean_uuid
from fleet.models import ClientDroneAssignment, Drone, DronePayloadAssignment, Payload

logger = logging.getLogger(__name__)


# ---------------------------
# Helpers
# ---------------------------
def _clean_quantity(value, allow_zero: bool = False) -> int:
    quantity = clean_int(value, "quantity")
    if quantity < 0:
        raise ValidationError(f"Quantity less than zero, got {quantity}")
    if quantity == 0 and not allow_zero:
        raise ValidationError("Quantity must be at least 1")
    return quantity


def _clean_payload_ids(payload_ids: Optional[Iterable]) -> List[int]:
    """Normaliza a enteros y quita duplicados conservando el orden."""
    if payload_ids is None:
        return []
    if isinstance(payload_ids, (str, bytes)) or not isinstance(payload_ids, abc.Iterable):
        raise ValidationError("payload_ids must be a list of integers")
    seen, out = set(), []
    for raw in payload_ids:
        pid = clean_int(raw, "payload id")
        if pid not in seen:
            seen.add(pid)
            out.append(pid)
    return out


def get_drone(drone_id) -> Drone:
    try:
        return Drone.objects.get(pk=clean_int(drone_id, "drone id"))
    except Drone.DoesNotExist:
        raise NotFoundError(f"Drone with id {drone_id} not found")


def get_payload(payload_id) -> Payload:
    try:
        return Payload.objects.get(pk=clean_int(payload_id, "payload id"))
    except Payload.DoesNotExist:
        raise NotFoundError(f"Payload with id {payload_id} not found")


def get_assignment(assignment_id) -> ClientDroneAssignment:
    try:
        pk = clean_uuid(assignment_id, "assignment id")
    except ValidationError:
        raise NotFoundError(f"Assignment with id {assignment_id} not found")
    try:
        return ClientDroneAssignment.objects.select_related("drone").get(pk=pk)
    except ClientDroneAssignment.DoesNotExist:
        raise NotFoundError(f"Assignment with id {assignment_id} not found")


def _insert_payloads(assignment: ClientDroneAssignment, payload_ids: List[int]) -> List[DronePayloadAssignment]:
    if not payload_ids:
        return []

    found = set(Payload.objects.filter(pk__in=payload_ids).values_list("id", flat=True))
    missing = [pid for pid in payload_ids if pid not in found]
    if missing:
        raise NotFoundError(f"Payloads not found: {', '.join(str(m) for m in missing)}")

    existing = set(
        DronePayloadAssignment.objects
        .filter(assignment=assignment, payload_id__in=payload_ids)
        .values_list("payload_id", flat=True)
    )
    rows = [
        DronePayloadAssignment(assignment=assignment, payload_id=pid)
        for pid in payload_ids if pid not in existing
    ]
    return DronePayloadAssignment.objects.bulk_create(rows)


# ---------------------------
# Catalogo
# ---------------------------
def list_drones():
    return Drone.objects.all()


def list_payloads():
    return Payload.objects.all()


# ---------------------------
# Ledger
# ---------------------------
def create_assignment(client_id, drone_id, quantity, payload_ids=None) -> ClientDroneAssignment:
    """
    Crea la asignacion y, si vienen, sus payloads. Ambos inserts van en la
    misma transaccion: si falla el segundo no queda la asignacion suelta.
    """
    quantity = _clean_quantity(quantity)
    payload_ids = _clean_payload_ids(payload_ids)
    client = get_client(client_id)
    drone = get_drone(drone_id)

    with transaction.atomic():
        assignment = ClientDroneAssignment.objects.create(client=client, drone=drone, quantity=quantity)
        _insert_payloads(assignment, payload_ids)

    logger.info(
        "Assignment %s created: client=%s drone=%s qty=%d payloads=%s",
        assignment.pk, client.pk, drone.pk, quantity, payload_ids,
    )
    return assignment


def assign_payloads(assignment_id, payload_ids) -> List[DronePayloadAssignment]:
    payload_ids = _clean_payload_ids(payload_ids)
    if not payload_ids:
        return []

    assignment = get_assignment(assignment_id)
    with transaction.atomic():
        rows = _insert_payloads(assignment, payload_ids)

    logger.info("Assignment %s: %d payloads added", assignment.pk, len(rows))
    return rows


def add_payload_to_assignment(assignment_id, payload_id) -> DronePayloadAssignment:
    assignment = get_assignment(assignment_id)
    payload = get_payload(payload_id)
    row, created = DronePayloadAssignment.objects.get_or_create(assignment=assignment, payload=payload)
    if created:
        logger.info("Assignment %s: payload %s added", assignment.pk, payload.pk)
    return row


def update_quantity(assignment_id, quantity) -> Optional[ClientDroneAssignment]:
    """quantity 0 borra la asignacion (devuelve None); negativa es error."""
    quantity = _clean_quantity(quantity, allow_zero=True)
    if quantity == 0:
        delete_assignment(assignment_id)
        return None

    assignment = get_assignment(assignment_id)
    assignment.quantity = quantity
    assignment.save(update_fields=["quantity"])
    logger.info("Assignment %s quantity set to %d", assignment.pk, quantity)
    return assignment


def update_assignment(assignment_id, quantity, payload_ids) -> Optional[ClientDroneAssignment]:
    """Cambia cantidad y reemplaza el set de payloads, en una transaccion."""
    quantity = _clean_quantity(quantity, allow_zero=True)
    payload_ids = _clean_payload_ids(payload_ids)
    if quantity == 0:
        delete_assignment(assignment_id)
        return None

    assignment = get_assignment(assignment_id)
    with transaction.atomic():
        assignment.quantity = quantity
        assignment.save(update_fields=["quantity"])
        DronePayloadAssignment.objects.filter(assignment=assignment).delete()
        _insert_payloads(assignment, payload_ids)

    logger.info("Assignment %s updated: qty=%d payloads=%s", assignment.pk, quantity, payload_ids)
    return assignment


def delete_assignment(assignment_id) -> Dict[str, Any]:
    assignment = get_assignment(assignment_id)
    pk = assignment.pk

    with transaction.atomic():
        payload_rows, _ = DronePayloadAssignment.objects.filter(assignment_id=pk).delete()
        ClientDroneAssignment.objects.filter(pk=pk).delete()

    logger.info("Assignment %s deleted (%d payload rows)", pk, payload_rows)
    return {"id": str(pk), "payloads_deleted": payload_rows}


def delete_payload_from_assignment(payload_id, assignment_id=None) -> int:
    """
    Sin assignment_id quita el payload de TODAS las asignaciones que lo usan.
    Con assignment_id solo de esa asignacion.
    """
    payload_id = clean_int(payload_id, "payload id")
    qs = DronePayloadAssignment.objects.filter(payload_id=payload_id)
    if assignment_id is not None:
        qs = qs.filter(assignment=get_assignment(assignment_id))

    deleted, _ = qs.delete()
    logger.info(
        "Payload %s removed from %s (%d rows)",
        payload_id, assignment_id or "all assignments", deleted,
    )
    return deleted


def list_assignments_for_client(client_id) -> List[Dict[str, Any]]:
    """
    Dos consultas (asignacion+dron, luego payloads de esas asignaciones) y se
    combinan aca; un solo join duplica filas por cada payload.
    """
    client = get_client(client_id)

    assignments = list(
        ClientDroneAssignment.objects
        .filter(client=client)
        .select_related("drone")
    )
    payload_rows = (
        DronePayloadAssignment.objects
        .filter(assignment_id__in=[a.pk for a in assignments])
        .select_related("payload")
        .order_by("payload_id")
    )

    by_assignment: Dict[Any, List[Dict[str, Any]]] = {}
    for row in payload_rows:
        by_assignment.setdefault(row.assignment_id, []).append(
            {"id": row.payload.id, "name": row.payload.name}
        )

    return [
        {
            "id": a.pk,
            "quantity": a.quantity,
            "drone": {"id": a.drone.id, "name": a.drone.name},
            "payloads": by_assignment.get(a.pk, []),
        }
        for a in assignments
    ]


# ---------------------------
# Consultas inversas
# ---------------------------
def clients_for_drone(drone_id) -> List[Client]:
    drone = get_drone(drone_id)
    return list(Client.objects.filter(drone_assignments__drone=drone).distinct())


def clients_for_payload(payload_id) -> List[Client]:
    payload = get_payload(payload_id)
    return list(
        Client.objects
        .filter(drone_assignments__payload_assignments__payload=payload)
        .distinct()
    )
