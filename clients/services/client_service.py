# clients/services/client_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from django.db import IntegrityError, transaction

from clients.models import Client
from commons.exceptions import ConflictError, NotFoundError, ValidationError
from commons.validators import clean_email, clean_int, clean_ipv4, clean_uuid, require_text
from fleet.models import ClientDroneAssignment, DronePayloadAssignment

logger = logging.getLogger(__name__)

ADDRESS_MAX_LENGTH = 200
NAME_MAX_LENGTH = 255


# ---------------------------
# Helpers
# ---------------------------
def _clean_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Valida name/email/address/vm_ip. En modo parcial solo los presentes."""
    cleaned: Dict[str, Any] = {}

    if not partial or "name" in data:
        cleaned["name"] = require_text(data.get("name"), "name", NAME_MAX_LENGTH)
    if not partial or "email" in data:
        cleaned["email"] = clean_email(data.get("email"))
    if not partial or "address" in data:
        cleaned["address"] = require_text(data.get("address"), "address", ADDRESS_MAX_LENGTH)

    if "vm_ip" in data:
        vm_ip = data.get("vm_ip")
        cleaned["vm_ip"] = clean_ipv4(vm_ip) if vm_ip not in (None, "") else None

    return cleaned


def _email_taken(email: str, exclude_pk=None) -> bool:
    qs = Client.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


# ---------------------------
# Registry
# ---------------------------
def get_client(client_id) -> Client:
    try:
        pk = clean_uuid(client_id, "client id")
    except ValidationError:
        raise NotFoundError(f"Client with id {client_id} not found")
    try:
        return Client.objects.get(pk=pk)
    except Client.DoesNotExist:
        raise NotFoundError(f"Client with id {client_id} not found")


def list_clients(limit=None, newest_first: bool = False, queryset=None) -> List[Client]:
    qs = Client.objects.all() if queryset is None else queryset
    if newest_first:
        qs = qs.order_by("-created_at")
    if limit not in (None, ""):
        limit = clean_int(limit, "limit")
        if limit > 0:
            qs = qs[:limit]
    return list(qs)


def create_client(data: Dict[str, Any]) -> Client:
    fields = _clean_fields(data)
    if _email_taken(fields["email"]):
        logger.warning("Rejected client create, email already used: %s", fields["email"])
        raise ConflictError(f"A client with email {fields['email']} already exists")

    try:
        with transaction.atomic():
            client = Client.objects.create(**fields)
    except IntegrityError:
        raise ConflictError(f"A client with email {fields['email']} already exists")

    logger.info("Client %s created (%s)", client.pk, client.name)
    return client


def update_client(client_id, data: Dict[str, Any]) -> Client:
    client = get_client(client_id)
    fields = _clean_fields(data, partial=True)
    if not fields:
        return client

    if "email" in fields and _email_taken(fields["email"], exclude_pk=client.pk):
        raise ConflictError(f"A client with email {fields['email']} already exists")

    for attr, value in fields.items():
        setattr(client, attr, value)
    try:
        with transaction.atomic():
            client.save(update_fields=list(fields))
    except IntegrityError:
        raise ConflictError(f"A client with email {fields.get('email')} already exists")

    logger.info("Client %s updated: %s", client.pk, ", ".join(sorted(fields)))
    return client


def delete_client(client_id) -> Dict[str, Any]:
    """
    Borra el cliente junto con sus asignaciones de drones y los payloads de
    cada asignacion, todo en una sola transaccion.
    """
    client = get_client(client_id)
    pk = client.pk

    with transaction.atomic():
        assignments = ClientDroneAssignment.objects.filter(client_id=pk)
        payload_rows, _ = DronePayloadAssignment.objects.filter(assignment__in=assignments).delete()
        assignment_rows, _ = assignments.delete()
        client.delete()

    logger.info(
        "Client %s deleted (%d assignments, %d payload rows)", pk, assignment_rows, payload_rows
    )
    return {
        "id": str(pk),
        "assignments_deleted": assignment_rows,
        "payloads_deleted": payload_rows,
    }
