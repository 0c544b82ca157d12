import pytest

from commons.exceptions import NotFoundError, ValidationError
from fleet.models import ClientDroneAssignment, DronePayloadAssignment
from fleet.services import assignment_service

pytestmark = pytest.mark.django_db


def test_acme_scenario_lists_one_assignment_with_its_payloads(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 2)
    assignment_service.assign_payloads(assignment.pk, [7, 8])

    listing = assignment_service.list_assignments_for_client(acme.pk)

    assert len(listing) == 1
    assert listing[0]["quantity"] == 2
    assert listing[0]["drone"] == {"id": 5, "name": "Scout X4"}
    assert [p["id"] for p in listing[0]["payloads"]] == [7, 8]


@pytest.mark.parametrize("quantity", [0, -1])
def test_create_assignment_requires_positive_quantity(acme, catalog, quantity):
    with pytest.raises(ValidationError):
        assignment_service.create_assignment(acme.pk, 5, quantity)
    assert not ClientDroneAssignment.objects.exists()


def test_create_assignment_with_unknown_payload_rolls_back(acme, catalog):
    with pytest.raises(NotFoundError):
        assignment_service.create_assignment(acme.pk, 5, 1, [7, 999])
    assert not ClientDroneAssignment.objects.exists()
    assert not DronePayloadAssignment.objects.exists()


def test_create_assignment_unknown_drone(acme, catalog):
    with pytest.raises(NotFoundError):
        assignment_service.create_assignment(acme.pk, 42, 1)


def test_assign_payloads_skips_duplicates(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 1, [7])
    rows = assignment_service.assign_payloads(assignment.pk, [7, 8, 8])

    assert [r.payload_id for r in rows] == [8]
    assert DronePayloadAssignment.objects.filter(assignment=assignment).count() == 2


def test_update_quantity_zero_removes_assignment(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 3, [7])

    assert assignment_service.update_quantity(assignment.pk, 0) is None
    assert assignment_service.list_assignments_for_client(acme.pk) == []
    assert not DronePayloadAssignment.objects.exists()


def test_update_quantity_negative_is_rejected(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 3)
    with pytest.raises(ValidationError, match="less than zero"):
        assignment_service.update_quantity(assignment.pk, -2)
    assignment.refresh_from_db()
    assert assignment.quantity == 3


def test_update_assignment_replaces_payload_set(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 1, [7])
    assignment_service.update_assignment(assignment.pk, 4, [8])

    listing = assignment_service.list_assignments_for_client(acme.pk)
    assert listing[0]["quantity"] == 4
    assert [p["id"] for p in listing[0]["payloads"]] == [8]


def test_delete_assignment_leaves_no_orphans(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 2, [7, 8])

    summary = assignment_service.delete_assignment(assignment.pk)

    assert summary["payloads_deleted"] == 2
    assert not ClientDroneAssignment.objects.exists()
    assert not DronePayloadAssignment.objects.exists()


def test_delete_payload_everywhere_or_scoped(acme, catalog):
    a1 = assignment_service.create_assignment(acme.pk, 5, 1, [7, 8])
    a2 = assignment_service.create_assignment(acme.pk, 5, 1, [7])

    assert assignment_service.delete_payload_from_assignment(8, assignment_id=a1.pk) == 1
    assert assignment_service.delete_payload_from_assignment(7) == 2
    assert not DronePayloadAssignment.objects.filter(assignment__in=[a1, a2]).exists()


def test_reverse_lookups(acme, catalog):
    assignment_service.create_assignment(acme.pk, 5, 1, [7])
    assignment_service.create_assignment(acme.pk, 5, 2, [7])

    assert assignment_service.clients_for_drone(5) == [acme]
    assert assignment_service.clients_for_payload(7) == [acme]
    assert assignment_service.clients_for_payload(8) == []


# ---------- API ----------
def test_api_create_and_list_assignments(api_client, acme, catalog):
    url = f"/api/clients/{acme.pk}/assignments/"
    r = api_client.post(url, {"drone_id": 5, "quantity": 2, "payload_ids": [7, 8]}, format="json")
    assert r.status_code == 201
    assert [p["id"] for p in r.json()["data"]["payloads"]] == [7, 8]

    data = api_client.get(url).json()["data"]
    assert len(data) == 1
    assert data[0]["quantity"] == 2


def test_api_patch_quantity_zero_reports_deleted(api_client, acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 2)
    r = api_client.patch(f"/api/assignments/{assignment.pk}/", {"quantity": 0}, format="json")

    assert r.status_code == 200
    assert r.json()["data"]["deleted"] is True
    assert not ClientDroneAssignment.objects.exists()


def test_api_patch_without_fields_is_validation_error(api_client, acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 2)
    r = api_client.patch(f"/api/assignments/{assignment.pk}/", {}, format="json")

    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_api_remove_payload_from_assignment(api_client, acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 2, [7, 8])
    r = api_client.delete(f"/api/assignments/{assignment.pk}/payloads/7/")

    assert r.status_code == 200
    assert r.json()["data"]["removed"] == 1
    assert list(DronePayloadAssignment.objects.values_list("payload_id", flat=True)) == [8]


def test_api_catalog_lists_drones(api_client, catalog):
    r = api_client.get("/api/drones/")
    assert r.status_code == 200
    assert r.json()["data"] == [{"id": 5, "name": "Scout X4"}]


def test_add_single_payload_is_idempotent(acme, catalog):
    assignment = assignment_service.create_assignment(acme.pk, 5, 1)
    first = assignment_service.add_payload_to_assignment(assignment.pk, 7)
    again = assignment_service.add_payload_to_assignment(assignment.pk, "7")

    assert first.pk == again.pk
    assert DronePayloadAssignment.objects.filter(assignment=assignment).count() == 1
