# clients/services/vm_service.py
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.utils.text import get_valid_filename

from clients.models import Client
from clients.services.client_service import get_client
from commons.exceptions import ConflictError, NotFoundError, ValidationError
from commons.validators import clean_vm_address
from files.services import s3_client

logger = logging.getLogger(__name__)

PEM_SIGNED_URL_TTL = 60
PEM_CONTENT_TYPE = "application/x-pem-file"


# ---------------------------
# Helpers
# ---------------------------
def _pem_bucket() -> str:
    return settings.STORAGE["BUCKETS"]["pem"]


def _pem_folder(client: Client) -> str:
    return f"{client.pk}/vm"


def _stored_pems(client: Client, gateway) -> List[str]:
    """Paths de los .pem guardados para el cliente (normalmente 0 o 1)."""
    folder = _pem_folder(client)
    return [
        f"{folder}/{obj.name}"
        for obj in gateway.list(_pem_bucket(), folder)
        if obj.name.endswith(".pem")
    ]


def _auth_mode(client: Client, has_pem: bool) -> str:
    if has_pem:
        return Client.AuthMode.KEY
    if client.has_password:
        return Client.AuthMode.PASSWORD
    return Client.AuthMode.UNCONFIGURED


# ---------------------------
# IP / password
# ---------------------------
def set_ip_and_password(client_id, ip, password, gateway=None) -> Client:
    gateway = gateway or s3_client.get_gateway()
    address = clean_vm_address(ip)
    if password is None or not str(password).strip():
        raise ValidationError("Password cannot be empty")

    client = get_client(client_id)
    if _stored_pems(client, gateway):
        raise ConflictError("A PEM file is configured for this VM. Delete it before setting a password.")

    client.vm_ip = address
    client.vm_password = str(password)
    client.save(update_fields=["vm_ip", "vm_password"])
    logger.info("Client %s: VM ip and password updated", client.pk)
    return client


def set_ip(client_id, ip) -> Client:
    address = clean_vm_address(ip)
    client = get_client(client_id)
    client.vm_ip = address
    client.save(update_fields=["vm_ip"])
    logger.info("Client %s: VM ip set to %s", client.pk, address)
    return client


def clear_password(client_id) -> Client:
    client = get_client(client_id)
    if client.vm_password:
        client.vm_password = None
        client.save(update_fields=["vm_password"])
        logger.info("Client %s: VM password cleared", client.pk)
    return client


# ---------------------------
# PEM
# ---------------------------
def check_pem(client_id, gateway=None) -> Dict[str, Any]:
    """Asegura el bucket privado y dice si hay un .pem (con URL firmada de 60s)."""
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    bucket = _pem_bucket()

    gateway.ensure_bucket(bucket)
    pems = _stored_pems(client, gateway)
    if not pems:
        return {"exists": False, "path": None, "url": None}

    return {
        "exists": True,
        "path": pems[0],
        "url": gateway.signed_url(bucket, pems[0], PEM_SIGNED_URL_TTL),
    }


def upload_pem(client_id, upload, gateway=None) -> Dict[str, Any]:
    """
    Un solo PEM por cliente: si ya hay uno se rechaza (hay que borrarlo antes).
    El chequeo y la subida no son atomicos.
    """
    gateway = gateway or s3_client.get_gateway()
    if upload is None:
        raise ValidationError("No PEM file provided")

    name = os.path.basename(getattr(upload, "name", "") or "")
    if not name.endswith(".pem"):
        raise ValidationError("Invalid file format. Please upload a .pem file")

    max_size = settings.STORAGE["PEM_MAX_SIZE"]
    if (getattr(upload, "size", 0) or 0) > max_size:
        raise ValidationError(f"PEM file too large. Maximum size is {max_size // (1024 * 1024)}MB")

    client = get_client(client_id)
    if client.has_password:
        raise ConflictError("A VM password is configured. Clear it before uploading a PEM file.")

    if check_pem(client.pk, gateway=gateway)["exists"]:
        logger.warning("Client %s: PEM upload rejected, one already exists", client.pk)
        raise ConflictError("A PEM file already exists. Please delete it first before uploading a new one.")

    try:
        filename = get_valid_filename(name)
    except SuspiciousFileOperation:
        raise ValidationError(f"Invalid file name '{name}'")
    path = f"{_pem_folder(client)}/{filename}"
    gateway.upload(_pem_bucket(), path, upload, content_type=PEM_CONTENT_TYPE)

    logger.info("Client %s: PEM file uploaded", client.pk)
    return {"exists": True, "path": path}


def delete_pem(client_id, gateway=None) -> Dict[str, Any]:
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)

    pems = _stored_pems(client, gateway)
    if not pems:
        raise NotFoundError("No PEM file found")

    gateway.remove(_pem_bucket(), pems)
    logger.info("Client %s: %d PEM file(s) deleted", client.pk, len(pems))
    return {"deleted": pems}


def vm_status(client_id, gateway=None) -> Dict[str, Any]:
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    pem = check_pem(client.pk, gateway=gateway)
    return {
        "vm_ip": client.vm_ip,
        "auth_mode": str(_auth_mode(client, pem["exists"])),
        "has_password": client.has_password,
        "has_pem": pem["exists"],
        "pem_path": pem["path"],
    }
