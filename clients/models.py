# clients/models.py
import uuid

from django.db import models
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver


class Client(models.Model):
    class AuthMode(models.TextChoices):
        UNCONFIGURED = "unconfigured", "Unconfigured"
        PASSWORD = "password", "Password"
        KEY = "key", "PEM key"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    address = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    # acceso a la VM del cliente: password o archivo PEM (en storage), nunca ambos
    vm_ip = models.CharField(max_length=64, null=True, blank=True)
    vm_password = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "client"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def has_password(self):
        return bool(self.vm_password)


# ---- Señales: el cache de detalle no debe servir clientes viejos ----
@receiver(post_save, sender=Client)
def _on_client_saved(sender, instance, **kwargs):
    from .cache import client_cache
    client_cache.invalidate(instance.pk)


@receiver(post_delete, sender=Client)
def _on_client_deleted(sender, instance, **kwargs):
    from .cache import client_cache
    client_cache.invalidate(instance.pk)
