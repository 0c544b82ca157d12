# clients/admin.py
from django.contrib import admin

from fleet.models import ClientDroneAssignment
from .models import Client


class ClientDroneAssignmentInline(admin.TabularInline):
    model = ClientDroneAssignment
    extra = 0
    fields = ("drone", "quantity")


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "address", "vm_ip", "created_at")
    search_fields = ("name", "email", "address")
    ordering = ("-created_at",)
    exclude = ("vm_password",)
    inlines = [ClientDroneAssignmentInline]

    def delete_model(self, request, obj):
        from .services.client_service import delete_client
        delete_client(obj.pk)

    def delete_queryset(self, request, queryset):
        from .services.client_service import delete_client
        for pk in list(queryset.values_list("pk", flat=True)):
            delete_client(pk)
