# fleet/admin.py
from django.contrib import admin
from .models import Drone, Payload, ClientDroneAssignment, DronePayloadAssignment


@admin.register(Drone)
class DroneAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(Payload)
class PayloadAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


class DronePayloadAssignmentInline(admin.TabularInline):
    model = DronePayloadAssignment
    extra = 0


@admin.register(ClientDroneAssignment)
class ClientDroneAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "drone", "quantity")
    search_fields = ("client__name", "client__email", "drone__name")
    list_filter = ("drone",)
    inlines = [DronePayloadAssignmentInline]

    def delete_model(self, request, obj):
        from .services.assignment_service import delete_assignment
        delete_assignment(obj.pk)

    def delete_queryset(self, request, queryset):
        from .services.assignment_service import delete_assignment
        for pk in list(queryset.values_list("pk", flat=True)):
            delete_assignment(pk)


@admin.register(DronePayloadAssignment)
class DronePayloadAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "assignment", "payload")
    search_fields = ("assignment__client__name", "payload__name")
    list_filter = ("payload",)
