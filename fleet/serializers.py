from rest_framework import serializers

from .models import ClientDroneAssignment, Drone, DronePayloadAssignment, Payload


class DroneSerializer(serializers.ModelSerializer):
    class Meta:
        model = Drone
        fields = ["id", "name"]


class PayloadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payload
        fields = ["id", "name"]


class PayloadAssignmentSerializer(serializers.ModelSerializer):
    payload = PayloadSerializer(read_only=True)

    class Meta:
        model = DronePayloadAssignment
        fields = ["id", "assignment", "payload"]


class DroneAssignmentSerializer(serializers.ModelSerializer):
    drone = DroneSerializer(read_only=True)
    client_id = serializers.UUIDField(read_only=True)
    payloads = serializers.SerializerMethodField()

    class Meta:
        model = ClientDroneAssignment
        fields = ["id", "client_id", "quantity", "drone", "payloads"]

    def get_payloads(self, obj):
        rows = obj.payload_assignments.select_related("payload").order_by("payload_id")
        return [PayloadSerializer(r.payload).data for r in rows]


class AssignmentCreateSerializer(serializers.Serializer):
    drone_id = serializers.IntegerField()
    quantity = serializers.IntegerField(required=False, default=1)
    payload_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class AssignmentUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(required=False)
    payload_ids = serializers.ListField(child=serializers.IntegerField(), required=False)


class PayloadIdsSerializer(serializers.Serializer):
    payload_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
