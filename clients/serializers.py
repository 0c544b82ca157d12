from rest_framework import serializers

from .models import Client


class ClientSerializer(serializers.ModelSerializer):
    has_password = serializers.BooleanField(read_only=True)

    class Meta:
        model = Client
        fields = ["id", "name", "email", "address", "created_at", "vm_ip", "has_password"]
        read_only_fields = fields


class ClientSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ["id", "name", "address", "vm_ip"]
        read_only_fields = fields
