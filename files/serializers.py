from rest_framework import serializers


class StoredFileSerializer(serializers.Serializer):
    name = serializers.CharField()
    display_name = serializers.CharField()
    path = serializers.CharField()
    bucket = serializers.CharField()
    size = serializers.IntegerField()
    size_formatted = serializers.CharField()
    extension = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField(allow_null=True)
    url = serializers.CharField()


class SignedUrlRequestSerializer(serializers.Serializer):
    path = serializers.CharField()
    file_type = serializers.CharField(required=False, default="mission")
    ttl = serializers.IntegerField(required=False, allow_null=True, default=None)
