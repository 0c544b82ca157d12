# files/views.py
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from commons.envelope import failure
from commons.exceptions import ValidationError, status_for_code
from .serializers import SignedUrlRequestSerializer, StoredFileSerializer
from .services import file_service


class ClientFilesView(APIView):
    """
    Archivos de mision / imagenes de un cliente.
    GET lista, POST sube (multipart, campo `files` o `file`), DELETE borra por path.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get(self, request, client_id):
        params = request.query_params
        files = file_service.list_client_files(
            client_id,
            file_type=params.get("file_type", "mission"),
            extensions=params.get("ext"),
            sort_by=params.get("sort", "name"),
            direction=params.get("direction", "asc"),
            limit=params.get("limit"),
        )
        return Response(StoredFileSerializer(files, many=True).data)

    def post(self, request, client_id):
        uploads = request.FILES.getlist("files") or request.FILES.getlist("file")
        if not uploads:
            raise ValidationError("No files provided")

        result = file_service.upload_client_files(
            client_id, request.data.get("file_type", "mission"), uploads
        )
        stored, errors = result["files"], result["errors"]
        if not stored:
            # todos fallaron: se devuelve el primer error con el detalle completo
            first = errors[0]
            return failure(
                first["error"], first["message"], details=errors,
                status_code=status_for_code(first["error"]),
            )

        return Response(
            {"files": StoredFileSerializer(stored, many=True).data, "errors": errors},
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, client_id):
        path = request.data.get("path") or request.query_params.get("path")
        file_type = request.data.get("file_type") or request.query_params.get("file_type", "mission")
        return Response(file_service.delete_client_file(client_id, file_type, path))


class SignedUrlView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = SignedUrlRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        return Response(file_service.signed_file_url(data["path"], data["file_type"], data["ttl"]))
