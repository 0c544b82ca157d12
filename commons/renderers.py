# commons/renderers.py
# sin imports de rest_framework.views (import circular via DEFAULT_RENDERER_CLASSES)
from rest_framework import status
from rest_framework.renderers import JSONRenderer


class EnvelopeJSONRenderer(JSONRenderer):
    """Wraps successful payloads into {"success": true, "data": ...}."""

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = (renderer_context or {}).get("response")
        if response is not None:
            if response.status_code == status.HTTP_204_NO_CONTENT:
                return b""
            already = isinstance(data, dict) and "success" in data
            if response.status_code < 400 and not already:
                data = {"success": True, "data": data}
        return super().render(data, accepted_media_type, renderer_context)
