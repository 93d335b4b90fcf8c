from rest_framework.negotiation import DefaultContentNegotiation
from rest_framework.renderers import BaseRenderer


class PlainTextRenderer(BaseRenderer):
    """Render response data as raw text. Error dicts render their detail."""

    media_type = "text/plain"
    format = "txt"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b""
        if isinstance(data, dict) and "detail" in data:
            data = data["detail"]
        return str(data).encode(self.charset)


class FirstRendererNegotiation(DefaultContentNegotiation):
    """Ignore the Accept header: every response uses the view's first renderer."""

    def select_renderer(self, request, renderers, format_suffix=None):
        return (renderers[0], renderers[0].media_type)
