import logging

import markdown
from django.apps import apps
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.renderers import StaticHTMLRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from pastes import services
from pastes.conf import get_setting
from pastes.exceptions import (
    AccessDenied,
    InvalidExpiry,
    MissingPayload,
    NameTaken,
    NegativeExpiry,
    PayloadTooLarge,
    RecordExpired,
    RecordNotFound,
    UndecodablePayload,
)
from pastes.renderers import FirstRendererNegotiation, PlainTextRenderer
from pastes.serializers import EditSerializer, UploadSerializer
from pastes.store import Store

logger = logging.getLogger(__name__)

SERVER_ERROR = "500 - Something bad happened"

# Checked in order, first match wins
ERROR_RESPONSES = [
    (PayloadTooLarge, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
     lambda exc: f"413 - Max content size is {format_size(exc.limit)}"),
    (MissingPayload, status.HTTP_400_BAD_REQUEST, lambda exc: '400 - "f" field required'),
    (UndecodablePayload, status.HTTP_400_BAD_REQUEST, lambda exc: "400 - Text must be UTF-8"),
    (NameTaken, status.HTTP_409_CONFLICT, lambda exc: "409 - This filename already taken!"),
    (InvalidExpiry, status.HTTP_422_UNPROCESSABLE_ENTITY, lambda exc: "422 - Invalid time format"),
    (NegativeExpiry, status.HTTP_400_BAD_REQUEST, lambda exc: "400 - Time should be positive"),
    (RecordNotFound, status.HTTP_404_NOT_FOUND, lambda exc: "404 - File not found"),
    (RecordExpired, status.HTTP_410_GONE, lambda exc: "410 - File is no longer available"),
    (AccessDenied, status.HTTP_401_UNAUTHORIZED, lambda exc: "401 - Invalid password"),
]


def format_size(limit: int) -> str:
    if limit % (1 << 20) == 0:
        return f"{limit >> 20}MiB"
    return f"{limit} bytes"


NAME_PARAMETER = OpenApiParameter(
    name="name",
    type=str,
    location=OpenApiParameter.PATH,
    description="Name the paste was published under",
)


class PasteAPIView(APIView):
    """Base view: form input, plain-text output, domain errors mapped to status codes."""

    authentication_classes = []
    permission_classes = []
    parser_classes = [FormParser, MultiPartParser]
    renderer_classes = [PlainTextRenderer]
    content_negotiation_class = FirstRendererNegotiation

    @property
    def store(self) -> Store:
        return apps.get_app_config("pastes").store

    def handle_exception(self, exc):
        for error_class, status_code, message in ERROR_RESPONSES:
            if isinstance(exc, error_class):
                return Response(message(exc), status=status_code)

        if isinstance(exc, APIException):
            return super().handle_exception(exc)

        logger.error(f"{self.request.method} {self.request.path} failed: {exc}", exc_info=exc)
        return Response(SERVER_ERROR, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def check_content_length(self, request, limit: int) -> None:
        """Reject oversized bodies before they are parsed."""
        try:
            length = int(request.META.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        if length > limit:
            raise PayloadTooLarge(limit)

    def form_data(self, request) -> dict:
        """
        Merge query string and body fields, body first.

        Uploaded files are read as UTF-8 text.

        Raises:
            UndecodablePayload: If an uploaded file is not valid UTF-8
        """
        data = request.query_params.dict()
        for key, value in request.data.items():
            if hasattr(value, "read"):
                try:
                    value = value.read().decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise UndecodablePayload(f"Field {key!r} is not UTF-8") from exc
            data[key] = value
        return data

    def validate_form(self, serializer) -> None:
        """Only a problem with ``f`` is reported as a missing payload."""
        if serializer.is_valid():
            return
        if "f" in serializer.errors:
            raise MissingPayload(serializer.errors["f"])
        raise ValidationError(serializer.errors)


class IndexView(PasteAPIView):
    """Help page and paste upload."""

    def get_renderers(self):
        request = getattr(self, "request", None)
        if request is not None and request.method == "GET":
            return [StaticHTMLRenderer()]
        return super().get_renderers()

    @extend_schema(
        operation_id="help",
        summary="Usage help",
        description="Render the service's README as HTML.",
        responses={
            200: OpenApiResponse(response=OpenApiTypes.STR, description="Help page"),
            500: OpenApiResponse(description="Help file could not be read"),
        },
        tags=["Help"],
    )
    def get(self, request):
        help_file = get_setting("HELP_FILE")
        try:
            with open(help_file, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.error(f"Could not read help file {help_file}: {e}")
            return Response(SERVER_ERROR, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(markdown.markdown(text))

    @extend_schema(
        operation_id="upload_paste",
        summary="Upload a paste",
        description=(
            "Store text and publish it under a name. The response body is the "
            "name. Without an edit password the paste can never be changed or deleted."
        ),
        request=UploadSerializer,
        responses={
            200: OpenApiResponse(response=OpenApiTypes.STR, description="Name of the new paste"),
            400: OpenApiResponse(description='Missing "f" field or negative expiry'),
            409: OpenApiResponse(description="Name already taken"),
            413: OpenApiResponse(description="Body larger than 2MiB"),
            422: OpenApiResponse(description="Expiry is not an integer"),
        },
        tags=["Pastes"],
    )
    def post(self, request):
        self.check_content_length(request, get_setting("MAX_UPLOAD_SIZE"))

        serializer = UploadSerializer(data=self.form_data(request))
        self.validate_form(serializer)
        fields = serializer.validated_data

        record = services.upload(
            self.store,
            fields["f"],
            name=fields["name"],
            expire=fields["e"],
            access_password=fields["ap"],
            edit_password=fields["ep"],
            name_length=get_setting("NAME_LENGTH"),
        )
        return Response(record.name)


class PasteDetailView(PasteAPIView):
    """Read, replace or delete one paste."""

    @extend_schema(
        operation_id="read_paste",
        summary="Read a paste",
        description="Return the stored text.",
        parameters=[
            NAME_PARAMETER,
            OpenApiParameter(
                name="ap",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Access password, if the paste has one",
                required=False,
            ),
        ],
        responses={
            200: OpenApiResponse(response=OpenApiTypes.STR, description="The paste text"),
            401: OpenApiResponse(description="Wrong or missing access password"),
            404: OpenApiResponse(description="Paste not found"),
            410: OpenApiResponse(description="Paste expired"),
        },
        tags=["Pastes"],
    )
    def get(self, request, name: str):
        record = services.retrieve(self.store, name, request.query_params.get("ap", ""))
        return Response(record.data)

    @extend_schema(
        operation_id="edit_paste",
        summary="Replace a paste's text",
        description="Overwrite the text of a paste. Requires the edit password given at upload.",
        parameters=[NAME_PARAMETER],
        request=EditSerializer,
        responses={
            200: OpenApiResponse(description="Paste updated"),
            400: OpenApiResponse(description='Missing "f" field'),
            401: OpenApiResponse(description="Editing not permitted"),
            404: OpenApiResponse(description="Paste not found"),
            410: OpenApiResponse(description="Paste expired"),
            413: OpenApiResponse(description="Body larger than 10MiB"),
        },
        tags=["Pastes"],
    )
    def put(self, request, name: str):
        self.check_content_length(request, get_setting("MAX_EDIT_SIZE"))

        serializer = EditSerializer(data=self.form_data(request))
        self.validate_form(serializer)

        services.edit(
            self.store,
            name,
            serializer.validated_data["f"],
            edit_password=serializer.validated_data["ep"],
        )
        return Response()

    @extend_schema(
        operation_id="delete_paste",
        summary="Delete a paste",
        description="Remove a paste. Requires the edit password given at upload.",
        parameters=[
            NAME_PARAMETER,
            OpenApiParameter(
                name="ep",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Edit password (may also be sent in the form body)",
                required=False,
            ),
        ],
        responses={
            200: OpenApiResponse(description="Paste deleted"),
            401: OpenApiResponse(description="Deleting not permitted"),
            404: OpenApiResponse(description="Paste not found"),
        },
        tags=["Pastes"],
    )
    def delete(self, request, name: str):
        services.delete(self.store, name, self.form_data(request).get("ep", ""))
        return Response()
