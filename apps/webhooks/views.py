"""Snipcart webhook endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from asgiref.sync import async_to_sync
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from pydantic import ValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.webhooks.serializers import (
    ErrorSerializer,
    ShippingErrorsResponseSerializer,
    ShippingRatesResponseSerializer,
    TaxesResponseSerializer,
    WebhookEnvelopeSerializer,
)
from core.config import get_settings
from core.logging import bind_context, get_logger
from core.result import Failure
from services.providers import ProviderNotConfiguredError, build_provider
from services.shipping import ShipmentOrchestrator
from services.snipcart import EventName, SnipcartClient, WebhookEnvelope
from services.taxes import TaxAssessmentRequest, TaxAssessor

if TYPE_CHECKING:
    from rest_framework.request import Request

    from core.config import Settings
    from core.result import Result
    from services.providers import ProviderError
    from services.shipping import RatesOutcome
    from services.snipcart import Order, RequestValidationError

logger = get_logger(__name__)

REQUEST_TOKEN_HEADER = "X-Snipcart-RequestToken"


def _error(message: str, status_code: int) -> Response:
    return Response({"error": message}, status=status_code)


class SnipcartWebhookView(APIView):
    """
    Receives Snipcart checkout webhooks.

    The request token is validated with Snipcart before anything in the body
    is decoded. The envelope is then dispatched on its event name:
    shipping rate fetches go through the shipment orchestrator, tax
    calculations through the tax assessor, and order completions and
    unknown events are acknowledged.
    """

    authentication_classes = []
    permission_classes = []

    @extend_schema(
        request=WebhookEnvelopeSerializer,
        parameters=[
            OpenApiParameter(
                name=REQUEST_TOKEN_HEADER,
                type=OpenApiTypes.STR,
                location=OpenApiParameter.HEADER,
                required=True,
            )
        ],
        responses={
            200: OpenApiResponse(
                description="Rates, shipping errors, tax lines or an acknowledgement",
                response=ShippingRatesResponseSerializer,
            ),
            400: ErrorSerializer,
            500: ErrorSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Validate, decode and dispatch a webhook."""
        settings = get_settings()

        token = request.headers.get(REQUEST_TOKEN_HEADER)
        if not token:
            logger.warning("Webhook rejected: missing request token")
            return _error("missing request token", status.HTTP_400_BAD_REQUEST)

        validation = async_to_sync(self._validate_token)(token, settings)
        if isinstance(validation, Failure):
            return _error(validation.error.message, status.HTTP_400_BAD_REQUEST)

        try:
            envelope = WebhookEnvelope.model_validate(request.data)
        except (APIException, ValidationError) as e:
            logger.warning("Webhook envelope could not be decoded", error=str(e))
            return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        bind_context(event_name=envelope.event_name)

        event_name = envelope.event_name
        try:
            if event_name == EventName.SHIPPING_RATES_FETCH:
                return self._shipping_rates(envelope.decode_order(), settings)
            if event_name == EventName.TAXES_CALCULATE:
                return self._taxes(envelope, settings)
            if event_name == EventName.ORDER_COMPLETED:
                return self._order_completed(envelope.decode_order())
        except ValidationError as e:
            logger.warning("Webhook content could not be decoded", error=str(e))
            return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info("Unhandled webhook event acknowledged")
        return Response({}, status=status.HTTP_200_OK)

    async def _validate_token(
        self,
        token: str,
        settings: Settings,
    ) -> Result[None, RequestValidationError]:
        client = SnipcartClient(
            api_key=settings.snipcart.api_key.get_secret_value(),
            validation_url=settings.snipcart.validation_url,
        )
        try:
            return await client.validate_token(token)
        finally:
            await client.close()

    def _shipping_rates(self, order: Order, settings: Settings) -> Response:
        bind_context(invoice=order.invoice_number)

        try:
            result = async_to_sync(self._fetch_rates)(order, settings)
        except ProviderNotConfiguredError as e:
            logger.error("Rate provider unavailable", error=str(e))
            return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

        if isinstance(result, Failure):
            return _error(result.error.detailed_message, status.HTTP_500_INTERNAL_SERVER_ERROR)

        outcome = result.value
        if outcome.has_errors:
            body = ShippingErrorsResponseSerializer({"errors": outcome.errors}).data
        else:
            body = ShippingRatesResponseSerializer({"rates": outcome.rates}).data
        return Response(body, status=status.HTTP_200_OK)

    async def _fetch_rates(
        self,
        order: Order,
        settings: Settings,
    ) -> Result[RatesOutcome, ProviderError]:
        provider = build_provider(settings)
        try:
            orchestrator = ShipmentOrchestrator(provider, settings.shipping)
            return await orchestrator.fetch_rates(order)
        finally:
            await provider.close()

    def _taxes(self, envelope: WebhookEnvelope, settings: Settings) -> Response:
        cart = envelope.decode_tax_cart()
        lines = TaxAssessor(settings.tax).assess(TaxAssessmentRequest.from_cart(cart))
        body: dict[str, Any] = TaxesResponseSerializer({"taxes": lines}).data
        return Response(body, status=status.HTTP_200_OK)

    def _order_completed(self, order: Order) -> Response:
        logger.info("Order completed", invoice=order.invoice_number, total=str(order.total))
        return Response(status=status.HTTP_200_OK)
