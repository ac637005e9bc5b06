"""Serializers for Snipcart webhook responses."""

from __future__ import annotations

from rest_framework import serializers


class WebhookEnvelopeSerializer(serializers.Serializer):
    """Documents the inbound webhook envelope."""

    eventName = serializers.CharField(help_text="shippingrates.fetch, taxes.calculate, ...")  # noqa: N815
    createdOn = serializers.DateTimeField(required=False)  # noqa: N815
    content = serializers.JSONField(help_text="Event-specific payload")


class ShippingRateSerializer(serializers.Serializer):
    """Serializer for a shipping rate offered at checkout."""

    userDefinedId = serializers.CharField(source="id")  # noqa: N815
    cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    description = serializers.CharField()


class ShippingRatesResponseSerializer(serializers.Serializer):
    """Serializer for the shippingrates.fetch response."""

    rates = ShippingRateSerializer(many=True)


class ShippingErrorSerializer(serializers.Serializer):
    """Serializer for a shipping error shown to the customer."""

    key = serializers.CharField()
    message = serializers.CharField()


class ShippingErrorsResponseSerializer(serializers.Serializer):
    """Serializer for a shippingrates.fetch response that blocks checkout."""

    errors = ShippingErrorSerializer(many=True)


class TaxSerializer(serializers.Serializer):
    """Serializer for a tax line."""

    name = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    numberForInvoice = serializers.CharField(source="number_for_invoice")  # noqa: N815
    rate = serializers.DecimalField(max_digits=6, decimal_places=4)


class TaxesResponseSerializer(serializers.Serializer):
    """Serializer for the taxes.calculate response."""

    taxes = TaxSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    """Serializer for error responses."""

    error = serializers.CharField()
