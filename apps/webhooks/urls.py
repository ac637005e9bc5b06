"""URL configuration for the webhooks application."""

from django.urls import path

from apps.webhooks.views import SnipcartWebhookView

app_name = "webhooks"

urlpatterns = [
    path("snipcart", SnipcartWebhookView.as_view(), name="snipcart"),
]
