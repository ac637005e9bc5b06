"""EasyPost rate provider package."""

from services.providers.easypost.adapter import EasyPostAdapter
from services.providers.easypost.client import EasyPostClient

__all__ = ["EasyPostAdapter", "EasyPostClient"]
