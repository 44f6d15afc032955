"""
Event publishing to the ingress endpoint.
"""
from .client import PublishClient
from .models import CloudEvent

__all__ = ["CloudEvent", "PublishClient"]
