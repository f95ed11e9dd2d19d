"""Serializer implementations."""

from querycache.infrastructure.serializers.json import JsonSerializer

__all__ = ["JsonSerializer"]
