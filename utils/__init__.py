"""Shared helpers: auth decorators, serializers and time utilities."""
