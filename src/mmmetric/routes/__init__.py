"""Collector-side routes."""

from .pixel import create_pixel_router

__all__ = ["create_pixel_router"]
