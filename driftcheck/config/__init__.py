"""Config package exporting loader helpers."""

from .loader import DEFAULT_STORE_PATH, Settings, load_settings

__all__ = ["Settings", "load_settings", "DEFAULT_STORE_PATH"]
