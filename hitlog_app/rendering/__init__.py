from .admin_renderer import AdminRenderer

__all__ = ["AdminRenderer"]
