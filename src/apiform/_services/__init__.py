from ._base_service import ApiService

__all__ = ["ApiService"]
