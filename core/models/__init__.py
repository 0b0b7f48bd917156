"""
Core Models Package

Esporta i base models per import nelle app.
"""

from .base import BaseModel, BaseModelWithCode, BaseModelSimple, SearchableMixin

__all__ = ["BaseModel", "BaseModelWithCode", "BaseModelSimple", "SearchableMixin"]
