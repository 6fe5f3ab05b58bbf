# hotel_inventory/models/__init__.py
from .document import Document

# Export all models
__all__ = [
    "Document",
]
