"""Domain entities.

Pure domain models; no transport concerns.
"""

from firebase_rest.domain.entities.document import Document

__all__ = ["Document"]
