"""
Storage module for pizza and comment documents.
"""

from .documents import DocumentStore

__all__ = ["DocumentStore"]
