from .documents import Document, DocumentBody

__all__ = ['Document', 'DocumentBody']
