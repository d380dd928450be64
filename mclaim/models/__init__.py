from .stored_collection import StoredCollection

__all__ = ["StoredCollection"]
