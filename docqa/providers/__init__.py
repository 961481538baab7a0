"""Concrete adapters for the interfaces in ``docqa.interfaces``."""
