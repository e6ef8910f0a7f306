"""Event board backend: events and parrot endpoints over a relational store."""

# The engine and session factory are swapped by configure_engine(); read them
# through app.database rather than re-exporting them here.
from .database import Base, TransactionManager  # noqa: F401

__all__ = ["Base", "TransactionManager"]
