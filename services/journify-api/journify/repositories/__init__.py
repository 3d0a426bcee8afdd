from .entries import JournalEntryRepository

__all__ = ["JournalEntryRepository"]
