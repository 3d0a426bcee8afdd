class JournalError(Exception):
    pass


class EntryNotFoundError(JournalError, LookupError):
    def __init__(self, entry_id: int | None):
        super().__init__(f"Journal entry {entry_id} not found")
        self.entry_id = entry_id


class InvalidLabelError(JournalError, ValueError):
    pass


class ExportRenderError(JournalError, RuntimeError):
    pass
