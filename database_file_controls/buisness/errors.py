"""
Domain exceptions for the file attachment controls

Validation failures are never raised; they are collected as messages by the
validators. These exceptions cover storage failures and misuse of the control.
"""


class AttachmentError(Exception):
    """Base exception for all file attachment errors"""
    pass


class StorageError(AttachmentError):
    """Raised when the storage collaborator fails to save, delete or fetch a file"""
    pass


class AttachmentNotFoundError(StorageError):
    """Raised when no stored file exists for the requested record id"""

    def __init__(self, record_id):
        self.record_id = record_id
        super().__init__(f"No stored file with id {record_id}")


class SlotUsageError(AttachmentError):
    """Raised when a slot is addressed that cannot exist or holds no file"""
    pass


class ConfigurationError(AttachmentError):
    """Raised when an attachment setting cannot be interpreted"""
    pass


class SlotStateTamperedError(SlotUsageError):
    """Raised when posted slot state does not match the state the server signed"""
    pass
