"""
Attachment Storage
Interface the controls use to keep file bytes in the database.

The controls only ever hold (id, name) pairs. Everything else about a stored
file lives behind this interface, which has one implementation per kind of
attachment (documents, images).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.buisness.slots import AttachmentReference


@dataclass(frozen=True)
class FileMetadata:
    """Details of a stored file without its bytes."""
    record_id: int
    original_name: str
    content_type: str
    file_size: int
    description: Optional[str] = None

    @property
    def extension(self) -> str:
        return Path(self.original_name).suffix.lower()


@dataclass(frozen=True)
class FileContent:
    """A stored file including its bytes."""
    metadata: FileMetadata
    data: bytes


class AttachmentStorage(ABC):
    """
    Storage collaborator for one kind of attachment.

    save/delete/fetch failures raise StorageError; fetching an unknown id
    raises AttachmentNotFoundError.
    """

    attachment_type: MultiFileAttachmentType

    @abstractmethod
    def save(self, data: bytes, original_name: str, content_type: str,
             description: Optional[str], modified_by: Optional[str]) -> int:
        """Store a file and return its new record id."""

    @abstractmethod
    def delete(self, record_id: int, linked_item_id: int = 0):
        """Delete a stored file and its link to ``linked_item_id`` (0 when unknown)."""

    @abstractmethod
    def fetch_metadata(self, record_id: int) -> FileMetadata:
        """Details of a stored file without loading its bytes."""

    @abstractmethod
    def fetch_full(self, record_id: int) -> FileContent:
        """Details and bytes of a stored file."""

    @abstractmethod
    def attachments_for_item(self, linked_item_id: int) -> List[AttachmentReference]:
        """Files currently linked to an item, in display order."""

    @abstractmethod
    def link_attachments(self, linked_item_id: int, file_ids: Iterable[int], modified_by: Optional[str] = None):
        """Make ``file_ids`` the complete, ordered set of files linked to an item."""

    @abstractmethod
    def linked_item_parameter_name(self) -> str:
        """Query string parameter that carries the linked item id."""

    @abstractmethod
    def file_id_parameter_name(self) -> str:
        """Query string parameter the download handler reads the file id from."""
