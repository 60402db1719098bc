"""
Database Attachment Storage
Keeps attachment bytes in the stored_files table and item links in
item_attachments, one storage class per kind of attachment.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import undefer

from database_file_controls import db
from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.buisness.errors import AttachmentNotFoundError, StorageError
from database_file_controls.buisness.slots import AttachmentReference
from database_file_controls.buisness.storage import AttachmentStorage, FileContent, FileMetadata
from database_file_controls.data.stored_file import ItemAttachment, StoredFile
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.buisness.database_storage")


class DatabaseAttachmentStorage(AttachmentStorage):
    """
    SQLAlchemy storage for one attachment type.

    Each storage only sees files of its own type, so a document id is never
    served by the image handler and vice versa.
    """

    linked_item_parameter = 'itemId'
    file_id_parameter = 'fileId'

    def __init__(self, attachment_type: MultiFileAttachmentType):
        self.attachment_type = attachment_type

    def _query(self):
        return StoredFile.query.filter_by(attachment_type=self.attachment_type.value)

    def _get(self, record_id: int, include_data: bool = False) -> StoredFile:
        query = self._query()
        if include_data:
            query = query.options(undefer(StoredFile.file_data))
        try:
            stored_file = query.filter_by(id=record_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch {self.attachment_type.value} {record_id}: {e}")
            raise StorageError(f"Could not fetch file {record_id}") from e
        if stored_file is None:
            raise AttachmentNotFoundError(record_id)
        return stored_file

    def save(self, data: bytes, original_name: str, content_type: str,
             description: Optional[str], modified_by: Optional[str]) -> int:
        stored_file = StoredFile(
            original_name=original_name,
            content_type=content_type or 'application/octet-stream',
            file_size=len(data),
            description=description,
            attachment_type=self.attachment_type.value,
            file_data=data,
            modified_by=modified_by,
        )
        try:
            db.session.add(stored_file)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save {self.attachment_type.value} {original_name}: {e}")
            raise StorageError(f"Could not save file {original_name}") from e

        logger.info(f"Saved {self.attachment_type.value} {stored_file.id} ({original_name}, {stored_file.file_size} bytes)")
        return stored_file.id

    def delete(self, record_id: int, linked_item_id: int = 0):
        """
        Remove the file's link to ``linked_item_id`` (every link when it is 0).
        The file itself is deleted once no other item links to it.
        """
        try:
            links = ItemAttachment.query.filter_by(stored_file_id=record_id)
            if linked_item_id:
                links = links.filter_by(linked_item_id=linked_item_id)
            for link in links.all():
                db.session.delete(link)
            db.session.flush()

            stored_file = self._query().filter_by(id=record_id).first()
            if stored_file is None:
                logger.debug(f"Delete of unknown {self.attachment_type.value} {record_id} ignored")
            elif ItemAttachment.query.filter_by(stored_file_id=record_id).count() == 0:
                db.session.delete(stored_file)
            else:
                logger.info(f"{self.attachment_type.value} {record_id} still linked elsewhere, keeping bytes")
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to delete {self.attachment_type.value} {record_id}: {e}")
            raise StorageError(f"Could not delete file {record_id}") from e

        logger.info(f"Deleted {self.attachment_type.value} {record_id} (item {linked_item_id})")

    def fetch_metadata(self, record_id: int) -> FileMetadata:
        return self._get(record_id).to_metadata()

    def fetch_full(self, record_id: int) -> FileContent:
        return self._get(record_id, include_data=True).to_content()

    def _item_links(self, linked_item_id: int):
        return (
            ItemAttachment.query
            .join(StoredFile, ItemAttachment.stored_file_id == StoredFile.id)
            .filter(
                ItemAttachment.linked_item_id == linked_item_id,
                StoredFile.attachment_type == self.attachment_type.value,
            )
            .order_by(ItemAttachment.display_order)
        )

    def attachments_for_item(self, linked_item_id: int) -> List[AttachmentReference]:
        try:
            links = self._item_links(linked_item_id).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list attachments for item {linked_item_id}: {e}")
            raise StorageError(f"Could not list files for item {linked_item_id}") from e
        return [AttachmentReference(link.stored_file.id, link.stored_file.original_name) for link in links]

    def link_attachments(self, linked_item_id: int, file_ids: Iterable[int], modified_by: Optional[str] = None):
        file_ids = list(file_ids)
        try:
            for link in self._item_links(linked_item_id).all():
                db.session.delete(link)
            db.session.flush()

            for display_order, file_id in enumerate(file_ids, start=1):
                self._get(file_id)
                db.session.add(ItemAttachment(
                    linked_item_id=linked_item_id,
                    stored_file_id=file_id,
                    display_order=display_order,
                    modified_by=modified_by,
                ))
            db.session.commit()
        except AttachmentNotFoundError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to link files to item {linked_item_id}: {e}")
            raise StorageError(f"Could not link files to item {linked_item_id}") from e

        logger.info(f"Linked {len(file_ids)} {self.attachment_type.value}(s) to item {linked_item_id}")

    def linked_item_parameter_name(self) -> str:
        return self.linked_item_parameter

    def file_id_parameter_name(self) -> str:
        return self.file_id_parameter


class DocumentStorage(DatabaseAttachmentStorage):
    file_id_parameter = 'fileId'

    def __init__(self):
        super().__init__(MultiFileAttachmentType.DOCUMENT)


class ImageStorage(DatabaseAttachmentStorage):
    file_id_parameter = 'imageId'

    def __init__(self):
        super().__init__(MultiFileAttachmentType.IMAGE)
