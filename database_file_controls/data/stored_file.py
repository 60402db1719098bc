from database_file_controls import db
from database_file_controls.data.audited_base import AuditedBase
from database_file_controls.buisness.storage import FileContent, FileMetadata
from sqlalchemy.orm import deferred


class StoredFile(AuditedBase):
    """A file kept in the database, bytes included."""
    __tablename__ = 'stored_files'

    # File information
    original_name = db.Column(db.String(255), nullable=False)
    content_type = db.Column(db.String(100), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)  # Size in bytes
    description = db.Column(db.String(255), nullable=True)
    attachment_type = db.Column(db.String(20), nullable=False, index=True)  # 'Image' or 'Document'

    # BLOB storage; deferred so metadata queries never load the bytes
    file_data = deferred(db.Column(db.LargeBinary, nullable=False))

    def to_metadata(self) -> FileMetadata:
        return FileMetadata(
            record_id=self.id,
            original_name=self.original_name,
            content_type=self.content_type,
            file_size=self.file_size,
            description=self.description,
        )

    def to_content(self) -> FileContent:
        return FileContent(metadata=self.to_metadata(), data=self.file_data)

    def __repr__(self):
        return f'<StoredFile {self.id} {self.original_name} ({self.file_size} bytes)>'


class ItemAttachment(AuditedBase):
    """Links a stored file to the business item (event, article...) that owns it."""
    __tablename__ = 'item_attachments'

    linked_item_id = db.Column(db.Integer, nullable=False, index=True)
    stored_file_id = db.Column(db.Integer, db.ForeignKey('stored_files.id', ondelete='CASCADE'), nullable=False)
    display_order = db.Column(db.Integer, nullable=False)

    stored_file = db.relationship('StoredFile')

    def __repr__(self):
        return f'<ItemAttachment Item:{self.linked_item_id} -> StoredFile:{self.stored_file_id}>'
