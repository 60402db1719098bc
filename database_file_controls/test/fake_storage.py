"""
In-memory storage collaborator for tests that do not need a database
"""

from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.buisness.errors import AttachmentNotFoundError
from database_file_controls.buisness.slots import AttachmentReference
from database_file_controls.buisness.storage import AttachmentStorage, FileContent, FileMetadata


class InMemoryStorage(AttachmentStorage):
    """Records every call so tests can check what the control asked for."""

    def __init__(self, attachment_type=MultiFileAttachmentType.DOCUMENT, next_id=100):
        self.attachment_type = attachment_type
        self.files = {}
        self.links = {}
        self.next_id = next_id
        self.saved = []
        self.deleted = []
        self.metadata_fetches = []
        self.save_returns = None

    def add_file(self, record_id, name, data=b'data', content_type='application/pdf'):
        self.files[record_id] = FileContent(
            FileMetadata(record_id, name, content_type, len(data)), data
        )

    def save(self, data, original_name, content_type, description, modified_by):
        self.saved.append((original_name, content_type, description, modified_by))
        if self.save_returns is not None:
            return self.save_returns
        record_id = self.next_id
        self.next_id += 1
        self.files[record_id] = FileContent(
            FileMetadata(record_id, original_name, content_type, len(data), description), data
        )
        return record_id

    def delete(self, record_id, linked_item_id=0):
        self.deleted.append((record_id, linked_item_id))
        self.files.pop(record_id, None)

    def fetch_metadata(self, record_id):
        self.metadata_fetches.append(record_id)
        if record_id not in self.files:
            raise AttachmentNotFoundError(record_id)
        return self.files[record_id].metadata

    def fetch_full(self, record_id):
        if record_id not in self.files:
            raise AttachmentNotFoundError(record_id)
        return self.files[record_id]

    def attachments_for_item(self, linked_item_id):
        return [
            AttachmentReference(i, self.files[i].metadata.original_name)
            for i in self.links.get(linked_item_id, [])
        ]

    def link_attachments(self, linked_item_id, file_ids, modified_by=None):
        self.links[linked_item_id] = list(file_ids)

    def linked_item_parameter_name(self):
        return 'itemId'

    def file_id_parameter_name(self):
        return 'fileId'
