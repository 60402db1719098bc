"""
Multi File Attachment Control
Lets the user build up a list of files, one upload at a time, for a single form
field. File bytes go straight to the storage collaborator; the control keeps
only (id, name) pairs in its slot store.

Order of calls over one request:

    restore_state(form)       posted hidden fields -> slot store (postbacks only)
    set_file_attachments(..)  item's stored files -> slot store (first load only)
    handle_attach / handle_detach
                              at most one command per request
    materialize()             slot store -> one SlotDisplay per slot, once,
                              after every mutation for the request is done
"""

from __future__ import annotations

import re
from typing import Iterable, List, Mapping, Optional

from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.buisness.display import (
    DisplayDescriptor,
    SlotDisplay,
    get_handler_url,
)
from database_file_controls.buisness.errors import SlotUsageError
from database_file_controls.buisness.slots import STATE_FIELD, AttachmentReference, SlotStateSigner, SlotStore
from database_file_controls.buisness.storage import AttachmentStorage
from database_file_controls.buisness.uploaded_file import UploadedFile
from database_file_controls.buisness.validation import (
    UploadFileCountValidator,
    UploadFormatValidator,
    UploadSizeValidator,
    build_file_count_message,
    build_format_message,
    build_size_message,
    collect_messages,
)
from database_file_controls.config import AttachmentSettings
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.buisness.control")

REMOVE_BUTTON_PREFIX = 'removeFile_'
_REMOVE_BUTTON_PATTERN = re.compile(r'^removeFile_(\d+)$')


def slot_index_from_button(button_name: str) -> int:
    """Slot index encoded in a remove button name such as 'removeFile_2'."""
    match = _REMOVE_BUTTON_PATTERN.match(button_name or '')
    if not match:
        raise SlotUsageError(f"Could not identify the file to remove from button {button_name!r}")
    return int(match.group(1))


def linked_item_id_from(args: Mapping, parameter_name: str) -> int:
    """Best-effort linked item id from query arguments; 0 when absent or not a number."""
    try:
        return int(args.get(parameter_name) or 0)
    except (TypeError, ValueError):
        return 0


class MultiFileAttachmentControl:
    """
    A fixed number of file slots plus the add/remove/validate protocol around them.

    Use DocumentAttachmentControl or ImageAttachmentControl, which pick the
    formats, size limit and wording for their kind of file.
    """

    FILE_DESC_MAX_LENGTH = 255
    UPLOAD_FIELD = 'fileUpload'
    DESCRIPTION_FIELD = 'fileDescription'
    ADD_BUTTON = 'addFile'

    description_label: Optional[str] = None

    def __init__(self,
                 project_name: str,
                 attachment_type: MultiFileAttachmentType,
                 max_files: int,
                 storage: AttachmentStorage,
                 settings: AttachmentSettings,
                 maximum_bytes: int = 0,
                 allowed_formats: Iterable[str] = (),
                 validation_group: str = '',
                 attachment_reference: Optional[str] = None,
                 state_signer: Optional[SlotStateSigner] = None):
        self.project_name = project_name
        self.attachment_type = attachment_type
        self.max_files = max_files
        self.storage = storage
        self.settings = settings
        self.validation_group = validation_group
        self.attachment_reference = attachment_reference or attachment_type.reference
        self.slots = SlotStore(max_files)
        self.state_signer = state_signer

        allowed_formats = tuple(allowed_formats)
        self.size_validator = UploadSizeValidator(
            build_size_message(settings.error_upload_size, self.attachment_reference, maximum_bytes),
            maximum_bytes,
            validation_group,
        )
        self.format_validator = UploadFormatValidator(
            build_format_message(settings.error_upload_format, self.attachment_reference, allowed_formats),
            allowed_formats,
            validation_group,
        )
        self.file_count_validator = UploadFileCountValidator(
            build_file_count_message(
                settings.error_upload_file_attachment_count, max_files, self.attachment_reference
            ),
            max_files,
            validation_group,
        )

    def __repr__(self):
        return f'<{type(self).__name__} {self.project_name} {self.slots!r}>'

    @property
    def validators(self):
        return [self.size_validator, self.format_validator, self.file_count_validator]

    # State

    def set_file_attachments(self, attachments: Iterable):
        """Load an item's existing files into a fresh session (not on postback)."""
        self.slots.populate_from(attachments)

    def get_file_attachments(self) -> List[AttachmentReference]:
        """Files attached in this session, in slot order."""
        return self.slots.references()

    def restore_state(self, form: Mapping):
        """
        Replace the slot store with the state posted back in hidden fields.

        With a state signer the posted pairs must match the signed copy, or
        SlotStateTamperedError is raised and the store is left as it was.
        """
        if self.state_signer is not None:
            self.slots = self.state_signer.restore(form, self.max_files)
        else:
            self.slots = SlotStore.from_form(form, self.max_files)

    def hidden_fields(self) -> dict:
        fields = self.slots.to_form_fields()
        if self.state_signer is not None:
            fields[STATE_FIELD] = self.state_signer.sign(self.slots)
        return fields

    # Validation

    def validate_file_save_request(self, upload: Optional[UploadedFile]) -> bool:
        """Run every validator (no short circuit) and report whether all passed."""
        self.size_validator.validate(upload)
        self.format_validator.validate(upload)
        self.file_count_validator.validate(self)
        return all(v.is_valid for v in self.validators)

    @property
    def validation_messages(self) -> List[str]:
        return collect_messages(self.validators)

    # Commands

    def handle_attach(self, upload: Optional[UploadedFile], description: Optional[str] = None,
                      modified_by: Optional[str] = None) -> Optional[int]:
        """
        Store an uploaded file and record it in the first free slot.

        Returns the new record id, or None when nothing was stored: the store is
        full, a validator failed, no file was posted, or storage gave no id.
        StorageError from the storage collaborator propagates unchanged.

        A full store does not abort silently: only the file count validator is
        run, so its message reaches the user, and storage is never called.
        """
        if not self.slots.free_slot_exists():
            # Report the full store to the user; nothing else is attempted.
            self.file_count_validator.validate(self)
            logger.debug(f"Attach ignored: all {self.max_files} slots in use")
            return None

        if not self.validate_file_save_request(upload):
            logger.info(f"Attach rejected for {self.project_name}: {self.validation_messages}")
            return None

        if upload is None or upload.size == 0:
            logger.debug("Attach ignored: no file posted")
            return None

        if description:
            description = description.strip()[:self.FILE_DESC_MAX_LENGTH] or None

        record_id = self.storage.save(
            upload.data,
            upload.filename,
            upload.content_type,
            description,
            modified_by,
        )
        if not record_id or record_id <= 0:
            logger.warning(f"Storage returned no id for {upload.filename}; slot store unchanged")
            return None

        self.slots.add(record_id, upload.filename)
        logger.info(f"Attached {self.attachment_type.value} {record_id} ({upload.filename}) by {modified_by or 'anonymous'}")
        return record_id

    def handle_detach(self, slot_index: int, linked_item_id: int = 0):
        """
        Delete the file held in ``slot_index`` and clear its slot.

        The slot is cleared once the storage call returns, whatever it did.
        An index outside the store, or an empty slot, raises SlotUsageError.
        """
        file_id = self.slots.file_id_at(slot_index)

        self.storage.delete(file_id, linked_item_id)
        self.slots.remove_by_id(file_id)
        logger.info(f"Detached {self.attachment_type.value} {file_id} from slot {slot_index} (item {linked_item_id})")

    def handle_remove_button(self, button_name: str, linked_item_id: int = 0):
        self.handle_detach(slot_index_from_button(button_name), linked_item_id)

    # Rendering

    def materialize(self) -> List[SlotDisplay]:
        """
        One SlotDisplay per slot, in index order. Read only.

        Occupied slots fetch their file's metadata (never its bytes); a failed
        fetch propagates so the page does not render a blank link.
        """
        displays = []
        for index in range(self.slots.max_files):
            slot = self.slots.slot(index)
            if not slot.occupied:
                displays.append(SlotDisplay(index=index, visible=False))
                continue

            metadata = self.storage.fetch_metadata(slot.file_id)
            descriptor = DisplayDescriptor(
                file_id=slot.file_id,
                file_name=slot.file_name,
                url=get_handler_url(self.settings, self.attachment_type, slot.file_id, self.project_name),
                extension=metadata.extension,
                size=metadata.file_size,
            )
            displays.append(SlotDisplay(index=index, visible=True, descriptor=descriptor))
        return displays

    def build_widget_context(self) -> dict:
        """Everything the widget template needs for this render."""
        return {
            'prompt': self.settings.file_edit_prompt,
            'description_label': self.description_label,
            'description_max_length': self.FILE_DESC_MAX_LENGTH,
            'attachment_reference': self.attachment_reference,
            'validation_group': self.validation_group,
            'validation_messages': self.validation_messages,
            'slots': self.materialize(),
            'hidden_fields': self.hidden_fields(),
            'upload_field': self.UPLOAD_FIELD,
            'description_field': self.DESCRIPTION_FIELD,
            'add_button': self.ADD_BUTTON,
            'remove_button_prefix': REMOVE_BUTTON_PREFIX,
            'can_add': self.slots.free_slot_exists(),
        }


class DocumentAttachmentControl(MultiFileAttachmentControl):
    """Attachment control for documents, using the document format and size settings."""

    def __init__(self, project_name: str, max_files: int, storage: AttachmentStorage,
                 settings: AttachmentSettings, validation_group: str = '',
                 attachment_reference: str = 'document',
                 state_signer: Optional[SlotStateSigner] = None):
        super().__init__(
            project_name,
            MultiFileAttachmentType.DOCUMENT,
            max_files,
            storage,
            settings,
            maximum_bytes=settings.max_document_upload_bytes,
            allowed_formats=settings.allowed_document_formats,
            validation_group=validation_group,
            attachment_reference=attachment_reference,
            state_signer=state_signer,
        )


class ImageAttachmentControl(MultiFileAttachmentControl):
    """Attachment control for images; asks for a description of each image."""

    description_label = 'Describe the image'

    def __init__(self, project_name: str, max_files: int, storage: AttachmentStorage,
                 settings: AttachmentSettings, validation_group: str = '',
                 attachment_reference: str = 'image',
                 state_signer: Optional[SlotStateSigner] = None):
        super().__init__(
            project_name,
            MultiFileAttachmentType.IMAGE,
            max_files,
            storage,
            settings,
            maximum_bytes=settings.max_image_upload_bytes,
            allowed_formats=settings.allowed_image_formats,
            validation_group=validation_group,
            attachment_reference=attachment_reference,
            state_signer=state_signer,
        )
