"""
Upload validators

Checks that must all pass before an uploaded file is stored. Every validator is
always run so that the user sees every applicable message at once; a failed
check is recorded on the validator, never raised.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from database_file_controls.buisness.display import format_file_size
from database_file_controls.buisness.uploaded_file import UploadedFile
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.buisness.validation")

# Only these counts are spelled out in the file count message
NUMBER_WORDS = {1: 'one', 6: 'six'}


class UploadValidator:
    """Base validator: remembers the outcome of the last validate() call."""

    def __init__(self, error_message: str, validation_group: str = ''):
        self.error_message = error_message
        self.validation_group = validation_group
        self.is_valid = True

    def validate(self, target) -> bool:
        self.is_valid = bool(self.evaluate_is_valid(target))
        if not self.is_valid:
            logger.debug(f"{type(self).__name__} failed: {self.error_message}")
        return self.is_valid

    def evaluate_is_valid(self, target) -> bool:
        raise NotImplementedError


class UploadSizeValidator(UploadValidator):
    """Uploaded file must be no larger than maximum_bytes (0 means unlimited)."""

    def __init__(self, error_message: str, maximum_bytes: int = 0, validation_group: str = ''):
        super().__init__(error_message, validation_group)
        self.maximum_bytes = maximum_bytes

    def evaluate_is_valid(self, upload: Optional[UploadedFile]) -> bool:
        if upload is None or not self.maximum_bytes:
            return True
        return upload.size <= self.maximum_bytes


class UploadFormatValidator(UploadValidator):
    """Uploaded file extension must be one of allowed_formats (empty allows anything)."""

    def __init__(self, error_message: str, allowed_formats: Iterable[str] = (), validation_group: str = ''):
        super().__init__(error_message, validation_group)
        self.allowed_formats = tuple(f.lstrip('.').lower() for f in allowed_formats)

    def evaluate_is_valid(self, upload: Optional[UploadedFile]) -> bool:
        if upload is None or not self.allowed_formats:
            return True
        return upload.extension in self.allowed_formats


class UploadFileCountValidator(UploadValidator):
    """
    Validates the attachment control itself rather than the posted file:
    there must be a free slot left for another file.
    """

    def __init__(self, error_message: str, maximum_files: int, validation_group: str = ''):
        super().__init__(error_message, validation_group)
        self.maximum_files = maximum_files

    def evaluate_is_valid(self, control) -> bool:
        if control is None:
            return False
        return control.slots.free_slot_exists()


def build_file_count_message(template: str, max_files: int, attachment_reference: str) -> str:
    """
    Fill the file count message template: {0} is the limit, {1} the noun.

    The noun is pluralised for limits above one; 1 and 6 are written as words.
    """
    reference = attachment_reference or ''
    if max_files > 1:
        reference += 's'
    max_files_text = NUMBER_WORDS.get(max_files, str(max_files))
    return template.format(max_files_text, reference)


def build_size_message(template: str, attachment_reference: str, maximum_bytes: int) -> str:
    return template.format(attachment_reference, format_file_size(maximum_bytes))


def build_format_message(template: str, attachment_reference: str, allowed_formats: Iterable[str]) -> str:
    return template.format(attachment_reference, ', '.join(allowed_formats))


def collect_messages(validators: Iterable[UploadValidator]) -> List[str]:
    """Error messages of the validators that failed, in order."""
    return [v.error_message for v in validators if not v.is_valid]
