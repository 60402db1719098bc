"""
Attachment settings

Process-wide, read-only settings for the file attachment controls. Built once
when the application starts and handed to the controls that need them.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from database_file_controls.buisness.errors import ConfigurationError

SETTING_KEYS = (
    'FileEditPrompt',
    'ErrorUploadFileAttachmentCount',
    'FileAttachmentHandlerUrl',
    'ImageHandlerUrl',
    'MaxDocumentUploadBytes',
    'MaxImageUploadBytes',
    'AllowedDocumentFormats',
    'AllowedImageFormats',
    'ErrorUploadSize',
    'ErrorUploadFormat',
)

DEFAULT_SETTINGS = {
    'FileEditPrompt': 'Choose a file to attach',
    'ErrorUploadFileAttachmentCount': 'You can attach up to {0} {1}. Delete one before adding another.',
    'FileAttachmentHandlerUrl': '/{0}/attachments/download?fileId={1}',
    'ImageHandlerUrl': '/{0}/images/download?imageId={1}',
    'MaxDocumentUploadBytes': '5242880',
    'MaxImageUploadBytes': '2097152',
    'AllowedDocumentFormats': 'pdf;doc;docx;xls;xlsx;ppt;pptx;rtf;txt;csv',
    'AllowedImageFormats': 'jpg;jpeg;gif;png',
    'ErrorUploadSize': 'The {0} you chose is too big. It must be no larger than {1}.',
    'ErrorUploadFormat': 'The {0} you chose is not an allowed type. Allowed types are: {1}.',
}


@dataclass(frozen=True)
class AttachmentSettings:
    file_edit_prompt: str
    error_upload_file_attachment_count: str
    file_attachment_handler_url: Optional[str]
    image_handler_url: Optional[str]
    max_document_upload_bytes: int
    max_image_upload_bytes: int
    allowed_document_formats: Tuple[str, ...]
    allowed_image_formats: Tuple[str, ...]
    error_upload_size: str
    error_upload_format: str

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping] = None) -> 'AttachmentSettings':
        """
        Build settings from a key/value mapping using the recognised key names.

        Keys that are absent fall back to DEFAULT_SETTINGS. An explicitly empty
        handler URL disables link building for that attachment type.
        """
        values = dict(DEFAULT_SETTINGS)
        for key in SETTING_KEYS:
            if mapping is not None and key in mapping and mapping[key] is not None:
                values[key] = mapping[key]

        return cls(
            file_edit_prompt=str(values['FileEditPrompt']),
            error_upload_file_attachment_count=str(values['ErrorUploadFileAttachmentCount']),
            file_attachment_handler_url=str(values['FileAttachmentHandlerUrl']) or None,
            image_handler_url=str(values['ImageHandlerUrl']) or None,
            max_document_upload_bytes=_parse_bytes('MaxDocumentUploadBytes', values['MaxDocumentUploadBytes']),
            max_image_upload_bytes=_parse_bytes('MaxImageUploadBytes', values['MaxImageUploadBytes']),
            allowed_document_formats=parse_formats(values['AllowedDocumentFormats']),
            allowed_image_formats=parse_formats(values['AllowedImageFormats']),
            error_upload_size=str(values['ErrorUploadSize']),
            error_upload_format=str(values['ErrorUploadFormat']),
        )

    @classmethod
    def from_environment(cls, environ: Optional[Mapping] = None) -> 'AttachmentSettings':
        """Build settings from environment variables named exactly like the setting keys."""
        environ = os.environ if environ is None else environ
        return cls.from_mapping({key: environ[key] for key in SETTING_KEYS if key in environ})


def parse_formats(value) -> Tuple[str, ...]:
    """Turn 'jpg;.PNG, gif' (or a list) into ('jpg', 'png', 'gif')."""
    if isinstance(value, str):
        parts = re.split(r'[;,\s]+', value)
    else:
        parts = list(value or [])
    formats = []
    for part in parts:
        part = str(part).strip().lstrip('.').lower()
        if part and part not in formats:
            formats.append(part)
    return tuple(formats)


def _parse_bytes(key: str, value) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Setting {key} must be a whole number of bytes, got {value!r}")
    if parsed < 0:
        raise ConfigurationError(f"Setting {key} cannot be negative, got {parsed}")
    return parsed
