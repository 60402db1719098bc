"""
Display descriptors and handler URLs

What the rendering layer needs to show a link for each occupied slot. These
objects are rebuilt on every render and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import has_request_context, request

from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.config import AttachmentSettings


def format_file_size(size: int) -> str:
    """Human-readable file size, e.g. 1536 -> '1.5 KB'."""
    value = float(size)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if value < 1024.0:
            return f"{value:.1f} {unit}"
        value /= 1024.0
    return f"{value:.1f} TB"


@dataclass(frozen=True)
class DisplayDescriptor:
    file_id: int
    file_name: str
    url: Optional[str]
    extension: str
    size: int

    @property
    def size_display(self) -> str:
        return format_file_size(self.size)


@dataclass(frozen=True)
class SlotDisplay:
    """Visibility of one slot's display region, with a descriptor when visible."""
    index: int
    visible: bool
    descriptor: Optional[DisplayDescriptor] = None


def build_handler_url(template: Optional[str], project_name: str, file_id: int) -> Optional[str]:
    """
    Absolute URL of a download handler for a stored file.

    ``template`` takes the project name as {0} and the file id as {1}. Relative
    results are completed with the scheme and host of the current request, or
    http://localhost outside a request. No URL is built for ids below 1 or when
    no template is configured.
    """
    if file_id <= 0 or not template:
        return None

    file_url = template.format(project_name, file_id)
    if file_url.startswith('http://') or file_url.startswith('https://'):
        return file_url

    scheme = 'http'
    host = 'localhost'
    if has_request_context():
        scheme = request.scheme
        host = request.host

    return f"{scheme}://{host}{'' if file_url.startswith('/') else '/'}{file_url}"


def get_file_attachment_url(settings: AttachmentSettings, file_id: int, project_name: str) -> Optional[str]:
    return build_handler_url(settings.file_attachment_handler_url, project_name, file_id)


def get_image_url(settings: AttachmentSettings, image_id: int, project_name: str) -> Optional[str]:
    return build_handler_url(settings.image_handler_url, project_name, image_id)


def get_handler_url(settings: AttachmentSettings, attachment_type: MultiFileAttachmentType,
                    file_id: int, project_name: str) -> Optional[str]:
    """Document or image handler URL, chosen by attachment type."""
    if attachment_type is MultiFileAttachmentType.IMAGE:
        return get_image_url(settings, file_id, project_name)
    return get_file_attachment_url(settings, file_id, project_name)
