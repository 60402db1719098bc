from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage


@dataclass(frozen=True)
class UploadedFile:
    """A file posted from the browser, read fully into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """Extension without the dot, lower case ('' when there is none)."""
        return Path(self.filename).suffix.lstrip('.').lower()

    @classmethod
    def from_file_storage(cls, file_storage: Optional[FileStorage]) -> Optional['UploadedFile']:
        """
        Read a Werkzeug upload. Returns None when no file was chosen.

        Only the base name of the client's path is kept, so a name posted as
        'C:\\Users\\me\\report.pdf' is stored as 'report.pdf'.
        """
        if file_storage is None or not file_storage.filename:
            return None
        filename = file_storage.filename.replace('\\', '/').rsplit('/', 1)[-1]
        data = file_storage.read()
        content_type = file_storage.mimetype or 'application/octet-stream'
        return cls(filename=filename, content_type=content_type, data=data)
