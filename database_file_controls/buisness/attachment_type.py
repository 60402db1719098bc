from enum import Enum


class MultiFileAttachmentType(Enum):
    """The kinds of file a multi-file attachment control can hold."""

    IMAGE = 'Image'
    DOCUMENT = 'Document'

    @property
    def reference(self) -> str:
        """Noun used for this kind of file in messages shown to the user."""
        return self.value.lower()
