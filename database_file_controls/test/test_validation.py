"""
Tests for the upload validators and their messages
"""
import pytest

from database_file_controls.buisness.multi_file_attachment_control import DocumentAttachmentControl
from database_file_controls.buisness.uploaded_file import UploadedFile
from database_file_controls.buisness.validation import (
    UploadFileCountValidator,
    UploadFormatValidator,
    UploadSizeValidator,
    build_file_count_message,
)


def upload(name='report.pdf', size=10):
    return UploadedFile(filename=name, content_type='application/pdf', data=b'x' * size)


@pytest.mark.parametrize('size, maximum, expected', [
    (10, 10, True),
    (11, 10, False),
    (10_000, 0, True),
])
def test_size_validator(size, maximum, expected):
    validator = UploadSizeValidator('too big', maximum)

    assert validator.validate(upload(size=size)) is expected
    assert validator.is_valid is expected


@pytest.mark.parametrize('name, expected', [
    ('report.pdf', True),
    ('REPORT.PDF', True),
    ('photo.exe', False),
    ('no_extension', False),
])
def test_format_validator(name, expected):
    validator = UploadFormatValidator('wrong type', ['pdf', '.docx'])

    assert validator.validate(upload(name)) is expected


def test_size_and_format_pass_without_upload():
    assert UploadSizeValidator('too big', 5).validate(None)
    assert UploadFormatValidator('wrong type', ['pdf']).validate(None)


@pytest.mark.parametrize('max_files, reference, expected', [
    (1, 'image', 'Up to one image.'),
    (6, 'document', 'Up to six documents.'),
    (3, 'image', 'Up to 3 images.'),
    (12, 'file', 'Up to 12 files.'),
])
def test_file_count_message(max_files, reference, expected):
    assert build_file_count_message('Up to {0} {1}.', max_files, reference) == expected


def test_count_validator_fails_when_store_full(storage, settings):
    control = DocumentAttachmentControl('files', 1, storage, settings)
    control.slots.add(1, 'a.pdf')

    validator = UploadFileCountValidator('full', 1)

    assert not validator.validate(control)
    # Adding anyway changes nothing
    control.slots.add(2, 'b.pdf')
    assert control.slots.occupied_count() == 1


def test_count_validator_passes_with_free_slot(storage, settings):
    control = DocumentAttachmentControl('files', 2, storage, settings)
    control.slots.add(1, 'a.pdf')

    assert UploadFileCountValidator('full', 2).validate(control)


def test_all_validators_run_and_report_every_failure(storage, settings):
    control = DocumentAttachmentControl('files', 1, storage, settings)
    control.slots.add(1, 'a.pdf')

    valid = control.validate_file_save_request(upload('huge.exe', size=5000))

    assert not valid
    assert not control.size_validator.is_valid
    assert not control.format_validator.is_valid
    assert not control.file_count_validator.is_valid
    assert len(control.validation_messages) == 3
    assert control.validation_messages[2] == settings.error_upload_file_attachment_count.format('one', 'document')
