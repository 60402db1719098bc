"""
Tests for the attach/detach protocol and the render materializer,
run against the in-memory storage.
"""
import pytest

from database_file_controls.buisness.attachment_type import MultiFileAttachmentType
from database_file_controls.buisness.errors import AttachmentNotFoundError, SlotUsageError, StorageError
from database_file_controls.buisness.multi_file_attachment_control import (
    DocumentAttachmentControl,
    ImageAttachmentControl,
    linked_item_id_from,
    slot_index_from_button,
)
from database_file_controls.buisness.slots import AttachmentReference
from database_file_controls.buisness.uploaded_file import UploadedFile
from fake_storage import InMemoryStorage


def pdf(name='report.pdf', data=b'%PDF-1.4 test'):
    return UploadedFile(filename=name, content_type='application/pdf', data=data)


@pytest.fixture
def control(storage, settings):
    return DocumentAttachmentControl('files', 3, storage, settings)


class TestAttach:

    def test_valid_upload_is_saved_and_slotted(self, control, storage):
        record_id = control.handle_attach(pdf(), description='  Annual report  ', modified_by='tester')

        assert record_id == 100
        assert storage.saved == [('report.pdf', 'application/pdf', 'Annual report', 'tester')]
        assert control.get_file_attachments() == [AttachmentReference(100, 'report.pdf')]
        assert control.validation_messages == []

    def test_description_is_truncated(self, control, storage):
        control.handle_attach(pdf(), description='d' * 300)

        assert len(storage.saved[0][2]) == control.FILE_DESC_MAX_LENGTH

    def test_invalid_upload_is_not_saved(self, control, storage):
        control.handle_attach(pdf('virus.exe'))

        assert storage.saved == []
        assert control.get_file_attachments() == []
        assert control.validation_messages == [control.format_validator.error_message]

    def test_empty_upload_is_not_saved(self, control, storage):
        assert control.handle_attach(pdf(data=b'')) is None
        assert control.handle_attach(None) is None

        assert storage.saved == []

    def test_full_store_skips_storage(self, storage, settings):
        control = DocumentAttachmentControl('files', 1, storage, settings)
        control.handle_attach(pdf('one.pdf'))

        assert control.handle_attach(pdf('two.pdf')) is None

        assert [s[0] for s in storage.saved] == ['one.pdf']
        assert control.validation_messages == [control.file_count_validator.error_message]

    def test_zero_capacity_never_saves(self, storage, settings):
        control = DocumentAttachmentControl('files', 0, storage, settings)

        assert control.handle_attach(pdf()) is None
        assert storage.saved == []

    def test_storage_without_id_leaves_slots_alone(self, control, storage):
        storage.save_returns = 0

        assert control.handle_attach(pdf()) is None
        assert control.get_file_attachments() == []

    def test_storage_error_propagates(self, control, storage):
        def failing_save(*args, **kwargs):
            raise StorageError('database unavailable')
        storage.save = failing_save

        with pytest.raises(StorageError):
            control.handle_attach(pdf())
        assert control.get_file_attachments() == []


class TestDetach:

    def test_detach_deletes_and_clears_slot(self, control, storage):
        control.handle_attach(pdf('a.pdf'))
        control.handle_attach(pdf('b.pdf'))

        control.handle_detach(0, linked_item_id=7)

        assert storage.deleted == [(100, 7)]
        assert control.get_file_attachments() == [AttachmentReference(101, 'b.pdf')]
        assert control.slots.find_free_slot() == 0

    def test_slot_cleared_even_when_storage_has_no_record(self, control, storage):
        control.set_file_attachments([(55, 'gone.pdf')])

        control.handle_detach(0)

        assert storage.deleted == [(55, 0)]
        assert control.get_file_attachments() == []

    @pytest.mark.parametrize('index', [-1, 3, 10])
    def test_out_of_range_index_is_fatal(self, control, storage, index):
        control.handle_attach(pdf())

        with pytest.raises(SlotUsageError):
            control.handle_detach(index)
        assert storage.deleted == []

    def test_empty_slot_is_fatal(self, control):
        with pytest.raises(SlotUsageError):
            control.handle_detach(1)

    def test_remove_button_name(self, control, storage):
        control.handle_attach(pdf())

        control.handle_remove_button('removeFile_0', 3)

        assert storage.deleted == [(100, 3)]

    @pytest.mark.parametrize('name', ['removeFile_', 'removeFile_x', 'deleteFile_0', '', None])
    def test_malformed_remove_button_is_fatal(self, name):
        with pytest.raises(SlotUsageError):
            slot_index_from_button(name)


@pytest.mark.parametrize('args, expected', [
    ({'itemId': '12'}, 12),
    ({'itemId': 'abc'}, 0),
    ({'itemId': ''}, 0),
    ({}, 0),
])
def test_linked_item_id_from(args, expected):
    assert linked_item_id_from(args, 'itemId') == expected


class TestMaterialize:

    def test_visible_only_for_occupied_slots(self, control, storage):
        control.handle_attach(pdf('a.pdf', data=b'12345'))

        displays = control.materialize()

        assert [d.visible for d in displays] == [True, False, False]
        descriptor = displays[0].descriptor
        assert descriptor.file_id == 100
        assert descriptor.file_name == 'a.pdf'
        assert descriptor.extension == '.pdf'
        assert descriptor.size == 5
        assert descriptor.url == 'http://localhost/files/attachments/download?fileId=100'
        assert displays[1].descriptor is None

    def test_only_occupied_slots_fetch_metadata(self, control, storage):
        storage.add_file(8, 'b.pdf')
        control.set_file_attachments([(8, 'b.pdf')])

        control.materialize()

        assert storage.metadata_fetches == [8]

    def test_materialize_is_repeatable(self, control):
        control.handle_attach(pdf('a.pdf'))
        control.handle_attach(pdf('b.pdf'))
        control.handle_detach(0)

        first = control.materialize()
        second = control.materialize()

        assert first == second
        assert control.get_file_attachments() == [AttachmentReference(101, 'b.pdf')]

    def test_missing_metadata_fails_the_render(self, control):
        control.set_file_attachments([(999, 'lost.pdf')])

        with pytest.raises(AttachmentNotFoundError):
            control.materialize()

    def test_image_control_uses_image_url(self, settings):
        storage = InMemoryStorage(MultiFileAttachmentType.IMAGE)
        storage.add_file(3, 'photo.JPG', content_type='image/jpeg')
        control = ImageAttachmentControl('gallery', 2, storage, settings)
        control.set_file_attachments([(3, 'photo.JPG')])

        descriptor = control.materialize()[0].descriptor

        assert descriptor.url == 'https://images.example.org/gallery/3'
        assert descriptor.extension == '.jpg'

    def test_request_host_used_for_relative_urls(self, app, control, storage):
        control.handle_attach(pdf())

        with app.test_request_context('/', base_url='https://intranet.example.org'):
            descriptor = control.materialize()[0].descriptor

        assert descriptor.url == 'https://intranet.example.org/files/attachments/download?fileId=100'


def test_widget_context(control):
    control.handle_attach(pdf('a.pdf'))

    context = control.build_widget_context()

    assert context['prompt'] == control.settings.file_edit_prompt
    assert context['hidden_fields']['fileId_0'] == '100'
    assert context['can_add'] is True
    assert len(context['slots']) == 3
    assert context['description_label'] is None


def test_image_control_wording(settings, storage):
    control = ImageAttachmentControl('files', 6, storage, settings)

    assert control.attachment_reference == 'image'
    assert control.description_label
    assert control.file_count_validator.error_message == settings.error_upload_file_attachment_count.format('six', 'images')
