from flask import Blueprint, abort, current_app, flash, render_template, request, url_for
from flask_login import current_user, login_required
from database_file_controls import get_attachment_settings
from database_file_controls.buisness.database_storage import DocumentStorage, ImageStorage
from database_file_controls.buisness.errors import AttachmentNotFoundError, SlotUsageError
from database_file_controls.buisness.multi_file_attachment_control import (
    REMOVE_BUTTON_PREFIX,
    DocumentAttachmentControl,
    ImageAttachmentControl,
    MultiFileAttachmentControl,
    linked_item_id_from,
)
from database_file_controls.buisness.slots import SlotStateSigner
from database_file_controls.buisness.uploaded_file import UploadedFile
from database_file_controls.logger import get_logger
from typing import Tuple

bp = Blueprint('attachment_form', __name__)
logger = get_logger("database_file_controls.routes.attachment_form")

SAVE_BUTTON = 'save'

CONTROL_KINDS = {
    'documents': (DocumentAttachmentControl, DocumentStorage),
    'images': (ImageAttachmentControl, ImageStorage),
}


def build_control(kind: str, project_name: str) -> Tuple[MultiFileAttachmentControl, int]:
    """
    Control for ``kind`` plus the linked item id from the query string.

    Slot state is signed per project, kind and item, so state posted from one
    item's form is refused on another's.
    """
    if kind not in CONTROL_KINDS:
        abort(404)
    control_class, storage_class = CONTROL_KINDS[kind]
    storage = storage_class()
    item_id = linked_item_id_from(request.args, storage.linked_item_parameter_name())
    control = control_class(
        project_name,
        current_app.config['MAX_ATTACHMENTS'],
        storage,
        get_attachment_settings(),
        validation_group=kind,
        state_signer=SlotStateSigner(current_app.config['SECRET_KEY'], f'{project_name}:{kind}:{item_id}'),
    )
    return control, item_id


def _remove_button(form):
    for name in form:
        if name.startswith(REMOVE_BUTTON_PREFIX):
            return name
    return None


@bp.route('/<project_name>/<kind>/edit', methods=['GET', 'POST'])
@login_required
def edit(project_name, kind):
    """
    Page hosting one attachment control.

    The linked item comes from the query string and is 0 for an item that has
    not been saved yet; files can still be attached and are linked on save.
    """
    control, item_id = build_control(kind, project_name)

    if request.method == 'GET':
        if item_id:
            control.set_file_attachments(control.storage.attachments_for_item(item_id))
    else:
        control.restore_state(request.form)
        remove_button = _remove_button(request.form)

        if control.ADD_BUTTON in request.form:
            upload = UploadedFile.from_file_storage(request.files.get(control.UPLOAD_FIELD))
            control.handle_attach(
                upload,
                request.form.get(control.DESCRIPTION_FIELD),
                modified_by=current_user.username,
            )
        elif remove_button:
            control.handle_remove_button(remove_button, item_id)
        elif SAVE_BUTTON in request.form:
            if item_id:
                file_ids = [reference.file_id for reference in control.get_file_attachments()]
                control.storage.link_attachments(item_id, file_ids, modified_by=current_user.username)
                flash(f'Saved {len(file_ids)} {kind} for item {item_id}', 'success')
            else:
                flash('Save the item before linking files to it', 'error')
        else:
            logger.warning(f"Attachment form posted without a command: {list(request.form.keys())}")

    query = {control.storage.linked_item_parameter_name(): item_id} if item_id else {}
    return render_template(
        'attachments/edit.html',
        widget=control.build_widget_context(),
        project_name=project_name,
        kind=kind,
        item_id=item_id,
        form_action=url_for('attachment_form.edit', project_name=project_name, kind=kind, **query),
    )


@bp.errorhandler(SlotUsageError)
def slot_usage_error(error):
    logger.error(f"Attachment form misuse: {error}")
    return str(error), 400


@bp.errorhandler(AttachmentNotFoundError)
def attachment_not_found(error):
    logger.error(f"Attachment form refers to a missing file: {error}")
    return render_template('attachments/missing.html', record_id=error.record_id), 404
