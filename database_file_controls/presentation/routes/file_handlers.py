from flask import Blueprint, Response, current_app, request, send_file
from database_file_controls import limiter
from database_file_controls.buisness.database_storage import DocumentStorage, ImageStorage
from database_file_controls.buisness.errors import AttachmentNotFoundError
from database_file_controls.buisness.storage import AttachmentStorage
from database_file_controls.logger import get_logger
import io

bp = Blueprint('file_handlers', __name__)
logger = get_logger("database_file_controls.routes.file_handlers")


class FileAttachmentHandler:
    """
    Streams a stored file back to the browser as a download.

    The file id is read from the storage's own query string parameter.
    """

    def __init__(self, storage: AttachmentStorage):
        self.storage = storage

    def file_data_id(self, args) -> int:
        """Requested file id, or 0 when missing or not a whole number."""
        raw_id = args.get(self.storage.file_id_parameter_name())
        if raw_id is None:
            return 0
        try:
            return int(raw_id)
        except ValueError:
            return 0

    def process_request(self, args) -> Response:
        file_data_id = self.file_data_id(args)
        if file_data_id <= 0:
            logger.debug(f"Download requested without a usable id: {dict(args)}")
            return Response(status=200)

        content = self.storage.fetch_full(file_data_id)
        metadata = content.metadata
        logger.info(f"Streaming {self.storage.attachment_type.value} {file_data_id} ({metadata.original_name})")

        return send_file(
            io.BytesIO(content.data),
            as_attachment=True,
            download_name=metadata.original_name,
            mimetype=metadata.content_type,
        )


def _download_limit():
    return current_app.config['DOWNLOAD_RATE_LIMIT']


@bp.route('/<project_name>/attachments/download')
@limiter.limit(_download_limit)
def document_download(project_name):
    """Download a stored document"""
    return FileAttachmentHandler(DocumentStorage()).process_request(request.args)


@bp.route('/<project_name>/images/download')
@limiter.limit(_download_limit)
def image_download(project_name):
    """Download a stored image"""
    return FileAttachmentHandler(ImageStorage()).process_request(request.args)


@bp.errorhandler(AttachmentNotFoundError)
def file_not_found(error):
    logger.warning(f"Download of missing file: {error}")
    return 'File not found', 404
