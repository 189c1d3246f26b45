import io
import os
import tempfile

from flask import Blueprint, current_app, jsonify, request, send_file

from doc_converter.errors import ArtifactMissingError, ConversionError, NotFound, UnsupportedTypeError
from doc_converter.services.history_service import fetch_artifact, list_recent_history
from doc_converter.services.pipeline import UploadedFile, convert_and_respond

bp = Blueprint('main', __name__)


@bp.route('/health')
def health():
    return jsonify({'status': 'ok'})


@bp.route('/upload', methods=['POST'])
def upload():
    uploads = [f for f in request.files.getlist('file') if f and f.filename]
    if not uploads:
        return "No files uploaded. Please select at least one file.", 400

    current_app.logger.info(f"Upload request with {len(uploads)} file(s)")
    with tempfile.TemporaryDirectory(prefix='upload-') as tmp_dir:
        files = []
        for index, storage in enumerate(uploads):
            ext = os.path.splitext(storage.filename)[1]
            tmp_path = os.path.join(tmp_dir, f"{index}{ext}")
            storage.save(tmp_path)
            files.append(UploadedFile(path=tmp_path, original_filename=storage.filename))

        try:
            result = convert_and_respond(files)
        except UnsupportedTypeError as e:
            return str(e), 400
        except ConversionError as e:
            current_app.logger.error(f"Error processing upload: {e}", exc_info=True)
            return f"Error processing files: {e.filename}: {e}", 500

    return send_file(
        io.BytesIO(result.data),
        mimetype=result.content_type,
        as_attachment=True,
        download_name=result.filename,
    )


@bp.route('/history')
def history():
    return jsonify(list_recent_history())


@bp.route('/download/<int:record_id>')
def download(record_id):
    try:
        artifact = fetch_artifact(record_id)
    except NotFound:
        return "Conversion not found", 404
    except ArtifactMissingError:
        return "PDF file not found", 404

    current_app.logger.info(f"Serving stored PDF: {artifact.filename} (ID: {record_id})")
    return send_file(
        io.BytesIO(artifact.data),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=artifact.filename,
    )


@bp.app_errorhandler(413)
def too_large(error):
    return "Uploaded files are too large.", 413
