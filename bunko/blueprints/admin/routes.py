from flask import current_app, jsonify, request

from bunko.blueprints.admin import admin_bp
from bunko.blueprints.auth.guards import admin_required
from bunko.services.book_service import BookNotFoundError, BookService, BookValidationError
from bunko.services.image_upload import ImgbbUploader, UploadError


book_service = BookService()

# JSON field names accepted from the admin form
_FIELD_NAMES = {
    "title": "title",
    "author": "author",
    "description": "description",
    "pdfUrl": "pdf_url",
    "coverUrl": "cover_url",
    "category": "category",
}


def _book_fields(data):
    return {attr: data[key] for key, attr in _FIELD_NAMES.items() if key in data}


@admin_bp.route("/api/admin/books", methods=["GET"])
@admin_required
def list_books():
    return jsonify({"books": [b.to_dict() for b in book_service.list_books()]}), 200


@admin_bp.route("/api/admin/books", methods=["POST"])
@admin_required
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        book_id = book_service.create_book(_book_fields(data))
    except BookValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    book = book_service.get_book(book_id)
    return jsonify({"status": "ok", "book": book.to_dict()}), 201


@admin_bp.route("/api/admin/books/<book_id>", methods=["PUT"])
@admin_required
def update_book(book_id):
    data = request.get_json(silent=True) or {}
    try:
        book_service.update_book(book_id, _book_fields(data))
    except BookNotFoundError:
        return jsonify({"error": "book_not_found"}), 404
    except BookValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"status": "ok", "book": book_service.get_book(book_id).to_dict()}), 200


@admin_bp.route("/api/admin/books/<book_id>", methods=["DELETE"])
@admin_required
def delete_book(book_id):
    try:
        book_service.delete_book(book_id)
    except BookNotFoundError:
        return jsonify({"error": "book_not_found"}), 404
    return jsonify({"status": "ok"}), 200


@admin_bp.route("/api/admin/uploads/cover", methods=["POST"])
@admin_required
def upload_cover():
    image = request.files.get("image")
    if image is None or not image.filename:
        return jsonify({"error": "image_required"}), 400
    try:
        url = ImgbbUploader.from_config(current_app.config).upload(image.filename, image.read())
    except UploadError as exc:
        current_app.logger.warning("Cover upload failed: %s", exc)
        return jsonify({"error": str(exc)}), exc.status
    return jsonify({"status": "ok", "url": url}), 201
