from flask import (
    abort,
    after_this_request,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from bunko.blueprints.reader import reader_bp
from bunko.services import navigation
from bunko.services.book_service import BookService
from bunko.services.reader_identity import ReaderIdentity


book_service = BookService()


def _reader_id():
    config = current_app.config
    identity = ReaderIdentity.from_config(config)
    reader_id = identity.resolve(request.cookies.get(config["READER_COOKIE"]))
    if reader_id is None:
        reader_id, token = identity.issue()

        @after_this_request
        def set_reader_cookie(response):
            response.set_cookie(
                config["READER_COOKIE"],
                token,
                max_age=config["READER_COOKIE_MAX_AGE"],
                httponly=True,
                samesite="Lax",
                secure=config.get("ADMIN_SESSION_SECURE", False),
            )
            return response

    return reader_id


def _tracker():
    return current_app.extensions["reading_progress"].for_reader(_reader_id())


def _as_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def _as_float(value):
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@reader_bp.route("/read/<slug>")
def read_book(slug):
    book = book_service.get_book_by_slug(slug)
    if not book:
        return render_template("catalog/not_found.html", slug=slug), 404
    tracker = _tracker()
    page = tracker.get(book.id)
    requested = request.args.get("page", type=int)
    if requested is not None and navigation.resolve_page_change(requested) is not None:
        page = requested
        tracker.set(book.id, page)
    zoom = navigation.clamp_zoom(request.args.get("zoom", navigation.DEFAULT_ZOOM, type=int))
    return render_template(
        "reader/read.html",
        book=book,
        page=page,
        zoom=zoom,
        viewer_url=navigation.viewer_url(book.pdf_url, page, zoom),
        zoom_in=navigation.step_zoom(zoom, 1),
        zoom_out=navigation.step_zoom(zoom, -1),
    )


@reader_bp.route("/read/id/<book_id>")
def read_book_by_id(book_id):
    book = book_service.get_book(book_id)
    if not book:
        abort(404)
    return redirect(url_for("reader.read_book", slug=book.slug))


@reader_bp.route("/api/progress", methods=["GET"])
def list_progress():
    positions = _tracker().list_all()
    return jsonify({book_id: p.to_dict() for book_id, p in positions.items()}), 200


@reader_bp.route("/api/progress/<book_id>", methods=["GET"])
def get_progress(book_id):
    return jsonify({"bookId": book_id, "page": _tracker().get(book_id)}), 200


@reader_bp.route("/api/progress/<book_id>", methods=["POST"])
def save_progress(book_id):
    if not book_service.get_book(book_id):
        return jsonify({"error": "book_not_found"}), 404
    data = request.get_json(silent=True) or {}
    total_pages = _as_int(data.get("total_pages"))
    if total_pages is not None and total_pages < 1:
        total_pages = None
    current = _as_int(data.get("current"))

    if "key" in data:
        if current is None:
            return jsonify({"error": "current_required"}), 400
        target = navigation.page_for_key(str(data.get("key")), current, total_pages)
    elif "start_x" in data or "end_x" in data:
        start_x = _as_float(data.get("start_x"))
        end_x = _as_float(data.get("end_x"))
        if current is None or start_x is None or end_x is None:
            return jsonify({"error": "swipe_incomplete"}), 400
        target = navigation.page_for_swipe(start_x, end_x, current, total_pages)
    else:
        page = _as_int(data.get("page"))
        if page is None:
            return jsonify({"error": "page_required"}), 400
        target = navigation.resolve_page_change(page, total_pages)

    if target is None:
        return jsonify({"scheduled": False, "page": current}), 200
    _tracker().set(book_id, target)
    return jsonify({"scheduled": True, "page": target}), 202


@reader_bp.route("/api/progress/<book_id>", methods=["DELETE"])
def clear_progress(book_id):
    result = _tracker().clear(book_id)
    return jsonify({"cleared": result.ok, "error": result.error}), 200
