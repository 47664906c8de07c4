from flask import current_app, jsonify, request

from bunko.blueprints.reviews import reviews_bp
from bunko.services.captcha import TurnstileVerifier
from bunko.services.review_service import ReviewService, ReviewValidationError


def _review_service():
    return ReviewService(TurnstileVerifier.from_config(current_app.config))


@reviews_bp.route("/api/reviews", methods=["POST"])
def submit_review():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid request body"}), 400
    try:
        review_id = _review_service().create_review(
            data.get("bookId"),
            data.get("name"),
            data.get("comment"),
            data.get("rating"),
            data.get("captchaToken"),
        )
    except ReviewValidationError as exc:
        return jsonify({"error": exc.message}), exc.status
    except Exception:
        current_app.logger.exception("Error submitting review")
        return jsonify({"error": "Failed to submit review"}), 500
    return jsonify({
        "success": True,
        "reviewId": review_id,
        "message": "Review submitted successfully",
    }), 201


@reviews_bp.route("/api/books/<book_id>/reviews", methods=["GET"])
def list_reviews(book_id):
    service = _review_service()
    reviews = service.list_by_book(book_id)
    return jsonify({
        "reviews": [r.to_dict() for r in reviews],
        "count": len(reviews),
        "averageRating": round(service.average_rating(reviews), 1),
    }), 200
