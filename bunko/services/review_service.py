import logging

from bunko.models.review import Review
from bunko.repositories.book_repository import BookRepository
from bunko.repositories.review_repository import ReviewRepository


logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewValidationError(Exception):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


def _non_empty_str(value):
    return isinstance(value, str) and value.strip() != ""


class ReviewService:
    def __init__(self, verifier, review_repository=None, book_repository=None):
        self.verifier = verifier
        self.review_repository = review_repository or ReviewRepository()
        self.book_repository = book_repository or BookRepository()

    def list_by_book(self, book_id):
        return self.review_repository.get_for_book(book_id)

    @staticmethod
    def average_rating(reviews):
        if not reviews:
            return 0
        return sum(r.rating for r in reviews) / len(reviews)

    def create_review(self, book_id, name, comment, rating, captcha_token):
        if not _non_empty_str(book_id):
            raise ReviewValidationError("Book ID is required")
        if not _non_empty_str(name):
            raise ReviewValidationError("Name is required")
        if not _non_empty_str(comment):
            raise ReviewValidationError("Comment is required")
        if (
            isinstance(rating, bool)
            or not isinstance(rating, (int, float))
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            raise ReviewValidationError("Rating must be between 1 and 5")
        if rating != int(rating):
            raise ReviewValidationError("Rating must be a whole number of stars")
        if not _non_empty_str(captcha_token):
            raise ReviewValidationError("Captcha token is required")
        if not self.verifier.verify(captcha_token):
            raise ReviewValidationError("Captcha verification failed")
        if not self.book_repository.get_by_id(book_id):
            raise ReviewValidationError("Book not found", status=404)

        review = Review(
            book_id=book_id,
            name=name.strip(),
            comment=comment.strip(),
            rating=int(rating),
        )
        self.review_repository.add(review)
        logger.info("Review %s added for book %s", review.id, book_id)
        return review.id
