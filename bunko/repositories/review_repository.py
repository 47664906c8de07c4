from bunko import db
from bunko.models.review import Review


class ReviewRepository:
    def get_for_book(self, book_id):
        return (
            Review.query.filter_by(book_id=book_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def add(self, review):
        db.session.add(review)
        db.session.commit()
        return review
