from bunko import db
from bunko.models.book import utc_now


class Review(db.Model):
    __tablename__ = "review"

    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.String(32), db.ForeignKey("book.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    comment = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    book = db.relationship("Book", back_populates="reviews")

    def to_dict(self):
        return {
            "id": self.id,
            "bookId": self.book_id,
            "name": self.name,
            "comment": self.comment,
            "rating": self.rating,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
