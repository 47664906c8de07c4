import re
import unicodedata
import uuid
from datetime import datetime, timezone

from bunko import db


BOOK_CATEGORIES = ("Scripts", "Short Stories", "Novels", "Poems")
DEFAULT_CATEGORY = BOOK_CATEGORIES[0]


def _new_id():
    return uuid.uuid4().hex


def utc_now():
    return datetime.now(timezone.utc)


class Book(db.Model):
    __tablename__ = "book"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    author = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=False, default="")
    pdf_url = db.Column(db.String(1024), nullable=False)
    cover_url = db.Column(db.String(1024), nullable=True)
    category = db.Column(db.String(32), nullable=False, default=DEFAULT_CATEGORY)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utc_now, onupdate=utc_now
    )

    reviews = db.relationship(
        "Review", back_populates="book", lazy="select", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Book {self.slug}>"

    @staticmethod
    def slugify(text):
        text = text.lower()
        text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
        text = re.sub(r"[^\w\s-]", "", text).strip()
        text = re.sub(r"[-\s_]+", "-", text).strip("-")
        return text or "book"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "author": self.author or "",
            "description": self.description or "",
            "pdfUrl": self.pdf_url,
            "coverUrl": self.cover_url or "",
            "category": self.category,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
