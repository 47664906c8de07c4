from sqlalchemy import or_

from bunko import db
from bunko.models.book import Book


class BookRepository:
    def get_all(self):
        return Book.query.order_by(Book.created_at.desc()).all()

    def search(self, query=None, category=None):
        q = Book.query
        if query:
            pattern = f"%{query}%"
            q = q.filter(
                or_(
                    Book.title.ilike(pattern),
                    Book.author.ilike(pattern),
                    Book.description.ilike(pattern),
                )
            )
        if category:
            q = q.filter(Book.category == category)
        return q.order_by(Book.created_at.desc()).all()

    def get_categories(self):
        rows = db.session.query(Book.category).distinct().order_by(Book.category).all()
        return [r[0] for r in rows if r[0]]

    def get_by_id(self, book_id):
        return db.session.get(Book, book_id)

    def get_by_slug(self, slug):
        return Book.query.filter_by(slug=slug).first()

    def slug_exists(self, slug, exclude_id=None):
        q = Book.query.filter_by(slug=slug)
        if exclude_id is not None:
            q = q.filter(Book.id != exclude_id)
        return db.session.query(q.exists()).scalar()

    def add(self, book):
        db.session.add(book)
        db.session.commit()
        return book

    def save(self):
        db.session.commit()

    def delete(self, book):
        db.session.delete(book)
        db.session.commit()
