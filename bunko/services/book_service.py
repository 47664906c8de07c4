import logging
from urllib.parse import urlparse

from bunko.models.book import BOOK_CATEGORIES, DEFAULT_CATEGORY, Book
from bunko.repositories.book_repository import BookRepository
from bunko.repositories.review_repository import ReviewRepository


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "author", "description", "pdf_url", "cover_url", "category")
_FIELD_LABELS = {
    "title": "Title",
    "author": "Author",
    "description": "Description",
    "pdf_url": "PDF URL",
    "cover_url": "Cover URL",
    "category": "Category",
}


class BookValidationError(Exception):
    pass


class BookNotFoundError(Exception):
    pass


def _is_http_url(value):
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _clean(fields):
    cleaned = {}
    for name in EDITABLE_FIELDS:
        if name in fields:
            value = fields[name]
            cleaned[name] = value.strip() if isinstance(value, str) else value
    return cleaned


class BookService:
    def __init__(self, book_repository=None, review_repository=None):
        self.book_repository = book_repository or BookRepository()
        self.review_repository = review_repository or ReviewRepository()

    def list_books(self, query=None, category=None):
        query = (query or "").strip()
        if category == "all":
            category = None
        return self.book_repository.search(query=query or None, category=category or None)

    def categories(self):
        return self.book_repository.get_categories()

    def get_book(self, book_id):
        return self.book_repository.get_by_id(book_id)

    def get_book_by_slug(self, slug):
        return self.book_repository.get_by_slug(slug)

    def get_book_with_reviews_by_slug(self, slug):
        book = self.book_repository.get_by_slug(slug)
        if not book:
            return None, []
        reviews = self.review_repository.get_for_book(book.id)
        return book, reviews

    def unique_slug(self, title, exclude_id=None):
        base = Book.slugify(title)
        slug = base
        n = 2
        while self.book_repository.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{n}"
            n += 1
        return slug

    def _validate(self, fields, partial=False):
        for name, value in fields.items():
            if value is not None and not isinstance(value, str):
                raise BookValidationError(f"{_FIELD_LABELS[name]} must be text")
        if not partial or "title" in fields:
            if not fields.get("title"):
                raise BookValidationError("Title and PDF URL are required")
        if not partial or "pdf_url" in fields:
            if not fields.get("pdf_url"):
                raise BookValidationError("Title and PDF URL are required")
            if not _is_http_url(fields["pdf_url"]):
                raise BookValidationError("Please enter valid URLs")
        if fields.get("cover_url") and not _is_http_url(fields["cover_url"]):
            raise BookValidationError("Please enter valid URLs")
        if "category" in fields and fields["category"] not in BOOK_CATEGORIES:
            raise BookValidationError(
                f"Category must be one of: {', '.join(BOOK_CATEGORIES)}"
            )

    def create_book(self, fields):
        fields = _clean(fields)
        fields.setdefault("category", DEFAULT_CATEGORY)
        self._validate(fields)
        book = Book(
            title=fields["title"],
            slug=self.unique_slug(fields["title"]),
            author=fields.get("author") or None,
            description=fields.get("description") or "",
            pdf_url=fields["pdf_url"],
            cover_url=fields.get("cover_url") or None,
            category=fields["category"],
        )
        self.book_repository.add(book)
        logger.info("Book %s added with slug %s", book.id, book.slug)
        return book.id

    def update_book(self, book_id, fields):
        book = self.book_repository.get_by_id(book_id)
        if not book:
            raise BookNotFoundError(book_id)
        fields = _clean(fields)
        self._validate(fields, partial=True)
        if "title" in fields and fields["title"] != book.title:
            book.slug = self.unique_slug(fields["title"], exclude_id=book.id)
        for name, value in fields.items():
            if name in ("author", "cover_url"):
                value = value or None
            elif name == "description":
                value = value or ""
            setattr(book, name, value)
        self.book_repository.save()
        logger.info("Book %s updated", book_id)

    def delete_book(self, book_id):
        book = self.book_repository.get_by_id(book_id)
        if not book:
            raise BookNotFoundError(book_id)
        self.book_repository.delete(book)
        logger.info("Book %s deleted", book_id)
