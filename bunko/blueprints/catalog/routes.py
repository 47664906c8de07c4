from flask import redirect, render_template, request, url_for

from bunko.blueprints.catalog import catalog_bp
from bunko.models.book import BOOK_CATEGORIES
from bunko.services.book_service import BookService
from bunko.services.review_service import ReviewService


book_service = BookService()


@catalog_bp.route("/")
def book_list():
    query = request.args.get("q", "").strip()
    category = request.args.get("category", "all").strip() or "all"
    books = book_service.list_books(query=query, category=category)
    total = len(books) if not query and category == "all" else len(book_service.list_books())
    return render_template(
        "catalog/list.html",
        books=books,
        total=total,
        query=query,
        category=category,
        categories=book_service.categories() or list(BOOK_CATEGORIES),
    )


@catalog_bp.route("/book/<slug>")
def book_detail(slug):
    book, reviews = book_service.get_book_with_reviews_by_slug(slug)
    if not book:
        return render_template("catalog/not_found.html", slug=slug), 404
    return render_template(
        "catalog/detail.html",
        book=book,
        reviews=reviews,
        average_rating=ReviewService.average_rating(reviews),
        share_url=url_for("catalog.book_detail", slug=book.slug, _external=True),
    )


@catalog_bp.route("/admin")
def admin_redirect():
    return redirect(url_for("catalog.book_list"))
