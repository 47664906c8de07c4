"""Page and zoom policy for the reader.

Every navigation source (buttons, keyboard, swipes, typed page numbers)
funnels through :func:`resolve_page_change`, so an out-of-range request is
dropped here and never reaches the position tracker.
"""
from typing import Optional

SWIPE_THRESHOLD = 50

MIN_ZOOM = 50
MAX_ZOOM = 200
ZOOM_STEP = 25
DEFAULT_ZOOM = 100

PREVIOUS_PAGE_KEYS = ("ArrowLeft", "PageUp")
NEXT_PAGE_KEYS = ("ArrowRight", "PageDown")


def resolve_page_change(new_page: int, total_pages: Optional[int] = None) -> Optional[int]:
    if new_page < 1:
        return None
    if total_pages and new_page > total_pages:
        return None
    return new_page


def page_for_key(key: str, current: int, total_pages: Optional[int] = None) -> Optional[int]:
    if key in PREVIOUS_PAGE_KEYS:
        return resolve_page_change(current - 1, total_pages)
    if key in NEXT_PAGE_KEYS:
        return resolve_page_change(current + 1, total_pages)
    if key == "Home":
        return resolve_page_change(1, total_pages)
    if key == "End" and total_pages:
        return resolve_page_change(total_pages, total_pages)
    return None


def page_for_swipe(
    start_x: float,
    end_x: float,
    current: int,
    total_pages: Optional[int] = None,
    threshold: float = SWIPE_THRESHOLD,
) -> Optional[int]:
    diff = start_x - end_x
    if abs(diff) <= threshold:
        return None
    # finger moving left turns forward
    if diff > 0:
        return resolve_page_change(current + 1, total_pages)
    return resolve_page_change(current - 1, total_pages)


def clamp_zoom(zoom: int) -> int:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def step_zoom(zoom: int, direction: int) -> int:
    """direction > 0 zooms in, < 0 zooms out, 0 resets."""
    if direction == 0:
        return DEFAULT_ZOOM
    step = ZOOM_STEP if direction > 0 else -ZOOM_STEP
    return clamp_zoom(zoom + step)


def viewer_url(pdf_url: str, page: int, zoom: int = DEFAULT_ZOOM) -> str:
    base = pdf_url.split("#", 1)[0]
    return f"{base}#page={page}&zoom={clamp_zoom(zoom)}"
