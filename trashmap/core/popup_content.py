"""
Popup Content Builder.

Renders the HTML shown in a trash can's popup. Action links carry a
``data-action`` attribute; the map surface turns clicks on them into popup
actions for the owning marker.
"""

from html import escape
from urllib.parse import urlencode

from trashmap.core.poi import PointOfInterest
from trashmap.core.protocols import PopupAction

DEFAULT_TITLE = "Trash can"
NAVIGATION_BASE_URL = "https://uri.amap.com/navigation"
POPUP_IMAGE_MAX_WIDTH = 200


def format_distance(distance_km: float) -> str:
    """
    Formats a distance for display.

    Args:
        distance_km: Distance in kilometres.

    Returns:
        str: e.g. "1.25 km".
    """
    return f"{distance_km:.2f} km"


def navigation_url(poi: PointOfInterest, source: str = "trashmap") -> str:
    """
    Builds a driving-directions link to the point.

    Args:
        poi: Destination.
        source: Caller identifier passed to the navigation service.

    Returns:
        str: Absolute URL.
    """
    query = urlencode(
        {
            "to": f"{poi.longitude},{poi.latitude}",
            "mode": "car",
            "policy": 1,
            "src": source,
            "callnative": 1,
        }
    )
    return f"{NAVIGATION_BASE_URL}?{query}"


def render_popup(poi: PointOfInterest) -> str:
    """
    Renders popup HTML for a point.

    Sections without data (description, distance, image) are omitted.

    Args:
        poi: The point to describe.

    Returns:
        str: HTML fragment. All user-contributed text is escaped.
    """
    parts = [
        '<div class="info-window">',
        f"<h4>{escape(poi.address or DEFAULT_TITLE)}</h4>",
    ]

    if poi.description:
        parts.append(f"<p>{escape(poi.description)}</p>")

    if poi.distance_km is not None:
        parts.append(
            f"<p><strong>Distance:</strong> {format_distance(poi.distance_km)}</p>"
        )

    if poi.like_count or poi.dislike_count:
        parts.append(
            f'<p class="votes">&#128077; {poi.like_count} '
            f"&#128078; {poi.dislike_count}</p>"
        )

    if poi.image_url:
        parts.append(
            '<div class="info-image">'
            f'<img src="{escape(poi.image_url, quote=True)}" alt="Trash can photo" '
            f'data-action="{PopupAction.SHOW_IMAGE.value}" '
            f'style="max-width: {POPUP_IMAGE_MAX_WIDTH}px; cursor: pointer;">'
            "</div>"
        )

    parts.append(
        '<div class="info-actions">'
        f'<button class="nav-btn" data-action="{PopupAction.NAVIGATE.value}">'
        "Navigate here</button>"
        "</div>"
    )
    parts.append("</div>")
    return "".join(parts)
