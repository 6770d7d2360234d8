"""
Marker Registry Module.

Keeps the trash cans of the latest search result in step with the markers and
popups drawn on the map surface.

Each entity owns exactly one RegistryEntry holding its marker and the popup
bound to it. ``sync`` replaces the whole set: every old entry is torn down
before the first new one is created, so no two markers for the same id are
ever on the surface together. At most one popup is open at a time.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from trashmap.app.constants import FOCUS_ZOOM
from trashmap.core.geo_bounds import GeoBounds
from trashmap.core.poi import EntityId, PointOfInterest, UserLocation
from trashmap.core.popup_content import navigation_url, render_popup
from trashmap.core.protocols import (
    MapSurfaceAdapter,
    MarkerHandle,
    MarkerStyle,
    PopupAction,
    PopupHandle,
)

logger = logging.getLogger(__name__)

ShowImageCallback = Callable[[str], None]
NavigateCallback = Callable[[str], None]


@dataclass
class RegistryEntry:
    """
    A rendered entity.

    Attributes:
        entity: The point this entry renders.
        marker: Marker handle on the surface.
        popup: Popup handle bound to ``marker``.
    """

    entity: PointOfInterest
    marker: MarkerHandle
    popup: PopupHandle

    @property
    def entity_id(self) -> EntityId:
        return self.entity.id


class MarkerRegistry:
    """
    Owns the (entity, marker, popup) triples on a map surface.

    The registry is the only component that creates or destroys entity
    markers. Callbacks for the popup actions are injected by the view shell.
    """

    def __init__(
        self,
        surface: MapSurfaceAdapter,
        on_show_image: Optional[ShowImageCallback] = None,
        on_navigate: Optional[NavigateCallback] = None,
    ) -> None:
        """
        Initializes the registry and subscribes to marker and popup events.

        Args:
            surface: Map surface to draw on.
            on_show_image: Receives the image URL when a popup photo is clicked.
            on_navigate: Receives a directions URL when "Navigate here" is clicked.
        """
        self._surface = surface
        self._on_show_image = on_show_image
        self._on_navigate = on_navigate
        self._entries: Dict[EntityId, RegistryEntry] = {}
        self._open_popup_id: Optional[EntityId] = None

        surface.on_marker_click(self._on_marker_clicked)
        surface.on_popup_action(self._on_popup_action)
        surface.on_popup_close(self._on_popup_closed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entries

    def entry_ids(self) -> List[EntityId]:
        """Ids of the rendered entities, in creation order."""
        return list(self._entries)

    def get(self, entity_id: EntityId) -> Optional[RegistryEntry]:
        return self._entries.get(entity_id)

    @property
    def open_popup_id(self) -> Optional[EntityId]:
        """Id of the entity whose popup is open, or None."""
        return self._open_popup_id

    def entity_id_for_marker(self, marker: MarkerHandle) -> Optional[EntityId]:
        """
        Looks up which entity a marker handle belongs to.

        Args:
            marker: Handle received from the surface.

        Returns:
            Optional[EntityId]: The id, or None for markers the registry
            does not own (user location, transient picks, stale handles).
        """
        for entry in self._entries.values():
            if entry.marker == marker:
                return entry.entity_id
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def sync(self, entities: Sequence[PointOfInterest]) -> None:
        """
        Replaces the rendered set with ``entities``.

        All existing entries are destroyed first. Then one marker and one
        bound popup are created per entity, in input order. A repeated id
        keeps its first occurrence.

        Args:
            entities: Points to render, typically nearest first.
        """
        self.clear()

        for entity in entities:
            if entity.id in self._entries:
                logger.warning(f"Duplicate trash can id {entity.id!r} ignored")
                continue
            marker = self._surface.create_marker(
                entity.lnglat, MarkerStyle.POINT, entity.address or ""
            )
            popup = self._surface.bind_popup(marker, render_popup(entity))
            self._entries[entity.id] = RegistryEntry(entity, marker, popup)

        logger.debug(f"Synced {len(self._entries)} markers")

    def clear(self) -> None:
        """Destroys every entry and empties the registry."""
        for entry in self._entries.values():
            self._surface.close_popup(entry.popup)
            self._surface.destroy_marker(entry.marker)
        self._entries.clear()
        self._open_popup_id = None

    def fit_viewport(
        self, entities: Sequence[PointOfInterest], user_location: Optional[UserLocation]
    ) -> None:
        """
        Fits the map to every entity plus the user's position.

        Args:
            entities: Points that must be visible. Empty means no change.
            user_location: Viewer position to include, if known.
        """
        if not entities:
            return

        points: List[tuple] = [(e.latitude, e.longitude) for e in entities]
        if user_location is not None:
            points.append((user_location.lat, user_location.lng))

        self._surface.fit_bounds(GeoBounds.from_points(points))

    def show_popup(self, entity_id: EntityId) -> bool:
        """
        Opens one entity's popup, closing all others. The camera stays put.

        Args:
            entity_id: Entity to show.

        Returns:
            bool: False if the id is not rendered.
        """
        entry = self._entries.get(entity_id)
        if entry is None:
            logger.debug(f"No marker for id {entity_id!r}, popup not opened")
            return False

        self._close_all_popups()
        self._surface.open_popup(entry.popup)
        self._open_popup_id = entity_id
        return True

    def focus(self, entity_id: EntityId) -> None:
        """
        Opens an entity's popup and zooms the map onto it.

        Unknown ids are ignored; they are usually left over from an earlier
        result set.

        Args:
            entity_id: Entity to focus.
        """
        if not self.show_popup(entity_id):
            return

        entry = self._entries[entity_id]
        self._surface.set_center(entry.entity.lnglat)
        self._surface.set_zoom(FOCUS_ZOOM)

    def show_image(self, entity_id: EntityId) -> None:
        """Forwards the entity's photo URL to the image viewer callback."""
        entry = self._entries.get(entity_id)
        if entry is None or not entry.entity.image_url:
            return
        if self._on_show_image is not None:
            self._on_show_image(entry.entity.image_url)

    def navigate_to(self, entity_id: EntityId) -> None:
        """Forwards a directions URL for the entity to the navigation callback."""
        entry = self._entries.get(entity_id)
        if entry is None:
            return
        if self._on_navigate is not None:
            self._on_navigate(navigation_url(entry.entity))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _close_all_popups(self) -> None:
        for entry in self._entries.values():
            self._surface.close_popup(entry.popup)
        self._open_popup_id = None

    def _on_marker_clicked(self, marker: MarkerHandle) -> None:
        entity_id = self.entity_id_for_marker(marker)
        if entity_id is not None:
            self.show_popup(entity_id)

    def _on_popup_action(self, marker: MarkerHandle, action: str) -> None:
        entity_id = self.entity_id_for_marker(marker)
        if entity_id is None:
            return

        if action == PopupAction.SHOW_IMAGE.value:
            self.show_image(entity_id)
        elif action == PopupAction.NAVIGATE.value:
            self.navigate_to(entity_id)
        else:
            logger.warning(f"Unknown popup action: {action}")

    def _on_popup_closed(self, popup: PopupHandle) -> None:
        entry = self._entries.get(self._open_popup_id)
        if entry is not None and entry.popup == popup:
            logger.debug(f"Popup for id {self._open_popup_id!r} closed on the map")
            self._open_popup_id = None

