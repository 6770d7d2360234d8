"""
Map Widget Package.

Provides the Leaflet-backed map surface.
"""

from trashmap.gui.widgets.map.leaflet_view import LeafletMapView, MapBridge

__all__ = [
    "LeafletMapView",
    "MapBridge",
]
