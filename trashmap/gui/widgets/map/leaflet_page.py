"""
Leaflet Page Template.

HTML and JavaScript hosted by LeafletMapView. The page keeps markers and
popups in id-keyed tables and reports user interaction back through the
``bridge`` object registered on the QWebChannel.
"""

import json
from string import Template

from trashmap.app.constants import (
    FALLBACK_LAT,
    FALLBACK_LNG,
    INITIAL_ZOOM,
    LEAFLET_VERSION,
    TILE_ATTRIBUTION,
    TILE_URL,
)

_PAGE = Template(
    r"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<link rel="stylesheet" href="https://unpkg.com/leaflet@$version/dist/leaflet.css">
<script src="https://unpkg.com/leaflet@$version/dist/leaflet.js"></script>
<script src="qrc:///qtwebchannel/qwebchannel.js"></script>
<style>
  html, body, #map { height: 100%; margin: 0; padding: 0; }
  .info-window h4 { margin: 0 0 6px 0; }
  .info-window p { margin: 4px 0; }
  .info-actions { margin-top: 8px; }
</style>
</head>
<body>
<div id="map"></div>
<script>
var map = L.map('map').setView([$lat, $lng], $zoom);
L.tileLayer($tile_url, {attribution: $attribution, maxZoom: 19}).addTo(map);

var markers = {};
var popups = {};
var bridge = null;

var STYLES = {
  user: {radius: 9, color: '#ffffff', weight: 2, fillColor: '#2980B9', fillOpacity: 1},
  transient: {radius: 7, color: '#ffffff', weight: 2, fillColor: '#F39C12', fillOpacity: 0.9}
};

function createMarker(id, lng, lat, style, title) {
  var marker;
  if (STYLES[style]) {
    marker = L.circleMarker([lat, lng], STYLES[style]);
  } else {
    marker = L.marker([lat, lng], {title: title});
  }
  marker.on('click', function (e) {
    L.DomEvent.stopPropagation(e);
    if (bridge) { bridge.markerClicked(id); }
  });
  marker.addTo(map);
  markers[id] = marker;
}

function destroyMarker(id) {
  var marker = markers[id];
  if (!marker) { return; }
  Object.keys(popups).forEach(function (pid) {
    if (popups[pid].markerId === id) {
      closeQuietly(popups[pid]);
      delete popups[pid];
    }
  });
  map.removeLayer(marker);
  delete markers[id];
}

function bindPopup(popupId, markerId, content) {
  var popup = L.popup({offset: [0, -30], autoClose: false}).setContent(content);
  var entry = {popup: popup, markerId: markerId, quiet: false};
  popup.on('add', function () { wireActions(popup, markerId); });
  // Only closes made in the page (close button, background click) are reported
  popup.on('remove', function () {
    if (entry.quiet) { entry.quiet = false; return; }
    if (bridge) { bridge.popupClosed(popupId); }
  });
  popups[popupId] = entry;
}

function closeQuietly(entry) {
  if (!map.hasLayer(entry.popup)) { return; }
  entry.quiet = true;
  map.closePopup(entry.popup);
}

function wireActions(popup, markerId) {
  var root = popup.getElement();
  if (!root) { return; }
  root.querySelectorAll('[data-action]').forEach(function (el) {
    el.addEventListener('click', function () {
      if (bridge) { bridge.popupAction(markerId, el.getAttribute('data-action')); }
    });
  });
}

function openPopup(popupId) {
  var entry = popups[popupId];
  if (!entry || !markers[entry.markerId]) { return; }
  entry.popup.setLatLng(markers[entry.markerId].getLatLng()).openOn(map);
}

function closePopup(popupId) {
  var entry = popups[popupId];
  if (entry) { closeQuietly(entry); }
}

function setCursor(mode) {
  map.getContainer().style.cursor = mode === 'default' ? '' : mode;
}

map.on('click', function (e) {
  if (bridge) { bridge.mapClicked(e.latlng.lat, e.latlng.lng); }
});

new QWebChannel(qt.webChannelTransport, function (channel) {
  bridge = channel.objects.bridge;
  bridge.mapReady();
});
</script>
</body>
</html>
"""
)


def render_page() -> str:
    """
    Renders the map page with the configured tiles and initial view.

    Returns:
        str: Complete HTML document.
    """
    return _PAGE.substitute(
        version=LEAFLET_VERSION,
        lat=FALLBACK_LAT,
        lng=FALLBACK_LNG,
        zoom=INITIAL_ZOOM,
        tile_url=json.dumps(TILE_URL),
        attribution=json.dumps(TILE_ATTRIBUTION),
    )
