"""
TrashMap.

Desktop client for finding and contributing geotagged trash cans on a map.
"""

__version__ = "0.3.0"
