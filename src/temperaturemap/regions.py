"""Country outlines for the selectable overlay, read from GeoJSON.

Topology decoding is left to whoever publishes the file; this module only
consumes plain GeoJSON FeatureCollections (Natural Earth or world-atlas
exports converted to GeoJSON both work).
"""

import logging

import httpx
import numpy as np

from temperaturemap.models import Region, ScreenPoint
from temperaturemap.projection import EquirectangularProjection, project_ring

logger = logging.getLogger(__name__)

# Tried in order; Natural Earth uses upper-case property names
ID_PROPERTY_ALIASES: tuple[str, ...] = ("iso_a3", "ISO_A3", "adm0_a3", "ADM0_A3")
NAME_PROPERTY_ALIASES: tuple[str, ...] = ("name", "NAME")
_PLACEHOLDER_IDS = {"", "-99", "-099"}


class RegionLoadError(Exception):
    """Region geometry could not be fetched or parsed."""


def region_name(feature: dict) -> str:
    props = feature.get("properties") or {}
    for key in NAME_PROPERTY_ALIASES:
        if props.get(key):
            return str(props[key])
    return "Unknown"


def region_id(feature: dict) -> str:
    """Stable id: ISO A3, then ADM0 A3, then the feature id, then the name."""
    props = feature.get("properties") or {}
    for key in ID_PROPERTY_ALIASES:
        value = props.get(key)
        if value is not None and str(value) not in _PLACEHOLDER_IDS:
            return str(value)
    if feature.get("id") not in (None, ""):
        return str(feature["id"])
    for key in NAME_PROPERTY_ALIASES:
        if props.get(key):
            return str(props[key])
    return "unknown"


def _polygons(geometry: dict | None) -> list[list]:
    if not geometry:
        return []
    if geometry.get("type") == "Polygon":
        return [geometry["coordinates"]]
    if geometry.get("type") == "MultiPolygon":
        return list(geometry["coordinates"])
    return []


def _label_point(rings: list[np.ndarray]) -> ScreenPoint | None:
    """Centre of the largest outer ring's bounding box."""
    if not rings:
        return None
    largest = max(rings, key=len)
    (x0, y0), (x1, y1) = largest.min(axis=0), largest.max(axis=0)
    return ScreenPoint(x=float((x0 + x1) / 2), y=float((y0 + y1) / 2))


def build_regions(
    collection: dict, projection: EquirectangularProjection
) -> tuple[Region, ...]:
    """Project every feature of a GeoJSON FeatureCollection into a Region.

    Only outer rings are kept. Features with no projectable ring are skipped.
    """
    regions: list[Region] = []
    for feature in collection.get("features", []):
        outer_rings: list[np.ndarray] = []
        for polygon in _polygons(feature.get("geometry")):
            if not polygon:
                continue
            ring = project_ring(polygon[0], projection)
            if len(ring) >= 3:
                outer_rings.append(ring)
        if not outer_rings:
            continue
        regions.append(
            Region(
                id=region_id(feature),
                name=region_name(feature),
                rings=tuple(outer_rings),
                label_point=_label_point(outer_rings),
            )
        )
    return tuple(regions)


def load_regions(
    url: str, projection: EquirectangularProjection, timeout: float = 30
) -> tuple[Region, ...]:
    """Fetch a GeoJSON FeatureCollection and build projected regions.

    Raises:
        RegionLoadError: On HTTP failure or a body that is not a FeatureCollection.
    """
    try:
        resp = httpx.get(url, timeout=timeout, follow_redirects=True)
        resp.raise_for_status()
        collection = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise RegionLoadError(f"Region geometry unavailable: {e}") from e
    if not isinstance(collection, dict) or "features" not in collection:
        raise RegionLoadError("Region geometry is not a GeoJSON FeatureCollection")
    regions = build_regions(collection, projection)
    logger.info("Loaded %d regions from %s", len(regions), url)
    return regions
