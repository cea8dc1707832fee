"""Archive loading — fetch, unzip, and parse the temperature document.

The archive is a zip container holding one JSON document with two logical
fields: a list of ``[lon, lat]`` pairs and a mapping of date key → list of
Kelvin values (one per coordinate). Older and newer exports use different
names for the entry and for each field, so every name is resolved through an
ordered alias table below.
"""

import io
import json
import logging
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path

import httpx
import numpy as np

from temperaturemap.models import RawArchive, RawPoint

logger = logging.getLogger(__name__)

# Compatibility tables: tried in order, first match wins.
ENTRY_ALIASES: tuple[str, ...] = ("temperature_data.json", "optimized_data.json")
COORDINATE_ALIASES: tuple[str, ...] = ("coords", "coordinates")
TEMPERATURE_ALIASES: tuple[str, ...] = ("temperatures", "data")

STATUS_DOWNLOADING = "Downloading…"
STATUS_PROCESSING = "Processing…"


class LoadError(Exception):
    """The dataset could not be made available. Nothing downstream is initialized."""


class NetworkError(LoadError):
    """Transport-level failure fetching the archive."""


class FormatError(LoadError):
    """Archive or document does not have the expected structure."""


def _resolve_alias(container, aliases: tuple[str, ...], what: str):
    """Return (name, value) for the first alias present in container.

    Raises:
        FormatError: When none of the aliases are present.
    """
    for name in aliases:
        if name in container:
            return name, container[name]
    raise FormatError(f"{what} not found (expected one of: {', '.join(aliases)})")


def _read_entry(payload: bytes) -> tuple[str, str]:
    try:
        zf = zipfile.ZipFile(io.BytesIO(payload))
    except zipfile.BadZipFile as e:
        raise FormatError(f"Not a zip archive: {e}") from e
    with zf:
        names = set(zf.namelist())
        for entry in ENTRY_ALIASES:
            if entry in names:
                try:
                    data = zf.read(entry)
                except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                    raise FormatError(f"{entry} is corrupt: {e}") from e
                try:
                    return entry, data.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise FormatError(f"{entry} is not UTF-8 text") from e
    raise FormatError(
        f"JSON data not found in zip (expected one of: {', '.join(ENTRY_ALIASES)})"
    )


def _parse_coordinates(raw) -> tuple[RawPoint, ...]:
    if not isinstance(raw, list):
        raise FormatError("Coordinate field must be a list of [lon, lat] pairs")
    points: list[RawPoint] = []
    for i, pair in enumerate(raw):
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            raise FormatError(f"Coordinate {i} is not a [lon, lat] pair: {pair!r}")
        try:
            points.append(RawPoint(lon=float(pair[0]), lat=float(pair[1])))
        except (TypeError, ValueError) as e:
            raise FormatError(f"Coordinate {i} is not numeric: {pair!r}") from e
    return tuple(points)


def _parse_temperatures(raw, n: int) -> dict[str, np.ndarray]:
    if not isinstance(raw, dict):
        raise FormatError("Temperature field must map date keys to value lists")
    if not raw:
        raise FormatError("Temperature field contains no frames")
    frames: dict[str, np.ndarray] = {}
    for key, values in raw.items():
        try:
            # JSON null becomes NaN
            arr = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise FormatError(f"Frame {key!r} is not a numeric list") from e
        if arr.ndim != 1 or len(arr) != n:
            raise FormatError(
                f"Frame {key!r} has {arr.size} values, expected {n} "
                "(one per coordinate)"
            )
        frames[str(key)] = arr
    return frames


def parse_archive(payload: bytes) -> RawArchive:
    """Decode a zip payload into a RawArchive.

    Args:
        payload: Raw bytes of the zip container.

    Returns:
        RawArchive with coordinates and per-key temperature arrays.

    Raises:
        FormatError: On a missing entry, invalid JSON, or a document lacking
            the coordinate or temperature field under every known alias.
    """
    entry, text = _read_entry(payload)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"{entry} is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise FormatError(f"{entry} must contain a JSON object")

    coord_field, raw_coords = _resolve_alias(
        document, COORDINATE_ALIASES, "Coordinate field"
    )
    temp_field, raw_temps = _resolve_alias(
        document, TEMPERATURE_ALIASES, "Temperature field"
    )
    coordinates = _parse_coordinates(raw_coords)
    temperatures = _parse_temperatures(raw_temps, len(coordinates))
    logger.info(
        "Parsed %s: %d points (%s), %d frames (%s)",
        entry,
        len(coordinates),
        coord_field,
        len(temperatures),
        temp_field,
    )
    return RawArchive(
        coordinates=coordinates, temperatures=temperatures, entry_name=entry
    )


async def _fetch(source: str, client: httpx.AsyncClient | None) -> bytes:
    if not source.startswith(("http://", "https://")):
        try:
            return Path(source).read_bytes()
        except OSError as e:
            raise NetworkError(f"Cannot read {source}: {e}") from e

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=60, follow_redirects=True)
    try:
        resp = await client.get(source)
        resp.raise_for_status()
        return resp.content
    except httpx.HTTPStatusError as e:
        raise NetworkError(f"HTTP error! status: {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise NetworkError(f"Fetching {source} failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()


async def load_archive(
    source: str,
    client: httpx.AsyncClient | None = None,
    on_status: Callable[[str], None] | None = None,
) -> RawArchive:
    """Fetch and decode the temperature archive. All-or-nothing.

    Args:
        source: http(s) URL, or a local file path.
        client: Optional shared AsyncClient (tests pass one with a mock transport).
        on_status: Receives progress text ("Downloading…", "Processing…").

    Returns:
        Fully decoded RawArchive.

    Raises:
        NetworkError: When the response is not successful or the file is unreadable.
        FormatError: When the archive or document structure is not recognized.
    """
    notify = on_status or (lambda _text: None)
    notify(STATUS_DOWNLOADING)
    payload = await _fetch(source, client)
    logger.info("Downloaded %s (%d bytes)", source, len(payload))
    notify(STATUS_PROCESSING)
    return parse_archive(payload)
