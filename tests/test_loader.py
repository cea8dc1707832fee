from __future__ import annotations

import asyncio
import zipfile

import httpx
import numpy as np
import pytest
from helpers import flip_byte, make_zip

from temperaturemap.loader import (
    STATUS_DOWNLOADING,
    STATUS_PROCESSING,
    FormatError,
    NetworkError,
    load_archive,
    parse_archive,
)

DOC = {
    "coords": [[0, 0], [10, 20]],
    "temperatures": {"2015-01-15": [240, 260], "2016-01-15": [245, 258]},
}


def _client(status: int = 200, content: bytes = b"") -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=content)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_parse_archive_reads_coordinates_and_frames():
    archive = parse_archive(make_zip(DOC))
    assert archive.entry_name == "temperature_data.json"
    assert [(p.lon, p.lat) for p in archive.coordinates] == [(0.0, 0.0), (10.0, 20.0)]
    assert set(archive.temperatures) == {"2015-01-15", "2016-01-15"}
    np.testing.assert_array_equal(archive.temperatures["2016-01-15"], [245.0, 258.0])


def test_parse_archive_accepts_alternate_names():
    doc = {
        "coordinates": DOC["coords"],
        "data": DOC["temperatures"],
    }
    archive = parse_archive(make_zip(doc, entry="optimized_data.json"))
    assert archive.entry_name == "optimized_data.json"
    assert len(archive.coordinates) == 2
    assert len(archive.temperatures) == 2


def test_primary_entry_name_preferred_over_alias():
    import io
    import json
    import zipfile

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("optimized_data.json", json.dumps({"coords": [], "data": {}}))
        zf.writestr("temperature_data.json", json.dumps(DOC))
    assert parse_archive(buf.getvalue()).entry_name == "temperature_data.json"


def test_missing_coordinate_field_is_format_error():
    doc = {"points": DOC["coords"], "temperatures": DOC["temperatures"]}
    with pytest.raises(FormatError, match="Coordinate field"):
        parse_archive(make_zip(doc))


def test_missing_temperature_field_is_format_error():
    doc = {"coords": DOC["coords"], "values": DOC["temperatures"]}
    with pytest.raises(FormatError, match="Temperature field"):
        parse_archive(make_zip(doc))


def test_missing_entry_is_format_error():
    with pytest.raises(FormatError, match="not found in zip"):
        parse_archive(make_zip(DOC, entry="other.json"))


def test_not_a_zip_is_format_error():
    with pytest.raises(FormatError):
        parse_archive(b"definitely not a zip")


def test_corrupted_stored_entry_is_format_error():
    payload = make_zip(DOC, compression=zipfile.ZIP_STORED)
    damaged = flip_byte(payload, payload.index(b"temperatures") + 2)
    with pytest.raises(FormatError, match="corrupt"):
        parse_archive(damaged)


def test_corrupted_deflated_entry_is_format_error():
    entry = "temperature_data.json"
    payload = make_zip(DOC, entry=entry)
    # local header is 30 bytes plus the entry name; compressed data follows
    damaged = flip_byte(payload, 30 + len(entry) + 3)
    with pytest.raises(FormatError, match="corrupt"):
        parse_archive(damaged)


def test_invalid_json_is_format_error():
    with pytest.raises(FormatError, match="not valid JSON"):
        parse_archive(make_zip("{not json"))


def test_frame_length_mismatch_is_format_error():
    doc = {"coords": DOC["coords"], "temperatures": {"2015-01-15": [240]}}
    with pytest.raises(FormatError, match="expected 2"):
        parse_archive(make_zip(doc))


def test_empty_temperature_mapping_is_format_error():
    doc = {"coords": DOC["coords"], "temperatures": {}}
    with pytest.raises(FormatError, match="no frames"):
        parse_archive(make_zip(doc))


def test_null_values_become_nan():
    doc = {"coords": DOC["coords"], "temperatures": {"2015-01-15": [240, None]}}
    frame = parse_archive(make_zip(doc)).temperatures["2015-01-15"]
    assert frame[0] == 240.0
    assert np.isnan(frame[1])


def test_load_archive_over_http_reports_status():
    seen: list[str] = []
    client = _client(content=make_zip(DOC))
    archive = asyncio.run(
        load_archive("https://example.test/t.zip", client=client, on_status=seen.append)
    )
    assert seen == [STATUS_DOWNLOADING, STATUS_PROCESSING]
    assert len(archive.coordinates) == 2


def test_load_archive_http_error_is_network_error():
    seen: list[str] = []
    client = _client(status=404)
    with pytest.raises(NetworkError, match="404"):
        asyncio.run(
            load_archive(
                "https://example.test/t.zip", client=client, on_status=seen.append
            )
        )
    # Never reaches parsing
    assert seen == [STATUS_DOWNLOADING]


def test_load_archive_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError):
        asyncio.run(load_archive("https://example.test/t.zip", client=client))


def test_load_archive_from_local_path(tmp_path):
    path = tmp_path / "temperature_data.zip"
    path.write_bytes(make_zip(DOC))
    archive = asyncio.run(load_archive(str(path)))
    assert len(archive.temperatures) == 2


def test_load_archive_missing_local_file_is_network_error(tmp_path):
    with pytest.raises(NetworkError):
        asyncio.run(load_archive(str(tmp_path / "missing.zip")))
