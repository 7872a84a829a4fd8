import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timelapse_server.errors import FolderNotFound  # noqa: E402
from timelapse_server.models.common import TimeRange  # noqa: E402
from timelapse_server.services.image_selector import (  # noqa: E402
    parse_timestamp,
    resolve_folder,
    select_images,
)


def _range(start: int, end: int) -> TimeRange:
    return TimeRange(
        start=datetime.fromtimestamp(start, tz=timezone.utc),
        end=datetime.fromtimestamp(end, tz=timezone.utc),
    )


def test_selects_half_open_window(tmp_path):
    for name in ("100.jpg", "200.jpg", "300.jpg"):
        (tmp_path / name).write_bytes(b"x")

    images = select_images(tmp_path, _range(150, 300))

    assert [image.path.name for image in images] == ["200.jpg"]
    assert images[0].timestamp == 200


def test_non_numeric_names_are_skipped(tmp_path):
    for name in ("100.jpg", "thumb.jpg", "notes.txt", "200.JPG", "12a.jpg", "index.html", "\u00b2.jpg", "\u0661\u0660\u0660.jpg"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "150.jpg").mkdir()

    images = select_images(tmp_path, _range(0, 1000))

    assert [image.timestamp for image in images] == [100, 200]


def test_results_sorted_by_timestamp(tmp_path):
    for ts in (500, 20, 300, 1000):
        (tmp_path / f"{ts}.jpg").write_bytes(b"x")

    images = select_images(tmp_path, _range(0, 2000))

    assert [image.timestamp for image in images] == [20, 300, 500, 1000]


def test_equal_timestamps_break_ties_by_path(tmp_path):
    (tmp_path / "100.jpg").write_bytes(b"x")
    (tmp_path / "100.jpeg").write_bytes(b"x")

    images = select_images(tmp_path, _range(0, 1000))

    assert [image.path.name for image in images] == ["100.jpeg", "100.jpg"]


def test_empty_selection_is_not_an_error(tmp_path):
    (tmp_path / "100.jpg").write_bytes(b"x")

    assert select_images(tmp_path, _range(500, 600)) == []


def test_missing_folder_raises(tmp_path):
    with pytest.raises(FolderNotFound):
        select_images(tmp_path / "missing", _range(0, 10))


def test_file_instead_of_folder_raises(tmp_path):
    target = tmp_path / "100.jpg"
    target.write_bytes(b"x")
    with pytest.raises(FolderNotFound):
        select_images(target, _range(0, 10))


def test_parse_timestamp():
    assert parse_timestamp("1700000000.jpg") == 1700000000
    assert parse_timestamp("1700000000.JPEG") == 1700000000
    assert parse_timestamp("-5.jpg") is None
    assert parse_timestamp("1700000000.png") is None
    assert parse_timestamp("latest.jpg") is None
    assert parse_timestamp("\u00b2.jpg") is None
    assert parse_timestamp("\u0661\u0660\u0660.jpg") is None


def test_resolve_folder_supports_nested_paths(tmp_path):
    (tmp_path / "garden" / "north").mkdir(parents=True)

    assert resolve_folder(tmp_path, "garden/north") == (tmp_path / "garden" / "north").resolve()


def test_resolve_folder_rejects_escaping_the_root(tmp_path):
    root = tmp_path / "output"
    root.mkdir()
    (tmp_path / "secret").mkdir()

    with pytest.raises(FolderNotFound):
        resolve_folder(root, "../secret")
