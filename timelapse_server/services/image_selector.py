"""Select timestamp-named frames from a camera folder."""

import logging
from pathlib import Path
from typing import Optional

from ..errors import FolderNotFound
from ..models.common import ImageFile, TimeRange

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg")


def resolve_folder(output_root: Path, folder: str) -> Path:
    """Resolve a request folder under the output root.

    Raises FolderNotFound for paths outside the root, missing paths, and
    non-directories.
    """
    root = Path(output_root).resolve()
    candidate = (root / folder.strip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        raise FolderNotFound(f"Folder not found: {folder}")
    if not candidate.is_dir():
        raise FolderNotFound(f"Folder not found: {folder}")
    return candidate


def parse_timestamp(filename: str) -> Optional[int]:
    """Return the unix timestamp encoded in ``<seconds>.jpg``, or None."""
    path = Path(filename)
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        return None
    stem = path.stem
    if not (stem.isascii() and stem.isdigit()):
        return None
    return int(stem)


def select_images(folder: Path, time_range: TimeRange) -> list[ImageFile]:
    """List images in ``folder`` whose timestamp lies in ``time_range``, oldest first.

    Files whose names do not parse as a timestamp are skipped. An empty list is
    a valid result.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FolderNotFound(f"Folder not found: {folder.name}")

    images = []
    skipped = 0
    for entry in folder.iterdir():
        timestamp = parse_timestamp(entry.name)
        if timestamp is None or not entry.is_file():
            skipped += 1
            continue
        if time_range.contains(timestamp):
            images.append(ImageFile(path=entry, timestamp=timestamp))

    images.sort(key=lambda image: image.sort_key)
    logger.debug(
        f"Selected {len(images)} frames from {folder} "
        f"({skipped} non-frame entries skipped)"
    )
    return images
