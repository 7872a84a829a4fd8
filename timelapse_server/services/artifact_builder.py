"""Turn a frame selection into an MP4 or a zip archive."""

import asyncio
import io
import logging
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Optional, Sequence

from ..errors import ArchiveWriteFailed, EncodingFailed, EncodingTimeout
from ..models.common import ImageFile
from ..models.generation import ArtifactFormat, GenerationOptions
from ..utils.commands import run_cmd, tail

logger = logging.getLogger(__name__)

MANIFEST_NAME = "frames.txt"
OUTPUT_NAME = "timelapse.mp4"

# Applied before user arguments so those can override them
DEFAULT_VIDEO_ARGS = (
    "-c:v", "libx264",
    "-pix_fmt", "yuv420p",
    "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
    "-movflags", "+faststart",
)


def write_manifest(images: Sequence[ImageFile], path: Path) -> Path:
    """Write an ffmpeg concat-demuxer list of ``images`` in order."""
    lines = ["ffconcat version 1.0"]
    for image in images:
        quoted = str(Path(image.path).resolve()).replace("'", "'\\''")
        lines.append(f"file '{quoted}'")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def read_output(path: Path) -> bytes:
    """Encoder output bytes, or empty when the file was never written."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return b""


def build_archive(images: Sequence[ImageFile]) -> bytes:
    """Zip ``images`` in the given order under their original filenames.

    An empty selection yields a valid empty archive.
    """
    buffer = io.BytesIO()
    try:
        # JPEGs are already compressed
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
            for image in images:
                archive.write(image.path, arcname=Path(image.path).name)
    except OSError as e:
        raise ArchiveWriteFailed(f"Could not write archive: {e}") from e
    return buffer.getvalue()


class ArtifactBuilder:
    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        timeout: float = 300.0,
        work_dir: Optional[Path] = None,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.timeout = timeout
        self.work_dir = work_dir

    async def build(self, images: Sequence[ImageFile], options: GenerationOptions) -> bytes:
        if options.format is ArtifactFormat.ARCHIVE:
            return await asyncio.to_thread(build_archive, list(images))
        return await self.build_video(images, options)

    def video_command(self, manifest: Path, output: Path, options: GenerationOptions) -> list[str]:
        """Encoder argv. ``extra_encoder_args`` are passed through unfiltered."""
        return [
            self.ffmpeg_binary,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-r", str(options.fps),
            "-i", str(manifest),
            *DEFAULT_VIDEO_ARGS,
            *options.extra_encoder_args,
            str(output),
        ]

    async def build_video(self, images: Sequence[ImageFile], options: GenerationOptions) -> bytes:
        if self.work_dir is not None:
            await asyncio.to_thread(self.work_dir.mkdir, parents=True, exist_ok=True)

        # The directory and everything in it is removed on every exit path
        with tempfile.TemporaryDirectory(prefix="timelapse-", dir=self.work_dir) as tmp:
            workspace = Path(tmp)
            manifest = await asyncio.to_thread(write_manifest, list(images), workspace / MANIFEST_NAME)
            output = workspace / OUTPUT_NAME
            cmd = self.video_command(manifest, output, options)

            started = time.monotonic()
            try:
                rc, _, stderr = await run_cmd(*cmd, timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.error(f"Encoder timed out after {self.timeout:.0f}s ({len(images)} frames)")
                raise EncodingTimeout(f"Encoding exceeded {self.timeout:.0f}s")
            except OSError as e:
                logger.error(f"Could not start encoder {self.ffmpeg_binary}: {e}")
                raise EncodingFailed(None, str(e)) from e

            if rc != 0:
                stderr_tail = tail(stderr)
                logger.error(f"Encoder exited with {rc}: {stderr_tail}")
                raise EncodingFailed(rc, stderr_tail)

            data = await asyncio.to_thread(read_output, output)
            if not data:
                logger.error(f"Encoder produced no output: {tail(stderr)}")
                raise EncodingFailed(rc, tail(stderr))

            logger.info(
                f"Encoded {len(images)} frames at {options.fps} fps into "
                f"{len(data)} bytes in {time.monotonic() - started:.1f}s"
            )
            return data
