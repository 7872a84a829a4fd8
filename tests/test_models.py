import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timelapse_server.models.common import TimeRange  # noqa: E402
from timelapse_server.models.generation import (  # noqa: E402
    ArtifactFormat,
    CacheKey,
    GenerationOptions,
)

WINDOW = TimeRange(
    start=datetime(2025, 1, 1, tzinfo=timezone.utc),
    end=datetime(2025, 1, 2, tzinfo=timezone.utc),
)


def test_options_from_query_defaults():
    options = GenerationOptions.from_query()

    assert options.fps == 20
    assert options.format is ArtifactFormat.VIDEO
    assert options.extra_encoder_args == ()


def test_only_zip_selects_archive():
    assert GenerationOptions.from_query(format="zip").format is ArtifactFormat.ARCHIVE
    assert GenerationOptions.from_query(format="gif").format is ArtifactFormat.VIDEO
    assert GenerationOptions.from_query(format="ZIP").format is ArtifactFormat.VIDEO


def test_ffmpeg_args_split_on_commas_in_order():
    options = GenerationOptions.from_query(ffmpeg_args="-crf,28,,-preset,veryfast")

    assert options.extra_encoder_args == ("-crf", "28", "-preset", "veryfast")


def test_equal_inputs_give_equal_keys():
    first = CacheKey.build(Path("/data/cam"), WINDOW, GenerationOptions.from_query(fps=10, format="zip"))
    second = CacheKey.build(Path("/data/cam"), WINDOW, GenerationOptions(fps=10, format=ArtifactFormat.ARCHIVE))

    assert first == second
    assert hash(first) == hash(second)
    assert first.digest == second.digest
    assert {first: "entry"}[second] == "entry"


def test_same_instant_in_different_zones_gives_equal_keys():
    shifted = TimeRange(
        start=datetime.fromisoformat("2025-01-01T02:00:00+02:00"),
        end=datetime.fromisoformat("2025-01-02T02:00:00+02:00"),
    )
    options = GenerationOptions()

    assert CacheKey.build(Path("/data/cam"), WINDOW, options) == CacheKey.build(Path("/data/cam"), shifted, options)


def test_any_option_change_gives_a_different_key():
    base = CacheKey.build(Path("/data/cam"), WINDOW, GenerationOptions())

    assert base != CacheKey.build(Path("/data/cam"), WINDOW, GenerationOptions(fps=21))
    assert base != CacheKey.build(Path("/data/other"), WINDOW, GenerationOptions())
    assert base != CacheKey.build(
        Path("/data/cam"), WINDOW, GenerationOptions(extra_encoder_args=("-crf", "30")),
    )
    assert CacheKey.build(
        Path("/data/cam"), WINDOW, GenerationOptions(extra_encoder_args=("-a", "-b")),
    ) != CacheKey.build(
        Path("/data/cam"), WINDOW, GenerationOptions(extra_encoder_args=("-b", "-a")),
    )
