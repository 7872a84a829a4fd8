import stat
from pathlib import Path


def write_frames(folder: Path, timestamps, payload: bytes = b"\xff\xd8jpeg\xff\xd9") -> list[Path]:
    folder.mkdir(parents=True, exist_ok=True)
    paths = []
    for ts in timestamps:
        path = folder / f"{ts}.jpg"
        path.write_bytes(payload + str(ts).encode())
        paths.append(path)
    return paths


def fake_encoder(tmp_path: Path, body: str) -> Path:
    """Write an executable stand-in for ffmpeg; ``$out`` is the output path."""
    script = tmp_path / "fake-ffmpeg"
    script.write_text(
        "#!/bin/sh\n"
        f"printf '%s\\n' \"$@\" > '{tmp_path / 'encoder-args.txt'}'\n"
        "for out in \"$@\"; do :; done\n"
        f"{body}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def encoder_args(tmp_path: Path) -> list[str]:
    return (tmp_path / "encoder-args.txt").read_text().splitlines()


WRITES_VIDEO = "printf 'fake-mp4-payload' > \"$out\""
FAILS = "echo 'Invalid argument' >&2\nexit 3"
WRITES_NOTHING = "exit 0"
HANGS = "exec sleep 30"


