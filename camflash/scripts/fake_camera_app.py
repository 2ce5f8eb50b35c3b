"""
Fake native camera app for exercising TakePhotoNative without a real one.

Waits a moment, then writes a JPEG into the camera folder in chunks with
pauses in between, the way a real app flushes a photo incrementally.

Usage (installed as the `camflash-fake-camera` console script):
    NATIVE_CAMERA_TARGET=camflash-fake-camera CAMERA_DRIVER=mock python -m camflash.main
"""

import argparse
import time
from datetime import datetime
from pathlib import Path

from camflash.services.config import Settings

_SOI = b"\xff\xd8\xff\xe0"
_EOI = b"\xff\xd9"


def write_photo(folder: Path, chunks: int = 4, chunk_size: int = 4096,
                pause: float = 0.3, delay: float = 1.0) -> Path:
    time.sleep(delay)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"WIN_{datetime.now():%Y%m%d_%H_%M_%S}_Pro.jpg"
    print(f"[camera] writing {path} in {chunks} chunks ...")
    with open(path, "wb") as f:
        f.write(_SOI)
        for _ in range(chunks):
            f.write(b"\x00" * chunk_size)
            f.flush()
            time.sleep(pause)
        f.write(_EOI)
    print(f"[camera] done ({path.stat().st_size} bytes)")
    return path


def main():
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="fake native camera app")
    parser.add_argument("--folder", type=Path, default=settings.pictures_dir / settings.native_subdir)
    parser.add_argument("--chunks", type=int, default=4)
    parser.add_argument("--pause", type=float, default=0.3)
    parser.add_argument("--delay", type=float, default=1.0)
    args = parser.parse_args()
    write_photo(args.folder, chunks=args.chunks, pause=args.pause, delay=args.delay)


if __name__ == "__main__":
    main()
