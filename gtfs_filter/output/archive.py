"""Output directory handling and zip packaging."""

import logging
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)


def create_output_directory(output_dir: str | Path) -> Path:
    """Create the output directory and delete all files already in it."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Delete all files in output directory: {path.resolve()}")
    for file in path.iterdir():
        if file.is_file():
            file.unlink()
    return path


def compress(source_dir: str | Path, target_zip: str | Path) -> Path:
    """Zip every file under source_dir, stored relative to it."""
    source = Path(source_dir)
    target = Path(target_zip)
    logger.info(f"Compress files in {source} => {target}")

    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file in sorted(source.rglob("*")):
            if file.is_file():
                archive.write(file, file.relative_to(source).as_posix())

    return target
