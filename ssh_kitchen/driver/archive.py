"""Pack local paths into a single gzip-compressed tar archive for upload."""

import gzip
import os
import shutil
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from ._logging import get_logger

LOGGER = get_logger("driver.archive")


def _iter_entries(path: Path) -> Iterator[Path]:
    """Yield path itself, then every descendant with each directory before its contents."""
    # the input directory goes first so extraction creates it with its own mode
    yield path
    if not path.is_dir():
        return

    for root, dirnames, filenames in os.walk(path):
        for name in dirnames + filenames:
            yield Path(root) / name


def _add_entry(tar: tarfile.TarFile, entry: Path, arcname: str) -> None:
    stat = entry.stat()
    info = tarfile.TarInfo(name=arcname)
    info.mode = stat.st_mode & 0o7777
    info.mtime = int(stat.st_mtime)

    if entry.is_dir():
        info.type = tarfile.DIRTYPE
        tar.addfile(info)
        return

    info.type = tarfile.REGTYPE
    info.size = stat.st_size
    with entry.open("rb") as file_handle:
        tar.addfile(info, file_handle)


def _write_tar(tar_file, paths: Sequence[str | Path]) -> int:
    count = 0
    with tarfile.open(fileobj=tar_file, mode="w", format=tarfile.GNU_FORMAT) as tar:
        for raw_path in paths:
            path = Path(raw_path)
            base_path = path.parent
            for entry in _iter_entries(path):
                _add_entry(tar, entry, entry.relative_to(base_path).as_posix())
                count += 1
    return count


@contextmanager
def pack(paths: Sequence[str | Path]) -> Iterator[Path]:
    """Yield the path of a .tar.gz holding paths, relative to each path's parent.

    Both the intermediate .tar and the .tar.gz are deleted when the block exits,
    whether it returns normally or raises.
    """
    tar_archive = None
    tgz_archive = None
    try:
        tar_archive = tempfile.NamedTemporaryFile(prefix="sandbox", suffix=".tar", delete=False)
        tgz_archive = tempfile.NamedTemporaryFile(prefix="sandbox", suffix=".tar.gz", delete=False)

        entry_count = _write_tar(tar_archive, paths)
        tar_archive.seek(0)
        with gzip.GzipFile(fileobj=tgz_archive, mode="wb") as gzip_file:
            shutil.copyfileobj(tar_archive, gzip_file)
        tar_archive.close()
        tgz_archive.close()

        LOGGER.debug("Packed %s entries into %s", entry_count, tgz_archive.name)
        yield Path(tgz_archive.name)
    finally:
        for archive in (tar_archive, tgz_archive):
            if archive is None:
                continue
            archive.close()
            Path(archive.name).unlink(missing_ok=True)
