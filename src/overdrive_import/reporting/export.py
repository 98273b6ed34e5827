"""Export helpers writing import batches for the downstream import tool.

Batches are written as JSON files into the `wpallimport/files` folder of the
shared upload directory; the import tool is pointed at the public URL that
`write_batch` returns.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any

from loguru import logger

from overdrive_import.config import settings

EXPORT_SUBDIR = pathlib.Path("wpallimport") / "files"


def batch_path(library_id: str | int, upload_dir: str | pathlib.Path | None = None) -> pathlib.Path:
    """Return the file path a library's batch is written to.

    Any query string or directory part of `library_id` is dropped so the name
    cannot escape the export folder.
    """
    name = pathlib.PurePath(str(library_id).split("?", 1)[0]).name
    if not name:
        raise ValueError(f"Invalid library id for export: {library_id!r}")
    base = pathlib.Path(upload_dir or settings.upload_dir)
    return base / EXPORT_SUBDIR / f"{name}.json"


def batch_url(path: pathlib.Path, upload_dir: str | pathlib.Path | None = None,
              base_url: str | None = None) -> str:
    """Map a path under the upload directory to its public URL."""
    base = pathlib.Path(upload_dir or settings.upload_dir)
    relative = path.relative_to(base).as_posix()
    return f"{(base_url or settings.upload_base_url).rstrip('/')}/{relative}"


def remove_batch(library_id: str | int, upload_dir: str | pathlib.Path | None = None) -> bool:
    """Delete a previously written batch for `library_id`; True if one existed."""
    p = batch_path(library_id, upload_dir)
    if p.exists():
        p.unlink()
        logger.debug("Removed stale batch {}", p)
        return True
    return False


def write_batch(
    records: list[dict[str, Any]],
    library_id: str | int,
    *,
    upload_dir: str | pathlib.Path | None = None,
    base_url: str | None = None,
) -> str:
    """Write merged records as a JSON array and return the file's public URL.

    Args:
        records (list[dict]): Merged records to write.
        library_id (str | int): Library the batch belongs to; names the file.
        upload_dir (str | pathlib.Path | None): Shared upload directory;
            defaults to `settings.upload_dir`.
        base_url (str | None): Public URL of the upload directory; defaults to
            `settings.upload_base_url`.

    Returns:
        str: URL under which the written file is served.

    """
    p = batch_path(library_id, upload_dir)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf8") as fh:
        json.dump(records, fh, ensure_ascii=False)
    url = batch_url(p, upload_dir, base_url)
    logger.info("Wrote {} records to {}", len(records), p)
    return url
