"""Batch orchestrator for incremental OverDrive imports.

This module exposes `ImportPipeline`, which runs one import batch for a
library: it reads the cursor, fetches a page of products and their bulk
metadata, merges them, writes the batch file for the import tool and moves
the cursor forward.
"""

from __future__ import annotations

import pathlib

from loguru import logger
from tqdm import tqdm

from overdrive_import.clients.overdrive import OverDriveClient
from overdrive_import.config import settings
from overdrive_import.processing.cursor import ImportCursor, ImportMode, clamp_page_size
from overdrive_import.processing.merging import chunk_ids, merge_records
from overdrive_import.reporting import export
from overdrive_import.utils.progress import get_next_position


class ImportPipeline:
    """Produce one batch of merged records per call to `run`.

    Invocations for the same library must not overlap; the cursor is read at
    the start of a batch and written at its end without locking.
    """

    def __init__(
        self,
        client: OverDriveClient,
        cursor: ImportCursor,
        *,
        upload_dir: pathlib.Path | str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.client = client
        self.cursor = cursor
        self.upload_dir = upload_dir
        self.base_url = base_url

    async def run(
        self,
        library_id: str | int,
        limit: int | str | None = None,
        new: object = False,
    ) -> str | None:
        """Import the next batch for `library_id`.

        The steps are:
        1. Remove any batch file left from a previous run.
        2. Stop (marking the cursor completed) when the forward scan is done
           and no page/delta override is requested.
        3. Search one page of products chosen by the mode.
        4. Persist the reported total, then fetch bulk metadata per chunk of ids.
        5. Merge, write the batch file, and advance the cursor.

        Args:
            library_id (str | int): OverDrive library id.
            limit (int | str | None): Records per page, clamped to [1, 300].
            new (object): Mode selector; see `ImportMode.parse`.

        Returns:
            str | None: URL of the written batch, or None when there is
                nothing to import.

        Raises:
            AuthError: When no access token can be obtained.
            FetchError: When a request fails; no batch file is written.

        """
        page_size = clamp_page_size(limit)
        mode = ImportMode.parse(new)
        export.remove_batch(library_id, self.upload_dir)

        state = self.cursor.load(library_id)
        if self.cursor.has_state(library_id) and self.cursor.is_complete(
            state, page_size, mode.overrides_completion
        ):
            self.cursor.mark_completed(library_id, state)
            return None

        query = self.cursor.compute_query(library_id, state, mode, page_size)
        logger.info("Importing library {} ({} mode): {}", library_id, mode.kind, query)
        page = await self.client.search_products(library_id, query.as_params())
        if page is None:
            return None
        self.cursor.update(library_id, state, page.total_items)

        ids = [str(p["id"]) for p in page.products]
        chunk_size = min(settings.bulk_chunk_size, self.client.BULK_LIMIT)
        chunks = list(chunk_ids(ids, chunk_size))
        bar = None
        if settings.enable_progress and chunks:
            bar = tqdm(
                total=len(ids), desc=f"metadata:{library_id}", position=get_next_position(),
                unit="record",
            )
        metadata = []
        try:
            for chunk in chunks:
                metadata.extend(await self.client.get_bulk_metadata(library_id, chunk))
                if bar is not None:
                    bar.update(len(chunk))
        finally:
            if bar is not None:
                bar.close()

        merged = merge_records(metadata, page.products)
        if not merged:
            logger.info("Library {} returned no products for {}", library_id, query)
            self.cursor.advance(library_id, state, mode, query, page.fetched)
            return None

        url = export.write_batch(
            merged, library_id, upload_dir=self.upload_dir, base_url=self.base_url
        )
        self.cursor.advance(library_id, state, mode, query, page.fetched)
        return url
