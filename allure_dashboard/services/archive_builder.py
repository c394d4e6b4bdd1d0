"""
Archive Builder - streams a run's stored files as a ZIP download
"""
import asyncio
import zipfile
from typing import Iterator, List, Optional

from .base_service import BaseService
from ..errors import ReportNotFoundError, StorageError
from ..storage.s3_storage import StorageObject


class _ChunkSink:
    """
    Write-only, non-seekable target for ZipFile.
    Collects the bytes ZipFile writes until they are drained.
    """

    def __init__(self):
        self._chunks: List[bytes] = []

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class ArchiveBuilder(BaseService):
    """
    Bundles the raw files of a run into a ZIP archive.

    Files are streamed from storage chunk by chunk and compressed bytes are
    yielded as soon as ZipFile produces them, so neither the stored files
    nor the archive are held in memory. Entries are written one at a time
    in storage listing order.
    """

    def __init__(
        self,
        storage,
        reports_prefix: str = "reports/",
        compression_level: int = 1,
        chunk_size: int = 64 * 1024
    ):
        super().__init__("ArchiveBuilder")
        self.storage = storage
        self.reports_prefix = reports_prefix
        self.compression_level = compression_level
        self.chunk_size = chunk_size

    async def prepare(self, run_id: str, suffix: Optional[str] = None) -> List[StorageObject]:
        """
        List the files that go into the archive of a run.

        Args:
            run_id: Run identifier
            suffix: Only include keys with this suffix (e.g. ".txt")

        Returns:
            Objects to archive, in listing order

        Raises:
            ReportNotFoundError: if the run has no matching files
            StorageError: if the run folder cannot be listed
        """
        prefix = f"{self.reports_prefix}{run_id}/"
        self.log_info(f"Looking for files with prefix: {prefix}")

        objects = await asyncio.to_thread(self.storage.list_objects, prefix)
        files = [obj for obj in objects if not obj.is_folder and obj.basename]
        if suffix:
            files = [obj for obj in files if obj.key.endswith(suffix)]

        self.log_info(f"Found {len(files)} files for run {run_id}")
        if not files:
            raise ReportNotFoundError(run_id)
        return files

    def stream(self, objects: List[StorageObject]) -> Iterator[bytes]:
        """
        Generate the ZIP archive for the given objects.

        A file that cannot be opened is skipped; a file that fails while
        being read ends up truncated in the archive. Either way the rest of
        the archive is still written.
        """
        sink = _ChunkSink()
        added = 0

        with zipfile.ZipFile(
            sink,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        ) as archive:
            for index, obj in enumerate(objects, start=1):
                ok = yield from self._write_entry(archive, sink, obj)
                if ok:
                    added += 1
                self.log_debug(f"Archive progress: {index}/{len(objects)} files")

        tail = sink.drain()
        if tail:
            yield tail

        self.log_info(f"Archive finished with {added}/{len(objects)} files")

    def _write_entry(self, archive: zipfile.ZipFile, sink: _ChunkSink, obj: StorageObject):
        chunks = self.storage.iter_chunks(obj.key, chunk_size=self.chunk_size)
        try:
            try:
                first = next(chunks, b"")
            except StorageError as e:
                self.log_warning(f"Skipping {obj.key}: {e}")
                return False

            try:
                with archive.open(
                    obj.basename,
                    mode="w",
                    force_zip64=obj.size > zipfile.ZIP64_LIMIT // 2,
                ) as entry:
                    entry.write(first)
                    for chunk in chunks:
                        entry.write(chunk)
                        data = sink.drain()
                        if data:
                            yield data
            except StorageError as e:
                self.log_error(f"Entry {obj.basename} is truncated: {e}")
                return False

            data = sink.drain()
            if data:
                yield data
            return True
        finally:
            chunks.close()
