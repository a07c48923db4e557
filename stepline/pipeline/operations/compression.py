"""
Compression operations for the pipeline.

Compressed data travels between steps as Base64 text:
- decompress-gzip, compress-gzip: gzip / zlib / raw deflate streams
- decompress-zip, compress-zip: single-entry ZIP archives
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from typing import TYPE_CHECKING

from stepline.errors import CorruptArchive
from stepline.pipeline.operations.encoding import b64decode_strict
from stepline.pipeline.operations.encoding import b64encode_text

if TYPE_CHECKING:
    from stepline.models import Step
    from stepline.pipeline.context import PipelineRun

logger = logging.getLogger(__name__)

ZIP_ENTRY_NAME = "content.txt"

# Accept both gzip and zlib headers
_AUTO_HEADER_WBITS = zlib.MAX_WBITS | 32


def decompress_gzip_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, decompress_gzip(run.current))
    return run


def compress_gzip_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, compress_gzip(run.current))
    return run


def decompress_zip_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, decompress_zip(run.current))
    return run


def compress_zip_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, compress_zip(run.current))
    return run


# =============================================================================
# gzip / deflate
# =============================================================================


def _inflate(data: bytes) -> bytes:
    """Inflate a gzip or zlib stream, falling back to raw deflate."""
    try:
        return zlib.decompress(data, _AUTO_HEADER_WBITS)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


def decompress_gzip(text: str) -> str:
    data = b64decode_strict(text)
    try:
        inflated = _inflate(data)
    except zlib.error as e:
        raise CorruptArchive(
            "Failed to decompress gzip file. The file might be corrupted "
            f"or not a valid gzip file. ({e})"
        ) from e

    try:
        return inflated.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptArchive(f"Decompressed data is not UTF-8 text: {e}") from e


def compress_gzip(text: str) -> str:
    try:
        return b64encode_text(zlib.compress(text.encode("utf-8")))
    except (zlib.error, UnicodeEncodeError) as e:
        raise CorruptArchive(f"Failed to compress content: {e}") from e


# =============================================================================
# ZIP
# =============================================================================


def decompress_zip(text: str) -> str:
    """Return the text of the first file entry in a Base64 ZIP archive."""
    data = b64decode_strict(text)
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            entries = [info for info in archive.infolist() if not info.is_dir()]
            if not entries:
                raise CorruptArchive("No files found in zip")

            first = entries[0]
            if len(entries) > 1:
                logger.debug(
                    f"decompress-zip: archive has {len(entries)} files, reading {first.filename}"
                )
            content = archive.read(first)
    except zipfile.BadZipFile as e:
        raise CorruptArchive(
            f"Invalid ZIP file format. The file might be corrupted or not a ZIP file. ({e})"
        ) from e
    except (zlib.error, NotImplementedError, EOFError, RuntimeError) as e:
        raise CorruptArchive(f"Failed to read ZIP entry: {e}") from e

    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptArchive(f"ZIP entry {first.filename} is not UTF-8 text: {e}") from e


def compress_zip(text: str) -> str:
    """Wrap text as the single entry `content.txt` of a Base64 ZIP archive."""
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(ZIP_ENTRY_NAME, text.encode("utf-8"))
    except (zlib.error, UnicodeEncodeError) as e:
        raise CorruptArchive(f"Failed to build ZIP archive: {e}") from e
    return b64encode_text(buffer.getvalue())
