"""Zip archive bundle compiler (the older custom pipeline).

Each bundle is a zip archive with per-entry compression: LZMA to
ZIP_LZMA, LZ4 (chunk based) to ZIP_DEFLATED, uncompressed to ZIP_STORED.
"""

import io
import zipfile

from ...compilers.archive import ArchiveBundleCompiler
from ...settings import Compression

ZIP_METHODS = {
    Compression.UNCOMPRESSED: zipfile.ZIP_STORED,
    Compression.LZMA: zipfile.ZIP_LZMA,
    Compression.LZ4: zipfile.ZIP_DEFLATED,
}

# Earliest timestamp zip supports; keeps archives byte-stable
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ZipBundleCompiler(ArchiveBundleCompiler):
    """Bundle compiler producing deterministic zip archives."""

    name = "legacy"

    def _write_archive(
        self,
        entries: list[tuple[str, bytes]],
        compression: Compression,
    ) -> bytes:
        method = ZIP_METHODS[compression]
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, mode="w", compression=method) as archive:
            for arcname, data in entries:
                info = zipfile.ZipInfo(filename=arcname, date_time=FIXED_DATE_TIME)
                info.compress_type = method
                info.external_attr = 0o644 << 16
                archive.writestr(info, data)
        return buffer.getvalue()
