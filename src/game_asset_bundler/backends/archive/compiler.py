"""Tar archive bundle compiler.

Each bundle is a tar archive. Compression maps onto stream codecs:
LZMA to xz, LZ4 (chunk based) to gzip, uncompressed to a plain tar.
"""

import gzip
import io
import lzma
import tarfile

from ...compilers.archive import ArchiveBundleCompiler
from ...settings import Compression


class TarBundleCompiler(ArchiveBundleCompiler):
    """Bundle compiler producing deterministic tar archives."""

    name = "archive"

    def _write_archive(
        self,
        entries: list[tuple[str, bytes]],
        compression: Compression,
    ) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as archive:
            for arcname, data in entries:
                info = tarfile.TarInfo(name=arcname)
                info.size = len(data)
                info.mtime = 0
                info.mode = 0o644
                archive.addfile(info, io.BytesIO(data))
        payload = buffer.getvalue()

        if compression is Compression.LZMA:
            return lzma.compress(payload, format=lzma.FORMAT_XZ)
        if compression is Compression.LZ4:
            return gzip.compress(payload, mtime=0)
        return payload
