"""Content-hash ledger for incremental patch detection.

The ledger lists every bundle output file with the hash of its bytes:

    assets/art/ui.pc:0cc175b9c0f1b6a831c399e269772661

It is written as UTF-8 without a byte-order marker because the hot-update
comparator matches lines byte for byte. Hashing runs on a thread pool and
results are sorted by path, so the ledger does not depend on filesystem
enumeration or completion order.
"""

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .compilers.archive import BUNDLE_MANIFEST_SUFFIX, CACHE_FILE_NAME
from .manifest import ASSET_BUILD_README_FILE_NAME, README_FILE_NAME
from .utils import compute_file_hash, write_text

logger = logging.getLogger(__name__)

LEDGER_FILE_NAME = "AssetBundleMd5.txt"
LEDGER_SEPARATOR = ":"
DEFAULT_HASH_ALGORITHM = "md5"

EXCLUDED_SUFFIXES = (".meta", BUNDLE_MANIFEST_SUFFIX, ".tmp")
EXCLUDED_NAMES = frozenset(
    {README_FILE_NAME, ASSET_BUILD_README_FILE_NAME, LEDGER_FILE_NAME, CACHE_FILE_NAME}
)


def is_ledger_candidate(relative_path: str) -> bool:
    """Whether an output file belongs in the ledger."""
    name = relative_path.rsplit("/", 1)[-1]
    if name in EXCLUDED_NAMES:
        return False
    return not name.endswith(EXCLUDED_SUFFIXES)


def collect_output_files(output_dir: Path) -> list[str]:
    """List ledger candidates under the output directory as sorted posix paths."""
    files = [
        path.relative_to(output_dir).as_posix()
        for path in output_dir.rglob("*")
        if path.is_file()
    ]
    return sorted(f for f in files if is_ledger_candidate(f))


def hash_output_files(
    output_dir: Path,
    relative_paths: Iterable[str],
    workers: int = 4,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> list[tuple[str, str]]:
    """Hash files in parallel.

    Returns:
        (relative path, hex digest) pairs sorted by path
    """
    paths = sorted(set(relative_paths))
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        digests = executor.map(
            lambda relative: compute_file_hash(output_dir / relative, algorithm),
            paths,
        )
        return sorted(zip(paths, digests))


def render_ledger(entries: Iterable[tuple[str, str]]) -> str:
    return "".join(f"{path}{LEDGER_SEPARATOR}{digest}\n" for path, digest in entries)


def write_ledger(
    output_dir: Path,
    ledger_path: Path | None = None,
    workers: int = 4,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> Path:
    """Rebuild the content ledger for an output directory.

    Any previous ledger is replaced, never merged.

    Args:
        output_dir: Directory holding compiled bundles
        ledger_path: Where to write the ledger; defaults to inside output_dir
        workers: Hashing thread count
        algorithm: hashlib algorithm name

    Returns:
        Path of the written ledger
    """
    ledger_path = ledger_path or output_dir / LEDGER_FILE_NAME
    if ledger_path.exists():
        ledger_path.unlink()

    files = collect_output_files(output_dir)
    entries = hash_output_files(output_dir, files, workers=workers, algorithm=algorithm)
    write_text(ledger_path, render_ledger(entries))
    logger.info("Wrote content ledger %s with %d entries", ledger_path, len(entries))
    return ledger_path


def read_ledger(path: Path) -> dict[str, str]:
    """Parse a ledger file into a path to digest mapping.

    Raises:
        ValueError: If a line has no separator
    """
    entries: dict[str, str] = {}
    with path.open("r", encoding="utf-8", newline="") as f:
        for number, raw in enumerate(f, start=1):
            line = raw.rstrip("\r\n")
            if not line:
                continue
            relative, sep, digest = line.rpartition(LEDGER_SEPARATOR)
            if not sep:
                raise ValueError(f"{path}:{number}: missing '{LEDGER_SEPARATOR}' separator")
            entries[relative] = digest
    return entries


@dataclass
class LedgerDiff:
    """Difference between a deployed ledger and a new one."""

    added: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.changed or self.removed)


def diff_ledgers(old: Mapping[str, str], new: Mapping[str, str]) -> LedgerDiff:
    """Compare two ledgers the way a hot-update comparator does."""
    diff = LedgerDiff()
    for relative in sorted(new):
        if relative not in old:
            diff.added.append(relative)
        elif old[relative] != new[relative]:
            diff.changed.append(relative)
    diff.removed = sorted(set(old) - set(new))
    return diff
