"""Content fingerprints for sets of files matched by glob patterns.

A fingerprint is one line per matched file, ``"<md5> <relative-path>"``,
joined with newlines. Two fingerprints are equal exactly when the same
files (by relative path) exist with the same content.

Usage:
    from buildifchanged.fingerprint import fingerprint

    fp = fingerprint('/project', ['src/**/*.c', 'include/*.h'])
"""

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .exceptions import HashingError

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8
NEGATION_PREFIX = '!'
_CHUNK_SIZE = 1024 * 1024


def get_file_md5(path: Union[str, Path]) -> str:
    """Calculate the md5 hex digest of a file, reading it in chunks."""
    md5 = hashlib.md5()
    with open(path, 'rb') as f:
        while True:
            data = f.read(_CHUNK_SIZE)
            if not data:
                break
            md5.update(data)
    return md5.hexdigest()


def string_md5(value: str) -> str:
    """Return the md5 hex digest of a string (UTF-8 encoded)."""
    return hashlib.md5(value.encode('utf-8')).hexdigest()


def _hidden_allowed(rel_parts, pattern: str) -> bool:
    """Dotfiles only match where the pattern spells out the leading dot."""
    dot_segments = [seg for seg in pattern.split('/') if seg.startswith('.')]
    for part in rel_parts:
        if not part.startswith('.') or part in ('.', '..'):
            continue
        if not any(fnmatchcase(part, seg) for seg in dot_segments):
            return False
    return True


def _is_excluded(rel: str, exclude: Iterable[str]) -> bool:
    for prefix in exclude:
        if rel == prefix or rel.startswith(prefix + '/'):
            return True
    return False


def _glob_files(base_dir: Path, pattern: str, exclude: Iterable[str] = ()) -> List[str]:
    """Return sorted relative POSIX paths of regular files matching pattern.

    Hidden files and anything under hidden directories are skipped unless
    the pattern names them explicitly (``.env``, ``.github/**``). Paths
    under an ``exclude`` directory never match.
    """
    found = []
    for path in base_dir.glob(pattern):
        if not path.is_file():
            continue
        rel = path.relative_to(base_dir)
        if not _hidden_allowed(rel.parts, pattern):
            continue
        rel = rel.as_posix()
        if _is_excluded(rel, exclude):
            continue
        found.append(rel)
    found.sort()
    return found


def expand_patterns(
    base_dir: Union[str, Path],
    patterns: Iterable[str],
    exclude: Iterable[str] = (),
) -> List[str]:
    """Expand glob patterns into an ordered, duplicate-free list of files.

    Patterns are applied in order. Each pattern contributes its matches
    sorted lexicographically; a file already matched keeps its first
    position. A pattern starting with ``!`` removes matching files from
    what was collected so far.

    Directories never match, only regular files. Hidden paths match only
    when the pattern names them. Files under any directory listed in
    ``exclude`` (relative POSIX paths) are never returned.
    """
    base_dir = Path(base_dir)
    exclude = [e.strip('/') for e in exclude if e.strip('/')]
    matched: List[str] = []
    seen = set()
    for pattern in patterns:
        if pattern.startswith(NEGATION_PREFIX):
            excluded = set(_glob_files(base_dir, pattern[len(NEGATION_PREFIX):]))
            matched = [p for p in matched if p not in excluded]
            seen -= excluded
            continue
        for rel in _glob_files(base_dir, pattern, exclude):
            if rel not in seen:
                seen.add(rel)
                matched.append(rel)
    return matched


def _hash_one(base_dir: Path, rel: str) -> str:
    try:
        return get_file_md5(base_dir / rel)
    except OSError as e:
        raise HashingError(rel, e) from e


def fingerprint(
    base_dir: Union[str, Path],
    patterns: Iterable[str],
    max_workers: Optional[int] = None,
    exclude: Iterable[str] = (),
) -> str:
    """Compute the fingerprint of all files matched by patterns.

    Files are hashed concurrently on a bounded thread pool; the result is
    only built once every file has been hashed.

    Args:
        base_dir: Directory patterns are relative to
        patterns: Glob patterns (``**`` allowed, ``!`` negates)
        max_workers: Size of the hashing pool (default 8)
        exclude: Directories (relative to base_dir) never fingerprinted

    Returns:
        The fingerprint string, ``""`` when nothing matches.

    Raises:
        HashingError: If any matched file cannot be read
    """
    base_dir = Path(base_dir)
    files = expand_patterns(base_dir, patterns, exclude)
    if not files:
        return ''

    workers = max(1, min(max_workers or DEFAULT_WORKERS, len(files)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # map() preserves order and re-raises the first failure
        hashes = list(pool.map(lambda rel: _hash_one(base_dir, rel), files))

    logger.debug("hashed %d file(s) under %s", len(files), base_dir)
    return '\n'.join(f'{md5} {rel}' for md5, rel in zip(hashes, files))
