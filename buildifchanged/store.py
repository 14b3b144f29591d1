"""Persistence of per-task fingerprints between runs.

Each task is stored under its command key with two values: the input
fingerprint and the output fingerprint recorded after its last successful
execution. A missing record reads as two empty fingerprints.

Backends:
- FileStateStore: two text files per task in a cache directory
- InMemoryStateStore: a dict, for tests and embedding
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .exceptions import StoreError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = '.buildifchanged'
INPUT_SUFFIX = '-in-hashes'
OUTPUT_SUFFIX = '-out-hashes'


@dataclass(frozen=True)
class StoredState:
    """Fingerprints recorded after a task's last successful execution."""
    input_fingerprint: str = ''
    output_fingerprint: str = ''


EMPTY_STATE = StoredState()


class StateStore(ABC):
    """Key-value store of task fingerprints.

    ``save`` writes input and output fingerprints together; callers only
    call it after the task executed successfully.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[StoredState]:
        """Return the stored state for key, or None if never saved."""
        pass

    @abstractmethod
    def save(self, key: str, input_fingerprint: str, output_fingerprint: str) -> None:
        pass

    @abstractmethod
    def forget(self, key: str) -> None:
        """Remove the record for key. No-op if absent."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    def get(self, key: str) -> StoredState:
        """Like load() but returns empty fingerprints for unknown keys."""
        state = self.load(key)
        return state if state is not None else EMPTY_STATE

    def stale_keys(self, valid_keys: Iterable[str]) -> List[str]:
        """Stored keys that are not in valid_keys."""
        valid = set(valid_keys)
        return [key for key in self.keys() if key not in valid]

    def prune(self, valid_keys: Iterable[str]) -> List[str]:
        """Forget every key not in valid_keys. Returns the removed keys."""
        removed = self.stale_keys(valid_keys)
        for key in removed:
            self.forget(key)
        return removed


class InMemoryStateStore(StateStore):
    """Dict-backed store. Nothing survives the process."""

    def __init__(self):
        self._data: Dict[str, StoredState] = {}

    def load(self, key):
        return self._data.get(key)

    def save(self, key, input_fingerprint, output_fingerprint):
        self._data[key] = StoredState(input_fingerprint, output_fingerprint)

    def forget(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class FileStateStore(StateStore):
    """Store fingerprints as text files in a cache directory.

    Layout, per task key::

        <cache_dir>/<key>-in-hashes
        <cache_dir>/<key>-out-hashes

    Writes go to temporary files first and are renamed into place, output
    record before input record. If the process dies between the two
    renames the input record is stale, so the task simply runs again.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir)

    def ensure(self) -> 'FileStateStore':
        """Create the cache directory if needed."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"cannot create cache directory '{self.cache_dir}': {e}")
        return self

    def _input_path(self, key: str) -> Path:
        return self.cache_dir / (key + INPUT_SUFFIX)

    def _output_path(self, key: str) -> Path:
        return self.cache_dir / (key + OUTPUT_SUFFIX)

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"cannot read '{path}': {e}")

    def load(self, key):
        input_fp = self._read(self._input_path(key))
        output_fp = self._read(self._output_path(key))
        if input_fp is None and output_fp is None:
            return None
        return StoredState(input_fp or '', output_fp or '')

    def save(self, key, input_fingerprint, output_fingerprint):
        pairs = [
            (self._output_path(key), output_fingerprint),
            (self._input_path(key), input_fingerprint),
        ]
        temps = []
        try:
            for path, content in pairs:
                tmp = path.with_name(path.name + '.tmp')
                tmp.write_text(content, encoding='utf-8')
                temps.append((tmp, path))
            for tmp, path in temps:
                os.replace(tmp, path)
        except OSError as e:
            raise StoreError(f"cannot write fingerprints for {key}: {e}")
        logger.debug("saved fingerprints for %s", key)

    def forget(self, key):
        for path in (self._input_path(key), self._output_path(key)):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StoreError(f"cannot remove '{path}': {e}")

    def keys(self):
        if not self.cache_dir.is_dir():
            return []
        found = set()
        for path in self.cache_dir.iterdir():
            for suffix in (INPUT_SUFFIX, OUTPUT_SUFFIX):
                if path.name.endswith(suffix):
                    found.add(path.name[:-len(suffix)])
        return sorted(found)
