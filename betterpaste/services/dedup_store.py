"""Session-scoped record of fingerprints that were delivered successfully.

The store is a thin view over a key/value *session storage*.  Each delivered
fingerprint is kept as ``bp_sent_<fingerprint> = "true"``; only the presence
of a key matters.  Entries are added after a confirmed delivery and are only
ever removed all at once, when the session ends.
"""

import json
import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

KEY_PREFIX = "bp_sent_"


def storage_key(fp: int) -> str:
    return f"{KEY_PREFIX}{fp}"


class MemorySessionStorage(MutableMapping):
    """In-process session storage; the session is the process lifetime."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class FileSessionStorage(MutableMapping):
    """Session storage persisted to a JSON file.

    Survives restarts of the scanner for as long as the file exists.  Ending
    the session (:meth:`DedupStore.clear`) empties the mapping; once empty,
    the file is removed.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed session file %s", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        if not self._data:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


class DedupStore:
    """Set of fingerprints already delivered in the current session."""

    def __init__(self, storage: Optional[MutableMapping] = None) -> None:
        self._storage = storage if storage is not None else MemorySessionStorage()

    def has(self, fp: int) -> bool:
        return storage_key(fp) in self._storage

    def record(self, fp: int) -> None:
        self._storage[storage_key(fp)] = "true"

    def fingerprints(self) -> List[int]:
        return [
            int(key[len(KEY_PREFIX):])
            for key in self._storage
            if key.startswith(KEY_PREFIX) and key[len(KEY_PREFIX):].isdigit()
        ]

    def clear(self) -> None:
        """End the session: forget every recorded fingerprint."""
        for key in [k for k in self._storage if k.startswith(KEY_PREFIX)]:
            del self._storage[key]

    def __contains__(self, fp: int) -> bool:
        return self.has(fp)

    def __len__(self) -> int:
        return len(self.fingerprints())
