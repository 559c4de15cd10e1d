"""Per-difficulty best times behind an injected key/value storage."""
import json
import logging
import os
import pathlib
from typing import Dict, Optional, Protocol, Tuple

from minesweeper.types import BestTimeResult

logger = logging.getLogger(__name__)

BEST_TIMES_KEY = "minesweeper_best_times"


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process storage, mostly for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FileStorage:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory):
        self.directory = pathlib.Path(directory)

    def _path(self, key: str) -> pathlib.Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)


class BestTimeStore:
    """Reads and updates the best-time mapping stored under one key.

    Any storage failure or malformed content is logged and treated as if no
    record existed, so a broken store never interrupts a game.
    """

    def __init__(self, storage: KeyValueStorage, key: str = BEST_TIMES_KEY):
        self.storage = storage
        self.key = key

    def _read(self) -> Tuple[Dict[str, int], bool]:
        """Return the stored mapping and whether the storage itself could be read.

        Malformed content counts as readable (it is safe to overwrite); a
        storage that raised does not, so callers must not write back over it.
        """
        try:
            raw = self.storage.get(self.key)
        except Exception as error:
            logger.warning(f"Could not read best times: {error}")
            return {}, False

        if raw is None:
            return {}, True

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as error:
            logger.warning(f"Ignoring corrupt best times: {error}")
            return {}, True

        if not isinstance(data, dict):
            logger.warning(f"Ignoring best times of unexpected type {type(data).__name__}")
            return {}, True

        return {
            key: value for key, value in data.items()
            if isinstance(key, str) and isinstance(value, int) and not isinstance(value, bool) and value >= 0
        }, True

    def load(self) -> Dict[str, int]:
        return self._read()[0]

    def get(self, difficulty: str) -> Optional[int]:
        return self.load().get(difficulty)

    def record(self, difficulty: str, seconds: int) -> BestTimeResult:
        """Store ``seconds`` if it beats the current record for ``difficulty``.

        When the storage could not be read, the result is still reported but
        nothing is written, so other difficulties' records survive.
        """
        times, readable = self._read()
        previous = times.get(difficulty)

        if previous is not None and seconds >= previous:
            return BestTimeResult(new_record=False, best_seconds=previous, previous_seconds=previous)

        if readable:
            times[difficulty] = seconds
            try:
                self.storage.set(self.key, json.dumps(times))
            except Exception as error:
                logger.warning(f"Could not save best time for {difficulty}: {error}")
        else:
            logger.warning(f"Not saving best time for {difficulty}: stored times are unreadable")

        logger.info(f"New best time for {difficulty}: {seconds}s (previous: {previous})")
        return BestTimeResult(new_record=True, best_seconds=seconds, previous_seconds=previous)
