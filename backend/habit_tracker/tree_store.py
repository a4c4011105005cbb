"""
Habit Tracker Backend - Tree Store (Whole-Document Persistence)
=================================================================

What:  Loads and saves the entire habit forest as one JSON document.
How:   Async file I/O (aiofiles) for reads and writes. Saves go to a temp
       file in the same directory which then replaces the document in a
       single rename, so a reader sees either the old or the new forest.
Who:   Used by HabitRepository; the only module that touches the disk.
When:  Once per repository operation (no caching between calls).

Load outcomes:
    document missing            → []  (first run, not an error)
    document empty / blank      → []
    valid JSON array of habits  → List[Habit], nesting and unknown keys kept
    OS error other than missing → StorageIOError
    bad JSON / bad UTF-8 / not an array / bad habit shape → CorruptDataError

Save outcomes:
    success → document replaced in full, parent directory created on demand
    OSError → StorageIOError (temp file removed, old document untouched)
"""

import json
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from habit_tracker.config import settings
from habit_tracker.exceptions import CorruptDataError, StorageIOError
from habit_tracker.models.habit import Habit

logger = logging.getLogger(__name__)

# Validates a decoded JSON array into typed Habit trees (recursively)
_forest_adapter = TypeAdapter(List[Habit])


class TreeStore:
    """
    Durable whole-document storage of the habit forest.

    The store holds no state besides its path: every load reads the disk,
    every save rewrites the whole document. Serializing concurrent saves is
    the caller's job (see HabitRepository's writer lock).
    """

    def __init__(self, path: Union[str, Path, None] = None, indent: Optional[int] = None):
        """
        Args:
            path:   Override the document path (used in tests).
                    If None, uses settings.data_file.
            indent: JSON indentation; None uses settings.json_indent.
        """
        self.path = Path(path or settings.data_file)
        self.indent = settings.json_indent if indent is None else indent

    async def exists(self) -> bool:
        return await aiofiles.os.path.exists(self.path)

    async def load(self) -> List[Habit]:
        """
        Read the document and rebuild the forest.

        Returns:
            The root habits in stored order, each with its full subtree.

        Raises:
            StorageIOError:   The file exists but could not be read.
            CorruptDataError: The content is not a valid habit forest.
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.debug("No habit document at %s yet, starting empty", self.path)
            return []
        except UnicodeDecodeError as e:
            logger.error("Habit document %s is not valid UTF-8: %s", self.path, e)
            raise CorruptDataError(
                message="Stored habit data is not valid text",
                context={"path": str(self.path), "error": str(e)},
            )
        except OSError as e:
            logger.error("Error reading habit document %s: %s", self.path, e)
            raise StorageIOError(
                message="Could not read habits data",
                context={"path": str(self.path), "os_error": str(e)},
            )

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Habit document %s is not valid JSON: %s", self.path, e)
            raise CorruptDataError(
                message="Stored habit data is not valid JSON",
                context={"path": str(self.path), "line": e.lineno, "column": e.colno},
            )

        if not isinstance(data, list):
            raise CorruptDataError(
                message="Stored habit data must be a JSON array",
                context={"path": str(self.path), "found": type(data).__name__},
            )

        try:
            return _forest_adapter.validate_python(data)
        except PydanticValidationError as e:
            logger.error("Habit document %s has an invalid habit: %s", self.path, e)
            raise CorruptDataError(
                message="Stored habit data does not match the habit format",
                context={"path": str(self.path), "errors": e.error_count()},
            )

    async def save(self, habits: List[Habit]) -> None:
        """
        Serialize the full forest and replace the document.

        Raises:
            StorageIOError: Directory creation, write or rename failed.
        """
        payload = json.dumps(
            [habit.to_document() for habit in habits],
            indent=self.indent or None,
            ensure_ascii=False,
        )
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")

        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write habit document %s: %s", self.path, e)
            await self._discard(tmp_path)
            raise StorageIOError(
                message="Failed to persist habit data",
                context={"path": str(self.path), "os_error": str(e)},
            )

        logger.debug("Wrote %d root habits to %s", len(habits), self.path)

    async def _discard(self, tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", tmp_path, e)
