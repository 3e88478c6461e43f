"""
JSON file storage backend implementation.

One file per collection under a data directory:

    data/
      users.json       {"<id>": {...}, ...}
      messages.json    [{...}, ...]
      ...

Writes go to a sibling temp file that is then renamed over the target,
so a reader sees either the old or the new file, never a torn one.
"""

import os
from pathlib import Path
from typing import Optional

from core.logging import get_logger
from core.storage.base import BaseCollectionStore, CollectionDescriptor
from core.storage.cache import CollectionCache


logger = get_logger(__name__)


class JsonFileCollectionStore(BaseCollectionStore):
    """
    File-per-collection store.

    No locking is done: concurrent writers, in this process or another,
    race at the granularity of a whole collection and the last save wins.
    """

    def __init__(
        self,
        data_dir: Path,
        cache: Optional[CollectionCache] = None,
        indent: Optional[int] = 2,
    ):
        super().__init__(cache=cache, indent=indent)
        self.data_dir = Path(data_dir)

    def setup(self) -> None:
        """Create the data directory. Idempotent."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("JSON file store initialized", data_dir=str(self.data_dir))

    def path_for(self, descriptor: CollectionDescriptor) -> Path:
        return self.data_dir / descriptor.filename

    def location(self, descriptor: CollectionDescriptor) -> Path:
        return self.path_for(descriptor)

    def _read(self, descriptor: CollectionDescriptor) -> Optional[bytes]:
        path = self.path_for(descriptor)
        if not path.exists():
            return None
        return path.read_bytes()

    def _write(self, descriptor: CollectionDescriptor, payload: bytes) -> None:
        path = self.path_for(descriptor)
        path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = path.with_suffix(".json.tmp")
        try:
            temp_path.write_bytes(payload)
            os.replace(temp_path, path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
