"""
Data store setup script.

Creates the data directory and writes an empty file for every
collection that does not have one yet. Existing files are left alone.
Run this before starting anything that reads the store.

Usage:
    python -m scripts.init_store
"""

import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import Settings, get_settings
from core.logging import configure_logging, get_logger
from core.storage import Collection, describe
from core.storage.json_file import JsonFileCollectionStore


logger = get_logger(__name__)


def init_store(settings: Optional[Settings] = None) -> list[Collection]:
    """
    Create missing collection files.

    Returns:
        The collections whose files were created
    """
    settings = settings or get_settings()
    store = JsonFileCollectionStore(
        data_dir=settings.data_dir,
        indent=settings.json_indent,
    )
    store.setup()

    created: list[Collection] = []
    for collection in Collection:
        descriptor = describe(collection)
        path = store.path_for(descriptor)
        if path.exists():
            logger.info("Collection file already exists", path=str(path))
            continue

        if not store.save(collection, descriptor.default()):
            raise RuntimeError(f"Could not create {path}")
        created.append(collection)
        logger.info("Collection file created", path=str(path))

    logger.info(
        "Data store setup complete",
        data_dir=str(settings.data_dir),
        created=[c.value for c in created],
    )
    return created


if __name__ == "__main__":
    configure_logging()
    init_store()
