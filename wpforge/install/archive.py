"""
In-memory archive extraction.

Unpacks zip archives into file trees so the installer can inspect the
layout before anything is written.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePosixPath

from wpforge.errors import MalformedAssetError
from wpforge.resources.content import FileTree

logger = logging.getLogger(__name__)

# macOS Finder metadata, never part of the payload
_IGNORED_TOP_LEVEL = frozenset({"__MACOSX"})
_IGNORED_FILES = frozenset({".DS_Store"})


def unzip_to_tree(data: bytes, *, name: str = "archive") -> FileTree:
    """
    Unpack a zip archive into a file tree.

    Raises:
        MalformedAssetError: Corrupt archive, unsafe entry paths, or no files
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise MalformedAssetError(f"{name} is not a valid zip archive: {e}") from e

    tree: FileTree = {}
    with archive:
        for info in archive.infolist():
            normalized = info.filename.replace("\\", "/").strip().lstrip("/")
            if not normalized:
                continue
            parts = PurePosixPath(normalized).parts
            if ".." in parts:
                raise MalformedAssetError(f"{name} contains an unsafe path: {info.filename}")
            if parts[0] in _IGNORED_TOP_LEVEL or parts[-1] in _IGNORED_FILES:
                continue

            node = tree
            for part in parts[:-1]:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    raise MalformedAssetError(f"{name} has conflicting entries at {part}")
                node = child

            if info.is_dir():
                node.setdefault(parts[-1], {})
                continue
            try:
                node[parts[-1]] = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                raise MalformedAssetError(f"Could not extract {info.filename} from {name}: {e}") from e

    if not tree:
        raise MalformedAssetError(f"{name} is empty")

    logger.debug(f"Unzipped {name}: top-level entries={sorted(tree)}")
    return tree
