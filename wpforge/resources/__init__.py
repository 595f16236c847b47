"""
wpforge Resource Resolution.

Resolves Blueprint resource references into in-memory content.
"""

from .content import ArchiveFile, Content, Directory, FileTree, iter_files, normalize_tree
from .git import GitDirectoryFetcher
from .resolver import ResourceResolver, file_name_from_url

__all__ = [
    "ArchiveFile",
    "Content",
    "Directory",
    "FileTree",
    "GitDirectoryFetcher",
    "ResourceResolver",
    "file_name_from_url",
    "iter_files",
    "normalize_tree",
]
