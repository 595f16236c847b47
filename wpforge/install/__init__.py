"""
wpforge Installation Layer.

Writes resolved plugins/themes into a runtime and activates them.
"""

from .activation import ActivationController
from .archive import unzip_to_tree
from .asset import AssetInstaller, InstallResult
from .naming import random_suffix, slugify, zip_name_to_human_name

__all__ = [
    "ActivationController",
    "AssetInstaller",
    "InstallResult",
    "random_suffix",
    "slugify",
    "unzip_to_tree",
    "zip_name_to_human_name",
]
