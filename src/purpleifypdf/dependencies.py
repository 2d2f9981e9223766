"""Runtime dependency checks for CLI commands."""

from __future__ import annotations

import importlib.util
from typing import TYPE_CHECKING

from purpleifypdf.exceptions import DependencyError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Distribution name -> import name of everything needed to render and reassemble.
RENDER_DEPENDENCIES: dict[str, str] = {
    "pymupdf": "pymupdf",
    "pillow": "PIL",
    "numpy": "numpy",
    "pypdf": "pypdf",
}


def _is_module_available(module_name: str) -> bool:
    return importlib.util.find_spec(module_name) is not None


def missing_dependencies(modules_by_package: Mapping[str, str] = RENDER_DEPENDENCIES) -> list[str]:
    """List the distributions whose import module cannot be found.

    Args:
        modules_by_package (Mapping[str, str]): Distribution name -> import name.

    Returns:
        list[str]: Missing distribution names, in mapping order.
    """
    return [package for package, module in modules_by_package.items() if not _is_module_available(module)]


def ensure_render_dependencies() -> None:
    """Fail early when a document cannot be rendered for lack of a library.

    Raises:
        DependencyError: If one or more required modules are missing.
    """
    if missing := missing_dependencies():
        raise DependencyError(missing_package=missing, message="render")
