"""
Test module discovery.

Collects test files from the paths given on the command line and imports
them; importing a module runs its declarations, which register fixtures and
tests into the default registry.
"""

import hashlib
import importlib.util
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

logger = logging.getLogger(__name__)

TEST_FILE_PATTERNS = ("test_*.py", "*_test.py")


class DiscoveryError(ValueError):
    """Raised when a path cannot be collected or a test module fails to import."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def find_test_files(paths: Iterable[str | Path]) -> list[Path]:
    """
    Resolve command-line paths to test files.

    Files are taken as given; directories are searched recursively for
    ``test_*.py`` and ``*_test.py``, sorted per directory. Duplicates are
    dropped, first occurrence wins.

    Raises:
        DiscoveryError: If a path does not exist or is not a Python file.
    """
    found: list[Path] = []
    seen: set[Path] = set()

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise DiscoveryError(path, "path not found")

        if path.is_dir():
            candidates = sorted(
                {match for pattern in TEST_FILE_PATTERNS for match in path.rglob(pattern)}
            )
        elif path.suffix == ".py":
            candidates = [path]
        else:
            raise DiscoveryError(path, "not a Python file")

        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(resolved)

    logger.debug("Collected %d test file(s)", len(found))
    return found


def _module_name(path: Path) -> str:
    name = path.stem
    existing = sys.modules.get(name)
    if existing is None or getattr(existing, "__file__", None) == str(path):
        return name
    # Same stem in another directory, or a name already taken by an installed module
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:8]
    return f"{name}_{digest}"


def load_module(path: str | Path) -> ModuleType:
    """
    Import one test file and run its declarations.

    The file's directory is put on ``sys.path`` so it can import sibling
    helpers. A module that was imported before is executed again, so its
    tests register into a freshly cleared registry.

    Raises:
        DiscoveryError: If the module cannot be loaded or raises on import.
    """
    path = Path(path).resolve()
    name = _module_name(path)

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise DiscoveryError(path, "could not create an import spec")

    parent = str(path.parent)
    if parent not in sys.path:
        sys.path.insert(0, parent)

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise DiscoveryError(path, f"import failed: {type(e).__name__}: {e}") from e

    logger.debug("Loaded test module %s from %s", name, path)
    return module


def load_modules(paths: Iterable[str | Path]) -> list[ModuleType]:
    """Collect and import every test file under the given paths, in order."""
    return [load_module(path) for path in find_test_files(paths)]
