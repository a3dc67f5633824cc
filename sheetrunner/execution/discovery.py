"""
Test class discovery.

Scans the UI test tree for class definitions without importing it, so the
Run Manager can reference tests by class name or dotted suffix.
"""

import ast
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from ..core.logging_config import get_logger


SKIPPED_DIRS = {"__pycache__", "node_modules"}


@dataclass(frozen=True)
class DiscoveredClass:
    """A class found in the test tree."""

    module: str
    name: str
    path: Path
    node_id: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name


class TestDiscovery:
    """Indexes the top-level classes of every module under a root directory."""

    __test__ = False

    def __init__(self, tests_root: Union[str, Path], project_root: Optional[Path] = None):
        self.tests_root = Path(tests_root)
        self.project_root = Path(project_root) if project_root else self.tests_root.parent
        self.logger = get_logger(__name__)
        self._classes: Optional[List[DiscoveredClass]] = None

    def _module_name(self, path: Path) -> str:
        relative = path.relative_to(self.tests_root.parent).with_suffix("")
        parts = [p for p in relative.parts if p != "__init__"]
        return ".".join(parts)

    def _node_id(self, path: Path, class_name: str) -> str:
        try:
            relative = path.relative_to(self.project_root)
        except ValueError:
            relative = path
        return f"{relative.as_posix()}::{class_name}"

    def _scan_module(self, path: Path) -> List[DiscoveredClass]:
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (SyntaxError, UnicodeDecodeError, OSError) as e:
            self.logger.warning(f"Skipping unreadable module {path}: {e}")
            return []

        module = self._module_name(path)
        return [
            DiscoveredClass(
                module=module,
                name=node.name,
                path=path,
                node_id=self._node_id(path, node.name),
            )
            for node in tree.body
            if isinstance(node, ast.ClassDef)
        ]

    def discover(self) -> List[DiscoveredClass]:
        """Walk the tree breadth-first and return every discovered class."""
        if self._classes is not None:
            return self._classes

        classes: List[DiscoveredClass] = []
        if not self.tests_root.is_dir():
            self.logger.error(f"Test directory not found: {self.tests_root}")
            self._classes = classes
            return classes

        pending = deque([self.tests_root])
        while pending:
            directory = pending.popleft()
            for entry in sorted(directory.iterdir()):
                if entry.is_dir():
                    if entry.name.startswith(".") or entry.name in SKIPPED_DIRS:
                        continue
                    pending.append(entry)
                elif entry.suffix == ".py":
                    classes.extend(self._scan_module(entry))

        self.logger.info(
            f"Discovered {len(classes)} class(es) under {self.tests_root}",
            extra={"metadata": {"tests_root": str(self.tests_root)}},
        )
        self._classes = classes
        return classes

    def resolve(self, testcase_id: str) -> Optional[DiscoveredClass]:
        """
        Find the class a Run Manager row refers to.

        Matches the first class whose qualified name ends with the id, or
        whose simple name equals it ignoring case.
        """
        wanted = (testcase_id or "").strip()
        if not wanted:
            return None

        for found in self.discover():
            if (
                found.qualified_name.endswith(wanted)
                or found.name.lower() == wanted.lower()
            ):
                return found
        return None
