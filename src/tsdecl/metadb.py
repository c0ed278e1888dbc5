"""Read-only store of class metadata, loaded from the extractor's JSON output."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from tsdecl.logger import logger
from tsdecl.types import ClassMeta

# Index file the extractor writes next to the per-class files
_INDEX_FILENAME = "db.json"


class MetaDataError(ValueError):
    """Raised when a metadata file cannot be read or does not validate."""


class HierarchyFlat(BaseModel):
    """Every ancestor reachable from a class, keyed by class name."""

    super_classes: dict[str, ClassMeta] = Field(default_factory=dict, description="Superclass chain.")
    interfaces: dict[str, ClassMeta] = Field(default_factory=dict, description="All reachable interfaces.")
    mixins: dict[str, ClassMeta] = Field(default_factory=dict, description="All reachable mixins.")


class MetaDatabase:
    """A fully populated snapshot of the library's class metadata.

    Usage::

        db = MetaDatabase.load("compiled/meta", root_dir="source/class")
        meta = db.get_meta_data("qx.ui.core.Widget")
    """

    def __init__(self, classes: Iterable[ClassMeta] = (), *, root_dir: str = "") -> None:
        self._root_dir = root_dir
        self._classes: dict[str, ClassMeta] = {}
        for meta in classes:
            self.add(meta)

    # ----- Loading -----

    @classmethod
    def load(cls, meta_dir: str | Path, *, root_dir: str = "") -> MetaDatabase:
        """Load every ``*.json`` class file below a metadata directory.

        Args:
            meta_dir: Directory holding one JSON document per class.
            root_dir: Source root the ``classFilename`` entries are relative to.

        Raises:
            MetaDataError: If a file is not valid JSON or not valid metadata.
        """
        db = cls(root_dir=root_dir)
        for path in sorted(Path(meta_dir).rglob("*.json")):
            if path.name == _INDEX_FILENAME:
                continue
            db.add(_validate(_read_json(path), path))
        logger.debug("Loaded metadata directory", path=str(meta_dir), classes=len(db))
        return db

    @classmethod
    def load_file(cls, path: str | Path, *, root_dir: str | None = None) -> MetaDatabase:
        """Load a single JSON document holding all classes.

        The document is either a list of class objects or an object with a
        ``classes`` list and an optional ``rootDir``.
        """
        data = _read_json(Path(path))
        if isinstance(data, dict):
            if root_dir is None:
                root_dir = data.get("rootDir", "")
            data = data.get("classes", [])
        if not isinstance(data, list):
            raise MetaDataError(f"{path}: expected a list of classes")
        return cls((_validate(item, Path(path)) for item in data), root_dir=root_dir or "")

    def add(self, meta: ClassMeta) -> None:
        """Add (or replace) the metadata of one class."""
        self._classes[meta.class_name] = meta

    # ----- Queries -----

    def get_classnames(self) -> list[str]:
        return list(self._classes)

    def get_meta_data(self, name: str) -> ClassMeta | None:
        return self._classes.get(name)

    def get_root_dir(self) -> str:
        return self._root_dir

    def get_hierarchy_flat(self, meta: ClassMeta) -> HierarchyFlat:
        """Collect every superclass, interface and mixin reachable from ``meta``.

        Names the database does not know are skipped. Each node is walked
        once, so cyclic references terminate.
        """
        flat = HierarchyFlat()
        seen: set[str] = set()

        def walk(node: ClassMeta) -> None:
            if node.class_name in seen:
                return
            seen.add(node.class_name)
            for name in node.mixins:
                _visit(flat.mixins, name)
            for name in node.interface_names():
                _visit(flat.interfaces, name)
            sup = node.super_class_name()
            if sup:
                _visit(flat.super_classes, sup)

        def _visit(bucket: dict[str, ClassMeta], name: str) -> None:
            found = self._classes.get(name)
            if found is None:
                return
            bucket.setdefault(name, found)
            walk(found)

        walk(meta)
        return flat

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, name: object) -> bool:
        return name in self._classes


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MetaDataError(f"{path}: invalid JSON: {e}") from e


def _validate(data: Any, path: Path) -> ClassMeta:
    try:
        return ClassMeta.model_validate(data)
    except ValidationError as e:
        raise MetaDataError(f"{path}: invalid class metadata: {e}") from e
