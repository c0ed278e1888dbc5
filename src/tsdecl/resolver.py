"""Find the most specific type information for a member across the class graph.

A class reaches other nodes through three relations: interfaces, mixins and
its superclass, and each of those may in turn reach further nodes.  Type
information for a member can sit on any of them; the first *substantial*
definition found in the order

    the class itself > interfaces > mixins > superclass

(each searched depth-first, in declaration order) is authoritative.
"""

from __future__ import annotations

from typing import NamedTuple

from tsdecl.metadb import MetaDatabase
from tsdecl.types import ClassMeta, MemberKind, MemberMeta, PropertyMeta

Definition = MemberMeta | PropertyMeta


class Resolution(NamedTuple):
    definition: Definition
    is_override: bool


def is_substantial(definition: Definition) -> bool:
    """Whether a definition carries real type information.

    Methods need a return type or fully typed parameters; properties need a
    ``check`` type.
    """
    if isinstance(definition, PropertyMeta):
        return definition.check is not None
    if definition.return_type:
        return True
    return definition.params is not None and all(p.typed for p in definition.params)


def resolve_member(name: str, kind: MemberKind, meta: ClassMeta, db: MetaDatabase) -> Resolution:
    """Resolve the authoritative definition of ``meta.<kind>[name]``.

    Args:
        name: Member name.
        kind: ``"statics"``, ``"members"`` or ``"properties"``.
        meta: The class declaring the member.
        db: Database used to look up ancestors.

    Returns:
        The definition and whether it counts as an override.  Definitions
        found through a mixin or the superclass are overrides; definitions
        from the class itself or its interfaces are not.  When nothing
        substantial exists anywhere, the class's own definition is returned.

    Raises:
        KeyError: If ``meta`` does not declare the member.
    """
    own = meta.get_member(kind, name)
    if own is None:
        raise KeyError(f"{meta.class_name} has no {kind} entry named '{name}'")
    found = _search(name, kind, meta, db, set())
    return found or Resolution(own, False)


def _search(name: str, kind: MemberKind, meta: ClassMeta, db: MetaDatabase, visited: set[str]) -> Resolution | None:
    # A node that was already searched yielded nothing the first time
    if meta.class_name in visited:
        return None
    visited.add(meta.class_name)

    definition = meta.get_member(kind, name)
    if definition is not None and is_substantial(definition):
        return Resolution(definition, False)

    for itf in meta.interface_names():
        found = _search_named(name, kind, itf, db, visited)
        if found:
            return Resolution(found.definition, False)

    for mixin in meta.mixins:
        found = _search_named(name, kind, mixin, db, visited)
        if found:
            return Resolution(found.definition, True)

    sup = meta.super_class_name()
    if sup:
        # None when the class extends something outside the library
        found = _search_named(name, kind, sup, db, visited)
        if found:
            return Resolution(found.definition, True)

    return None


def _search_named(name: str, kind: MemberKind, class_name: str, db: MetaDatabase, visited: set[str]) -> Resolution | None:
    target = db.get_meta_data(class_name)
    if target is None:
        return None
    return _search(name, kind, target, db, visited)
