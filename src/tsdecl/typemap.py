"""Map the library's loose type annotations to TypeScript type syntax.

The mapping is an ordered pipeline of small string transforms.  Later stages
assume the shape produced by earlier ones, so the order in
:attr:`TypeMapper.stages` is part of the contract::

    "Array"               -> "any[]"
    "Map"                 -> "Record<string, any>"
    "Array<String>"       -> "(string)[]"
    "Promise<Boolean>"    -> "globalThis.Promise<boolean>"
    "qx.ui.core.Widget?"  -> "globalThis.qx.ui.core.Widget"   (if known)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import NamedTuple

from tsdecl.logger import logger
from tsdecl.metadb import MetaDatabase
from tsdecl.settings import GeneratorSettings

DEFAULT_TYPE = "any"

# What the extractor records for inline function types
FUNCTION_MARKER = "[[ Function ]]"

_NULLABLE_RE = re.compile(r"\?.*$")
_LOOSE_TOKEN_RE = re.compile(r"(?<![.\w])(?:var|\*)(?![.\w])")
# Only one level deep: Array<Record<string, any>> is left alone
_GENERIC_ARRAY_RE = re.compile(r"(?<![.\w])Array<([^<>]+)>")


class Stage(NamedTuple):
    """One step of the mapping pipeline.

    A ``final`` stage ends the pipeline as soon as it changes the text.
    """

    name: str
    apply: Callable[[str], str]
    final: bool = False


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def map_opaque(expr: str) -> str:
    """Empty expressions and opaque function markers become ``any``."""
    if not expr or expr == FUNCTION_MARKER:
        return DEFAULT_TYPE
    return expr


def map_bare_array(expr: str) -> str:
    return "any[]" if expr == "Array" else expr


@lru_cache(maxsize=32)
def _alias_pattern(names: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(name) for name in names)
    return re.compile(rf"(^|[^.a-zA-Z0-9])({alternatives})($|[^.a-zA-Z0-9<])")


def substitute_aliases(expr: str, aliases: Mapping[str, str], *, max_passes: int = 100) -> str:
    """Replace alias names that stand on a token boundary.

    Neighbouring matches share their boundary character, so a single regex
    pass can miss the second one.  Substitution is therefore repeated one
    match at a time until nothing matches any more.

    Args:
        expr: The type expression.
        aliases: Short source type name to TypeScript type name.
        max_passes: Give up after this many substitutions (self-feeding tables).
    """
    if not aliases:
        return expr
    pattern = _alias_pattern(tuple(aliases))
    for _ in range(max_passes):
        m = pattern.search(expr)
        if m is None:
            return expr
        expr = expr[: m.start(2)] + aliases[m.group(2)] + expr[m.end(2) :]
    if pattern.search(expr):
        logger.warning("Alias substitution did not settle", expr=expr, max_passes=max_passes)
    return expr


def strip_nullable(expr: str) -> str:
    return _NULLABLE_RE.sub("", expr)


def qualify_known_class(expr: str, db: MetaDatabase, qualifier: str) -> str:
    """Prefix namespaced library classes so module blocks cannot shadow them."""
    bare = expr.replace("[]", "")
    if "." in bare and db.get_meta_data(bare) is not None:
        return f"{qualifier}.{expr}"
    return expr


def qualify_promise(expr: str, qualifier: str) -> str:
    return re.sub(r"(?<![.\w])Promise<", lambda _: f"{qualifier}.Promise<", expr)


def replace_loose_tokens(expr: str) -> str:
    """Rewrite leftover ``var`` and ``*`` identifiers to ``unknown``."""
    return _LOOSE_TOKEN_RE.sub("unknown", expr)


def rewrite_generic_array(expr: str) -> str:
    return _GENERIC_ARRAY_RE.sub(r"(\1)[]", expr)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class TypeMapper:
    """Maps type expressions using a database and the configured alias table."""

    def __init__(self, db: MetaDatabase, settings: GeneratorSettings | None = None) -> None:
        settings = settings or GeneratorSettings()
        aliases = dict(settings.type_mappings)
        qualifier = settings.global_qualifier
        max_passes = settings.max_alias_passes

        self.stages: tuple[Stage, ...] = (
            Stage("opaque", map_opaque, final=True),
            Stage("bare-array", map_bare_array, final=True),
            Stage("aliases", lambda e: substitute_aliases(e, aliases, max_passes=max_passes)),
            Stage("nullable", strip_nullable),
            Stage("known-class", lambda e: qualify_known_class(e, db, qualifier), final=True),
            Stage("promise", lambda e: qualify_promise(e, qualifier)),
            Stage("loose-tokens", replace_loose_tokens),
            Stage("generic-array", rewrite_generic_array),
        )

    def map_type(self, expr: str | None) -> str:
        """Return the TypeScript form of ``expr``; never fails."""
        text = expr or ""
        for stage in self.stages:
            result = stage.apply(text)
            if stage.final and result != text:
                return result
            text = result
        return text or DEFAULT_TYPE
