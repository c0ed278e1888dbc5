"""Generate TypeScript declarations from a class metadata database.

Classes are written in sorted order so that classes sharing a namespace are
adjacent; each namespace becomes one ``declare module`` block::

    // Generated declaration file at 2024-05-01T12:00:00
    <base declaration template>
    declare module qx.ui.core {
      // qx.ui.core.Widget
      class Widget extends globalThis.qx.ui.core.LayoutItem {
        ...
      }
    }

Mixins are not referenced by name; their statics, members and properties
are copied into every class that includes them.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, TextIO

from tsdecl import jsdoc
from tsdecl.logger import logger
from tsdecl.metadb import HierarchyFlat, MetaDatabase
from tsdecl.resolver import resolve_member
from tsdecl.settings import GeneratorSettings
from tsdecl.typemap import DEFAULT_TYPE, TypeMapper
from tsdecl.types import Access, ClassMeta, Param

_BASE_DECLARATION = Path(__file__).parent / "templates" / "base_declaration.d.ts"


class EmitContext(NamedTuple):
    """Everything the emission of one top-level class needs.

    ``owner`` stays the class being declared while mixin bodies are inlined,
    so doc links and member suppression always refer to it.
    """

    out: TextIO
    owner: ClassMeta
    hierarchy: HierarchyFlat
    source_path: str
    hidden: frozenset[str]


class MethodDecl(NamedTuple):
    access: Access | None = None
    static: bool = False
    abstract: bool = False
    override: bool = False
    mixin: bool = False
    params: str = ""
    return_type: str = "void"
    jsdoc: Sequence[str] = ()
    hidden: bool = False


def generate_declarations(db: MetaDatabase, settings: GeneratorSettings | None = None) -> str:
    """Generate the complete declaration text for every class in ``db``."""
    return DeclarationWriter(db, settings).render()


class DeclarationWriter:
    """Writes a ``.d.ts`` file for a :class:`MetaDatabase`.

    Usage::

        writer = DeclarationWriter(db, GeneratorSettings(output_to="out/qooxdoo.d.ts"))
        writer.process()
    """

    def __init__(
        self,
        db: MetaDatabase,
        settings: GeneratorSettings | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._db = db
        self._settings = settings or GeneratorSettings()
        self._mapper = TypeMapper(db, self._settings)
        self._clock = clock

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    # ----- Lifecycle -----

    @contextmanager
    def open_sink(self) -> Iterator[TextIO]:
        """Open the output file for the duration of a run."""
        path = Path(self._settings.output_to)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            yield fh

    def process(self) -> None:
        """Write declarations for every class to ``settings.output_to``."""
        logger.info("Writing declarations", output=self._settings.output_to, classes=len(self._db))
        with self.open_sink() as out:
            self.write_to(out)
        logger.info("Declarations written", output=self._settings.output_to)

    def render(self) -> str:
        """Return the declarations as a string instead of writing a file."""
        buf = io.StringIO()
        self.write_to(buf)
        return buf.getvalue()

    def write_to(self, out: TextIO) -> None:
        out.write(f"// Generated declaration file at {self._clock().isoformat(timespec='seconds')}\n")
        out.write(self._read_base_declaration() + "\n")

        last_package: str | None = None
        block_open = False
        for class_name in sorted(self._db.get_classnames()):
            meta = self._db.get_meta_data(class_name)
            if meta is None:
                continue
            package = meta.package_name
            if package != last_package:
                if block_open:
                    out.write("}\n\n")
                block_open = bool(package)
                if block_open:
                    logger.debug("Opening module block", module=package)
                    out.write(f"declare module {package} {{\n")
                last_package = package
            else:
                out.write("\n")
            self._write_class(out, meta, declared=block_open)

        if block_open:
            out.write("}\n")

    def _read_base_declaration(self) -> str:
        path = Path(self._settings.base_declaration) if self._settings.base_declaration else _BASE_DECLARATION
        with path.open(encoding="utf-8") as fh:
            return fh.read()

    # ----- Classes -----

    def _write_class(self, out: TextIO, meta: ClassMeta, *, declared: bool) -> None:
        """Write one class or interface declaration.

        Args:
            out: Output stream.
            meta: The class to declare.
            declared: Whether the class sits inside a ``declare module`` block.
        """
        logger.debug("Writing class", class_name=meta.class_name)
        ctx = EmitContext(
            out=out,
            owner=meta,
            hierarchy=self._db.get_hierarchy_flat(meta),
            source_path=jsdoc.source_link(self._settings.output_to, self._db.get_root_dir(), meta.class_filename),
            hidden=frozenset(self._settings.ignore.get(meta.class_name, ())),
        )

        if meta.type == "interface":
            keyword = "interface "
        elif meta.abstract:
            keyword = "abstract class "
        else:
            keyword = "class "
        if not declared:
            keyword = "declare " + keyword

        head = f"  {keyword}{meta.short_name}{self._extends_clause(meta)}"
        if meta.type != "interface" and meta.interfaces:
            head += " implements " + ", ".join(self._mapper.map_type(itf) for itf in meta.interfaces)

        out.write(f"  // {meta.class_name}\n")
        out.write(head + " {\n")
        if meta.type == "class" and meta.construct_:
            out.write(f"{self._settings.indent}constructor ({self._serialize_params(meta.construct_.params)});\n")
        self._write_class_body(ctx, meta, (meta.class_name,))
        out.write("\n  }\n")

    def _extends_clause(self, meta: ClassMeta) -> str:
        ignored = self._settings.ignored_superclasses
        if meta.type == "interface":
            names = [meta.super_class] if isinstance(meta.super_class, str) else meta.super_class or []
            supers = [self._mapper.map_type(sup) for sup in names]
            supers = [sup for sup in supers if sup != DEFAULT_TYPE]
            return " extends " + ", ".join(supers) if supers else ""
        sup = meta.super_class_name()
        if not sup or sup in ignored:
            return ""
        sup_type = self._mapper.map_type(sup)
        return "" if sup_type == DEFAULT_TYPE else f" extends {sup_type}"

    def _write_class_body(self, ctx: EmitContext, meta: ClassMeta, path: tuple[str, ...]) -> None:
        """Write singleton accessor, statics, members, properties and mixins.

        ``path`` lists the classes whose bodies are currently being written,
        outermost first; it stops mixins that include each other.
        """
        if meta.is_singleton:
            self._write_method(
                ctx,
                "getInstance",
                MethodDecl(access="public", static=True, return_type=self._mapper.map_type(meta.class_name)),
            )
        self._write_methods(ctx, meta, "statics")
        self._write_methods(ctx, meta, "members")
        self._write_properties(ctx, meta)
        self._include_mixins(ctx, meta, path)

    def _include_mixins(self, ctx: EmitContext, meta: ClassMeta, path: tuple[str, ...]) -> None:
        for mixin in meta.mixins:
            if mixin in path:
                logger.warning("Skipping cyclic mixin", mixin=mixin, class_name=ctx.owner.class_name)
                continue
            ctx.out.write(f"{self._settings.indent}// Mixin: {mixin}\n")
            body = ctx.hierarchy.mixins.get(mixin)
            if body is None:
                logger.warning("Unknown mixin", mixin=mixin, class_name=ctx.owner.class_name)
                continue
            self._write_class_body(ctx, body, path + (mixin,))

    # ----- Members -----

    def _write_methods(self, ctx: EmitContext, meta: ClassMeta, kind: str) -> None:
        is_interface = ctx.owner.type == "interface"
        for name, declared in getattr(meta, kind).items():
            definition, override = resolve_member(name, kind, meta, self._db)
            if definition.type != "function":
                continue
            return_type = self._mapper.map_type(definition.return_type) if definition.return_type else "void"
            self._write_method(
                ctx,
                name,
                MethodDecl(
                    access=None if is_interface else definition.access,
                    static=kind == "statics",
                    abstract=not is_interface and definition.abstract,
                    override=not is_interface and override,
                    mixin=definition.mixin,
                    params=self._serialize_params(definition.params),
                    return_type=return_type,
                    jsdoc=declared.jsdoc,
                    hidden=name in ctx.hidden,
                ),
            )

    def _write_properties(self, ctx: EmitContext, meta: ClassMeta) -> None:
        """Synthesise get/is/set/reset accessors (and async variants) per property."""
        is_interface = ctx.owner.type == "interface"
        qualifier = self._settings.global_qualifier
        for prop_name, declared in meta.properties.items():
            if declared.group:
                continue
            definition, override = resolve_member(prop_name, "properties", meta, self._db)
            ts_type = self._mapper.map_type(definition.check)
            upname = prop_name[:1].upper() + prop_name[1:]
            is_boolean = ts_type == "boolean"

            def accessor(method_name: str, description: str, params: str = "", return_type: str = "void") -> None:
                self._write_method(
                    ctx,
                    method_name,
                    MethodDecl(
                        access=None if is_interface else definition.access,
                        override=not is_interface and override,
                        params=params,
                        return_type=return_type,
                        jsdoc=declared.jsdoc or [description],
                        hidden=method_name in ctx.hidden,
                    ),
                )

            accessor(f"get{upname}", f"Gets the {prop_name} property", return_type=ts_type)
            if is_boolean:
                accessor(f"is{upname}", f"Gets the {prop_name} property", return_type=ts_type)
            accessor(f"set{upname}", f"Sets the {prop_name} property", params=f"value: {ts_type}")
            accessor(f"reset{upname}", f"Resets the {prop_name} property")

            if declared.async_:
                promise = f"{qualifier}.Promise<{ts_type}>"
                accessor(f"get{upname}Async", f"Gets the {prop_name} property, asynchronously", return_type=promise)
                if is_boolean:
                    accessor(f"is{upname}Async", f"Gets the {prop_name} property, asynchronously", return_type=promise)
                accessor(
                    f"set{upname}Async",
                    f"Sets the {prop_name} property, asynchronously",
                    params=f"value: {ts_type}",
                    return_type=f"{qualifier}.Promise<void>",
                )

    def _write_method(self, ctx: EmitContext, name: str, decl: MethodDecl) -> None:
        if decl.access == "private":
            return

        modifiers: list[str] = []
        notes: list[str] = []
        if decl.access in ("public", "protected"):
            modifiers.append(decl.access)
        if decl.static:
            modifiers.append("static")
        if decl.abstract:
            modifiers.append("abstract")
            notes.append("Abstract")
        if decl.override:
            modifiers.append("override")
        if decl.mixin:
            notes.append("Mixin")

        modifiers.append(f"{_escape_method_name(name)}({decl.params}): {decl.return_type}")
        declaration = " ".join(modifiers) + ";"
        if notes:
            declaration += " // " + " ".join(notes)

        indent = self._settings.indent
        lines = jsdoc.rewrite_lines(decl.jsdoc, ctx.owner.class_name)
        ctx.out.write(jsdoc.render_jsdoc(lines, ctx.source_path, indent))
        ctx.out.write(f"{indent}{'// ' if decl.hidden else ''}{declaration}\n")

    def _serialize_params(self, params: list[Param] | None) -> str:
        """Render a parameter list; everything after an optional parameter is optional too."""
        force_optional = False
        decls: list[str] = []
        for param in params or []:
            decl = param.name
            if param.optional or param.name == "varargs" or force_optional:
                decl += "?"
                force_optional = True
            # The element name is mapped on its own, dimensions are added after
            ts_type = self._mapper.map_type(param.type) + "[]" * param.dimensions
            decls.append(f"{decl}: {ts_type}")
        return ", ".join(decls)


def _escape_method_name(name: str) -> str:
    """Quote the name unless it is a plain identifier."""
    if name.isidentifier() and name.isascii():
        return name
    return f'"{name}"'
