import json
from pathlib import Path
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_ignore() -> dict[str, list[str]]:
    return {
        "qx.ui.virtual.core.CellEvent": ["init"],
        "qx.ui.table.columnmodel.resizebehavior.Default": ["set"],
        "qx.ui.progressive.renderer.table.Widths": ["set"],
        "qx.ui.table.columnmodel.resizebehavior": ["set"],
        "qx.ui.table.pane.CellEvent": ["init"],
        "qx.ui.mobile.dialog.Manager": ["error"],
        "qx.ui.mobile.container.Navigation": ["add"],
        "qx.ui.website.Table": ["filter", "sort"],
        "qx.ui.website.DatePicker": ["init", "sort"],
        "qx.event.type.Orientation": ["init"],
        "qx.event.type.KeySequence": ["init"],
        "qx.event.type.KeyInput": ["init"],
        "qx.event.type.GeoPosition": ["init"],
        "qx.event.type.Drag": ["init"],
        "qx.bom.request.SimpleXhr": ["addListener", "addListenerOnce"],
        "qx.event.dispatch.AbstractBubbling": ["dispatchEvent"],
        "qx.event.dispatch.Direct": ["dispatchEvent"],
        "qx.event.dispatch.MouseCapture": ["dispatchEvent"],
        "qx.event.type.Native": ["init"],
        "qx.html.Element": ["removeListener", "removeListenerById"],
        "qx.html.Flash": ["setAttribute"],
        "qx.util.LibraryManager": ["get", "set"],
    }


def _default_type_mappings() -> dict[str, str]:
    return {
        "Event": "qx.event.type.Event",
        "LocalizedString": "qx.locale.LocalizedString",
        "LayoutItem": "qx.ui.core.LayoutItem",
        "Widget": "qx.ui.core.Widget",
        "Decorator": "qx.ui.decoration.Decorator",
        "MWidgetController": "qx.ui.list.core.MWidgetController",
        "AbstractTreeItem": "qx.ui.tree.core.AbstractTreeItem",
        "Axis": "qx.ui.virtual.core.Axis",
        "ILayer": "qx.ui.virtual.core.ILayer",
        "Pane": "qx.ui.virtual.core.Pane",
        "IDesktop": "qx.ui.window.IDesktop",
        "IWindowManager": "qx.ui.window.IWindowManager",
        "DateFormat": "qx.util.format.DateFormat",
        "Class": "qx.Class",
        "Interface": "qx.Interface",
        "Mixin": "qx.Mixin",
        "Theme": "qx.Theme",
        "Boolean": "boolean",
        "Number": "number",
        "String": "string",
        "document": "Document",
        "Stylesheet": "StyleSheet",
        "Element": "HTMLElement",
        "Object": "object",
        "Map": "Record<string, any>",
        # non-standard aliases for builtin types
        "var": "unknown",
        "*": "unknown",
        "arguments": "unknown",
    }


class GeneratorSettings(BaseSettings):
    """Settings for a declaration generator run."""

    model_config = SettingsConfigDict(env_prefix="TSDECL_")

    output_to: str = Field(
        default="qooxdoo.d.ts",
        description="Path of the .d.ts file to write.",
    )
    base_declaration: Optional[str] = Field(
        default=None,
        description=(
            "Path of a template copied verbatim after the header. "
            "If None, the packaged base declaration is used."
        ),
    )
    ignore: dict[str, list[str]] = Field(
        default_factory=_default_ignore,
        description=(
            "Per-class member suppression table: members listed for a class are "
            "written as comments instead of active declarations."
        ),
    )
    type_mappings: dict[str, str] = Field(
        default_factory=_default_type_mappings,
        description="Alias table mapping short source type names to TypeScript type names.",
    )
    global_qualifier: str = Field(
        default="globalThis",
        description="Prefix used to reach library and builtin types from inside module blocks.",
    )
    ignored_superclasses: set[str] = Field(
        default_factory=lambda: {"Object", "Array", "Error"},
        description="Native superclasses that never produce an extends clause.",
    )
    indent: str = Field(
        default="    ",
        description="Indentation of class members.",
    )
    max_alias_passes: int = Field(
        default=100,
        description="Upper bound on alias substitution passes for a single type expression.",
    )


def load_settings(config_file: Optional[str] = None, **overrides: Any) -> GeneratorSettings:
    """Build settings from environment, an optional JSON file and overrides.

    Explicit overrides win over the file, the file wins over ``TSDECL_*``
    environment variables.  Overrides that are None are ignored.
    """
    values: dict[str, Any] = {}
    if config_file:
        values.update(json.loads(Path(config_file).read_text(encoding="utf-8")))
    values.update({key: value for key, value in overrides.items() if value is not None})
    return GeneratorSettings(**values)
