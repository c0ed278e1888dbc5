"""Pydantic models for the class metadata database.

The models accept the camelCase keys written by the metadata extractor
(``className``, ``superClass``, ``returnType`` ...) and expose snake_case
attributes to Python code.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Access = Literal["public", "protected", "private"]
ClassType = Literal["class", "interface", "mixin"]
MemberKind = Literal["statics", "members", "properties"]


def _type_name(value: Any) -> str | None:
    """Name of a type reference; objects carry it under ``name`` or ``type``."""
    if isinstance(value, dict):
        value = value.get("name") or value.get("type")
    return str(value) if value else None


def _normalise_type_ref(value: Any) -> str | None:
    """Collapse a return type reference into a plain name.

    ``{"type": "X"}`` and ``{"name": "X"}`` become ``"X"``, a one-element
    list is unwrapped and a list of several alternatives is untyped.
    """
    if isinstance(value, list):
        value = value[0] if len(value) == 1 else None
    return _type_name(value)


def _normalise_jsdoc(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        value = value.get("raw") or []
    if isinstance(value, str):
        value = value.splitlines()
    return [str(line) for line in value]


def _normalise_names(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class _MetaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Param(_MetaModel):
    """A single parameter of a method or constructor.

    The extractor records a type as a name, as ``{"name": "X", "dimensions": n}``
    for arrays, or as a list of alternatives.  The array dimensions are kept
    apart from the name so the name can be mapped on its own; a union of
    several alternatives has no single ``type`` but still counts as typed.
    """

    name: str = Field(description="Parameter name.")
    type: str | None = Field(default=None, description="Type expression in the library's annotation syntax.")
    dimensions: int = Field(default=0, description="Number of array dimensions wrapped around ``type``.")
    alternatives: list[str] = Field(
        default_factory=list,
        description="Type names of a union the extractor recorded as a list.",
    )
    optional: bool = Field(default=False, description="Whether the parameter may be omitted.")

    @model_validator(mode="before")
    @classmethod
    def _split_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "type" not in data:
            return data
        data = dict(data)
        ref = data.pop("type")
        if isinstance(ref, list):
            if len(ref) != 1:
                data["alternatives"] = [name for name in map(_type_name, ref) if name]
                return data
            ref = ref[0]
        data["type"] = _type_name(ref)
        if isinstance(ref, dict):
            data["dimensions"] = int(ref.get("dimensions") or 0)
        return data

    @property
    def typed(self) -> bool:
        return self.type is not None or bool(self.alternatives)


class MemberMeta(_MetaModel):
    """A static or instance member (usually a method) of a class."""

    type: str = Field(
        default="function",
        description='Member kind: "function", "property" or "variable"; only functions are emitted.',
    )
    access: Access | None = Field(default=None, description="Declared visibility, None when unspecified.")
    static: bool = Field(default=False, description="Whether the member is static.")
    abstract: bool = Field(default=False, description="Whether the member is abstract.")
    async_: bool = Field(default=False, alias="async", description="Whether the member is asynchronous.")
    mixin: bool = Field(default=False, description="Whether the extractor copied the member in from a mixin.")
    params: list[Param] | None = Field(default=None, description="Ordered parameters; None when not recorded.")
    return_type: str | None = Field(default=None, alias="returnType", description="Return type expression.")
    jsdoc: list[str] = Field(default_factory=list, description="Raw documentation lines.")

    @field_validator("return_type", mode="before")
    @classmethod
    def _return_type(cls, value: Any) -> str | None:
        return _normalise_type_ref(value)

    @field_validator("jsdoc", mode="before")
    @classmethod
    def _jsdoc(cls, value: Any) -> list[str]:
        return _normalise_jsdoc(value)


class PropertyMeta(_MetaModel):
    """A declared property; accessor methods are synthesised from it."""

    check: str | None = Field(default=None, description="Type expression the property value is checked against.")
    group: bool = Field(default=False, description="Grouped properties get no synthesised accessors.")
    async_: bool = Field(default=False, alias="async", description="Whether *Async accessor variants exist.")
    access: Access | None = Field(default=None, description="Accessor visibility, None when unspecified.")
    refine: bool = Field(default=False, description="Whether the property refines an inherited one.")
    jsdoc: list[str] = Field(default_factory=list, description="Raw documentation lines.")

    @field_validator("check", mode="before")
    @classmethod
    def _check(cls, value: Any) -> str | None:
        # Checks may also be inline functions or lists of allowed values
        return value if isinstance(value, str) and value else None

    @field_validator("jsdoc", mode="before")
    @classmethod
    def _jsdoc(cls, value: Any) -> list[str]:
        return _normalise_jsdoc(value)


class ClassMeta(_MetaModel):
    """Metadata of one class, interface or mixin in the database."""

    class_name: str = Field(alias="className", description="Fully qualified dotted name, unique key.")
    type: ClassType = Field(default="class", description="Declaration kind; mixins are emitted as classes.")
    abstract: bool = Field(default=False, description="Whether the class is abstract.")
    is_singleton: bool = Field(default=False, alias="isSingleton", description="Whether getInstance() exists.")
    super_class: str | list[str] | None = Field(
        default=None,
        alias="superClass",
        description="Superclass name for classes, ordered list of extended interfaces for interfaces.",
    )
    interfaces: list[str] = Field(default_factory=list, description="Implemented interfaces, in order.")
    mixins: list[str] = Field(default_factory=list, description="Included mixins, in order.")
    construct_: MemberMeta | None = Field(default=None, alias="construct", description="Constructor signature, if any.")
    statics: dict[str, MemberMeta] = Field(default_factory=dict, description="Static members by name.")
    members: dict[str, MemberMeta] = Field(default_factory=dict, description="Instance members by name.")
    properties: dict[str, PropertyMeta] = Field(default_factory=dict, description="Properties by name.")
    events: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Events by name (not emitted).")
    class_filename: str = Field(
        default="",
        alias="classFilename",
        description="Source file path relative to the database root.",
    )

    @field_validator("interfaces", "mixins", mode="before")
    @classmethod
    def _names(cls, value: Any) -> list[str]:
        return _normalise_names(value)

    @property
    def package_name(self) -> str:
        """Dotted namespace of the class, empty for top-level classes."""
        return self.class_name.rpartition(".")[0]

    @property
    def short_name(self) -> str:
        return self.class_name.rpartition(".")[2]

    def get_member(self, kind: MemberKind, name: str) -> MemberMeta | PropertyMeta | None:
        """Look up a static, member or property by name."""
        return getattr(self, kind).get(name)

    def interface_names(self) -> list[str]:
        """Return every interface this node extends or implements.

        For interfaces the ``superClass`` list holds further interfaces.
        """
        names = list(self.interfaces)
        if self.type == "interface":
            names.extend(_normalise_names(self.super_class))
        return names

    def super_class_name(self) -> str | None:
        """Return the single superclass of a class or mixin."""
        if self.type == "interface" or not isinstance(self.super_class, str):
            return None
        return self.super_class or None
