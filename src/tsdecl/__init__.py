"""tsdecl — Generate TypeScript declarations from class metadata databases."""

# Metadata
from tsdecl.metadb import HierarchyFlat, MetaDatabase, MetaDataError
from tsdecl.types import ClassMeta, MemberMeta, Param, PropertyMeta

# Generation
from tsdecl.codegen import DeclarationWriter, generate_declarations
from tsdecl.resolver import Resolution, resolve_member
from tsdecl.settings import GeneratorSettings, load_settings
from tsdecl.typemap import TypeMapper

__all__ = [
    # Types
    "ClassMeta",
    "MemberMeta",
    "Param",
    "PropertyMeta",
    # Metadata
    "HierarchyFlat",
    "MetaDatabase",
    "MetaDataError",
    # Generation
    "DeclarationWriter",
    "GeneratorSettings",
    "Resolution",
    "TypeMapper",
    "generate_declarations",
    "load_settings",
    "resolve_member",
]
