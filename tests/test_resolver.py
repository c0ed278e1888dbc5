"""Tests for member resolution across interfaces, mixins and superclasses."""

import pytest

from tsdecl.resolver import is_substantial, resolve_member
from tsdecl.types import MemberMeta, Param, PropertyMeta

UNTYPED = {"params": [{"name": "value"}]}


def typed(return_type: str) -> dict:
    return {"params": [{"name": "value", "type": "String"}], "returnType": return_type}


def test_is_substantial():
    assert is_substantial(MemberMeta(return_type="String"))
    assert is_substantial(MemberMeta(params=[Param(name="a", type="String")]))
    # an empty parameter list is fully typed
    assert is_substantial(MemberMeta(params=[]))
    assert not is_substantial(MemberMeta())
    assert not is_substantial(MemberMeta(params=[Param(name="a", type="String"), Param(name="b")]))
    assert is_substantial(PropertyMeta(check="Boolean"))
    assert not is_substantial(PropertyMeta())


def test_own_substantial_definition_wins(build_db):
    db = build_db(
        {"className": "a.Base", "members": {"foo": typed("Number")}},
        {"className": "a.Sub", "superClass": "a.Base", "members": {"foo": typed("String")}},
    )
    sub = db.get_meta_data("a.Sub")
    definition, is_override = resolve_member("foo", "members", sub, db)
    assert definition is sub.members["foo"]
    assert is_override is False


def test_union_typed_parameter_keeps_own_definition(build_db):
    db = build_db(
        {"className": "a.Base", "members": {"f": {"params": [{"name": "a", "type": "Boolean"}]}}},
        {
            "className": "a.Sub",
            "superClass": "a.Base",
            "members": {"f": {"params": [{"name": "a", "type": ["String", "Number"]}]}},
        },
    )
    sub = db.get_meta_data("a.Sub")
    definition, is_override = resolve_member("f", "members", sub, db)
    assert definition is sub.members["f"]
    assert is_override is False



def test_interface_definition_is_not_an_override(build_db):
    db = build_db(
        {"className": "a.IFoo", "type": "interface", "members": {"foo": typed("Boolean")}},
        {"className": "a.Impl", "interfaces": ["a.IFoo"], "members": {"foo": UNTYPED}},
    )
    definition, is_override = resolve_member("foo", "members", db.get_meta_data("a.Impl"), db)
    assert definition.return_type == "Boolean"
    assert is_override is False


def test_mixin_definition_is_an_override(build_db):
    db = build_db(
        {"className": "a.MFoo", "type": "mixin", "members": {"foo": typed("Boolean")}},
        {"className": "a.Impl", "mixins": ["a.MFoo"], "members": {"foo": UNTYPED}},
    )
    definition, is_override = resolve_member("foo", "members", db.get_meta_data("a.Impl"), db)
    assert definition.return_type == "Boolean"
    assert is_override is True


def test_superclass_definition_is_an_override(build_db):
    db = build_db(
        {"className": "a.Base", "statics": {"create": typed("a.Base")}},
        {"className": "a.Sub", "superClass": "a.Base", "statics": {"create": UNTYPED}},
    )
    definition, is_override = resolve_member("create", "statics", db.get_meta_data("a.Sub"), db)
    assert definition.return_type == "a.Base"
    assert is_override is True


def test_interfaces_before_mixins_before_superclass(build_db):
    db = build_db(
        {"className": "a.IFoo", "type": "interface", "members": {"foo": typed("FromInterface")}},
        {"className": "a.MFoo", "type": "mixin", "members": {"foo": typed("FromMixin")}},
        {"className": "a.Base", "members": {"foo": typed("FromBase")}},
        {
            "className": "a.Sub",
            "superClass": "a.Base",
            "interfaces": ["a.IFoo"],
            "mixins": ["a.MFoo"],
            "members": {"foo": UNTYPED},
        },
        {"className": "a.Sub2", "superClass": "a.Base", "mixins": ["a.MFoo"], "members": {"foo": UNTYPED}},
    )
    assert resolve_member("foo", "members", db.get_meta_data("a.Sub"), db).definition.return_type == "FromInterface"
    assert resolve_member("foo", "members", db.get_meta_data("a.Sub2"), db).definition.return_type == "FromMixin"


def test_declaration_order_decides_between_siblings(build_db):
    db = build_db(
        {"className": "a.MOne", "type": "mixin", "members": {"foo": typed("One")}},
        {"className": "a.MTwo", "type": "mixin", "members": {"foo": typed("Two")}},
        {"className": "a.C", "mixins": ["a.MTwo", "a.MOne"], "members": {"foo": UNTYPED}},
    )
    assert resolve_member("foo", "members", db.get_meta_data("a.C"), db).definition.return_type == "Two"


def test_nested_relations_are_searched_depth_first(build_db):
    db = build_db(
        {"className": "a.IRoot", "type": "interface", "members": {"foo": typed("Root")}},
        {"className": "a.IChild", "type": "interface", "superClass": ["a.IRoot"], "members": {"foo": UNTYPED}},
        {"className": "a.MInner", "type": "mixin", "members": {"bar": typed("Inner")}},
        {"className": "a.MOuter", "type": "mixin", "mixins": ["a.MInner"], "members": {"bar": UNTYPED}},
        {
            "className": "a.C",
            "interfaces": ["a.IChild"],
            "mixins": ["a.MOuter"],
            "members": {"foo": UNTYPED, "bar": UNTYPED},
        },
    )
    c = db.get_meta_data("a.C")
    assert resolve_member("foo", "members", c, db) == (db.get_meta_data("a.IRoot").members["foo"], False)
    assert resolve_member("bar", "members", c, db) == (db.get_meta_data("a.MInner").members["bar"], True)


def test_interface_reached_through_superclass_is_an_override(build_db):
    db = build_db(
        {"className": "a.IFoo", "type": "interface", "members": {"foo": typed("Boolean")}},
        {"className": "a.Base", "interfaces": ["a.IFoo"], "members": {"foo": UNTYPED}},
        {"className": "a.Sub", "superClass": "a.Base", "members": {"foo": UNTYPED}},
    )
    definition, is_override = resolve_member("foo", "members", db.get_meta_data("a.Sub"), db)
    assert definition.return_type == "Boolean"
    assert is_override is True


def test_unknown_superclass_falls_back_to_own_definition(build_db):
    db = build_db({"className": "a.C", "superClass": "external.Thing", "members": {"foo": UNTYPED}})
    c = db.get_meta_data("a.C")
    definition, is_override = resolve_member("foo", "members", c, db)
    assert definition is c.members["foo"]
    assert is_override is False


def test_cyclic_mixins_terminate(build_db):
    db = build_db(
        {"className": "a.MA", "type": "mixin", "mixins": ["a.MB"], "members": {"foo": UNTYPED}},
        {"className": "a.MB", "type": "mixin", "mixins": ["a.MA"], "members": {"foo": UNTYPED}},
        {"className": "a.C", "mixins": ["a.MA"], "members": {"foo": UNTYPED}},
    )
    c = db.get_meta_data("a.C")
    assert resolve_member("foo", "members", c, db) == (c.members["foo"], False)


def test_refined_property_takes_type_from_superclass(build_db):
    db = build_db(
        {"className": "a.Base", "properties": {"enabled": {"check": "Boolean"}}},
        {"className": "a.Sub", "superClass": "a.Base", "properties": {"enabled": {"refine": True}}},
    )
    definition, is_override = resolve_member("enabled", "properties", db.get_meta_data("a.Sub"), db)
    assert definition.check == "Boolean"
    assert is_override is True


def test_missing_member_raises(build_db):
    db = build_db({"className": "a.C"})
    with pytest.raises(KeyError):
        resolve_member("nope", "members", db.get_meta_data("a.C"), db)
