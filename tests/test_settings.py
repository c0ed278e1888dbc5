import json

from tsdecl.settings import GeneratorSettings, load_settings


def test_defaults():
    settings = GeneratorSettings()
    assert settings.output_to == "qooxdoo.d.ts"
    assert settings.base_declaration is None
    assert settings.global_qualifier == "globalThis"
    assert settings.ignored_superclasses == {"Object", "Array", "Error"}
    assert settings.type_mappings["Map"] == "Record<string, any>"
    assert settings.ignore["qx.util.LibraryManager"] == ["get", "set"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TSDECL_OUTPUT_TO", "build/lib.d.ts")
    assert GeneratorSettings().output_to == "build/lib.d.ts"


def test_load_settings_merges_file_and_overrides(tmp_path):
    config = tmp_path / "tsdecl.json"
    config.write_text(
        json.dumps({"output_to": "from-file.d.ts", "ignore": {"qx.a.One": ["init"]}, "indent": "  "}),
        encoding="utf-8",
    )

    settings = load_settings(str(config), output_to="explicit.d.ts", base_declaration=None)

    assert settings.output_to == "explicit.d.ts"
    assert settings.ignore == {"qx.a.One": ["init"]}
    assert settings.indent == "  "
    assert settings.base_declaration is None
