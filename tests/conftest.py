import pytest

from tsdecl.metadb import MetaDatabase
from tsdecl.types import ClassMeta


@pytest.fixture
def build_db():
    """Return a factory building a database from raw metadata dicts."""

    def _build(*classes: dict, root_dir: str = "") -> MetaDatabase:
        return MetaDatabase([ClassMeta.model_validate(c) for c in classes], root_dir=root_dir)

    return _build
