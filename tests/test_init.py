import marsh
from marsh.core import INT, Box, SeqOf, Shape, visit
from marsh.io import MarshSettings, TreeWriter, from_json, to_json


def test_package_exports() -> None:
    assert marsh.__version__
    assert Shape.NONE.value == "none"
    assert MarshSettings().unknown_fields == "ignore"
    assert callable(to_json) and callable(from_json)


def test_visit_with_public_api() -> None:
    w = TreeWriter()
    assert visit(w, [1, 2], SeqOf(INT)) == [1, 2]
    assert w.result() == [1, 2]
    assert not Box().present
