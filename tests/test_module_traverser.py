"""Tests for breadth-first module traversal."""

from datetime import datetime, timezone

import pytest

from module_export.extraction.data_models import LinkDirection
from module_export.extraction.hierarchy_walker import iter_preorder
from module_export.traversal.export_options import ExportOptions
from module_export.traversal.module_traverser import ModuleTraverser
from tests.fakes import FailingAccessor, InMemoryAccessor, link, make_object


def _paths(result):
    return [(m.path, m.depth) for m in result.document.modules]


def _chain(*paths):
    """Each module has one object linking to the next module in the chain."""
    modules = {}
    for current, following in zip(paths, paths[1:] + (None,)):
        out = [link("satisfies", (following, "1"))] if following else []
        modules[current] = [make_object("1", out_links=out)]
    return modules


def _root_with_link_to_x():
    return {
        "/Root": [
            make_object("A", out_links=[link("satisfies", ("/X", "10"))]),
            make_object("B"),
        ],
        "/X": [make_object("10", in_links=[link("satisfies", ("/Root", "A"))])],
    }


def test_root_and_linked_module_are_exported() -> None:
    result = ModuleTraverser(InMemoryAccessor(_root_with_link_to_x())).run("/Root", 2)

    assert _paths(result) == [("/Root", 0), ("/X", 1)]
    item_a = result.document.modules[0].objects[0]
    assert len(item_a.links) == 1
    assert item_a.links[0].direction == LinkDirection.OUTGOING
    assert item_a.links[0].peer_module == "/X"


def test_link_beyond_depth_bound_is_kept_as_reference() -> None:
    result = ModuleTraverser(InMemoryAccessor(_root_with_link_to_x())).run("/Root", 0)

    assert _paths(result) == [("/Root", 0)]
    item_a = result.document.modules[0].objects[0]
    assert item_a.links[0].peer_module == "/X"


def test_one_hop_bound_exports_first_neighbours_only() -> None:
    accessor = InMemoryAccessor(_chain("/Root", "/X", "/Y"))
    result = ModuleTraverser(accessor).run("/Root", 1)

    assert _paths(result) == [("/Root", 0), ("/X", 1)]
    assert result.document.modules[1].objects[0].links[0].peer_module == "/Y"
    assert "/Y" not in accessor.opened_paths


@pytest.mark.parametrize("max_depth", [0, 1, 2, 3, 4, 6])
def test_depth_bound(max_depth) -> None:
    chain = ("/M0", "/M1", "/M2", "/M3", "/M4", "/M5")
    result = ModuleTraverser(InMemoryAccessor(_chain(*chain))).run("/M0", max_depth)

    expected = [(path, depth) for depth, path in enumerate(chain) if depth <= max_depth]
    assert _paths(result) == expected


def test_breadth_first_order_and_no_duplicates() -> None:
    modules = {
        "/Root": [
            make_object("1", out_links=[link("t", ("/B", "1"), ("/C", "1"))]),
            make_object("2", 2, out_links=[link("t", ("/B", "2"))]),
            make_object("3", in_links=[link("t", ("/D", "1"))]),
        ],
        "/B": [make_object("1", out_links=[link("t", ("/C", "1"), ("/E", "1"))])],
        "/C": [make_object("1", out_links=[link("t", ("/B", "1"), ("/E", "1"))])],
        "/D": [make_object("1")],
        "/E": [make_object("1", out_links=[link("t", ("/Root", "1"))])],
    }
    accessor = InMemoryAccessor(modules)
    result = ModuleTraverser(accessor).run("/Root", 5)

    assert _paths(result) == [("/Root", 0), ("/B", 1), ("/C", 1), ("/D", 1), ("/E", 2)]
    assert accessor.opened_paths == ["/Root", "/B", "/C", "/D", "/E"]


def test_cycle_terminates() -> None:
    modules = {
        "/A": [make_object("1", out_links=[link("t", ("/B", "1"))])],
        "/B": [make_object("1", out_links=[link("t", ("/A", "1"))])],
    }
    result = ModuleTraverser(InMemoryAccessor(modules)).run("/A", 10)
    assert _paths(result) == [("/A", 0), ("/B", 1)]


def test_incoming_links_discover_modules_too() -> None:
    modules = {
        "/Root": [make_object("1", in_links=[link("t", ("/Src", "5"))])],
        "/Src": [make_object("5")],
    }
    result = ModuleTraverser(InMemoryAccessor(modules)).run("/Root", 1)
    assert _paths(result) == [("/Root", 0), ("/Src", 1)]


def test_unopenable_modules_are_skipped() -> None:
    modules = {
        "/Root": [make_object("1", out_links=[link("t", ("/Locked", "1"), ("/Missing", "1"), ("/Ok", "1"))])],
        "/Locked": [make_object("1")],
        "/Ok": [make_object("1")],
    }
    accessor = InMemoryAccessor(modules, locked=["/Locked"])
    result = ModuleTraverser(accessor).run("/Root", 1)

    assert _paths(result) == [("/Root", 0), ("/Ok", 1)]
    assert [(s.path, s.depth) for s in result.report.skipped_modules] == [("/Locked", 1), ("/Missing", 1)]
    assert accessor.open_handles == []


def test_missing_root_gives_empty_export() -> None:
    result = ModuleTraverser(InMemoryAccessor({})).run("/Nowhere", 2)
    assert result.document.modules == []
    assert result.document.root_module == "/Nowhere"
    assert result.report.skipped_modules[0].path == "/Nowhere"


def test_one_module_open_at_a_time_and_always_closed() -> None:
    accessor = InMemoryAccessor(_chain("/A", "/B", "/C"))
    ModuleTraverser(accessor).run("/A", 5)

    assert accessor.max_open == 1
    assert accessor.closed_paths == accessor.opened_paths == ["/A", "/B", "/C"]


def test_module_is_closed_when_reading_fails() -> None:
    accessor = FailingAccessor(_chain("/A", "/B"), failing=["/B"])
    with pytest.raises(RuntimeError):
        ModuleTraverser(accessor).run("/A", 5)
    assert accessor.open_handles == []
    assert accessor.closed_paths == ["/A", "/B"]


def test_cancellation_keeps_finished_modules() -> None:
    accessor = InMemoryAccessor(_chain("/A", "/B", "/C"))
    calls = []

    def should_stop():
        calls.append(1)
        return len(calls) > 2

    result = ModuleTraverser(accessor).run("/A", 5, should_stop=should_stop)

    assert _paths(result) == [("/A", 0), ("/B", 1)]
    assert result.report.cancelled is True
    assert accessor.open_handles == []


def test_repeated_runs_share_no_state() -> None:
    traverser = ModuleTraverser(InMemoryAccessor(_root_with_link_to_x()))
    first = traverser.run("/Root", 2)
    second = traverser.run("/Root", 2)
    assert _paths(first) == _paths(second) == [("/Root", 0), ("/X", 1)]


def test_report_counts_and_link_warnings() -> None:
    modules = {
        "/Root": [
            make_object("1", out_links=[link("t", ("/X", "1"), (None, "2"))]),
            make_object("2", 2),
        ],
        "/X": [make_object("1")],
    }
    result = ModuleTraverser(InMemoryAccessor(modules)).run("/Root", 1)

    assert result.report.module_count == 2
    assert result.report.object_count == 3
    assert result.report.link_count == 1
    assert len(result.report.link_warnings) == 1


def test_options_flow_into_extractors() -> None:
    modules = {
        "/Root": [make_object(
            "1",
            attributes=[("Created By", "string", "bob"), ("Text", "text", "t")],
            out_links=[link("comment", ("/C", "1")), link("satisfies", ("/S", "1"))],
        )],
        "/C": [make_object("1")],
        "/S": [make_object("1")],
    }
    options = ExportOptions(max_depth=1, exclude_attributes=["Created By"], include_link_types=["satisfies"])
    result = ModuleTraverser(InMemoryAccessor(modules), options).run("/Root")

    assert _paths(result) == [("/Root", 0), ("/S", 1)]
    assert result.document.max_depth == 1
    obj = result.document.modules[0].objects[0]
    assert obj.attributes == {"Text": "t"}


def test_module_name_and_timestamp() -> None:
    accessor = InMemoryAccessor({"/P/Reqs": [make_object("1")]}, names={"/P/Reqs": "System Requirements"})
    stamp = datetime(2024, 1, 2, tzinfo=timezone.utc)
    result = ModuleTraverser(accessor).run("/P/Reqs", 0, generated_at=stamp)

    assert result.document.modules[0].name == "System Requirements"
    assert result.document.generated_at == stamp


@pytest.mark.parametrize("bad", [-1, 1.5, True, "2"])
def test_invalid_max_depth(bad) -> None:
    with pytest.raises(ValueError):
        ModuleTraverser(InMemoryAccessor({})).run("/Root", bad)


def test_nested_links_discover_peers() -> None:
    modules = {
        "/Root": [
            make_object("1"),
            make_object("2", 2),
            make_object("3", 3, out_links=[link("t", ("/Deep", "1"))]),
        ],
        "/Deep": [make_object("1")],
    }
    result = ModuleTraverser(InMemoryAccessor(modules)).run("/Root", 1)

    assert _paths(result) == [("/Root", 0), ("/Deep", 1)]
    assert [o.identifier for o in iter_preorder(result.document.modules[0].objects)] == ["1", "2", "3"]


def test_unconvertible_attribute_does_not_abort_export() -> None:
    modules = {"/R": [make_object("1", attributes=[("Big", "real", 10 ** 400), ("Text", "text", "kept")])]}
    result = ModuleTraverser(InMemoryAccessor(modules)).run("/R", 0)

    assert _paths(result) == [("/R", 0)]
    assert result.document.modules[0].objects[0].attributes == {"Text": "kept"}
