"""Tests for history queries: version lists, lineage and comparison."""

import pytest

from tests.conftest import make_snapshot
from wireframe_vc.exceptions import VersionNotFoundError, WireframeNotFoundError
from wireframe_vc.services import VersionControlService
from wireframe_vc.services.history_service import HistoryService

DOC = "doc1"


class TestVersionHistory:

    def test_newest_first_with_current_and_branches(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})
        b1 = service.create_branch(v1.id, "feature", "alice")

        history = HistoryService(db).get_version_history(DOC)

        assert [v.id for v in history.versions] == [b1.id, v2.id, v1.id]
        assert history.current.id == v2.id
        assert history.branches == ["main", "feature"]

    def test_unknown_wireframe_is_empty(self, db):
        history = HistoryService(db).get_version_history("nope")
        assert history.versions == []
        assert history.current is None
        assert history.branches == []

    def test_deleted_branch_drops_from_names_but_versions_remain(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        side = service.create_branch(v1.id, "side", "alice")
        branch_id = [b for b in service.get_branches(DOC) if b.name == "side"][0].id
        service.delete_branch(branch_id, "alice")

        history = HistoryService(db).get_version_history(DOC)
        assert history.branches == ["main"]
        assert side.id in [v.id for v in history.versions]


class TestLineage:

    def test_walks_parents_nearest_first(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"}, parent_version_id=v1.id)
        b1 = service.create_branch(v2.id, "feature", "alice")
        merged = service.merge_branch(b1.id, "alice")

        lineage = HistoryService(db).get_lineage(merged.id)
        assert [v.id for v in lineage] == [b1.id, v2.id, v1.id]

    def test_root_has_no_ancestors(self, db):
        v1 = VersionControlService(db).create_version(DOC, {"title": "A"})
        assert HistoryService(db).get_lineage(v1.id) == []

    def test_stops_at_deleted_parent(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"}, parent_version_id=v1.id)
        v3 = service.create_version(DOC, {"title": "C"}, parent_version_id=v2.id)
        service.delete_version(v2.id, "alice")

        assert HistoryService(db).get_lineage(v3.id) == []

    def test_missing_version(self, db):
        with pytest.raises(VersionNotFoundError):
            HistoryService(db).get_lineage("missing")


class TestCompareVersions:

    def test_identical_versions(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, make_snapshot())
        v2 = service.revert_to_version(v1.id, "alice")

        result = HistoryService(db).compare_versions(v1.id, v2.id)
        assert result.changes == []
        assert result.summary == "No changes detected."

    def test_section_changes(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, make_snapshot(sections=1))
        v2 = service.create_version(DOC, make_snapshot(sections=2))

        result = HistoryService(db).compare_versions(v1.id, v2.id)
        assert [(c.type, c.path) for c in result.changes] == [("added", "sections[1]")]
        assert result.from_version_id == v1.id
        assert result.to_version_id == v2.id

    def test_either_missing_raises(self, db):
        v1 = VersionControlService(db).create_version(DOC, {"title": "A"})
        with pytest.raises(VersionNotFoundError):
            HistoryService(db).compare_versions(v1.id, "missing")
        with pytest.raises(VersionNotFoundError):
            HistoryService(db).compare_versions("missing", v1.id)


class TestGetWireframe:

    def test_returns_latest_main_snapshot(self, db):
        service = VersionControlService(db)
        service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})

        wireframe = HistoryService(db).get_wireframe(DOC)
        assert wireframe.latest_version_id == v2.id
        assert wireframe.title == "B"

    def test_missing(self, db):
        with pytest.raises(WireframeNotFoundError):
            HistoryService(db).get_wireframe("nope")
