"""Tests for revert, branch-from-version and merge, plus the end-to-end scenarios."""

import json

import pytest

from tests.conftest import make_snapshot
from wireframe_vc.exceptions import (
    ConcurrentModificationError,
    DuplicateBranchError,
    SourceVersionNotFoundError,
    ValidationError,
    VersionNotFoundError,
)
from wireframe_vc.models import Branch, Version
from wireframe_vc.services import VersionControlService, audit_service
from wireframe_vc.services.audit_service import AuditResource

DOC = "doc1"


def _main_numbers(db, wireframe_id=DOC):
    return [
        v.version_number
        for v in db.query(Version)
        .filter(Version.wireframe_id == wireframe_id, Version.branch_name == "main")
        .order_by(Version.version_number)
    ]


def _current_count(db, branch_name, wireframe_id=DOC):
    return db.query(Version).filter(
        Version.wireframe_id == wireframe_id,
        Version.branch_name == branch_name,
        Version.is_current.is_(True),
    ).count()


class TestScenarios:

    def test_create_two_versions(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        assert (v1.version_number, v1.is_current) == (1, True)

        v2 = service.create_version(DOC, {"title": "B"})
        assert (v2.version_number, v2.is_current) == (2, True)
        db.refresh(v1)
        assert v1.is_current is False

    def test_branch_then_commit_on_branch(self, db):
        service = VersionControlService(db)
        service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})

        first = service.create_branch(v2.id, "experiment", "alice")
        second = service.create_version(DOC, {"title": "C"}, branch_name="experiment")

        assert (first.branch_name, first.version_number) == ("experiment", 1)
        assert first.parent_version_id == v2.id
        assert first.data == {"title": "B"}
        assert first.change_description == "Created branch experiment"
        assert second.version_number == 2
        assert _main_numbers(db) == [1, 2]
        assert service.versions.get_current_version(DOC).id == v2.id

    def test_revert(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})

        v3 = service.revert_to_version(v1.id, "alice")

        assert v3.version_number == 3
        assert v3.data == {"title": "A"}
        assert v3.parent_version_id == v1.id
        assert v3.change_description == "Reverted to previous version"
        assert service.get_version(v1.id).data == {"title": "A"}
        assert service.get_version(v2.id).data == {"title": "B"}

    def test_compare(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})

        result = service.compare_versions(v1.id, v2.id)

        assert [c.model_dump() for c in result.changes] == [
            {"type": "modified", "path": "title", "values": ["A", "B"]},
        ]
        assert "1 changes detected: 1 modifications" in result.summary

    def test_merge_overwrites_main(self, db):
        service = VersionControlService(db)
        service.create_version(DOC, {"title": "A"})
        v2 = service.create_version(DOC, {"title": "B"})
        service.create_branch(v2.id, "experiment", "alice")
        head = service.create_version(DOC, {"title": "C"}, branch_name="experiment")

        merged = service.merge_branch(head.id, "alice")

        assert merged.branch_name == "main"
        assert merged.data == {"title": "C"}
        assert merged.parent_version_id == head.id
        assert merged.version_number == 3
        assert merged.change_description == "Merged branch into main"
        assert service.get_wireframe(DOC).data == {"title": "C"}


class TestRevert:

    def test_missing_target(self, db):
        with pytest.raises(VersionNotFoundError):
            VersionControlService(db).revert_to_version("missing", "alice")

    def test_reverts_on_target_branch(self, db):
        service = VersionControlService(db)
        main = service.create_version(DOC, {"title": "A"})
        side1 = service.create_branch(main.id, "side", "alice")
        service.create_version(DOC, {"title": "S2"}, branch_name="side")

        reverted = service.revert_to_version(side1.id, "alice", description="Back to start")

        assert reverted.branch_name == "side"
        assert reverted.version_number == 3
        assert reverted.change_description == "Back to start"
        assert _main_numbers(db) == [1]

    def test_stale_expected_head(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        service.create_version(DOC, {"title": "B"})

        with pytest.raises(ConcurrentModificationError):
            service.revert_to_version(v1.id, "alice", expected_head_version_id=v1.id)
        assert _main_numbers(db) == [1, 2]

    def test_revert_is_audited(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        v2 = service.revert_to_version(v1.id, "alice")

        entries = audit_service.get_by_resource(db, AuditResource.VERSION, v2.id)
        assert [e.action for e in entries] == ["revert"]
        assert entries[0].user_id == "alice"


class TestCreateBranchFromVersion:

    def test_missing_source(self, db):
        with pytest.raises(SourceVersionNotFoundError) as exc_info:
            VersionControlService(db).create_branch("missing", "feature", "alice")
        assert exc_info.value.error_code.value == "SOURCE_VERSION_NOT_FOUND"

    def test_duplicate_leaves_nothing_behind(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        service.create_branch(v1.id, "feature", "alice")

        with pytest.raises(DuplicateBranchError):
            service.create_branch(v1.id, "feature", "alice")

        assert db.query(Version).filter(Version.branch_name == "feature").count() == 1

    def test_invalid_name_leaves_nothing_behind(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})

        with pytest.raises(ValidationError):
            service.create_branch(v1.id, "no spaces allowed", "alice")

        assert db.query(Branch).filter(Branch.name == "no spaces allowed").count() == 0
        assert db.query(Version).count() == 1

    def test_records_base_version(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        service.create_branch(v1.id, "feature", "alice", description="Explore")

        branch = db.query(Branch).filter(Branch.name == "feature").one()
        assert branch.base_version_id == v1.id
        assert branch.description == "Explore"
        assert branch.created_by == "alice"

    def test_branch_isolation(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        service.create_branch(v1.id, "feature", "alice")
        for i in range(3):
            service.create_version(DOC, {"title": f"F{i}"}, branch_name="feature")
        service.create_version(DOC, {"title": "B"})

        assert _main_numbers(db) == [1, 2]
        assert _current_count(db, "main") == 1
        assert _current_count(db, "feature") == 1


class TestMerge:

    def test_missing_source(self, db):
        with pytest.raises(SourceVersionNotFoundError):
            VersionControlService(db).merge_branch("missing", "alice")

    def test_marks_source_branch_merged(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        head = service.create_branch(v1.id, "feature", "alice")
        service.merge_branch(head.id, "alice")

        branch = db.query(Branch).filter(Branch.name == "feature").one()
        assert branch.merged_into == "main"
        assert branch.merged_at is not None

    def test_merge_into_other_target(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        service.create_branch(v1.id, "release", "alice")
        service.create_branch(v1.id, "feature", "alice")
        tip = service.create_version(DOC, {"title": "New"}, branch_name="feature")

        merged = service.merge_branch(tip.id, "alice", target_branch="release")

        assert merged.branch_name == "release"
        assert merged.version_number == 2
        assert merged.data == {"title": "New"}
        assert _main_numbers(db) == [1]

    def test_stale_expected_head_writes_nothing(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        head = service.create_branch(v1.id, "feature", "alice")
        service.create_version(DOC, {"title": "B"})

        with pytest.raises(ConcurrentModificationError):
            service.merge_branch(head.id, "alice", expected_head_version_id=v1.id)

        assert _main_numbers(db) == [1, 2]
        assert db.query(Branch).filter(Branch.name == "feature").one().merged_into is None

    def test_merge_is_audited(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"})
        head = service.create_branch(v1.id, "feature", "alice")
        merged = service.merge_branch(head.id, "bob")

        entries = audit_service.get_by_resource(db, AuditResource.VERSION, merged.id)
        assert [e.action for e in entries] == ["merge"]
        assert entries[0].user_id == "bob"


class TestSingleHead:

    def test_one_current_per_branch_after_mixed_operations(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, make_snapshot(title="A"))
        v2 = service.create_version(DOC, make_snapshot(title="B"))
        feature = service.create_branch(v1.id, "feature", "alice")
        service.create_version(DOC, make_snapshot(title="F"), branch_name="feature")
        service.revert_to_version(feature.id, "alice")
        service.merge_branch(feature.id, "alice")
        service.revert_to_version(v2.id, "alice")
        service.delete_version(v2.id, "alice")

        assert _current_count(db, "main") == 1
        assert _current_count(db, "feature") == 1


class TestAuditTrail:

    def test_wireframe_trail_lists_every_write_newest_first(self, db):
        service = VersionControlService(db)
        v1 = service.create_version(DOC, {"title": "A"}, created_by="alice")
        head = service.create_branch(v1.id, "feature", "alice")
        service.merge_branch(head.id, "bob")
        service.create_version("other-doc", {"title": "Elsewhere"}, created_by="carol")

        entries = audit_service.get_by_wireframe(db, DOC)
        assert [e.action for e in entries] == ["merge", "create_branch", "create_version"]
        assert {e.wireframe_id for e in entries} == {DOC}
        assert json.loads(entries[0].details)["branch_name"] == "main"
