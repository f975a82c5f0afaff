from dataclasses import dataclass, field

from dms.services.document_permissions import (
    DocumentView,
    can_archive_document,
    can_cancel_document,
    can_complete_document,
    can_delete_document,
    can_edit_document,
    can_release_document,
    can_view_documents,
    get_allowed_actions,
    has_all_permissions,
    has_any_role,
    has_permission,
    is_in_transit,
    is_owned_by_user_department,
)


@dataclass
class FakeUser:
    permissions: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)
    department_id: str | None = "dept-a"


EDITOR = FakeUser(
    permissions=["document_read", "document_edit", "document_transfer_initiate",
                 "document_transfer_receive", "document_archive", "document_delete"],
    roles=["USER"],
)


class TestBasicChecks:
    def test_missing_user_is_always_false(self):
        assert has_permission(None, "document_read") is False
        assert has_any_role(None, ["admin"]) is False
        assert can_view_documents(None) is False
        assert get_allowed_actions(None, DocumentView()) == []

    def test_role_codes_compare_case_insensitively(self):
        assert has_any_role(FakeUser(roles=["ADMIN"]), ["admin"])
        assert has_any_role(FakeUser(roles=["Viewer"]), ["viewer"])

    def test_has_all_permissions(self):
        user = FakeUser(permissions=["a", "b"])
        assert has_all_permissions(user, ["a", "b"])
        assert not has_all_permissions(user, ["a", "c"])


class TestOwnership:
    def test_explicit_flag_wins(self):
        doc = DocumentView(department_id="dept-b", is_owned=True)
        assert is_owned_by_user_department(doc, EDITOR)

    def test_department_comparison(self):
        assert is_owned_by_user_department(DocumentView(department_id="dept-a"), EDITOR)
        assert not is_owned_by_user_department(DocumentView(department_id="dept-b"), EDITOR)

    def test_document_without_department_counts_as_owned(self):
        assert is_owned_by_user_department(DocumentView(), EDITOR)

    def test_in_transit_statuses(self):
        assert is_in_transit(DocumentView(status="intransit"))
        assert is_in_transit(DocumentView(status="Dispatch"))
        assert not is_in_transit(DocumentView(status="completed"))


class TestActionChecks:
    def test_view_only_role_can_view_without_permission(self):
        viewer = FakeUser(roles=["view_only"])
        assert can_view_documents(viewer)
        assert not can_edit_document(viewer, DocumentView(department_id="dept-a"))

    def test_release_requires_foreign_document(self):
        assert not can_release_document(EDITOR, DocumentView(department_id="dept-a"))
        assert can_release_document(EDITOR, DocumentView(department_id="dept-b"))

    def test_complete_needs_receive_permission(self):
        assert can_complete_document(EDITOR, DocumentView())
        assert not can_complete_document(FakeUser(permissions=["document_read"]), DocumentView())

    def test_cancel_only_in_transit(self):
        user = FakeUser(permissions=["document_transfer_reject"])
        assert can_cancel_document(user, DocumentView(status="intransit"))
        assert not can_cancel_document(user, DocumentView(status="received"))

    def test_archive_and_delete_need_ownership(self):
        foreign = DocumentView(department_id="dept-b")
        assert not can_archive_document(EDITOR, foreign)
        assert not can_delete_document(EDITOR, foreign)
        assert can_archive_document(EDITOR, DocumentView(department_id="dept-a"))


class TestAllowedActions:
    def test_owned_document_actions_in_order(self):
        actions = get_allowed_actions(EDITOR, DocumentView(status="dispatch", department_id="dept-a"))
        assert actions == [
            "copy_code", "view_details", "view_document", "edit_details", "edit_document",
            "sign_document", "complete", "cancel", "archive", "delete",
        ]

    def test_received_document_can_be_released(self):
        actions = get_allowed_actions(EDITOR, DocumentView(status="received", department_id="dept-b"))
        assert actions == ["copy_code", "view_details", "view_document", "release", "complete"]

    def test_viewer_only_gets_read_actions(self):
        viewer = FakeUser(permissions=["document_read"], roles=["VIEW_ONLY"])
        actions = get_allowed_actions(viewer, DocumentView(status="dispatch", department_id="dept-a"))
        assert actions == ["copy_code", "view_details", "view_document"]
