import re

from conftest import create_document


class TestCreateDocument:
    def test_create_without_file(self, client, make_user, records_dept):
        user_id, headers = make_user()
        doc = create_document(client, headers, description="Quarterly numbers", classification="Internal")
        assert re.fullmatch(r"DOC-\d+-[0-9A-F]{8}", doc["document_code"])
        assert doc["status"] == "dispatch"
        assert doc["created_by"] == user_id
        assert doc["department_id"] == records_dept
        assert doc["work_flow"] == {"first": records_dept}
        assert doc["work_flow_status"]["created"]["status"] == "dispatch"
        assert doc["files"] == []

    def test_create_with_file_marks_primary(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers, file_content=b"%PDF budget")
        assert len(doc["files"]) == 1
        assert doc["files"][0]["is_primary"] is True
        assert len(doc["files"][0]["file_hash"]) == 64

    def test_create_writes_trail_and_notification(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        trails = client.get(f"/api/documents/{doc['id']}/trails", headers=headers).json()
        assert [t["status"] for t in trails] == ["created"]
        notes = client.get("/api/notifications", headers=headers).json()
        assert notes[0]["workflow_event"] == "document_created"

    def test_blank_title_rejected(self, client, make_user):
        _, headers = make_user()
        r = client.post("/api/documents", data={"title": "   "}, headers=headers)
        assert r.status_code == 400

    def test_viewer_cannot_create(self, client, make_user):
        _, headers = make_user(role="VIEW_ONLY")
        r = client.post("/api/documents", data={"title": "Nope"}, headers=headers)
        assert r.status_code == 403


class TestListAndAccess:
    def test_scope_owned_and_all(self, client, make_user):
        _, alice = make_user()
        _, bob = make_user()
        create_document(client, alice, title="Alice doc")
        create_document(client, bob, title="Bob doc")

        owned = client.get("/api/documents?scope=owned", headers=alice).json()
        assert [d["title"] for d in owned["data"]] == ["Alice doc"]

        # same department, so both are visible
        everything = client.get("/api/documents?scope=all", headers=alice).json()
        assert everything["pagination"]["total"] == 2

    def test_other_department_cannot_read(self, client, make_user, finance_dept):
        _, alice = make_user()
        _, outsider = make_user(department_id=finance_dept)
        doc = create_document(client, alice)

        r = client.get(f"/api/documents/{doc['id']}", headers=outsider)
        assert r.status_code == 403
        listing = client.get("/api/documents", headers=outsider).json()
        assert listing["pagination"]["total"] == 0

    def test_unknown_document(self, client, admin):
        r = client.get("/api/documents/missing", headers=admin)
        assert r.status_code == 404
        assert r.json()["error"]["code"] == "not_found"

    def test_invalid_scope(self, client, admin):
        r = client.get("/api/documents?scope=mine", headers=admin)
        assert r.status_code == 422

    def test_sorting_by_title(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers, title="Zebra")
        create_document(client, headers, title="Apple")
        data = client.get("/api/documents?sort_by=title&sort_order=asc", headers=headers).json()
        assert [d["title"] for d in data["data"]] == ["Apple", "Zebra"]


class TestUpdateAndDelete:
    def test_update_fields(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        r = client.put(f"/api/documents/{doc['id']}", json={"title": "Revised", "origin": "External"},
                       headers=headers)
        assert r.status_code == 200
        assert r.json()["title"] == "Revised"
        assert r.json()["origin"] == "External"

    def test_update_refused_while_checked_out_by_other(self, client, make_user):
        _, alice = make_user(first_name="Alice")
        _, bob = make_user()
        doc = create_document(client, alice)
        client.post(f"/api/documents/{doc['id']}/checkout", headers=alice)

        r = client.put(f"/api/documents/{doc['id']}", json={"title": "Hijack"}, headers=bob)
        assert r.status_code == 409
        assert "checked out by Alice" in r.json()["error"]["message"]

    def test_soft_delete_moves_to_recycle_bin(self, client, admin):
        doc = create_document(client, admin)
        r = client.delete(f"/api/documents/{doc['id']}", headers=admin)
        assert r.status_code == 200
        assert r.json()["status"] == "deleted"
        assert r.json()["deleted_at"] is not None

        listing = client.get("/api/documents", headers=admin).json()
        assert listing["pagination"]["total"] == 0
        assert client.delete(f"/api/documents/{doc['id']}", headers=admin).status_code == 409

    def test_bulk_delete_reports_failures(self, client, admin):
        doc = create_document(client, admin)
        r = client.post("/api/documents/bulk-delete", json={"document_ids": [doc["id"], "missing"]},
                        headers=admin)
        assert r.status_code == 200
        data = r.json()
        assert data["processed"] == [doc["id"]]
        assert data["failed"][0]["id"] == "missing"

    def test_user_without_delete_permission(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        assert client.delete(f"/api/documents/{doc['id']}", headers=headers).status_code == 403


class TestFiles:
    def _upload(self, client, headers, doc_id, content, name="scan.pdf"):
        return client.post(
            f"/api/documents/{doc_id}/files",
            files={"file": (name, content, "application/pdf")},
            headers=headers,
        )

    def test_upload_and_list(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        assert self._upload(client, headers, doc["id"], b"page one").status_code == 201
        assert self._upload(client, headers, doc["id"], b"page two", "second.pdf").status_code == 201

        files = client.get(f"/api/documents/{doc['id']}/files", headers=headers).json()
        assert len(files) == 2
        assert [f["is_primary"] for f in files] == [True, False]

    def test_duplicate_content_conflicts(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        self._upload(client, headers, doc["id"], b"same")
        assert self._upload(client, headers, doc["id"], b"same", "copy.pdf").status_code == 409

    def test_empty_file_rejected(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        assert self._upload(client, headers, doc["id"], b"").status_code == 400

    def test_oversized_file_rejected(self, client, make_user, monkeypatch):
        from dms.config import settings
        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        _, headers = make_user()
        doc = create_document(client, headers)
        assert self._upload(client, headers, doc["id"], b"x" * 11).status_code == 413

    def test_stored_file_is_read_only(self, client, make_user, tmp_data):
        _, headers = make_user()
        doc = create_document(client, headers)
        self._upload(client, headers, doc["id"], b"immutable")
        stored = list((tmp_data / "files" / doc["id"]).iterdir())
        assert len(stored) == 1
        assert stored[0].stat().st_mode & 0o777 == 0o444

    def test_download_and_verify(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        file_id = self._upload(client, headers, doc["id"], b"original bytes").json()["id"]

        r = client.get(f"/api/documents/{doc['id']}/files/{file_id}/download", headers=headers)
        assert r.status_code == 200
        assert r.content == b"original bytes"

        r = client.get(f"/api/documents/{doc['id']}/files/{file_id}/verify", headers=headers)
        assert r.json()["verified"] is True

    def test_delete_primary_moves_flag(self, client, make_user, tmp_data):
        _, headers = make_user()
        doc = create_document(client, headers)
        first = self._upload(client, headers, doc["id"], b"one").json()
        self._upload(client, headers, doc["id"], b"two", "two.pdf")

        r = client.delete(f"/api/documents/{doc['id']}/files/{first['id']}", headers=headers)
        assert r.status_code == 204
        files = client.get(f"/api/documents/{doc['id']}/files", headers=headers).json()
        assert len(files) == 1
        assert files[0]["is_primary"] is True
        assert len(list((tmp_data / "files" / doc["id"]).iterdir())) == 1

    def test_unknown_file(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        r = client.get(f"/api/documents/{doc['id']}/files/missing/download", headers=headers)
        assert r.status_code == 404


class TestSignAndSlip:
    def test_sign_records_metadata(self, client, make_user):
        user_id, headers = make_user()
        doc = create_document(client, headers)
        r = client.post(f"/api/documents/{doc['id']}/sign", headers=headers)
        assert r.status_code == 200
        data = r.json()
        assert data["signed_by"] == user_id
        assert data["blockchain_status"] == "pending"
        assert client.post(f"/api/documents/{doc['id']}/sign", headers=headers).status_code == 409

    def test_viewer_cannot_sign(self, client, make_user):
        _, owner = make_user()
        _, viewer = make_user(role="VIEW_ONLY")
        doc = create_document(client, owner)
        assert client.post(f"/api/documents/{doc['id']}/sign", headers=viewer).status_code == 403

    def test_routing_slip_pdf(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers, title="Procurement Request")
        r = client.get(f"/api/documents/{doc['id']}/routing-slip", headers=headers)
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.content.startswith(b"%PDF")

    def test_allowed_actions(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        r = client.get(f"/api/documents/{doc['id']}/allowed-actions", headers=headers)
        assert r.status_code == 200
        actions = r.json()["actions"]
        assert actions[0] == "copy_code"
        assert "edit_details" in actions
        assert "release" not in actions
        assert "delete" not in actions


class TestTrails:
    def test_manual_trail_entry(self, client, make_user, admin, finance_dept, records_dept):
        _, headers = make_user()
        doc = create_document(client, headers)
        r = client.post(f"/api/documents/{doc['id']}/trails", json={
            "status": "forwarded", "from_department": records_dept, "to_department": finance_dept,
            "remarks": "hand carried",
        }, headers=headers)
        assert r.status_code == 201
        assert r.json()["to_department_name"] == "Finance"
        assert r.json()["user_name"].startswith("Test")

    def test_unknown_department_in_trail(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        r = client.post(f"/api/documents/{doc['id']}/trails", json={"status": "x", "to_department": "nope"},
                        headers=headers)
        assert r.status_code == 400

    def test_search_and_delete_trails(self, client, admin):
        doc = create_document(client, admin)
        r = client.get(f"/api/trails?document_id={doc['id']}&status=created", headers=admin)
        assert r.status_code == 200
        trails = r.json()
        assert len(trails) == 1

        assert client.delete(f"/api/trails/{trails[0]['id']}", headers=admin).status_code == 200
        assert client.get(f"/api/trails?document_id={doc['id']}", headers=admin).json() == []
        assert client.delete(f"/api/trails/{trails[0]['id']}", headers=admin).status_code == 404

    def test_trail_date_filter_includes_whole_day(self, client, admin):
        doc = create_document(client, admin)
        created = client.get(f"/api/documents/{doc['id']}", headers=admin).json()["created_at"]
        day = created[:10]
        r = client.get(f"/api/trails?date_from={day}&date_to={day}", headers=admin)
        assert len(r.json()) == 1
