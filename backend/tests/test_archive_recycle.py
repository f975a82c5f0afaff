from conftest import create_document


class TestArchive:
    def test_archive_list_and_restore(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)

        r = client.post(f"/api/documents/{doc['id']}/archive", headers=headers)
        assert r.status_code == 200
        assert r.json()["status"] == "archive"
        assert r.json()["archived_at"] is not None

        archived = client.get("/api/archive", headers=headers).json()
        assert [d["id"] for d in archived] == [doc["id"]]
        assert client.get(f"/api/archive/{doc['id']}", headers=headers).status_code == 200

        r = client.post(f"/api/archive/{doc['id']}/restore", headers=headers)
        assert r.status_code == 200
        assert r.json()["status"] == "dispatch"
        assert r.json()["archived_at"] is None
        assert client.get("/api/archive", headers=headers).json() == []

    def test_archive_twice_conflicts(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        client.post(f"/api/documents/{doc['id']}/archive", headers=headers)
        assert client.post(f"/api/documents/{doc['id']}/archive", headers=headers).status_code == 409

    def test_checked_out_document_cannot_be_archived(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        client.post(f"/api/documents/{doc['id']}/checkout", headers=headers)

        assert client.post(f"/api/documents/{doc['id']}/archive", headers=headers).status_code == 409
        lock = client.get(f"/api/documents/{doc['id']}/lock", headers=headers).json()
        assert lock["held_by_me"] is True

    def test_get_unarchived_document_is_not_found(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        assert client.get(f"/api/archive/{doc['id']}", headers=headers).status_code == 404

    def test_restore_unarchived_conflicts(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        assert client.post(f"/api/archive/{doc['id']}/restore", headers=headers).status_code == 409

    def test_receiving_department_cannot_archive(self, client, make_user, finance_dept):
        _, sender = make_user()
        _, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        client.post(f"/api/documents/{doc['id']}/release", json={"department_id": finance_dept}, headers=sender)
        r = client.post(f"/api/documents/{doc['id']}/archive", headers=receiver)
        assert r.status_code == 403


class TestRecycleBin:
    def _delete(self, client, admin, doc_id):
        assert client.delete(f"/api/documents/{doc_id}", headers=admin).status_code == 200

    def test_owner_sees_and_restores(self, client, admin, make_user):
        _, owner = make_user()
        doc = create_document(client, owner)
        self._delete(client, admin, doc["id"])

        listing = client.get("/api/recycle-bin", headers=owner).json()
        assert [d["id"] for d in listing["data"]] == [doc["id"]]
        assert listing["pagination"]["total"] == 1
        assert listing["pagination"]["has_next"] is False

        r = client.post(f"/api/recycle-bin/{doc['id']}/restore", headers=owner)
        assert r.status_code == 200
        assert r.json()["status"] == "dispatch"
        assert r.json()["deleted_at"] is None
        assert client.get("/api/recycle-bin", headers=owner).json()["data"] == []

    def test_unrelated_department_does_not_see_deleted(self, client, admin, make_user, finance_dept):
        _, outsider = make_user(department_id=finance_dept)
        doc = create_document(client, admin)
        self._delete(client, admin, doc["id"])
        assert client.get("/api/recycle-bin", headers=outsider).json()["pagination"]["total"] == 0
        r = client.post(f"/api/recycle-bin/{doc['id']}/restore", headers=outsider)
        assert r.status_code == 404

    def test_restore_live_document_conflicts(self, client, admin):
        doc = create_document(client, admin)
        assert client.post(f"/api/recycle-bin/{doc['id']}/restore", headers=admin).status_code == 409

    def test_permanent_delete_removes_files(self, client, admin, tmp_data):
        doc = create_document(client, admin, file_content=b"to be shredded")
        assert (tmp_data / "files" / doc["id"]).exists()
        self._delete(client, admin, doc["id"])

        r = client.delete(f"/api/recycle-bin/{doc['id']}", headers=admin)
        assert r.status_code == 200
        assert list((tmp_data / "files" / doc["id"]).iterdir()) == []
        assert client.get(f"/api/documents/{doc['id']}", headers=admin).status_code == 404

    def test_user_cannot_permanently_delete(self, client, admin, make_user):
        _, owner = make_user()
        doc = create_document(client, owner)
        self._delete(client, admin, doc["id"])
        assert client.delete(f"/api/recycle-bin/{doc['id']}", headers=owner).status_code == 403

    def test_bulk_restore_and_delete(self, client, admin):
        first = create_document(client, admin, title="First")
        second = create_document(client, admin, title="Second")
        live = create_document(client, admin, title="Live")
        self._delete(client, admin, first["id"])
        self._delete(client, admin, second["id"])

        r = client.post("/api/recycle-bin/bulk-restore",
                        json={"document_ids": [first["id"], live["id"]]}, headers=admin)
        assert r.json()["processed"] == [first["id"]]
        assert r.json()["failed"][0]["id"] == live["id"]

        r = client.post("/api/recycle-bin/bulk-delete",
                        json={"document_ids": [second["id"], "missing"]}, headers=admin)
        assert r.json()["processed"] == [second["id"]]
        assert [f["id"] for f in r.json()["failed"]] == ["missing"]
        assert client.get("/api/recycle-bin", headers=admin).json()["data"] == []
