from conftest import create_document


class TestNotifications:
    def test_unread_count_and_mark_read(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers, title="First")
        create_document(client, headers, title="Second")

        assert client.get("/api/notifications/unread-count", headers=headers).json() == {"count": 2}
        notes = client.get("/api/notifications", headers=headers).json()
        assert notes[0]["metadata"]["document_title"] in ("First", "Second")

        r = client.patch(f"/api/notifications/{notes[0]['id']}/read", headers=headers)
        assert r.status_code == 200
        assert r.json()["is_read"] is True
        assert r.json()["read_at"] is not None
        assert client.get("/api/notifications/unread-count", headers=headers).json() == {"count": 1}

        unread = client.get("/api/notifications?is_read=false", headers=headers).json()
        assert [n["id"] for n in unread] == [notes[1]["id"]]

    def test_mark_all_read(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers)
        create_document(client, headers)
        r = client.patch("/api/notifications/read-all", headers=headers)
        assert r.json()["message"] == "2 notifications marked as read"
        assert client.get("/api/notifications/unread-count", headers=headers).json() == {"count": 0}

    def test_delete_hides_notification(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers)
        note = client.get("/api/notifications", headers=headers).json()[0]
        assert client.delete(f"/api/notifications/{note['id']}", headers=headers).status_code == 200
        assert client.get("/api/notifications", headers=headers).json() == []
        assert client.delete(f"/api/notifications/{note['id']}", headers=headers).status_code == 404

    def test_cannot_touch_other_users_notifications(self, client, make_user):
        _, alice = make_user()
        _, bob = make_user()
        create_document(client, alice)
        note = client.get("/api/notifications", headers=alice).json()[0]
        assert client.patch(f"/api/notifications/{note['id']}/read", headers=bob).status_code == 404

    def test_edit_by_colleague_notifies_owner(self, client, make_user):
        _, owner = make_user()
        _, colleague = make_user()
        doc = create_document(client, owner)
        client.put(f"/api/documents/{doc['id']}", json={"remarks": "checked"}, headers=colleague)
        events = [n["workflow_event"] for n in client.get("/api/notifications", headers=owner).json()]
        assert "document_updated" in events

    def test_requires_authentication(self, client):
        assert client.get("/api/notifications").status_code == 401
