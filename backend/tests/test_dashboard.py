from conftest import create_document


class TestDocumentStats:
    def test_empty_stats(self, client, make_user):
        _, headers = make_user()
        r = client.get("/api/dashboard/stats", headers=headers)
        assert r.status_code == 200
        assert r.json() == {
            "owned": 0, "in_transit": 0, "shared": 0, "archive": 0, "recycle_bin": 0, "total": 0,
        }

    def test_counts_by_bucket(self, client, admin, make_user, finance_dept):
        _, owner = make_user()
        _, receiver = make_user(department_id=finance_dept)

        create_document(client, owner, title="Kept")
        archived = create_document(client, owner, title="Archived")
        client.post(f"/api/documents/{archived['id']}/archive", headers=owner)
        deleted = create_document(client, owner, title="Deleted")
        client.delete(f"/api/documents/{deleted['id']}", headers=admin)
        routed = create_document(client, owner, title="Routed")
        client.post(f"/api/documents/{routed['id']}/release", json={"department_id": finance_dept},
                    headers=owner)

        stats = client.get("/api/dashboard/stats", headers=owner).json()
        assert stats["owned"] == 3
        assert stats["archive"] == 1
        assert stats["recycle_bin"] == 1
        assert stats["in_transit"] == 0

        receiver_stats = client.get("/api/dashboard/stats", headers=receiver).json()
        assert receiver_stats["in_transit"] == 1
        assert receiver_stats["shared"] == 0

        client.post(f"/api/documents/{routed['id']}/receive", headers=receiver)
        receiver_stats = client.get("/api/dashboard/stats", headers=receiver).json()
        assert receiver_stats["shared"] == 1
        assert receiver_stats["in_transit"] == 0
        assert receiver_stats["total"] == 1
