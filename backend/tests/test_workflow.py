from conftest import create_document


def release(client, headers, doc_id, department_id, **body):
    return client.post(f"/api/documents/{doc_id}/release",
                       json={"department_id": department_id, **body}, headers=headers)


class TestRelease:
    def test_release_updates_route_and_status(self, client, make_user, finance_dept, records_dept):
        _, sender = make_user()
        doc = create_document(client, sender)

        r = release(client, sender, doc["id"], finance_dept, request_action=["For signature", "For review"],
                    remarks="urgent")
        assert r.status_code == 200, r.text
        data = r.json()
        assert data["status"] == "intransit"
        assert data["work_flow"] == {"first": records_dept, "second": finance_dept}
        entry = data["work_flow_status"]["released_1"]
        assert entry["to_department_id"] == finance_dept
        assert entry["request_action"] == "For signature, For review"

    def test_release_grants_access_and_notifies_target(self, client, make_user, finance_dept):
        _, sender = make_user()
        _, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        assert client.get(f"/api/documents/{doc['id']}", headers=receiver).status_code == 403

        release(client, sender, doc["id"], finance_dept)
        assert client.get(f"/api/documents/{doc['id']}", headers=receiver).status_code == 200
        events = [n["workflow_event"] for n in client.get("/api/notifications", headers=receiver).json()]
        assert "document_shared" in events
        events = [n["workflow_event"] for n in client.get("/api/notifications", headers=sender).json()]
        assert "document_released" in events

    def test_release_to_unknown_department(self, client, make_user):
        _, sender = make_user()
        doc = create_document(client, sender)
        assert release(client, sender, doc["id"], "nowhere").status_code == 404

    def test_release_to_inactive_department(self, client, admin, make_user, finance_dept):
        _, sender = make_user()
        doc = create_document(client, sender)
        client.patch(f"/api/admin/departments/{finance_dept}/deactivate", headers=admin)
        r = release(client, sender, doc["id"], finance_dept)
        assert r.status_code == 400

    def test_release_blocked_by_checkout(self, client, make_user, finance_dept):
        _, sender = make_user(first_name="Sam")
        _, colleague = make_user()
        doc = create_document(client, sender)
        client.post(f"/api/documents/{doc['id']}/checkout", headers=colleague)
        assert release(client, sender, doc["id"], finance_dept).status_code == 409

    def test_release_blocked_by_own_checkout(self, client, make_user, finance_dept):
        _, sender = make_user()
        doc = create_document(client, sender)
        client.post(f"/api/documents/{doc['id']}/checkout", headers=sender)

        r = release(client, sender, doc["id"], finance_dept)
        assert r.status_code == 409
        current = client.get(f"/api/documents/{doc['id']}", headers=sender).json()
        assert current["status"] == "checked_out"
        assert current["work_flow"] == {"first": doc["department_id"]}

        client.post(f"/api/documents/{doc['id']}/checkin", headers=sender)
        assert release(client, sender, doc["id"], finance_dept).status_code == 200

    def test_viewer_cannot_release(self, client, make_user, finance_dept):
        _, owner = make_user()
        _, viewer = make_user(role="VIEW_ONLY")
        doc = create_document(client, owner)
        assert release(client, viewer, doc["id"], finance_dept).status_code == 403


class TestInTransitListings:
    def test_incoming_and_outgoing(self, client, make_user, finance_dept):
        _, sender = make_user()
        _, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        release(client, sender, doc["id"], finance_dept)

        incoming = client.get("/api/documents/intransit/incoming", headers=receiver).json()
        assert [d["id"] for d in incoming] == [doc["id"]]
        outgoing = client.get("/api/documents/intransit/outgoing", headers=sender).json()
        assert [d["id"] for d in outgoing] == [doc["id"]]

        assert client.get("/api/documents/intransit/incoming", headers=sender).json() == []

    def test_receive_moves_document_out_of_incoming(self, client, make_user, finance_dept):
        _, sender = make_user()
        receiver_id, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        release(client, sender, doc["id"], finance_dept)

        r = client.post(f"/api/documents/{doc['id']}/receive", headers=receiver)
        assert r.status_code == 200
        assert r.json()["status"] == "received"
        assert r.json()["received_by"] == [receiver_id]

        assert client.get("/api/documents/intransit/incoming", headers=receiver).json() == []
        received = client.get("/api/documents/received", headers=receiver).json()
        assert [d["id"] for d in received] == [doc["id"]]
        shared = client.get("/api/documents/shared", headers=receiver).json()
        assert [d["id"] for d in shared] == [doc["id"]]

    def test_receive_outside_route_rejected(self, client, admin, make_user, finance_dept):
        _, finance_user = make_user(department_id=finance_dept)
        doc = create_document(client, finance_user)

        r = client.post(f"/api/documents/{doc['id']}/receive", headers=admin)
        assert r.status_code == 400
        assert r.json()["error"]["message"] == "Department not in document workflow"
        current = client.get(f"/api/documents/{doc['id']}", headers=admin).json()
        assert current["status"] == "dispatch"
        assert current["received_by"] == []

    def test_receive_twice_records_user_once(self, client, make_user, finance_dept):
        _, sender = make_user()
        receiver_id, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        release(client, sender, doc["id"], finance_dept)
        client.post(f"/api/documents/{doc['id']}/receive", headers=receiver)
        r = client.post(f"/api/documents/{doc['id']}/receive", headers=receiver)
        assert r.json()["received_by"] == [receiver_id]


class TestCompleteAndCancel:
    def test_complete_notifies_creator(self, client, make_user, finance_dept):
        _, sender = make_user()
        _, receiver = make_user(department_id=finance_dept)
        doc = create_document(client, sender)
        release(client, sender, doc["id"], finance_dept)
        client.post(f"/api/documents/{doc['id']}/receive", headers=receiver)

        r = client.post(f"/api/documents/{doc['id']}/complete", headers=receiver)
        assert r.status_code == 200
        assert r.json()["status"] == "completed"
        assert "completed" in r.json()["work_flow_status"]

        events = [n["workflow_event"] for n in client.get("/api/notifications", headers=sender).json()]
        assert "document_completed" in events
        completed = client.get("/api/documents/completed", headers=receiver).json()
        assert [d["id"] for d in completed] == [doc["id"]]

    def test_completed_document_cannot_be_released(self, client, make_user, finance_dept):
        _, sender = make_user()
        doc = create_document(client, sender)
        client.post(f"/api/documents/{doc['id']}/complete", headers=sender)
        assert release(client, sender, doc["id"], finance_dept).status_code == 409

    def test_cancel_in_transit(self, client, make_user, finance_dept):
        _, sender = make_user()
        doc = create_document(client, sender)
        release(client, sender, doc["id"], finance_dept)
        r = client.post(f"/api/documents/{doc['id']}/cancel", json={"remarks": "sent by mistake"},
                        headers=sender)
        assert r.status_code == 200
        assert r.json()["status"] == "canceled"

        trails = client.get(f"/api/documents/{doc['id']}/trails", headers=sender).json()
        assert trails[-1]["status"] == "canceled"
        assert trails[-1]["remarks"] == "sent by mistake"

    def test_cancel_without_body(self, client, make_user):
        _, sender = make_user()
        doc = create_document(client, sender)
        assert client.post(f"/api/documents/{doc['id']}/cancel", headers=sender).status_code == 200

    def test_cancel_after_completion_conflicts(self, client, make_user):
        _, sender = make_user()
        doc = create_document(client, sender)
        client.post(f"/api/documents/{doc['id']}/complete", headers=sender)
        r = client.post(f"/api/documents/{doc['id']}/cancel", headers=sender)
        assert r.status_code == 409
