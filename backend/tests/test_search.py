from conftest import create_document


def search(client, headers, **params):
    return client.get("/api/search", params=params, headers=headers)


class TestSearch:
    def test_full_text_matches_title_and_description(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers, title="Annual Budget", description="fiscal planning")
        create_document(client, headers, title="Leave Request", description="vacation")

        r = search(client, headers, query="budget")
        assert r.status_code == 200
        data = r.json()
        assert data["total"] == 1
        assert data["documents"][0]["title"] == "Annual Budget"
        assert data["documents"][0]["modified"] == "Today"

        assert search(client, headers, query="fiscal").json()["total"] == 1

    def test_index_follows_title_updates(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers, title="Draft memo")
        client.put(f"/api/documents/{doc['id']}", json={"title": "Final circular"}, headers=headers)
        assert search(client, headers, query="memo").json()["total"] == 0
        assert search(client, headers, query="circular").json()["total"] == 1

    def test_malformed_query_is_rejected(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers)
        r = search(client, headers, query="budget AND")
        assert r.status_code == 400
        assert r.json()["error"]["message"] == "Invalid search query"

    def test_results_respect_access(self, client, make_user, finance_dept):
        _, owner = make_user()
        _, outsider = make_user(department_id=finance_dept)
        create_document(client, owner, title="Confidential budget")
        assert search(client, outsider, query="budget").json()["total"] == 0

    def test_deleted_documents_excluded(self, client, admin):
        doc = create_document(client, admin, title="Obsolete budget")
        client.delete(f"/api/documents/{doc['id']}", headers=admin)
        assert search(client, admin, query="budget").json()["total"] == 0

    def test_filters(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers, title="Memo one", document_type="Memo", classification="Internal")
        create_document(client, headers, title="Letter one", document_type="Letter", origin="External")

        assert search(client, headers, document_type="Memo").json()["total"] == 1
        assert search(client, headers, document_type="all").json()["total"] == 2
        assert search(client, headers, classification="Internal").json()["total"] == 1
        assert search(client, headers, origin="External").json()["total"] == 1
        assert search(client, headers, department="RECORDS").json()["total"] == 2
        assert search(client, headers, department="Finance").json()["total"] == 0
        assert search(client, headers, status="dispatch").json()["total"] == 2

    def test_signature_filter(self, client, make_user):
        _, headers = make_user()
        signed = create_document(client, headers, title="Signed contract")
        create_document(client, headers, title="Unsigned contract")
        client.post(f"/api/documents/{signed['id']}/sign", headers=headers)

        result = search(client, headers, signature_status="signed").json()
        assert [d["title"] for d in result["documents"]] == ["Signed contract"]
        assert result["documents"][0]["signed"] is True
        assert search(client, headers, signature_status="unsigned").json()["total"] == 1
        assert search(client, headers, signature_status="blockchain-verified").json()["total"] == 0
        assert search(client, headers, signature_status="notarised").status_code == 400

    def test_date_filters(self, client, make_user):
        _, headers = make_user()
        doc = create_document(client, headers)
        day = doc["created_at"][:10]
        assert search(client, headers, date_from=day, date_to=day).json()["total"] == 1
        assert search(client, headers, date_to="2000-01-01").json()["total"] == 0
        assert search(client, headers, date_from="01/02/2024").status_code == 400

    def test_sort_and_paginate(self, client, make_user):
        _, headers = make_user()
        for title in ("Charlie", "Alpha", "Bravo"):
            create_document(client, headers, title=title)

        page = search(client, headers, sort_by="name", limit=2).json()
        assert [d["title"] for d in page["documents"]] == ["Alpha", "Bravo"]
        assert page["total_pages"] == 2
        page = search(client, headers, sort_by="name", limit=2, page=2).json()
        assert [d["title"] for d in page["documents"]] == ["Charlie"]

    def test_unknown_sort_rejected(self, client, make_user):
        _, headers = make_user()
        assert search(client, headers, sort_by="size").status_code == 422


class TestSavedSearches:
    def test_crud(self, client, make_user):
        _, headers = make_user()
        r = client.post("/api/search/saved", json={
            "name": "Budgets", "query": "budget",
            "filters": {"document_type": "General", "bogus": "x"},
        }, headers=headers)
        assert r.status_code == 201
        saved = r.json()
        assert saved["filters"] == {"document_type": "General"}
        assert saved["last_run"] is None

        listing = client.get("/api/search/saved", headers=headers).json()
        assert [s["id"] for s in listing] == [saved["id"]]

        r = client.put(f"/api/search/saved/{saved['id']}", json={"is_favorite": True}, headers=headers)
        assert r.json()["is_favorite"] is True
        assert r.json()["last_run"] is None

        r = client.put(f"/api/search/saved/{saved['id']}", json={"query": "report"}, headers=headers)
        assert r.json()["query"] == "report"
        assert r.json()["last_run"] is not None

        assert client.delete(f"/api/search/saved/{saved['id']}", headers=headers).status_code == 200
        assert client.get(f"/api/search/saved/{saved['id']}", headers=headers).status_code == 404

    def test_blank_name_rejected(self, client, make_user):
        _, headers = make_user()
        r = client.post("/api/search/saved", json={"name": "  "}, headers=headers)
        assert r.status_code == 400

    def test_saved_search_is_private(self, client, make_user):
        _, alice = make_user()
        _, bob = make_user()
        saved = client.post("/api/search/saved", json={"name": "Mine"}, headers=alice).json()
        assert client.get(f"/api/search/saved/{saved['id']}", headers=bob).status_code == 404
        assert client.post(f"/api/search/saved/{saved['id']}/execute", headers=bob).status_code == 404

    def test_execute_records_results(self, client, make_user):
        _, headers = make_user()
        create_document(client, headers, title="Budget 2025")
        create_document(client, headers, title="Budget 2026")
        saved = client.post("/api/search/saved", json={"name": "Budgets", "query": "budget"},
                            headers=headers).json()

        r = client.post(f"/api/search/saved/{saved['id']}/execute", headers=headers)
        assert r.status_code == 200
        assert r.json()["total"] == 2

        refreshed = client.get(f"/api/search/saved/{saved['id']}", headers=headers).json()
        assert refreshed["results_count"] == 2
        assert refreshed["last_run"] is not None
