import uuid

from fastapi import status

from teamdash.core.config import Config
from teamdash.dependencies import get_settings

TEAM_ID = str(uuid.uuid4())


def _form(**overrides):
    form = {
        "team_id": TEAM_ID,
        "title": "Q1 review",
        "description": "Quarterly review deck",
        "category": "performance_review",
    }
    form.update(overrides)
    return form


def _upload(client, token="manager-token", form=None, content=b"%PDF-1.4 quarterly", filename="q1.pdf"):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return client.post(
        "/api/documents/upload",
        data=form or _form(),
        files={"file": (filename, content, "application/pdf")},
        headers=headers,
    )


def _seed_document(tables, **overrides):
    row = {
        "team_id": TEAM_ID,
        "title": "Roadmap",
        "file_path": f"{TEAM_ID}/abc_roadmap.pdf",
        "bucket_name": "documents",
        "category": "report",
    }
    row.update(overrides)
    return tables.seed("documents", **row)


def test_upload_document(client, tables, storage, manager):
    response = _upload(client)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Document uploaded successfully"

    document = body["data"]
    assert document["uploaded_by"] == manager["id"]
    assert document["bucket_name"] == "documents"
    assert document["file_type"] == "application/pdf"
    assert document["file_size"] == len(b"%PDF-1.4 quarterly")
    assert document["employee_id"] is None
    assert document["file_path"].startswith(f"{TEAM_ID}/")
    assert document["file_path"].endswith("_q1.pdf")

    assert storage.calls[0] == ("upload", "documents", document["file_path"], "application/pdf")
    assert storage.objects[("documents", document["file_path"])] == b"%PDF-1.4 quarterly"


def test_upload_paths_are_unique(client, manager):
    first = _upload(client).json()["data"]["file_path"]
    second = _upload(client).json()["data"]["file_path"]
    assert first != second


def test_upload_writes_activity_log(client, tables, manager):
    _upload(client)

    logs = tables.rows["activity_logs"]
    assert len(logs) == 1
    assert logs[0]["action_type"] == "document_uploaded"
    assert logs[0]["action_description"] == "Uploaded document: Q1 review"
    assert logs[0]["user_id"] == manager["id"]
    assert logs[0]["metadata"] == {
        "file_name": "q1.pdf",
        "file_size": len(b"%PDF-1.4 quarterly"),
        "category": "performance_review",
    }


def test_upload_activity_log_failure_is_ignored(client, tables, manager):
    tables.fail("insert", "activity_logs", status_code=500)
    response = _upload(client)
    assert response.status_code == 201
    assert len(tables.rows["documents"]) == 1


def test_failed_record_insert_removes_uploaded_object(client, tables, storage, manager):
    tables.fail("insert", "documents", body={"message": "duplicate key value"})

    response = _upload(client)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Failed to create document record",
        "error": {"message": "duplicate key value"},
    }
    upload_call = storage.calls[0]
    assert storage.calls[-1] == ("remove", upload_call[1], upload_call[2])
    assert storage.objects == {}
    assert tables.rows["activity_logs"] == []


def test_failed_cleanup_still_reports_insert_failure(client, tables, storage, manager):
    tables.fail("insert", "documents", body={"message": "duplicate key value"})
    storage.fail("remove", status_code=500)

    response = _upload(client)

    assert response.status_code == 400
    assert response.json()["message"] == "Failed to create document record"
    assert response.json()["error"] == {"message": "duplicate key value"}


def test_storage_failure_stops_upload(client, tables, storage, auth, manager):
    storage.fail("upload", body={"error": "Bucket not found"})

    response = _upload(client)

    assert response.status_code == 400
    assert response.json()["message"] == "File upload failed"
    assert response.json()["error"] == {"error": "Bucket not found"}
    assert auth.calls == []
    assert tables.calls == []


def test_unresolved_token_stops_upload(client, tables, storage):
    response = _upload(client, token="expired-token")

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"
    assert tables.calls == []


def test_upload_requires_token(client, tables, storage):
    response = _upload(client, token=None)

    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"
    assert storage.calls == []
    assert tables.calls == []


def test_upload_validation(client, storage, manager):
    response = _upload(client, form=_form(category="memo", team_id="team-7"))

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert "category" in errors
    assert "team_id" in errors
    assert storage.calls == []


def test_upload_validation_runs_before_token_check(client, storage, auth):
    response = client.post("/api/documents/upload", data={"team_id": "x", "category": "memo"})

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert {"team_id", "category", "title", "file"} <= set(errors)
    assert storage.calls == []
    assert auth.calls == []


def test_upload_requires_file(client, storage, manager):
    response = client.post(
        "/api/documents/upload",
        data=_form(),
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 422
    assert "file" in response.json()["errors"]
    assert storage.calls == []


def test_upload_rejects_oversized_file(app, client, storage, manager):
    app.dependency_overrides[get_settings] = lambda: Config(max_upload_bytes=8)

    response = _upload(client, content=b"0123456789")

    assert response.status_code == 422
    assert "file" in response.json()["errors"]
    assert storage.calls == []


def test_upload_at_size_limit(app, client, storage, manager):
    app.dependency_overrides[get_settings] = lambda: Config(max_upload_bytes=10)

    response = _upload(client, content=b"0123456789")

    assert response.status_code == 201
    assert storage.objects[("documents", response.json()["data"]["file_path"])] == b"0123456789"


def test_upload_with_employee(client, manager):
    employee_id = str(uuid.uuid4())
    response = _upload(client, form=_form(employee_id=employee_id))
    assert response.json()["data"]["employee_id"] == employee_id


def test_list_documents(client, tables):
    _seed_document(tables)
    response = client.get("/api/documents", params={"team_id": TEAM_ID, "category": "report", "limit": 5})

    assert response.status_code == 200
    assert len(response.json()["data"]) == 1
    _, table, filters, options = tables.calls[0]
    assert table == "documents"
    assert filters == {"team_id": f"eq.{TEAM_ID}", "category": "eq.report"}
    assert options.as_params() == {"order": "created_at.desc", "limit": 5}


def test_list_documents_rejects_unknown_category(client, tables):
    response = client.get("/api/documents", params={"category": "memo"})
    assert response.status_code == 422
    assert tables.calls == []


def test_get_document(client, tables):
    row = _seed_document(tables)
    response = client.get(f"/api/documents/{row['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == row


def test_get_missing_document(client):
    response = client.get(f"/api/documents/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Document not found"}


def test_get_document_upstream_failure_is_not_found(client, tables):
    tables.fail("query", "documents", body={"code": "22P02", "message": "invalid input syntax for type uuid"})

    response = client.get("/api/documents/not-a-uuid")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Document not found",
        "error": {"code": "22P02", "message": "invalid input syntax for type uuid"},
    }


def test_download_document(client, tables):
    row = _seed_document(tables)
    response = client.get(f"/api/documents/{row['id']}/download")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["document"] == row
    assert data["url"] == (
        f"https://project.supabase.test/storage/v1/object/public/documents/{row['file_path']}"
    )


def test_download_missing_document(client, storage):
    response = client.get(f"/api/documents/{uuid.uuid4()}/download")
    assert response.status_code == 404
    assert storage.calls == []


def test_update_document(client, tables):
    row = _seed_document(tables)
    response = client.patch(f"/api/documents/{row['id']}", json={"title": "Roadmap v2"})

    assert response.status_code == 200
    assert response.json()["message"] == "Document updated successfully"
    assert tables.calls[-1] == ("update", "documents", {"id": f"eq.{row['id']}"}, {"title": "Roadmap v2"})


def test_update_document_validation(client, tables):
    response = client.patch(f"/api/documents/{uuid.uuid4()}", json={"category": "memo", "title": "t" * 300})
    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"category", "title"}
    assert tables.calls == []


def test_update_document_rejects_null_title_and_category(client, tables):
    row = _seed_document(tables)
    response = client.patch(f"/api/documents/{row['id']}", json={"title": None, "category": None})

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"title", "category"}
    assert [c for c in tables.calls if c[0] == "update"] == []


def test_update_document_clears_description(client, tables):
    row = _seed_document(tables, description="Old")
    response = client.patch(f"/api/documents/{row['id']}", json={"description": None})

    assert response.status_code == 200
    assert tables.calls[-1][-1] == {"description": None}


def test_delete_document(client, tables, storage):
    row = _seed_document(tables)
    response = client.delete(f"/api/documents/{row['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Document deleted successfully"}
    assert storage.calls == [("remove", "documents", row["file_path"])]
    assert tables.rows["documents"] == []


def test_delete_document_storage_failure_not_blocking(client, tables, storage):
    row = _seed_document(tables)
    storage.fail("remove", status_code=404)

    response = client.delete(f"/api/documents/{row['id']}")

    assert response.status_code == 200
    assert tables.rows["documents"] == []


def test_delete_missing_document(client, tables, storage):
    response = client.delete(f"/api/documents/{uuid.uuid4()}")

    assert response.status_code == 404
    assert storage.calls == []
    assert [c for c in tables.calls if c[0] == "remove"] == []


def test_delete_document_record_failure(client, tables):
    row = _seed_document(tables)
    tables.fail("remove", "documents")

    response = client.delete(f"/api/documents/{row['id']}")

    assert response.status_code == 400
    assert response.json()["message"] == "Failed to delete document"
