import csv
import io

from app.models.application import Application


def _application(db, scholarship, first_name, status="submitted", **extra):
    application = Application(
        scholarship_id=scholarship.id,
        first_name=first_name,
        last_name="Logger",
        email=f"{first_name.lower()}@example.com",
        school=extra.pop("school", "Oregon State"),
        major="Forestry",
        status=status,
        **extra,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def _csv_upload(rows, name="applications.csv"):
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["scholarship_id", "first_name", "last_name", "email", "school", "major"])
    writer.writerows(rows)
    return {"file": (name, output.getvalue().encode("utf-8"), "text/csv")}


def test_list_and_filter(client, db, admin_headers, scholarship):
    _application(db, scholarship, "Ann")
    _application(db, scholarship, "Bo", status="approved", school="Cal Poly Humboldt")

    everything = client.get("/admin/applications/", headers=admin_headers)
    assert everything.status_code == 200
    assert len(everything.json()) == 2
    assert {a["scholarship_name"] for a in everything.json()} == {"Forestry Futures Scholarship"}

    approved = client.get("/admin/applications/", headers=admin_headers, params={"status": "approved"})
    assert [a["first_name"] for a in approved.json()] == ["Bo"]

    searched = client.get("/admin/applications/", headers=admin_headers, params={"search": "humboldt"})
    assert [a["first_name"] for a in searched.json()] == ["Bo"]

    bad_status = client.get("/admin/applications/", headers=admin_headers, params={"status": "lost"})
    assert bad_status.status_code == 422


def test_applicants_cannot_use_admin_routes(client, applicant_headers):
    assert client.get("/admin/applications/", headers=applicant_headers).status_code == 403
    assert client.get("/admin/applications/stats", headers=applicant_headers).status_code == 403


def test_update_status_with_notes(client, db, admin_headers, scholarship):
    application = _application(db, scholarship, "Ann")
    response = client.put(f"/admin/applications/{application.id}/status", headers=admin_headers, json={
        "status": "under_review",
        "admin_notes": "Strong essays",
    })
    assert response.status_code == 200
    assert response.json()["status"] == "under_review"
    assert response.json()["admin_notes"] == "Strong essays"


def test_update_status_missing_application(client, admin_headers):
    response = client.put("/admin/applications/nope/status", headers=admin_headers, json={"status": "approved"})
    assert response.status_code == 404


def test_award_and_remove_award(client, db, admin_headers, scholarship):
    application = _application(db, scholarship, "Ann", status="approved")

    response = client.post(f"/admin/applications/{application.id}/award", headers=admin_headers,
                           json={"awarded_amount": 1500})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "awarded"
    assert body["awarded_amount"] == 1500
    assert body["awarded_date"] is not None

    response = client.delete(f"/admin/applications/{application.id}/award", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["awarded_amount"] is None
    assert response.json()["awarded_date"] is None

    response = client.delete(f"/admin/applications/{application.id}/award", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Application has no award to remove"


def test_award_requires_positive_amount(client, db, admin_headers, scholarship):
    application = _application(db, scholarship, "Ann", status="approved")
    response = client.post(f"/admin/applications/{application.id}/award", headers=admin_headers,
                           json={"awarded_amount": 0})
    assert response.status_code == 422


def test_bulk_status_reports_missing_ids(client, db, admin_headers, scholarship):
    first = _application(db, scholarship, "Ann")
    second = _application(db, scholarship, "Bo")
    response = client.post("/admin/applications/bulk-status", headers=admin_headers, json={
        "application_ids": [first.id, "missing", second.id],
        "status": "rejected",
    })
    assert response.json() == {"updated_count": 2, "failed_ids": ["missing"]}
    db.expire_all()
    assert {a.status for a in db.query(Application).all()} == {"rejected"}


def test_stats(client, db, admin_headers, scholarship):
    _application(db, scholarship, "Ann")
    _application(db, scholarship, "Bo", status="awarded", awarded_amount=750)
    _application(db, scholarship, "Cy", status="draft")
    stats = client.get("/admin/applications/stats", headers=admin_headers).json()
    assert stats["total"] == 3
    assert stats["submitted"] == 1
    assert stats["awarded"] == 1
    assert stats["draft"] == 1
    assert stats["total_awarded"] == 750.0


def test_export_csv(client, db, admin_headers, scholarship):
    _application(db, scholarship, "Ann", gpa=3.5)
    response = client.get("/admin/applications/export", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"applications_" in response.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 1
    assert rows[0]["Applicant Name"] == "Ann Logger"
    assert rows[0]["Scholarship"] == "Forestry Futures Scholarship"
    assert rows[0]["GPA"] == "3.5"
    assert rows[0]["Awarded Amount"] == "N/A"


# --- CSV import ---

def test_import_template_download(client, admin_headers):
    response = client.get("/admin/applications/import/template", headers=admin_headers)
    assert response.status_code == 200
    assert response.text.startswith("scholarship_id,first_name,last_name,email")


def test_import_preview_then_import(client, db, admin_headers, scholarship):
    files = _csv_upload([
        [scholarship.id, "Ann", "Lee", "ann@example.com", "OSU", "Forestry"],
        [scholarship.id, "Bo", "Ray", "not-an-email", "OSU", "Forestry"],
    ])
    preview = client.post("/admin/applications/import/preview", headers=admin_headers, files=files)
    assert preview.status_code == 200
    body = preview.json()
    assert body["total_rows"] == 2
    assert len(body["valid"]) == 1
    assert body["errors"] == [{"row": 3, "message": "Invalid email format: not-an-email", "data": body["invalid"][0]["data"]}]
    assert db.query(Application).count() == 0

    result = client.post("/admin/applications/import", headers=admin_headers, files=files)
    assert result.status_code == 200
    assert result.json()["success"] is True
    assert result.json()["success_count"] == 1
    assert result.json()["error_count"] == 1
    assert [a.email for a in db.query(Application).all()] == ["ann@example.com"]


def test_import_rejects_non_csv_filename(client, admin_headers):
    response = client.post("/admin/applications/import", headers=admin_headers,
                           files={"file": ("applications.xlsx", b"binary", "application/octet-stream")})
    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload a CSV file"


def test_import_reports_parse_errors(client, admin_headers):
    response = client.post("/admin/applications/import/preview", headers=admin_headers,
                           files={"file": ("empty.csv", b"", "text/csv")})
    assert response.status_code == 400
    assert response.json()["detail"] == ["CSV file is empty or contains no valid data"]
