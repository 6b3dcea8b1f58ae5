import pytest


def _form(**overrides):
    data = {
        "name": "Alice",
        "email": "a@x.com",
        "projectTitle": "Website Revamp",
        "projectDescription": "A full redesign of our marketing website and blog.",
    }
    data.update(overrides)
    return data


async def _create(client, files=None, **overrides) -> str:
    r = await client.post("/submissions", data=_form(**overrides), files=files)
    assert r.status_code == 201, r.text
    return r.json()["submissionId"]


@pytest.mark.asyncio
async def test_submit_with_attachment(client, admin_headers):
    files = [("files", ("brief.pdf", b"%PDF-1.4 " + b"x" * 2039, "application/pdf"))]
    r = await client.post("/submissions", data=_form(phone="+1 555 123 4567"), files=files)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Project submitted successfully!"
    assert "submission" not in body
    sid = body["submissionId"]

    got = await client.get(f"/admin/submissions/{sid}", headers=admin_headers)
    assert got.status_code == 200
    sub = got.json()["submission"]
    assert sub["status"] == "pending"
    assert sub["projectTitle"] == "Website Revamp"
    assert sub["phone"] == "+1 555 123 4567"
    assert "acceptanceConditions" not in sub and "rejectionReason" not in sub
    [f] = sub["files"]
    assert (f["name"], f["size"], f["type"]) == ("brief.pdf", 2048, "application/pdf")
    assert f["content"].startswith("data:application/pdf;base64,")

    dl = await client.get(f"/admin/submissions/{sid}/files/0", headers=admin_headers)
    assert dl.status_code == 200
    assert dl.headers["content-type"] == "application/pdf"
    assert dl.content.startswith(b"%PDF-1.4")
    assert "brief.pdf" in dl.headers["content-disposition"]


@pytest.mark.asyncio
async def test_submit_reports_all_field_errors(client):
    r = await client.post("/submissions", data={"name": "A", "email": "bad", "projectTitle": "Web", "projectDescription": "short"})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert {e["field"] for e in body["errors"]} == {"name", "email", "projectTitle", "projectDescription"}


@pytest.mark.asyncio
async def test_six_files_rejected(client, admin_headers):
    files = [("files", (f"f{i}.txt", b"hello", "text/plain")) for i in range(6)]
    r = await client.post("/submissions", data=_form(), files=files)
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "files"
    listed = await client.get("/admin/submissions", headers=admin_headers)
    assert listed.json()["submissions"] == []


@pytest.mark.asyncio
async def test_oversize_file_rejected(client):
    files = [("files", ("big.png", b"x" * (200 * 1024 + 10), "image/png"))]
    r = await client.post("/submissions", data=_form(), files=files)
    assert r.status_code == 422
    assert r.json()["errors"][0]["field"] == "files[0]"


@pytest.mark.asyncio
async def test_triage_flow(client, admin_headers):
    sid = await _create(client)

    r = await client.post(f"/admin/submissions/{sid}/accept", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["submission"]["status"] == "accepted"

    r = await client.post(f"/admin/submissions/{sid}/accept-with-conditions", json={"conditions": "Half upfront"}, headers=admin_headers)
    assert r.status_code == 409

    r = await client.post(f"/admin/submissions/{sid}/reject", json={"reason": "   "}, headers=admin_headers)
    assert r.status_code == 422

    r = await client.post(f"/admin/submissions/{sid}/reject", json={"reason": "Budget mismatch"}, headers=admin_headers)
    assert r.status_code == 200
    sub = r.json()["submission"]
    assert sub["status"] == "rejected"
    assert sub["rejectionReason"] == "Budget mismatch"
    assert "acceptanceConditions" not in sub
    assert sub["updatedAt"]


@pytest.mark.asyncio
async def test_list_filters_and_orders(client, admin_headers):
    first = await _create(client, projectTitle="Website Revamp")
    second = await _create(client, projectTitle="Mobile Banking App")
    await client.post(f"/admin/submissions/{second}/accept-with-conditions", json={"conditions": "Phase 1 only"}, headers=admin_headers)

    r = await client.get("/admin/submissions", headers=admin_headers)
    assert [s["id"] for s in r.json()["submissions"]] == [second, first]
    r = await client.get("/admin/submissions", params={"order": "asc"}, headers=admin_headers)
    assert [s["id"] for s in r.json()["submissions"]] == [first, second]
    r = await client.get("/admin/submissions", params={"status": "acceptedWithConditions"}, headers=admin_headers)
    assert [s["id"] for s in r.json()["submissions"]] == [second]
    r = await client.get("/admin/submissions", params={"q": "revamp"}, headers=admin_headers)
    assert [s["id"] for s in r.json()["submissions"]] == [first]
    r = await client.get("/admin/submissions", params={"status": "archived"}, headers=admin_headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_delete_and_not_found(client, admin_headers):
    sid = await _create(client)
    r = await client.delete(f"/admin/submissions/{sid}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Submission deleted successfully.", "submissionId": sid}

    for method, path in (
        ("DELETE", f"/admin/submissions/{sid}"),
        ("GET", f"/admin/submissions/{sid}"),
        ("POST", f"/admin/submissions/{sid}/accept"),
        ("GET", f"/admin/submissions/{sid}/files/0"),
    ):
        r = await client.request(method, path, headers=admin_headers)
        assert r.status_code == 404, (method, path)
        assert r.json()["success"] is False
