"""
Admin aggregate views, admin codes and exports
"""
import io

from openpyxl import load_workbook

from app.core.security import decode_token
from conftest import BOOTSTRAP_SECRET, bearer, register, register_admin
from test_reports import PNG, submit


# ─── Aggregate views ────────────────────────────────────────────────────────────
def test_admin_reports_include_owner(client, admin_token, user_token):
    submit(client, user_token, school="Riverside")
    r = client.get("/api/admin/reports", headers=bearer(admin_token))
    assert r.status_code == 200
    [report] = r.json()
    assert report["user"]["name"] == "Field Agent"
    assert report["user"]["email"] == "agent@example.org"


def test_admin_users_carry_report_counts(client, admin_token, user_token):
    first = submit(client, user_token, school="A").json()
    second = submit(client, user_token, school="B").json()
    idle = register(client, "idle@example.org", name="Idle Agent")

    users = client.get("/api/admin/users", headers=bearer(admin_token)).json()
    by_email = {u["email"]: u for u in users}

    agent = by_email["agent@example.org"]
    assert agent["reportCount"] == 2
    assert agent["lastActive"] == max(first["date"], second["date"])
    assert agent["isAdmin"] is False

    assert by_email["idle@example.org"]["reportCount"] == 0
    assert by_email["idle@example.org"]["lastActive"] is None
    assert by_email["idle@example.org"]["id"] == decode_token(idle)["sub"]
    assert by_email["admin@example.org"]["isAdmin"] is True
    assert "hashedPassword" not in agent


# ─── Admin codes ────────────────────────────────────────────────────────────────
def test_generate_code_lists_with_creator(client, admin_token):
    r = client.post("/api/admin/generate-code", headers=bearer(admin_token))
    assert r.status_code == 200
    code = r.json()["code"]
    assert r.json()["message"] == "Admin registration code generated successfully"

    codes = client.get("/api/admin/codes", headers=bearer(admin_token)).json()
    assert [c["code"] for c in codes] == [code]
    assert codes[0]["used"] is False
    assert codes[0]["createdBy"]["email"] == "admin@example.org"


def test_bootstrap_code_has_no_creator(client, admin_token):
    client.post("/api/auth/init-admin", json={"secretKey": BOOTSTRAP_SECRET})
    [code] = client.get("/api/admin/codes", headers=bearer(admin_token)).json()
    assert code["createdBy"] is None


def test_used_and_expired_codes_are_not_listed(client, admin_token, sql):
    used = client.post("/api/admin/generate-code", headers=bearer(admin_token)).json()["code"]
    expired = client.post("/api/admin/generate-code", headers=bearer(admin_token)).json()["code"]
    valid = client.post("/api/admin/generate-code", headers=bearer(admin_token)).json()["code"]

    assert register_admin(client, "helper@example.org", admin_code=used).status_code == 201
    sql("UPDATE admin_codes SET expires_at = '2000-01-01 00:00:00.000000' WHERE code = ?", (expired,))

    codes = client.get("/api/admin/codes", headers=bearer(admin_token)).json()
    assert [c["code"] for c in codes] == [valid]

    # listing purges expired rows
    assert sql("SELECT code FROM admin_codes WHERE code = ?", (expired,)) == []


# ─── Exports ────────────────────────────────────────────────────────────────────
def test_export_workbook_has_header_and_rows(client, admin_token, user_token):
    submit(client, user_token, school="North", files=[("images", ("a.png", PNG, "image/png"))])
    submit(client, user_token, school="South")

    r = client.get("/api/reports/export", headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert r.headers["content-disposition"] == "attachment; filename=reports.xlsx"

    ws = load_workbook(io.BytesIO(r.content))["Reports"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][:3] == ("Date", "User Name", "User Email")
    assert rows[0][-2:] == ("Images Count", "Videos Count")
    assert ws["A1"].font.bold is True
    assert len(rows) == 3

    # newest first
    south, north = rows[1], rows[2]
    assert south[3] == "South" and north[3] == "North"
    assert north[1:3] == ("Field Agent", "agent@example.org")
    assert north[5:11] == (120, 6, 40, 35, 1, 0)


def test_report_pdf_download(client, admin_token, user_token):
    report = submit(client, user_token, school="Lakeview").json()
    r = client.get(f"/api/reports/{report['id']}/download", headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.headers["content-disposition"] == 'attachment; filename="Report-Lakeview.pdf"'
    assert r.content.startswith(b"%PDF")


def test_report_pdf_unknown_id(client, admin_token):
    r = client.get("/api/reports/does-not-exist/download", headers=bearer(admin_token))
    assert r.status_code == 404
    assert r.json() == {"message": "Report not found"}
