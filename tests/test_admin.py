import asyncio

from core.events import MATH_DAY, VIRUTHAI_PONGAL
from services import admin as admin_svc
from services.auth import AdminGate


LOGIN = {"username": "admin@darecentre.test", "password": "correct-horse"}


def seed_pongal(store):
    store.tables["viruthaipongal_registrations"].extend([
        {"id": 1, "registration_no": "VP-0001", "full_name": "Kavin", "email_id": "kavin@x.com",
         "institute_name": "Govt School", "category": "School", "standard": "9th Std",
         "degree": None, "major": None, "registration_date": "2026-01-02T10:00:00+00:00"},
        {"id": 2, "registration_no": "VP-0002", "full_name": "Meena", "email_id": "meena@x.com",
         "institute_name": "Ayya Nadar College", "category": "College", "standard": None,
         "degree": "BSc", "major": "Physics", "registration_date": "2026-01-03T10:00:00+00:00"},
    ])
    store.tables["viruthaipongal_submissions"].append(
        {"id": 1, "email_id": "meena@x.com", "drive_link": "https://drive.google.com/x",
         "instagram_link": "https://instagram.com/p/y", "submitted_at": "2026-01-05T10:00:00+00:00"}
    )


def test_gate_in_isolation(sessions):
    gate = AdminGate(sessions, email="root@x.com", password="pw")

    async def run():
        assert not await gate.login("s1", "root@x.com", "nope")
        assert not await gate.is_authenticated("s1")
        assert not await gate.login("s1", "ROOT@x.com", "pw")
        assert not await gate.is_authenticated("s1")
        assert await gate.login("s1", "root@x.com", "pw")
        assert await gate.is_authenticated("s1")
        assert not await gate.is_authenticated("s2")
        await gate.logout("s1")
        assert not await gate.is_authenticated("s1")

    asyncio.run(run())


def test_gate_without_configured_pair_refuses(sessions):
    gate = AdminGate(sessions, email="", password="")
    assert not asyncio.run(gate.login("s1", "", ""))


def test_login_sets_flag_and_unlocks_admin(client):
    assert client.get("/api/admin/panels").status_code == 401

    resp = client.post("/api/auth/login", data=LOGIN)
    assert resp.status_code == 200
    assert resp.json() == {"authenticated": True, "redirect": "/admin"}
    assert client.get("/api/auth/session").json()["authenticated"] is True

    panels = client.get("/api/admin/panels").json()
    assert {p["slug"] for p in panels} == {"math-day-2025", "viruthai-pongal-2026"}

    client.post("/api/auth/logout")
    assert client.get("/api/admin/panels").status_code == 401


def test_wrong_credentials_leave_flag_unset(client, fake_redis):
    resp = client.post("/api/auth/login", data={"username": LOGIN["username"], "password": "guess"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials. Please contact developer."
    assert not any(v == "true" for v in fake_redis.store.values())
    assert client.get("/api/auth/session").json()["authenticated"] is False


def test_registrations_newest_first_with_submission_status(fake_store):
    seed_pongal(fake_store)
    rows = asyncio.run(admin_svc.list_registrations(fake_store, VIRUTHAI_PONGAL))

    assert [r["full_name"] for r in rows] == ["Meena", "Kavin"]
    assert [r["has_submission"] for r in rows] == [True, False]
    assert rows[0]["display_id"] == "VP-0002"


def test_search_is_case_insensitive_over_display_fields(fake_store):
    seed_pongal(fake_store)
    rows = asyncio.run(admin_svc.list_registrations(fake_store, VIRUTHAI_PONGAL, "PHYS"))
    assert [r["full_name"] for r in rows] == ["Meena"]
    rows = asyncio.run(admin_svc.list_registrations(fake_store, VIRUTHAI_PONGAL, "9th"))
    assert [r["full_name"] for r in rows] == ["Kavin"]
    assert asyncio.run(admin_svc.list_registrations(fake_store, VIRUTHAI_PONGAL, "zzz")) == []


def test_index_keeps_first_record_per_key():
    index = admin_svc.index_by([{"email_id": "a", "n": 1}, {"email_id": "a", "n": 2}, {"email_id": None}], "email_id")
    assert index == {"a": {"email_id": "a", "n": 1}}


def test_uploads_carry_public_url(fake_store):
    fake_store.tables["math_project_uploads"].append({
        "id": 1, "registration_id": "MATH2025-0001", "email_id": "asha@x.com", "full_name": "Asha",
        "file_path": "math_day_2025/MATH2025-0001_ashaxcom_1.pdf", "file_type": "pdf",
        "status": "uploaded", "uploaded_at": "2025-12-18T09:00:00+00:00",
    })
    rows = asyncio.run(admin_svc.list_uploads(fake_store, MATH_DAY, "math2025"))
    assert rows[0]["file_name"] == "MATH2025-0001_ashaxcom_1.pdf"
    assert rows[0]["file_url"] == "https://store.test/storage/v1/object/public/uploads/math_day_2025/MATH2025-0001_ashaxcom_1.pdf"


def test_admin_routes(client, fake_store):
    seed_pongal(fake_store)
    client.post("/api/auth/login", data=LOGIN)

    body = client.get("/api/admin/events/viruthai-pongal-2026/registrations", params={"q": "kavin"}).json()
    assert body["total"] == 1

    subs = client.get("/api/admin/events/viruthai-pongal-2026/submissions").json()
    assert subs["data"][0]["email_id"] == "meena@x.com"

    assert client.get("/api/admin/events/viruthai-pongal-2026/uploads").status_code == 404

    fake_store.fail("select", message="permission denied for table")
    resp = client.get("/api/admin/events/viruthai-pongal-2026/registrations")
    assert resp.status_code == 502
    assert "permission denied" in resp.json()["detail"]


def test_csv_export(client, fake_store):
    seed_pongal(fake_store)
    client.post("/api/auth/login", data=LOGIN)

    resp = client.get("/api/admin/events/viruthai-pongal-2026/registrations/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("registration_no,full_name,category")
    assert lines[0].endswith("has_submission")
    assert lines[1].startswith("VP-0002,Meena,College")
    assert len(lines) == 3


def test_session_outage_on_login_and_guard(down_sessions_client):
    resp = down_sessions_client.post("/api/auth/login", data=LOGIN)
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Session service is unavailable. Please try again later."

    assert down_sessions_client.get("/api/admin/panels").status_code == 503
    assert down_sessions_client.get("/api/auth/session").status_code == 503
    assert down_sessions_client.post("/api/auth/logout").status_code == 503
