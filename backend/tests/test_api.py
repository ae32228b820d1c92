from datetime import datetime, timedelta, timezone

import jwt

from ghostcoin.config import settings
from ghostcoin.models.claim import Claim
from ghostcoin.services.profile_service import update_wallet_address
from tests.support import ONE_GHOX, WALLET_A, WALLET_B, add_drop, as_user, hours_from_now

NYC = {"lat": 40.7128, "lon": -74.0060}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# --- drops -------------------------------------------------------------------


def test_recent_drops_hide_drop_code(client, db):
    add_drop(db, "secret-code", title="Harbor Ghost")
    [drop] = client.get("/drops/recent").json()["drops"]
    assert drop["title"] == "Harbor Ghost"
    assert "drop_code" not in drop
    assert drop["expired"] is False
    assert drop["min_token_required"] == "0"


def test_visible_drops_apply_token_and_distance_gates(client, db, oracle):
    oracle.balances[WALLET_A.lower()] = 500 * ONE_GHOX
    add_drop(db, "near-free", latitude=40.73, longitude=-73.99)
    add_drop(db, "near-gated", latitude=40.75, longitude=-73.98, min_token_required=1000)
    add_drop(db, "far-free", latitude=34.0522, longitude=-118.2437)
    add_drop(db, "near-cheap", latitude=40.70, longitude=-74.01, min_token_required=100)

    body = client.get("/drops/visible", params={**NYC, "wallet": WALLET_A}).json()

    assert [d["latitude"] for d in body["drops"]] == [40.70, 40.73]
    assert body["viewer"] == {"wallet_connected": True, "location_known": True}


def test_visible_drops_without_wallet_hide_gated_drops(client, db):
    add_drop(db, "free")
    add_drop(db, "gated", min_token_required=1)
    body = client.get("/drops/visible").json()
    assert len(body["drops"]) == 1
    assert body["viewer"] == {"wallet_connected": False, "location_known": False}


def test_visible_drops_use_profile_wallet(client, db, oracle):
    oracle.balances[WALLET_A.lower()] = 2 * ONE_GHOX
    update_wallet_address(db, "u1", WALLET_A)
    add_drop(db, "gated", min_token_required=1)
    body = client.get("/drops/visible", headers=as_user("u1")).json()
    assert len(body["drops"]) == 1
    assert oracle.calls == [WALLET_A]


def test_rpc_failure_keeps_gated_drops_hidden(client, db, oracle):
    oracle.failing.add(WALLET_A.lower())
    add_drop(db, "free")
    add_drop(db, "gated", min_token_required=1)
    body = client.get("/drops/visible", params={"wallet": WALLET_A}).json()
    assert len(body["drops"]) == 1


def test_position_needs_both_coordinates(client):
    resp = client.get("/drops/visible", params={"lat": 40.7})
    assert resp.status_code == 422
    assert resp.json()["detail"]["error"] == "invalid_position"


def test_bad_wallet_query_is_422(client):
    resp = client.get("/drops/visible", params={"wallet": "0x123"})
    assert resp.status_code == 422


def test_map_drops(client, db):
    placed = add_drop(db, "placed", latitude=40.72, longitude=-74.0)
    add_drop(db, "unplaced")
    add_drop(db, "gated", latitude=40.72, longitude=-74.0, min_token_required=10)

    body = client.get("/drops/map", params=NYC).json()
    assert [d["id"] for d in body["drops"]] == [placed.id]
    assert body["token_gated_hidden"] == 1

    only = client.get("/drops/map", params={"drop_id": placed.id}).json()
    assert [d["id"] for d in only["drops"]] == [placed.id]
    assert client.get("/drops/map", params={"drop_id": 9999}).json()["drops"] == []


# --- claims ------------------------------------------------------------------


def test_scan_requires_sign_in(client, db):
    add_drop(db, "ghost-1")
    resp = client.post("/claims/scan", json={"drop_code": "ghost-1"})
    assert resp.status_code == 401


def test_scan_and_list_my_claims(client, db):
    add_drop(db, "ghost-1", title="Harbor Ghost", prize="50 GHOX")
    resp = client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1"))
    assert resp.status_code == 201
    body = resp.json()
    assert body["claim"]["status"] == "pending"
    assert body["claim"]["drop"]["title"] == "Harbor Ghost"
    assert "pending review" in body["message"]

    claims = client.get("/claims/me", headers=as_user("u1")).json()["claims"]
    assert [c["drop"]["title"] for c in claims] == ["Harbor Ghost"]
    assert client.get("/claims/me", headers=as_user("u2")).json()["claims"] == []


def test_scan_rejections_map_to_status_codes(client, db):
    add_drop(db, "ghost-1")
    add_drop(db, "old", expires_at=hours_from_now(-2))

    invalid = client.post("/claims/scan", json={"drop_code": "nope"}, headers=as_user("u1"))
    assert invalid.status_code == 404
    assert invalid.json()["detail"]["error"] == "invalid_code"

    expired = client.post("/claims/scan", json={"drop_code": "old"}, headers=as_user("u1"))
    assert expired.status_code == 410
    assert expired.json()["detail"]["error"] == "expired"

    assert client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1")).status_code == 201
    duplicate = client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1"))
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == {
        "error": "duplicate",
        "message": "You have already claimed this ghost drop.",
    }


def test_scan_wallet_missing_when_required(client, db, monkeypatch):
    monkeypatch.setattr(settings, "require_wallet_for_claim", True)
    add_drop(db, "ghost-1")
    resp = client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1"))
    assert resp.status_code == 422
    assert resp.json()["detail"]["error"] == "wallet_missing"


def test_first_claimant_wins_over_http(client, db, monkeypatch):
    monkeypatch.setattr(settings, "claim_policy", "first_claimant_wins")
    add_drop(db, "ghost-1")
    assert client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1")).status_code == 201
    resp = client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u2"))
    assert resp.status_code == 409
    assert "another hunter" in resp.json()["detail"]["message"]


# --- profile and wallet ------------------------------------------------------


def test_profile_and_wallet(client, oracle):
    oracle.balances[WALLET_B.lower()] = 1500 * 10**15
    assert client.get("/profile/me", headers=as_user("u1")).json()["wallet_address"] is None

    saved = client.put("/profile/me/wallet", json={"wallet_address": WALLET_B}, headers=as_user("u1"))
    assert saved.status_code == 200
    assert saved.json()["wallet_address"] == WALLET_B

    bad = client.put("/profile/me/wallet", json={"wallet_address": "nope"}, headers=as_user("u1"))
    assert bad.status_code == 422
    assert bad.json()["detail"]["error"] == "invalid_wallet_address"

    balance = client.get("/wallet/balance", headers=as_user("u1")).json()
    assert balance == {"wallet_address": WALLET_B, "balance": str(1500 * 10**15), "tokens": "1.5"}


def test_wallet_balance_without_wallet(client):
    assert client.get("/wallet/balance").json() == {"wallet_address": None, "balance": None, "tokens": None}


# --- auth --------------------------------------------------------------------


def _token(sub, secret="test-secret", **claims):
    payload = {
        "sub": sub,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def test_jwt_auth(client, monkeypatch):
    monkeypatch.setattr(settings, "auth_jwt_secret", "test-secret")
    ok = client.get("/profile/me", headers={"Authorization": f"Bearer {_token('u-jwt')}"})
    assert ok.status_code == 200
    assert ok.json()["user_id"] == "u-jwt"

    forged = client.get("/profile/me", headers={"Authorization": f"Bearer {_token('u-jwt', secret='other')}"})
    assert forged.status_code == 401

    expired = _token("u-jwt", exp=datetime.now(timezone.utc) - timedelta(minutes=1))
    assert client.get("/profile/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    # With a secret configured the dev header is ignored
    assert client.get("/profile/me", headers=as_user("u1")).status_code == 401


# --- admin -------------------------------------------------------------------


def test_admin_routes_need_admin_role(client, admin_id):
    assert client.get("/admin/drops").status_code == 401
    assert client.get("/admin/drops", headers=as_user("u1")).status_code == 403
    assert client.get("/admin/drops", headers=as_user(admin_id)).status_code == 200
    assert client.get("/admin/me", headers=as_user("u1")).json()["is_admin"] is False
    assert client.get("/admin/me", headers=as_user(admin_id)).json()["is_admin"] is True


def test_admin_creates_lists_and_deletes_drops(client, db, admin_id):
    headers = as_user(admin_id)
    code = client.get("/admin/drops/new-code", headers=headers).json()["drop_code"]
    resp = client.post(
        "/admin/drops",
        json={
            "title": "Pier Ghost",
            "prize": "25 GHOX",
            "drop_code": code,
            "latitude": 40.7,
            "longitude": -74.0,
            "expires_at": "2030-01-01T00:00:00",
            "min_token_required": "250",
        },
        headers=headers,
    )
    assert resp.status_code == 201
    drop = resp.json()["drop"]
    assert drop["drop_code"] == code
    assert drop["created_by"] == admin_id
    assert drop["min_token_required"] == "250"
    assert drop["expires_at"].startswith("2030-01-01T00:00:00")

    again = client.post("/admin/drops", json={"title": "x", "prize": "y", "drop_code": code}, headers=headers)
    assert again.status_code == 409
    assert again.json()["detail"]["error"] == "drop_code_taken"

    missing = client.post("/admin/drops", json={"title": " ", "prize": "y"}, headers=headers)
    assert missing.status_code == 422

    listed = client.get("/admin/drops", headers=headers).json()["drops"]
    assert [d["drop_code"] for d in listed] == [code]

    assert client.delete(f"/admin/drops/{drop['id']}", headers=headers).json() == {"ok": True, "id": drop["id"]}
    assert client.delete(f"/admin/drops/{drop['id']}", headers=headers).status_code == 404


def test_admin_reviews_claims(client, db, admin_id):
    add_drop(db, "ghost-1")
    client.post("/claims/scan", json={"drop_code": "ghost-1"}, headers=as_user("u1"))
    [claim] = client.get("/admin/claims", headers=as_user(admin_id)).json()["claims"]
    assert claim["user_id"] == "u1"
    assert claim["status"] == "pending"

    url = f"/admin/claims/{claim['id']}"
    not_payable = client.patch(url, json={"status": "paid"}, headers=as_user(admin_id))
    assert not_payable.status_code == 409
    assert not_payable.json()["detail"]["error"] == "wallet_missing"

    update_wallet_address(db, "u1", WALLET_A)
    paid = client.patch(url, json={"status": "paid", "admin_notes": "sent"}, headers=as_user(admin_id))
    assert paid.status_code == 200
    assert paid.json()["claim"]["status"] == "paid"
    assert db.get(Claim, claim["id"]).wallet_address == WALLET_A

    assert client.patch(url, json={"status": "approved"}, headers=as_user(admin_id)).status_code == 422
    assert client.patch("/admin/claims/999", json={"status": "paid"}, headers=as_user(admin_id)).status_code == 404
    assert client.patch(url, json={"status": "rejected"}, headers=as_user("u1")).status_code == 403


def test_token_gate_follows_configured_decimals(client, db, oracle, monkeypatch):
    monkeypatch.setattr(settings, "token_decimals", 6)
    oracle.balances[WALLET_A.lower()] = 500 * 10**6
    add_drop(db, "gated", latitude=40.72, longitude=-74.0, min_token_required=500)

    balance = client.get("/wallet/balance", params={"wallet": WALLET_A}).json()
    assert balance["tokens"] == "500"

    visible = client.get("/drops/visible", params={"wallet": WALLET_A}).json()["drops"]
    on_map = client.get("/drops/map", params={"wallet": WALLET_A}).json()
    assert len(visible) == 1
    assert len(on_map["drops"]) == 1
    assert on_map["token_gated_hidden"] == 0
