from app.services import capture_guard


def test_snapshot_lifecycle(client, admin_headers):
    created = client.post("/api/snapshot", headers=admin_headers)

    assert created.status_code == 200
    body = created.json()
    assert body["ok"] is True
    snapshot_id = body["id"]
    assert body["snapshot"]["image"] is None

    listed = client.get("/api/past").json()["data"]
    assert [item["id"] for item in listed] == [snapshot_id]
    assert listed[0]["entryCount"] == 3
    assert listed[0]["hasImage"] is False

    detail = client.get(f"/api/past/{snapshot_id}").json()
    assert [row["username"] for row in detail["data"]] == ["bob", "alice", "erin"]
    assert all("payout" in row for row in detail["data"])

    image_url = "https://cdn.example.com/snap.png"
    attached = client.put(f"/api/past/{snapshot_id}/image", json={"image": image_url}, headers=admin_headers)
    assert attached.status_code == 200
    assert attached.json()["image"] == image_url

    conflict = client.put(
        f"/api/past/{snapshot_id}/image",
        json={"image": "https://cdn.example.com/other.png"},
        headers=admin_headers,
    )
    assert conflict.status_code == 409


def test_unknown_snapshot_is_404(client, admin_headers):
    assert client.get("/api/past/missing").status_code == 404
    r = client.put("/api/past/missing/image", json={"image": "https://cdn.example.com/a.png"}, headers=admin_headers)
    assert r.status_code == 404


def test_empty_image_is_rejected(client, admin_headers):
    r = client.put("/api/past/any/image", json={"image": ""}, headers=admin_headers)

    assert r.status_code == 422


def test_snapshot_while_capture_running_is_429(client, admin_headers):
    assert capture_guard.try_acquire("test")
    try:
        r = client.post("/api/snapshot", headers=admin_headers)
    finally:
        capture_guard.release()

    assert r.status_code == 429
    assert client.get("/api/past").json()["data"] == []


def test_snapshot_upstream_failure_is_502(client, admin_headers, fake_client):
    from app.core.errors import UpstreamError

    fake_client.error = UpstreamError("RAINBET_API_KEY missing")

    r = client.post("/api/snapshot", headers=admin_headers)

    assert r.status_code == 502
    assert client.get("/api/past").json()["data"] == []
