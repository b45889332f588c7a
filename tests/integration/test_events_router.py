"""Integration tests for the event ingestion endpoint."""

import json


class TestEventsRouter:
    async def test_ingest_batch(self, client, storage):
        resp = await client.post("/api/events", json={"events": [
            {"session_id": "s1", "event_type": "page_view", "device_type": "mobile"},
            {"session_id": "s1", "event_type": "upload_start"},
        ]}, headers={"user-agent": "pytest-agent", "x-forwarded-for": "203.0.113.7, 10.0.0.1"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

        events = await storage.list_events()
        assert len(events) == 2
        assert all(e.user_agent == "pytest-agent" for e in events)
        from sceneit_engine.common.security import hash_ip
        assert all(e.ip_hash == hash_ip("203.0.113.7") for e in events)

    async def test_text_plain_beacon(self, client, storage):
        body = json.dumps({"events": [{"session_id": "s1", "event_type": "page_view"}]})
        resp = await client.post("/api/events", content=body, headers={"content-type": "text/plain"})
        assert resp.status_code == 200
        assert len(await storage.list_events()) == 1

    async def test_malformed_body_still_ok(self, client, storage):
        resp = await client.post("/api/events", content=b"{not json", headers={"content-type": "application/json"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        assert await storage.list_events() == []

    async def test_missing_events_key(self, client, storage):
        resp = await client.post("/api/events", json={"something": "else"})
        assert resp.status_code == 200
        assert await storage.list_events() == []

    async def test_batch_capped(self, client, storage):
        events = [{"session_id": "s1", "event_type": "page_view"} for _ in range(60)]
        resp = await client.post("/api/events", json={"events": events})
        assert resp.status_code == 200
        assert len(await storage.list_events()) == 50

    async def test_client_cannot_spoof_provenance(self, client, storage):
        await client.post("/api/events", json={"events": [
            {"session_id": "s1", "event_type": "page_view", "ip_hash": "spoofed"},
        ]})
        events = await storage.list_events()
        assert events[0].ip_hash != "spoofed"
