import asyncio

import pytest
from fastapi.testclient import TestClient
from shipchat.api.message import MessageRequest, create_session, handle_message
from shipchat.storage.memory import load_session

def _new_session(client: TestClient) -> str:
    res = client.post("/v1/session")
    assert res.status_code == 200
    return res.json()["session_id"]

class TestApiMessage:

    def test_health_check(self, client: TestClient):
        res = client.get("/v1/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"

    def test_create_session_returns_welcome(self, client: TestClient):
        res = client.post("/v1/session")
        data = res.json()
        assert data["session_id"]
        assert data["reply"]["state"] == "welcome"
        assert "Welcome" in data["reply"]["message"]

    def test_message_advances_state(self, client: TestClient):
        sid = _new_session(client)
        res = client.post("/v1/message", json={"session_id": sid, "message": "yes"})

        assert res.status_code == 200
        data = res.json()
        assert data["reply"]["state"] == "asking_package_type"
        assert data["reply"]["needs_input"] is True
        assert data["signals"] == []

    def test_unknown_session(self, client: TestClient):
        res = client.post("/v1/message", json={"session_id": "nope", "message": "yes"})
        assert res.status_code == 404

    def test_malformed_request(self, client: TestClient):
        res = client.post("/v1/message", json={"message": "yes"})
        assert res.status_code == 422

    def test_signals_are_returned_once(self, client: TestClient):
        sid = _new_session(client)
        res = client.post("/v1/message", json={"session_id": sid, "message": "pause"})
        assert res.json()["signals"] == ["pause_requested"]
        assert res.json()["reply"]["needs_input"] is False

        res = client.post("/v1/message", json={"session_id": sid, "message": "help"})
        assert res.json()["signals"] == []

    def test_records_endpoint(self, client: TestClient):
        sid = _new_session(client)
        for message in ["yes", "box", "10 x 5 x 3 cm"]:
            client.post("/v1/message", json={"session_id": sid, "message": message})

        res = client.get(f"/v1/session/{sid}/records")
        assert res.status_code == 200
        data = res.json()
        assert data["state"] == "asking_weight"
        assert data["records"] == []
        assert data["current_record"]["package_type"] == "box"
        assert data["current_record"]["weight"] is None

    def test_records_unknown_session(self, client: TestClient):
        assert client.get("/v1/session/nope/records").status_code == 404

    def test_full_flow_over_http(self, client: TestClient):
        sid = _new_session(client)
        messages = [
            "yes", "envelope", "30 x 20 x 1 cm", "200 g", "no", "standard",
            "1 Yonge St, Toronto, ON, M5E 1W7, Canada",
            "skip", "skip", "skip", "skip", "skip", "yes", "finish",
        ]
        data = None
        for message in messages:
            data = client.post("/v1/message", json={"session_id": sid, "message": message}).json()

        assert data["reply"]["state"] == "completed"
        assert data["signals"] == ["finish_requested"]

        records = client.get(f"/v1/session/{sid}/records").json()["records"]
        assert len(records) == 1
        assert records[0]["destination"]["country"] == "Canada"


class TestTurnSerialization:

    @pytest.mark.asyncio
    async def test_concurrent_turns_do_not_interleave(self):
        session = await create_session()
        sid = session.session_id

        await handle_message(MessageRequest(session_id=sid, message="yes"))
        results = await asyncio.gather(
            handle_message(MessageRequest(session_id=sid, message="big")),
            handle_message(MessageRequest(session_id=sid, message="big")),
        )

        assert all(r.reply.state.value == "asking_package_type" for r in results)
        history = load_session(sid).get_history()
        # welcome, then one user/bot pair per turn
        assert [entry.role for entry in history[1:]] == ["user", "bot"] * 3
