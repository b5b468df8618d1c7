"""Tests for the streaming relay endpoint."""
import pytest

from greenmap.prompts import get_system_prompt


class TestChatRelay:
    """Tests for POST /api/chat."""

    def test_streams_fragments_verbatim(self, fake_llm, relay_client):
        llm = fake_llm(["Hi", " there", "!"])
        client = relay_client(llm)

        response = client.post("/api/chat", json={"message": "Hello", "history": []})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "charset=utf-8" in response.headers["content-type"]
        assert response.text == "Hi there!"

    def test_fragments_arrive_in_order(self, fake_llm, relay_client):
        fragments = ["Plant ", "native ", "species ", "🌳"]
        client = relay_client(fake_llm(fragments))

        with client.stream("POST", "/api/chat", json={"message": "Tips?"}) as response:
            body = b"".join(response.iter_bytes())

        assert body.decode("utf-8") == "".join(fragments)

    def test_upstream_turns(self, fake_llm, relay_client):
        llm = fake_llm(["ok"])
        client = relay_client(llm)

        client.post("/api/chat", json={
            "message": "And recycling?",
            "history": [
                {"sender": "user", "text": "Hi"},
                {"sender": "bot", "text": "Hello! How can I help?"},
            ],
        })

        turns = llm.last_turns
        assert [(t.role, t.content) for t in turns] == [
            ("system", get_system_prompt()),
            ("user", "Hi"),
            ("assistant", "Hello! How can I help?"),
            ("user", "And recycling?"),
        ]
        assert llm.calls[-1]["temperature"] == pytest.approx(0.7)
        assert llm.calls[-1]["top_p"] == pytest.approx(0.95)

    def test_empty_upstream_gives_empty_body(self, fake_llm, relay_client):
        client = relay_client(fake_llm([]))

        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 200
        assert response.text == ""

    def test_error_before_output_is_502(self, fake_llm, relay_client):
        llm = fake_llm(fail_before=RuntimeError("quota exceeded"))
        client = relay_client(llm)

        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 502
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"error": "quota exceeded"}
        # Only the first pull happened and the upstream stream was released
        assert llm.streams[0].pulled == 1
        assert llm.streams[0].closed is True

    def test_error_mid_stream_ends_body(self, fake_llm, relay_client):
        client = relay_client(fake_llm(["Recycle ", "paper ", "and"], fail_after=2))

        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 200
        assert response.text == "Recycle paper "

    def test_get_not_allowed(self, fake_llm, relay_client):
        llm = fake_llm(["x"])
        client = relay_client(llm)

        response = client.get("/api/chat")

        assert response.status_code == 405
        assert "POST" in response.headers["allow"]
        assert response.json() == {"error": "Method Not Allowed"}
        assert llm.calls == []
        assert llm.streams == []

    def test_unconfigured_llm_is_503(self, relay_client):
        response = relay_client(None).post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 503
        assert "GEMINI_API_KEY" in response.json()["error"]

    @pytest.mark.parametrize("body", [
        {"message": "   "},
        {"history": []},
        {"message": "Hi", "history": [{"sender": "robot", "text": "x"}]},
    ])
    def test_invalid_body_is_422(self, fake_llm, relay_client, body):
        llm = fake_llm(["x"])

        response = relay_client(llm).post("/api/chat", json=body)

        assert response.status_code == 422
        assert llm.calls == []


class TestHealth:
    """Tests for GET /api/health."""

    def test_reports_llm_configured(self, fake_llm, relay_client):
        response = relay_client(fake_llm()).get("/api/health")
        assert response.json() == {"status": "ok", "llm": True}

    def test_reports_llm_missing(self, relay_client):
        response = relay_client(None).get("/api/health")
        assert response.json() == {"status": "ok", "llm": False}

    def test_lifespan_closes_provider(self, fake_llm, relay_client):
        llm = fake_llm()
        with relay_client(llm) as client:
            client.get("/api/health")
        assert llm.closed is True
