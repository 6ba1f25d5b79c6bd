"""
问答 API 测试
"""
from types import SimpleNamespace

import httpx
from openai import APITimeoutError


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestChatAPI:
    """问答 API 测试"""

    def test_chat_then_history(self, api_client):
        response = api_client.post("/api/chat", json={"question": "Why bent?", "moleculeId": 1})
        assert response.status_code == 200
        chat = response.json()
        assert chat == {
            "id": 1,
            "question": "Why bent?",
            "answer": "Water is bent because of its lone pairs.",
            "moleculeId": 1,
        }

        history = api_client.get("/api/chat/1").json()
        assert history == [chat]

    def test_water_lookup_chat_and_history_flow(self, api_client, openai_client):
        molecule = api_client.get("/api/molecules/name/water").json()
        assert molecule["id"] == 1
        assert len(molecule["structure"]["atoms"]) == 3
        assert api_client.get(f"/api/chat/{molecule['id']}").json() == []

        response = api_client.post(
            "/api/chat", json={"question": "Why is water bent?", "moleculeId": molecule["id"]}
        )
        assert response.status_code == 200
        assert response.json()["answer"] == "Water is bent because of its lone pairs."
        openai_client.chat.completions.create.assert_awaited_once()

        history = api_client.get(f"/api/chat/{molecule['id']}").json()
        assert len(history) == 1
        assert history[0]["question"] == "Why is water bent?"
        assert history[0]["moleculeId"] == 1

    def test_history_keeps_order(self, api_client):
        for question in ("first", "second", "third"):
            api_client.post("/api/chat", json={"question": question, "moleculeId": 2})
        history = api_client.get("/api/chat/2").json()
        assert [c["question"] for c in history] == ["first", "second", "third"]
        assert [c["id"] for c in history] == [1, 2, 3]

    def test_empty_history(self, api_client):
        response = api_client.get("/api/chat/1")
        assert response.status_code == 200
        assert response.json() == []

    def test_unknown_molecule(self, api_client, openai_client):
        response = api_client.post("/api/chat", json={"question": "?", "moleculeId": 99})
        assert response.status_code == 500
        assert response.json()["code"] == 50002
        openai_client.chat.completions.create.assert_not_called()

    def test_missing_molecule_id(self, api_client):
        response = api_client.post("/api/chat", json={"question": "?"})
        assert response.status_code == 500
        assert response.json()["error"]["detail"] == "moleculeId is required"

    def test_empty_question(self, api_client):
        response = api_client.post("/api/chat", json={"question": "", "moleculeId": 1})
        assert response.status_code == 400

    def test_unparsable_reply_uses_fallback(self, api_client, openai_client):
        openai_client.chat.completions.create.return_value = completion("not json")
        response = api_client.post("/api/chat", json={"question": "?", "moleculeId": 1})
        assert response.status_code == 200
        assert response.json()["answer"] == "No answer provided"

    def test_upstream_failure(self, api_client, openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        openai_client.chat.completions.create.side_effect = APITimeoutError(request=request)

        response = api_client.post("/api/chat", json={"question": "?", "moleculeId": 1})
        assert response.status_code == 500
        body = response.json()
        assert body["code"] == 50001
        assert body["message"] == "Failed to get response from AI"
        assert api_client.get("/api/chat/1").json() == []
