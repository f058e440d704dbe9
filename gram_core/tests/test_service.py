from gram_core.api import service


class FakeProvider:
    name = "fake"

    def generate(self, req):
        if req.model == "gram-image":
            return {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": "aW1n"}}]}}]}
        return {"candidates": [{"content": {"parts": [{"text": "নমস্কার!"}]}}]}


def _reset(monkeypatch):
    monkeypatch.setattr(service, "_store", None)
    monkeypatch.setattr(service, "_agent", None)
    monkeypatch.setattr(service, "create_provider", lambda *a, **kw: FakeProvider())


def test_run_chat_and_history(monkeypatch):
    _reset(monkeypatch)
    reply = service.run_chat("হ্যালো")
    assert reply["ok"] is True
    assert reply["model_message"]["parts"] == [{"text": "নমস্কার!"}]

    service.run_chat("একটি নৌকার ছবি আঁকো")
    messages = service.get_conversation_messages()
    assert [m["role"] for m in messages] == ["user", "model", "user", "model"]

    history = service.list_history()
    assert len(history) == 2
    assert history[1]["has_generated_image"] is True

    service.clear_conversation()
    assert service.get_conversation_messages() == []


def test_run_chat_reports_errors(monkeypatch):
    _reset(monkeypatch)
    reply = service.run_chat("   ")
    assert reply["ok"] is False
    assert reply["error"]["code"] == "INVALID_REQUEST"
    assert service.get_conversation_messages() == []
