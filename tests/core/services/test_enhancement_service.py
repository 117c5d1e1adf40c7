from types import SimpleNamespace

import pytest

from otzaria_toolkit.core.services.enhancement_service import EnhancementError, EnhancementService


class RecordingModels:
    """Stands in for ``client.models`` and records every request."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate_content(self, *, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


def _service(models, **kwargs):
    return EnhancementService(client=SimpleNamespace(models=models), **kwargs)


def test_only_excerpt_is_sent_and_remainder_spliced():
    models = RecordingModels(reply="<h1>NEW</h1>")
    svc = _service(models, model="test-model", excerpt_chars=10)
    body = "<h1>old</h1><p>rest of the text</p>"
    assert svc.enhance(body) == "<h1>NEW</h1>" + body[10:]
    (call,) = models.calls
    assert call["model"] == "test-model"
    assert body[:10] in call["contents"]
    assert body[10:] not in call["contents"]
    assert call["config"].system_instruction


def test_empty_response_leaves_body():
    svc = _service(RecordingModels(reply=""))
    assert svc.enhance("<h1>x</h1>") == "<h1>x</h1>"


def test_remote_failure_raises_enhancement_error():
    svc = _service(RecordingModels(error=TimeoutError("slow")))
    with pytest.raises(EnhancementError, match="slow"):
        svc.enhance("<h1>x</h1>")


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OTZARIA_TEST_KEY", raising=False)
    svc = EnhancementService(api_key_env="OTZARIA_TEST_KEY")
    with pytest.raises(EnhancementError, match="OTZARIA_TEST_KEY"):
        svc.enhance("<h1>x</h1>")
