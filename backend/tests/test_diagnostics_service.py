from types import SimpleNamespace

import pytest

from donphone.services import diagnostics_service
from donphone.services.diagnostics_service import DiagnosticsError, DiagnosticsUnavailable
from donphone.validation import ValidationError


class FakeMessages:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def create(self, **params):
        self.calls.append(params)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


def _fake_client(monkeypatch, text):
    messages = FakeMessages(text)
    monkeypatch.setattr(diagnostics_service, "_client", lambda: SimpleNamespace(messages=messages))
    return messages


def test_parses_fenced_json_answer(app, monkeypatch):
    messages = _fake_client(monkeypatch, """```json
{"suggestedSolutions": ["Trocar conector de carga", "Limpar contatos"],
 "partsNeeded": ["Conector USB-C"],
 "estimatedRepairTime": "1 a 2 horas"}
```""")

    result = diagnostics_service.suggest_repair_solutions(
        phone_model="Galaxy A52", problem_description="Não carrega",
    )

    assert result == {
        "suggestedSolutions": ["Trocar conector de carga", "Limpar contatos"],
        "partsNeeded": ["Conector USB-C"],
        "estimatedRepairTime": "1 a 2 horas",
    }
    params = messages.calls[0]
    assert params["model"] == app.config["AI_MODEL"]
    assert "Galaxy A52" in params["messages"][0]["content"]


def test_missing_lists_become_empty(app, monkeypatch):
    _fake_client(monkeypatch, '{"suggestedSolutions": "Reinstalar sistema"}')

    result = diagnostics_service.suggest_repair_solutions(phone_model="X", problem_description="Lento")

    assert result["suggestedSolutions"] == ["Reinstalar sistema"]
    assert result["partsNeeded"] == []
    assert result["estimatedRepairTime"] == ""


def test_non_json_answer_is_an_error(app, monkeypatch):
    _fake_client(monkeypatch, "Desculpe, não sei.")

    with pytest.raises(DiagnosticsError):
        diagnostics_service.suggest_repair_solutions(phone_model="X", problem_description="Y")


def test_inputs_are_required(app):
    with pytest.raises(ValidationError):
        diagnostics_service.suggest_repair_solutions(phone_model="  ", problem_description="Tela")


def test_unavailable_without_api_key(app, config_override):
    config_override(ANTHROPIC_API_KEY=None)

    with pytest.raises(DiagnosticsUnavailable):
        diagnostics_service.suggest_repair_solutions(phone_model="X", problem_description="Y")
