"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import pytest

from carequest.observability import client as client_module
from carequest.observability import tracing


class _DummyTrace:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.errors = []
        self.ended = False

    def update(self, **kwargs):
        self.errors.append(kwargs.get("error_info"))

    def end(self):
        self.ended = True


class _DummyOpik:
    def __init__(self, *args, **kwargs):
        self.init_kwargs = kwargs
        self.traces = []

    def trace(self, **kwargs):
        trace = _DummyTrace(**kwargs)
        self.traces.append(trace)
        return trace


@pytest.fixture()
def opik_enabled(monkeypatch):
    monkeypatch.setattr(client_module, "Opik", _DummyOpik)
    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", "test-key")
    client_module.reset_opik_client()
    yield
    client_module.reset_opik_client()


def test_client_disabled_by_default(monkeypatch) -> None:
    monkeypatch.setattr(client_module.settings, "opik_enabled", False)
    client_module.reset_opik_client()

    assert client_module.get_opik_client() is None
    with tracing.trace("noop") as span:
        assert span is None


def test_enabled_without_key_stays_disabled(monkeypatch) -> None:
    monkeypatch.setattr(client_module, "Opik", _DummyOpik)
    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", None)
    client_module.reset_opik_client()

    assert client_module.get_opik_client() is None
    client_module.reset_opik_client()


def test_trace_records_errors_and_closes(opik_enabled) -> None:
    with pytest.raises(RuntimeError):
        with tracing.trace("generation.activity_guide", metadata={"tier": 1}) as span:
            raise RuntimeError("provider down")

    assert span.ended is True
    assert span.errors[0]["message"] == "provider down"
    assert client_module.get_opik_client().init_kwargs["project_name"] == client_module.settings.opik_project
