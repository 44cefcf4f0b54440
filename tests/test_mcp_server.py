"""Tests for the MCP tool wrappers around the backend API."""

import importlib.util
import json
from pathlib import Path

import pytest

SERVER_PATH = Path(__file__).resolve().parent.parent / "mcp-server" / "server.py"


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch):
    spec = importlib.util.spec_from_file_location("autolayout_mcp_server", SERVER_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    calls: list[tuple[str, str, dict]] = []

    def fake_request(method: str, endpoint: str, **kwargs) -> dict:
        calls.append((method, endpoint, kwargs.get("json")))
        return {"success": True}

    monkeypatch.setattr(module, "api_request", fake_request)
    module.calls = calls
    return module


class TestLayoutTools:

    def test_compute_builds_options(self, server) -> None:
        out = server.layout_compute(
            nodes='[{"id": "a"}, {"id": "b"}]',
            connections='[{"source": "a", "target": "b"}]',
            algorithm="layered",
            direction="LR",
            seed=7,
        )
        assert json.loads(out) == {"success": True}

        method, endpoint, body = server.calls[0]
        assert (method, endpoint) == ("POST", "/layout")
        assert body["nodes"] == [{"id": "a"}, {"id": "b"}]
        assert body["options"]["algorithm"] == "layered"
        assert body["options"]["layered"] == {"direction": "LR"}
        assert body["options"]["tree"] == {"direction": "LR"}
        assert body["options"]["force"] == {"seed": 7}

    def test_compute_defaults(self, server) -> None:
        server.layout_compute(nodes='[{"id": "a"}]')
        _, _, body = server.calls[0]
        assert body["connections"] == []
        assert body["options"] == {"algorithm": "auto"}

    def test_invalid_json(self, server) -> None:
        with pytest.raises(ValueError, match="Invalid JSON"):
            server.layout_compute(nodes="[{")

    def test_invalid_node_sizes_json(self, server) -> None:
        with pytest.raises(ValueError, match="Invalid JSON"):
            server.layout_compute(nodes='[{"id": "a"}]', node_sizes="{bad")
        assert server.calls == []

    def test_compute_forwards_node_sizes(self, server) -> None:
        server.layout_compute(nodes='[{"id": "a"}]', node_sizes='{"a": {"width": 140, "height": 80}}')
        _, _, body = server.calls[0]
        assert body["options"]["node_sizes"] == {"a": {"width": 140, "height": 80}}

    def test_validate_forwards_node_sizes(self, server) -> None:
        server.layout_validate(nodes='[{"id": "a"}]', node_sizes='{"ghost": {"width": 10, "height": 10}}')
        _, endpoint, body = server.calls[0]
        assert endpoint == "/validate"
        assert body["options"] == {"node_sizes": {"ghost": {"width": 10, "height": 10}}}

    def test_analyze_and_validate(self, server) -> None:
        server.layout_analyze(nodes='[{"id": "a"}]')
        server.layout_validate(nodes='[{"id": "a"}]', connections="[]")
        assert [c[1] for c in server.calls] == ["/analyze", "/validate"]

    def test_health(self, server) -> None:
        server.layout_health()
        assert server.calls[0][:2] == ("GET", "/health")
