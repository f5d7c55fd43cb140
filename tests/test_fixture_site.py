from __future__ import annotations

import importlib.util
import threading
from pathlib import Path

import httpx

SERVE_PATH = Path(__file__).resolve().parent.parent / "test-websites" / "serve.py"


def _load_serve():
    spec = importlib.util.spec_from_file_location("fixture_serve", SERVE_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_interaction_form_is_discovered():
    serve = _load_serve()
    assert "interaction-form" in serve.discover_sites()


def test_fixture_server_serves_form_uncached():
    serve = _load_serve()
    server = serve.make_server("interaction-form", 0)
    threading.Thread(target=server.serve_forever, daemon=True).start()
    try:
        port = server.server_address[1]
        response = httpx.get(f"http://127.0.0.1:{port}/")
    finally:
        server.shutdown()
        server.server_close()

    assert response.status_code == 200
    assert 'id="color"' in response.text
    assert response.headers["cache-control"] == "no-store"
