from __future__ import annotations

import json

import pytest

from invoke_action import build_payload, print_envelope


def test_inline_action_is_wrapped():
    payload = build_payload('{"type": "click", "selector": "#submit"}')
    assert payload == {"action": {"type": "click", "selector": "#submit"}}


def test_inline_list_is_wrapped():
    payload = build_payload('[{"type": "new_page"}, {"type": "list_pages"}]')
    assert payload == {"action": [{"type": "new_page"}, {"type": "list_pages"}]}


def test_full_request_is_kept(tmp_path):
    request = {"action": {"type": "focus", "selector": "#name"}}
    path = tmp_path / "actions.json"
    path.write_text(json.dumps(request), encoding="utf-8")

    assert build_payload(action_file=str(path)) == request


def test_missing_action_is_an_error():
    with pytest.raises(ValueError):
        build_payload()


def test_print_envelope(capsys):
    print_envelope(
        {
            "status": "error",
            "code": "NO_MATCH",
            "content": [{"text": 'No options matched "red"'}, {"json": {"page_id": "page=1"}}],
        }
    )

    out = capsys.readouterr().out
    assert "✗ error [NO_MATCH]" in out
    assert 'No options matched "red"' in out
    assert '"page_id": "page=1"' in out
