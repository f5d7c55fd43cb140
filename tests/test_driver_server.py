from __future__ import annotations

from fastapi.testclient import TestClient

from driver_server import create_app
from fakes import FakeDriver


class _RecordingDriver:
    def __init__(self) -> None:
        self.bodies = []
        self.shut_down = False

    def run(self, body):
        self.bodies.append(body)
        return {"status": "success", "content": [{"text": "ok"}]}

    def shutdown(self):
        self.shut_down = True


def test_ping():
    with TestClient(create_app(driver=_RecordingDriver())) as client:
        response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_actions_are_passed_through_and_driver_shut_down():
    driver = _RecordingDriver()
    body = {"action": {"type": "click", "selector": "#submit"}}

    with TestClient(create_app(driver=driver)) as client:
        response = client.post("/actions", json=body)

    assert response.json() == {"status": "success", "content": [{"text": "ok"}]}
    assert driver.bodies == [body]
    assert driver.shut_down


def test_actions_end_to_end_with_session():
    driver = FakeDriver()

    with TestClient(create_app(driver=driver)) as client:
        opened = client.post("/actions", json={"action": {"type": "new_page", "url": "http://localhost:8001/"}}).json()
        filled = client.post(
            "/actions", json={"action": {"type": "fill_text", "selector": "#name", "text": "Ada"}}
        ).json()
        bad = client.post("/actions", json={"action": {"type": "fill_text"}}).json()

    assert opened["status"] == "success"
    assert filled == {"status": "success", "content": [{"text": "Fill text: Ada"}]}
    assert bad["status"] == "error"
    assert bad["code"] == "MALFORMED_ARGUMENT"
    assert driver.launched[0].closed
