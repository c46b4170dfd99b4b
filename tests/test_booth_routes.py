"""Tests for the kiosk HTTP surface."""

import asyncio
import logging

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from photobooth.api.dependencies import get_booth_service
from photobooth.api.routes.websocket import websocket_endpoint
from photobooth.models.session import Screen


@pytest.fixture
def booth(make_booth):
    return make_booth()


@pytest.fixture
def client(client_app, booth) -> TestClient:
    client_app.dependency_overrides[get_booth_service] = lambda: booth
    return TestClient(client_app)


def test_state_reports_idle_session(client) -> None:
    response = client.get("/api/booth/state")

    assert response.status_code == 200
    body = response.json()
    assert body["screen"] == "idle"
    assert body["shot_index"] == 0
    assert body["total_shots"] == 3
    assert body["countdown_text"] == ""
    assert body["qr_ready"] is False


def test_config_is_served_in_camel_case(client) -> None:
    body = client.get("/api/booth/config").json()

    assert body["siteName"] == "Test Booth"
    assert body["capture"]["photoWidth"] == 100


def test_config_unavailable_before_startup(client, booth) -> None:
    booth.config = None

    assert client.get("/api/booth/config").status_code == 503


def test_trigger_without_camera_is_not_accepted(client) -> None:
    response = client.post("/api/booth/trigger")

    assert response.status_code == 200
    assert response.json() == {"accepted": False}


def test_click_outside_template_screen_conflicts(client) -> None:
    assert client.post("/api/booth/templates/0/click").status_code == 409


def test_click_unknown_template_not_found(client, booth) -> None:
    booth.session.screen = Screen.template

    assert client.post("/api/booth/templates/0/click").status_code == 404


def test_qr_and_collage_not_ready(client) -> None:
    assert client.get("/api/booth/qr.png").status_code == 404
    assert client.get("/api/booth/collage.jpg").status_code == 404


def test_qr_served_as_png(client, booth) -> None:
    booth.qr.render("http://example.com/x.jpg")

    response = client.get("/api/booth/qr.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


def test_reset_returns_idle_state(client, booth) -> None:
    booth.session.shot_index = 2
    booth.session.countdown_text = "1"

    body = client.post("/api/booth/reset").json()

    assert body["screen"] == "idle"
    assert body["shot_index"] == 0
    assert body["countdown_text"] == ""


def test_templates_empty_before_capture(client) -> None:
    assert client.get("/api/booth/templates").json() == []


def test_index_page(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "/static/js/booth.js" in response.text


def test_health(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"


class FakeWebSocket:
    def __init__(self, fail_send: bool = False):
        self.fail_send = fail_send
        self.accepted = False
        self.sent = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, text: str) -> None:
        if self.fail_send:
            raise WebSocketDisconnect(code=1001)
        self.sent.append(text)


def test_preview_socket_logs_unexpected_errors(booth, caplog) -> None:
    def broken_frame():
        raise RuntimeError("encoder crashed")

    booth.preview_frame = broken_frame
    websocket = FakeWebSocket()

    with caplog.at_level(logging.ERROR, logger="photobooth.api.routes.websocket"):
        asyncio.run(websocket_endpoint(websocket, booth=booth))

    assert websocket.accepted
    assert websocket.sent == []
    assert "WebSocket error" in caplog.text
    assert "encoder crashed" in caplog.text


def test_preview_socket_stops_on_disconnect(booth, caplog) -> None:
    booth.preview_frame = lambda: "ZmFrZQ=="
    websocket = FakeWebSocket(fail_send=True)

    with caplog.at_level(logging.INFO, logger="photobooth.api.routes.websocket"):
        asyncio.run(websocket_endpoint(websocket, booth=booth))

    assert "Preview client disconnected" in caplog.text
    assert "WebSocket error" not in caplog.text
