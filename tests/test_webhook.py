"""Tests for Telegram webhook handling."""

from fastapi.testclient import TestClient

from event_photos.api.app import create_app
from event_photos.domain.events import EventStatus
from event_photos.domain.sessions import SessionStep
from tests.conftest import (
    FakeMediaStore,
    FakeTelegramClient,
    InMemoryEventRepository,
    make_event,
)

ORGANIZER_ID = 123
CHAT_ID = 99


def _text_update(text: str, user_id: int = ORGANIZER_ID) -> dict[str, object]:
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "date": 1700000000,
            "chat": {"id": CHAT_ID, "type": "private"},
            "from": {"id": user_id, "is_bot": False, "first_name": "Test"},
            "text": text,
        },
    }


def _photo_update(user_id: int = ORGANIZER_ID) -> dict[str, object]:
    return {
        "update_id": 2,
        "message": {
            "message_id": 20,
            "date": 1700000001,
            "chat": {"id": CHAT_ID, "type": "private"},
            "from": {"id": user_id, "is_bot": False, "first_name": "Test"},
            "photo": [
                {
                    "file_id": "small",
                    "file_unique_id": "small-unique",
                    "width": 64,
                    "height": 64,
                },
                {
                    "file_id": "large",
                    "file_unique_id": "large-unique",
                    "width": 1280,
                    "height": 960,
                },
            ],
        },
    }


def _step(container) -> SessionStep | None:
    record = container.event_creation_service.session_store.get(str(ORGANIZER_ID))
    return record.step if record else None


def test_webhook_start_begins_session(
    container, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/telegram/webhook", json=_text_update("/start"))

    assert response.status_code == 200
    assert _step(container) == SessionStep.AWAITING_WELCOME_TEXT
    chat_id, text = telegram_client.messages[-1]
    assert chat_id == CHAT_ID
    assert "EVT_" in text


def test_webhook_full_flow_creates_event(
    container,
    telegram_client: FakeTelegramClient,
    event_repository: InMemoryEventRepository,
    media_store: FakeMediaStore,
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_text_update("/start"))
    for text in ["Welcome!", "Garden party"]:
        client.post("/telegram/webhook", json=_text_update(text))
    client.post("/telegram/webhook", json=_photo_update())
    assert telegram_client.markups[-1] is not None
    for text in ["/both", "75", "2"]:
        client.post("/telegram/webhook", json=_text_update(text))
    client.post("/telegram/webhook", json=_photo_update())
    assert "1/2" in telegram_client.messages[-1][1]
    client.post("/telegram/webhook", json=_photo_update())

    assert _step(container) is None
    assert len(event_repository.events) == 1
    event = next(iter(event_repository.events.values()))
    assert event.upload_limit == 75
    assert "https://photos.example.com/event/" in telegram_client.messages[-1][1]
    assert telegram_client.parse_modes[-1] == "HTML"
    assert media_store.uploads[0] == (
        "https://files.example.com/large.jpg",
        "events/backgrounds",
    )


def test_webhook_ignores_text_without_session(
    container, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/telegram/webhook", json=_text_update("hello there"))

    assert response.status_code == 200
    assert telegram_client.messages == []


def test_webhook_ignores_unknown_commands(
    container, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))
    client.post("/telegram/webhook", json=_text_update("/start"))
    sent = len(telegram_client.messages)

    client.post("/telegram/webhook", json=_text_update("/whatever"))

    assert len(telegram_client.messages) == sent
    assert _step(container) == SessionStep.AWAITING_WELCOME_TEXT


def test_webhook_cancel_without_session(
    container, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_text_update("/cancel"))

    assert "no event setup" in telegram_client.messages[-1][1].lower()


def test_webhook_help(container, telegram_client: FakeTelegramClient) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_text_update("/help"))

    assert "/start" in telegram_client.messages[-1][1]


def test_webhook_disable_flow(
    container,
    telegram_client: FakeTelegramClient,
    event_repository: InMemoryEventRepository,
) -> None:
    event_repository.events["EVT_PARTY0001"] = make_event("EVT_PARTY0001")
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_text_update("/disable"))
    client.post("/telegram/webhook", json=_text_update("EVT_PARTY0001"))

    assert event_repository.events["EVT_PARTY0001"].status == EventStatus.DISABLED
    assert "uploads disabled" in telegram_client.messages[-1][1].lower()
    assert _step(container) is None


def test_webhook_rejects_users_outside_allowlist(
    container, telegram_client: FakeTelegramClient
) -> None:
    container.settings.telegram_allowed_user_ids = "555"
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_text_update("/start"))

    assert telegram_client.messages[-1][1] == "This bot is private."
    assert _step(container) is None


def test_webhook_ignores_updates_without_message(
    container, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/telegram/webhook", json={"update_id": 7})

    assert response.status_code == 200
    assert telegram_client.messages == []


def test_lifespan_syncs_bot_commands(
    container, telegram_client: FakeTelegramClient
) -> None:
    with TestClient(create_app(container)) as client:
        assert client.get("/health").json() == {"status": "ok"}

    assert telegram_client.commands is not None
    assert telegram_client.commands[0]["command"] == "start"
    assert telegram_client.menu_button == {"type": "commands"}
