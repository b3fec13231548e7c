from types import SimpleNamespace

from marketplace.models import DeviceToken, Notification
from marketplace.services import push_service
from marketplace.services.push_service import PushService, sanitize_notification_data


def test_sanitize_notification_data():
    data = {"type": "closure", "appointment_id": 12, "urgent": True, "note": None}

    assert sanitize_notification_data(data) == {
        "type": "closure",
        "appointment_id": "12",
        "urgent": "true",
    }
    assert sanitize_notification_data(None) == {}


def test_register_token_is_upsert(db, provider, client_user):
    PushService.register_token(db, provider.id, "token-abc", "android")
    PushService.register_token(db, client_user.id, "token-abc", "ios")

    device = db.query(DeviceToken).one()
    assert device.user_id == client_user.id
    assert device.platform == "ios"


def test_remove_token(db, provider):
    PushService.register_token(db, provider.id, "token-abc", "web")

    assert PushService.remove_token(db, provider.id, "token-abc")
    assert not PushService.remove_token(db, provider.id, "token-abc")


def test_notify_without_firebase_only_creates_in_app(db, provider):
    result = PushService.notify_user(
        db, provider.id, "Pendiente de Cierre", "Confirma el cierre", {"type": "closure"}
    )

    assert result == {"in_app": True, "push_sent": 0, "push_failed": 0}
    notification = db.query(Notification).one()
    assert notification.user_id == provider.id
    assert notification.type == "closure"
    assert notification.is_read is False


def test_notify_sends_multicast_to_user_devices(db, provider, client_user, monkeypatch):
    PushService.register_token(db, provider.id, "token-1", "android")
    PushService.register_token(db, provider.id, "token-2", "ios")
    PushService.register_token(db, client_user.id, "token-other", "ios")
    sent = []

    def fake_send(message, app=None):
        sent.append(message)
        return SimpleNamespace(
            success_count=1,
            failure_count=1,
            responses=[
                SimpleNamespace(success=True, exception=None),
                SimpleNamespace(success=False, exception=Exception("unregistered")),
            ],
        )

    monkeypatch.setattr(push_service, "has_service_account", lambda: True)
    monkeypatch.setattr(push_service, "get_firebase_app", lambda: object())
    monkeypatch.setattr(push_service.messaging, "send_each_for_multicast", fake_send)

    result = PushService.notify_user(
        db, provider.id, "Pendiente de Cierre", "Confirma", {"appointment_id": 5}
    )

    assert result == {"in_app": True, "push_sent": 1, "push_failed": 1}
    assert sorted(sent[0].tokens) == ["token-1", "token-2"]
    assert sent[0].data == {"appointment_id": "5"}


def test_push_failure_is_swallowed(db, provider, monkeypatch):
    PushService.register_token(db, provider.id, "token-1", "android")

    def exploding_send(message, app=None):
        raise RuntimeError("FCM unavailable")

    monkeypatch.setattr(push_service, "has_service_account", lambda: True)
    monkeypatch.setattr(push_service, "get_firebase_app", lambda: object())
    monkeypatch.setattr(push_service.messaging, "send_each_for_multicast", exploding_send)

    result = PushService.notify_user(db, provider.id, "Hola", "Mundo")

    assert result["in_app"] is True
    assert result["push_sent"] == 0


def test_get_user_notifications_unread_only(db, provider):
    PushService.create_in_app_notification(db, provider.id, "Uno", "a")
    PushService.create_in_app_notification(db, provider.id, "Dos", "b")
    first = db.query(Notification).filter(Notification.title == "Uno").one()
    first.is_read = True
    db.commit()

    unread = PushService.get_user_notifications(db, provider.id, unread_only=True)

    assert [n.title for n in unread] == ["Dos"]
    assert len(PushService.get_user_notifications(db, provider.id)) == 2
