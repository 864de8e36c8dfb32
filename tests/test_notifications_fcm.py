import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

from firebase_admin.exceptions import FirebaseError

from src.notifications.fcm import FcmSender, _load_service_account, get_firebase_app
from src.notifications.messages import NotificationMessage, format_session_starting_soon

SERVICE_ACCOUNT = {"type": "service_account", "project_id": "f1-push"}


class TestLoadServiceAccount:
    def test_inline_json(self):
        assert _load_service_account(json.dumps(SERVICE_ACCOUNT)) == SERVICE_ACCOUNT

    def test_path(self, tmp_path):
        path = tmp_path / "service-account.json"
        path.write_text(json.dumps(SERVICE_ACCOUNT), encoding="utf-8")
        assert _load_service_account(str(path)) == SERVICE_ACCOUNT


class TestFormatMessages:
    def test_session_starting_soon(self):
        assert format_session_starting_soon("Race") == NotificationMessage(
            title='⏰ "Race" starts in 1 hour!',
            body="Tune in and watch live!",
        )


class TestFcmSender:
    @patch("src.notifications.fcm.get_settings")
    def test_is_configured_true(self, mock_settings):
        mock_settings.return_value = MagicMock(firebase_service_account='{"type": "x"}')
        assert FcmSender.is_configured() is True

    @patch("src.notifications.fcm.get_settings")
    def test_is_configured_false(self, mock_settings):
        mock_settings.return_value = MagicMock(firebase_service_account="")
        assert FcmSender.is_configured() is False

    @patch("src.notifications.fcm.auth")
    @patch("src.notifications.fcm.get_firebase_app")
    def test_create_device_token(self, mock_get_app, mock_auth):
        mock_auth.create_custom_token.return_value = b"custom-token"

        token = FcmSender().create_device_token("phone-a")

        assert token == "custom-token"
        mock_auth.create_custom_token.assert_called_once_with(
            "phone-a", app=mock_get_app.return_value
        )

    @patch("src.notifications.fcm.messaging")
    @patch("src.notifications.fcm.get_firebase_app")
    def test_send_each_builds_one_message_per_token(self, mock_get_app, mock_messaging):
        mock_messaging.send_each.return_value = MagicMock(success_count=2, failure_count=0)
        notification = NotificationMessage(title="Title", body="Body")

        result = FcmSender().send_each(["token-a", "token-b"], notification)

        assert result == 2
        messages = mock_messaging.send_each.call_args.args[0]
        assert len(messages) == 2
        token_kwargs = [call.kwargs["token"] for call in mock_messaging.Message.call_args_list]
        assert token_kwargs == ["token-a", "token-b"]
        mock_messaging.Notification.assert_called_with(title="Title", body="Body")

    @patch("src.notifications.fcm.messaging")
    @patch("src.notifications.fcm.get_firebase_app")
    def test_send_each_batches_of_500(self, mock_get_app, mock_messaging):
        mock_messaging.send_each.side_effect = [
            MagicMock(success_count=500, failure_count=0),
            MagicMock(success_count=0, failure_count=1),
        ]
        tokens = [f"token-{i}" for i in range(501)]

        result = FcmSender().send_each(tokens, NotificationMessage(title="t", body="b"))

        assert result == 500
        assert mock_messaging.send_each.call_count == 2
        assert len(mock_messaging.send_each.call_args_list[1].args[0]) == 1

    @patch("src.notifications.fcm.messaging")
    @patch("src.notifications.fcm.get_firebase_app")
    def test_send_each_failed_batch_continues(self, mock_get_app, mock_messaging):
        mock_messaging.send_each.side_effect = [
            FirebaseError("internal", "FCM unavailable"),
            MagicMock(success_count=1, failure_count=0),
        ]
        tokens = [f"token-{i}" for i in range(501)]

        result = FcmSender().send_each(tokens, NotificationMessage(title="t", body="b"))

        assert result == 1


class TestGetFirebaseApp:
    @patch("src.notifications.fcm.credentials")
    @patch("src.notifications.fcm.get_settings")
    @patch("src.notifications.fcm.firebase_admin")
    def test_concurrent_callers_initialize_once(
        self, mock_firebase, mock_settings, mock_credentials
    ):
        mock_settings.return_value = MagicMock(
            firebase_service_account=json.dumps(SERVICE_ACCOUNT)
        )
        apps = {}
        mock_firebase._apps = apps
        mock_firebase.get_app.side_effect = lambda: apps["[DEFAULT]"]
        start = threading.Barrier(8)

        def initialize_app(cred):
            if apps:
                raise ValueError("The default Firebase app already exists.")
            time.sleep(0.05)
            apps["[DEFAULT]"] = "app"

        mock_firebase.initialize_app.side_effect = initialize_app

        def call():
            start.wait()
            return get_firebase_app()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [f.result() for f in [pool.submit(call) for _ in range(8)]]

        assert results == ["app"] * 8
        assert mock_firebase.initialize_app.call_count == 1

    @patch("src.notifications.fcm.firebase_admin")
    def test_reuses_existing_app(self, mock_firebase):
        mock_firebase._apps = {"[DEFAULT]": "app"}
        mock_firebase.get_app.return_value = "app"

        assert get_firebase_app() == "app"
        mock_firebase.initialize_app.assert_not_called()
