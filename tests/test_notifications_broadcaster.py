from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.db.database import Base
from src.models import Device
from src.notifications.broadcaster import Broadcaster
from src.notifications.messages import KEEP_RACING


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    Base.metadata.drop_all(engine)


@pytest.fixture
def devices(db_session):
    db_session.add_all(
        [
            Device(device_id="phone-a", fcm_token="token-a"),
            Device(device_id="phone-b", fcm_token="token-b"),
            Device(device_id="phone-c", fcm_token=None),
            Device(device_id="phone-d", fcm_token=""),
        ]
    )
    db_session.commit()


class TestBroadcaster:
    @patch("src.notifications.broadcaster.get_settings")
    @patch("src.notifications.broadcaster.FcmSender")
    def test_disabled(self, mock_sender_cls, mock_settings, db_session, devices):
        mock_settings.return_value = MagicMock(notification_enabled=False)

        assert Broadcaster(db_session).send_to_all(KEEP_RACING) == 0
        mock_sender_cls.assert_not_called()

    @patch("src.notifications.broadcaster.get_settings")
    @patch("src.notifications.broadcaster.FcmSender")
    def test_no_devices(self, mock_sender_cls, mock_settings, db_session):
        mock_settings.return_value = MagicMock(notification_enabled=True)
        mock_sender_cls.is_configured.return_value = True

        assert Broadcaster(db_session).send_to_all(KEEP_RACING) == 0
        mock_sender_cls.assert_not_called()

    @patch("src.notifications.broadcaster.get_settings")
    @patch("src.notifications.broadcaster.FcmSender")
    def test_sends_to_every_token(self, mock_sender_cls, mock_settings, db_session, devices):
        mock_settings.return_value = MagicMock(notification_enabled=True)
        mock_sender_cls.is_configured.return_value = True
        mock_sender = MagicMock()
        mock_sender.send_each.return_value = 2
        mock_sender_cls.return_value = mock_sender

        result = Broadcaster(db_session).send_to_all(KEEP_RACING)

        assert result == 2
        tokens, notification = mock_sender.send_each.call_args.args
        assert sorted(tokens) == ["token-a", "token-b"]
        assert notification == KEEP_RACING

    @patch("src.notifications.broadcaster.get_settings")
    @patch("src.notifications.broadcaster.FcmSender")
    def test_reports_partial_success(self, mock_sender_cls, mock_settings, db_session, devices):
        mock_settings.return_value = MagicMock(notification_enabled=True)
        mock_sender_cls.is_configured.return_value = True
        mock_sender_cls.return_value.send_each.return_value = 1

        assert Broadcaster(db_session).send_to_all(KEEP_RACING) == 1

    @patch("src.notifications.broadcaster.get_settings")
    @patch("src.notifications.broadcaster.FcmSender")
    def test_not_configured(self, mock_sender_cls, mock_settings, db_session, devices):
        mock_settings.return_value = MagicMock(notification_enabled=True)
        mock_sender_cls.is_configured.return_value = False

        assert Broadcaster(db_session).send_to_all(KEEP_RACING) == 0
        mock_sender_cls.assert_not_called()
