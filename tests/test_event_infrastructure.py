"""Tests for event infrastructure (BaseManager, signal scoping).

Managers talk to each other only through instance-scoped dispatcher
signals; these tests cover the signal format, emit/listen wiring and the
isolation between two config entries.
"""

from unittest.mock import MagicMock, patch

import pytest
from homeassistant.core import HomeAssistant, callback

from custom_components.petquest import const
from custom_components.petquest.helpers.entity_helpers import get_event_signal
from custom_components.petquest.managers.base_manager import BaseManager


class MockManager(BaseManager):
    """Concrete manager for testing BaseManager."""

    async def async_setup(self) -> None:
        """Mock setup (no subscriptions)."""


def _mock_coordinator(entry_id: str) -> MagicMock:
    coordinator = MagicMock()
    coordinator.config_entry.entry_id = entry_id
    coordinator.config_entry.async_on_unload = MagicMock()
    coordinator.now_ms.return_value = 1_000
    return coordinator


class TestGetEventSignal:
    """Tests for get_event_signal() helper function."""

    def test_get_event_signal_format(self) -> None:
        """Test event signal follows expected format."""
        signal = get_event_signal("abc123", const.SIGNAL_SUFFIX_COINS_EARNED)

        assert signal == f"{const.DOMAIN}_abc123_{const.SIGNAL_SUFFIX_COINS_EARNED}"
        assert signal == "petquest_abc123_coins_earned"

    def test_get_event_signal_multi_instance_isolation(self) -> None:
        """Test that two instances get different signals."""
        signal_1 = get_event_signal("user_alpha", const.SIGNAL_SUFFIX_SLEEP_COMPLETED)
        signal_2 = get_event_signal("user_beta", const.SIGNAL_SUFFIX_SLEEP_COMPLETED)

        assert signal_1 != signal_2
        assert "user_alpha" in signal_1
        assert "user_beta" in signal_2


class TestBaseManager:
    """Tests for BaseManager class."""

    @pytest.fixture
    def mock_hass(self) -> MagicMock:
        """Create a mock HomeAssistant instance."""
        return MagicMock()

    def test_manager_initialization(self, mock_hass: MagicMock) -> None:
        """Test manager initializes with correct references."""
        coordinator = _mock_coordinator("test_entry_123")
        manager = MockManager(mock_hass, coordinator)

        assert manager.hass is mock_hass
        assert manager.coordinator is coordinator
        assert manager.entry_id == "test_entry_123"
        assert manager.sync is coordinator.sync_manager
        assert manager.now_ms() == 1_000

    def test_emit_calls_dispatcher(self, mock_hass: MagicMock) -> None:
        """Test emit() dispatches the payload as one dict."""
        manager = MockManager(mock_hass, _mock_coordinator("test_entry_123"))

        with patch(
            "custom_components.petquest.managers.base_manager.async_dispatcher_send"
        ) as mock_send:
            manager.emit(
                const.SIGNAL_SUFFIX_COINS_EARNED,
                pet_id="pet1",
                amount=20,
                activity=const.ACTIVITY_HOUSE,
            )

            mock_send.assert_called_once()
            assert mock_send.call_args[0][0] is mock_hass
            assert mock_send.call_args[0][1] == get_event_signal(
                "test_entry_123", const.SIGNAL_SUFFIX_COINS_EARNED
            )
            assert mock_send.call_args[0][2] == {
                "pet_id": "pet1",
                "amount": 20,
                "activity": const.ACTIVITY_HOUSE,
            }

    def test_listen_subscribes_and_registers_cleanup(self, mock_hass: MagicMock) -> None:
        """Test listen() subscribes to events and registers cleanup."""
        coordinator = _mock_coordinator("test_entry_123")
        manager = MockManager(mock_hass, coordinator)
        handler = MagicMock()

        with patch(
            "custom_components.petquest.managers.base_manager.async_dispatcher_connect"
        ) as mock_connect:
            mock_unsub = MagicMock()
            mock_connect.return_value = mock_unsub

            manager.listen(const.SIGNAL_SUFFIX_QUEST_COMPLETED, handler)

            mock_connect.assert_called_once()
            assert mock_connect.call_args[0][1] == get_event_signal(
                "test_entry_123", const.SIGNAL_SUFFIX_QUEST_COMPLETED
            )
            assert mock_connect.call_args[0][2] is handler
            coordinator.config_entry.async_on_unload.assert_called_once_with(mock_unsub)


class TestDelivery:
    """Tests for delivery through the real dispatcher."""

    async def test_listener_runs_inside_emit(self, hass: HomeAssistant) -> None:
        """Test a @callback listener has run by the time emit() returns."""
        sender = MockManager(hass, _mock_coordinator("entry_a"))
        receiver = MockManager(hass, _mock_coordinator("entry_a"))
        received: list[dict] = []

        @callback
        def _on_event(payload: dict) -> None:
            received.append(payload)

        receiver.listen(const.SIGNAL_SUFFIX_LEVEL_UP, _on_event)
        sender.emit(const.SIGNAL_SUFFIX_LEVEL_UP, pet_id="pet1", new_level=2)

        assert received == [{"pet_id": "pet1", "new_level": 2}]

    async def test_other_entry_does_not_receive(self, hass: HomeAssistant) -> None:
        """Test events stay within their config entry."""
        sender = MockManager(hass, _mock_coordinator("entry_a"))
        other = MockManager(hass, _mock_coordinator("entry_b"))
        received: list[dict] = []

        @callback
        def _on_event(payload: dict) -> None:
            received.append(payload)

        other.listen(const.SIGNAL_SUFFIX_LEVEL_UP, _on_event)
        sender.emit(const.SIGNAL_SUFFIX_LEVEL_UP, pet_id="pet1", new_level=2)

        assert received == []
