"""Tests for probe -- identity extraction and monitor classification."""

from unittest.mock import MagicMock

from acdctl.hid_channel import DevInfo, HidChannel
from acdctl.probe import DeviceIdentity, identify, is_monitor_application

MONITOR_APP = 0x800001
MONITOR_CONTROLS_APP = 0x820001
KEYBOARD_APP = 0x010006
CONSUMER_APP = 0x0C0001


class TestIdentify:

    def test_reads_device_info(self, display):
        assert identify(display) == DeviceIdentity(0x05AC, 0x9219)

    def test_masks_signed_values(self):
        info = DevInfo(vendor=-1, product=-28135)
        assert DeviceIdentity.from_devinfo(info) == DeviceIdentity(0xFFFF, 0x9219)

    def test_uses_given_info_without_query(self):
        channel = MagicMock(spec=HidChannel)
        identity = identify(channel, DevInfo(vendor=0x0419, product=0x8002))
        assert identity.key == (0x0419, 0x8002)
        channel.device_info.assert_not_called()

    def test_str(self):
        assert str(DeviceIdentity(0x05AC, 0x9219)) == "05ac:9219"


class TestMonitorApplication:

    def test_single_monitor_application(self, make_display):
        assert is_monitor_application(make_display(applications=[MONITOR_APP]))

    def test_monitor_after_other_applications(self, make_display):
        dev = make_display(applications=[KEYBOARD_APP, CONSUMER_APP, MONITOR_APP])
        assert is_monitor_application(dev)

    def test_no_monitor_application(self, make_display):
        dev = make_display(applications=[KEYBOARD_APP, CONSUMER_APP])
        assert not is_monitor_application(dev)

    def test_no_applications(self, make_display):
        assert not is_monitor_application(make_display(applications=[]))

    def test_only_page_0x80_matches(self, make_display):
        # 0x82 is the VESA controls page, not the monitor application page
        assert not is_monitor_application(make_display(applications=[MONITOR_CONTROLS_APP]))

    def test_failed_index_skipped(self, make_display):
        dev = make_display(applications=[MONITOR_APP, MONITOR_APP], bad_apps={0})
        assert is_monitor_application(dev)
        assert dev.calls.count("application") == 2

    def test_all_indices_failing_is_not_monitor(self, make_display):
        dev = make_display(applications=[MONITOR_APP], bad_apps={0})
        assert not is_monitor_application(dev)

    def test_stops_at_first_match(self, make_display):
        dev = make_display(applications=[MONITOR_APP, KEYBOARD_APP, KEYBOARD_APP])
        assert is_monitor_application(dev)
        assert dev.calls.count("application") == 1

    def test_count_from_given_info(self):
        channel = MagicMock(spec=HidChannel)
        channel.application.return_value = KEYBOARD_APP
        assert not is_monitor_application(channel, DevInfo(num_applications=3))
        assert channel.application.call_count == 3
        channel.device_info.assert_not_called()

    def test_read_only(self, make_display):
        dev = make_display(applications=[KEYBOARD_APP, MONITOR_APP])
        is_monitor_application(dev)
        assert dev.writes == []
