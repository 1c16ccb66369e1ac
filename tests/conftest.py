"""Shared fixtures: an in-memory hiddev display and a channel opener.

No real hardware required: FakeDisplay implements the HidChannel
directive set, records every call and round-trips brightness values.
"""

import errno

import pytest

from acdctl.hid_channel import DevInfo, HidChannel, ReportInfo, UsageRef

APPLE = 0x05AC
CINEMA_20 = 0x9219
MONITOR_APP = 0x800001   # usage page 0x80 (monitor control)
KEYBOARD_APP = 0x010006  # generic desktop / keyboard

WRITE_DIRECTIVES = {"init_report", "set_usage", "set_report"}


class FakeDisplay(HidChannel):
    """Idealised display behind a hiddev node.

    ``set_usage`` stages a value, ``set_report`` commits it (snapped down
    to *step*), ``get_usage`` returns the committed value.  Directive names
    listed in *fail* raise EIO; application indices in *bad_apps* raise
    EINVAL.
    """

    def __init__(self, path="/dev/hiddev0", vendor=APPLE, product=CINEMA_20,
                 brightness=0, applications=(MONITOR_APP,), version=0x010004,
                 step=1, fail=(), bad_apps=()):
        self.path = path
        self.vendor = vendor
        self.product = product
        self.brightness = brightness
        self.applications = list(applications)
        self.version = version
        self.step = step
        self.fail = set(fail)
        self.bad_apps = set(bad_apps)
        self.calls = []
        self.staged = None
        self.closed = False

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise OSError(errno.EIO, "Input/output error")

    @property
    def writes(self):
        return [c for c in self.calls if c in WRITE_DIRECTIVES]

    def driver_version(self):
        self._call("driver_version")
        return self.version

    def device_info(self):
        self._call("device_info")
        return DevInfo(vendor=self.vendor, product=self.product,
                       num_applications=len(self.applications))

    def application(self, index):
        self._call("application")
        if index in self.bad_apps:
            raise OSError(errno.EINVAL, "Invalid argument")
        return self.applications[index]

    def init_report(self):
        self._call("init_report")

    def get_usage(self, ref: UsageRef):
        self._call("get_usage")
        ref.value = self.brightness
        return ref.value

    def get_report(self, info: ReportInfo):
        self._call("get_report")

    def set_usage(self, ref: UsageRef):
        self._call("set_usage")
        self.staged = ref.value

    def set_report(self, info: ReportInfo):
        self._call("set_report")
        if self.staged is not None:
            self.brightness = self.staged - self.staged % self.step

    def close(self):
        self.calls.append("close")
        self.closed = True


class FakeOpener:
    """Stands in for HiddevChannel.open over a set of FakeDisplays."""

    def __init__(self, *displays):
        self.displays = {d.path: d for d in displays}
        self.opened = []

    def __call__(self, path, writable=False):
        self.opened.append((path, writable))
        if path not in self.displays:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return self.displays[path]


@pytest.fixture
def make_display():
    """Factory for FakeDisplay instances."""
    return FakeDisplay


@pytest.fixture
def make_opener():
    """Factory for FakeOpener over given displays."""
    return FakeOpener


@pytest.fixture
def display():
    """Supported Apple Cinema Display 20\" at /dev/hiddev0, brightness 160."""
    return FakeDisplay(brightness=160)
