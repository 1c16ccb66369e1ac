"""Tests for doctor -- environment health check."""

from types import SimpleNamespace
from unittest.mock import patch

import usb.core

from acdctl.cli import build_udev_rules
from acdctl.doctor import (
    _check_attached,
    _check_udev_rules,
    _detect_pkg_manager,
    _libusb_hint,
    find_attached_displays,
    run_doctor,
)
from acdctl.probe import DeviceIdentity
from acdctl.registry import DEFAULT_REGISTRY


def _usb_dev(vid, pid):
    return SimpleNamespace(idVendor=vid, idProduct=pid)


class TestPackageManager:

    def test_exact_distro(self):
        with patch("acdctl.doctor._read_os_release", return_value={"ID": "fedora"}):
            assert _detect_pkg_manager() == "dnf"

    def test_id_like_fallback(self):
        with patch("acdctl.doctor._read_os_release",
                   return_value={"ID": "mydistro", "ID_LIKE": "ubuntu debian"}):
            assert _detect_pkg_manager() == "apt"

    def test_unknown(self):
        with patch("acdctl.doctor._read_os_release", return_value={}):
            assert _detect_pkg_manager() is None

    def test_hint_known(self):
        assert _libusb_hint("apt") == "sudo apt install libusb-1.0-0"

    def test_hint_unknown_lists_all(self):
        hint = _libusb_hint(None)
        assert hint.startswith("install one of:")
        assert "sudo pacman -S libusb" in hint


class TestUdevRules:

    def test_not_installed_is_optional(self, tmp_path, capsys):
        assert _check_udev_rules(DEFAULT_REGISTRY, str(tmp_path / "none.rules"))
        assert "not installed" in capsys.readouterr().out

    def test_complete(self, tmp_path, capsys):
        path = tmp_path / "99-acdctl.rules"
        path.write_text(build_udev_rules())
        assert _check_udev_rules(DEFAULT_REGISTRY, str(path))
        assert "[OK]" in capsys.readouterr().out

    def test_outdated(self, tmp_path, capsys):
        path = tmp_path / "99-acdctl.rules"
        path.write_text(build_udev_rules().replace('"9232"', '"0000"'))
        assert not _check_udev_rules(DEFAULT_REGISTRY, str(path))
        assert "05ac:9232" in capsys.readouterr().out

    def test_missing_vendor(self, tmp_path, capsys):
        path = tmp_path / "99-acdctl.rules"
        path.write_text(build_udev_rules().replace('"0419"', '"0000"'))
        assert not _check_udev_rules(DEFAULT_REGISTRY, str(path))
        out = capsys.readouterr().out
        assert "0419:8002" in out
        assert "05ac:" not in out


class TestAttachedDisplays:

    def test_filters_registry(self):
        devices = [_usb_dev(0x05AC, 0x9219), _usb_dev(0x046D, 0xC52B),
                   _usb_dev(0x0419, 0x8002)]
        with patch("usb.core.find", return_value=iter(devices)):
            found = find_attached_displays()
        assert found == [DeviceIdentity(0x05AC, 0x9219), DeviceIdentity(0x0419, 0x8002)]

    def test_prints_found(self, capsys):
        with patch("usb.core.find", return_value=iter([_usb_dev(0x05AC, 0x921E)])):
            _check_attached(DEFAULT_REGISTRY)
        assert 'Apple Cinema Display 24"' in capsys.readouterr().out

    def test_none_attached(self, capsys):
        with patch("usb.core.find", return_value=iter([])):
            _check_attached(DEFAULT_REGISTRY)
        assert "no supported display attached" in capsys.readouterr().out

    def test_no_backend(self, capsys):
        with patch("usb.core.find", side_effect=usb.core.NoBackendError("No backend")):
            _check_attached(DEFAULT_REGISTRY)
        assert "no libusb backend" in capsys.readouterr().out


class TestRunDoctor:

    def test_all_ok(self, tmp_path, capsys):
        with patch("acdctl.doctor._check_libusb", return_value=True), \
             patch("acdctl.doctor._check_udev_rules", return_value=True), \
             patch("acdctl.doctor._check_attached") as mock_attached:
            assert run_doctor() == 0
        mock_attached.assert_called_once_with(DEFAULT_REGISTRY)
        assert "All required dependencies OK" in capsys.readouterr().out

    def test_missing_libusb(self, capsys):
        with patch("acdctl.doctor._check_libusb", return_value=False), \
             patch("acdctl.doctor._check_udev_rules", return_value=True), \
             patch("acdctl.doctor._check_attached"):
            assert run_doctor() == 1
        assert "missing" in capsys.readouterr().out
