"""Tests for platform checks."""
from unittest.mock import patch

from cmdrunner import platform


class TestPlatform:
    """Test platform detection."""

    def test_linux(self):
        with patch.object(platform.sys, "platform", "linux"):
            assert platform.is_linux()
            assert platform.is_unix_like()
            assert platform.supports_shell_mode()
            assert platform.supports_remote_host()

    def test_mac(self):
        with patch.object(platform.sys, "platform", "darwin"):
            assert platform.is_mac()
            assert platform.supports_shell_mode()

    def test_windows(self):
        with patch.object(platform.sys, "platform", "win32"):
            assert platform.is_windows()
            assert not platform.is_unix_like()
            assert not platform.supports_shell_mode()
            assert not platform.supports_remote_host()
