"""Exit codes and fatal errors for acdctl.

Every condition that stops a run is an ``AcdError`` subclass carrying the
process exit code.  ``Session.run()`` converts them into a ``SessionResult``
so callers (and tests) see a value instead of a ``sys.exit()``.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes."""
    OK = 0
    FATAL = 1          # no device paths given, report init failed
    DEVICE_ERROR = 2   # unsupported device, usage command failed
    REPORT_ERROR = 3   # report command failed


class AcdError(Exception):
    """Base for errors that abort the whole run."""
    exit_code = ExitCode.FATAL


class InitReportError(AcdError):
    """HIDIOCINITREPORT failed; no report exchange is possible."""
    exit_code = ExitCode.FATAL


class UnsupportedDeviceError(AcdError):
    """Device is not in the registry and --force was not given."""
    exit_code = ExitCode.DEVICE_ERROR


class UsageCommandError(AcdError):
    """Get/set usage value ioctl failed."""
    exit_code = ExitCode.DEVICE_ERROR


class ReportCommandError(AcdError):
    """Get/set report ioctl failed."""
    exit_code = ExitCode.REPORT_ERROR
