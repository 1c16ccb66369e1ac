"""acdctl version information."""

__version__ = "0.4.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.3.0 - Query, absolute and relative brightness over hiddev, detect mode,
#         supported device list
# 0.4.0 - HidChannel abstraction with an in-memory fake for tests, ExitCode
#         enum returned from Session.run(), config file defaults, udev rules
#         setup, doctor command, verbose debug logging (acdctl -vv)
