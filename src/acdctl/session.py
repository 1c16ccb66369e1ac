"""
Session driver: runs one brightness request over a list of device paths.

For each path, in order:

    open (ro for query/detect, rw for set/adjust)
    → driver version (printed once)
    → identity → detect report, or
    → registry check (unsupported aborts the run unless forced)
    → monitor classification (non-monitors are skipped)
    → init reports → get / set / adjust → print result
    → close

Open failures and non-monitor devices are skipped with a warning.  Every
``AcdError`` (init failure, unsupported device, usage/report directive
failure) stops the whole run, so one bad display aborts an otherwise
good batch rather than printing a bogus brightness.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, TextIO

from .brightness import BrightnessControl
from .errors import AcdError, ExitCode, UnsupportedDeviceError
from .hid_channel import HidChannel, HiddevChannel, format_driver_version
from .probe import DeviceIdentity, identify, is_monitor_application
from .registry import DEFAULT_REGISTRY, DeviceRegistry

log = logging.getLogger(__name__)

# (path, writable) -> open channel; raises OSError
ChannelOpener = Callable[[str, bool], HidChannel]


class Mode(Enum):
    """Operation selected once per run."""
    QUERY = "query"
    SET = "set"
    ADJUST = "adjust"
    DETECT = "detect"

    @property
    def writes(self) -> bool:
        return self in (Mode.SET, Mode.ADJUST)


@dataclass(frozen=True)
class Request:
    """What to do with every device: *value* is absolute for SET, a delta for ADJUST."""
    mode: Mode = Mode.QUERY
    value: int = 0


@dataclass
class SessionOptions:
    silent: bool = False   # no notice / driver version lines
    brief: bool = False    # print bare brightness values
    force: bool = False    # continue on devices missing from the registry


class OutcomeStatus(Enum):
    OPEN_FAILED = "open failed"
    NOT_HIDDEV = "not a hiddev device"
    DETECTED = "detected"
    NOT_MONITOR = "not a monitor"
    UNSUPPORTED = "unsupported"
    DONE = "done"
    FAILED = "failed"


@dataclass
class DeviceOutcome:
    """Result for one candidate path."""
    path: str
    status: OutcomeStatus
    identity: Optional[DeviceIdentity] = None
    supported: bool = False
    brightness: Optional[int] = None
    message: str = ""


@dataclass
class SessionResult:
    exit_code: ExitCode = ExitCode.OK
    outcomes: List[DeviceOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.OK


class Session:
    """Applies one Request to candidate device paths, sequentially."""

    def __init__(
        self,
        registry: DeviceRegistry = DEFAULT_REGISTRY,
        opener: ChannelOpener = HiddevChannel.open,
        options: Optional[SessionOptions] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.registry = registry
        self.opener = opener
        self.options = options or SessionOptions()
        self._out = out
        self._err = err
        self._version_shown = False

    # Resolved late so pytest's capsys sees the replaced streams
    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def run(self, candidates: Sequence[str], request: Request) -> SessionResult:
        """Process every candidate; stop at the first fatal error."""
        result = SessionResult()
        if not candidates:
            log.debug("No device paths given")
            result.exit_code = ExitCode.FATAL
            return result

        for path in candidates:
            outcome = DeviceOutcome(path=path, status=OutcomeStatus.FAILED)
            result.outcomes.append(outcome)
            try:
                self._process(path, request, outcome)
            except AcdError as e:
                print(str(e), file=self.err)
                outcome.message = str(e)
                if isinstance(e, UnsupportedDeviceError):
                    outcome.status = OutcomeStatus.UNSUPPORTED
                log.debug("Aborting run at %s (exit %d)", path, e.exit_code)
                result.exit_code = e.exit_code
                break
        return result

    # -- Per-device flow -------------------------------------------------

    def _process(self, path: str, request: Request, outcome: DeviceOutcome) -> None:
        try:
            channel = self.opener(path, request.mode.writes)
        except OSError as e:
            print(f"{path}: {e.strerror or e}", file=self.err)
            outcome.status = OutcomeStatus.OPEN_FAILED
            outcome.message = str(e)
            return

        try:
            self._handle(channel, path, request, outcome)
        finally:
            channel.close()

    def _handle(self, channel: HidChannel, path: str, request: Request,
                outcome: DeviceOutcome) -> None:
        try:
            version = channel.driver_version()
            info = channel.device_info()
        except OSError as e:
            print(f"{path}: not a hiddev device ({e.strerror or e})", file=self.err)
            outcome.status = OutcomeStatus.NOT_HIDDEV
            outcome.message = str(e)
            return

        if not self._version_shown:
            self._version_shown = True
            if not self.options.silent:
                print(f"hiddev driver version is {format_driver_version(version)}",
                      file=self.out)

        identity = identify(channel, info)
        outcome.identity = identity
        outcome.supported = self.registry.is_supported(identity)
        log.debug("%s: %s supported=%s", path, identity, outcome.supported)

        if request.mode is Mode.DETECT:
            self._detect(channel, info, outcome)
            return

        if not outcome.supported:
            if not self.options.force:
                raise UnsupportedDeviceError(
                    f"Device unsupported: {self.registry.format_identity(identity)}"
                )
            print(f"Device unsupported: {self.registry.format_identity(identity)}",
                  file=self.err)
            log.info("%s: forcing unsupported device %s", path, identity)

        if not is_monitor_application(channel, info):
            print(f"{path}: This device is NOT USB monitor!", file=self.err)
            outcome.status = OutcomeStatus.NOT_MONITOR
            return

        control = BrightnessControl(channel)
        control.init_reports()
        outcome.brightness = self._transact(control, request)
        outcome.status = OutcomeStatus.DONE

        if request.mode is not Mode.SET:
            self._print_brightness(path, outcome.brightness)

    def _detect(self, channel: HidChannel, info, outcome: DeviceOutcome) -> None:
        """Report a monitor-class device; never writes."""
        outcome.status = OutcomeStatus.DETECTED
        if not is_monitor_application(channel, info):
            outcome.status = OutcomeStatus.NOT_MONITOR
            return
        label = "SUPPORTED" if outcome.supported else "UNSUPPORTED"
        print(f"{outcome.path}: USB Monitor - {label}.\t"
              f"{self.registry.format_identity(outcome.identity)}", file=self.out)

    @staticmethod
    def _transact(control: BrightnessControl, request: Request) -> int:
        if request.mode is Mode.SET:
            control.set(request.value)
            return request.value
        if request.mode is Mode.ADJUST:
            return control.adjust(request.value)
        return control.get()

    def _print_brightness(self, path: str, value: int) -> None:
        if self.options.brief:
            print(value, file=self.out)
        else:
            print(f"{path}: BRIGHTNESS={value}", file=self.out)
