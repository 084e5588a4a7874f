"""
This module manages the lifetime of one card session: establishing the
PC/SC context, connecting to the first reader, choosing the command set
from the ATR, selecting the applet and releasing everything afterwards.
"""
import enum
import logging
import os
import time
from typing import Callable, Optional

from smartcard.scard import SCARD_PROTOCOL_RAW, SCARD_PROTOCOL_T0, SCARD_PROTOCOL_T1

from .commands import (
    DEFAULT_VARIANT,
    CommandSet,
    command_set_for,
    select_by_aid,
    variant_for_atr,
)
from .constants import SW1_MORE_DATA, SW1_NORMAL
from .exceptions import (
    CardNotSupportedError,
    InvalidATRError,
    NoReadersError,
    ProtocolMismatchError,
)
from .transport import PCSCTransport


logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOLS = (SCARD_PROTOCOL_T0, SCARD_PROTOCOL_T1, SCARD_PROTOCOL_RAW)
REQUESTED_PROTOCOLS = SCARD_PROTOCOL_T0 | SCARD_PROTOCOL_T1

SETTLE_DELAY_ENV = "THAI_ID_SETTLE_DELAY"
DEFAULT_SETTLE_DELAY = 1.5


def default_settle_delay() -> float:
    """Reads the reader settling delay (seconds) from the environment."""
    value = os.environ.get(SETTLE_DELAY_ENV)
    if not value:
        return DEFAULT_SETTLE_DELAY
    try:
        return max(0.0, float(value))
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", SETTLE_DELAY_ENV, value)
        return DEFAULT_SETTLE_DELAY


class SessionState(enum.Enum):
    UNOPENED = "unopened"
    CONNECTED = "connected"
    APPLET_SELECTED = "applet_selected"
    CLOSED = "closed"


class Session:
    """
    A single-owner connection to the card in the first available reader.

    Used as a context manager, the session is opened and the Ministry of
    Interior applet selected on entry, and it is always closed on exit.
    """

    def __init__(
        self,
        transport: Optional[PCSCTransport] = None,
        settle_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initializes the Session.

        Args:
            transport: The PC/SC transport to drive. A new PCSCTransport by default.
            settle_delay: Seconds to wait for the reader before connecting.
                Defaults to the THAI_ID_SETTLE_DELAY environment variable.
            sleep: The function used to wait.
        """
        self.transport = transport if transport is not None else PCSCTransport()
        self.settle_delay = default_settle_delay() if settle_delay is None else settle_delay
        self._sleep = sleep
        self.state = SessionState.UNOPENED
        self.reader_name: Optional[str] = None
        self.protocol: Optional[int] = None
        self.atr: bytes = b""
        self.command_set: CommandSet = command_set_for(DEFAULT_VARIANT)

    def _connect_first_reader(self) -> None:
        reader_list = self.transport.list_readers()
        if not reader_list:
            raise NoReadersError("Could not find any smart card reader.")

        self.reader_name = reader_list[0]
        logger.debug("Connecting to reader: %s", self.reader_name)
        protocol = self.transport.connect(self.reader_name, REQUESTED_PROTOCOLS)
        if protocol not in SUPPORTED_PROTOCOLS:
            raise ProtocolMismatchError(f"Protocol not supported: {protocol}")
        self.protocol = protocol

    def open(self) -> None:
        """
        Connects to the card and picks the command set from its ATR.

        Raises:
            NoReadersError: If no reader is connected.
            ProtocolMismatchError: If the negotiated protocol is not supported.
            InvalidATRError: If the card returns fewer than two ATR bytes.
            TransportError: If a PC/SC call fails.
        """
        if self.settle_delay > 0:
            self._sleep(self.settle_delay)

        self.transport.establish_context()
        self._connect_first_reader()

        self.atr = bytes(self.transport.get_atr() or b"")
        if len(self.atr) < 2:
            raise InvalidATRError(f"Invalid ATR: {self.atr.hex(' ').upper()}")

        self.command_set = command_set_for(variant_for_atr(self.atr))
        self.state = SessionState.CONNECTED
        logger.info(
            "Connected to card in %s (ATR: %s, command set: %s)",
            self.reader_name,
            self.atr.hex(" ").upper(),
            self.command_set.variant.value,
        )

    def ensure_connected(self) -> None:
        """
        Reconnects to the first reader if the protocol handle is unset.
        The applet is not selected again.
        """
        if self.protocol is None:
            logger.debug("Session not connected, reconnecting")
            self.transport.establish_context()
            self._connect_first_reader()
            if self.state in (SessionState.UNOPENED, SessionState.CLOSED):
                self.state = SessionState.CONNECTED

    def select_applet(self, aid: Optional[bytes] = None) -> None:
        """
        Selects an applet by AID, the Ministry of Interior applet by default.

        Raises:
            CardNotSupportedError: If the card rejects the selection.
        """
        self.ensure_connected()
        if aid is None:
            aid = self.command_set.ministry_of_interior_aid
        command = select_by_aid(aid)

        logger.debug("--> %s", command.hex(" ").upper())
        response = self.transport.transmit(self.protocol, command)
        status = response[-2:].hex(" ").upper()
        logger.debug("<-- (SW: %s)", status)

        if len(response) < 2 or response[-2] not in (SW1_NORMAL, SW1_MORE_DATA):
            raise CardNotSupportedError(
                "SmartCard not supported (can't select Ministry of Interior applet), "
                f"SW: {status or 'none'}"
            )
        self.state = SessionState.APPLET_SELECTED
        logger.info("Applet %s selected (SW: %s)", bytes(aid).hex().upper(), status)

    def close(self) -> None:
        """
        Disconnects from the card (leaving it powered) and releases the
        context. Failures are logged and never raised.
        """
        try:
            self.transport.disconnect()
        except Exception as e:
            logger.warning("Error while disconnecting from card: %s", e)
        try:
            self.transport.release_context()
        except Exception as e:
            logger.warning("Error while releasing PC/SC context: %s", e)
        self.protocol = None
        self.state = SessionState.CLOSED
        logger.info("Session closed.")

    def __enter__(self):
        try:
            self.open()
            self.select_applet()
        except Exception:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
