"""
This module sends APDUs through a session and resolves the two chaining
behaviors of ISO 7816-4: GET RESPONSE after ``61 xx`` and a re-issue with
the corrected length after ``6C xx``.
"""
import enum
import logging

from .commands import build_command
from .constants import SW1_MORE_DATA, SW1_NORMAL, SW1_WRONG_LENGTH
from .exceptions import APDUError, ChainingError, TransportError
from .session import Session


logger = logging.getLogger(__name__)

MAX_CHAIN_DEPTH = 8


class StatusKind(enum.Enum):
    NORMAL = "normal"
    MORE_DATA = "more_data"
    WRONG_LENGTH = "wrong_length"
    ERROR = "error"


def classify_status(sw1: int, sw2: int) -> StatusKind:
    """
    Classifies a status word pair.

    For MORE_DATA, SW2 is the number of bytes waiting (0 meaning 256);
    for WRONG_LENGTH, SW2 is the length the card expects.
    """
    if sw1 == SW1_NORMAL:
        return StatusKind.NORMAL
    if sw1 == SW1_MORE_DATA:
        return StatusKind.MORE_DATA
    if sw1 == SW1_WRONG_LENGTH:
        return StatusKind.WRONG_LENGTH
    return StatusKind.ERROR


class TransactionEngine:
    """
    Sends commands to the card held by a session.
    """

    def __init__(self, session: Session, max_depth: int = MAX_CHAIN_DEPTH):
        self.session = session
        self.max_depth = max_depth

    def transmit(self, command: bytes) -> bytes:
        """
        Sends a command and returns the response data without the status word.

        Args:
            command: The raw APDU to send.

        Returns:
            The data returned by the card, chained responses concatenated in order.

        Raises:
            APDUError: If the card returns an error status word.
            ChainingError: If chaining does not terminate within max_depth.
            TransportError: If the transmission itself fails.
        """
        if command is None:
            raise ValueError("command must not be None")
        self.session.ensure_connected()
        return self._send(bytes(command), 0)

    def _send(self, command: bytes, depth: int) -> bytes:
        logger.debug("--> %s", command.hex(" ").upper())
        response = self.session.transport.transmit(self.session.protocol, command)
        if response is None or len(response) < 2:
            raise TransportError(f"Truncated response to {command.hex(' ').upper()}")

        data, sw1, sw2 = bytes(response[:-2]), response[-2], response[-1]
        logger.debug("<-- %s (SW: %02X %02X)", data.hex(" ").upper(), sw1, sw2)

        kind = classify_status(sw1, sw2)
        if kind is StatusKind.NORMAL:
            return data
        if kind is StatusKind.ERROR:
            raise APDUError(f"APDU command failed: {command.hex(' ').upper()}", sw1, sw2)

        if depth >= self.max_depth:
            raise ChainingError(
                f"Response chaining exceeded {self.max_depth} steps", sw1, sw2
            )

        if kind is StatusKind.WRONG_LENGTH:
            cla, ins, p1, p2 = command[:4]
            return self._send(build_command(cla, ins, p1, p2, le=sw2), depth + 1)

        le = sw2 or 256
        return data + self._send(self.session.command_set.get_response(le), depth + 1)
