"""
This module provides the APDU command catalog for Thai national ID cards
and the pure helpers used to build ISO 7816-4 short commands.
"""
import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .constants import (
    AID_MINISTRY_OF_INTERIOR,
    ATR_TYPE01_MARKER,
    CLA_ISO7816,
    CLA_THAI_ID,
    INS_GET_RESPONSE,
    INS_READ_BINARY,
    INS_SELECT,
    P1_SELECT_BY_AID,
    P2_SELECT_FIRST,
    PHOTO_BLOCK_COUNT,
)


class Variant(enum.Enum):
    """The two known card command sets."""
    TYPE01 = "type01"
    TYPE02 = "type02"


def build_command(
    cla: int,
    ins: int,
    p1: int,
    p2: int,
    data: Optional[bytes] = None,
    le: Optional[int] = None,
) -> bytes:
    """
    Builds a short-form APDU: CLA INS P1 P2 [Lc Data] [Le].

    Args:
        cla, ins, p1, p2: Header bytes.
        data: Optional command payload. Lc is omitted when it is empty.
        le: Optional expected response length. 256 is encoded as 0x00.

    Returns:
        The raw command bytes.
    """
    apdu = bytearray([cla, ins, p1, p2])
    if data:
        if len(data) > 0xFF:
            raise ValueError(f"Payload too long for a short APDU: {len(data)} bytes")
        apdu.append(len(data))
        apdu.extend(data)
    if le is not None:
        if not 0 <= le <= 256:
            raise ValueError(f"Invalid Le: {le}")
        apdu.append(le & 0xFF)
    return bytes(apdu)


def get_response_command(le: int, p2: int = 0x00) -> bytes:
    """GET RESPONSE (00 C0 00 P2 Le)."""
    return build_command(CLA_ISO7816, INS_GET_RESPONSE, 0x00, p2, le=le)


def select_by_aid(aid: bytes) -> bytes:
    """SELECT by AID (00 A4 04 00 Lc AID)."""
    return build_command(CLA_ISO7816, INS_SELECT, P1_SELECT_BY_AID, P2_SELECT_FIRST, data=bytes(aid))


def read_binary(offset: int, length: int) -> bytes:
    """
    Builds the card's proprietary read command (80 B0 OFFh OFFl 02 LENh LENl).

    The two trailing bytes carry the requested length as a payload rather
    than as a regular Le byte.
    """
    return build_command(
        CLA_THAI_ID,
        INS_READ_BINARY,
        (offset >> 8) & 0xFF,
        offset & 0xFF,
        data=bytes([(length >> 8) & 0xFF, length & 0xFF]),
    )


def _photo_commands() -> Tuple[bytes, ...]:
    # Block n lives at offset 0x017B + 0x00FF * n (P1 climbs, P2 falls).
    return tuple(read_binary(0x017B + 0xFF * n, 0xFF) for n in range(PHOTO_BLOCK_COUNT))


@dataclass(frozen=True)
class CommandSet:
    """
    Byte-exact command templates for one card command-set variant.
    """
    variant: Variant
    get_response_p2: int
    ministry_of_interior_aid: bytes = AID_MINISTRY_OF_INTERIOR
    citizen_id_command: bytes = bytes([0x80, 0xB0, 0x00, 0x04, 0x02, 0x00, 0x0D])
    # P1/P2 00 11 as observed on real cards; some references document 00 10.
    personal_info_command: bytes = bytes([0x80, 0xB0, 0x00, 0x11, 0x02, 0x00, 0xD1])
    address_info_command: bytes = bytes([0x80, 0xB0, 0x15, 0x79, 0x02, 0x00, 0x64])
    card_issue_expire_command: bytes = bytes([0x80, 0xB0, 0x01, 0x67, 0x02, 0x00, 0x12])
    card_issuer_command: bytes = bytes([0x80, 0xB0, 0x00, 0xF6, 0x02, 0x00, 0x64])
    laser_id_command: bytes = bytes([0x80, 0xB0, 0x00, 0x1D, 0x02, 0x00, 0x0D])
    photo_commands: Tuple[bytes, ...] = field(default_factory=_photo_commands)

    @property
    def field_commands(self) -> Tuple[bytes, ...]:
        """All non-photo read templates, in catalog order."""
        return (
            self.citizen_id_command,
            self.personal_info_command,
            self.address_info_command,
            self.card_issue_expire_command,
            self.card_issuer_command,
            self.laser_id_command,
        )

    def select_applet_command(self) -> bytes:
        return select_by_aid(self.ministry_of_interior_aid)

    def get_response(self, le: int) -> bytes:
        return get_response_command(le, p2=self.get_response_p2)


_COMMAND_SETS = {
    # Older cards (ATR 3B 67 ...) answer GET RESPONSE only with P2 = 01.
    Variant.TYPE01: CommandSet(variant=Variant.TYPE01, get_response_p2=0x01),
    Variant.TYPE02: CommandSet(variant=Variant.TYPE02, get_response_p2=0x00),
}

DEFAULT_VARIANT = Variant.TYPE02


def command_set_for(variant: Variant) -> CommandSet:
    """
    Returns the command set for the given variant.

    Raises:
        ValueError: If the variant is unknown.
    """
    try:
        return _COMMAND_SETS[Variant(variant)]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid variant: {variant}")


def variant_for_atr(atr: Sequence[int]) -> Variant:
    """Picks the command set variant from the first two ATR bytes."""
    if tuple(atr[:2]) == ATR_TYPE01_MARKER:
        return Variant.TYPE01
    return DEFAULT_VARIANT
