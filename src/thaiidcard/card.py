"""
This module provides the reader facade that opens a session, reads every
field block from a Thai national ID card and assembles the personal record.
"""
import logging
from typing import Callable, List, Optional

from smartcard.System import readers
from smartcard.pcsc.PCSCExceptions import BaseSCardException

from .decoder import (
    decode_text,
    parse_buddhist_date,
    parse_expiry_date,
    split_issue_expire,
    split_personal_info,
)
from .exceptions import ThaiIDCardError
from .personal_info import AddressInfo, Personal, PersonalInfo, PersonalPhoto
from .session import Session
from .transaction import TransactionEngine
from .transport import PCSCTransport


logger = logging.getLogger(__name__)


class ThaiIDCardReader:
    """
    Reads Thai national ID cards from the first available reader.

    Every read runs in its own session, which is always closed afterwards.
    """

    def __init__(
        self,
        settle_delay: Optional[float] = None,
        transport_factory: Callable[[], PCSCTransport] = PCSCTransport,
    ):
        """
        Initializes the ThaiIDCardReader.

        Args:
            settle_delay: Seconds to wait for the reader before each session.
                Defaults to the THAI_ID_SETTLE_DELAY environment variable.
            transport_factory: Creates the PC/SC transport for each session.
        """
        self.settle_delay = settle_delay
        self.transport_factory = transport_factory

    @staticmethod
    def get_readers() -> List[str]:
        """
        Gets a list of available smart card reader names.

        Returns:
            A list of reader names, empty when none are found.
        """
        try:
            return [str(r) for r in readers()]
        except BaseSCardException as e:
            logger.error("Error getting smart card readers: %s", e)
            return []

    def open_session(self) -> Session:
        return Session(self.transport_factory(), settle_delay=self.settle_delay)

    def read_personal(self, include_laser_id: bool = False) -> Personal:
        """
        Reads the personal record from the card.

        Args:
            include_laser_id: Also read the laser ID printed on the back of the card.

        Raises:
            ThaiIDCardError: If the card cannot be read or a field cannot be decoded.
        """
        with self.open_session() as session:
            return self._read_personal(TransactionEngine(session), include_laser_id)

    def read_personal_photo(self, include_laser_id: bool = False) -> PersonalPhoto:
        """
        Reads the personal record and the photo from the card.
        """
        with self.open_session() as session:
            engine = TransactionEngine(session)
            personal = self._read_personal(engine, include_laser_id)
            return PersonalPhoto.from_personal(personal, self._read_photo(engine))

    def read_laser_id(self) -> str:
        with self.open_session() as session:
            return self._read_laser_id(TransactionEngine(session))

    def transmit(self, command: bytes) -> bytes:
        """
        Sends a raw APDU to the card after selecting the applet and returns
        the response data.
        """
        with self.open_session() as session:
            return TransactionEngine(session).transmit(command)

    def _read_text(self, engine: TransactionEngine, command: bytes) -> str:
        return decode_text(engine.transmit(command))

    def _read_laser_id(self, engine: TransactionEngine) -> str:
        return self._read_text(engine, engine.session.command_set.laser_id_command).strip()

    def _read_personal(self, engine: TransactionEngine, include_laser_id: bool) -> Personal:
        commands = engine.session.command_set

        citizen_id = self._read_text(engine, commands.citizen_id_command).strip()

        info = split_personal_info(self._read_text(engine, commands.personal_info_command))
        address = self._read_text(engine, commands.address_info_command)
        issue_expire = split_issue_expire(
            self._read_text(engine, commands.card_issue_expire_command)
        )
        issuer = self._read_text(engine, commands.card_issuer_command).strip()
        laser_id = self._read_laser_id(engine) if include_laser_id else None

        personal = Personal(
            citizen_id=citizen_id,
            thai_personal_info=PersonalInfo.from_text(info.thai_name),
            english_personal_info=PersonalInfo.from_text(info.english_name),
            date_of_birth=parse_buddhist_date(info.date_of_birth),
            sex=info.sex,
            address_info=AddressInfo.from_text(address),
            issue_date=parse_buddhist_date(issue_expire.issue_date),
            expire_date=parse_expiry_date(issue_expire.expire_date),
            issuer=issuer,
            laser_id=laser_id,
        )
        logger.info("Personal record read from card.")
        return personal

    def _read_photo(self, engine: TransactionEngine) -> bytes:
        photo = bytearray()
        for block, command in enumerate(engine.session.command_set.photo_commands, 1):
            data = engine.transmit(command)
            if data:
                photo.extend(data)
            logger.debug("Photo block %d: %d bytes (total %d)", block, len(data), len(photo))

        if not photo:
            raise ThaiIDCardError("Failed to read any photo data from the card.")
        return bytes(photo)
