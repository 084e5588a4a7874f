# This file initializes the thaiidcard package.
__version__ = "0.1.0"

from .card import ThaiIDCardReader
from .commands import CommandSet, Variant, build_command, command_set_for, get_response_command, select_by_aid
from .exceptions import (
    ThaiIDCardError,
    NoReadersError,
    TransportError,
    ProtocolMismatchError,
    InvalidATRError,
    CardNotSupportedError,
    APDUError,
    ChainingError,
    DecodeError,
)
from .personal_info import AddressInfo, Personal, PersonalInfo, PersonalPhoto
from .session import Session
from .transaction import TransactionEngine
from .transport import PCSCTransport

get_readers = ThaiIDCardReader.get_readers
