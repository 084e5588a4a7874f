import pytest
from unittest.mock import MagicMock

from smartcard.scard import SCARD_PROTOCOL_T1

from thaiidcard.card import ThaiIDCardReader
from thaiidcard.session import Session

ATR_TYPE02 = bytes([0x3B, 0x78, 0x18, 0x00, 0x00, 0x73, 0xC8, 0x40, 0x13, 0x00, 0x90, 0x00])
ATR_TYPE01 = bytes([0x3B, 0x67, 0x00, 0x00, 0x73, 0x20, 0x00, 0x6C, 0x68, 0x90, 0x00])

THAI_NAME = "นาย#สมชาย##ใจดี"
ENGLISH_NAME = "Mr.#Somchai##Jaidee"
ADDRESS = "99/1#หมู่ที่ 4###ถนนพหลโยธิน#ตำบลคลองหนึ่ง#อำเภอคลองหลวง#จังหวัดปทุมธานี"
ISSUER = "ที่ว่าการอำเภอคลองหลวง/ปทุมธานี"


def ok(data=b"", sw1=0x90, sw2=0x00):
    """Builds a raw response: data followed by the status word."""
    return bytes(data) + bytes([sw1, sw2])


def tis620(text, width=None):
    raw = text.encode("tis-620")
    return raw.ljust(width, b" ") if width else raw


def field_responses(birth="25300115", sex="1", issue_expire="2563010125720131"):
    """Responses for SELECT followed by the five default field reads."""
    personal_info = (
        tis620(THAI_NAME, 100) + tis620(ENGLISH_NAME, 100) + birth.encode() + sex.encode()
    )
    return [
        ok(sw1=0x61, sw2=0x0A),
        ok(b"1101700203451"),
        ok(personal_info),
        ok(tis620(ADDRESS, 100)),
        ok(issue_expire.encode().ljust(18, b" ")),
        ok(tis620(ISSUER, 100)),
    ]


@pytest.fixture
def transport():
    """A MagicMock standing in for PCSCTransport with one reader and a type02 card."""
    fake = MagicMock()
    fake.list_readers.return_value = ["Fake Reader 0"]
    fake.connect.return_value = SCARD_PROTOCOL_T1
    fake.get_atr.return_value = ATR_TYPE02
    return fake


@pytest.fixture
def session(transport):
    """An opened session over the fake transport."""
    s = Session(transport, settle_delay=0)
    s.open()
    return s


@pytest.fixture
def card_reader(transport):
    return ThaiIDCardReader(settle_delay=0, transport_factory=lambda: transport)
