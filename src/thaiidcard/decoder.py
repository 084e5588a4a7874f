"""
This module decodes the TIS-620 text blocks stored on the card and splits
them into fields at their fixed offsets.
"""
from datetime import date
from typing import List, NamedTuple, Optional

from .constants import BUDDHIST_ERA_OFFSET, CARD_ENCODING, FIELD_SEPARATOR, LIFELONG_DATE
from .exceptions import DecodeError

# Offsets inside the personal info block
THAI_NAME = slice(0, 100)
ENGLISH_NAME = slice(100, 200)
DATE_OF_BIRTH = slice(200, 208)
SEX = slice(208, 209)
PERSONAL_INFO_LENGTH = 209

# Offsets inside the issue/expire block
ISSUE_DATE = slice(0, 8)
EXPIRE_DATE = slice(8, 16)
ISSUE_EXPIRE_LENGTH = 16


class PersonalInfoBlock(NamedTuple):
    thai_name: str
    english_name: str
    date_of_birth: str
    sex: str


class IssueExpireBlock(NamedTuple):
    issue_date: str
    expire_date: str


def decode_text(raw: Optional[bytes]) -> str:
    """Decodes TIS-620 bytes. Empty or missing input gives an empty string."""
    if not raw:
        return ""
    return bytes(raw).decode(CARD_ENCODING, errors="replace")


def parse_buddhist_date(digits: str) -> date:
    """
    Parses a YYYYMMDD Buddhist Era date into a Gregorian date.

    Raises:
        DecodeError: If the text is not eight digits or is not a valid date.
    """
    text = digits.strip()
    if len(text) != 8 or not text.isdigit():
        raise DecodeError(f"Invalid date field: {digits!r}")
    try:
        return date(
            int(text[0:4]) - BUDDHIST_ERA_OFFSET,
            int(text[4:6]),
            int(text[6:8]),
        )
    except ValueError as e:
        raise DecodeError(f"Invalid date field: {digits!r} ({e})")


def parse_expiry_date(digits: str) -> Optional[date]:
    """Like parse_buddhist_date, but a lifelong card (99999999) gives None."""
    if digits.strip() == LIFELONG_DATE:
        return None
    return parse_buddhist_date(digits)


def split_personal_info(text: str) -> PersonalInfoBlock:
    if len(text) < PERSONAL_INFO_LENGTH:
        raise DecodeError(
            f"Personal info block too short: {len(text)} characters, expected {PERSONAL_INFO_LENGTH}"
        )
    return PersonalInfoBlock(
        thai_name=text[THAI_NAME],
        english_name=text[ENGLISH_NAME],
        date_of_birth=text[DATE_OF_BIRTH],
        sex=text[SEX],
    )


def split_issue_expire(text: str) -> IssueExpireBlock:
    if len(text) < ISSUE_EXPIRE_LENGTH:
        raise DecodeError(
            f"Issue/expire block too short: {len(text)} characters, expected {ISSUE_EXPIRE_LENGTH}"
        )
    return IssueExpireBlock(issue_date=text[ISSUE_DATE], expire_date=text[EXPIRE_DATE])


def split_fields(text: str, count: int) -> List[str]:
    """
    Splits a '#'-delimited block into exactly ``count`` stripped fields.
    Missing trailing fields are empty; extra fields are folded into the last.
    """
    parts = text.strip(" \x00\r\n\t").split(FIELD_SEPARATOR, count - 1)
    parts += [""] * (count - len(parts))
    return [" ".join(p.split()) for p in parts]
