"""
This module defines the data structures holding the personal data read
from the card.
"""
import base64
from dataclasses import dataclass, fields
from datetime import date
from typing import Optional

from .constants import PHOTO_MIME_TYPE
from .decoder import split_fields

SEX_NAMES = {"1": "Male", "2": "Female"}


@dataclass(frozen=True)
class PersonalInfo:
    """
    A name block: prefix (title), first, middle and last name.
    """
    prefix: str
    first_name: str
    middle_name: str
    last_name: str

    @classmethod
    def from_text(cls, text: str):
        """
        Creates a PersonalInfo from a '#'-delimited name block,
        e.g. 'Mr.#Somchai##Jaidee'.
        """
        prefix, first_name, middle_name, last_name = split_fields(text, 4)
        return cls(
            prefix=prefix,
            first_name=first_name,
            middle_name=middle_name,
            last_name=last_name,
        )

    @property
    def full_name(self) -> str:
        parts = (self.prefix, self.first_name, self.middle_name, self.last_name)
        return " ".join(p for p in parts if p)

    def __str__(self):
        return self.full_name


@dataclass(frozen=True)
class AddressInfo:
    """
    A registered address as laid out on the card.
    """
    house_no: str
    village_no: str
    lane: str
    alley: str
    road: str
    sub_district: str
    district: str
    province: str

    @classmethod
    def from_text(cls, text: str):
        # house#moo#trok#soi#road#tambon#amphoe#province
        return cls(*split_fields(text, 8))

    @property
    def full_address(self) -> str:
        parts = (
            self.house_no,
            self.village_no,
            self.lane,
            self.alley,
            self.road,
            self.sub_district,
            self.district,
            self.province,
        )
        return " ".join(p for p in parts if p)

    def __str__(self):
        return self.full_address


@dataclass(frozen=True)
class Personal:
    """
    The personal record read from a Thai national ID card.
    All dates are Gregorian; expire_date is None on lifelong cards.
    """
    citizen_id: str
    thai_personal_info: PersonalInfo
    english_personal_info: PersonalInfo
    date_of_birth: date
    sex: str
    address_info: AddressInfo
    issue_date: date
    expire_date: Optional[date]
    issuer: str
    laser_id: Optional[str] = None

    @property
    def sex_name(self) -> str:
        return SEX_NAMES.get(self.sex, "Other")


@dataclass(frozen=True)
class PersonalPhoto(Personal):
    """
    A personal record together with the JPEG photo stored on the card.
    """
    photo_bytes: bytes = b""

    @classmethod
    def from_personal(cls, personal: Personal, photo_bytes: bytes):
        values = {f.name: getattr(personal, f.name) for f in fields(Personal)}
        return cls(photo_bytes=bytes(photo_bytes), **values)

    @property
    def photo(self) -> str:
        """The photo as a data URI."""
        encoded = base64.b64encode(self.photo_bytes).decode("ascii")
        return f"data:{PHOTO_MIME_TYPE};base64,{encoded}"
