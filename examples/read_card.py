#!/usr/bin/env python3
import logging
import sys

from thaiidcard import ThaiIDCardError, ThaiIDCardReader


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("thaiidcard.example")

    with_photo = "--photo" in sys.argv[1:]
    with_laser_id = "--laser-id" in sys.argv[1:]

    reader = ThaiIDCardReader()
    try:
        if with_photo:
            personal = reader.read_personal_photo(include_laser_id=with_laser_id)
        else:
            personal = reader.read_personal(include_laser_id=with_laser_id)
    except ThaiIDCardError as e:
        logger.error(f"Failed to read card: {e}")
        sys.exit(1)

    print(f"CitizenID: {personal.citizen_id}")
    print(f"ThaiPersonalInfo: {personal.thai_personal_info}")
    print(f"EnglishPersonalInfo: {personal.english_personal_info}")
    print(f"DateOfBirth: {personal.date_of_birth}")
    print(f"Sex: {personal.sex_name}")
    print(f"AddressInfo: {personal.address_info}")
    print(f"IssueDate: {personal.issue_date}")
    print(f"ExpireDate: {personal.expire_date or 'Lifelong'}")
    print(f"Issuer: {personal.issuer}")
    if with_laser_id:
        print(f"LaserID: {personal.laser_id}")
    if with_photo:
        print(f"Photo: {personal.photo}")


if __name__ == "__main__":
    main()
