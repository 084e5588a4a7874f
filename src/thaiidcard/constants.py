"""
This module contains constants used throughout the thaiidcard library,
including APDU bytes, the Ministry of Interior AID, status words and
other static values.
"""

# APDU Commands
CLA_ISO7816 = 0x00
CLA_THAI_ID = 0x80  # For the card's proprietary READ BINARY
INS_SELECT = 0xA4
INS_GET_RESPONSE = 0xC0
INS_READ_BINARY = 0xB0

P1_SELECT_BY_AID = 0x04
P2_SELECT_FIRST = 0x00

HEADER_SIZE = 5  # CLA INS P1 P2 LC

# Application DF (AID)
AID_MINISTRY_OF_INTERIOR = bytes([0xA0, 0x00, 0x00, 0x00, 0x54, 0x48, 0x00, 0x01])

# Status Words
SW1_NORMAL = 0x90
SW1_MORE_DATA = 0x61
SW1_WRONG_LENGTH = 0x6C

# First two ATR bytes of the older card generation
ATR_TYPE01_MARKER = (0x3B, 0x67)

# Text and calendar
CARD_ENCODING = "tis-620"
BUDDHIST_ERA_OFFSET = 543
LIFELONG_DATE = "99999999"
FIELD_SEPARATOR = "#"

PHOTO_MIME_TYPE = "image/jpeg"
PHOTO_BLOCK_COUNT = 20
