import pytest
from unittest.mock import call

from smartcard.scard import SCARD_PROTOCOL_T1

from thaiidcard.exceptions import APDUError, ChainingError, TransportError
from thaiidcard.session import Session
from thaiidcard.transaction import MAX_CHAIN_DEPTH, StatusKind, TransactionEngine, classify_status

from conftest import ATR_TYPE01, ok

READ_CID = bytes([0x80, 0xB0, 0x00, 0x04, 0x02, 0x00, 0x0D])


def test_classify_status():
    assert classify_status(0x90, 0x00) is StatusKind.NORMAL
    assert classify_status(0x61, 0x10) is StatusKind.MORE_DATA
    assert classify_status(0x6C, 0x05) is StatusKind.WRONG_LENGTH
    assert classify_status(0x6A, 0x82) is StatusKind.ERROR


def test_transmit_normal_strips_status_word(session, transport):
    transport.transmit.side_effect = [ok(b"1101700203451")]

    assert TransactionEngine(session).transmit(READ_CID) == b"1101700203451"
    transport.transmit.assert_called_once_with(SCARD_PROTOCOL_T1, READ_CID)


def test_transmit_normal_without_data(session, transport):
    transport.transmit.side_effect = [ok()]

    assert TransactionEngine(session).transmit(READ_CID) == b""


def test_wrong_length_is_retried_once_with_le(session, transport):
    """6C 05 triggers exactly one resend with Le = 5."""
    transport.transmit.side_effect = [ok(sw1=0x6C, sw2=0x05), ok(b"ABCDE")]

    assert TransactionEngine(session).transmit(READ_CID) == b"ABCDE"

    assert transport.transmit.call_args_list == [
        call(SCARD_PROTOCOL_T1, READ_CID),
        call(SCARD_PROTOCOL_T1, bytes([0x80, 0xB0, 0x00, 0x04, 0x05])),
    ]


def test_more_data_accumulates_segments_in_order(session, transport):
    """61 00 -> GET RESPONSE(256) -> 61 10 -> GET RESPONSE(16) -> 90 00."""
    first = bytes(range(256))
    second = bytes(range(16))
    transport.transmit.side_effect = [
        ok(sw1=0x61, sw2=0x00),
        ok(first, sw1=0x61, sw2=0x10),
        ok(second),
    ]

    assert TransactionEngine(session).transmit(READ_CID) == first + second

    assert transport.transmit.call_args_list == [
        call(SCARD_PROTOCOL_T1, READ_CID),
        call(SCARD_PROTOCOL_T1, bytes([0x00, 0xC0, 0x00, 0x00, 0x00])),
        call(SCARD_PROTOCOL_T1, bytes([0x00, 0xC0, 0x00, 0x00, 0x10])),
    ]


def test_get_response_resolves_wrong_length(session, transport):
    transport.transmit.side_effect = [
        ok(sw1=0x61, sw2=0x08),
        ok(sw1=0x6C, sw2=0x04),
        ok(b"DATA"),
    ]

    assert TransactionEngine(session).transmit(READ_CID) == b"DATA"
    assert transport.transmit.call_args_list[2] == call(
        SCARD_PROTOCOL_T1, bytes([0x00, 0xC0, 0x00, 0x00, 0x04])
    )


def test_type01_card_uses_its_get_response(transport):
    transport.get_atr.return_value = ATR_TYPE01
    session = Session(transport, settle_delay=0)
    session.open()
    transport.transmit.side_effect = [ok(sw1=0x61, sw2=0x0D), ok(b"1101700203451")]

    assert TransactionEngine(session).transmit(READ_CID) == b"1101700203451"
    assert transport.transmit.call_args_list[1] == call(
        SCARD_PROTOCOL_T1, bytes([0x00, 0xC0, 0x00, 0x01, 0x0D])
    )


def test_error_status_raises(session, transport):
    transport.transmit.side_effect = [ok(sw1=0x6A, sw2=0x82)]

    with pytest.raises(APDUError) as excinfo:
        TransactionEngine(session).transmit(READ_CID)

    assert excinfo.value.sw1 == 0x6A
    assert excinfo.value.sw2 == 0x82
    assert transport.transmit.call_count == 1


def test_chaining_depth_is_bounded(session, transport):
    transport.transmit.return_value = ok(b"X", sw1=0x61, sw2=0x01)

    with pytest.raises(ChainingError):
        TransactionEngine(session).transmit(READ_CID)

    assert transport.transmit.call_count == MAX_CHAIN_DEPTH + 1


def test_truncated_response_raises(session, transport):
    transport.transmit.side_effect = [b"\x90"]

    with pytest.raises(TransportError):
        TransactionEngine(session).transmit(READ_CID)


def test_transport_errors_propagate(session, transport):
    transport.transmit.side_effect = TransportError("SCardTransmit failed: Card was removed.", 0x80100069)

    with pytest.raises(TransportError) as excinfo:
        TransactionEngine(session).transmit(READ_CID)

    assert excinfo.value.hresult == 0x80100069


def test_transmit_connects_lazily(transport):
    """An unopened session is connected on first use, without selecting the applet."""
    session = Session(transport, settle_delay=0)
    transport.transmit.side_effect = [ok(b"1101700203451")]

    assert TransactionEngine(session).transmit(READ_CID) == b"1101700203451"

    transport.connect.assert_called_once()
    transport.get_atr.assert_not_called()
    assert transport.transmit.call_count == 1
    assert session.protocol == SCARD_PROTOCOL_T1


def test_transmit_rejects_none(session):
    with pytest.raises(ValueError):
        TransactionEngine(session).transmit(None)
