"""
This module wraps the PC/SC primitives exposed by pyscard's
``smartcard.scard`` module behind the narrow interface the session needs.
"""
import logging
from typing import List

from smartcard.scard import (
    SCARD_E_NO_READERS_AVAILABLE,
    SCARD_LEAVE_CARD,
    SCARD_S_SUCCESS,
    SCARD_SCOPE_USER,
    SCARD_SHARE_SHARED,
    SCardConnect,
    SCardDisconnect,
    SCardEstablishContext,
    SCardGetErrorMessage,
    SCardListReaders,
    SCardReleaseContext,
    SCardStatus,
    SCardTransmit,
)

from .exceptions import TransportError


logger = logging.getLogger(__name__)


def _check(hresult: int, operation: str) -> None:
    if hresult != SCARD_S_SUCCESS:
        raise TransportError(
            f"{operation} failed: {SCardGetErrorMessage(hresult)}", hresult
        )


class PCSCTransport:
    """
    Owns one PC/SC context and at most one card handle.
    """

    def __init__(self, scope: int = SCARD_SCOPE_USER):
        self.scope = scope
        self._context = None
        self._card = None

    @property
    def has_context(self) -> bool:
        return self._context is not None

    @property
    def is_connected(self) -> bool:
        return self._card is not None

    def establish_context(self) -> None:
        if self._context is not None:
            return
        hresult, context = SCardEstablishContext(self.scope)
        _check(hresult, "SCardEstablishContext")
        self._context = context
        logger.debug("PC/SC context established")

    def list_readers(self) -> List[str]:
        """
        Returns the names of the connected readers, or an empty list.
        """
        self.establish_context()
        hresult, reader_list = SCardListReaders(self._context, [])
        if hresult == SCARD_E_NO_READERS_AVAILABLE:
            return []
        _check(hresult, "SCardListReaders")
        return list(reader_list or [])

    def connect(self, reader_name: str, protocols: int) -> int:
        """
        Connects to the card in ``reader_name`` in shared mode.

        Returns:
            The active protocol negotiated by the reader.
        """
        self.establish_context()
        hresult, card, active_protocol = SCardConnect(
            self._context, reader_name, SCARD_SHARE_SHARED, protocols
        )
        _check(hresult, "SCardConnect")
        self._card = card
        logger.debug("Connected to %s (protocol %d)", reader_name, active_protocol)
        return active_protocol

    def transmit(self, protocol: int, apdu: bytes) -> bytes:
        """
        Sends a raw command and returns the raw response, status word included.
        """
        if self._card is None:
            raise TransportError("Not connected to a card.")
        hresult, response = SCardTransmit(self._card, protocol, list(apdu))
        _check(hresult, "SCardTransmit")
        return bytes(response)

    def get_atr(self) -> bytes:
        if self._card is None:
            raise TransportError("Not connected to a card.")
        hresult, _reader, _state, _protocol, atr = SCardStatus(self._card)
        _check(hresult, "SCardStatus")
        return bytes(atr or [])

    def disconnect(self, disposition: int = SCARD_LEAVE_CARD) -> None:
        if self._card is None:
            return
        card, self._card = self._card, None
        _check(SCardDisconnect(card, disposition), "SCardDisconnect")

    def release_context(self) -> None:
        if self._context is None:
            return
        context, self._context = self._context, None
        _check(SCardReleaseContext(context), "SCardReleaseContext")
        logger.debug("PC/SC context released")
