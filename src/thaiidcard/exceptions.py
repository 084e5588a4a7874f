"""
Custom exceptions for the thaiidcard library.
"""

class ThaiIDCardError(Exception):
    """Base exception class for all thaiidcard errors."""
    pass

class NoReadersError(ThaiIDCardError):
    """Raised when no smart card reader is available."""
    pass

class TransportError(ThaiIDCardError):
    """
    Raised when a PC/SC primitive returns a non-success result code.
    """
    def __init__(self, message, hresult=None):
        self.hresult = hresult
        super().__init__(message)

class ProtocolMismatchError(ThaiIDCardError):
    """Raised when the reader negotiates a protocol we cannot drive."""
    pass

class InvalidATRError(ThaiIDCardError):
    """Raised when the card's answer-to-reset is too short to classify."""
    pass

class CardNotSupportedError(ThaiIDCardError):
    """Raised when the Ministry of Interior applet cannot be selected."""
    pass

class APDUError(ThaiIDCardError):
    """
    Raised when an APDU command returns a status word that is neither
    success nor one of the chaining codes.
    """
    def __init__(self, message, sw1, sw2):
        self.sw1 = sw1
        self.sw2 = sw2
        super().__init__(f"{message} (SW1: {sw1:02X}, SW2: {sw2:02X})")

class ChainingError(APDUError):
    """
    Raised when response chaining does not terminate within the allowed depth.
    """
    pass

class DecodeError(ThaiIDCardError):
    """Raised when a field read from the card cannot be parsed."""
    pass
