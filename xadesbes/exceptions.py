"""
xadesbes exception types.
"""


class XAdESException(Exception):
    pass


class InvalidInput(ValueError, XAdESException):
    pass


class ConfigurationError(InvalidInput):
    """
    Raised when a signing context names an algorithm outside the supported set.
    """


class CanonicalizationError(InvalidInput):
    """
    Raised when an element cannot be canonicalized, or the canonicalization algorithm is not supported.
    """


class DigestError(XAdESException):
    """
    Raised when computing a digest fails.
    """


class SigningError(XAdESException):
    """
    Raised when the signature value cannot be computed (missing or unusable key material, or a hash algorithm the
    signing primitive does not accept).
    """


class IdentifierGenerationError(XAdESException):
    """
    Raised when a unique signature identifier cannot be generated.
    """
