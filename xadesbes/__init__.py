"""
Use :func:`xadesbes.xades.create_signature` with a :class:`xadesbes.SigningContext`, or the
:class:`xadesbes.xades.XAdESSigner` front end, to create XAdES-BES signatures.
"""

from .algorithms import CanonicalizationMethod, HashAlgorithm, SignatureMethod
from .context import SignatureIdentifiers, SignedDataContext, SignedPropertiesContext, SigningContext
from .credentials import CredentialBundle
from .exceptions import (
    CanonicalizationError,
    ConfigurationError,
    DigestError,
    IdentifierGenerationError,
    InvalidInput,
    SigningError,
    XAdESException,
)
from .processor import Canonicalizer
from .signer import RSASigner
from .util import namespaces
