import datetime
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .algorithms import CanonicalizationMethod, HashAlgorithm
from .credentials import CredentialBundle
from .exceptions import ConfigurationError, IdentifierGenerationError
from .processor import Canonicalizer

logger = logging.getLogger(__name__)

DEFAULT_C14N_ALGORITHM = CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0
DEFAULT_HASH_ALGORITHM = HashAlgorithm.SHA256


def _coerce_algorithms(context):
    object.__setattr__(context, "c14n_algorithm", CanonicalizationMethod(context.c14n_algorithm))
    object.__setattr__(context, "hash_algorithm", HashAlgorithm(context.hash_algorithm))


@dataclass(frozen=True)
class SignedDataContext:
    """
    Settings for the reference to the signed data.
    """

    c14n_algorithm: Union[CanonicalizationMethod, str] = DEFAULT_C14N_ALGORITHM
    "Canonicalization method applied to the data before digesting, declared as the reference's last transform"

    hash_algorithm: Union[HashAlgorithm, str] = DEFAULT_HASH_ALGORITHM

    reference_uri: str = ""
    "The data reference URI. The empty string refers to the whole document enveloping the signature."

    enveloped: bool = True
    "Declare the enveloped-signature transform ahead of the canonicalization transform"

    def __post_init__(self):
        _coerce_algorithms(self)

    @property
    def canonicalizer(self) -> Canonicalizer:
        return Canonicalizer(self.c14n_algorithm)


@dataclass(frozen=True)
class SignedPropertiesContext:
    """
    Settings for the XAdES SignedProperties element and the reference to it.
    """

    c14n_algorithm: Union[CanonicalizationMethod, str] = DEFAULT_C14N_ALGORITHM
    hash_algorithm: Union[HashAlgorithm, str] = DEFAULT_HASH_ALGORITHM

    signing_time: Optional[datetime.datetime] = None
    "Claimed signing time. When unset, the current time is used at signature creation."

    def __post_init__(self):
        _coerce_algorithms(self)

    @property
    def canonicalizer(self) -> Canonicalizer:
        return Canonicalizer(self.c14n_algorithm)


@dataclass(frozen=True)
class SigningContext:
    """
    Everything needed to produce one XAdES-BES signature. String algorithm identifiers (URIs or fragments such as
    ``"sha256"``) are converted to enumeration members on construction; unsupported hash algorithms raise
    :class:`xadesbes.exceptions.ConfigurationError` here, before any digest or signature is computed.

    Contexts are immutable and can be reused across signing operations, including concurrent ones.
    """

    credentials: CredentialBundle

    data_context: SignedDataContext = field(default_factory=SignedDataContext)
    properties_context: SignedPropertiesContext = field(default_factory=SignedPropertiesContext)

    c14n_algorithm: Union[CanonicalizationMethod, str] = DEFAULT_C14N_ALGORITHM
    "Canonicalization method for SignedInfo"

    hash_algorithm: Union[HashAlgorithm, str] = DEFAULT_HASH_ALGORITHM
    "Hash algorithm of the RSA signature method"

    ds_prefix: str = "ds"
    "Namespace prefix for XML Signature elements. Use an empty string to make it the default namespace."

    use_signature_uuid: bool = False
    "Derive element Ids from a unique identifier (``Signature-<uuid>-Signature`` etc.) instead of fixed names"

    signature_uuid: Optional[uuid.UUID] = None
    "A preset identifier to use when ``use_signature_uuid`` is on. When unset, a time-based UUID is generated."

    def __post_init__(self):
        _coerce_algorithms(self)
        if not isinstance(self.data_context, SignedDataContext):
            raise ConfigurationError(f"Expected a SignedDataContext, got {type(self.data_context).__name__}")
        if not isinstance(self.properties_context, SignedPropertiesContext):
            raise ConfigurationError(
                f"Expected a SignedPropertiesContext, got {type(self.properties_context).__name__}"
            )

    @property
    def canonicalizer(self) -> Canonicalizer:
        return Canonicalizer(self.c14n_algorithm)


@dataclass(frozen=True)
class SignatureIdentifiers:
    """
    Element Ids for one signing operation, all derived from a single prefix.
    """

    prefix: str = ""

    @property
    def signature_id(self) -> str:
        return f"{self.prefix}Signature"

    @property
    def signed_properties_id(self) -> str:
        return f"{self.prefix}SignedProperties"

    @property
    def signature_uri(self) -> str:
        return f"#{self.signature_id}"

    @property
    def signed_properties_uri(self) -> str:
        return f"#{self.signed_properties_id}"


def allocate_identifiers(
    context: SigningContext, uuid_factory: Callable[[], uuid.UUID] = uuid.uuid1
) -> SignatureIdentifiers:
    """
    Allocate the Id prefix for one signing operation. Call this once per operation and pass the result to every
    builder, so that the SignedProperties Id, the reference to it and the QualifyingProperties Target agree.
    """
    if not context.use_signature_uuid:
        return SignatureIdentifiers()
    signature_uuid = context.signature_uuid
    if signature_uuid is None:
        try:
            signature_uuid = uuid_factory()
        except Exception as e:
            raise IdentifierGenerationError(f"Unable to generate a signature identifier: {e}") from e
    identifiers = SignatureIdentifiers(prefix=f"Signature-{signature_uuid}-")
    logger.debug("Allocated signature Id prefix %s", identifiers.prefix)
    return identifiers
