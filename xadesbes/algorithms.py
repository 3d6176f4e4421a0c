from enum import Enum
from typing import Type

from cryptography.hazmat.primitives import hashes

from .exceptions import CanonicalizationError, ConfigurationError

ENVELOPED_SIGNATURE_TRANSFORM = "http://www.w3.org/2000/09/xmldsig#enveloped-signature"
SIGNED_PROPERTIES_TYPE = "http://uri.etsi.org/01903#SignedProperties"


class FragmentLookupMixin:
    @classmethod
    def from_fragment(cls, fragment):
        for i in cls:  # type: ignore
            if i.value.lower().endswith("#" + fragment.lower()):
                return i
        return None

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"  # type: ignore


class HashAlgorithm(FragmentLookupMixin, Enum):
    """
    An enumeration of the hash algorithms usable in a XAdES-BES signature. The value of each member is its digest
    method identifier as defined by the XML Signature and XML Encryption standards. Any other algorithm is rejected with
    :class:`xadesbes.exceptions.ConfigurationError`.

    Members can be looked up by full URI or by identifier fragment::

        HashAlgorithm("http://www.w3.org/2001/04/xmlenc#sha256") is HashAlgorithm("sha256") is HashAlgorithm.SHA256
    """

    SHA1 = "http://www.w3.org/2000/09/xmldsig#sha1"
    SHA256 = "http://www.w3.org/2001/04/xmlenc#sha256"
    SHA512 = "http://www.w3.org/2001/04/xmlenc#sha512"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and "#" not in value:
            member = cls.from_fragment(value)
            if member is not None:
                return member
        raise ConfigurationError(f"Unsupported {cls.__name__}: {value}")

    @property
    def digest_method(self) -> str:
        """
        The DigestMethod Algorithm URI for this hash algorithm.
        """
        return self.value

    @property
    def signature_method(self) -> "SignatureMethod":
        """
        The RSA SignatureMethod matching this hash algorithm.
        """
        if self is HashAlgorithm.SHA1:
            return SignatureMethod.RSA_SHA1
        elif self is HashAlgorithm.SHA256:
            return SignatureMethod.RSA_SHA256
        elif self is HashAlgorithm.SHA512:
            return SignatureMethod.RSA_SHA512
        raise ConfigurationError(f"No signature method for {self!r}")

    @property
    def implementation(self) -> Type[hashes.HashAlgorithm]:
        """
        The cryptography class that implements the specified algorithm.
        """
        if self is HashAlgorithm.SHA1:
            return hashes.SHA1
        elif self is HashAlgorithm.SHA256:
            return hashes.SHA256
        elif self is HashAlgorithm.SHA512:
            return hashes.SHA512
        raise ConfigurationError(f"No implementation for {self!r}")


class SignatureMethod(FragmentLookupMixin, Enum):
    """
    RSASSA-PKCS1-v1_5 signature methods (RFC 3447), one per :class:`HashAlgorithm`. Use
    :attr:`HashAlgorithm.signature_method` to obtain the member for a hash.
    """

    RSA_SHA1 = "http://www.w3.org/2000/09/xmldsig#rsa-sha1"
    RSA_SHA256 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha256"
    RSA_SHA512 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha512"

    @classmethod
    def _missing_(cls, value):
        raise ConfigurationError(f"Unsupported {cls.__name__}: {value}")


class CanonicalizationMethod(Enum):
    """
    An enumeration of XML canonicalization methods (also referred to as canonicalization algorithms). See the
    `Algorithm Identifiers and Implementation Requirements <http://www.w3.org/TR/xmldsig-core1/#sec-AlgID>`_ section of
    the XML Signature 1.1 standard for details.
    """

    CANONICAL_XML_1_0 = "http://www.w3.org/TR/2001/REC-xml-c14n-20010315"
    CANONICAL_XML_1_0_WITH_COMMENTS = "http://www.w3.org/TR/2001/REC-xml-c14n-20010315#WithComments"
    CANONICAL_XML_1_1 = "http://www.w3.org/2006/12/xml-c14n11"
    CANONICAL_XML_1_1_WITH_COMMENTS = "http://www.w3.org/2006/12/xml-c14n11#WithComments"
    EXCLUSIVE_XML_CANONICALIZATION_1_0 = "http://www.w3.org/2001/10/xml-exc-c14n#"
    EXCLUSIVE_XML_CANONICALIZATION_1_0_WITH_COMMENTS = "http://www.w3.org/2001/10/xml-exc-c14n#WithComments"

    @classmethod
    def _missing_(cls, value):
        raise CanonicalizationError(f"Unrecognized {cls.__name__}: {value}")

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"

    @property
    def exclusive(self) -> bool:
        return self.value.startswith("http://www.w3.org/2001/10/xml-exc-c14n#")

    @property
    def with_comments(self) -> bool:
        return self.value.endswith("#WithComments")
