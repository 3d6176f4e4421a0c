from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, load_pem_private_key, pkcs12

from .exceptions import InvalidInput, SigningError
from .util import add_pem_header, ensure_bytes, iterate_pem


def _load_certificates(cert) -> List[x509.Certificate]:
    if isinstance(cert, x509.Certificate):
        return [cert]
    if isinstance(cert, (str, bytes)):
        pem_certs = list(iterate_pem(cert))
        if not pem_certs:
            pem_certs = [cert]
        cert = pem_certs
    certs = []
    for c in cert:
        if isinstance(c, x509.Certificate):
            certs.append(c)
        else:
            certs.append(x509.load_pem_x509_certificate(ensure_bytes(add_pem_header(c))))
    return certs


@dataclass(frozen=True)
class CredentialBundle:
    """
    The signer's key material: an RSA private key, the parsed leaf certificate, its raw DER encoding and an ordered
    chain of additional certificates. Instances are read-only and may be shared between signing operations.
    """

    key: Optional[rsa.RSAPrivateKey]
    "The RSA private key that produces the signature value"

    cert: x509.Certificate
    "The signer's (leaf) certificate"

    cert_chain: Sequence[x509.Certificate] = ()
    """
    Additional certificates to carry in KeyInfo after the leaf, in the order given (typically issuer first). The leaf
    certificate itself should not be repeated here.
    """

    cert_binary: bytes = field(default=b"", repr=False)
    "DER encoding of the leaf certificate. Derived from ``cert`` when not supplied."

    def __post_init__(self):
        if not self.cert_binary:
            object.__setattr__(self, "cert_binary", self.cert.public_bytes(Encoding.DER))
        object.__setattr__(self, "cert_chain", tuple(self.cert_chain))

    def get_key_pair(self) -> Tuple[Optional[rsa.RSAPrivateKey], bytes]:
        return self.key, self.cert_binary

    @classmethod
    def from_pem(
        cls,
        key: Union[str, bytes, rsa.RSAPrivateKey],
        cert: Union[str, bytes, x509.Certificate, List[str], List[x509.Certificate]],
        passphrase: Optional[bytes] = None,
    ) -> "CredentialBundle":
        """
        Load credentials from PEM data.

        :param key: PEM-encoded private key, or a :class:`cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`.
        :param cert:
            PEM data holding the signer's certificate followed by its chain, or a list of PEM strings or
            :class:`cryptography.x509.Certificate` objects in the same order.
        :param passphrase: Passphrase to use to decrypt the key, if any.
        """
        if isinstance(key, (str, bytes)):
            key = load_pem_private_key(ensure_bytes(key), password=passphrase)  # type: ignore
        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError(f"Only RSA keys are supported, got {type(key).__name__}")
        certs = _load_certificates(cert)
        if not certs:
            raise InvalidInput("Expected at least one certificate")
        return cls(key=key, cert=certs[0], cert_chain=certs[1:])

    @classmethod
    def from_pkcs12(cls, data: bytes, password: Optional[bytes] = None) -> "CredentialBundle":
        """
        Load credentials from a PKCS#12 (PFX) archive holding the private key, the signer's certificate and optionally
        additional chain certificates.
        """
        try:
            key, cert, additional_certs = pkcs12.load_key_and_certificates(data, password)
        except ValueError as e:
            raise InvalidInput(f"Unable to load PKCS#12 data: {e}") from e
        if cert is None:
            raise InvalidInput("PKCS#12 data does not contain a certificate")
        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError(f"Only RSA keys are supported, got {type(key).__name__}")
        return cls(key=key, cert=cert, cert_chain=additional_certs)
