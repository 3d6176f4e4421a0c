import logging
from base64 import b64encode

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.padding import PKCS1v15

from .algorithms import HashAlgorithm
from .credentials import CredentialBundle
from .exceptions import SigningError
from .processor import Canonicalizer

logger = logging.getLogger(__name__)


class RSASigner:
    """
    Signs bytes with the RSASSA-PKCS1-v1_5 algorithm described in RFC 3447, using the private key from a
    :class:`xadesbes.CredentialBundle`.
    """

    def sign(self, data: bytes, hash_algorithm: HashAlgorithm, credentials: CredentialBundle) -> bytes:
        key, _ = credentials.get_key_pair()
        if key is None:
            raise SigningError("A private key is required to compute the signature value")
        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError(f"Only RSA keys are supported, got {type(key).__name__}")
        try:
            return key.sign(data, padding=PKCS1v15(), algorithm=HashAlgorithm(hash_algorithm).implementation())
        except (UnsupportedAlgorithm, TypeError, ValueError) as e:
            raise SigningError(f"Unable to sign with {hash_algorithm!r}: {e}") from e


def compute_signature_value(
    element,
    canonicalizer: Canonicalizer,
    hash_algorithm: HashAlgorithm,
    credentials: CredentialBundle,
    signer=None,
) -> str:
    """
    Canonicalize **element** (a namespace-qualified SignedInfo) and return the base64-encoded signature over the
    canonical bytes.

    :param signer: Object with a ``sign(data, hash_algorithm, credentials)`` method. Defaults to :class:`RSASigner`.
    """
    if signer is None:
        signer = RSASigner()
    signed_info_c14n = canonicalizer.canonicalize(element)
    signature = signer.sign(signed_info_c14n, HashAlgorithm(hash_algorithm), credentials)
    logger.debug("Signed %d canonical bytes with %s", len(signed_info_c14n), HashAlgorithm(hash_algorithm).name)
    return b64encode(signature).decode()
