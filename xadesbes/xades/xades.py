"""
A XAdES-BES signature is an XML Signature whose SignedInfo carries two references: one to the signed data and one to
a ``xades:SignedProperties`` element stored under ``ds:Object/xades:QualifyingProperties`` in the signature itself.
SignedProperties binds the signing time and the signer's certificate to the signature value.

Signature creation is a fixed sequence of stages, each available as a function in this module or in
:mod:`xadesbes.dsig`:

1. digest the data element;
2. build SignedProperties and digest a namespace-qualified copy of it;
3. build SignedInfo from both digests and sign a namespace-qualified copy of it;
4. build KeyInfo and the Object wrapping SignedProperties;
5. assemble the Signature element.

The certificate digest in SigningCertificate always uses SHA-1, regardless of the configured hash algorithms.
"""

import datetime
import logging
import uuid
from base64 import b64encode
from typing import Callable, Dict, List, Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from lxml.etree import Element, SubElement, _Element, cleanup_namespaces

from ..algorithms import CanonicalizationMethod, HashAlgorithm
from ..context import (
    SignatureIdentifiers,
    SignedDataContext,
    SignedPropertiesContext,
    SigningContext,
    allocate_identifiers,
)
from ..credentials import CredentialBundle
from ..dsig import build_key_info, build_signature_value, build_signed_info
from ..exceptions import InvalidInput
from ..processor import XMLProcessor, compute_digest_value, get_digest
from ..signer import compute_signature_value
from ..util import XADES_PREFIX, ds_nsmap, ds_tag, namespaces, qualify, xades_nsmap, xades_tag

logger = logging.getLogger(__name__)

SIGNING_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_signing_time(signing_time: datetime.datetime) -> str:
    """
    Format **signing_time** as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC. Naive datetimes are taken to be in UTC already.
    """
    if signing_time.tzinfo is not None:
        signing_time = signing_time.astimezone(datetime.timezone.utc)
    return signing_time.strftime(SIGNING_TIME_FORMAT)


def build_signed_properties(
    credentials: CredentialBundle,
    signing_time: datetime.datetime,
    identifiers: SignatureIdentifiers,
    ds_prefix: str,
) -> _Element:
    signed_properties = Element(
        xades_tag("SignedProperties"), nsmap=xades_nsmap(ds_prefix), Id=identifiers.signed_properties_id
    )
    signed_signature_properties = SubElement(signed_properties, xades_tag("SignedSignatureProperties"))
    signing_time_node = SubElement(signed_signature_properties, xades_tag("SigningTime"))
    signing_time_node.text = format_signing_time(signing_time)

    signing_certificate = SubElement(signed_signature_properties, xades_tag("SigningCertificate"))
    cert_node = SubElement(signing_certificate, xades_tag("Cert"))
    cert_digest = SubElement(cert_node, xades_tag("CertDigest"))
    _, cert_binary = credentials.get_key_pair()
    SubElement(cert_digest, ds_tag("DigestMethod"), Algorithm=HashAlgorithm.SHA1.digest_method)
    digest_value_node = SubElement(cert_digest, ds_tag("DigestValue"))
    digest_value_node.text = b64encode(get_digest(cert_binary, algorithm=HashAlgorithm.SHA1)).decode()

    issuer_serial = SubElement(cert_node, xades_tag("IssuerSerial"))
    issuer_name = SubElement(issuer_serial, ds_tag("X509IssuerName"))
    issuer_name.text = credentials.cert.issuer.rfc4514_string()
    serial_number = SubElement(issuer_serial, ds_tag("X509SerialNumber"))
    serial_number.text = str(credentials.cert.serial_number)
    return signed_properties


def build_object(signed_properties: _Element, identifiers: SignatureIdentifiers, ds_prefix: str) -> _Element:
    ds_object = Element(ds_tag("Object"), nsmap=ds_nsmap(ds_prefix))
    qualifying_properties = SubElement(
        ds_object,
        xades_tag("QualifyingProperties"),
        nsmap={XADES_PREFIX: namespaces.xades},
        Target=identifiers.signature_uri,
    )
    qualifying_properties.append(signed_properties)
    return ds_object


def create_signature(
    data: _Element,
    context: SigningContext,
    signer=None,
    uuid_factory: Callable[[], uuid.UUID] = uuid.uuid1,
    inherited_nsmap: Optional[Dict[Optional[str], str]] = None,
) -> _Element:
    """
    Create a XAdES-BES Signature element over **data** and return it. The data element is not modified; the caller
    inserts the signature into (enveloped) or next to (detached) the signed document.

    :param data: The element to sign, as it will be seen by the verifier after applying the reference transforms.
    :param context: A :class:`xadesbes.SigningContext`.
    :param signer:
        Object with a ``sign(data, hash_algorithm, credentials)`` method producing the raw signature value. Defaults to
        :class:`xadesbes.signer.RSASigner`.
    :param uuid_factory: Source of time-based unique identifiers, used when ``context.use_signature_uuid`` is set.
    :param inherited_nsmap:
        Namespace declarations in scope at the element the signature will be appended to. Inclusive canonicalization
        renders them on SignedInfo and SignedProperties, so they are added to the copies that get digested and signed.
    """
    if not isinstance(data, _Element):
        raise InvalidInput(f"Expected the data to sign to be an XML element, got {type(data).__name__}")
    identifiers = allocate_identifiers(context, uuid_factory=uuid_factory)
    data_context, properties_context = context.data_context, context.properties_context
    inherited_nsmap = dict(inherited_nsmap or {})

    data_digest = compute_digest_value(data, data_context.canonicalizer, data_context.hash_algorithm)  # type: ignore

    signing_time = properties_context.signing_time
    if signing_time is None:
        signing_time = datetime.datetime.now(datetime.timezone.utc)

    signed_properties = build_signed_properties(context.credentials, signing_time, identifiers, context.ds_prefix)
    qualified_signed_properties = qualify(signed_properties, {**inherited_nsmap, **xades_nsmap(context.ds_prefix)})
    properties_digest = compute_digest_value(
        qualified_signed_properties, properties_context.canonicalizer, properties_context.hash_algorithm  # type: ignore
    )

    signed_info = build_signed_info(data_digest, properties_digest, context, identifiers)
    qualified_signed_info = qualify(signed_info, {**inherited_nsmap, **ds_nsmap(context.ds_prefix)})
    signature_value = compute_signature_value(
        qualified_signed_info,
        context.canonicalizer,
        context.hash_algorithm,  # type: ignore
        context.credentials,
        signer=signer,
    )

    signature = Element(ds_tag("Signature"), nsmap=ds_nsmap(context.ds_prefix), Id=identifiers.signature_id)
    signature.append(signed_info)
    signature.append(build_signature_value(signature_value, context.ds_prefix))
    signature.append(build_key_info(context.credentials, context.ds_prefix))
    signature.append(build_object(signed_properties, identifiers, context.ds_prefix))
    cleanup_namespaces(signature)
    logger.debug("Created signature %s over %s", identifiers.signature_id, data.tag)
    return signature


class XAdESSigner(XMLProcessor):
    """
    Create a new XAdES-BES signer, which can be used to hold configuration information and sign multiple pieces of
    data.

    :param c14n_algorithm:
        Algorithm that will be used to canonicalize SignedInfo, the data and SignedProperties. See
        :class:`xadesbes.CanonicalizationMethod` for the list of algorithm IDs supported.
    :param hash_algorithm:
        Algorithm that will be used for reference digests and the RSA signature method. One of
        :class:`xadesbes.HashAlgorithm`, its URI, or its fragment (``"sha256"``).
    :param ds_prefix: Namespace prefix to use for XML Signature elements.
    :param use_signature_uuid: Derive element Ids from a fresh unique identifier for every signature.
    :param signer: Object producing raw signature values; see :func:`create_signature`.
    """

    id_attributes: Tuple[str, ...] = ("Id", "ID", "id")

    def __init__(
        self,
        c14n_algorithm: Union[CanonicalizationMethod, str] = CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0,
        hash_algorithm: Union[HashAlgorithm, str] = HashAlgorithm.SHA256,
        ds_prefix: str = "ds",
        use_signature_uuid: bool = False,
        signer=None,
    ):
        self.c14n_alg = CanonicalizationMethod(c14n_algorithm)
        self.hash_alg = HashAlgorithm(hash_algorithm)
        self.ds_prefix = ds_prefix
        self.use_signature_uuid = use_signature_uuid
        self.signer = signer
        self._parser = None

    def sign(
        self,
        data,
        *,
        key: Optional[Union[str, bytes, rsa.RSAPrivateKey]] = None,
        passphrase: Optional[bytes] = None,
        cert: Optional[Union[str, bytes, List[str], List[x509.Certificate]]] = None,
        credentials: Optional[CredentialBundle] = None,
        reference_uri: str = "",
        enveloped: bool = True,
        signing_time: Optional[datetime.datetime] = None,
        signature_uuid: Optional[uuid.UUID] = None,
    ) -> _Element:
        """
        Sign the data and return the root element of the resulting XML tree.

        :param data: Data to sign
        :type data: String, bytes, or XML ElementTree Element API compatible object
        :param key: PEM-encoded RSA private key or a key object. Required unless **credentials** is given.
        :param passphrase: Passphrase to use to decrypt the key, if any.
        :param cert:
            The signer's X.509 certificate followed by any chain certificates, as PEM data or a list. Required unless
            **credentials** is given.
        :param credentials: A preloaded :class:`xadesbes.CredentialBundle`.
        :param reference_uri:
            URI of the data reference. The default (empty string) refers to the whole document. A ``#id`` fragment
            signs the single element whose ``Id`` attribute matches; other URIs sign the whole document.
        :param enveloped:
            If ``True``, the signature is appended to a copy of the data root, which is returned. Otherwise the
            detached Signature element is returned.
        :param signing_time: Claimed signing time. Defaults to the current time.
        :param signature_uuid: Preset identifier to derive element Ids from when ``use_signature_uuid`` is on.

        :returns:
            A :class:`lxml.etree._Element` object representing the signed document (enveloped) or the signature
            (detached).
        """
        if credentials is None:
            if key is None or cert is None:
                raise InvalidInput('Parameters "key" and "cert" are required when "credentials" is not given')
            credentials = CredentialBundle.from_pem(key, cert, passphrase=passphrase)

        context = SigningContext(
            credentials=credentials,
            data_context=SignedDataContext(
                c14n_algorithm=self.c14n_alg,
                hash_algorithm=self.hash_alg,
                reference_uri=reference_uri,
                enveloped=enveloped,
            ),
            properties_context=SignedPropertiesContext(
                c14n_algorithm=self.c14n_alg, hash_algorithm=self.hash_alg, signing_time=signing_time
            ),
            c14n_algorithm=self.c14n_alg,
            hash_algorithm=self.hash_alg,
            ds_prefix=self.ds_prefix,
            use_signature_uuid=self.use_signature_uuid,
            signature_uuid=signature_uuid,
        )
        doc_root = self.get_root(data)
        payload = self._resolve_reference(doc_root, reference_uri)
        inherited_nsmap = dict(doc_root.nsmap) if enveloped else None
        signature = create_signature(payload, context, signer=self.signer, inherited_nsmap=inherited_nsmap)
        if enveloped:
            doc_root.append(signature)
            return doc_root
        return signature

    def _resolve_reference(self, doc_root, uri):
        if uri.startswith("#xpointer("):
            raise InvalidInput("XPointer references are not supported")
        elif uri.startswith("#"):
            for id_attribute in self.id_attributes:
                xpath_query = f"//*[@*[local-name() = '{id_attribute}']=$uri]"
                results = doc_root.xpath(xpath_query, uri=uri[1:])
                if len(results) > 1:
                    raise InvalidInput(f"Ambiguous reference URI {uri} resolved to {len(results)} nodes")
                elif len(results) == 1:
                    return results[0]
            raise InvalidInput(f"Unable to resolve reference URI: {uri}")
        return doc_root
