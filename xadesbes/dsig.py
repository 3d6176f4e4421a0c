"""
Builders for the XML Signature parts of a XAdES-BES signature: SignedInfo, SignatureValue and KeyInfo.
"""

from base64 import b64encode

from cryptography.hazmat.primitives.serialization import Encoding
from lxml.etree import Element, SubElement, _Element

from .algorithms import ENVELOPED_SIGNATURE_TRANSFORM, SIGNED_PROPERTIES_TYPE
from .context import SignatureIdentifiers, SigningContext
from .credentials import CredentialBundle
from .util import ds_nsmap, ds_tag


def _add_reference(signed_info, uri, transforms, digest_method, digest_value, **attrs) -> _Element:
    reference = SubElement(signed_info, ds_tag("Reference"), URI=uri)
    for attr_name, attr_value in attrs.items():
        reference.set(attr_name, attr_value)
    transforms_node = SubElement(reference, ds_tag("Transforms"))
    for transform in transforms:
        SubElement(transforms_node, ds_tag("Transform"), Algorithm=transform)
    SubElement(reference, ds_tag("DigestMethod"), Algorithm=digest_method)
    digest_value_node = SubElement(reference, ds_tag("DigestValue"))
    digest_value_node.text = digest_value
    return reference


def build_signed_info(
    data_digest: str, properties_digest: str, context: SigningContext, identifiers: SignatureIdentifiers
) -> _Element:
    """
    Build SignedInfo with its children in the order CanonicalizationMethod, SignatureMethod, the data reference and the
    SignedProperties reference. The order of children and transforms is part of the signed bytes.
    """
    data_context, properties_context = context.data_context, context.properties_context
    signed_info = Element(ds_tag("SignedInfo"), nsmap=ds_nsmap(context.ds_prefix))
    SubElement(signed_info, ds_tag("CanonicalizationMethod"), Algorithm=context.c14n_algorithm.value)  # type: ignore
    SubElement(
        signed_info, ds_tag("SignatureMethod"), Algorithm=context.hash_algorithm.signature_method.value  # type: ignore
    )

    data_transforms = [data_context.c14n_algorithm.value]  # type: ignore
    if data_context.enveloped:
        data_transforms.insert(0, ENVELOPED_SIGNATURE_TRANSFORM)
    _add_reference(
        signed_info,
        uri=data_context.reference_uri,
        transforms=data_transforms,
        digest_method=data_context.hash_algorithm.digest_method,  # type: ignore
        digest_value=data_digest,
    )
    _add_reference(
        signed_info,
        uri=identifiers.signed_properties_uri,
        transforms=[properties_context.c14n_algorithm.value],  # type: ignore
        digest_method=properties_context.hash_algorithm.digest_method,  # type: ignore
        digest_value=properties_digest,
        Type=SIGNED_PROPERTIES_TYPE,
    )
    return signed_info


def build_signature_value(signature_value: str, ds_prefix: str) -> _Element:
    signature_value_node = Element(ds_tag("SignatureValue"), nsmap=ds_nsmap(ds_prefix))
    signature_value_node.text = signature_value
    return signature_value_node


def build_key_info(credentials: CredentialBundle, ds_prefix: str) -> _Element:
    """
    Build KeyInfo/X509Data carrying the signer's certificate followed by each certificate of the chain, each in its
    own X509Certificate element.
    """
    key_info = Element(ds_tag("KeyInfo"), nsmap=ds_nsmap(ds_prefix))
    x509_data = SubElement(key_info, ds_tag("X509Data"))
    _, cert_binary = credentials.get_key_pair()
    x509_certificate = SubElement(x509_data, ds_tag("X509Certificate"))
    x509_certificate.text = b64encode(cert_binary).decode()
    for cert in credentials.cert_chain:
        chain_certificate = SubElement(x509_data, ds_tag("X509Certificate"))
        chain_certificate.text = b64encode(cert.public_bytes(Encoding.DER)).decode()
    return key_info
