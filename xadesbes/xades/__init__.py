"""
`XAdES ("XML Advanced Electronic Signatures") <https://en.wikipedia.org/wiki/XAdES>`_ is a standard for attaching
metadata to XML Signature objects, maintained by `ETSI <https://www.etsi.org>`_ (ETSI EN 319 132-1, "Building blocks and
XAdES baseline signatures"). This package produces the basic electronic signature form, XAdES-BES: the signing time and
a digest of the signer's certificate are carried in ``ds:Object/xades:QualifyingProperties/xades:SignedProperties``
and covered by the signature through a dedicated reference.

Use :func:`create_signature` to build a signature from a :class:`xadesbes.SigningContext`, or :class:`XAdESSigner`
to sign documents with keys and certificates given as PEM data.
"""

from .xades import (
    XAdESSigner,
    build_object,
    build_signed_properties,
    create_signature,
    format_signing_time,
)
