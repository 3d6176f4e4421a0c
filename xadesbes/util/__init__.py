"""
xadesbes utility functions
"""

import re
import textwrap
from copy import deepcopy
from typing import Dict, Optional

from lxml.etree import Element, QName, _Element

PEM_HEADER = "-----BEGIN CERTIFICATE-----"
PEM_FOOTER = "-----END CERTIFICATE-----"


class Namespace(dict):
    def __getattr__(self, a):
        return dict.__getitem__(self, a)


namespaces = Namespace(
    ds="http://www.w3.org/2000/09/xmldsig#",
    xades="http://uri.etsi.org/01903/v1.3.2#",
)

XADES_PREFIX = "xades"


def ds_tag(tag):
    return QName(namespaces.ds, tag)


def xades_tag(tag):
    return QName(namespaces.xades, tag)


def ds_nsmap(ds_prefix: str) -> Dict[Optional[str], str]:
    """
    Namespace map binding the XML-DSig namespace to **ds_prefix**. An empty prefix binds it as the default namespace.
    """
    return {ds_prefix or None: namespaces.ds}


def xades_nsmap(ds_prefix: str) -> Dict[Optional[str], str]:
    return {ds_prefix or None: namespaces.ds, XADES_PREFIX: namespaces.xades}


def qualify(element: _Element, namespace_bindings: Dict[Optional[str], str]) -> _Element:
    """
    Return a deep copy of **element** whose root declares **namespace_bindings** in addition to the namespaces already
    in scope. The input element is not modified.

    Canonicalizing the result yields the same bytes as canonicalizing the input element once it is placed in a tree
    where the same bindings are in scope.
    """
    nsmap = dict(element.nsmap)
    nsmap.update(namespace_bindings)
    qualified = Element(element.tag, attrib=dict(element.attrib), nsmap=nsmap)
    qualified.text = element.text
    for child in element:
        qualified.append(deepcopy(child))
    return qualified


def ensure_bytes(x, encoding="utf-8", none_ok=False):
    if none_ok is True and x is None:
        return x
    if not isinstance(x, bytes):
        x = x.encode(encoding)
    return x


def ensure_str(x, encoding="utf-8", none_ok=False):
    if none_ok is True and x is None:
        return x
    if not isinstance(x, str):
        x = x.decode(encoding)
    return x


pem_regexp = re.compile(
    "{header}{nl}(.+?){footer}".format(header=PEM_HEADER, nl="\r{0,1}\n", footer=PEM_FOOTER), flags=re.S
)


def add_pem_header(bare_base64_cert):
    bare_base64_cert = ensure_str(bare_base64_cert)
    if bare_base64_cert.startswith(PEM_HEADER):
        return bare_base64_cert
    return PEM_HEADER + "\n" + textwrap.fill(bare_base64_cert, 64) + "\n" + PEM_FOOTER


def iterate_pem(certs):
    for match in re.findall(pem_regexp, ensure_str(certs)):
        yield match
