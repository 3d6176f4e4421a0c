import logging
from base64 import b64encode
from xml.etree import ElementTree as stdlibElementTree

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.hashes import Hash
from lxml import etree

from .algorithms import CanonicalizationMethod, HashAlgorithm
from .exceptions import CanonicalizationError, DigestError, InvalidInput

logger = logging.getLogger(__name__)


class XMLProcessor:
    _default_parser, _parser = None, None

    @property
    def parser(self):
        if self._parser is None:
            if self._default_parser is None:
                self._default_parser = etree.XMLParser(resolve_entities=False)
            return self._default_parser
        return self._parser

    def _fromstring(self, xml_string, **kwargs):
        xml_node = etree.fromstring(xml_string, parser=self.parser, **kwargs)
        for entity in xml_node.iter(etree.Entity):
            raise InvalidInput("Entities are not supported in XML input")
        return xml_node

    def _tostring(self, xml_node, **kwargs):
        return etree.tostring(xml_node, **kwargs)

    def get_root(self, data):
        if isinstance(data, (str, bytes)):
            return self._fromstring(data)
        elif isinstance(data, stdlibElementTree.Element):
            return self._fromstring(stdlibElementTree.tostring(data, encoding="utf-8"))
        elif isinstance(data, etree._ElementTree):
            return self._fromstring(self._tostring(data.getroot()))
        elif isinstance(data, etree._Element):
            # Work on a separate copy so that the caller's tree is never modified and namespaces declared on its
            # ancestors do not leak into the canonical form.
            return self._fromstring(self._tostring(data))
        raise InvalidInput(f"Expected XML data as a string or an element, got {type(data).__name__}")


class Canonicalizer:
    """
    Serializes an XML subtree to canonical bytes with the given canonicalization algorithm.

    :param algorithm:
        A :class:`xadesbes.CanonicalizationMethod` or its URI.
    """

    def __init__(self, algorithm=CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0):
        self.algorithm = CanonicalizationMethod(algorithm)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.algorithm!r})"

    def canonicalize(self, element) -> bytes:
        if not isinstance(element, etree._Element):
            raise CanonicalizationError(f"Expected an XML element to canonicalize, got {type(element).__name__}")
        try:
            c14n = etree.tostring(
                element,
                method="c14n",
                exclusive=self.algorithm.exclusive,
                with_comments=self.algorithm.with_comments,
            )
        except (etree.C14NError, etree.SerialisationError, TypeError, ValueError) as e:
            raise CanonicalizationError(f"Unable to canonicalize {element.tag}: {e}") from e
        logger.debug(
            "Canonicalized string (exclusive=%s, with_comments=%s): %s",
            self.algorithm.exclusive,
            self.algorithm.with_comments,
            c14n,
        )
        return c14n


def get_digest(data: bytes, algorithm: HashAlgorithm) -> bytes:
    try:
        hasher = Hash(algorithm=algorithm.implementation())
        hasher.update(data)
        return hasher.finalize()
    except (UnsupportedAlgorithm, TypeError, ValueError) as e:
        raise DigestError(f"Unable to compute {algorithm.name} digest: {e}") from e


def compute_digest_value(element, canonicalizer: Canonicalizer, hash_algorithm: HashAlgorithm) -> str:
    """
    Canonicalize **element** and return the base64-encoded digest of the canonical bytes.
    """
    digest = get_digest(canonicalizer.canonicalize(element), algorithm=HashAlgorithm(hash_algorithm))
    digest_value = b64encode(digest).decode()
    logger.debug("Digest of %s (%s): %s", element.tag, canonicalizer.algorithm.name, digest_value)
    return digest_value
