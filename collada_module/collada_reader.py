"""
COLLADA Reader

This module connects XML event sources to the assembly engine and contains
the ColladaReader class, the main interface for loading COLLADA documents.

Two event adapters are provided:

- ColladaTarget, an lxml parser target fed by lxml.etree.XMLParser
- ColladaContentHandler, a SAX content handler usable with lxml.sax.saxify
  or any xml.sax parser
"""

import xml.sax.handler
from pathlib import Path
from typing import Mapping, Optional, Union

import lxml.etree
import lxml.sax

from .collada_handler import ColladaHandler
from .errors import ColladaError, IllegalStateError
from .logger import get_logger
from .structures import Document


COLLADA_NAMESPACE_1_4 = "http://www.collada.org/2005/11/COLLADASchema"
COLLADA_NAMESPACE_1_5 = "http://www.collada.org/2008/03/COLLADASchema"

DEFAULT_CHUNK_SIZE = 65536


def _local_name(tag: str) -> str:
    """Strip a "{namespace-uri}" prefix from an lxml tag or attribute name"""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _clean_attrib(attrib: Mapping[str, str]) -> dict:
    return {_local_name(name): value for name, value in attrib.items()}


class ColladaTarget:
    """
    lxml parser target forwarding events to a ColladaHandler.

    The value returned by the parser's close() is the assembled Document.
    lxml calls close() even after a callback raised, so the first
    ColladaError is kept and re-raised from close().
    """

    def __init__(self, handler: Optional[ColladaHandler] = None):
        self.handler = handler if handler is not None else ColladaHandler()
        self.error: Optional[ColladaError] = None

    def start(self, tag, attrib):
        self._forward(self.handler.start_element, _local_name(tag), _clean_attrib(attrib))

    def end(self, tag):
        self._forward(self.handler.end_element, _local_name(tag))

    def data(self, data):
        self._forward(self.handler.text, data)

    def close(self) -> Document:
        if self.error is not None:
            raise self.error
        return self.handler.get_document()

    def _forward(self, event, *args):
        if self.error is not None:
            return
        try:
            event(*args)
        except ColladaError as e:
            self.error = e
            raise


class ColladaContentHandler(xml.sax.handler.ContentHandler):
    """SAX content handler forwarding events to a ColladaHandler"""

    def __init__(self, handler: Optional[ColladaHandler] = None):
        super().__init__()
        self.handler = handler if handler is not None else ColladaHandler()

    def startElementNS(self, name, qname, attrs):
        """Redirect startElementNS() events to local names"""
        attributes = {key[1]: value for key, value in attrs.items()}
        self.handler.start_element(name[1], attributes)

    def endElementNS(self, name, qname):
        """Redirect endElementNS() events to local names"""
        self.handler.end_element(name[1])

    def startElement(self, name, attrs):
        self.handler.start_element(name.rpartition(':')[2], dict(attrs.items()))

    def endElement(self, name):
        self.handler.end_element(name.rpartition(':')[2])

    def characters(self, content):
        self.handler.text(content)

    @property
    def document(self) -> Document:
        return self.handler.get_document()


class ColladaReader:
    """
    Main COLLADA document reader.

    The parse_* methods return the Document or raise; the load_* and
    append_* methods report success as a status value, log the failure and
    keep the loaded document for get_document().
    """

    def __init__(self):
        """Initialize the COLLADA reader"""
        self.logger = get_logger('reader')
        self._document: Optional[Document] = None
        self.last_error: Optional[Exception] = None
        # Configuration properties
        self._chunk_size = DEFAULT_CHUNK_SIZE
        self._huge_tree = False

    def _create_parser(self, target: ColladaTarget) -> lxml.etree.XMLParser:
        return lxml.etree.XMLParser(target=target, huge_tree=self._huge_tree,
                                    resolve_entities=False)

    def parse_file(self, file_path: Union[str, Path]) -> Document:
        """
        Parse a COLLADA file, feeding it to the parser in chunks.

        Args:
            file_path: Path to the .dae file

        Returns:
            The assembled document

        Raises:
            ColladaError: On malformed content
            lxml.etree.XMLSyntaxError: If the file is not well-formed XML
            OSError: If the file cannot be read
        """
        path = Path(file_path)
        self.logger.debug(f"Parsing {path} in chunks of {self._chunk_size} bytes")
        parser = self._create_parser(ColladaTarget())
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(self._chunk_size)
                if not chunk:
                    break
                parser.feed(chunk)
        document = parser.close()
        self.logger.debug(f"Parsed {path}: {document}")
        return document

    def parse_bytes(self, data: bytes) -> Document:
        """Parse a COLLADA document held in memory"""
        parser = self._create_parser(ColladaTarget())
        view = memoryview(bytes(data))
        for start in range(0, len(view), self._chunk_size):
            parser.feed(bytes(view[start:start + self._chunk_size]))
        return parser.close()

    def parse_string(self, text: str) -> Document:
        """Parse a COLLADA document from a string"""
        parser = self._create_parser(ColladaTarget())
        parser.feed(text)
        return parser.close()

    def parse_tree(self, tree) -> Document:
        """
        Assemble a document from an already parsed lxml element or tree.

        The tree is replayed as SAX events through lxml.sax.
        """
        content_handler = ColladaContentHandler()
        lxml.sax.saxify(tree, content_handler)
        return content_handler.document

    def load_from_file(self, file_path: Union[str, Path]) -> bool:
        """
        Load a COLLADA file from disk.

        Returns:
            True if loading was successful, False otherwise
        """
        path = Path(file_path)
        if not path.exists():
            self.logger.error(f"File not found: {file_path}")
            self.last_error = FileNotFoundError(str(file_path))
            return False
        return self._load(self.parse_file, path, "Error loading COLLADA file")

    def load_from_string(self, text: str) -> bool:
        """
        Load a COLLADA document from a string.

        Returns:
            True if loading was successful, False otherwise
        """
        return self._load(self.parse_string, text, "Error parsing COLLADA document")

    def append_from_buffer(self, data: bytes) -> int:
        """
        Load a COLLADA document from a byte buffer.

        Returns:
            0 on success, 1 on error
        """
        return 0 if self._load(self.parse_bytes, data, "Error parsing COLLADA buffer") else 1

    def _load(self, parse, source, message: str) -> bool:
        self.clear()
        try:
            self._document = parse(source)
        except (ColladaError, lxml.etree.XMLSyntaxError, OSError) as e:
            self.logger.error(f"{message}: {e}")
            self.last_error = e
            return False
        return True

    def get_document(self) -> Document:
        """
        Get the loaded document.

        Raises:
            IllegalStateError: If no document has been loaded
        """
        if self._document is None:
            raise IllegalStateError("No COLLADA document has been loaded")
        return self._document

    def clear(self):
        """Drop the loaded document and the last error"""
        self._document = None
        self.last_error = None

    # Configuration properties
    def set_chunk_size(self, chunk_size: int):
        """Set the number of bytes fed to the XML parser at a time"""
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._chunk_size = chunk_size

    def get_chunk_size(self) -> int:
        """Get the number of bytes fed to the XML parser at a time"""
        return self._chunk_size

    def set_huge_tree(self, huge_tree: bool):
        """Allow very deep trees and very long text nodes"""
        self._huge_tree = huge_tree

    def get_huge_tree(self) -> bool:
        """Get whether libxml2 security limits are lifted"""
        return self._huge_tree
