"""
COLLADA Module - Python Implementation

A Python module that assembles COLLADA 1.4/1.5 documents from a stream of
XML events into an immutable, typed document model: image, material,
effect, geometry, camera and light libraries.

Parsing is single-pass and streaming; files are fed to lxml in chunks and
numeric payloads are decoded incrementally into numpy arrays.
"""

__version__ = "1.0.0"

# Core functionality
from .collada_reader import (
    COLLADA_NAMESPACE_1_4,
    COLLADA_NAMESPACE_1_5,
    DEFAULT_CHUNK_SIZE,
    ColladaContentHandler,
    ColladaReader,
    ColladaTarget,
)
from .collada_handler import ColladaHandler
from .chunk_reader import ChunkFloatReader, ChunkIntReader, ChunkStringReader
from .dispatch import DISPATCH_TABLE, Transition, check_dispatch_table
from .parser_mode import ModeStack, ParserMode
from .structures import *
from .errors import (
    ColladaError,
    ColladaParseError,
    IllegalStateError,
    InvalidReferenceSyntaxError,
    MalformedValueError,
    MissingRequiredAttributeError,
)
from .logger import logger, get_logger, set_log_level

__all__ = [
    'ColladaReader',
    'ColladaHandler',
    'ColladaTarget',
    'ColladaContentHandler',
    'Document',
    'ColladaError',
    'ColladaParseError',
    'IllegalStateError',
    'InvalidReferenceSyntaxError',
    'MalformedValueError',
    'MissingRequiredAttributeError',
    'check_dispatch_table',
    'set_log_level',
]
