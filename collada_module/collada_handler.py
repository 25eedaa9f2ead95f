"""
COLLADA Assembly Engine

ColladaHandler consumes start-element, text and end-element events in
document order and assembles the Document. It keeps one frame per open
recognized element: the element's parser mode paired with the builder staging
its value (None for structural wrappers). Pushing and popping frames is the
only state transition.
"""

from typing import Any, List, Mapping, Optional

from .builders import ElementBuilder, SlotBuilder
from .dispatch import find_transition
from .errors import IllegalStateError
from .logger import get_logger
from .parser_mode import ModeStack, ParserMode
from .structures import Document, Library


class ColladaHandler:
    """
    Streaming COLLADA assembly engine.

    One instance serves exactly one parse; it is not safe for concurrent use.

    Example:
        handler = ColladaHandler()
        handler.start_element('COLLADA', {'version': '1.5.0'})
        handler.end_element('COLLADA')
        document = handler.get_document()
    """

    def __init__(self):
        self.logger = get_logger('handler')
        self._modes = ModeStack(ParserMode.ROOT)
        # Parallel to the mode stack; index 0 belongs to ROOT
        self._builders: List[Optional[ElementBuilder]] = [SlotBuilder()]

    @property
    def current_mode(self) -> ParserMode:
        return self._modes.current

    @property
    def depth(self) -> int:
        """Number of recognized elements currently open"""
        return self._modes.depth

    def start_element(self, local_name: str, attributes: Mapping[str, str]):
        """
        Handle an opening tag.

        Args:
            local_name: Element name without namespace prefix
            attributes: Attribute name to string value
        """
        transition = find_transition(self._modes.current, local_name)
        if transition is None:
            return
        builder = transition.create_builder(attributes)
        self._modes.enter(transition.mode)
        self._builders.append(builder)

    def text(self, fragment: str):
        """Handle character data of the innermost open element"""
        # Unknown elements open no frame; their text goes to the enclosing
        # recognized builder. Inside a leaf this joins the leaf's payload.
        builder = self._builders[-1]
        if builder is not None:
            builder.add_text(fragment)

    def end_element(self, local_name: str):
        """
        Handle a closing tag.

        Only a tag equal to the current mode's tag name closes the current
        frame; anything else is ignored.
        """
        mode = self._modes.current
        if mode.tag_name != local_name:
            return
        self._modes.leave()
        builder = self._builders.pop()
        if builder is None:
            return
        value = builder.build()
        self._parent_builder().attach(mode, value)
        self._log_completed(mode, value)

    def get_document(self) -> Document:
        """
        Get the assembled document.

        Raises:
            IllegalStateError: If the outermost element has not closed yet
        """
        if not self._modes.is_empty():
            raise IllegalStateError(
                f"Document is incomplete, still inside {self._modes}")
        document = self._builders[0].build()
        if document is None:
            return Document()
        return document

    def _parent_builder(self) -> ElementBuilder:
        for builder in reversed(self._builders):
            if builder is not None:
                return builder
        raise IllegalStateError("No builder left to receive a completed element")

    def _log_completed(self, mode: ParserMode, value: Any):
        if isinstance(value, Library):
            self.logger.debug(f"Completed {mode.tag_name} with {len(value)} item(s)")
        elif isinstance(value, Document):
            self.logger.debug(f"Completed document: {value}")
