"""
Build a Document from OPML text.

The tree is built from the element event stream with an explicit stack of
open elements: a parent outline is complete (attributes bound) before its
children are visited, siblings are visited in document order.
"""
import logging
import typing

from validr import T, Invalid

from opmlkit_common.validator import compiler
from .errors import (
    MissingRootElementError,
    MissingBodyElementError,
    DuplicateBodyElementError,
    DuplicateHeadElementError,
    MissingOutlineTextError,
    UnsupportedVersionError,
    InvalidValueError,
    OutlineTooDeepError,
)
from .model import Document, Head, Body, Outline, HEAD_ELEMENTS
from .xml_adapter import XmlEvent, START, read_events


LOG = logging.getLogger(__name__)

_validate_version = compiler.compile(T.opml_version)

DEFAULT_VERSION = '2.0'

# kinds of open elements
_ROOT = 'root'
_HEAD = 'head'
_HEAD_FIELD = 'head_field'
_CONTAINER = 'container'
_IGNORED = 'ignored'


class _Frame(typing.NamedTuple):
    kind: str
    # Head for _HEAD, Field for _HEAD_FIELD, children list for _CONTAINER
    target: typing.Any = None
    depth: int = 0


class DocumentBuilder:
    """Consume XML events and build a Document, one builder per document"""

    def __init__(self, max_depth: int = None):
        if max_depth is not None and max_depth < 1:
            raise ValueError('max_depth must be >= 1')
        self.max_depth = max_depth
        self.version = None
        self.head = None
        self.body = None
        self._stack = []
        self._finished = False
        self._num_outlines = 0
        self._num_ignored = 0

    def feed(self, event: XmlEvent):
        if event.kind == START:
            self._start(event)
        else:
            self._end(event)

    def _start(self, event: XmlEvent):
        if not self._stack:
            self._start_root(event)
            return
        parent = self._stack[-1]
        if parent.kind == _ROOT:
            frame = self._start_section(event)
        elif parent.kind == _HEAD:
            frame = self._start_head_field(event)
        elif parent.kind == _CONTAINER and event.tag == 'outline':
            frame = self._start_outline(event, parent)
        else:
            frame = _Frame(_IGNORED)
        if frame.kind == _IGNORED:
            self._num_ignored += 1
            LOG.debug('ignore element <%s> at line %s', event.tag, event.line)
        self._stack.append(frame)

    def _start_root(self, event: XmlEvent):
        if event.tag != 'opml':
            raise MissingRootElementError(
                f'root element is <{event.tag}>, expect <opml>', line=event.line)
        version = event.attrs.get('version')
        if version is None:
            self.version = DEFAULT_VERSION
        else:
            try:
                self.version = _validate_version(version)
            except Invalid:
                raise UnsupportedVersionError(version, line=event.line) from None
        self._stack.append(_Frame(_ROOT))

    def _start_section(self, event: XmlEvent) -> _Frame:
        if event.tag == 'head':
            if self.head is not None:
                raise DuplicateHeadElementError('more than one <head> element', line=event.line)
            self.head = Head()
            return _Frame(_HEAD, self.head)
        if event.tag == 'body':
            if self.body is not None:
                raise DuplicateBodyElementError('more than one <body> element', line=event.line)
            self.body = Body()
            return _Frame(_CONTAINER, self.body.outlines, 0)
        return _Frame(_IGNORED)

    def _start_head_field(self, event: XmlEvent) -> _Frame:
        field = HEAD_ELEMENTS.get(event.tag)
        if field is None:
            return _Frame(_IGNORED)
        return _Frame(_HEAD_FIELD, field)

    def _start_outline(self, event: XmlEvent, parent: _Frame) -> _Frame:
        depth = parent.depth + 1
        if self.max_depth is not None and depth > self.max_depth:
            raise OutlineTooDeepError(self.max_depth, line=event.line)
        text = event.attrs.get('text')
        if not text:
            raise MissingOutlineTextError(
                '<outline> has no text attribute', line=event.line)
        outline = Outline(text)
        for name, value in event.attrs.items():
            if name == 'text':
                continue
            try:
                outline.set_attribute(name, value)
            except Invalid as ex:
                raise InvalidValueError(name, value, str(ex), line=event.line) from None
        parent.target.append(outline)
        self._num_outlines += 1
        return _Frame(_CONTAINER, outline.outlines, depth)

    def _end(self, event: XmlEvent):
        frame = self._stack.pop()
        if frame.kind == _HEAD_FIELD:
            field = frame.target
            text = event.text or ''
            try:
                value = field.from_xml(text)
            except Invalid as ex:
                raise InvalidValueError(field.xml_name, text, str(ex), line=event.line) from None
            # repeated head elements: the last one wins
            setattr(self._stack[-1].target, field.name, value)
        elif frame.kind == _ROOT:
            self._finished = True

    def finish(self) -> Document:
        if not self._finished:
            raise MissingRootElementError('no <opml> element')
        if self.body is None:
            raise MissingBodyElementError('<opml> has no <body> element')
        document = Document(body=self.body, version=self.version)
        document.head = self.head
        LOG.debug('parsed OPML %s document, %d outlines, %d ignored elements',
                  self.version, self._num_outlines, self._num_ignored)
        return document


def parse(text: typing.Union[str, bytes], max_depth: int = None) -> Document:
    """Parse OPML text, raise ParseError if text is not a valid document

    >>> doc = parse('<opml><body><outline text="A"><outline text="B"/></outline></body></opml>')
    >>> [x.text for x in doc.iter_outlines()]
    ['A', 'B']
    """
    builder = DocumentBuilder(max_depth=max_depth)
    for event in read_events(text):
        builder.feed(event)
    return builder.finish()
