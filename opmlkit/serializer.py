import typing

from .model import Document
from .xml_adapter import XmlEvent, start_event, end_event, write_events


def iter_events(document: Document) -> typing.Iterator[XmlEvent]:
    """Walk the document in pre-order and yield XML element events"""
    yield start_event('opml', {'version': document.version})
    if document.head is not None:
        yield start_event('head')
        for name, text in document.head.iter_elements():
            yield start_event(name)
            yield end_event(name, text=text)
        yield end_event('head')
    yield start_event('body')
    stack = [iter(document.body.outlines)]
    while stack:
        outline = next(stack[-1], None)
        if outline is None:
            stack.pop()
            yield end_event('outline' if stack else 'body')
            continue
        yield start_event('outline', dict(outline.iter_attributes()))
        stack.append(iter(outline.outlines))
    yield end_event('opml')


def to_string(document: Document, pretty: bool = False) -> str:
    """Serialize document to OPML text

    >>> from opmlkit.model import Outline
    >>> doc = Document()
    >>> doc.head.title = 'Feeds'
    >>> doc = doc.add_outline(Outline('A', attributes={'customAttr': 'Y'}))
    >>> to_string(doc)
    '<opml version="2.0"><head><title>Feeds</title></head><body><outline text="A" customAttr="Y"/></body></opml>'
    """
    return write_events(iter_events(document), pretty=pretty)
