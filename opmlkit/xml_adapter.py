"""
Thin event layer over lxml, knows nothing about OPML.

    read_events:  XML text -> start/end element events
    write_events: start/end element events -> XML text
"""
import io
import logging
import typing

import lxml.etree

from .errors import MalformedXmlError, XmlWriteError


LOG = logging.getLogger(__name__)

START = 'start'
END = 'end'


class XmlEvent(typing.NamedTuple):
    kind: str
    tag: str
    # attributes in document order, start events only
    attrs: typing.Optional[typing.Dict[str, str]] = None
    # leading text of the element, end events only
    text: typing.Optional[str] = None
    line: typing.Optional[int] = None


def start_event(tag: str, attrs: dict = None, line: int = None) -> XmlEvent:
    return XmlEvent(START, tag, attrs or {}, None, line)


def end_event(tag: str, text: str = None, line: int = None) -> XmlEvent:
    return XmlEvent(END, tag, None, text, line)


def _to_bytes(text: typing.Union[str, bytes]):
    if isinstance(text, str):
        try:
            return text.encode('utf-8'), 'utf-8'
        except UnicodeEncodeError as ex:
            raise MalformedXmlError(f'text is not valid unicode: {ex.reason}') from None
    return bytes(text), None


def read_events(text: typing.Union[str, bytes]) -> typing.Iterator[XmlEvent]:
    """
    Str input is always treated as UTF-8, bytes input follows the XML
    encoding declaration.

    >>> [(e.kind, e.tag) for e in read_events('<a><b/></a>')]
    [('start', 'a'), ('start', 'b'), ('end', 'b'), ('end', 'a')]
    """
    data, encoding = _to_bytes(text)
    context = lxml.etree.iterparse(
        io.BytesIO(data),
        events=(START, END),
        encoding=encoding,
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        # lift libxml2 nesting limit from 256 to 2048 levels
        huge_tree=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        for action, elem in context:
            if action == START:
                yield XmlEvent(START, elem.tag, dict(elem.attrib), None, elem.sourceline)
            else:
                yield XmlEvent(END, elem.tag, None, elem.text, elem.sourceline)
                # children were already reported, release them
                elem.clear(keep_tail=True)
    except lxml.etree.XMLSyntaxError as ex:
        message = ex.msg or str(ex) or 'not well-formed XML'
        raise MalformedXmlError(message, line=ex.lineno, column=ex.offset) from None


def write_events(events: typing.Iterable[XmlEvent], pretty: bool = False) -> str:
    """
    >>> write_events([start_event('a', {'x': '1 < 2'}), end_event('a', text='&')])
    '<a x="1 &lt; 2">&amp;</a>'
    """
    root = None
    stack = []
    try:
        for event in events:
            if event.kind == START:
                if stack:
                    elem = lxml.etree.SubElement(stack[-1], event.tag, event.attrs or {})
                elif root is None:
                    elem = root = lxml.etree.Element(event.tag, event.attrs or {})
                else:
                    raise XmlWriteError(f'second root element <{event.tag}>')
                stack.append(elem)
            elif event.kind == END:
                if not stack or stack[-1].tag != event.tag:
                    raise XmlWriteError(f'unexpected end of <{event.tag}>')
                elem = stack.pop()
                if event.text is not None:
                    elem.text = event.text
            else:
                raise XmlWriteError(f'unknown event kind {event.kind!r}')
    except XmlWriteError:
        raise
    except (ValueError, TypeError) as ex:
        # lxml rejects invalid names and XML incompatible strings
        raise XmlWriteError(str(ex)) from ex
    if root is None:
        raise XmlWriteError('no root element')
    if stack:
        raise XmlWriteError(f'unclosed element <{stack[-1].tag}>')
    return lxml.etree.tostring(root, encoding='unicode', pretty_print=pretty)
