"""
OPML document model: Document, Head, Body and the recursive Outline.

Optional fields are None when absent, which is distinct from an empty
string. Trees are walked with explicit stacks, never with recursion, so
deeply nested documents do not hit the interpreter recursion limit.
"""
import typing

from validr import T, Invalid

from opmlkit_common.validator import compiler, find_xml_invalid_char


# integer head fields are 32-bit signed
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

_validate_int = compiler.compile(T.int.min(INT_MIN).max(INT_MAX))
_validate_bool = compiler.compile(T.xml_bool)
_validate_name = compiler.compile(T.xml_name)
_validate_version = compiler.compile(T.opml_version)


def _check_xml_text(name: str, value: str):
    char = find_xml_invalid_char(value)
    if char is not None:
        raise ValueError(f'{name} contains XML incompatible character {char!r}')


class Field:
    """An optional scalar field bound to an XML element or attribute name"""

    def __init__(self, xml_name: str, kind: type = str):
        self.xml_name = xml_name
        self.kind = kind
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj.__dict__.get(self.name)

    def __set__(self, obj, value):
        if value is not None:
            bad_bool = self.kind is int and isinstance(value, bool)
            if bad_bool or not isinstance(value, self.kind):
                raise ValueError('{} must be {} or None, got {!r}'.format(
                    self.name, self.kind.__name__, value))
            if self.kind is int and not INT_MIN <= value <= INT_MAX:
                raise ValueError('{} must be in range [{}, {}], got {}'.format(
                    self.name, INT_MIN, INT_MAX, value))
            if self.kind is str:
                _check_xml_text(self.name, value)
        obj.__dict__[self.name] = value

    def __repr__(self):
        return '<{} {}={}>'.format(type(self).__name__, self.name, self.xml_name)

    def from_xml(self, text: str):
        """Convert XML text to field value, raise validr.Invalid if malformed"""
        if self.kind is int:
            return _validate_int(text)
        if self.kind is bool:
            return _validate_bool(text)
        return text

    def to_xml(self, value) -> str:
        if self.kind is bool:
            return 'true' if value else 'false'
        return str(value)


def _collect_fields(cls) -> typing.Tuple[Field, ...]:
    return tuple(v for v in vars(cls).values() if isinstance(v, Field))


class Head:
    """Document metadata, every field is optional"""

    title = Field('title')
    date_created = Field('dateCreated')
    date_modified = Field('dateModified')
    owner_name = Field('ownerName')
    owner_email = Field('ownerEmail')
    owner_id = Field('ownerId')
    docs = Field('docs')
    expansion_state = Field('expansionState')
    vert_scroll_state = Field('vertScrollState', int)
    window_top = Field('windowTop', int)
    window_left = Field('windowLeft', int)
    window_bottom = Field('windowBottom', int)
    window_right = Field('windowRight', int)

    def __init__(self, **values):
        for field in self.FIELDS:
            setattr(self, field.name, values.pop(field.name, None))
        if values:
            raise ValueError('unknown head fields: {}'.format(', '.join(values)))

    def __repr__(self):
        values = ' '.join(
            '{}={!r}'.format(field.name, getattr(self, field.name))
            for field in self.FIELDS if getattr(self, field.name) is not None
        )
        return '<{}{}>'.format(type(self).__name__, ' ' + values if values else '')

    def __eq__(self, other):
        if not isinstance(other, Head):
            return NotImplemented
        return self.values() == other.values()

    def values(self) -> tuple:
        return tuple(getattr(self, field.name) for field in self.FIELDS)

    def iter_elements(self) -> typing.Iterator[typing.Tuple[str, str]]:
        """Yield (element name, text) of populated fields in canonical order"""
        for field in self.FIELDS:
            value = getattr(self, field.name)
            if value is not None:
                yield field.xml_name, field.to_xml(value)

    def to_dict(self) -> dict:
        return {field.name: getattr(self, field.name) for field in self.FIELDS}


Head.FIELDS = _collect_fields(Head)
HEAD_ELEMENTS = {field.xml_name: field for field in Head.FIELDS}


class Outline:
    """
    An outline node, text is required and must not be empty.

    >>> group = Outline('Rust').add_feed('Rust Blog', 'https://blog.rust-lang.org/feed.xml')
    >>> group.outlines[0].xml_url
    'https://blog.rust-lang.org/feed.xml'
    """

    outline_type = Field('type')
    is_comment = Field('isComment', bool)
    is_breakpoint = Field('isBreakpoint', bool)
    created = Field('created')
    category = Field('category')
    xml_url = Field('xmlUrl')
    description = Field('description')
    html_url = Field('htmlUrl')
    language = Field('language')
    title = Field('title')
    version = Field('version')
    url = Field('url')

    def __init__(self, text: str, *, attributes: dict = None, outlines: list = None, **values):
        self.text = text
        for field in self.FIELDS:
            setattr(self, field.name, values.pop(field.name, None))
        if values:
            raise ValueError('unknown outline fields: {}'.format(', '.join(values)))
        self.attributes = {}
        for name, value in (attributes or {}).items():
            self._set_extra(name, value)
        self.outlines = list(outlines or [])

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str):
        if not isinstance(value, str) or not value:
            raise ValueError(f'outline text must be a non-empty string, got {value!r}')
        _check_xml_text('outline text', value)
        self._text = value

    def __repr__(self):
        return '<{} text={!r} outlines={}>'.format(
            type(self).__name__, self.text, len(self.outlines))

    def _shallow_values(self) -> tuple:
        values = tuple(getattr(self, field.name) for field in self.FIELDS)
        return (self.text, values, list(self.attributes.items()), len(self.outlines))

    def __eq__(self, other):
        if not isinstance(other, Outline):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a is b:
                continue
            if a._shallow_values() != b._shallow_values():
                return False
            stack.extend(zip(a.outlines, b.outlines))
        return True

    def _set_extra(self, name: str, value: str):
        if name == 'text' or name in OUTLINE_ATTRIBUTES:
            raise ValueError(f'{name!r} is a recognized attribute, not an extra one')
        if not isinstance(value, str):
            raise ValueError(f'attribute {name!r} must be a string, got {value!r}')
        _check_xml_text(f'attribute {name!r}', value)
        self.attributes[_validate_name(name)] = value

    def set_attribute(self, name: str, value: str):
        """Set attribute by its XML name

        Recognized names are converted to their field, raise validr.Invalid
        when the value is malformed. Other names go to attributes.
        """
        if name == 'text':
            self.text = value
            return
        field = OUTLINE_ATTRIBUTES.get(name)
        if field is None:
            self._set_extra(name, value)
        else:
            setattr(self, field.name, field.from_xml(value))

    def get_attribute(self, name: str) -> typing.Optional[str]:
        if name == 'text':
            return self.text
        field = OUTLINE_ATTRIBUTES.get(name)
        if field is None:
            return self.attributes.get(name)
        value = getattr(self, field.name)
        return None if value is None else field.to_xml(value)

    def iter_attributes(self) -> typing.Iterator[typing.Tuple[str, str]]:
        """Yield (name, value) pairs: text, recognized fields, then extras"""
        yield 'text', self.text
        for field in self.FIELDS:
            value = getattr(self, field.name)
            if value is not None:
                yield field.xml_name, field.to_xml(value)
        yield from self.attributes.items()

    def add_outline(self, outline: "Outline") -> "Outline":
        self.outlines.append(outline)
        return self

    def add_feed(self, text: str, url: str) -> "Outline":
        return self.add_outline(Outline(text, xml_url=url))

    def to_dict(self) -> dict:
        return _outlines_to_list([self])[0]

    def _shallow_dict(self) -> dict:
        data = {'text': self.text}
        for field in self.FIELDS:
            data[field.name] = getattr(self, field.name)
        data['attributes'] = dict(self.attributes)
        return data


Outline.FIELDS = _collect_fields(Outline)
OUTLINE_ATTRIBUTES = {field.xml_name: field for field in Outline.FIELDS}


def iter_outlines(outlines: typing.Iterable[Outline]) -> typing.Iterator[Outline]:
    """Flatten outline trees in pre-order

    >>> root = Outline('A').add_outline(Outline('B').add_outline(Outline('C')))
    >>> [x.text for x in iter_outlines([root, Outline('D')])]
    ['A', 'B', 'C', 'D']
    """
    stack = list(reversed(list(outlines)))
    while stack:
        outline = stack.pop()
        yield outline
        stack.extend(reversed(outline.outlines))


def _outlines_to_list(outlines: typing.List[Outline]) -> list:
    result = []
    stack = [(outlines, result)]
    while stack:
        items, target = stack.pop()
        for item in items:
            data = item._shallow_dict()
            data['outlines'] = children = []
            target.append(data)
            stack.append((item.outlines, children))
    return result


class Body:

    def __init__(self, outlines: list = None):
        self.outlines = list(outlines or [])

    def __repr__(self):
        return '<{} outlines={}>'.format(type(self).__name__, len(self.outlines))

    def __eq__(self, other):
        if not isinstance(other, Body):
            return NotImplemented
        return self.outlines == other.outlines

    def add_outline(self, outline: Outline) -> "Body":
        self.outlines.append(outline)
        return self

    def to_dict(self) -> dict:
        return {'outlines': _outlines_to_list(self.outlines)}


class Document:
    """
    An OPML document, Document() has an empty head and an empty body.

    >>> doc = Document().add_feed('Hacker News', 'https://news.ycombinator.com/rss')
    >>> doc.to_string()
    '<opml version="2.0"><head/><body><outline text="Hacker News" xmlUrl="https://news.ycombinator.com/rss"/></body></opml>'
    """

    def __init__(self, head: typing.Optional[Head] = None, body: Body = None, version: str = '2.0'):
        self.version = version
        self.head = Head() if head is None else head
        self.body = Body() if body is None else body

    @property
    def version(self) -> str:
        return self._version

    @version.setter
    def version(self, value: str):
        if not isinstance(value, str):
            raise ValueError(f'version must be a string, got {value!r}')
        try:
            self._version = _validate_version(value)
        except Invalid as ex:
            raise ValueError(f'unsupported OPML version {value!r}: {ex}') from None

    def __repr__(self):
        return '<{} version={} head={} outlines={}>'.format(
            type(self).__name__, self.version,
            self.head is not None, len(self.body.outlines))

    def __eq__(self, other):
        if not isinstance(other, Document):
            return NotImplemented
        return (self.version == other.version
                and self.head == other.head
                and self.body == other.body)

    def add_outline(self, outline: Outline) -> "Document":
        self.body.add_outline(outline)
        return self

    def add_feed(self, text: str, url: str) -> "Document":
        return self.add_outline(Outline(text, xml_url=url))

    def iter_outlines(self) -> typing.Iterator[Outline]:
        return iter_outlines(self.body.outlines)

    def to_string(self, pretty: bool = False) -> str:
        from .serializer import to_string
        return to_string(self, pretty=pretty)

    def to_dict(self) -> dict:
        return {
            'version': self.version,
            'head': None if self.head is None else self.head.to_dict(),
            'body': self.body.to_dict(),
        }
