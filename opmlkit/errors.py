class OPMLError(Exception):
    """Base exception for opmlkit"""


class XmlWriteError(OPMLError, ValueError):
    """Event stream can not be written as XML"""


class ParseError(OPMLError):
    """Text is not a valid OPML document"""

    def __init__(self, message: str, *, line: int = None, column: int = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self):
        if self.line is None:
            return self.message
        if self.column is None:
            return f'{self.message} (line {self.line})'
        return f'{self.message} (line {self.line}, column {self.column})'


class MalformedXmlError(ParseError):
    """XML is not well-formed"""


class MissingRootElementError(ParseError):
    """Document element is not <opml>"""


class MissingBodyElementError(ParseError):
    """<opml> has no <body>"""


class DuplicateBodyElementError(ParseError):
    """<opml> has more than one <body>"""


class DuplicateHeadElementError(ParseError):
    """<opml> has more than one <head>"""


class MissingOutlineTextError(ParseError):
    """<outline> has no text attribute"""


class UnsupportedVersionError(ParseError):
    """<opml> version attribute is not supported"""

    def __init__(self, version: str, **kwargs):
        super().__init__(f'unsupported OPML version {version!r}', **kwargs)
        self.version = version


class InvalidValueError(ParseError):
    """Attribute or head element value has a wrong lexical form"""

    def __init__(self, name: str, value: str, reason: str, **kwargs):
        super().__init__(f'invalid value {value!r} for {name}: {reason}', **kwargs)
        self.name = name
        self.value = value


class OutlineTooDeepError(ParseError):
    """Outlines nest deeper than allowed"""

    def __init__(self, max_depth: int, **kwargs):
        super().__init__(f'outline nesting exceeds max depth {max_depth}', **kwargs)
        self.max_depth = max_depth


__all__ = (
    'OPMLError',
    'XmlWriteError',
    'ParseError',
    'MalformedXmlError',
    'MissingRootElementError',
    'MissingBodyElementError',
    'DuplicateBodyElementError',
    'DuplicateHeadElementError',
    'MissingOutlineTextError',
    'UnsupportedVersionError',
    'InvalidValueError',
    'OutlineTooDeepError',
)
