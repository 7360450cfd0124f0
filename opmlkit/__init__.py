from .errors import (
    OPMLError,
    XmlWriteError,
    ParseError,
    MalformedXmlError,
    MissingRootElementError,
    MissingBodyElementError,
    DuplicateBodyElementError,
    DuplicateHeadElementError,
    MissingOutlineTextError,
    UnsupportedVersionError,
    InvalidValueError,
    OutlineTooDeepError,
)
from .model import Document, Head, Body, Outline, iter_outlines
from .parser import parse, DocumentBuilder
from .serializer import to_string, iter_events
