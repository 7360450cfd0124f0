import re

import lxml.etree
from validr import T, Compiler, Invalid, validator


SUPPORTED_OPML_VERSIONS = ('1.0', '1.1', '2.0')

_RE_VERSION = re.compile(r'^\d+\.\d+$')

# characters outside the XML 1.0 Char production
_RE_XML_INVALID_CHAR = re.compile('[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')


def find_xml_invalid_char(text: str):
    r"""Return the first character XML can not carry, or None

    >>> find_xml_invalid_char('tab\tok') is None
    True
    >>> find_xml_invalid_char('a\x00')
    '\x00'
    """
    match = _RE_XML_INVALID_CHAR.search(text)
    return match.group() if match else None


@validator(accept=str, output=str)
def opml_version_validator(compiler, versions=None):
    """OPML version: x.y where x and y are numeric strings

    >>> f = compiler.compile(T.opml_version)
    >>> f('2.0')
    '2.0'
    """
    if versions:
        versions = set(versions.replace(',', ' ').split())
    else:
        versions = set(SUPPORTED_OPML_VERSIONS)

    def validate(value):
        if not _RE_VERSION.match(value):
            raise Invalid(f'invalid version {value!r}')
        if value not in versions:
            raise Invalid(f'unsupported version {value!r}')
        return value

    return validate


@validator(accept=(str, object), output=(str, object))
def xml_bool_validator(compiler):
    """Boolean attribute, OPML spells it true or false"""

    def validate(value):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text == 'true':
                return True
            if text == 'false':
                return False
        raise Invalid('invalid boolean, expect true or false')

    return validate


@validator(accept=str, output=str)
def xml_name_validator(compiler):
    """Attribute name without prefix, or lxml's Clark notation {uri}local

    >>> f = compiler.compile(T.xml_name)
    >>> f('{http://example.com/ns}extra')
    '{http://example.com/ns}extra'
    """

    def validate(value):
        # an empty namespace would be written as a plain name
        if value.startswith('{}'):
            raise Invalid(f'invalid xml name {value!r}')
        # same check lxml applies when the attribute is written
        try:
            lxml.etree.QName(value)
        except ValueError:
            raise Invalid(f'invalid xml name {value!r}') from None
        return value

    return validate


@validator(accept=str, output=str)
def enum_validator(compiler, items):
    items = set(items.replace(',', ' ').split())

    def validate(value):
        if value in items:
            return value
        raise Invalid('value must be one of {}'.format(items))

    return validate


VALIDATORS = {
    'opml_version': opml_version_validator,
    'xml_bool': xml_bool_validator,
    'xml_name': xml_name_validator,
    'enum': enum_validator,
}


compiler = Compiler(validators=VALIDATORS)
