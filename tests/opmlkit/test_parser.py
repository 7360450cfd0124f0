import pytest

from opmlkit import (
    parse, to_string, Document, Head, Outline,
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


def _nested(depth):
    return ('<opml><body>' + '<outline text="x">' * depth
            + '</outline>' * depth + '</body></opml>')


def test_parse_minimum_valid_opml():
    doc = parse('<opml version="2.0"><head/><body><outline text="Outline Text"/></body></opml>')
    expect = Document()
    expect.add_outline(Outline('Outline Text'))
    assert doc == expect


def test_parse_opml_with_everything(read_sample):
    doc = parse(read_sample('valid_opml_with_everything.opml'))
    assert doc.version == '2.0'
    assert doc.head == Head(
        title='Title',
        date_created='Mon, 31 Oct 2005 19:23:00 GMT',
        date_modified='Tue, 01 Nov 2005 08:00:00 GMT',
        owner_name='Owner Name',
        owner_email='owner@example.com',
        owner_id='http://example.com/owner',
        docs='http://dev.opml.org/spec2.html',
        expansion_state='0,1',
        vert_scroll_state=0,
        window_top=1,
        window_left=2,
        window_bottom=3,
        window_right=4,
    )
    expect = Outline(
        'Outline Text',
        outline_type='rss',
        is_comment=True,
        is_breakpoint=True,
        created='Outline Date',
        category='/Tech',
        xml_url='https://example.com/feed.xml',
        description='Outline Description',
        html_url='https://example.com/',
        language='en-us',
        title='Outline Title',
        version='RSS2',
        url='https://example.com/url',
        attributes={'customAttr': 'custom'},
        outlines=[Outline('Nested Outline Text', is_comment=False)],
    )
    assert doc.body.outlines == [expect]


def test_parse_feed_reader_export(read_sample):
    doc = parse(read_sample('subscriptions.opml'))
    assert doc.version == '1.0'
    assert doc.head == Head(title='Subscriptions from Example Reader')
    assert [x.text for x in doc.body.outlines] == ['Hacker News', 'Design', 'Reading notes']
    design = doc.body.outlines[1]
    assert [x.text for x in design.outlines] == ['腾讯CDC', 'A List Apart']
    feeds = [x.xml_url for x in doc.iter_outlines() if x.xml_url]
    assert feeds == [
        'https://news.ycombinator.com/rss',
        'http://cdc.tencent.com/feed/',
        'https://alistapart.com/main/feed/',
    ]


def test_parse_nested_outlines():
    doc = parse('<opml><body><outline text="A"><outline text="B"/></outline></body></opml>')
    assert len(doc.body.outlines) == 1
    root = doc.body.outlines[0]
    assert root.text == 'A'
    assert len(root.outlines) == 1
    assert root.outlines[0].text == 'B'
    assert root.outlines[0].outlines == []


def test_parse_sibling_order():
    doc = parse(
        '<opml><body>'
        '<outline text="1"><outline text="1.1"/><outline text="1.2"/></outline>'
        '<outline text="2"/>'
        '</body></opml>'
    )
    assert [x.text for x in doc.iter_outlines()] == ['1', '1.1', '1.2', '2']


def test_parse_unknown_attributes_keep_order():
    doc = parse('<opml><body><outline text="X" customAttr="Y" b="1" a="2"/></body></opml>')
    outline = doc.body.outlines[0]
    assert list(outline.attributes.items()) == [('customAttr', 'Y'), ('b', '1'), ('a', '2')]
    assert 'customAttr="Y" b="1" a="2"' in to_string(doc)


def test_parse_unescape():
    doc = parse(
        '<opml><head><title>A &amp; B &lt;C&gt;</title></head>'
        '<body><outline text="&quot;x&quot; &amp; y &#10;z"/></body></opml>'
    )
    assert doc.head.title == 'A & B <C>'
    assert doc.body.outlines[0].text == '"x" & y \nz'


def test_parse_version():
    assert parse('<opml><body/></opml>').version == '2.0'
    assert parse('<opml version="1.1"><body/></opml>').version == '1.1'


@pytest.mark.parametrize('version', ['3.0', 'invalid', '2', ''])
def test_parse_unsupported_version(version):
    with pytest.raises(UnsupportedVersionError) as exc_info:
        parse(f'<opml version="{version}"><body/></opml>')
    assert exc_info.value.version == version


def test_parse_empty_body():
    doc = parse('<opml version="2.0"><head/><body/></opml>')
    assert doc.body.outlines == []
    assert doc == Document()


def test_parse_head():
    doc = parse('<opml><body/></opml>')
    assert doc.head is None
    doc = parse('<opml><head/><body/></opml>')
    assert doc.head == Head()
    doc = parse('<opml><head><docs/><title></title></head><body/></opml>')
    assert doc.head == Head(docs='', title='')


def test_parse_head_ignore_unknown_elements():
    doc = parse(
        '<opml><head>'
        '<generator>x</generator><title>T</title>'
        '<outline text="not in body"/>'
        '</head><body/></opml>'
    )
    assert doc.head == Head(title='T')
    assert doc.body.outlines == []


def test_parse_head_repeated_element_last_wins():
    doc = parse('<opml><head><title>A</title><title>B</title></head><body/></opml>')
    assert doc.head.title == 'B'


def test_parse_ignore_foreign_elements():
    doc = parse(
        '<opml><extra><body/></extra><body>'
        '<group><outline text="hidden"/></group>'
        '<outline text="A"><note>n</note><outline text="B"/></outline>'
        '</body></opml>'
    )
    assert [x.text for x in doc.iter_outlines()] == ['A', 'B']


def test_parse_bytes_input():
    data = '<?xml version="1.0" encoding="ISO-8859-1"?><opml><body><outline text="café"/></body></opml>'
    doc = parse(data.encode('latin-1'))
    assert doc.body.outlines[0].text == 'café'


@pytest.mark.parametrize('text, error', [
    ('<opml><body><outline/></body></opml>', MissingOutlineTextError),
    ('<opml><body><outline text=""/></body></opml>', MissingOutlineTextError),
    ('<opml><body><outline text="A"><outline title="B"/></outline></body></opml>',
     MissingOutlineTextError),
    ('<opml><body></body><body></body></opml>', DuplicateBodyElementError),
    ('<opml></opml>', MissingBodyElementError),
    ('<opml><head/></opml>', MissingBodyElementError),
    ('<opml><head/><head/><body/></opml>', DuplicateHeadElementError),
    ('<rss><channel/></rss>', MissingRootElementError),
    ('<opml><body><outline text="X"', MalformedXmlError),
    ('{not xml :)', MalformedXmlError),
    ('', MalformedXmlError),
    ('<opml><body><outline text="X" isComment="maybe"/></body></opml>', InvalidValueError),
    ('<opml><head><windowTop>top</windowTop></head><body/></opml>', InvalidValueError),
    ('<opml><head><windowTop/></head><body/></opml>', InvalidValueError),
    ('<opml><head><windowTop>2147483648</windowTop></head><body/></opml>', InvalidValueError),
    ('<opml><head><windowLeft>-2147483649</windowLeft></head><body/></opml>', InvalidValueError),
])
def test_parse_error(text, error):
    with pytest.raises(error) as exc_info:
        parse(text)
    assert isinstance(exc_info.value, ParseError)
    assert str(exc_info.value)


def test_parse_error_line():
    text = '<opml>\n<body>\n<outline text="A"/>\n<outline/>\n</body>\n</opml>'
    with pytest.raises(MissingOutlineTextError) as exc_info:
        parse(text)
    assert exc_info.value.line == 4
    assert str(exc_info.value).endswith('(line 4)')


def test_parse_invalid_value_detail():
    with pytest.raises(InvalidValueError) as exc_info:
        parse('<opml><body><outline text="X" isBreakpoint="yes"/></body></opml>')
    assert exc_info.value.name == 'isBreakpoint'
    assert exc_info.value.value == 'yes'


def test_parse_max_depth():
    assert len(list(parse(_nested(3), max_depth=3).iter_outlines())) == 3
    with pytest.raises(OutlineTooDeepError) as exc_info:
        parse(_nested(4), max_depth=3)
    assert exc_info.value.max_depth == 3
    with pytest.raises(ValueError):
        parse(_nested(1), max_depth=0)


def test_parse_nested_under_libxml2_limit():
    depth = 2000
    doc = parse(_nested(depth))
    assert len(list(doc.iter_outlines())) == depth
    assert parse(to_string(doc)) == doc


def test_parse_nested_beyond_libxml2_limit():
    # huge_tree allows 2048 element levels, opml and body take two
    with pytest.raises(MalformedXmlError):
        parse(_nested(2100))
    with pytest.raises(MalformedXmlError):
        parse(_nested(3000))


def test_parse_head_int_bounds():
    doc = parse(
        '<opml><head><windowTop>2147483647</windowTop>'
        '<windowLeft>-2147483648</windowLeft></head><body/></opml>'
    )
    assert doc.head == Head(window_top=2 ** 31 - 1, window_left=-2 ** 31)
