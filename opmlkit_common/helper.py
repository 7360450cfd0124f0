import json


def pretty_format_json(data):
    """
    >>> print(pretty_format_json({"text": "中文"}))
    {
        "text": "中文"
    }
    """
    return json.dumps(data, ensure_ascii=False, indent=4)


def compact_format_json(data):
    """
    >>> compact_format_json({"text": "A", "outlines": []})
    '{"text":"A","outlines":[]}'
    """
    return json.dumps(data, ensure_ascii=False, separators=(',', ':'))


def shorten(text, width, placeholder='...'):
    """Truncate outline text for the tree view

    >>> shorten('Subscriptions from Example Reader', width=16)
    'Subscriptions...'
    >>> shorten('腾讯CDC', width=8)
    '腾讯CDC'
    """
    if not text or len(text) <= width:
        return text
    keep = max(0, width - len(placeholder))
    return text[:keep] + placeholder
