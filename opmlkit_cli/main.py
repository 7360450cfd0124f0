import logging
import sys

import click
from pyinstrument import Profiler

from opmlkit import Document, ParseError, parse as parse_opml
from opmlkit_common.helper import compact_format_json, pretty_format_json, shorten
from opmlkit_common.logger import configure_logging
from opmlkit_config import CONFIG


LOG = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@click.group()
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              help='Log level, default from OPML_LOG_LEVEL')
def cli(log_level=None):
    """OPML command line tools"""
    configure_logging(
        level=log_level or CONFIG.log_level,
        enable_loguru=CONFIG.enable_loguru,
    )


class ProfilerContext:
    def __init__(self, profile=False):
        self.profile = profile
        self.profiler = None

    def __enter__(self):
        if self.profile:
            self.profiler = profiler = Profiler()
            profiler.start()

    def __exit__(self, *args):
        if self.profile:
            self.profiler.stop()
            click.echo(self.profiler.output_text(unicode=True, color=False), err=True)


def _read_document(file, max_depth) -> Document:
    if max_depth is None:
        max_depth = CONFIG.max_depth
    data = file.read()
    LOG.debug('read %d bytes from %s', len(data), getattr(file, 'name', '-'))
    try:
        return parse_opml(data, max_depth=max_depth)
    except ParseError as ex:
        click.echo(f'{type(ex).__name__}: {ex}', err=True)
        sys.exit(1)


def _format_tree(document: Document, width: int):
    head = document.head
    if head is not None and head.title:
        yield head.title
        yield '-' * 79
    stack = [(outline, 0) for outline in reversed(document.body.outlines)]
    while stack:
        outline, level = stack.pop()
        line = '    ' * level + shorten(outline.text, width)
        if outline.xml_url:
            line += f' <{outline.xml_url}>'
        yield line
        stack.extend((child, level + 1) for child in reversed(outline.outlines))


def _print_rss(document: Document, verbose: bool):
    for outline in document.iter_outlines():
        if outline.xml_url:
            click.echo(outline.text)
            click.echo(outline.xml_url)
        elif verbose:
            click.echo(
                f'Skipping "{outline.text}" because it did not have an xmlUrl attribute.',
                err=True,
            )


@cli.command()
@click.argument('file', type=click.File('rb'), default='-')
@click.option('--tree', 'output_format', flag_value='tree', default=True,
              help='Print the outline tree (default)')
@click.option('--json', 'output_format', flag_value='json',
              help='Output the OPML as JSON')
@click.option('--json-pretty', 'output_format', flag_value='json-pretty',
              help='Output the OPML as pretty-printed JSON')
@click.option('--rss', 'output_format', flag_value='rss',
              help='Only output text and xmlUrl of outlines that have an xmlUrl')
@click.option('--width', type=click.IntRange(min=8), default=60,
              help='Max width of outline text in tree output')
@click.option('--verbose', is_flag=True, help='Print extra information while running')
@click.option('--max-depth', type=click.IntRange(min=1), help='Max outline nesting depth')
@click.option('--profile', is_flag=True, help='Run pyinstrument profile')
def parse(file, output_format='tree', width=60, verbose=False, max_depth=None, profile=False):
    """Parse an OPML file, FILE defaults to stdin"""
    with ProfilerContext(profile):
        document = _read_document(file, max_depth)
    if verbose:
        click.echo(f'-> {document!r}', err=True)
    if output_format == 'json':
        click.echo(compact_format_json(document.to_dict()))
    elif output_format == 'json-pretty':
        click.echo(pretty_format_json(document.to_dict()))
    elif output_format == 'rss':
        _print_rss(document, verbose=verbose)
    else:
        for line in _format_tree(document, width=width):
            click.echo(line)


@cli.command('format')
@click.argument('file', type=click.File('rb'), default='-')
@click.option('--pretty/--compact', default=lambda: CONFIG.pretty,
              help='Indent output, default from OPML_PRETTY')
@click.option('--max-depth', type=click.IntRange(min=1), help='Max outline nesting depth')
def format_opml(file, pretty=True, max_depth=None):
    """Parse an OPML file and write it back as canonical OPML"""
    document = _read_document(file, max_depth)
    click.echo(document.to_string(pretty=pretty).rstrip('\n'))


if __name__ == "__main__":
    cli()
