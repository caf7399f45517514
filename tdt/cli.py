"""Command-line wrapper for tdt commands.
"""

import click

from . import __version__
from . import log as loggie
from .engine import TDTEngine
from .loader import load_definitions, parse_company_prefix_table
from .model import LEVEL_TYPES
from .tdt_errors import TDTError
from .util import bin2hex as _bin2hex
from .util import hex2bin as _hex2bin

logger = loggie.get_logger(__name__)

LEVEL_CHOICE = click.Choice(LEVEL_TYPES, case_sensitive=False)


def parse_params(ctx, param, values):
    params = {}
    for value in values:
        key, sep, val = value.partition('=')
        if not sep or not key:
            raise click.BadParameter(
                'expected key=value, got {!r}'.format(value))
        params[key.strip()] = val.strip()
    return params


@click.group()
@click.option('-d', '--debug', is_flag=True, default=False)
@click.option('-l', '--logfile', type=click.Path())
@click.option('--strict', is_flag=True, default=False,
              help='fail on character set and range violations')
@click.option('-s', '--scheme-file', type=click.Path(exists=True),
              multiple=True,
              help='TDT XML definition file to use instead of the built-in '
                   'schemes; multiple args allowed')
@click.option('-g', '--gepc64-table', type=click.Path(exists=True),
              help='GEPC64Table XML file for the 64-bit company prefix '
                   'index')
@click.option('-c', '--company-prefixes', type=click.File('r'),
              help='company prefix feed: "index,prefix" or "prefix" lines')
@click.pass_context
def cli(ctx, debug, logfile, strict, scheme_file, gepc64_table,
        company_prefixes):
    loggie.init_logging(debug, logfile)
    ctx.obj = {
        'strict': strict,
        'scheme_files': scheme_file,
        'gepc64_table': gepc64_table,
        'company_prefixes': company_prefixes,
    }


def make_engine(options):
    kwargs = {'strict': options['strict']}
    if options['gepc64_table']:
        kwargs['company_prefix_table'] = parse_company_prefix_table(
            options['gepc64_table'])
    if options['scheme_files']:
        engine = TDTEngine.from_definitions(
            load_definitions(options['scheme_files']), **kwargs)
    else:
        engine = TDTEngine.builtin(**kwargs)
    if options['company_prefixes']:
        engine.add_company_prefixes(options['company_prefixes'])
    return engine


@cli.command()
@click.argument('value')
@click.option('-o', '--output-level', type=LEVEL_CHOICE, required=True,
              help='level to convert to')
@click.option('-i', '--input-level', type=LEVEL_CHOICE,
              help='only consider this level for the input value')
@click.option('-p', '--param', 'params', multiple=True,
              callback=parse_params,
              help='conversion parameter as key=value, e.g. taglength=96, '
                   'filter=3, companyprefixlength=7; multiple args allowed')
@click.pass_context
def convert(ctx, value, output_level, input_level, params):
    """Convert an EPC to another representation level."""
    logger.debug('convert %s to %s with %s', value, output_level, params)
    try:
        engine = make_engine(ctx.obj)
        if input_level:
            result = engine.convert_from_level(value, input_level.upper(),
                                               params.get('taglength'),
                                               params, output_level.upper())
        else:
            result = engine.convert(value, params, output_level.upper())
    except TDTError as err:
        logger.error('%s: %s', type(err).__name__, err)
        ctx.exit(1)
    click.echo(result)


@cli.command()
@click.argument('hexstr')
def hex2bin(hexstr):
    """Print the bits of a hex string."""
    try:
        click.echo(_hex2bin(hexstr))
    except ValueError:
        raise click.BadParameter('not a hex string: {}'.format(hexstr))


@cli.command()
@click.argument('bits')
def bin2hex(bits):
    """Print a bit string as hex."""
    try:
        click.echo(_bin2hex(bits))
    except ValueError:
        raise click.BadParameter('not a binary string: {}'.format(bits))


@cli.command()
@click.pass_context
def schemes(ctx):
    """List the loaded schemes and their levels."""
    try:
        engine = make_engine(ctx.obj)
    except TDTError as err:
        logger.error('%s: %s', type(err).__name__, err)
        ctx.exit(1)
    for scheme in engine.schemes:
        click.echo('{} ({} bits): {}'.format(
            scheme.name, scheme.tag_length,
            ', '.join(level.type for level in scheme.levels)))


@cli.command()
def version():
    print(__version__)
