#! /usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2023 Jan Sebastian Götte <gerbonara@jaseg.de>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

import sys
import json
import warnings
from collections import Counter
from pathlib import Path

import click

from .utils import GerberError
from .decoder import GerberDecoder
from .rs274x import GerberLayer
from . import __version__


def _showwarning(message, category, filename, lineno, file=None, line=None):
    if file is None:
        file = sys.stderr

    filename = Path(filename)
    module_install_location = Path(__file__).parent.parent
    if filename.is_relative_to(module_install_location):
        filename = filename.relative_to(module_install_location)

    print(f'{filename}:{lineno}: {message}', file=file)
warnings.showwarning = _showwarning

def _print_version(ctx, param, value):
    if value and not ctx.resilient_parsing:
        click.echo(f'Version {__version__}')
        ctx.exit()


def _warnings_option(fun):
    return click.option('--warnings', 'format_warnings', type=click.Choice(['default', 'ignore', 'once', 'error']),
                        default='default', help='''Enable or disable file format warnings during parsing (default:
                        on). "error" turns warnings into errors.''')(fun)

def _unknown_attributes_option(fun):
    return click.option('--unknown-attributes', type=click.Choice(['warn', 'ignore', 'raise']), default='warn',
                        help='''What to do with attribute names that start with a dot but are not standard attribute
                        names (default: warn)''')(fun)


def _load(path, format_warnings, **options):
    with warnings.catch_warnings():
        warnings.simplefilter(format_warnings)
        try:
            return GerberLayer.open(path, **options)
        # with --warnings=error, warnings are raised as exceptions
        except (GerberError, Warning) as e:
            raise click.ClickException(str(e))


@click.group()
@click.option('--version', is_flag=True, callback=_print_version, expose_value=False, is_eager=True)
def cli():
    """ The gerbdecode CLI decodes single Gerber layers and prints the decoded statements, the resulting graphic
    objects or a summary of the file """
    pass


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def commands(path):
    """ Decode a Gerber file and print its statements, one decoded command per line. """
    try:
        data = path.read_text(encoding='utf-8')
        for command in GerberDecoder(filename=path).decode(data):
            click.echo(str(command))

    except GerberError as e:
        raise click.ClickException(str(e))


@cli.command()
@_warnings_option
@_unknown_attributes_option
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def scene(path, format_warnings, unknown_attributes):
    """ Interpret a Gerber file and print the resulting graphic objects, one per line. """
    layer = _load(path, format_warnings, unknown_attributes=unknown_attributes)
    for obj in layer.objects:
        click.echo(str(obj))


@cli.command()
@_warnings_option
@_unknown_attributes_option
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def meta(path, format_warnings, unknown_attributes):
    """ Interpret a Gerber file and print a summary of it as JSON to stdout. """
    layer = _load(path, format_warnings, unknown_attributes=unknown_attributes)

    settings = layer.import_settings
    fmt = lambda f: f'{f[0]}.{f[1]}' if f else None
    out = {
        'path': str(layer.original_path),
        'unit': str(settings.unit) if settings.unit else None,
        'x_format': fmt(settings.x_format),
        'y_format': fmt(settings.y_format),
        'file_attributes': {name: [str(value) for value in values] for name, values in layer.file_attrs.items()},
        'apertures': len(layer.apertures),
        'macros': sorted(layer.macros),
        'objects': dict(Counter(type(obj).__name__ for obj in layer.objects)),
        'comments': len(layer.comments),
    }
    click.echo(json.dumps(out))


if __name__ == '__main__':
    cli()
