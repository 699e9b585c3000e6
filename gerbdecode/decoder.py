#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2022 Jan Sebastian Götte <gerbonara@jaseg.de>
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

"""
gerbdecode.decoder
==================
**Statement-level Gerber decoder**

The decoder splits Gerber source text into statements and turns each statement into one :py:mod:`~.commands` object.
For every statement, it looks at the statement's leading code and tries the productions registered for that code in
:py:attr:`GerberDecoder.PRODUCTIONS` one after another. The first production that matches wins. This means the order
of the productions matters: the standard aperture templates ``C``, ``R``, ``O`` and ``P`` must be tried before the
aperture macro fallback, since e.g. ``%ADD10C*%`` is a valid instantiation of a macro named ``C``.

Every production has the signature ``production(data, pos=0, offset=None)``. It returns ``(command, end)`` where
``end`` is the position right after the statement's terminating ``*`` or ``*%``, or ``None`` if the statement does
not match. ``offset`` is the byte offset recorded in the returned command. It defaults to ``pos``.
"""

import re

from . import commands as cmd
from .aperture_macros.parse import ApertureMacro
from .attributes import file_attribute_name, aperture_attribute_name, object_attribute_name, attribute_name
from .grammar import DECIMAL, UNSIGNED_DECIMAL, INTEGER, NAME_FIRST, NAME_REST, MAX_NAME_LENGTH
from .grammar import aperture_identifier, name, field, string
from .utils import MM, Inch, GerberError, LexicalError, StructuralError


LINE_BREAKS = r'(?:\r\n|\r|\n)*'
_line_breaks_re = re.compile(LINE_BREAKS)
_leading_code_re = re.compile(r'%([A-Z]{2})|([GM][0-9]{2})|[XYIJD]')
# Name position in the statements that carry a name
_statement_name_re = re.compile(fr'%(?:T[FAOD]|AM|ADD[0-9]+)(\.?{NAME_FIRST}{NAME_REST}*)')


def _at(offset, pos):
    return pos if offset is None else offset


def _decimal_list(min_count, max_count=None):
    max_count = '' if max_count is None else max_count-1
    return fr'{DECIMAL}(?:X{DECIMAL}){{{min_count-1},{max_count}}}'


def _parse_decimals(text):
    return tuple(float(value) for value in text.split('X'))


def _regex_production(func_name, pattern, build):
    regex = re.compile(pattern)

    def production(data, pos=0, offset=None):
        if (match := regex.match(data, pos)):
            return build(match, _at(offset, pos)), match.end()

    production.__name__ = production.__qualname__ = func_name
    return production


def _simple_production(func_name, literal, kls):
    def production(data, pos=0, offset=None):
        if data.startswith(literal, pos):
            return kls(offset=_at(offset, pos)), pos + len(literal)

    production.__name__ = production.__qualname__ = func_name
    return production


def comment(data, pos=0, offset=None):
    """ ``G04`` followed by arbitrary text """
    if not data.startswith('G04', pos):
        return None

    text, end = string(data, pos+3)
    if not data.startswith('*', end):
        return None
    return cmd.Comment(text, offset=_at(offset, pos)), end+1


mode = _regex_production('mode', r'%MO(MM|IN)\*%',
        lambda match, offset: cmd.Mode(MM if match[1] == 'MM' else Inch, offset=offset))

format_specification = _regex_production('format_specification', r'%FSLAX([1-6])([1-6])Y([1-6])([1-6])\*%',
        lambda match, offset: cmd.FormatSpecification(*map(int, match.groups()), offset=offset))


def _aperture_define(template, func_name, min_params, max_params):
    params_re = re.compile(fr'{template},{LINE_BREAKS}({_decimal_list(min_params, max_params)})\*%')

    def production(data, pos=0, offset=None):
        if not data.startswith('%AD', pos):
            return None

        if (res := aperture_identifier(data, pos+3)) is None:
            return None

        number, end = res
        if not (match := params_re.match(data, end)):
            return None
        return cmd.ApertureDefine(number, template, _parse_decimals(match[1]), offset=_at(offset, pos)), match.end()

    production.__name__ = production.__qualname__ = func_name
    return production

aperture_define_circle = _aperture_define('C', 'aperture_define_circle', 1, 2)
aperture_define_rectangle = _aperture_define('R', 'aperture_define_rectangle', 2, 3)
aperture_define_obround = _aperture_define('O', 'aperture_define_obround', 2, 3)
aperture_define_polygon = _aperture_define('P', 'aperture_define_polygon', 2, 4)

_macro_params_re = re.compile(fr'(?:,{LINE_BREAKS}({_decimal_list(1)}))?\*%')

def aperture_define_macro(data, pos=0, offset=None):
    """ Aperture definition instantiating an aperture macro. Must be tried after the standard templates. """
    if not data.startswith('%AD', pos):
        return None

    if (res := aperture_identifier(data, pos+3)) is None:
        return None
    number, end = res

    if (res := name(data, end)) is None:
        return None
    macro_name, end = res

    if not (match := _macro_params_re.match(data, end)):
        return None

    params = _parse_decimals(match[1]) if match[1] else ()
    return cmd.ApertureDefine(number, macro_name, params, is_macro=True, offset=_at(offset, pos)), match.end()


def aperture_macro(data, pos=0, offset=None):
    """ ``%AM<name>*<body>%``. The body is parsed into an :py:class:`.ApertureMacro` right away. A malformed body raises
    :py:class:`.LexicalError`, and an expression nested too deeply raises :py:class:`.StructuralError`. """
    if not data.startswith('%AM', pos):
        return None

    if (res := name(data, pos+3)) is None:
        return None
    macro_name, end = res

    if not data.startswith('*', end) or (close := data.find('%', end+1)) < 0:
        return None

    macro = ApertureMacro.parse_macro(macro_name, data[end+1:close])
    return cmd.ApertureMacroDefinition(macro, offset=_at(offset, pos)), close+1


def set_current_aperture(data, pos=0, offset=None):
    if (res := aperture_identifier(data, pos)) is None:
        return None

    number, end = res
    if not data.startswith('*', end):
        return None
    return cmd.SetCurrentAperture(number, offset=_at(offset, pos)), end+1


def _int_or_none(value):
    return None if value is None else int(value)

plot = _regex_production('plot', fr'(?:X({INTEGER}))?(?:Y({INTEGER}))?(?:I({INTEGER}))?(?:J({INTEGER}))?D0?1\*',
        lambda match, offset: cmd.Plot(*map(_int_or_none, match.groups()), offset=offset))

move = _regex_production('move', fr'(?:X({INTEGER}))?(?:Y({INTEGER}))?D0?2\*',
        lambda match, offset: cmd.Move(*map(_int_or_none, match.groups()), offset=offset))

flash = _regex_production('flash', fr'(?:X({INTEGER}))?(?:Y({INTEGER}))?D0?3\*',
        lambda match, offset: cmd.Flash(*map(_int_or_none, match.groups()), offset=offset))

set_linear = _simple_production('set_linear', 'G01*', cmd.SetLinear)
set_cw_circular = _simple_production('set_cw_circular', 'G02*', cmd.SetCWCircular)
set_ccw_circular = _simple_production('set_ccw_circular', 'G03*', cmd.SetCCWCircular)
arc_init = _simple_production('arc_init', 'G75*', cmd.ArcInit)
start_region = _simple_production('start_region', 'G36*', cmd.StartRegion)
end_region = _simple_production('end_region', 'G37*', cmd.EndRegion)
end_of_file = _simple_production('end_of_file', 'M02*', cmd.EndOfFile)

load_polarity = _regex_production('load_polarity', r'%LP([DC])\*%',
        lambda match, offset: cmd.LoadPolarity(match[1] == 'D', offset=offset))

# XY must come before X, otherwise %LMXY*% would fail on the trailing Y.
load_mirroring = _regex_production('load_mirroring', r'%LM(N|XY|X|Y)\*%',
        lambda match, offset: cmd.LoadMirroring(match[1], offset=offset))

load_rotation = _regex_production('load_rotation', fr'%LR({DECIMAL})\*%',
        lambda match, offset: cmd.LoadRotation(float(match[1]), offset=offset))

load_scaling = _regex_production('load_scaling', fr'%LS({DECIMAL})\*%',
        lambda match, offset: cmd.LoadScaling(float(match[1]), offset=offset))


def aperture_block_open(data, pos=0, offset=None):
    if not data.startswith('%AB', pos):
        return None

    if (res := aperture_identifier(data, pos+3)) is None:
        return None

    number, end = res
    if not data.startswith('*%', end):
        return None
    return cmd.ApertureBlock(number, offset=_at(offset, pos)), end+2

aperture_block_close = _simple_production('aperture_block_close', '%AB*%', cmd.ApertureBlock)

step_and_repeat_open = _regex_production('step_and_repeat_open',
        fr'%SRX0*([1-9][0-9]*)Y0*([1-9][0-9]*)I({UNSIGNED_DECIMAL})J({UNSIGNED_DECIMAL})\*%',
        lambda match, offset: cmd.StepAndRepeat(int(match[1]), int(match[2]), float(match[3]), float(match[4]),
                                                offset=offset))

step_and_repeat_close = _simple_production('step_and_repeat_close', '%SR*%', cmd.StepAndRepeat)


def _attribute(code, func_name, name_parser, kls):
    prefix = f'%{code}'

    def production(data, pos=0, offset=None):
        if not data.startswith(prefix, pos):
            return None

        if (res := name_parser(data, pos+len(prefix))) is None:
            return None
        attr_name, end = res

        values = []
        while data.startswith(',', end):
            value, end = field(data, end+1)
            values.append(value)

        if not data.startswith('*%', end):
            return None
        return kls(attr_name, tuple(values), offset=_at(offset, pos)), end+2

    production.__name__ = production.__qualname__ = func_name
    return production

attribute_on_file = _attribute('TF', 'attribute_on_file', file_attribute_name, cmd.AttributeOnFile)
attribute_on_aperture = _attribute('TA', 'attribute_on_aperture', aperture_attribute_name, cmd.AttributeOnAperture)
attribute_on_object = _attribute('TO', 'attribute_on_object', object_attribute_name, cmd.AttributeOnObject)


def attribute_delete(data, pos=0, offset=None):
    if not data.startswith('%TD', pos):
        return None

    attr_name, end = attribute_name(data, pos+3) or (None, pos+3)
    if not data.startswith('*%', end):
        return None
    return cmd.AttributeDelete(attr_name, offset=_at(offset, pos)), end+2


def statement_prefix(data, pos, max_len=40):
    """ Return the statement starting at ``pos`` for use in error messages, shortened to ``max_len`` characters. """
    if data.startswith('%', pos):
        end = data.find('%', pos+1) + 1
    else:
        end = data.find('*', pos) + 1

    if end <= 0:
        end = len(data)

    stmt = re.sub(r'\s+', ' ', data[pos:end])
    if len(stmt) > max_len:
        stmt = stmt[:max_len-3] + '...'
    return stmt


def char_position(data, byte_offset):
    """ Convert a UTF-8 byte offset into ``data`` into a character position. """
    if data.isascii():
        return byte_offset
    return len(data.encode('utf-8')[:byte_offset].decode('utf-8', errors='ignore'))


def line_number(data, byte_offset):
    """ 1-based line number of ``byte_offset`` in ``data``. """
    return data.count('\n', 0, char_position(data, byte_offset)) + 1


class GerberDecoder:
    """ Decoder turning Gerber source text into a list of :py:mod:`~.commands` objects. Decoding is all-or-nothing:
    the first statement that does not match raises a :py:class:`.GerberError` and no commands are returned. """

    #: Productions for each leading statement code, in the order they are tried. Statements starting with ``X``,
    #: ``Y``, ``I``, ``J`` or ``D`` are all looked up under ``D``.
    PRODUCTIONS = {
        'G04': (comment,),
        'MO': (mode,),
        'FS': (format_specification,),
        'AD': (aperture_define_circle, aperture_define_rectangle, aperture_define_obround, aperture_define_polygon,
               aperture_define_macro),
        'AM': (aperture_macro,),
        'D': (plot, move, flash, set_current_aperture),
        'G01': (set_linear,),
        'G02': (set_cw_circular,),
        'G03': (set_ccw_circular,),
        'G75': (arc_init,),
        'LP': (load_polarity,),
        'LM': (load_mirroring,),
        'LR': (load_rotation,),
        'LS': (load_scaling,),
        'G36': (start_region,),
        'G37': (end_region,),
        'AB': (aperture_block_open, aperture_block_close),
        'SR': (step_and_repeat_open, step_and_repeat_close),
        'TF': (attribute_on_file,),
        'TA': (attribute_on_aperture,),
        'TO': (attribute_on_object,),
        'TD': (attribute_delete,),
        'M02': (end_of_file,),
    }

    def __init__(self, filename=None):
        self.filename = filename

    @classmethod
    def leading_code(kls, data, pos=0):
        """ Return the :py:attr:`PRODUCTIONS` key for the statement at ``pos``, or ``None``. """
        if not (match := _leading_code_re.match(data, pos)):
            return None
        return match[1] or match[2] or 'D'

    def decode(self, data):
        """ Decode ``data`` into a list of commands, ending with an :py:class:`~.commands.EndOfFile`.

        :param str data: Gerber source text
        :rtype: list
        :raises LexicalError: when a statement does not match any production or there is data after ``M02``.
        :raises StructuralError: when the data ends without an ``M02`` statement, or a name or macro expression
                                 exceeds its length or nesting bound.
        """
        commands = []
        pos = 0
        is_ascii = data.isascii()
        byte_pos, byte_offset = 0, 0

        while True:
            pos = _line_breaks_re.match(data, pos).end()
            if not is_ascii:
                byte_offset += len(data[byte_pos:pos].encode('utf-8'))
                byte_pos = pos
            offset = pos if is_ascii else byte_offset

            if pos >= len(data):
                raise self._located(data, StructuralError('File ends without an M02 end of file statement',
                                                          byte_offset=offset))

            try:
                command, pos = self._decode_statement(data, pos, offset)
            except GerberError as e:
                if e.byte_offset is None:
                    e.byte_offset = offset
                if e.statement is None:
                    e.statement = statement_prefix(data, pos)
                self._located(data, e)
                raise

            commands.append(command)
            if isinstance(command, cmd.EndOfFile):
                break

        if (end := _line_breaks_re.match(data, pos).end()) != len(data):
            offset = end if is_ascii else len(data[:end].encode('utf-8'))
            raise self._located(data, LexicalError('Trailing data after M02 end of file statement',
                                                   byte_offset=offset, statement=statement_prefix(data, end)))

        return commands

    def _decode_statement(self, data, pos, offset):
        code = self.leading_code(data, pos)
        for production in self.PRODUCTIONS.get(code, ()):
            if (res := production(data, pos, offset)) is not None:
                return res

        if code not in self.PRODUCTIONS:
            raise LexicalError('Unknown statement')

        if (match := _statement_name_re.match(data, pos)) and len(match[1]) > MAX_NAME_LENGTH:
            raise StructuralError(f'Name in {code} statement is {len(match[1])} characters long, but names are '
                                  f'limited to {MAX_NAME_LENGTH} characters', identifier=match[1][:MAX_NAME_LENGTH])
        raise LexicalError(f'Malformed {code} statement')

    def _located(self, data, e):
        e.filename = self.filename
        if e.lineno is None and e.byte_offset is not None:
            e.lineno = line_number(data, e.byte_offset)
        return e


def decode(data, filename=None):
    """ Decode Gerber source text into a list of commands. See :py:meth:`.GerberDecoder.decode`. """
    return GerberDecoder(filename).decode(data)

