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
gerbdecode.grammar
==================
**Token-level parsers for Gerber data**

All parsers in this module share the same calling convention: they take the input string and a position into it, and
return a ``(value, end)`` tuple on success, where ``end`` is the position right after the parsed token. On mismatch
they return ``None``. A parser never consumes anything when it fails, so callers may freely try several parsers at the
same position.
"""

import re
from dataclasses import dataclass

NUMBER = r'[0-9]+'
INTEGER = r'[+-]?[0-9]+'
UNSIGNED_DECIMAL = r'(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)'
DECIMAL = r'[+-]?' + UNSIGNED_DECIMAL
NAME_FIRST = r'(?:[^\W\d]|\$)'
NAME_REST = r'[\w.$]'

#: Maximum length of a name, including the leading ``.`` of system names.
MAX_NAME_LENGTH = 127

_unsigned_integer_re = re.compile(NUMBER)
_positive_integer_re = re.compile(r'0*([1-9][0-9]*)')
_integer_re = re.compile(INTEGER)
_unsigned_decimal_re = re.compile(UNSIGNED_DECIMAL)
_sign_re = re.compile(r'[+-]?')
# The negative lookahead makes an overlong name fail instead of matching its first 127 characters.
_user_name_re = re.compile(fr'{NAME_FIRST}{NAME_REST}{{0,{MAX_NAME_LENGTH-1}}}(?!{NAME_REST})')
_system_name_re = re.compile(fr'\.{NAME_FIRST}{NAME_REST}{{0,{MAX_NAME_LENGTH-2}}}(?!{NAME_REST})')
_field_re = re.compile(r'[^%*,]*')
_string_re = re.compile(r'[^%*]*')
_unicode_escape_re = re.compile(r'\\u([0-9a-fA-F]{4})')


class ApertureId(int):
    """ Number of a user-defined aperture, i.e. the ``nn`` in ``Dnn``. Compares, sorts and hashes like a plain
    :py:class:`int`. Numbers below 10 are reserved for the ``D01``/``D02``/``D03`` operation codes. """

    def __new__(kls, number):
        number = int(number)
        if number < 10:
            raise ValueError(f'Aperture numbers must be 10 or larger, not {number}')
        return super().__new__(kls, number)

    def __repr__(self):
        return f'D{int(self)}'

    __str__ = __repr__


@dataclass(frozen=True, slots=True)
class EscapedString:
    """ Text read from a Gerber file, tagged by whether it may contain ``\\uXXXX`` unicode escapes.

    Escapes are never expanded while decoding. Use :py:meth:`unescape` or ``str()`` to get the expanded text.
    """
    #: Text exactly as it appears in the file
    raw : str
    #: ``True`` if :py:attr:`raw` may contain escape sequences
    escaped : bool = False

    @classmethod
    def from_raw(kls, raw):
        return kls(raw, '\\' in raw)

    def unescape(self):
        if not self.escaped:
            return self.raw
        return _unicode_escape_re.sub(lambda match: chr(int(match[1], 16)), self.raw)

    def __str__(self):
        return self.unescape()

    def __len__(self):
        return len(self.raw)


def _regex_parser(regex, convert):
    def parse(data, pos=0):
        if (match := regex.match(data, pos)):
            return convert(match), match.end()
    return parse

unsigned_integer = _regex_parser(_unsigned_integer_re, lambda match: int(match[0]))
unsigned_integer.__doc__ = ''' One or more digits, no sign. '''

positive_integer = _regex_parser(_positive_integer_re, lambda match: int(match[1]))
positive_integer.__doc__ = ''' Digits with optional leading zeros that amount to a value of at least 1. No sign. '''

integer = _regex_parser(_integer_re, lambda match: int(match[0]))
integer.__doc__ = ''' Digits with an optional ``+`` or ``-`` sign. '''

unsigned_decimal = _regex_parser(_unsigned_decimal_re, lambda match: float(match[0]))
unsigned_decimal.__doc__ = ''' Digits with an optional fractional part, or just a fractional part such as ``.5``. '''


def decimal(data, pos=0):
    """ :py:func:`unsigned_decimal` with an optional sign, which is applied to the already parsed magnitude. """
    sign_end = _sign_re.match(data, pos).end()
    if (res := unsigned_decimal(data, sign_end)) is None:
        return None

    value, end = res
    return (-value if data[pos:sign_end] == '-' else value), end


def aperture_identifier(data, pos=0):
    """ ``D`` followed by a :py:func:`positive_integer` of at least 10. Returns an :py:class:`ApertureId`. """
    if not data.startswith('D', pos):
        return None

    if (res := positive_integer(data, pos+1)) is None:
        return None

    number, end = res
    if number < 10:
        return None
    return ApertureId(number), end


def user_name(data, pos=0):
    """ Name starting with a letter, ``_`` or ``$``, at most 127 characters long. """
    if (match := _user_name_re.match(data, pos)):
        return match[0], match.end()


def system_name(data, pos=0):
    """ ``.`` followed by a user name, at most 127 characters long including the dot. """
    if (match := _system_name_re.match(data, pos)):
        return match[0], match.end()


def name(data, pos=0):
    """ Either a :py:func:`system_name` or a :py:func:`user_name`, in that order. """
    return system_name(data, pos) or user_name(data, pos)


def field(data, pos=0):
    """ Longest run of characters other than ``%``, ``*`` and ``,``. Always succeeds. """
    match = _field_re.match(data, pos)
    return EscapedString.from_raw(match[0]), match.end()


def string(data, pos=0):
    """ Longest run of characters other than ``%`` and ``*``. Always succeeds. """
    match = _string_re.match(data, pos)
    return EscapedString.from_raw(match[0]), match.end()

