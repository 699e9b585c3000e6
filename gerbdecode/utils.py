#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2014 Hamilton Kibbe <ham@hamiltonkib.be>
# Copyright 2022 Jan Götte <code@jaseg.de>
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
gerbdecode.utils
================
**Units, modes and the error types shared by the decoder and the interpreter.**
"""

from enum import Enum


class UnknownAttributeWarning(Warning):
    """ gerbdecode found a ``.``-prefixed attribute name that is not one of the standard attribute names. """
    pass


class GerberError(SyntaxError):
    """ Base class of every error raised while decoding or interpreting a Gerber file.

    Besides the message, every error carries as much location context as is known at the point where it was raised:
    the UTF-8 ``byte_offset`` of the offending statement, the ``statement`` code or prefix, and the ``identifier``
    (aperture number, macro name or macro variable) involved. :py:attr:`filename` and :py:attr:`lineno` are filled in
    by :py:meth:`.GerberLayer.from_string` when the source text is known.
    """
    #: One of ``'lexical'``, ``'structural'``, ``'reference'``, ``'redefinition'`` or ``'evaluation'``
    kind = None

    def __init__(self, msg, *, byte_offset=None, statement=None, identifier=None):
        super().__init__(msg)
        self.byte_offset = byte_offset
        self.statement = statement
        self.identifier = identifier

    def __str__(self):
        if self.filename is not None or self.lineno is not None:
            prefix = f'{self.filename or "<string>"}:{self.lineno or "?"} '
        else:
            prefix = ''

        if self.statement is not None:
            prefix += f'"{self.statement}" '

        if self.byte_offset is not None:
            prefix += f'(offset {self.byte_offset}) '

        if prefix:
            return f'{prefix.rstrip()}: {self.msg}'
        return self.msg


class LexicalError(GerberError):
    """ No grammar production matched a statement, or a token inside it is malformed. """
    kind = 'lexical'


class StructuralError(GerberError):
    """ A statement is well-formed, but not allowed in the current state (e.g. a region end without region start, an
    aperture block still open at end of file, or a missing ``M02`` end of file statement). """
    kind = 'structural'


class UndefinedReferenceError(GerberError):
    """ A statement references an aperture, aperture macro or attribute that has not been defined. """
    kind = 'reference'


class RedefinitionError(GerberError):
    """ A statement tries to change something that must only be set once, such as the unit or an aperture number. """
    kind = 'redefinition'


class EvaluationError(GerberError):
    """ Evaluating an aperture macro failed. :py:attr:`statement_index` is the index of the failing statement within
    the macro, not counting comments. """
    kind = 'evaluation'

    def __init__(self, msg, *, statement_index=None, **kwargs):
        super().__init__(msg, **kwargs)
        self.statement_index = statement_index


class UnboundVariableError(EvaluationError, UndefinedReferenceError):
    """ An aperture macro expression referenced a ``$n`` variable that was neither passed as a parameter nor assigned
    by an earlier statement. """
    kind = 'evaluation'


class LengthUnit:
    """ Length unit of a Gerber file, as set by its ``%MO`` statement. Used in :py:class:`.FileSettings`,
    :py:class:`.GraphicObject` and :py:class:`.Aperture` to record which unit their values are in.

    Singleton, use only global instances ``utils.MM`` and ``utils.Inch``.
    """

    def __init__(self, name, shorthand):
        self.name = name
        self.shorthand = shorthand

    def __str__(self):
        return self.shorthand

    def __repr__(self):
        return f'<LengthUnit {self.name}>'


Inch = LengthUnit('inch', 'in')
MM = LengthUnit('millimeter', 'mm')

def _raise_error(*args, **kwargs):
    raise SystemError('LengthUnit is a singleton. Use gerbdecode.utils.MM or gerbdecode.utils.Inch.')
LengthUnit.__init__ = _raise_error


class InterpMode(Enum):
    """ Gerber interpolation mode as set by ``G01``, ``G02`` and ``G03``. """
    #: straight line
    LINEAR = 0
    #: clockwise circular arc
    CIRCULAR_CW = 1
    #: counterclockwise circular arc
    CIRCULAR_CCW = 2

