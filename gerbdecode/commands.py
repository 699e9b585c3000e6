#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2015 Hamilton Kibbe <ham@hamiltonkib.be>
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
Gerber (RS-274X) Commands
=========================
**One immutable command class per Gerber statement**

The decoder produces one instance of these classes per statement, in file order. Every command carries the UTF-8
``offset`` of its first byte in the source. The offset is not part of the command's value, so two commands compare
equal if they were decoded from the same statement text at different places in a file.
"""

from dataclasses import dataclass, field, fields, KW_ONLY

from .utils import LengthUnit


@dataclass(frozen=True, slots=True)
class Command:
    _ : KW_ONLY
    offset : int = field(default=None, compare=False, repr=False)

    def __str__(self):
        params = ' '.join(f'{f.name}={getattr(self, f.name)}' for f in fields(self) if not f.kw_only)
        desc = self.__doc__.strip()
        return f'<{self.code} {desc} {params}>' if params else f'<{self.code} {desc}>'


@dataclass(frozen=True, slots=True)
class Comment(Command):
    """ Comment """
    code = 'G04'
    kind = 'comment'
    #: :py:class:`.EscapedString` with the comment text
    text : object


@dataclass(frozen=True, slots=True)
class Mode(Command):
    """ Unit mode """
    code = 'MO'
    kind = 'mode'
    unit : LengthUnit


@dataclass(frozen=True, slots=True)
class FormatSpecification(Command):
    """ Format specification """
    code = 'FS'
    kind = 'format_specification'
    x_integer_digits : int
    x_decimal_digits : int
    y_integer_digits : int
    y_decimal_digits : int


@dataclass(frozen=True, slots=True)
class ApertureDefine(Command):
    """ Aperture definition """
    code = 'AD'
    kind = 'aperture_define'
    #: :py:class:`.ApertureId` being defined
    number : int
    #: ``'C'``, ``'R'``, ``'O'`` or ``'P'`` for standard apertures, or the name of an aperture macro.
    template : str
    #: tuple of float parameters
    parameters : tuple = ()
    #: ``True`` when :py:attr:`template` names an aperture macro. Needed since a macro may be called e.g. ``C``.
    is_macro : bool = False


@dataclass(frozen=True, slots=True)
class ApertureMacroDefinition(Command):
    """ Aperture macro """
    code = 'AM'
    kind = 'aperture_macro'
    #: Parsed :py:class:`.ApertureMacro`
    macro : object

    @property
    def name(self):
        return self.macro.name


@dataclass(frozen=True, slots=True)
class SetCurrentAperture(Command):
    """ Select aperture """
    code = 'D'
    kind = 'set_current_aperture'
    number : int


@dataclass(frozen=True, slots=True)
class Plot(Command):
    """ Plot """
    code = 'D01'
    kind = 'plot'
    #: Integer coordinates as written in the file, ``None`` where omitted.
    x : int = None
    y : int = None
    #: Arc center offsets, ``None`` where omitted.
    i : int = None
    j : int = None


@dataclass(frozen=True, slots=True)
class Move(Command):
    """ Move """
    code = 'D02'
    kind = 'move'
    x : int = None
    y : int = None


@dataclass(frozen=True, slots=True)
class Flash(Command):
    """ Flash """
    code = 'D03'
    kind = 'flash'
    x : int = None
    y : int = None


@dataclass(frozen=True, slots=True)
class SetLinear(Command):
    """ Linear interpolation """
    code = 'G01'
    kind = 'set_linear'


@dataclass(frozen=True, slots=True)
class SetCWCircular(Command):
    """ Clockwise circular interpolation """
    code = 'G02'
    kind = 'set_cw_circular'


@dataclass(frozen=True, slots=True)
class SetCCWCircular(Command):
    """ Counter-clockwise circular interpolation """
    code = 'G03'
    kind = 'set_ccw_circular'


@dataclass(frozen=True, slots=True)
class ArcInit(Command):
    """ Arc initialization """
    code = 'G75'
    kind = 'arc_init'


@dataclass(frozen=True, slots=True)
class LoadPolarity(Command):
    """ Load polarity """
    code = 'LP'
    kind = 'load_polarity'
    dark : bool


@dataclass(frozen=True, slots=True)
class LoadMirroring(Command):
    """ Load mirroring """
    code = 'LM'
    kind = 'load_mirroring'
    #: ``'N'``, ``'X'``, ``'Y'`` or ``'XY'``
    mirroring : str


@dataclass(frozen=True, slots=True)
class LoadRotation(Command):
    """ Load rotation """
    code = 'LR'
    kind = 'load_rotation'
    #: degrees counter-clockwise
    rotation : float


@dataclass(frozen=True, slots=True)
class LoadScaling(Command):
    """ Load scaling """
    code = 'LS'
    kind = 'load_scaling'
    scaling : float


@dataclass(frozen=True, slots=True)
class StartRegion(Command):
    """ Region start """
    code = 'G36'
    kind = 'start_region'


@dataclass(frozen=True, slots=True)
class EndRegion(Command):
    """ Region end """
    code = 'G37'
    kind = 'end_region'


@dataclass(frozen=True, slots=True)
class ApertureBlock(Command):
    """ Aperture block """
    code = 'AB'
    kind = 'aperture_block'
    #: :py:class:`.ApertureId` when opening a block, ``None`` when closing it.
    number : int = None

    @property
    def is_open(self):
        return self.number is not None


@dataclass(frozen=True, slots=True)
class StepAndRepeat(Command):
    """ Step and repeat """
    code = 'SR'
    kind = 'step_and_repeat'
    #: All four fields are ``None`` for the ``%SR*%`` statement closing a step and repeat block.
    x_repeats : int = None
    y_repeats : int = None
    x_step : float = None
    y_step : float = None

    @property
    def is_open(self):
        return self.x_repeats is not None


@dataclass(frozen=True, slots=True)
class AttributeOnFile(Command):
    """ File attribute """
    code = 'TF'
    kind = 'attribute_on_file'
    #: :py:class:`.AttributeName`
    name : object
    #: tuple of :py:class:`.EscapedString`
    values : tuple = ()


@dataclass(frozen=True, slots=True)
class AttributeOnAperture(Command):
    """ Aperture attribute """
    code = 'TA'
    kind = 'attribute_on_aperture'
    name : object
    values : tuple = ()


@dataclass(frozen=True, slots=True)
class AttributeOnObject(Command):
    """ Object attribute """
    code = 'TO'
    kind = 'attribute_on_object'
    name : object
    values : tuple = ()


@dataclass(frozen=True, slots=True)
class AttributeDelete(Command):
    """ Attribute delete """
    code = 'TD'
    kind = 'attribute_delete'
    #: :py:class:`.AttributeName`, or ``None`` to delete all attributes
    name : object = None


@dataclass(frozen=True, slots=True)
class EndOfFile(Command):
    """ End of file """
    code = 'M02'
    kind = 'end_of_file'


#: All command classes
COMMANDS = (
    Comment, Mode, FormatSpecification, ApertureDefine, ApertureMacroDefinition, SetCurrentAperture, Plot, Move, Flash,
    SetLinear, SetCWCircular, SetCCWCircular, ArcInit, LoadPolarity, LoadMirroring, LoadRotation, LoadScaling,
    StartRegion, EndRegion, ApertureBlock, StepAndRepeat, AttributeOnFile, AttributeOnAperture, AttributeOnObject,
    AttributeDelete, EndOfFile)

