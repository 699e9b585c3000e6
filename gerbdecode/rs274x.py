#! /usr/bin/env python
# -*- coding: utf-8 -*-
#
# Modified from parser.py by Paulo Henrique Silva <ph.silva@gmail.com>
# Copyright 2014 Hamilton Kibbe <ham@hamiltonkib.be>
# Copyright 2019 Hiroshi Murayama <opiopan@gmail.com>
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

import warnings
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path

from .settings import FileSettings
from .utils import InterpMode, UnknownAttributeWarning
from .utils import GerberError, StructuralError, UndefinedReferenceError, RedefinitionError
from .attributes import NameKind
from .decoder import GerberDecoder, statement_prefix, char_position, line_number
from . import graphic_objects as go
from . import apertures

#: Default limit for how deeply aperture blocks and step and repeat blocks may be nested
MAX_NESTING = 32


class GerberLayer:
    """ The decoded contents of a single Gerber file.

    :ivar objects: List of objects in this Gerber file. All elements are subclasses of :py:class:`.GraphicObject`.
    :ivar comments: List of :py:class:`.EscapedString` with the ``G04`` comments of the source file, in file order.
    :ivar import_settings: :py:class:`.FileSettings` with the unit and coordinate format read from the file.
    :ivar file_attrs: ``dict`` mapping file attribute names to tuples of :py:class:`.EscapedString` values.
    :ivar apertures: ``dict`` mapping each defined :py:class:`.ApertureId` to its :py:class:`.Aperture`.
    :ivar macros: ``dict`` mapping aperture macro names to :py:class:`.ApertureMacro` templates.
    :ivar commands: The list of decoded commands this layer was interpreted from.
    """

    def __init__(self, objects=None, comments=None, import_settings=None, original_path=None, file_attrs=None,
                 apertures=None, macros=None, commands=None):
        self.objects = objects or []
        self.comments = comments or []
        self.import_settings = import_settings
        self.original_path = original_path
        self.file_attrs = file_attrs or {}
        self.apertures = apertures or {}
        self.macros = macros or {}
        self.commands = commands or []

    @property
    def unit(self):
        return self.import_settings.unit if self.import_settings else None

    @classmethod
    def open(kls, filename, **options):
        """ Load a Gerber file from the file system. Gerber files are always UTF-8 encoded.

        :param filename: str or :py:class:`pathlib.Path`
        :param options: Interpreter options, see :py:class:`.GerberInterpreter`.

        :rtype: :py:class:`.GerberLayer`
        """
        filename = Path(filename)
        with open(filename, 'r', encoding='utf-8', newline='') as f:
            return kls.from_string(f.read(), filename=filename, **options)

    @classmethod
    def from_string(kls, data, filename=None, **options):
        """ Decode and interpret the given string as Gerber file content. For the meaning of the parameters, see
        :py:meth:`~.GerberLayer.open`.

        :raises GerberError: on the first problem found in the file.
        """
        # filename arg is for error messages
        commands = GerberDecoder(filename=filename).decode(data)
        return kls.from_commands(commands, filename=filename, source=data, **options)

    @classmethod
    def from_commands(kls, commands, filename=None, source=None, **options):
        """ Interpret an already decoded list of commands. ``source`` is the text the commands were decoded from. It
        is only used to point to the offending line in error messages and warnings. """
        obj = kls(original_path=filename)
        interpreter = GerberInterpreter(obj, filename=filename, source=source, **options)
        interpreter.execute(commands)
        obj.commands = list(commands)
        return obj

    def __len__(self):
        return len(self.objects)

    def __str__(self):
        name = f'{Path(self.original_path).name} ' if self.original_path else ''
        return f'<GerberLayer {name}with {len(self.apertures)} apertures, {len(self.objects)} objects>'

    def __repr__(self):
        return str(self)


@dataclass
class ApertureBlockFrame:
    """ An ``%AB`` aperture block that is currently being defined """
    number : int
    attrs : tuple
    objects : list = field(default_factory=list)

    def __str__(self):
        return f'aperture block {self.number}'


@dataclass
class StepRepeatFrame:
    """ An ``%SR`` step and repeat block that is currently open """
    x_repeats : int
    y_repeats : int
    x_step : float
    y_step : float
    objects : list = field(default_factory=list)

    def __str__(self):
        return f'step and repeat block {self.x_repeats}x{self.y_repeats}'


class GraphicsState:
    """ Internal class used to track the modal Gerber state during interpretation.
    """

    def __init__(self, warn, file_settings=None):
        self.file_settings = file_settings or FileSettings()
        self.warn = warn
        self.point = None
        self.aperture = None
        self.interpolation_mode = InterpMode.LINEAR
        self.arc_init = False # set by G75, must come before the first circular plot
        self.polarity_dark = True
        self.transform = go.IDENTITY
        self.region = None # region being defined between G36 and G37
        self.contour = None # current contour of that region
        self.frames = [] # open aperture blocks and step and repeat blocks, innermost last
        self.file_attrs = {}
        self.aperture_attrs = {}
        self.object_attrs = {}

    @property
    def unit(self):
        return self.file_settings.unit

    def set_mirroring(self, mirroring):
        self.transform = dataclasses.replace(self.transform, mirroring=mirroring)

    def set_rotation(self, rotation):
        self.transform = dataclasses.replace(self.transform, rotation=rotation)

    def set_scaling(self, scaling):
        self.transform = dataclasses.replace(self.transform, scaling=scaling)

    def current_point(self):
        if self.point is None:
            self.warn('No current point is defined. Assuming (0, 0).')
            self.point = (0.0, 0.0)
        return self.point

    def map_coord(self, x, y):
        """ Scale integer file coordinates into file units, filling in omitted coordinates from the current point. """
        x = self.file_settings.parse_coordinate(x, 'x')
        y = self.file_settings.parse_coordinate(y, 'y')
        if x is None or y is None:
            cur_x, cur_y = self.current_point()
            x = cur_x if x is None else x
            y = cur_y if y is None else y
        return x, y

    def map_offset(self, i, j):
        return (self.file_settings.parse_coordinate(i or 0, 'x'),
                self.file_settings.parse_coordinate(j or 0, 'y'))

    def _object_args(self):
        return dict(unit=self.unit, polarity_dark=self.polarity_dark, attrs=dict(self.object_attrs),
                    transform=self.transform)

    def flash(self, x, y):
        if isinstance(self.aperture, apertures.BlockAperture):
            return go.BlockInstance(x, y, self.aperture, **self._object_args())

        elif isinstance(self.aperture, apertures.ApertureMacroInstance):
            return go.Flash(x, y, self.aperture, self.aperture.shapes(), **self._object_args())

        else:
            return go.Flash(x, y, self.aperture, **self._object_args())

    def interpolate(self, x, y, i=None, j=None):
        old_x, old_y = self.current_point()

        if self.interpolation_mode == InterpMode.LINEAR:
            return go.Line(old_x, old_y, x, y, self.aperture, **self._object_args())

        else:
            cx, cy = self.map_offset(i, j)
            clockwise = self.interpolation_mode == InterpMode.CIRCULAR_CW
            return go.Arc(old_x, old_y, x, y, cx, cy, clockwise, self.aperture, **self._object_args())

    def append_segment(self, x, y, i=None, j=None):
        """ Add a segment ending at ``(x, y)`` to the current region contour, starting a new contour if needed. """
        if self.contour is None:
            self.contour = go.Contour([self.current_point()], [])

        if self.interpolation_mode == InterpMode.LINEAR:
            self.contour.append_line(x, y)

        else:
            old_x, old_y = self.current_point()
            cx, cy = self.map_offset(i, j)
            clockwise = self.interpolation_mode == InterpMode.CIRCULAR_CW
            self.contour.append_arc(x, y, old_x+cx, old_y+cy, clockwise)

    def end_contour(self):
        if self.contour:
            self.contour.close()
            self.region.contours.append(self.contour)
        self.contour = None

    def finish_region(self):
        """ Close the current region and return it with the current polarity, attributes and transform applied.
        Returns ``None`` for a region without any contours. """
        self.end_contour()
        region, self.region = self.region, None
        if not region:
            return None

        return dataclasses.replace(region, **self._object_args())


class GerberInterpreter:
    """ Internal class that executes decoded Gerber commands against a :py:class:`.GraphicsState` and collects the
    resulting objects into a :py:class:`.GerberLayer`.

    :param target: :py:class:`.GerberLayer` to fill in
    :param filename: File name for error messages and warnings
    :param source: Source text the commands were decoded from, for error messages and warnings
    :param str unknown_attributes: What to do with ``.``-prefixed attribute names that are not standard attribute
                                   names. ``'warn'`` (default) keeps them and issues an
                                   :py:class:`.UnknownAttributeWarning`, ``'ignore'`` keeps them silently, and
                                   ``'raise'`` raises an :py:class:`.UndefinedReferenceError`.
    :param int max_nesting: Maximum depth of nested aperture blocks and step and repeat blocks.
    """

    def __init__(self, target, filename=None, source=None, unknown_attributes='warn', max_nesting=MAX_NESTING):
        if unknown_attributes not in ('warn', 'ignore', 'raise'):
            raise ValueError(f'unknown_attributes must be "warn", "ignore" or "raise", not {unknown_attributes!r}')

        if max_nesting < 1:
            raise ValueError(f'max_nesting must be at least 1, not {max_nesting}')

        self.target = target
        self.filename = filename
        self.source = source
        self.unknown_attributes = unknown_attributes
        self.max_nesting = max_nesting
        self.file_settings = FileSettings()
        self.graphics_state = GraphicsState(warn=self.warn, file_settings=self.file_settings)
        self.apertures = {}
        self.macros = {}
        self.eof_found = False
        self.objects_emitted = False
        self.command = None

    def _statement(self, command):
        if self.source is None or command is None or command.offset is None:
            return command.code if command is not None else None
        return statement_prefix(self.source, char_position(self.source, command.offset))

    def _lineno(self, command):
        if self.source is None or command is None or command.offset is None:
            return None
        return line_number(self.source, command.offset)

    def warn(self, msg, kls=SyntaxWarning):
        warnings.warn(f'{self.filename or "<string>"}:{self._lineno(self.command) or "?"} '
                      f'"{self._statement(self.command)}": {msg}', kls)

    def execute(self, commands):
        """ Execute all commands in order. The last command must be an :py:class:`~.commands.EndOfFile`.

        :raises GerberError: on the first command that is not valid in the current state.
        """
        for command in commands:
            self.command = command
            try:
                if self.eof_found:
                    raise StructuralError('Statement after M02 end of file statement')

                getattr(self, f'_execute_{command.kind}')(command)

            except GerberError as e:
                if e.byte_offset is None:
                    e.byte_offset = command.offset
                if e.statement is None:
                    e.statement = self._statement(command)
                if e.filename is None:
                    e.filename = self.filename
                if e.lineno is None:
                    e.lineno = self._lineno(command)
                raise

        if not self.eof_found:
            e = StructuralError('Command stream ends without an M02 end of file statement')
            e.filename = self.filename
            raise e

        self.target.import_settings = self.file_settings
        self.target.file_attrs = self.graphics_state.file_attrs
        self.target.apertures = self.apertures
        self.target.macros = self.macros

    def _emit(self, obj):
        self.objects_emitted = True
        if self.graphics_state.frames:
            self.graphics_state.frames[-1].objects.append(obj)
        else:
            self.target.objects.append(obj)

    def _require_format(self):
        if not self.file_settings.has_format:
            raise StructuralError('Coordinate data before %FS format specification')

    def _require_drawing_state(self):
        if self.file_settings.unit is None:
            raise StructuralError('Graphical object before %MO unit statement')
        self._require_format()

    def _require_aperture(self):
        if self.graphics_state.aperture is None:
            raise UndefinedReferenceError('No aperture selected. Select an aperture with a Dnn statement first.')

    def _require_no_region(self, what):
        if self.graphics_state.region is not None:
            raise StructuralError(f'{what} is not allowed inside a G36/G37 region statement')

    def _check_nesting(self):
        if len(self.graphics_state.frames) >= self.max_nesting:
            raise StructuralError(f'Aperture blocks and step and repeat blocks are nested more than {self.max_nesting} '
                                  'levels deep')

    def _execute_comment(self, command):
        self.target.comments.append(command.text)

    def _execute_mode(self, command):
        if self.file_settings.unit is not None:
            raise RedefinitionError(f'Unit is already set to {self.file_settings.unit}. Units must not change within '
                                    'a file.')
        self.file_settings.unit = command.unit

    def _execute_format_specification(self, command):
        if self.file_settings.has_format:
            if self.objects_emitted:
                raise RedefinitionError('Coordinate format must not change after graphical objects have been created')
            self.warn('Re-definition of coordinate format')

        self.file_settings.x_format = (command.x_integer_digits, command.x_decimal_digits)
        self.file_settings.y_format = (command.y_integer_digits, command.y_decimal_digits)

    def _is_defined(self, number):
        return number in self.apertures or any(
                isinstance(frame, ApertureBlockFrame) and frame.number == number
                for frame in self.graphics_state.frames)

    def _execute_aperture_define(self, command):
        number = command.number
        if self._is_defined(number):
            raise RedefinitionError(f'Aperture {number} is already defined', identifier=number)

        gs = self.graphics_state
        kwargs = dict(unit=gs.unit, attrs=tuple(gs.aperture_attrs.items()), number=number)

        if command.is_macro:
            if (macro := self.macros.get(command.template)) is None:
                raise UndefinedReferenceError(f'Aperture {number} uses aperture macro {command.template}, which is not '
                                              'defined', identifier=command.template)

            if len(command.parameters) < macro.num_parameters:
                self.warn(f'Aperture macro {macro.name} uses {macro.num_parameters} parameters, but aperture {number} '
                          f'only gives {len(command.parameters)}.')
            aperture = apertures.ApertureMacroInstance(macro, command.parameters, **kwargs)

        else:
            kls = {
                'C': apertures.CircleAperture,
                'R': apertures.RectangleAperture,
                'O': apertures.ObroundAperture,
                'P': apertures.PolygonAperture,
                }[command.template]

            if kls is apertures.PolygonAperture:
                n_vertices = command.parameters[1]
                if not n_vertices.is_integer() or not 3 <= n_vertices <= 12:
                    self.warn(f'Polygon aperture {number} has {n_vertices:g} vertices, but it must have between 3 and '
                              '12.')
            aperture = kls(*command.parameters, **kwargs)

        self.apertures[number] = aperture

    def _execute_aperture_macro(self, command):
        if command.name in self.macros:
            raise RedefinitionError(f'Aperture macro {command.name} is already defined', identifier=command.name)
        self.macros[command.name] = command.macro

    def _execute_set_current_aperture(self, command):
        if (aperture := self.apertures.get(command.number)) is None:
            raise UndefinedReferenceError(f'Aperture {command.number} is not defined', identifier=command.number)
        self.graphics_state.aperture = aperture

    def _execute_plot(self, command):
        gs = self.graphics_state
        self._require_drawing_state()

        if gs.interpolation_mode == InterpMode.LINEAR:
            if command.i is not None or command.j is not None:
                raise StructuralError('I/J arc center offsets are not allowed in linear interpolation (G01) mode')

        elif not gs.arc_init:
            raise StructuralError('Circular interpolation without prior G75 statement')

        x, y = gs.map_coord(command.x, command.y)

        if gs.region is not None:
            gs.append_segment(x, y, command.i, command.j)

        else:
            self._require_aperture()
            if isinstance(gs.aperture, apertures.BlockAperture):
                raise StructuralError(f'Aperture block {gs.aperture.number} can only be flashed, not plotted',
                                      identifier=gs.aperture.number)
            self._emit(gs.interpolate(x, y, command.i, command.j))

        gs.point = x, y

    def _execute_move(self, command):
        gs = self.graphics_state
        self._require_format()
        x, y = gs.map_coord(command.x, command.y)

        if gs.region is not None:
            gs.end_contour()

        gs.point = x, y

    def _execute_flash(self, command):
        gs = self.graphics_state
        self._require_no_region('Flash (D03)')
        self._require_drawing_state()
        self._require_aperture()
        x, y = gs.map_coord(command.x, command.y)
        self._emit(gs.flash(x, y))
        gs.point = x, y

    def _execute_set_linear(self, command):
        self.graphics_state.interpolation_mode = InterpMode.LINEAR

    def _execute_set_cw_circular(self, command):
        self.graphics_state.interpolation_mode = InterpMode.CIRCULAR_CW

    def _execute_set_ccw_circular(self, command):
        self.graphics_state.interpolation_mode = InterpMode.CIRCULAR_CCW

    def _execute_arc_init(self, command):
        self.graphics_state.arc_init = True

    def _execute_load_polarity(self, command):
        self.graphics_state.polarity_dark = command.dark

    def _execute_load_mirroring(self, command):
        self.graphics_state.set_mirroring(command.mirroring)

    def _execute_load_rotation(self, command):
        self.graphics_state.set_rotation(command.rotation)

    def _execute_load_scaling(self, command):
        if command.scaling <= 0:
            self.warn(f'Scale factor must be positive, not {command.scaling:g}')
        self.graphics_state.set_scaling(command.scaling)

    def _execute_start_region(self, command):
        self._require_no_region('Region start (G36)')
        self.graphics_state.region = go.Region()

    def _execute_end_region(self, command):
        gs = self.graphics_state
        if gs.region is None:
            raise StructuralError('Region end (G37) without region start (G36)')

        if (region := gs.finish_region()) is not None:
            self._emit(region)

    def _execute_aperture_block(self, command):
        gs = self.graphics_state
        self._require_no_region('Aperture block (AB)')

        if command.is_open:
            self._check_nesting()
            if self._is_defined(command.number):
                raise RedefinitionError(f'Aperture {command.number} is already defined', identifier=command.number)
            gs.frames.append(ApertureBlockFrame(command.number, tuple(gs.aperture_attrs.items())))

        else:
            if not gs.frames or not isinstance(gs.frames[-1], ApertureBlockFrame):
                what = f'inside {gs.frames[-1]}' if gs.frames else 'without open aperture block'
                raise StructuralError(f'Aperture block end (%AB*%) {what}')

            frame = gs.frames.pop()
            self.apertures[frame.number] = apertures.BlockAperture(
                    tuple(frame.objects), unit=gs.unit, attrs=frame.attrs, number=frame.number)

    def _execute_step_and_repeat(self, command):
        gs = self.graphics_state
        self._require_no_region('Step and repeat (SR)')

        if command.is_open:
            self._check_nesting()
            if any(isinstance(frame, StepRepeatFrame) for frame in gs.frames):
                raise StructuralError('Step and repeat blocks must not be nested')
            gs.frames.append(StepRepeatFrame(command.x_repeats, command.y_repeats, command.x_step, command.y_step))

        else:
            if not gs.frames or not isinstance(gs.frames[-1], StepRepeatFrame):
                what = f'inside {gs.frames[-1]}' if gs.frames else 'without open step and repeat block'
                raise StructuralError(f'Step and repeat end (%SR*%) {what}')

            frame = gs.frames.pop()
            for i in range(frame.x_repeats):
                for j in range(frame.y_repeats):
                    for obj in frame.objects:
                        self._emit(obj.translated(i*frame.x_step, j*frame.y_step))

    def _set_attribute(self, command, attrs):
        if command.name.kind == NameKind.UNKNOWN_STANDARD:
            if self.unknown_attributes == 'raise':
                raise UndefinedReferenceError(f'Unknown standard attribute {command.name}', identifier=str(command.name))
            elif self.unknown_attributes == 'warn':
                self.warn(f'Unknown standard attribute {command.name}', UnknownAttributeWarning)

        attrs[str(command.name)] = command.values

    def _execute_attribute_on_file(self, command):
        self._set_attribute(command, self.graphics_state.file_attrs)

    def _execute_attribute_on_aperture(self, command):
        self._set_attribute(command, self.graphics_state.aperture_attrs)

    def _execute_attribute_on_object(self, command):
        self._set_attribute(command, self.graphics_state.object_attrs)

    def _execute_attribute_delete(self, command):
        gs = self.graphics_state
        if command.name is None:
            gs.object_attrs.clear()
            gs.aperture_attrs.clear()
            return

        name = str(command.name)
        found = False
        for attrs in (gs.object_attrs, gs.aperture_attrs):
            if name in attrs:
                del attrs[name]
                found = True

        if not found:
            if name in gs.file_attrs:
                raise StructuralError(f'File attribute {name} cannot be deleted', identifier=name)
            self.warn(f'Deleting attribute {name}, which is not defined')

    def _execute_end_of_file(self, command):
        gs = self.graphics_state
        if gs.region is not None:
            raise StructuralError('File ends inside a G36/G37 region statement')

        if gs.frames:
            raise StructuralError(f'File ends inside open {gs.frames[-1]}')

        self.eof_found = True

