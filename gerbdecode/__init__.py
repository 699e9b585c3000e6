#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2022 Jan Sebastian Götte <code@jaseg.de>
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
gerbdecode
==========

gerbdecode decodes single Gerber (RS-274X) layers. It splits a file into typed commands, evaluates aperture macros, and
runs the Gerber graphics state machine to turn the commands into a flat list of flashes, lines, arcs, regions and
aperture block instances.
"""

from .decoder import GerberDecoder, decode
from .rs274x import GerberLayer, GerberInterpreter
from .settings import FileSettings
from .utils import MM, Inch
from .utils import GerberError, LexicalError, StructuralError, UndefinedReferenceError, RedefinitionError
from .utils import EvaluationError, UnboundVariableError, UnknownAttributeWarning

__version__ = '0.9.0'
