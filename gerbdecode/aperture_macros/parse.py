#!/usr/bin/env python
# -*- coding: utf-8 -*-

# Copyright 2021 Jan Sebastian Götte <gerbonara@jaseg.de>

from dataclasses import dataclass, field
import operator
import re

from . import primitive as ap
from .expression import ConstantExpression, ParameterExpression, NegatedExpression, OperatorExpression
from ..utils import LexicalError, StructuralError, EvaluationError


#: Maximum nesting depth of parentheses and unary signs in a macro expression, and maximum depth of the parsed
#: expression tree.
MAX_EXPRESSION_DEPTH = 64

_token_re = re.compile(r'\$(?P<var>[0-9]+)|(?P<num>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)|(?P<op>[-+xX/()])')
_variable_definition_re = re.compile(r'\$([0-9]+)=(.*)', re.DOTALL)
_operators = {'+': operator.add, '-': operator.sub, 'x': operator.mul, 'X': operator.mul, '/': operator.truediv}


class _ExpressionParser:
    """ Recursive descent parser for macro arithmetic. ``x`` and ``/`` bind tighter than ``+`` and ``-``, all binary
    operators are left-associative, and unary signs bind tightest.

    Parentheses and unary signs may nest at most :py:data:`MAX_EXPRESSION_DEPTH` levels deep, and the resulting
    expression tree may be at most that deep as well. Deeper expressions raise :py:class:`.StructuralError`. """

    def __init__(self, text):
        self.text = text
        self.tokens = []
        pos = 0
        while pos < len(text):
            if not (match := _token_re.match(text, pos)):
                raise LexicalError(f'Invalid character {text[pos]!r} in aperture macro expression {text!r}')
            self.tokens.append(match)
            pos = match.end()
        self.index = 0
        self.nesting = 0

    def peek(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]['op']

    def take(self):
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _check_depth(self, depth):
        if depth > MAX_EXPRESSION_DEPTH:
            raise StructuralError(f'Aperture macro expression is nested more than {MAX_EXPRESSION_DEPTH} levels deep')
        return depth

    def parse(self):
        if not self.tokens:
            raise LexicalError('Empty aperture macro expression')

        expr, _depth = self.expression()
        if self.index != len(self.tokens):
            raise LexicalError(f'Unexpected {self.tokens[self.index][0]!r} in aperture macro expression {self.text!r}')
        return expr

    # The methods below return (expression, tree depth) tuples.
    def expression(self):
        expr, depth = self.term()
        while self.peek() in ('+', '-'):
            op = _operators[self.take()['op']]
            r, r_depth = self.term()
            expr, depth = OperatorExpression(op, expr, r), self._check_depth(max(depth, r_depth) + 1)
        return expr, depth

    def term(self):
        expr, depth = self.factor()
        while self.peek() in ('x', 'X', '/'):
            op = _operators[self.take()['op']]
            r, r_depth = self.factor()
            expr, depth = OperatorExpression(op, expr, r), self._check_depth(max(depth, r_depth) + 1)
        return expr, depth

    def factor(self):
        if self.index >= len(self.tokens):
            raise LexicalError(f'Aperture macro expression {self.text!r} ends unexpectedly')

        token = self.take()
        if token['op'] in ('+', '-', '('):
            self.nesting = self._check_depth(self.nesting + 1)
            try:
                return self._nested(token['op'])
            finally:
                self.nesting -= 1

        elif token['var'] is not None:
            if (number := int(token['var'])) < 1:
                raise LexicalError(f'Invalid aperture macro variable ${number}, numbering starts at $1')
            return ParameterExpression(number), 0

        elif token['num'] is not None:
            return ConstantExpression(float(token['num'])), 0

        else:
            raise LexicalError(f'Unexpected {token[0]!r} in aperture macro expression {self.text!r}')

    def _nested(self, op):
        if op == '+':
            return self.factor()

        elif op == '-':
            expr, depth = self.factor()
            return NegatedExpression(expr), self._check_depth(depth + 1)

        expr, depth = self.expression()
        if self.index >= len(self.tokens) or self.take()['op'] != ')':
            raise LexicalError(f'Unbalanced parentheses in aperture macro expression {self.text!r}')
        return expr, depth


def parse_expression(text):
    """ Parse a macro arithmetic expression such as ``$1x0.5+(2-$2)`` into an expression tree. """
    return _ExpressionParser(re.sub(r'\s', '', text)).parse()


@dataclass(frozen=True, slots=True)
class VariableDefinition:
    """ ``$n=expression`` statement. Assigns variable ``n`` for all statements after it. """
    number: int
    expression: object

    def to_gerber(self):
        return f'${self.number}={self.expression.to_gerber()}'

    def parameters(self):
        return self.expression.parameters()


@dataclass(frozen=True, slots=True)
class ApertureMacro:
    """ Aperture macro template as defined by an ``%AM`` statement. :py:attr:`statements` holds the primitives and
    variable definitions in file order. Comments are kept separately, since they do not take part in evaluation. """
    name: str
    statements: tuple = ()
    comments: tuple = field(default=(), hash=False, compare=False)

    @classmethod
    def parse_macro(kls, macro_name, body):
        comments = []
        statements = []

        *blocks, tail = body.split('*')
        if tail.strip():
            raise LexicalError(f'Aperture macro {macro_name} statement {tail.strip()!r} is not terminated by "*"',
                               identifier=macro_name)

        for block in blocks:
            if not (block := block.strip()): # empty block
                continue

            if block == '0' or re.match(r'0\s', block): # comment
                comments.append(block[2:])
                continue

            block = re.sub(r'\s', '', block)
            try:
                statements.append(kls._parse_statement(block))
            except (LexicalError, StructuralError) as e:
                raise type(e)(f'Aperture macro {macro_name} statement {len(statements)} ({block!r}): {e.msg}',
                              identifier=macro_name) from e

        return kls(macro_name, tuple(statements), tuple(comments))

    @staticmethod
    def _parse_statement(block):
        if block.startswith('$'): # variable definition
            if not (match := _variable_definition_re.fullmatch(block)):
                raise LexicalError('Invalid variable definition, expected "$n=expression"')

            number = int(match[1])
            if number < 1:
                raise LexicalError(f'Invalid aperture macro variable ${number}, numbering starts at $1')
            return VariableDefinition(number, parse_expression(match[2]))

        else: # primitive
            code, *args = block.split(',')
            if not re.fullmatch(r'[0-9]+', code) or int(code) not in ap.PRIMITIVE_CLASSES:
                raise LexicalError(f'Unknown primitive code {code!r}')

            return ap.PRIMITIVE_CLASSES[int(code)].from_arglist([parse_expression(arg) for arg in args])

    @property
    def primitives(self):
        return tuple(stmt for stmt in self.statements if not isinstance(stmt, VariableDefinition))

    @property
    def num_parameters(self):
        """ Number of parameters this macro needs, i.e. the highest-numbered variable that is read before any
        statement of the macro assigns it. """
        assigned = set()
        needed = 0
        for stmt in self.statements:
            for param in stmt.parameters():
                if param.number not in assigned:
                    needed = max(needed, param.number)

            if isinstance(stmt, VariableDefinition):
                assigned.add(stmt.number)
        return needed

    def evaluate(self, parameters):
        """ Evaluate this macro for the given parameter values, which are bound to ``$1`` to ``$n`` in order.

        :param parameters: Sequence of parameter values from the aperture definition
        :returns: list of :py:class:`.ShapeInstance`, one for each primitive in file order
        :raises EvaluationError: on division by zero, or when a statement reads a variable that is not bound. The
                                 error's ``statement_index`` is the index of the failing statement.
        """
        variables = {number: float(value) for number, value in enumerate(parameters, start=1)}
        shapes = []

        for index, stmt in enumerate(self.statements):
            try:
                if isinstance(stmt, VariableDefinition):
                    variables[stmt.number] = stmt.expression.calculate(variables)
                else:
                    shapes.append(stmt.evaluate(variables))

            except EvaluationError as e:
                raise type(e)(f'Aperture macro {self.name} statement {index} ({stmt.to_gerber()}): {e.msg}',
                              statement_index=index, identifier=e.identifier or self.name) from e

        return shapes

    def to_gerber(self):
        """ Serialize this macro's content (without the name) into Gerber """
        comments = [ f'0 {c}' for c in self.comments ]
        return '*\n'.join(comments + [ stmt.to_gerber() for stmt in self.statements ]) + '*'

    def __str__(self):
        return f'<Aperture macro {self.name}, {len(self.primitives)} primitives>'

    def __repr__(self):
        return str(self)

