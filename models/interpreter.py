"""Command-expression interpreter.

Terminal input is a small expression language: command calls with
literal or variable arguments (``cat("notes.txt")``), ``const``/``let``
declarations, reassignment of ``let`` variables, ``await`` on promises,
string/number concatenation and ``;``-separated statements.

Parsing is delegated to the ``ast`` module; only a whitelist of node
types is evaluated, so nothing outside the command table is reachable.
"""

import ast
import io
import logging
import operator
import re
import tokenize
from typing import TYPE_CHECKING, Any, Callable, NamedTuple, Optional

from models.exceptions import CommandValidationError
from utils.stringify import stringify

if TYPE_CHECKING:
    from commands.base import Command

logger = logging.getLogger(__name__)

IDENTIFIER = r"[A-Za-z_$][A-Za-z0-9_$]*"
CONST_DECLARATION = re.compile(rf"^const\s+({IDENTIFIER})\s*=(?!=)\s*(.+)$", re.DOTALL)
LET_DECLARATION = re.compile(rf"^let\s+({IDENTIFIER})\s*=(?!=)\s*(.+)$", re.DOTALL)
REASSIGNMENT = re.compile(rf"^({IDENTIFIER})\s*=(?!=)\s*(.+)$", re.DOTALL)

LITERAL_NAMES = {"true": True, "false": False, "null": None, "undefined": None}

COMPILE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT

_ARITHMETIC = {
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}


class Variable(NamedTuple):
    value: Any
    is_const: bool


class Evaluation(NamedTuple):
    """Outcome of one input line.

    Args:
        value: Value of the last statement.
        assigned: True when the last statement was a declaration or
            reassignment; its value is displayed but never run.
    """

    value: Any
    assigned: bool = False


def split_statements(line: str) -> list[str]:
    """Split a line on top-level ``;`` while respecting string literals."""
    statements: list[str] = []
    start = 0
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(line).readline))
    except (tokenize.TokenError, SyntaxError, IndentationError):
        return [line.strip()] if line.strip() else []

    for token in tokens:
        if token.type == tokenize.OP and token.string == ";" and token.start[0] == 1:
            statements.append(line[start : token.start[1]])
            start = token.end[1]
    statements.append(line[start:])
    return [statement.strip() for statement in statements if statement.strip()]


def is_comment(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("//") or stripped.startswith("#")


class Interpreter:
    """Evaluates input lines against a command table and a variable scope.

    Args:
        awaiter: Called for ``await expr``; receives the evaluated operand
            and returns the settled value.
    """

    def __init__(self, awaiter: Optional[Callable[[Any], Any]] = None):
        self.variables: dict[str, Variable] = {}
        self._awaiter = awaiter or (lambda value: value)

    def reset(self) -> None:
        self.variables = {}

    def get_variables(self) -> dict[str, Any]:
        return {name: variable.value for name, variable in self.variables.items()}

    # ===== Statements =====

    def execute(self, line: str, commands: dict[str, "Command"]) -> Evaluation:
        """Evaluate every statement of a line.

        Args:
            line: Raw input text.
            commands: Command table visible to the line.

        Returns:
            Evaluation of the last statement (None for an empty line).

        Raises:
            ShellError: On syntax errors, unknown names, const violations
                or errors raised by a command.
        """
        result = Evaluation(None)
        for statement in split_statements(line):
            result = self._execute_statement(statement, commands)
        return result

    def _execute_statement(self, statement: str, commands: dict[str, "Command"]) -> Evaluation:
        for pattern, is_const in ((CONST_DECLARATION, True), (LET_DECLARATION, False)):
            match = pattern.match(statement)
            if match:
                name, expression = match.group(1), match.group(2)
                if name in self.variables:
                    raise CommandValidationError(f"Identifier '{name}' has already been declared")
                value = self.evaluate(expression, commands)
                self.variables[name] = Variable(value, is_const)
                logger.debug(f"Declared {'const' if is_const else 'let'} {name}")
                return Evaluation(value, assigned=True)

        match = REASSIGNMENT.match(statement)
        if match and match.group(1) in self.variables:
            name, expression = match.group(1), match.group(2)
            if self.variables[name].is_const:
                raise CommandValidationError(f"Assignment to constant variable '{name}'")
            value = self.evaluate(expression, commands)
            self.variables[name] = Variable(value, False)
            return Evaluation(value, assigned=True)

        return Evaluation(self.evaluate(statement, commands))

    def run_script(self, source: str, commands: dict[str, "Command"]) -> Any:
        """Run a multi-line script in this interpreter's scope.

        Blank lines and ``//`` or ``#`` comment lines are skipped.

        Returns:
            Value of the last line when it is a plain expression, else None.
        """
        result = Evaluation(None)
        for line in source.splitlines():
            if not line.strip() or is_comment(line):
                continue
            result = self.execute(line, commands)
        return None if result.assigned else result.value

    # ===== Expressions =====

    def evaluate(self, expression: str, commands: dict[str, "Command"]) -> Any:
        """Evaluate a single expression.

        Raises:
            CommandValidationError: If the expression does not parse or
                uses an unsupported construct.
        """
        try:
            tree = compile(expression, "<input>", "eval", flags=COMPILE_FLAGS)
        except SyntaxError as e:
            raise CommandValidationError(f"SyntaxError: {e.msg}") from e
        return self._eval(tree.body, commands)

    def _eval(self, node: ast.AST, commands: dict[str, "Command"]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value

        if isinstance(node, ast.Name):
            return self._lookup(node.id, commands)

        if isinstance(node, ast.Call):
            return self._call(node, commands)

        if isinstance(node, (ast.List, ast.Tuple)):
            return [self._eval(element, commands) for element in node.elts]

        if isinstance(node, ast.Dict):
            return {
                self._eval(key, commands): self._eval(value, commands)
                for key, value in zip(node.keys, node.values)
                if key is not None
            }

        if isinstance(node, ast.UnaryOp):
            operand = self._eval(node.operand, commands)
            if isinstance(node.op, ast.USub):
                return -operand
            if isinstance(node.op, ast.UAdd):
                return +operand
            if isinstance(node.op, ast.Not):
                return not operand

        if isinstance(node, ast.BinOp):
            left = self._eval(node.left, commands)
            right = self._eval(node.right, commands)
            if isinstance(node.op, ast.Add):
                return self._add(left, right)
            if type(node.op) in _ARITHMETIC:
                try:
                    return _ARITHMETIC[type(node.op)](left, right)
                except (TypeError, ZeroDivisionError) as e:
                    raise CommandValidationError(f"TypeError: {e}") from e

        if isinstance(node, ast.Subscript):
            target = self._eval(node.value, commands)
            index = self._eval(node.slice, commands)
            try:
                return target[index]
            except (IndexError, KeyError, TypeError):
                return None

        if isinstance(node, ast.Await):
            return self._awaiter(self._eval(node.value, commands))

        raise CommandValidationError(f"Unsupported expression: {ast.unparse(node)}")

    def _lookup(self, name: str, commands: dict[str, "Command"]) -> Any:
        if name in self.variables:
            return self.variables[name].value
        if name in commands:
            return commands[name]
        if name in LITERAL_NAMES:
            return LITERAL_NAMES[name]
        raise CommandValidationError(f"ReferenceError: {name} is not defined")

    def _call(self, node: ast.Call, commands: dict[str, "Command"]) -> Any:
        if not isinstance(node.func, ast.Name):
            raise CommandValidationError(f"Unsupported call: {ast.unparse(node.func)}")
        if node.keywords:
            raise CommandValidationError("Keyword arguments are not supported")

        target = self._lookup(node.func.id, commands)
        if not callable(target):
            raise CommandValidationError(f"TypeError: {node.func.id} is not a function")

        args = [self._eval(arg, commands) for arg in node.args]
        return target(*args)

    @staticmethod
    def _add(left: Any, right: Any) -> Any:
        if isinstance(left, str) or isinstance(right, str):
            return stringify(left) + stringify(right)
        try:
            return left + right
        except TypeError as e:
            raise CommandValidationError(f"TypeError: {e}") from e


__all__ = ["Evaluation", "Interpreter", "split_statements"]
