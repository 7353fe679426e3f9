"""Expression resolution - literals and Jinja-evaluated leaf values."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from jinja2 import ChainableUndefined, Environment, TemplateError
from jinja2.environment import TemplateExpression

from jinxml.engine.escape import escape_xml
from jinxml.engine.extensions import BinaryOperatorExtension
from jinxml.exceptions import ContextShapeError, ExpressionError

log = logging.getLogger(__name__)

LITERAL_PREFIX = "value("
LITERAL_SUFFIX = ")"


def is_literal(expr: str) -> bool:
    """Check for the `value(...)` literal wrapper."""
    return (
        len(expr) >= len(LITERAL_PREFIX) + len(LITERAL_SUFFIX)
        and expr.startswith(LITERAL_PREFIX)
        and expr.endswith(LITERAL_SUFFIX)
    )


def to_text(value: Any) -> Optional[str]:
    """Stringify a resolved value for output.

    Returns None for undefined values so callers can apply their
    undefined policy. Booleans use the XML Schema spelling and integral
    floats drop their fraction, so `age / 2` renders `15`, not `15.0`.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class JinxmlEnvironment(Environment):
    """Jinja environment where `a.b` on a mapping reads the key first.

    Plain Jinja tries the Python attribute first, which turns a record field
    named `items` or `keys` into the dict method of that name.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except LookupError:
                pass
        return super().getattr(obj, attribute)


def get_jinxml_jinja_env() -> Environment:
    """Create a Jinja2 Environment configured for expression evaluation.

    Returns:
        Environment with chainable undefined values, key-first attribute
        access and the binary operator extension installed.
    """
    return JinxmlEnvironment(
        extensions=[BinaryOperatorExtension],
        undefined=ChainableUndefined,
        autoescape=False,
    )


class _CallableFailure(Exception):
    """Carries an exception raised inside a user callable past the wrapping."""

    def __init__(self, original: BaseException):
        super().__init__(str(original))
        self.original = original


def _propagating(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Mark TypeError/ArithmeticError raised by `fn` as the caller's own."""
    if not callable(fn):
        return fn

    @functools.wraps(fn, updated=())
    def call(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except (TypeError, ArithmeticError) as exc:
            raise _CallableFailure(exc) from exc

    pass_arg = getattr(fn, "jinja_pass_arg", None)
    if pass_arg is not None:
        call.jinja_pass_arg = pass_arg  # type: ignore[attr-defined]
    return call


class ExpressionEvaluator:
    """Evaluates template leaf expressions against a context.

    Each evaluator owns its Jinja environment, so custom functions,
    transforms and operators registered on one converter never leak into
    another.
    """

    def __init__(
        self,
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
        transforms: Optional[Mapping[str, Callable[..., Any]]] = None,
        binary_operators: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize the evaluator and register custom callables.

        Args:
            functions: Callables exposed as expression globals, e.g.
                `concat(first_name, " ", last_name)`.
            transforms: Callables exposed as pipeline filters, e.g. `age|double`.
            binary_operators: Operator name to an object (or mapping) with
                `precedence` and `fn`.
        """
        self.environment = get_jinxml_jinja_env()
        self._compiled: Dict[str, TemplateExpression] = {}

        for name, fn in (functions or {}).items():
            self.add_function(name, fn)
        for name, fn in (transforms or {}).items():
            self.add_transform(name, fn)
        for name, op in (binary_operators or {}).items():
            if isinstance(op, Mapping):
                self.add_binary_operator(name, op["precedence"], op["fn"])
            else:
                self.add_binary_operator(name, op.precedence, op.fn)

    def add_function(self, name: str, fn: Callable[..., Any]) -> None:
        self.environment.globals[name] = _propagating(fn)
        self._compiled.clear()

    def add_transform(self, name: str, fn: Callable[..., Any]) -> None:
        self.environment.filters[name] = _propagating(fn)
        self._compiled.clear()

    def add_binary_operator(
        self, name: str, precedence: int, fn: Callable[[Any, Any], Any]
    ) -> None:
        extension = self.environment.extensions[BinaryOperatorExtension.identifier]
        extension.register(  # type: ignore[attr-defined]
            name, precedence, _propagating(fn)
        )
        self._compiled.clear()

    def compile(self, expr: str) -> TemplateExpression:
        """Compile an expression once and memoise it."""
        compiled = self._compiled.get(expr)
        if compiled is None:
            try:
                compiled = self.environment.compile_expression(expr)
            except TemplateError as exc:
                raise ExpressionError(expr, str(exc)) from exc
            self._compiled[expr] = compiled
        return compiled

    def evaluate(self, expr: str, context: Mapping[str, Any]) -> Any:
        """Evaluate an expression; undefined results come back as None."""
        if not isinstance(context, Mapping):
            raise ContextShapeError(
                f"Context must be a mapping, got {type(context).__name__}"
            )

        compiled = self.compile(expr)
        try:
            return compiled(context)
        except _CallableFailure as exc:
            # errors raised by registered callables are the caller's own
            raise exc.original from None
        except (TemplateError, TypeError, ArithmeticError) as exc:
            raise ExpressionError(expr, str(exc)) from exc

    def resolve(self, expr: Any, context: Mapping[str, Any]) -> Any:
        """Resolve a leaf value.

        `value(...)` literals are escaped and never evaluated. Other strings
        are evaluated and returned as-is, without escaping. Non-string YAML
        scalars are constants.
        """
        if not isinstance(expr, str):
            return expr
        if is_literal(expr):
            return escape_xml(expr[len(LITERAL_PREFIX) : -len(LITERAL_SUFFIX)])
        return self.evaluate(expr, context)
