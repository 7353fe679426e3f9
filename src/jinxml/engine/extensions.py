"""Jinja2 extensions for jinxml expression evaluation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from jinja2.ext import Extension
from jinja2.lexer import Token, TokenStream

log = logging.getLogger(__name__)

# Global name a custom operator is rewritten to: `a add b` -> `_binop_add(a, b)`
OPERATOR_GLOBAL_PREFIX = "_binop_"

# Precedence of Jinja's own binary operators, on the same scale custom
# operators are registered with. Higher binds tighter.
BUILTIN_PRECEDENCE: Dict[str, int] = {
    "or": 10,
    "and": 15,
    "in": 20,
    "eq": 20,
    "ne": 20,
    "gt": 20,
    "gteq": 20,
    "lt": 20,
    "lteq": 20,
    "tilde": 25,
    "add": 30,
    "sub": 30,
    "mul": 40,
    "div": 40,
    "floordiv": 40,
    "mod": 40,
    "pow": 50,
}

KEYWORD_OPERATORS = {"and", "or", "in"}
KEYWORDS = {"and", "or", "not", "in", "is", "if", "else"}
RESERVED_NAMES = KEYWORDS | {"true", "false", "none", "True", "False", "None"}

BRACKETS = {"lparen": "rparen", "lbracket": "rbracket", "lbrace": "rbrace"}
SEPARATOR_TYPES = {"comma", "colon", "assign"}
SEPARATOR_NAMES = {"if", "else"}
OPERAND_TYPES = {"integer", "float", "string"}


@dataclass
class BinaryOperatorSpec:
    """A registered custom infix operator."""

    name: str
    precedence: int
    fn: Callable[[Any, Any], Any]

    @property
    def global_name(self) -> str:
        return f"{OPERATOR_GLOBAL_PREFIX}{self.name}"


@dataclass
class _Group:
    """A bracketed token run, kept atomic while splitting the outer level."""

    open: Token
    items: List["_Item"] = field(default_factory=list)
    close: Optional[Token] = None


_Item = Union[Token, _Group]


def _is_boundary(token: Token) -> bool:
    # Template data and delimiters are never part of an expression
    return token.type in ("data", "comment", "linecomment") or token.type.endswith(
        ("_begin", "_end")
    )


class BinaryOperatorExtension(Extension):
    """Extension adding user-defined infix operators to Jinja expressions.

    Jinja's grammar is fixed, so operators are added by rewriting the token
    stream before parsing. An operator registered as `add` with precedence
    10 turns `age add 10 * 2` into `_binop_add(age, 10 * 2)`; the operator
    function itself is installed as the matching environment global.

    Operators are left-associative. Where a custom operator meets a Jinja
    operator, `BUILTIN_PRECEDENCE` decides which one binds tighter.

    Example:
        env = Environment(extensions=[BinaryOperatorExtension])
        ext = env.extensions[BinaryOperatorExtension.identifier]
        ext.register("add", 10, lambda left, right: left + right)
        env.compile_expression("age add 10")(age=30)  # 40
    """

    def __init__(self, environment):
        super().__init__(environment)
        environment.extend(binary_operators={})

    @property
    def operators(self) -> Dict[str, BinaryOperatorSpec]:
        return self.environment.binary_operators  # type: ignore[attr-defined]

    def register(
        self, name: str, precedence: int, fn: Callable[[Any, Any], Any]
    ) -> BinaryOperatorSpec:
        """Register an infix operator.

        Args:
            name: Operator word, e.g. "add". Must be an identifier that is not
                a Jinja keyword.
            precedence: Binding strength on the `BUILTIN_PRECEDENCE` scale.
            fn: Called with the left and right operand values.

        Returns:
            The registered operator spec.
        """
        if not name.isidentifier() or name in RESERVED_NAMES:
            raise ValueError(f"Invalid binary operator name: {name!r}")
        if not callable(fn):
            raise ValueError(f"Binary operator {name!r} needs a callable")

        spec = BinaryOperatorSpec(name=name, precedence=precedence, fn=fn)
        self.operators[name] = spec
        self.environment.globals[spec.global_name] = fn
        log.debug("Registered binary operator %r (precedence %d)", name, precedence)
        return spec

    def filter_stream(self, stream: TokenStream) -> Iterable[Token]:
        if not self.operators:
            yield from stream
            return

        pending: List[Token] = []
        for token in stream:
            if _is_boundary(token):
                yield from self._rewrite_tokens(pending)
                pending = []
                yield token
            else:
                pending.append(token)
        yield from self._rewrite_tokens(pending)

    def _rewrite_tokens(self, tokens: List[Token]) -> Iterator[Token]:
        if not tokens:
            return iter(())
        items, _ = self._group(tokens, 0, None)
        return iter(self._rewrite_items(items))

    def _group(
        self, tokens: List[Token], pos: int, closer: Optional[str]
    ) -> tuple[List[_Item], int]:
        """Nest bracketed runs so the outer level can be split safely.

        Unbalanced brackets are left as they are; Jinja's parser reports them.
        """
        items: List[_Item] = []
        while pos < len(tokens):
            token = tokens[pos]
            if closer is not None and token.type == closer:
                return items, pos
            if token.type in BRACKETS:
                inner, end = self._group(tokens, pos + 1, BRACKETS[token.type])
                close = tokens[end] if end < len(tokens) else None
                items.append(_Group(open=token, items=inner, close=close))
                pos = end + 1
            else:
                items.append(token)
                pos += 1
        return items, pos

    def _rewrite_items(self, items: List[_Item]) -> List[Token]:
        """Rewrite each separator-delimited operation independently."""
        out: List[Token] = []
        current: List[_Item] = []
        for item in items:
            if isinstance(item, Token) and (
                item.type in SEPARATOR_TYPES
                or (item.type == "name" and item.value in SEPARATOR_NAMES)
            ):
                out.extend(self._rewrite_operation(current))
                out.append(item)
                current = []
            else:
                current.append(item)
        out.extend(self._rewrite_operation(current))
        return out

    def _rewrite_operation(self, items: List[_Item]) -> List[Token]:
        split_at: Optional[int] = None
        lowest: Optional[int] = None
        has_custom = False

        for index, item in enumerate(items):
            precedence = self._precedence(items, index)
            if precedence is None:
                continue
            if self._is_custom(items, index):
                has_custom = True
            # `<=` keeps the rightmost split, which makes operators left-associative
            if lowest is None or precedence <= lowest:
                split_at, lowest = index, precedence

        if split_at is None or not has_custom:
            return self._flatten(items)

        left = self._rewrite_operation(items[:split_at])
        right = self._rewrite_operation(items[split_at + 1 :])
        operator = items[split_at]
        assert isinstance(operator, Token)

        if not self._is_custom(items, split_at):
            return [*left, operator, *right]

        lineno = operator.lineno
        return [
            Token(lineno, "name", self.operators[operator.value].global_name),
            Token(lineno, "lparen", "("),
            *left,
            Token(lineno, "comma", ","),
            *right,
            Token(lineno, "rparen", ")"),
        ]

    def _is_custom(self, items: List[_Item], index: int) -> bool:
        item = items[index]
        return (
            isinstance(item, Token)
            and item.type == "name"
            and item.value in self.operators
            and index > 0
            and self._ends_operand(items, index - 1)
        )

    def _ends_operand(self, items: List[_Item], index: int) -> bool:
        """Whether the item at `index` closes an operand.

        A registered operator word in operator position does not, so the
        sign in `a op -1` stays unary.
        """
        item = items[index]
        if isinstance(item, _Group):
            return True
        if item.type == "name":
            return item.value not in KEYWORDS and not self._is_custom(items, index)
        return item.type in OPERAND_TYPES

    def _precedence(self, items: List[_Item], index: int) -> Optional[int]:
        """Precedence of the binary operator at `index`, or None for operands."""
        item = items[index]
        if isinstance(item, _Group):
            return None

        if self._is_custom(items, index):
            return self.operators[item.value].precedence

        if item.type == "name":
            if item.value in KEYWORD_OPERATORS and index > 0:
                return BUILTIN_PRECEDENCE[item.value]
            return None

        if item.type in ("add", "sub"):
            # unary plus/minus
            if index == 0 or not self._ends_operand(items, index - 1):
                return None

        return BUILTIN_PRECEDENCE.get(item.type)

    def _flatten(self, items: List[_Item]) -> List[Token]:
        out: List[Token] = []
        for item in items:
            if isinstance(item, _Group):
                out.append(item.open)
                out.extend(self._rewrite_items(item.items))
                if item.close is not None:
                    out.append(item.close)
            else:
                out.append(item)
        return out
