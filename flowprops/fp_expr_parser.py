#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from fp_ast import (
    Expr, Identifier, StringLit, NumberLit, BoolLit, NullLit, MemberExpr, CallExpr, BinaryExpr, LogicalExpr,
    UnaryExpr,
)


# ==========================
# Predicate expressions
# ==========================
#
# Just enough JavaScript expression syntax to materialize a user-supplied
# dead code predicate such as `process.env.NODE_ENV === 'production'`.


class TokenKind(Enum):
    EOF = auto()
    IDENT = auto()
    STRING = auto()
    NUMBER = auto()
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    COMMA = auto()  # ,
    DOT = auto()  # .
    BANG = auto()  # !
    ANDAND = auto()  # &&
    OROR = auto()  # ||
    EQ = auto()  # == / ===
    NE = auto()  # != / !==
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=


@dataclass
class Token:
    kind: TokenKind
    text: str
    column: int


class PredicateSyntaxError(ValueError):
    def __init__(self, message: str, column: int):
        super().__init__(f"{message} at column {column}")
        self.message = message
        self.column = column


_PUNCT = [
    ("===", TokenKind.EQ), ("!==", TokenKind.NE), ("==", TokenKind.EQ), ("!=", TokenKind.NE),
    ("&&", TokenKind.ANDAND), ("||", TokenKind.OROR), ("<=", TokenKind.LE), (">=", TokenKind.GE),
    ("(", TokenKind.LPAREN), (")", TokenKind.RPAREN), ("[", TokenKind.LBRACKET), ("]", TokenKind.RBRACKET),
    (",", TokenKind.COMMA), (".", TokenKind.DOT), ("!", TokenKind.BANG), ("<", TokenKind.LT), (">", TokenKind.GT),
]


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        col = i + 1
        if ch.isalpha() or ch in "_$":
            start = i
            while i < n and (text[i].isalnum() or text[i] in "_$"):
                i += 1
            tokens.append(Token(TokenKind.IDENT, text[start:i], col))
            continue
        if ch.isdigit():
            start = i
            while i < n and (text[i].isdigit() or text[i] == "."):
                i += 1
            tokens.append(Token(TokenKind.NUMBER, text[start:i], col))
            continue
        if ch in "'\"":
            quote = ch
            i += 1
            chars = []
            while i < n and text[i] != quote:
                if text[i] == "\\" and i + 1 < n:
                    i += 1
                chars.append(text[i])
                i += 1
            if i >= n:
                raise PredicateSyntaxError("unterminated string literal", col)
            i += 1
            tokens.append(Token(TokenKind.STRING, "".join(chars), col))
            continue
        for punct, kind in _PUNCT:
            if text.startswith(punct, i):
                tokens.append(Token(kind, punct, col))
                i += len(punct)
                break
        else:
            raise PredicateSyntaxError(f"unexpected character '{ch}'", col)
    tokens.append(Token(TokenKind.EOF, "", n + 1))
    return tokens


_EQUALITY = {TokenKind.EQ, TokenKind.NE}
_RELATIONAL = {TokenKind.LT, TokenKind.GT, TokenKind.LE, TokenKind.GE}


class PredicateParser:
    """
    Recursive-descent parser, lowest precedence first:
    `||`, `&&`, equality, relational, unary (`!`, `typeof`), member/call, primary.
    """

    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    @classmethod
    def from_source(cls, source: str) -> "PredicateParser":
        return cls(tokenize(source))

    def parse(self) -> Expr:
        expr = self._parse_or()
        if not self._check(TokenKind.EOF):
            tok = self._peek()
            raise PredicateSyntaxError(f"unexpected '{tok.text}'", tok.column)
        return expr

    # --- token utilities ---

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self._peek()
        if tok.kind is not TokenKind.EOF:
            self.index += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind is kind

    def _match(self, kind: TokenKind) -> bool:
        if self._check(kind):
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind, msg: str) -> Token:
        if not self._check(kind):
            raise PredicateSyntaxError(msg, self._peek().column)
        return self._advance()

    # --- grammar ---

    def _parse_or(self) -> Expr:
        left = self._parse_and()
        while self._match(TokenKind.OROR):
            left = LogicalExpr("||", left, self._parse_and())
        return left

    def _parse_and(self) -> Expr:
        left = self._parse_equality()
        while self._match(TokenKind.ANDAND):
            left = LogicalExpr("&&", left, self._parse_equality())
        return left

    def _parse_equality(self) -> Expr:
        left = self._parse_relational()
        while self._peek().kind in _EQUALITY:
            op = self._advance().text
            left = BinaryExpr(op, left, self._parse_relational())
        return left

    def _parse_relational(self) -> Expr:
        left = self._parse_unary()
        while self._peek().kind in _RELATIONAL:
            op = self._advance().text
            left = BinaryExpr(op, left, self._parse_unary())
        return left

    def _parse_unary(self) -> Expr:
        if self._match(TokenKind.BANG):
            return UnaryExpr("!", self._parse_unary())
        tok = self._peek()
        if tok.kind is TokenKind.IDENT and tok.text == "typeof":
            self._advance()
            return UnaryExpr("typeof", self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        expr = self._parse_primary()
        while True:
            if self._match(TokenKind.DOT):
                name = self._expect(TokenKind.IDENT, "expected property name after '.'")
                expr = MemberExpr(expr, name.text)
            elif self._match(TokenKind.LBRACKET):
                key = self._expect(TokenKind.STRING, "expected string key in '[...]'")
                self._expect(TokenKind.RBRACKET, "expected ']'")
                expr = MemberExpr(expr, key.text)
            elif self._match(TokenKind.LPAREN):
                args: List[Expr] = []
                if not self._check(TokenKind.RPAREN):
                    args.append(self._parse_or())
                    while self._match(TokenKind.COMMA):
                        args.append(self._parse_or())
                self._expect(TokenKind.RPAREN, "expected ')' after arguments")
                expr = CallExpr(expr, args)
            else:
                return expr

    def _parse_primary(self) -> Expr:
        tok = self._advance()
        if tok.kind is TokenKind.IDENT:
            if tok.text == "true":
                return BoolLit(True)
            if tok.text == "false":
                return BoolLit(False)
            if tok.text == "null":
                return NullLit()
            return Identifier(tok.text)
        if tok.kind is TokenKind.STRING:
            return StringLit(tok.text)
        if tok.kind is TokenKind.NUMBER:
            value: Optional[float] = None
            try:
                value = int(tok.text)
            except ValueError:
                try:
                    value = float(tok.text)
                except ValueError:
                    raise PredicateSyntaxError(f"invalid number '{tok.text}'", tok.column) from None
            return NumberLit(value)
        if tok.kind is TokenKind.LPAREN:
            inner = self._parse_or()
            self._expect(TokenKind.RPAREN, "expected ')'")
            return inner
        raise PredicateSyntaxError(f"unexpected '{tok.text or 'end of input'}'", tok.column)


def parse_predicate(source: str) -> Expr:
    return PredicateParser.from_source(source).parse()
