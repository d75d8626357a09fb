"""JavaScript/TypeScript front-end extracting import/export declarations and identifiers."""

from dataclasses import dataclass
from typing import Optional

import regex

from .base_parser import (
    BaseParser,
    SyntaxSummary,
    ImportDecl,
    ExportDecl,
    ExportKind,
)
from ..utils.errors import ParseError


@dataclass
class Token:
    """A lexical token."""
    kind: str  # ident, punct, string, template, number, regex, private
    value: str
    line: int


# Module code is always strict, so the strict-mode reserved words can never
# name a binding either.
RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with",
    "await", "implements", "interface", "let", "package", "private",
    "protected", "public", "static", "yield",
})

# Keywords after which a `/` starts a regular expression rather than a division
REGEX_PREFIX_KEYWORDS = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
})

# Tokens that begin a new statement; used to stop scanning an initializer
# that ends without a semicolon.
STATEMENT_KEYWORDS = frozenset({
    "export", "import", "const", "let", "var", "function", "class", "if",
    "for", "while", "do", "return", "switch", "try", "throw", "async",
    "interface", "type", "enum", "declare", "namespace", "abstract",
})

PUNCTUATORS = sorted([
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=",
    "??=", "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
    "+=", "-=", "*=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*", "%",
    "&", "|", "^", "!", "~", "?", ":", "=", ".", "@",
], key=len, reverse=True)

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}

_IDENT = r"[\p{L}\p{Nl}$_][\p{L}\p{Nl}\p{Mn}\p{Mc}\p{Nd}\p{Pc}$\u200c\u200d]*"

# Files in which `<` in expression position starts JSX
JSX_SUFFIXES = (".jsx", ".tsx", ".js", ".mjs", ".cjs")


class JSParser(BaseParser):
    """Token-level front-end for JavaScript and TypeScript modules.

    This is not a full parser: it tokenizes the whole module (so that strings,
    comments, template and regex literals never leak identifiers) and then reads
    the top-level import and export statements. Anything it cannot tokenize is
    reported as a ParseError.
    """

    PATTERNS = {
        "whitespace": regex.compile(r"[ \t\r\n\f\v\u00a0\ufeff\u2028\u2029]+"),
        "line_comment": regex.compile(r"//[^\n]*"),
        "block_comment": regex.compile(r"/\*.*?\*/", regex.DOTALL),
        "identifier": regex.compile(_IDENT),
        "private_name": regex.compile(r"#" + _IDENT),
        "number": regex.compile(
            r"(?:0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+"
            r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?)n?"
        ),
        "double_string": regex.compile(r'"(?:[^"\\\n]|\\(?:.|\n))*"', regex.DOTALL),
        "single_string": regex.compile(r"'(?:[^'\\\n]|\\(?:.|\n))*'", regex.DOTALL),
        "regex_flags": regex.compile(r"[\p{L}\p{Nd}$_]*"),
        "jsx_name": regex.compile(r"[\p{L}$_][\w$\-]*(?:[.:][\p{L}$_][\w$\-]*)*"),
        "jsx_text": regex.compile(r"[^<{]+"),
        "punctuator": regex.compile("|".join(regex.escape(p) for p in PUNCTUATORS)),
    }

    def supported_extensions(self) -> list[str]:
        return [".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs"]

    def parse_source(self, source: str, file_path: str = "<memory>") -> SyntaxSummary:
        """Parse module text into a SyntaxSummary."""
        tokens = self.tokenize(source, jsx=str(file_path).lower().endswith(JSX_SUFFIXES))

        summary = SyntaxSummary(file_path=file_path)
        summary.identifiers = {
            tok.value for tok in tokens
            if tok.kind == "ident" and tok.value not in RESERVED_WORDS
        }

        depth = 0
        for i, tok in enumerate(tokens):
            if tok.kind == "punct":
                if tok.value in OPENERS:
                    depth += 1
                elif tok.value in CLOSERS:
                    depth -= 1
                continue

            if depth != 0 or tok.kind != "ident":
                continue
            if i > 0 and tokens[i - 1].value in (".", "?."):
                continue

            if tok.value == "import":
                self._read_import(_Cursor(tokens, i + 1), tok, summary)
            elif tok.value == "export":
                self._read_export(_Cursor(tokens, i + 1), tok, summary)

        return summary

    # ------------------------------------------------------------------
    # Tokenizer
    # ------------------------------------------------------------------

    def tokenize(self, source: str, jsx: bool = False) -> list[Token]:
        """Split source text into tokens, dropping whitespace and comments.

        With `jsx` set, a `<` in expression position opens a JSX element.
        """
        tokens: list[Token] = []
        brackets: list[tuple[str, int]] = []  # (opener or "${" or "jsx{", line)
        pos = 0
        line = 1

        if source.startswith("#!"):
            end = source.find("\n")
            pos = len(source) if end == -1 else end

        pos, line = self._scan_code(source, pos, line, tokens, brackets, jsx)

        if brackets:
            opener, opened_at = brackets[-1]
            raise ParseError(f"'{opener}' opened on line {opened_at} is never closed", line)

        return tokens

    def _scan_code(
        self,
        source: str,
        pos: int,
        line: int,
        tokens: list[Token],
        brackets: list[tuple[str, int]],
        jsx: bool
    ) -> tuple[int, int]:
        """Tokenize code up to the end of input or the `}` closing a JSX expression."""
        length = len(source)

        while pos < length:
            ch = source[pos]

            match = self.PATTERNS["whitespace"].match(source, pos)
            if match:
                line += match.group().count("\n")
                pos = match.end()
                continue

            if source.startswith("//", pos):
                pos = self.PATTERNS["line_comment"].match(source, pos).end()
                continue

            if source.startswith("/*", pos):
                match = self.PATTERNS["block_comment"].match(source, pos)
                if not match:
                    raise ParseError("unterminated comment", line)
                line += match.group().count("\n")
                pos = match.end()
                continue

            if ch in "\"'":
                key = "double_string" if ch == '"' else "single_string"
                match = self.PATTERNS[key].match(source, pos)
                if not match:
                    raise ParseError("unterminated string literal", line)
                text = match.group()
                tokens.append(Token("string", _unquote(text), line))
                line += text.count("\n")
                pos = match.end()
                continue

            if ch == "`":
                pos, line = self._scan_template(source, pos + 1, line, tokens, brackets)
                continue

            if ch == "}" and brackets and brackets[-1][0] == "${":
                brackets.pop()
                pos, line = self._scan_template(source, pos + 1, line, tokens, brackets)
                continue

            if ch == "}" and brackets and brackets[-1][0] == "jsx{":
                brackets.pop()
                tokens.append(Token("punct", "}", line))
                return pos + 1, line

            if ch == "/" and self._regex_allowed(tokens):
                pos = self._scan_regex(source, pos, line, tokens)
                continue

            if ch == "<" and jsx and self._jsx_allowed(source, pos, tokens):
                pos, line = self._scan_jsx(source, pos, line, tokens, brackets)
                continue

            match = self.PATTERNS["identifier"].match(source, pos)
            if match:
                tokens.append(Token("ident", match.group(), line))
                pos = match.end()
                continue

            if ch == "#":
                match = self.PATTERNS["private_name"].match(source, pos)
                if not match:
                    raise ParseError("unexpected character '#'", line)
                tokens.append(Token("private", match.group(), line))
                pos = match.end()
                continue

            if ch.isdigit() or (ch == "." and source[pos + 1:pos + 2].isdigit()):
                match = self.PATTERNS["number"].match(source, pos)
                tokens.append(Token("number", match.group(), line))
                pos = match.end()
                continue

            match = self.PATTERNS["punctuator"].match(source, pos)
            if match:
                value = match.group()
                if value in OPENERS:
                    brackets.append((value, line))
                elif value in CLOSERS:
                    if not brackets or brackets[-1][0] != CLOSERS[value]:
                        raise ParseError(f"unbalanced '{value}'", line)
                    brackets.pop()
                tokens.append(Token("punct", value, line))
                pos = match.end()
                continue

            if ch == "/":
                tokens.append(Token("punct", "/=" if source.startswith("/=", pos) else "/", line))
                pos += 2 if source.startswith("/=", pos) else 1
                continue

            raise ParseError(f"unexpected character {ch!r}", line)

        return pos, line

    def _scan_template(
        self,
        source: str,
        pos: int,
        line: int,
        tokens: list[Token],
        brackets: list[tuple[str, int]]
    ) -> tuple[int, int]:
        """Scan template text up to the closing backtick or the next `${`."""
        start_line = line
        chars = []
        length = len(source)

        while pos < length:
            ch = source[pos]
            if ch == "\\":
                chars.append(source[pos:pos + 2])
                line += source[pos:pos + 2].count("\n")
                pos += 2
                continue
            if ch == "`":
                tokens.append(Token("template", "".join(chars), start_line))
                return pos + 1, line
            if source.startswith("${", pos):
                tokens.append(Token("template", "".join(chars), start_line))
                brackets.append(("${", line))
                return pos + 2, line
            if ch == "\n":
                line += 1
            chars.append(ch)
            pos += 1

        raise ParseError("unterminated template literal", start_line)

    def _regex_allowed(self, tokens: list[Token]) -> bool:
        """Decide whether a `/` at this point starts a regular expression."""
        if not tokens:
            return True
        prev = tokens[-1]
        if prev.kind == "punct":
            return prev.value not in (")", "]", "}", "++", "--")
        if prev.kind == "ident":
            return prev.value in REGEX_PREFIX_KEYWORDS
        return False

    def _scan_regex(self, source: str, pos: int, line: int, tokens: list[Token]) -> int:
        """Scan a regular expression literal starting at the opening slash."""
        start = pos
        pos += 1
        in_class = False
        length = len(source)

        while pos < length:
            ch = source[pos]
            if ch == "\n":
                break
            if ch == "\\":
                pos += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                end = self.PATTERNS["regex_flags"].match(source, pos + 1).end()
                tokens.append(Token("regex", source[start:end], line))
                return end
            pos += 1

        raise ParseError("unterminated regular expression", line)

    def _jsx_allowed(self, source: str, pos: int, tokens: list[Token]) -> bool:
        """Decide whether a `<` at this point opens a JSX element or fragment."""
        if not self._regex_allowed(tokens):
            return False
        if source.startswith("<>", pos):
            return True
        match = self.PATTERNS["jsx_name"].match(source, pos + 1)
        if not match:
            return False
        # `<T,>(x) => x` and `<T extends U>(x) => x` are generic arrow functions
        rest = source[match.end():match.end() + 32].lstrip()
        return not (rest.startswith(",") or rest.startswith("extends "))

    def _scan_jsx(
        self,
        source: str,
        pos: int,
        line: int,
        tokens: list[Token],
        brackets: list[tuple[str, int]]
    ) -> tuple[int, int]:
        """Scan a JSX element or fragment starting at its `<`.

        Component tag names become identifier tokens and `{...}` containers are
        tokenized as code. Intrinsic tags, attribute names and text children
        produce no tokens.
        """
        start_line = line
        length = len(source)
        pos, line = self._skip_jsx_space(source, pos + 1, line)

        name = ""
        if not source.startswith(">", pos):
            match = self.PATTERNS["jsx_name"].match(source, pos)
            if not match:
                raise ParseError("expected JSX tag name", line)
            name = match.group()
            self._jsx_name_tokens(name, line, tokens)
            pos = match.end()

        # Attributes
        while True:
            pos, line = self._skip_jsx_space(source, pos, line)
            if pos >= length:
                raise ParseError(f"unterminated JSX tag <{name}>", start_line)
            if source.startswith("/>", pos):
                tokens.append(Token("jsx", name, start_line))
                return pos + 2, line
            if source[pos] == ">":
                pos += 1
                break
            if source[pos] == "{":
                pos, line = self._scan_jsx_expression(source, pos, line, tokens, brackets)
                continue

            match = self.PATTERNS["jsx_name"].match(source, pos)
            if not match:
                raise ParseError(f"unexpected {source[pos]!r} in JSX tag <{name}>", line)
            pos, line = self._skip_jsx_space(source, match.end(), line)
            if not source.startswith("=", pos):
                continue

            pos, line = self._skip_jsx_space(source, pos + 1, line)
            quote = source[pos:pos + 1]
            if quote in ("\"", "'"):
                end = source.find(quote, pos + 1)
                if end == -1:
                    raise ParseError("unterminated JSX attribute string", line)
                line += source.count("\n", pos, end)
                pos = end + 1
            elif quote == "{":
                pos, line = self._scan_jsx_expression(source, pos, line, tokens, brackets)
            elif quote == "<":
                pos, line = self._scan_jsx(source, pos, line, tokens, brackets)
            else:
                raise ParseError("expected JSX attribute value", line)

        # Children
        while True:
            if pos >= length:
                raise ParseError(f"unterminated JSX element <{name}>", start_line)
            ch = source[pos]

            if ch == "{":
                pos, line = self._scan_jsx_expression(source, pos, line, tokens, brackets)
            elif source.startswith("</", pos):
                pos, line = self._skip_jsx_space(source, pos + 2, line)
                match = self.PATTERNS["jsx_name"].match(source, pos)
                closing = match.group() if match else ""
                if closing != name:
                    raise ParseError(f"expected closing tag for <{name}>, found </{closing}>", line)
                if match:
                    pos = match.end()
                pos, line = self._skip_jsx_space(source, pos, line)
                if not source.startswith(">", pos):
                    raise ParseError(f"malformed closing tag for <{name}>", line)
                tokens.append(Token("jsx", name, start_line))
                return pos + 1, line
            elif ch == "<":
                pos, line = self._scan_jsx(source, pos, line, tokens, brackets)
            else:
                match = self.PATTERNS["jsx_text"].match(source, pos)
                line += match.group().count("\n")
                pos = match.end()

    def _scan_jsx_expression(
        self,
        source: str,
        pos: int,
        line: int,
        tokens: list[Token],
        brackets: list[tuple[str, int]]
    ) -> tuple[int, int]:
        """Tokenize a `{...}` container inside JSX as code."""
        depth = len(brackets)
        brackets.append(("jsx{", line))
        tokens.append(Token("punct", "{", line))
        pos, line = self._scan_code(source, pos + 1, line, tokens, brackets, jsx=True)
        if len(brackets) > depth:
            raise ParseError("unterminated JSX expression", brackets[depth][1])
        return pos, line

    def _skip_jsx_space(self, source: str, pos: int, line: int) -> tuple[int, int]:
        """Skip whitespace and comments inside a JSX tag."""
        while pos < len(source):
            match = self.PATTERNS["whitespace"].match(source, pos)
            if match:
                line += match.group().count("\n")
                pos = match.end()
            elif source.startswith("//", pos):
                pos = self.PATTERNS["line_comment"].match(source, pos).end()
            elif source.startswith("/*", pos):
                match = self.PATTERNS["block_comment"].match(source, pos)
                if not match:
                    raise ParseError("unterminated comment", line)
                line += match.group().count("\n")
                pos = match.end()
            else:
                break
        return pos, line

    def _jsx_name_tokens(self, name: str, line: int, tokens: list[Token]) -> None:
        # Lowercase names are intrinsic elements, `ns:name` is an XML namespace
        if ":" in name or ("." not in name and name[0].islower()):
            return
        for part in name.split("."):
            if self.PATTERNS["identifier"].fullmatch(part):
                tokens.append(Token("ident", part, line))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _read_import(self, cur: "_Cursor", keyword: Token, summary: SyntaxSummary) -> None:
        """Read an import declaration following the `import` keyword."""
        first = cur.peek()
        if first is None:
            raise ParseError("unexpected end of input after 'import'", keyword.line)
        if first.value == "(":
            target = cur.peek(1)
            if target is not None and target.kind == "string":
                summary.warnings.append(
                    f"Dynamic import at line {keyword.line}: import(\"{target.value}\") is not followed"
                )
            return
        if first.value == ".":
            return  # import.meta

        decl = ImportDecl(specifier="", line=keyword.line)

        if first.kind == "string":
            decl.specifier = cur.next().value
            summary.imports.append(decl)
            return

        if cur.is_ident("type") and not self._is_plain_default(cur):
            cur.next()
            decl.type_only = True

        if cur.peek_kind() == "ident" and not cur.is_ident("from"):
            cur.next()
            if cur.is_punct("="):
                return  # TypeScript `import x = require(...)`
            decl.names.append("default")
            if not cur.accept_punct(","):
                self._read_from(cur, decl, keyword)
                summary.imports.append(decl)
                return
        elif cur.is_ident("from") and cur.peek(1) is not None and cur.peek(1).kind == "ident":
            # `import from from "./x"`
            cur.next()
            decl.names.append("default")
            if not cur.accept_punct(","):
                self._read_from(cur, decl, keyword)
                summary.imports.append(decl)
                return

        if cur.accept_punct("*"):
            cur.expect_ident("as")
            cur.expect_kind("ident")
            decl.namespace = True
        elif cur.accept_punct("{"):
            for imported, _local in self._read_specifiers(cur):
                decl.names.append(imported)
        else:
            raise ParseError("malformed import declaration", keyword.line)

        self._read_from(cur, decl, keyword)
        summary.imports.append(decl)

    def _is_plain_default(self, cur: "_Cursor") -> bool:
        """True for `import type from "x"` and `import type, {...} from "x"`."""
        after = cur.peek(1)
        if after is None:
            return True
        if after.value == ",":
            return True
        return after.value == "from" and cur.peek(2) is not None and cur.peek(2).kind == "string"

    def _read_from(self, cur: "_Cursor", decl: ImportDecl, keyword: Token) -> None:
        if not cur.accept_ident("from"):
            raise ParseError("expected 'from' in import declaration", keyword.line)
        tok = cur.next()
        if tok is None or tok.kind != "string":
            raise ParseError("expected module specifier string", keyword.line)
        decl.specifier = tok.value

    def _read_specifiers(self, cur: "_Cursor") -> list[tuple[str, str]]:
        """Read `a, b as c, type d }` after an opening brace.

        Returns (external name, local name) pairs, type-only specifiers excluded.
        """
        pairs = []
        while True:
            if cur.accept_punct("}"):
                return pairs

            type_only = False
            if cur.is_ident("type") and cur.peek(1) is not None \
                    and cur.peek(1).value not in (",", "}", "as"):
                cur.next()
                type_only = True
            elif cur.is_ident("type") and cur.peek(1) is not None and cur.peek(1).value == "as" \
                    and cur.peek(2) is not None and cur.peek(2).value == "as":
                cur.next()
                type_only = True

            tok = cur.next()
            if tok is None or tok.kind not in ("ident", "string"):
                raise ParseError("malformed specifier list", tok.line if tok else 0)
            name = tok.value
            alias = name
            if cur.accept_ident("as"):
                alias_tok = cur.next()
                if alias_tok is None or alias_tok.kind not in ("ident", "string"):
                    raise ParseError("expected name after 'as'", tok.line)
                alias = alias_tok.value

            if not type_only:
                pairs.append((name, alias))

            if cur.accept_punct(","):
                continue
            if cur.accept_punct("}"):
                return pairs
            raise ParseError("expected ',' or '}' in specifier list", tok.line)

    def _read_export(self, cur: "_Cursor", keyword: Token, summary: SyntaxSummary) -> None:
        """Read an export statement following the `export` keyword."""
        tok = cur.peek()
        if tok is None:
            raise ParseError("unexpected end of input after 'export'", keyword.line)
        line = keyword.line

        if tok.value == "default":
            summary.exports.append(ExportDecl(ExportKind.DEFAULT, line=line))
            return

        if cur.accept_punct("*"):
            names = []
            kind = ExportKind.ALL
            if cur.accept_ident("as"):
                name_tok = cur.next()
                if name_tok is None or name_tok.kind not in ("ident", "string"):
                    raise ParseError("expected name after 'export * as'", line)
                names.append(name_tok.value)
                kind = ExportKind.NAMESPACE
            decl = ImportDecl(specifier="", line=line, namespace=True)
            self._read_from(cur, decl, keyword)
            summary.imports.append(decl)
            summary.exports.append(ExportDecl(kind, names, decl.specifier, line))
            return

        if cur.is_ident("type") and cur.peek(1) is not None and cur.peek(1).value == "{":
            cur.next()
            cur.next()
            self._read_specifiers(cur)
            if cur.is_ident("from"):
                decl = ImportDecl(specifier="", line=line, type_only=True)
                self._read_from(cur, decl, keyword)
                summary.imports.append(decl)
            summary.exports.append(ExportDecl(ExportKind.TYPE, line=line))
            return

        if cur.accept_punct("{"):
            pairs = self._read_specifiers(cur)
            locals_ = [local for local, _exported in pairs]
            source = None
            if cur.is_ident("from"):
                decl = ImportDecl(specifier="", line=line, names=list(locals_))
                self._read_from(cur, decl, keyword)
                summary.imports.append(decl)
                source = decl.specifier
            summary.exports.append(ExportDecl(ExportKind.NAMED, locals_, source, line))
            return

        if tok.kind != "ident":
            # `export = x`, `export as namespace X` and friends
            summary.exports.append(ExportDecl(ExportKind.TYPE, line=line))
            return

        word = tok.value
        if word in ("interface", "type", "declare", "namespace", "module", "import", "as"):
            summary.exports.append(ExportDecl(ExportKind.TYPE, line=line))
            return

        if word == "async":
            cur.next()
            word = cur.peek().value if cur.peek() else ""

        if word == "function":
            cur.next()
            cur.accept_punct("*")
            name_tok = cur.expect_kind("ident")
            summary.exports.append(ExportDecl(ExportKind.FUNCTION, [name_tok.value], line=line))
            return

        if word == "abstract":
            cur.next()
            word = cur.peek().value if cur.peek() else ""

        if word == "class":
            cur.next()
            name_tok = cur.expect_kind("ident")
            summary.exports.append(ExportDecl(ExportKind.CLASS, [name_tok.value], line=line))
            return

        if word == "enum" or (word == "const" and cur.peek(1) is not None and cur.peek(1).value == "enum"):
            if word == "const":
                cur.next()
            cur.next()
            name_tok = cur.expect_kind("ident")
            summary.exports.append(ExportDecl(ExportKind.ENUM, [name_tok.value], line=line))
            return

        if word in ("const", "let", "var"):
            cur.next()
            names = self._read_declarators(cur, line)
            summary.exports.append(ExportDecl(ExportKind.VARIABLE, names, line=line))
            return

        raise ParseError(f"unexpected '{word}' after 'export'", line)

    def _read_declarators(self, cur: "_Cursor", line: int) -> list[str]:
        """Read `a = 1, { b, c: d } = obj` and return the bound names."""
        names: list[str] = []
        while True:
            names.extend(self._read_binding(cur, line))
            cur.accept_punct("!")
            if cur.accept_punct(":"):
                self._skip_until(cur, {"=", ",", ";"}, track_angles=True)
            if cur.accept_punct("="):
                self._skip_until(cur, {",", ";"}, track_angles=True)
            if not cur.accept_punct(","):
                return names

    def _read_binding(self, cur: "_Cursor", line: int) -> list[str]:
        """Read a binding identifier or destructuring pattern."""
        tok = cur.next()
        if tok is None:
            raise ParseError("unexpected end of input in declaration", line)

        if tok.kind == "ident":
            return [tok.value]

        names: list[str] = []
        if tok.value == "{":
            while not cur.accept_punct("}"):
                if cur.accept_punct("..."):
                    names.extend(self._read_binding(cur, line))
                else:
                    key = cur.next()
                    if key is None:
                        raise ParseError("unterminated object pattern", line)
                    if key.value == "[":
                        self._skip_until(cur, {"]"})
                        cur.next()
                    if cur.accept_punct(":"):
                        names.extend(self._read_binding(cur, line))
                    elif key.kind == "ident":
                        names.append(key.value)
                if cur.accept_punct("="):
                    self._skip_until(cur, {",", "}"})
                cur.accept_punct(",")
            return names

        if tok.value == "[":
            while not cur.accept_punct("]"):
                if cur.accept_punct(","):
                    continue
                cur.accept_punct("...")
                names.extend(self._read_binding(cur, line))
                if cur.accept_punct("="):
                    self._skip_until(cur, {",", "]"})
                cur.accept_punct(",")
            return names

        raise ParseError(f"unexpected '{tok.value}' in declaration", tok.line)

    def _skip_until(self, cur: "_Cursor", stops: set[str], track_angles: bool = False) -> None:
        """Skip an expression or type up to a stop token at the current nesting level."""
        depth = 0
        angles = 0
        prev: Optional[Token] = None

        while True:
            tok = cur.peek()
            if tok is None:
                return
            if depth == 0 and angles == 0:
                if tok.kind == "punct" and tok.value in stops:
                    return
                if prev is not None and tok.line > prev.line and tok.kind == "ident" \
                        and tok.value in STATEMENT_KEYWORDS:
                    return
            if tok.kind == "punct":
                if tok.value in OPENERS:
                    depth += 1
                elif tok.value in CLOSERS:
                    if depth == 0:
                        return
                    depth -= 1
                elif track_angles and depth == 0:
                    if tok.value == "<" and (prev is None or prev.kind == "ident" or prev.value == ":"):
                        angles += 1
                    elif angles and tok.value in (">", ">>", ">>>"):
                        angles = max(0, angles - len(tok.value))
                    elif tok.value == ";":
                        angles = 0
            prev = cur.next()


class _Cursor:
    """Read position over a token list."""

    def __init__(self, tokens: list[Token], pos: int):
        self.tokens = tokens
        self.pos = pos

    def peek(self, offset: int = 0) -> Optional[Token]:
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def peek_kind(self) -> Optional[str]:
        tok = self.peek()
        return tok.kind if tok else None

    def next(self) -> Optional[Token]:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

    def is_ident(self, value: str) -> bool:
        tok = self.peek()
        return tok is not None and tok.kind == "ident" and tok.value == value

    def is_punct(self, value: str) -> bool:
        tok = self.peek()
        return tok is not None and tok.kind == "punct" and tok.value == value

    def accept_ident(self, value: str) -> bool:
        if self.is_ident(value):
            self.pos += 1
            return True
        return False

    def accept_punct(self, value: str) -> bool:
        if self.is_punct(value):
            self.pos += 1
            return True
        return False

    def expect_ident(self, value: str) -> Token:
        tok = self.next()
        if tok is None or tok.kind != "ident" or tok.value != value:
            raise ParseError(f"expected '{value}'", tok.line if tok else 0)
        return tok

    def expect_kind(self, kind: str) -> Token:
        tok = self.next()
        if tok is None or tok.kind != kind:
            found = tok.value if tok else "end of input"
            raise ParseError(f"expected {kind}, found '{found}'", tok.line if tok else 0)
        return tok


def _unquote(text: str) -> str:
    """Strip quotes from a string literal and resolve simple escapes."""
    body = text[1:-1]
    if "\\" not in body:
        return body
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append({"n": "\n", "t": "\t", "r": "\r", "\n": ""}.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)
