from __future__ import annotations

"""
RubyLineTokenizer – line-level lexing for Gemfile-like Ruby DSLs.

This class centralizes:
    * String masking, so structural scans never look inside literals.
    * Inline comment stripping while respecting quoted strings.
    * Scope, bracket and heredoc bookkeeping used to find statement ends.
    * Call-head extraction (`gem "x", ...`, `appraise("x") {`, `spec.name = ...`)
      and argument splitting into literal `Argument` values.

Nothing here raises on odd input; callers fall back to opaque statements
when `parse_call` returns None.
"""

import re
from typing import List, NamedTuple, Optional

from rbmerge.core.models import Argument, ArgumentKind

_MASK_CHAR = "_"
_QUOTES = {'"', "'", "`"}

_CALL_HEAD_RE = re.compile(
    r"^(?P<name>(?:::)?[A-Za-z_]\w*(?:(?:\.|::|&\.)[A-Za-z_]\w*)*[!?]?)"
)
_ASSIGN_RE = re.compile(r"^\s*(?P<op>\|\||&&|\*\*|<<|>>|[-+*/%|&^])?=(?![=~>])")
_OPERATOR_RE = re.compile(r"^\s*(?:<<|>>|[=!<>+*/%&|^?]|-\s|\.|\[)")
_KW_OPEN_RE = re.compile(r"^(?P<kw>if|unless|while|until|case|begin|def|class|module|for)\b(?![?!:])")
_ENDLESS_DEF_RE = re.compile(r"^def\s+[\w.]+[?!]?\s*(?:\([^)]*\))?\s*=(?!=)")
_ASSIGN_OPEN_RE = re.compile(r"=\s*(?:if|unless|case|begin|while|until)\b(?![?!:])")
_DO_RE = re.compile(r"(?<![.:\w])do\b(?![?!:])")
_END_RE = re.compile(r"(?<![.:\w])end\b(?![?!:])")
_OPENS_BLOCK_RE = re.compile(r"(?:(?<![.:\w])do|\{)\s*(?:\|[^|]*\|)?\s*$")
_CLOSES_BLOCK_RE = re.compile(r"^(?:end\b|\})")
_ARGS_STOP_RE = re.compile(r"(?:do|if|unless|while|until|rescue)\b(?![?!:])")
_HEREDOC_RE = re.compile(r"<<(?P<flag>[~-]?)(?P<q>['\"`]?)(?P<id>[A-Za-z_]\w*)(?P=q)")
_CONTINUATION_SUFFIXES = (",", "\\", "&&", "||", "+", "=", "=>", ".", " and", " or")

_STRING_ARG_RES = (
    re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL),
    re.compile(r"'((?:[^'\\]|\\.)*)'", re.DOTALL),
)
_SYMBOL_ARG_RES = (
    re.compile(r":([A-Za-z_]\w*[?!=]?)"),
    re.compile(r':"((?:[^"\\]|\\.)*)"'),
)

RUBY_KEYWORDS = frozenset({
    "if", "unless", "while", "until", "case", "begin", "def", "class", "module",
    "for", "end", "else", "elsif", "when", "in", "rescue", "ensure", "return",
    "yield", "super", "then", "do", "and", "or", "not", "alias", "undef",
    "BEGIN", "END", "redo", "retry", "break", "next", "self", "nil", "true",
    "false", "__END__", "defined?",
})


class CallHead(NamedTuple):
    name: str
    args_text: str
    assignment: bool = False


class RubyLineTokenizer:
    @staticmethod
    def mask_strings(code: str) -> str:
        """Return *code* with string literal contents replaced by placeholders.

        Quote characters stay in place and the result has the same length,
        so indices found on the masked text apply to the original.
        """
        out: List[str] = []
        quote: Optional[str] = None
        escaped = False
        for ch in code:
            if quote is None:
                out.append(ch)
                if ch in _QUOTES:
                    quote = ch
                continue
            if escaped:
                escaped = False
                out.append(_MASK_CHAR)
                continue
            if ch == "\\":
                escaped = True
                out.append(_MASK_CHAR)
                continue
            if ch == quote:
                quote = None
                out.append(ch)
                continue
            out.append(_MASK_CHAR)
        return "".join(out)

    @staticmethod
    def strip_inline_comment(line: str) -> str:
        masked = RubyLineTokenizer.mask_strings(line)
        idx = masked.find("#")
        if idx == -1:
            return line.rstrip()
        return line[:idx].rstrip()

    @staticmethod
    def bracket_delta(code: str) -> int:
        masked = RubyLineTokenizer.mask_strings(code)
        return (masked.count("(") + masked.count("[")) - (masked.count(")") + masked.count("]"))

    @staticmethod
    def scope_delta(code: str) -> int:
        """Net number of `do`/keyword/brace scopes opened by *code*.

        One-liners such as `if x then y end` or `foo do |x| x end` net to zero.
        """
        masked = RubyLineTokenizer.mask_strings(code).strip()
        if not masked:
            return 0
        delta = masked.count("{") - masked.count("}")
        kw = _KW_OPEN_RE.match(masked)
        if kw and not _ENDLESS_DEF_RE.match(masked):
            delta += 1
        elif _ASSIGN_OPEN_RE.search(masked):
            delta += 1
        if not (kw and kw.group("kw") in ("while", "until", "for")):
            delta += len(_DO_RE.findall(masked))
        delta -= len(_END_RE.findall(masked))
        return delta

    @staticmethod
    def heredoc_terminators(code: str) -> List[str]:
        masked = RubyLineTokenizer.mask_strings(code)
        found: List[str] = []
        for m in _HEREDOC_RE.finditer(code):
            if masked[m.start()] != "<":
                continue
            ident = m.group("id")
            if not m.group("flag") and not m.group("q") and not ident.isupper():
                continue
            found.append(ident)
        return found

    @staticmethod
    def has_plain_heredoc(code: str) -> bool:
        """True when *code* opens a `<<ID` heredoc whose terminator sits at column 0."""
        masked = RubyLineTokenizer.mask_strings(code)
        for m in _HEREDOC_RE.finditer(code):
            if masked[m.start()] == "<" and not m.group("flag") and (m.group("q") or m.group("id").isupper()):
                return True
        return False

    @staticmethod
    def continues(code: str) -> bool:
        masked = RubyLineTokenizer.mask_strings(code).rstrip()
        return masked.endswith(_CONTINUATION_SUFFIXES)

    @staticmethod
    def opens_block(code: str) -> bool:
        return bool(_OPENS_BLOCK_RE.search(RubyLineTokenizer.mask_strings(code).rstrip()))

    @staticmethod
    def closes_block(code: str) -> bool:
        return bool(_CLOSES_BLOCK_RE.match(code.strip()))

    @staticmethod
    def _matching_paren(masked: str, start: int) -> int:
        depth = 0
        for i in range(start, len(masked)):
            ch = masked[i]
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
                if depth == 0:
                    return i
        return -1

    @staticmethod
    def _command_args_end(masked: str) -> int:
        """Index where command-style arguments end (block opener or modifier)."""
        depth = 0
        for i, ch in enumerate(masked):
            if ch in "([":
                depth += 1
            elif ch in ")]":
                depth -= 1
            elif ch == "{":
                if depth == 0:
                    return i
                depth += 1
            elif ch == "}":
                depth -= 1
            elif depth == 0 and ch in " \t" and _ARGS_STOP_RE.match(masked, i + 1):
                return i
        return len(masked)

    @staticmethod
    def split_arguments(text: str) -> List[str]:
        """Split *text* on top-level commas, keeping literals intact."""
        masked = RubyLineTokenizer.mask_strings(text)
        parts: List[str] = []
        depth = 0
        start = 0
        for i, ch in enumerate(masked):
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
            elif ch == "," and depth == 0:
                parts.append(text[start:i].strip())
                start = i + 1
        tail = text[start:].strip()
        if tail:
            parts.append(tail)
        return [p for p in parts if p]

    @staticmethod
    def parse_argument(text: str) -> Argument:
        s = text.strip()
        for rx in _STRING_ARG_RES:
            m = rx.fullmatch(s)
            if m:
                return Argument(ArgumentKind.STRING, m.group(1))
        for rx in _SYMBOL_ARG_RES:
            m = rx.fullmatch(s)
            if m:
                return Argument(ArgumentKind.SYMBOL, m.group(1))
        return Argument(ArgumentKind.FRAGMENT, s)

    @staticmethod
    def parse_call(code: str) -> Optional[CallHead]:
        """Extract the call head of a statement, or None for non-call code.

        Handles `name args`, `name(args)` and `target = value` forms. The block
        opener (`do |x|` / `{`) and trailing modifiers are not part of the args.
        """
        code = code.strip()
        m = _CALL_HEAD_RE.match(code)
        if not m:
            return None
        name = m.group("name")
        if name in RUBY_KEYWORDS:
            return None
        masked = RubyLineTokenizer.mask_strings(code)
        rest = code[m.end():]
        mrest = masked[m.end():]

        am = _ASSIGN_RE.match(mrest)
        if am:
            op = am.group("op") or ""
            return CallHead(f"{name} {op}=", rest[am.end():].strip(), True)

        if mrest.startswith("("):
            close = RubyLineTokenizer._matching_paren(mrest, 0)
            inner = rest[1:close] if close != -1 else rest[1:]
            return CallHead(name, inner.strip())

        if not mrest:
            return CallHead(name, "")
        if mrest[0] not in " \t" or _OPERATOR_RE.match(mrest):
            return None
        cut = RubyLineTokenizer._command_args_end(mrest)
        return CallHead(name, rest[:cut].strip())

    @staticmethod
    def parse_arguments(args_text: str) -> tuple[Argument, ...]:
        return tuple(RubyLineTokenizer.parse_argument(p) for p in RubyLineTokenizer.split_arguments(args_text))
