"""Two-state grammar over argv for ``<program> test [flags]``.

    Idle        expecting a flag
    Collecting  accumulating arguments for a flag that requires them

Every violation raises ScanError with source "Parser" and a stable code.
"""

from typing import List, Optional, Sequence

from secprobe.core import errors
from secprobe.core.errors import ScanError
from secprobe.core.models import CommandParameter, ParsedInvocation
from secprobe.parsers.schema import ParameterSchema

VERB = "test"
SOURCE = "Parser"


def _fail(code: int, reason: str) -> ScanError:
    return ScanError(code, f"Parsing error occurred. This could be due to:\n"
                           f"  - {reason}", SOURCE, False)


class CommandParser:

    def __init__(self, schema: ParameterSchema, logger=None):
        self.schema = schema
        self.logger = logger

    def parse(self, argv: Sequence[str]) -> ParsedInvocation:
        if len(argv) < 2:
            raise _fail(errors.PARSER_TOO_FEW_TOKENS,
                        "insufficient number of parameters")
        if argv[1] != VERB:
            raise _fail(errors.PARSER_MISSING_VERB,
                        f"'{VERB}' keyword is not present or the command structure is invalid")

        params = self._scan(list(argv[2:]))
        if self.logger:
            self.logger.debug(
                "Parsed parameters: " + ", ".join(f"{p.name}={list(p.arguments)}" for p in params))
        return ParsedInvocation(verb=VERB, parameters=tuple(params))

    # ── grammar ─────────────────────────────────────────────────

    def _is_flag(self, token: str) -> bool:
        return token in self.schema

    def _check_flag_shaped(self, token: str) -> None:
        if token.startswith("--") and not self._is_flag(token):
            raise _fail(errors.PARSER_UNEXPECTED_ARGUMENT,
                        f"unrecognised parameter {token!r}")

    def _scan(self, tokens: List[str]) -> List[CommandParameter]:
        out: List[CommandParameter] = []
        current: Optional[str] = None     # flag being collected (None = Idle)
        buffer: List[str] = []
        i = 0

        while i < len(tokens):
            token = tokens[i]
            self._check_flag_shaped(token)

            if self._is_flag(token):
                if current is not None:
                    out.append(self._close(current, buffer))
                    current, buffer = None, []

                spec = self.schema[token]
                if spec.argument_required:
                    current = token
                    i += 1
                    continue

                # optional flag: peek at the next token
                nxt = tokens[i + 1] if i + 1 < len(tokens) else None
                if nxt is None or self._is_flag(nxt):
                    out.append(CommandParameter(token, (spec.default_value,)))
                    i += 1
                    continue
                self._check_flag_shaped(nxt)
                if not spec.accepts(nxt):
                    raise _fail(errors.PARSER_UNEXPECTED_ARGUMENT,
                                f"invalid argument {nxt!r} passed to {token}")
                out.append(CommandParameter(token, (nxt,)))
                i += 2
                continue

            if current is None:
                raise _fail(errors.PARSER_UNEXPECTED_ARGUMENT,
                            f"unexpected argument {token!r}")
            if not self.schema[current].accepts(token):
                raise _fail(errors.PARSER_UNEXPECTED_ARGUMENT,
                            f"invalid argument {token!r} passed to {current}")
            buffer.append(token)
            i += 1

        if current is not None:
            out.append(self._close(current, buffer))
        return out

    def _close(self, flag: str, buffer: List[str]) -> CommandParameter:
        if not buffer:
            raise _fail(errors.PARSER_MISSING_ARGUMENTS,
                        f"too few arguments passed to {flag}")
        if len(set(buffer)) != len(buffer):
            raise _fail(errors.PARSER_DUPLICATE_ARGUMENT,
                        f"one of the arguments of {flag} occurred more than once")
        count = self.schema[flag].argument_count
        if count is not None and len(buffer) != count:
            raise _fail(errors.PARSER_TOO_MANY_ARGUMENTS,
                        f"unnecessary argument passed to {flag}")
        return CommandParameter(flag, tuple(buffer))
