"""
JSON Repair
===========
Best-effort recovery for truncated model output.

Scanner:
    A finite-state machine over the raw text with three named states:

        NORMAL    ── '"' ──▶ IN_STRING
        IN_STRING ── '\\' ─▶ ESCAPED
        IN_STRING ── '"' ──▶ NORMAL
        ESCAPED   ── any ──▶ IN_STRING

    In NORMAL, '{' / '}' and '[' / ']' move the brace and bracket depth.
    Brackets inside strings are ignored.

Repair:
    1. Scan ended in ESCAPED   → drop the dangling backslash
    2. Scan ended in a string  → if the text before the opening quote saw a
       ':' more recently than a ',' we are mid-value: append '..."' so the
       partial value ends with a truncation marker; otherwise append '"'
    3. Close every container still open, innermost first, so both depths
       return to zero

Known approximation: the colon/comma check only looks backwards for the
nearest separator. It cannot tell an object value from an array element
nested inside an object value, so deeply nested truncations may still fail
to parse after repair.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from bugscope.core.constants import TRUNCATION_MARKER

logger = logging.getLogger(__name__)


class ScanState(enum.Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


_DEPTH_DELTAS = {
    "{": (1, 0),
    "}": (-1, 0),
    "[": (0, 1),
    "]": (0, -1),
}


def step(state: ScanState, char: str) -> Tuple[ScanState, int, int]:
    """
    Advance the scanner by one character.

    Returns
    -------
    tuple
        (next_state, brace_delta, bracket_delta)
    """
    if state is ScanState.ESCAPED:
        return ScanState.IN_STRING, 0, 0
    if state is ScanState.IN_STRING:
        if char == "\\":
            return ScanState.ESCAPED, 0, 0
        if char == '"':
            return ScanState.NORMAL, 0, 0
        return ScanState.IN_STRING, 0, 0
    if char == '"':
        return ScanState.IN_STRING, 0, 0
    brace, bracket = _DEPTH_DELTAS.get(char, (0, 0))
    return ScanState.NORMAL, brace, bracket


_CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class ScanResult:
    state: ScanState
    brace_depth: int
    bracket_depth: int
    string_start: Optional[int] = None
    open_containers: Tuple[str, ...] = ()

    @property
    def in_string(self) -> bool:
        return self.state is not ScanState.NORMAL

    def closing_sequence(self) -> str:
        """Closers for every still-open container, innermost first."""
        return "".join(_CLOSERS[c] for c in reversed(self.open_containers))


def scan(text: str) -> ScanResult:
    """Run the scanner over the whole text."""
    state = ScanState.NORMAL
    braces = 0
    brackets = 0
    string_start: Optional[int] = None
    stack: list[str] = []

    for i, char in enumerate(text):
        next_state, d_brace, d_bracket = step(state, char)
        if state is ScanState.NORMAL and next_state is ScanState.IN_STRING:
            string_start = i
        elif next_state is ScanState.NORMAL and state is not ScanState.NORMAL:
            string_start = None
        if d_brace > 0 or d_bracket > 0:
            stack.append(char)
        elif (d_brace < 0 or d_bracket < 0) and stack and _CLOSERS[stack[-1]] == char:
            stack.pop()
        state = next_state
        braces += d_brace
        brackets += d_bracket

    return ScanResult(state, braces, brackets, string_start, tuple(stack))


def _is_mid_value(text: str, quote_index: int) -> bool:
    before = text[:quote_index]
    return before.rfind(":") > before.rfind(",")


def repair_json(text: str) -> str:
    """Close an unterminated string and any open brackets or braces."""
    result = scan(text)
    repaired = text

    if result.state is ScanState.ESCAPED:
        repaired = repaired[:-1]

    if result.in_string:
        quote_index = result.string_start if result.string_start is not None else repaired.rfind('"')
        if quote_index > 0 and _is_mid_value(repaired, quote_index):
            repaired += TRUNCATION_MARKER + '"'
        else:
            repaired += '"'

    closing = result.closing_sequence()
    # Stray closers can leave the stack shorter than the depth counters
    missing_brackets = max(0, result.bracket_depth) - closing.count("]")
    missing_braces = max(0, result.brace_depth) - closing.count("}")
    repaired += closing + "]" * max(0, missing_brackets) + "}" * max(0, missing_braces)

    logger.debug(
        "JSON repair: state=%s braces=%d brackets=%d tail=%r",
        result.state.value, result.brace_depth, result.bracket_depth, repaired[-80:],
    )
    return repaired
