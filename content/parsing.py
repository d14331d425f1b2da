"""content.parsing

Tolerant JSON parsing for model output.

Gemini replies are usually clean JSON, but not always. We accept the usual
mess without executing anything:
- ``` fences (with or without a language tag)
- prose around the payload (first object or array is taken)
- smart quotes / non-breaking spaces
- trailing commas
- raw newlines inside string literals
- Python-style literals (single quotes, True/None) via ast.literal_eval
"""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_SMART = str.maketrans({"\u201c": "\"", "\u201d": "\"", "\u2018": "'", "\u2019": "'", "\u00a0": " "})


@dataclass(frozen=True)
class ParseResult:
    data: Optional[Any]
    raw: str
    cleaned: str
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.data is not None


def strip_code_fences(s: str) -> str:
    s = (s or "").strip()
    m = _FENCE_RE.search(s)
    return (m.group(1) or "").strip() if m else s


def extract_payload(s: str) -> str:
    """Cut from the first '{' or '[' to the last matching closer (best effort)."""
    s = (s or "").strip()
    starts = [i for i in (s.find("{"), s.find("[")) if i >= 0]
    if not starts:
        return s
    i = min(starts)
    closer = "}" if s[i] == "{" else "]"
    j = s.rfind(closer)
    return s[i : j + 1] if j > i else s[i:]


def escape_newlines_in_strings(s: str) -> str:
    out: List[str] = []
    quote = ""
    esc = False
    for ch in s or "":
        if quote:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == quote:
                quote = ""
            elif ch == "\n":
                out.append("\\n")
                continue
            elif ch == "\r":
                out.append("\\r")
                continue
        elif ch in ('"', "'"):
            quote = ch
        out.append(ch)
    return "".join(out)


def clean_model_text(raw: str) -> str:
    s = extract_payload(strip_code_fences(raw))
    s = s.translate(_SMART)
    s = escape_newlines_in_strings(s)
    return _TRAILING_COMMA_RE.sub(r"\1", s)


def try_parse_json(raw: str) -> ParseResult:
    """Best-effort parse to a dict or list. Returns ParseResult(data=None, error=...) on failure."""
    raw = (raw or "").strip()
    s = clean_model_text(raw)

    try:
        obj = json.loads(s)
    except ValueError as e_json:
        err1 = f"json.loads: {e_json}"
    else:
        if isinstance(obj, (dict, list)):
            return ParseResult(data=obj, raw=raw, cleaned=s)
        return ParseResult(data=None, raw=raw, cleaned=s, error="JSON root is not an object or array")

    s2 = re.sub(r"\btrue\b", "True", s, flags=re.IGNORECASE)
    s2 = re.sub(r"\bfalse\b", "False", s2, flags=re.IGNORECASE)
    s2 = re.sub(r"\bnull\b", "None", s2, flags=re.IGNORECASE)
    try:
        obj2 = ast.literal_eval(s2)
    except (ValueError, SyntaxError, MemoryError, RecursionError) as e_ast:
        return ParseResult(data=None, raw=raw, cleaned=s, error=f"{err1} | literal_eval: {type(e_ast).__name__}: {e_ast}")
    if isinstance(obj2, (dict, list)):
        # round-trip to drop tuples/sets and other non-JSON types
        return ParseResult(data=json.loads(json.dumps(obj2, default=str)), raw=raw, cleaned=s)
    return ParseResult(data=None, raw=raw, cleaned=s, error=f"literal_eval root is not object; {err1}")


def as_object(data: Any) -> Dict[str, Any]:
    """Shape check for a reply the provider already parsed."""
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def as_array(data: Any) -> List[Any]:
    if isinstance(data, dict):
        # some models wrap arrays: {"milestones": [...]}
        lists = [v for v in data.values() if isinstance(v, list)]
        if len(lists) == 1:
            return lists[0]
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    return data
