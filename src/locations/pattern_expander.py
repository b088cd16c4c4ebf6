"""Lokasyon Desen Genişletici - Kısa desen metinlerinden toplu lokasyon adları üretir.

Desteklenen biçimler (virgül ile ayrılmış segmentler):
- ``A{3}``          -> A1, A2, A3 (sıfır dolgusu N'nin hane sayısı kadar)
- ``B[2]``          -> BA, BB
- ``X{2}-[2]``      -> X1-A, X1-B, X2-A, X2-B (önce sayı, sonra harf)
- ``10(10A, 10B)``  -> "10" üst lokasyonu, altında 10A ve 10B
- ``20{2}*(+-[2])`` -> 201 ve 202, her birinin altında 201-A, 201-B ...

Grup içinde ``+`` ile başlayan segmentler üst lokasyonun adına göre üretilir
(``+[N]`` -> P + harf, ``+-[N]`` -> P- + harf).
"""

from __future__ import annotations

import itertools
import logging
import re
import string
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from src.locations.errors import CapacityExceededError, PatternSyntaxError
from src.models.location import LocationNode

logger = logging.getLogger(__name__)

LETTERS = string.ascii_uppercase
MAX_LETTERS = len(LETTERS)

_CLOSERS = {"(": ")", "{": "}", "[": "]"}
_RANGE_TOKEN = re.compile(r"\{([^{}\[\]]*)\}|\[([^{}\[\]]*)\]")

_COMPLEX_TEMPLATE = re.compile(r"^(.+?)\{([^}]+)\}-\[([^\]]+)\]$")
_COLUMNS_TEMPLATE = re.compile(r"^(.+?)\{([^}]+)\}$")
_ROWS_TEMPLATE = re.compile(r"^(.+?)\[([^\]]+)\]$")


@dataclass
class _Range:
    count: int
    letters: bool

    def values(self) -> list[str]:
        if self.letters:
            return list(LETTERS[: self.count])
        width = len(str(self.count))
        return [str(i).zfill(width) for i in range(1, self.count + 1)]


@dataclass
class _Segment:
    parts: list[Union[str, _Range]]
    relative: bool = False
    # None: yaprak segment, liste: grup (alt segmentler)
    children: Optional[list[_Segment]] = None


@dataclass
class NamingTemplate:
    """Temel sekmedeki isim/sütun/satır tanımı."""

    name: str
    columns: int = 1
    rows: int = 1


# --- Dengeli parantez kontrolü ---

def _check_balance(pattern: str) -> None:
    stack: list[tuple[str, int]] = []
    for i, char in enumerate(pattern):
        if char in _CLOSERS:
            if stack and stack[-1][0] in "{[":
                raise PatternSyntaxError(
                    f"'{stack[-1][0]}' içinde iç içe '{char}' kullanılamaz", pattern, i
                )
            stack.append((char, i))
        elif char in _CLOSERS.values():
            if not stack:
                raise PatternSyntaxError(f"Eşleşmeyen '{char}'", pattern, i)
            opener, _ = stack.pop()
            if _CLOSERS[opener] != char:
                raise PatternSyntaxError(
                    f"'{opener}' için '{_CLOSERS[opener]}' beklenirken '{char}' bulundu",
                    pattern,
                    i,
                )
    if stack:
        opener, pos = stack[-1]
        raise PatternSyntaxError(f"Kapatılmamış '{opener}'", pattern, pos)


def _split_top_level(text: str, offset: int = 0) -> list[tuple[str, int]]:
    """Metni sadece en dış seviyedeki virgüllerden böler; boş segmentleri atar."""
    segments: list[tuple[str, int]] = []
    depth = 0
    start = 0
    for i, char in enumerate(text + ","):
        if char in _CLOSERS:
            depth += 1
        elif char in _CLOSERS.values():
            depth -= 1
        elif char == "," and depth == 0:
            raw = text[start:i]
            stripped = raw.strip()
            if stripped:
                lead = len(raw) - len(raw.lstrip())
                segments.append((stripped, offset + start + lead))
            start = i + 1
    return segments


# --- Segment ayrıştırma ---

def _parse_template(text: str, pattern: str, offset: int) -> list[Union[str, _Range]]:
    parts: list[Union[str, _Range]] = []
    cursor = 0
    for match in _RANGE_TOKEN.finditer(text):
        if match.start() > cursor:
            parts.append(text[cursor:match.start()])
        letters = match.group(2) is not None
        raw = match.group(2) if letters else match.group(1)
        if not raw.strip().isdecimal() or int(raw) <= 0:
            raise PatternSyntaxError(
                f"Geçersiz adet '{raw}': pozitif bir tam sayı olmalı", pattern, offset + match.start()
            )
        count = int(raw)
        if letters and count > MAX_LETTERS:
            raise CapacityExceededError(
                f"Harf etiketleri en fazla {MAX_LETTERS} olabilir, istenen: {count}",
                limit=MAX_LETTERS,
                requested=count,
            )
        parts.append(_Range(count=count, letters=letters))
        cursor = match.end()
    if cursor < len(text):
        parts.append(text[cursor:])
    return parts


def _find_group_open(text: str) -> int:
    """Sondaki ')' ile eşleşen '(' indeksini bulur."""
    depth = 0
    for i in range(len(text) - 1, -1, -1):
        if text[i] == ")":
            depth += 1
        elif text[i] == "(":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _parse_segment(text: str, pattern: str, offset: int) -> _Segment:
    relative = text.startswith("+")
    if relative:
        text = text[1:]
        offset += 1

    if not text.endswith(")"):
        if "(" in text or ")" in text:
            raise PatternSyntaxError("')' sonrasında beklenmeyen metin", pattern, offset + text.rfind(")") + 1)
        return _Segment(parts=_parse_template(text, pattern, offset), relative=relative)

    open_idx = _find_group_open(text)
    base = text[:open_idx]
    if base.endswith("*"):
        base = base[:-1]
    if "(" in base or ")" in base:
        raise PatternSyntaxError("')' sonrasında beklenmeyen metin", pattern, offset + base.rfind(")") + 1)
    if not base.strip() and not relative:
        raise PatternSyntaxError("Grubun üst lokasyon adı yok", pattern, offset + open_idx)

    inner = text[open_idx + 1:-1]
    children = [
        _parse_segment(child, pattern, child_offset)
        for child, child_offset in _split_top_level(inner, offset + open_idx + 1)
    ]
    return _Segment(
        parts=_parse_template(base.strip(), pattern, offset),
        relative=relative,
        children=children,
    )


def parse_pattern(pattern: str) -> list[_Segment]:
    """Desen metnini segment ağacına ayrıştırır (genişletmeden)."""
    _check_balance(pattern)
    segments = [_parse_segment(text, pattern, pos) for text, pos in _split_top_level(pattern)]
    for segment in segments:
        if segment.relative:
            raise PatternSyntaxError("'+' sadece bir grup içinde kullanılabilir", pattern, 0)
    return segments


# --- Genişletme ---

def _expand_names(parts: list[Union[str, _Range]], prefix: str = "") -> list[str]:
    choices = [[p] if isinstance(p, str) else p.values() for p in parts]
    return [prefix + "".join(combo) for combo in itertools.product(*choices)]


def _expand_segment(segment: _Segment, parent_name: str = "") -> list[LocationNode]:
    prefix = parent_name if segment.relative else ""
    names = _expand_names(segment.parts, prefix)
    if segment.children is None:
        return [LocationNode(name=name) for name in names]

    nodes = []
    for name in names:
        children = [
            child_node
            for child in segment.children
            for child_node in _expand_segment(child, name)
        ]
        nodes.append(LocationNode(name=name, children=children))
    return nodes


def expand(pattern: str) -> list[LocationNode]:
    """Desen metnini sıralı LocationNode ağacına genişletir.

    Raises:
        PatternSyntaxError: Dengesiz veya tanınmayan parantez yapısı.
        CapacityExceededError: 26 harften fazla etiket istendi.
    """
    nodes = [node for segment in parse_pattern(pattern) for node in _expand_segment(segment)]
    logger.debug("Desen genişletildi: %r -> %d kök", pattern, len(nodes))
    return nodes


def walk(nodes: list[LocationNode], depth: int = 0) -> Iterator[tuple[int, LocationNode]]:
    """Ağacı derinlik öncelikli (üretim sırasıyla) dolaşır."""
    for node in nodes:
        yield depth, node
        yield from walk(node.children, depth + 1)


def leaf_names(nodes: list[LocationNode]) -> list[str]:
    """Önizleme için yaprak lokasyon adlarını döndürür."""
    return [node.name for _, node in walk(nodes) if node.is_leaf]


def count_nodes(nodes: list[LocationNode]) -> int:
    return sum(1 for _ in walk(nodes))


# --- Temel sekme <-> gelişmiş desen dönüşümü ---

def pattern_from_templates(templates: list[NamingTemplate]) -> str:
    """İsim/sütun/satır tanımlarından gelişmiş desen metni üretir."""
    patterns = []
    for t in templates:
        name = t.name.strip()
        if not name:
            continue
        if t.columns <= 1 and t.rows <= 1:
            patterns.append(name)
        elif t.rows <= 1:
            patterns.append(f"{name}{{{t.columns}}}")
        elif t.columns <= 1:
            patterns.append(f"{name}[{t.rows}]")
        else:
            patterns.append(f"{name}{{{t.columns}}}-[{t.rows}]")
    return ", ".join(patterns)


def _int_or_one(raw: str) -> int:
    raw = raw.strip()
    return int(raw) if raw.isdecimal() and int(raw) > 0 else 1


def templates_from_pattern(text: str) -> list[NamingTemplate]:
    """Gelişmiş desen metnini mümkün olduğunca temel tanımlara çevirir."""
    templates = []
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        complex_match = _COMPLEX_TEMPLATE.match(part)
        columns_match = _COLUMNS_TEMPLATE.match(part)
        rows_match = _ROWS_TEMPLATE.match(part)
        if complex_match:
            name, columns, rows = complex_match.groups()
            template = NamingTemplate(name, _int_or_one(columns), _int_or_one(rows))
        elif columns_match:
            name, columns = columns_match.groups()
            template = NamingTemplate(name, columns=_int_or_one(columns))
        elif rows_match:
            name, rows = rows_match.groups()
            template = NamingTemplate(name, rows=_int_or_one(rows))
        else:
            template = NamingTemplate(part)
        if template.name.strip():
            template.name = template.name.strip()
            templates.append(template)
    return templates
