# -------------------------------------
# chunking + tiling
# -------------------------------------
"""
Duplication engine.

A template is cut into Chunks: a fixed prefix followed by an optional list
of variants. Output is the chunk sequence rendered once per slot, each chunk
contributing its prefix and the slot's variant (clamped to the last one).

Variable names are matched as literal substrings, descending name order,
so "*foobar" is consumed before "*foo" can see it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

log = logging.getLogger(__name__)

VariantList = Tuple[str, ...]
VariableTable = Dict[str, VariantList]


@dataclass(frozen=True)
class Chunk:
    prefix: str
    variants: VariantList = ()
    name: str = ""

    def render(self, slot: int) -> str:
        if not self.variants:
            return self.prefix
        return self.prefix + self.variants[min(slot, len(self.variants) - 1)]


def ordered_names(table: Mapping[str, Sequence[str]]) -> List[str]:
    """Names in matching order: descending, so a name sorts before its prefixes."""
    return sorted(table, reverse=True)


def _split_chunk(chunk: Chunk, name: str, variants: VariantList) -> List[Chunk]:
    pieces = chunk.prefix.split(name)
    if len(pieces) == 1:
        return [chunk]
    out = [Chunk(p, variants, name) for p in pieces[:-1]]
    out.append(Chunk(pieces[-1], chunk.variants, chunk.name))
    return out


def split_chunks(template: str, table: Mapping[str, Sequence[str]]) -> List[Chunk]:
    """Cut template text into chunks against every variable in the table."""
    chunks = [Chunk(template)]
    for name in ordered_names(table):
        if not name:
            continue
        variants = tuple(table[name])
        # back to front so fresh chunks are not rescanned for this name
        for i in range(len(chunks) - 1, -1, -1):
            parts = _split_chunk(chunks[i], name, variants)
            if len(parts) > 1:
                chunks[i:i + 1] = parts
    return chunks


def slot_count(chunks: Sequence[Chunk]) -> int:
    return max([1] + [len(c.variants) for c in chunks])


def tile(chunks: Sequence[Chunk]) -> str:
    times = slot_count(chunks)
    return "".join(c.render(i) for i in range(times) for c in chunks)


def duplicate(template: str, table: Mapping[str, Sequence[str]]) -> str:
    """
    Expand template once per slot.

    >>> duplicate("x=*a;", {"*a": ("1", "2")})
    'x=1;x=2;'
    """
    chunks = split_chunks(template, table)
    log.debug("duplicate: %d chunks, %d slots", len(chunks), slot_count(chunks))
    return tile(chunks)


def resolve(text: str, table: Mapping[str, Sequence[str]]) -> str:
    """Substitute already-declared variables inside a value string."""
    chunks = split_chunks(text, table)
    if not any(c.variants for c in chunks):
        return text
    return tile(chunks)


def references(text: str, table: Mapping[str, Sequence[str]]) -> List[str]:
    """Names of the table that a duplication of text would substitute."""
    seen: List[str] = []
    for c in split_chunks(text, table):
        if c.name and c.name not in seen:
            seen.append(c.name)
    return seen
