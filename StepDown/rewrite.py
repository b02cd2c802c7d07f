"""
Text rewrite of the top-level type body.

Members are moved as whole chunks: the member text plus the comments
directly above it. The whitespace in front of each chunk belongs to the
slot, so indentation and blank-line layout stay where they were.
"""
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import List, Tuple

from StepDown.errors import MalformedDeclarationError
from StepDown.syntax.ast_view import CompilationUnitNode, EnumConstantNode, MemberNode
from StepDown.utils import read_source

logger = logging.getLogger(__name__)

EMPTY_GAP_CHARS = " \t\r\n\f;"


def attached_start(source: str, previous_end: int, start: int) -> int:
    """
    Offset where the comments attached to the member at ``start`` begin.

    Stray ``;`` in front of the first comment stay with the slot.
    """
    gap = source[previous_end:start]
    return previous_end + len(gap) - len(gap.lstrip(EMPTY_GAP_CHARS))


def line_break_for(slots: List[Tuple[str, str]], position: int) -> str:
    """
    Whitespace that puts a member on a line of its own, taken from the
    nearest slot around ``position`` that starts on a new line.
    """
    candidates = [ws for ws, _ in reversed(slots[:position])] + [ws for ws, _ in slots[position + 1:]]
    for whitespace in candidates:
        if "\n" in whitespace:
            newline = "\r\n" if "\r\n" in whitespace else "\n"
            return newline + whitespace.rsplit("\n", 1)[1]
    return slots[position][0]


def sortable_members(unit: CompilationUnitNode) -> List[MemberNode]:
    """Members of the top-level body that may move; enum constants stay in front."""
    top = unit.top_level_type
    if top is None:
        return []
    return [m for m in top.members if not isinstance(m, EnumConstantNode)]


def _slots(source: str, members: List[MemberNode], region_start: int) -> List[Tuple[str, str]]:
    slots = []
    previous_end = region_start
    for member in members:
        if member.start < previous_end or member.end < member.start:
            raise MalformedDeclarationError(
                f"Member span [{member.start}, {member.end}) overlaps the previous member", member.kind)
        chunk_start = attached_start(source, previous_end, member.start)
        slots.append((source[previous_end:chunk_start], source[chunk_start:member.end]))
        previous_end = member.end
    return slots


def reorder_members(source: str, unit: CompilationUnitNode, comparator) -> str:
    """
    Sort the members of the top-level type body with ``comparator``.

    ``comparator`` provides ``sort(members)`` (see MemberComparator); the
    sort is stable. The source is returned unchanged when the order is.
    """
    members = sortable_members(unit)
    if len(members) < 2:
        return source
    ordered = comparator.sort(members)
    if [m.index for m in ordered] == [m.index for m in members]:
        return source
    if sorted(m.index for m in ordered) != sorted(m.index for m in members):
        raise MalformedDeclarationError("Member ordering is not a permutation of the members")

    top = unit.top_level_type
    slots = _slots(source, members, top.members_start)
    chunks = {m.index: chunk for m, (_, chunk) in zip(members, slots)}
    parts = [source[:top.members_start]]
    for position, ((whitespace, _), member, original) in enumerate(zip(slots, ordered, members)):
        # a member moved onto a line shared with its neighbour gets its own line
        if member is not original and "\n" not in whitespace:
            whitespace = line_break_for(slots, position)
        parts.append(whitespace)
        parts.append(chunks[member.index])
    parts.append(source[members[-1].end:])
    return "".join(parts)


# -------------------- Working copy --------------------

class WorkingCopy:
    """In-memory buffer of one source file; ``commit`` writes it back atomically."""

    def __init__(self, path: str, dry_run: bool = False):
        self.path = path
        self.dry_run = dry_run
        self.original = read_source(path)
        self.buffer = self.original
        self.committed = False

    @property
    def changed(self) -> bool:
        return self.buffer != self.original

    def commit(self) -> bool:
        if not self.changed:
            return False
        if self.dry_run:
            logger.info(f"[dry run] {self.path} would be rewritten")
            return False
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".stepdown-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(self.buffer)
            shutil.copymode(self.path, tmp_path)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        self.committed = True
        logger.info(f"Rewrote {self.path}")
        return True

    def discard(self):
        self.buffer = self.original


@contextmanager
def working_copy(path: str, dry_run: bool = False):
    """
    Scoped edit of ``path``: read on entry, commit on a clean exit.

    Any exception raised inside the block discards the buffer and leaves
    the file untouched.
    """
    copy = WorkingCopy(path, dry_run)
    try:
        yield copy
    except Exception:
        copy.discard()
        raise
    copy.commit()
