"""Tree rendering of a process snapshot."""

from dataclasses import dataclass

from pykill.models import DisplayLine, Indent
from pykill.snapshot import Snapshot


@dataclass(slots=True, frozen=True)
class Glyphs:
    """Text drawn for each indentation token. All tokens share one width."""

    blank: str
    vertical: str
    tee: str
    corner: str

    def draw(self, indent: tuple[Indent, ...]) -> str:
        """Draw an indentation prefix."""
        table = {
            Indent.BLANK: self.blank,
            Indent.VERTICAL: self.vertical,
            Indent.TEE: self.tee,
            Indent.CORNER: self.corner,
        }
        return "".join(table[token] for token in indent)


UNICODE_GLYPHS = Glyphs(blank="   ", vertical="│  ", tee="├─ ", corner="└─ ")
ASCII_GLYPHS = Glyphs(blank="   ", vertical="|  ", tee="|- ", corner="`- ")


def render_tree(snapshot: Snapshot) -> list[DisplayLine]:
    """
    Render a snapshot as display lines in pre-order.

    Roots are walked in ascending PID order, children in the order of their
    parent's child list. Each PID is emitted at most once per call, under the
    first parent that draws it, which also stops parent cycles; members of a
    cycle that no root reaches are emitted afterwards as extra roots.
    """
    lines: list[DisplayLine] = []
    shown: set[int] = set()

    for root in snapshot.roots():
        _walk(snapshot, root, shown, lines)
    for pid in snapshot:
        if pid not in shown:
            _walk(snapshot, pid, shown, lines)

    return lines


def _walk(snapshot: Snapshot, root: int, shown: set[int], lines: list[DisplayLine]) -> None:
    if root in shown:
        return
    shown.add(root)
    # Stack entries: (pid, own indentation, indentation inherited by children)
    stack: list[tuple[int, tuple[Indent, ...], tuple[Indent, ...]]] = [(root, (), ())]

    while stack:
        pid, indent, lead = stack.pop()
        record = snapshot[pid]
        lines.append(DisplayLine(pid=pid, state=record.state, name=record.name, indent=indent))

        # Claimed when the parent is drawn, so the corner child is drawn last
        children = [
            child
            for child in dict.fromkeys(record.children)
            if child in snapshot and child not in shown
        ]
        shown.update(children)
        last = len(children) - 1
        # Reversed so the first child is popped first
        for index in range(last, -1, -1):
            if index == last:
                entry = (lead + (Indent.CORNER,), lead + (Indent.BLANK,))
            else:
                entry = (lead + (Indent.TEE,), lead + (Indent.VERTICAL,))
            stack.append((children[index], *entry))


def format_line(line: DisplayLine, glyphs: Glyphs = UNICODE_GLYPHS) -> str:
    """Format a display line as text: mark, PID, state, branches, name."""
    mark = line.mark.glyph if line.mark is not None else " "
    return f"{mark} {line.pid:>7} {line.state_glyph} {glyphs.draw(line.indent)}{line.name}"


def format_lines(lines: list[DisplayLine], glyphs: Glyphs = UNICODE_GLYPHS) -> list[str]:
    """Format every display line."""
    return [format_line(line, glyphs) for line in lines]
