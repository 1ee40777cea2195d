from __future__ import annotations

from typing import List


def format_block_comment(lines: List[str], indent: str) -> List[str]:
    """Re-indent a ``/* ... */`` or ``/** ... */`` comment.

    The opening line sits at ``indent``; lines starting with ``*`` (the
    closing ``*/`` included) move one column deeper so the stars line up
    under the first ``*`` of the opener. Other text keeps its content.
    """
    out: List[str] = []
    for i, raw in enumerate(lines):
        text = raw.strip()
        if i == 0:
            out.append(indent + text)
        elif not text:
            out.append("")
        elif text.startswith("*"):
            out.append(f"{indent} {text}")
        else:
            out.append(f"{indent}   {text}")
    return out
