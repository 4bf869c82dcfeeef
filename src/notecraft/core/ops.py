"""Compose position-addressed edits against one content snapshot."""

import difflib
from collections.abc import Iterable

from .model import OpType, PatchOp


def _order_key(indexed: tuple[int, PatchOp]) -> tuple[int, int, int]:
    index, op = indexed
    end = op.end if op.end is not None else op.start
    return (op.start, end, index)


def apply_ops(content: str, ops: Iterable[PatchOp]) -> str:
    """
    Apply patch operations to a string.

    Operations are applied from the highest offset to the lowest so that an
    edit never shifts the offsets of edits still waiting to be applied. All
    ops must be computed against the same unmodified snapshot; overlapping
    ops are not reconciled.

    Ties on ``start`` are broken so the output is stable by input index:
    ranged ops (delete/replace) are applied before inserts at the same
    offset, and inserts sharing an offset end up in their input order.

    Args:
        content: The snapshot the ops were computed against
        ops: Operations in any order

    Returns:
        The patched content. An empty ``ops`` returns ``content`` unchanged.
    """
    ordered = sorted(enumerate(ops), key=_order_key, reverse=True)

    result = content
    for _index, op in ordered:
        if op.type is OpType.INSERT:
            result = result[: op.start] + (op.text or "") + result[op.start :]
        elif op.type is OpType.DELETE:
            # Missing end makes a delete a no-op
            end = op.end if op.end is not None else op.start
            result = result[: op.start] + result[end:]
        elif op.type is OpType.REPLACE:
            end = op.end if op.end is not None else op.start
            result = result[: op.start] + (op.text or "") + result[end:]

    return result


def diff_ops(old: str, new: str) -> list[PatchOp]:
    """
    Derive a line-granular edit script turning ``old`` into ``new``.

    Offsets are character offsets into ``old``, so the result can be fed
    straight to :func:`apply_ops` against the same snapshot.
    """
    if old == new:
        return []

    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)

    # Character offset of each line start in old, plus the end sentinel
    offsets = [0]
    for line in old_lines:
        offsets.append(offsets[-1] + len(line))

    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    ops: list[PatchOp] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        start, end = offsets[i1], offsets[i2]
        text = "".join(new_lines[j1:j2])
        if tag == "insert":
            ops.append(PatchOp.insert(start, text))
        elif tag == "delete":
            ops.append(PatchOp.delete(start, end))
        else:
            ops.append(PatchOp.replace(start, end, text))
    return ops
