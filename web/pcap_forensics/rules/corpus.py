"""
Rule-corpus filter.

The base corpus is a suricata rules file split into blocks by tag lines:

    # ID: sqli-union
    alert http any any -> any any (msg:"UNION SELECT"; ... sid:1000001;)

    # ID: ssh-bruteforce
    alert tcp any any -> any 22 (...)

A block runs from its tag line up to the next tag line or end of file. Lines
before the first tag are an untagged preamble and are never selected.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..dto import RuleBlock

logger = logging.getLogger(__name__)

ID_TAG = "# ID:"


def _tag_of(line: str) -> Optional[str]:
    if line.startswith(ID_TAG):
        return line[len(ID_TAG):].strip()
    return None


def partition_blocks(lines: Sequence[str]) -> List[RuleBlock]:
    """Split corpus lines into RuleBlocks, preserving order."""
    blocks: List[RuleBlock] = []
    current_id: Optional[str] = None
    current: List[str] = []

    for line in lines:
        tag = _tag_of(line)
        if tag is not None:
            if current:
                blocks.append(RuleBlock(rule_id=current_id, lines=tuple(current)))
            current_id, current = tag, [line]
        else:
            current.append(line)

    if current:
        blocks.append(RuleBlock(rule_id=current_id, lines=tuple(current)))
    return blocks


def list_rule_ids(lines: Sequence[str]) -> List[str]:
    """Tags in corpus order."""
    return [b.rule_id for b in partition_blocks(lines) if b.rule_id is not None]


def _trimmed(block: RuleBlock) -> str:
    lines = list(block.lines)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def filter_corpus(corpus: str, selected_ids: Iterable[str]) -> str:
    """
    Keep only the blocks whose tag is in `selected_ids`, in corpus order,
    separated by one blank line. An empty selection returns `corpus` as is.
    Unknown IDs are ignored.
    """
    wanted = {s.strip() for s in selected_ids if s and s.strip()}
    if not wanted:
        return corpus
    kept = [b for b in partition_blocks(corpus.split("\n")) if b.rule_id in wanted]
    return "\n\n".join(_trimmed(b) for b in kept)


def generate_custom_rules(
    all_rules_path: str | os.PathLike,
    custom_rules_path: str | os.PathLike,
    selected_ids: Iterable[str],
) -> int:
    """
    Rewrite `custom_rules_path` from the base corpus and the selection.

    Returns the number of tagged blocks written.
    """
    corpus = Path(all_rules_path).read_text(encoding="utf-8")
    selection = list(selected_ids or [])
    output = filter_corpus(corpus, selection)

    dest = Path(custom_rules_path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(output, encoding="utf-8")

    written = len(list_rule_ids(output.split("\n")))
    if not any(s and s.strip() for s in selection):
        logger.info("Custom rules: using the full corpus (%d blocks)", written)
    else:
        logger.info("Custom rules generated with %d blocks", written)
    return written
