"""
Clue loader from CSV
"""
import csv
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from treasure_hunt.models import Clue
from treasure_hunt.utils import is_plain_number


logger = logging.getLogger(__name__)


def load_clues(csv_path: str) -> Dict[Tuple[Optional[str], int], Clue]:
    """
    Load clues from CSV file

    CSV format:
        position,group,question,answer,clue
        1,A,What is 6 x 7?,42,Look under the big oak tree
        1,B,Capital of France?,Paris,
        2,,Shared question,answer,Check the library

    An empty group column puts the clue in the global pool.

    Args:
        csv_path: Path to CSV file

    Returns:
        Dictionary mapping (group, position) to Clue

    Raises:
        FileNotFoundError: If CSV file not found
        ValueError: If a position is invalid or duplicated, or the file is empty
    """
    path = Path(csv_path)

    if not path.exists():
        raise FileNotFoundError(f"Clue file not found: {csv_path}")

    clues = {}

    with open(path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)

        for line_no, row in enumerate(reader, start=2):
            raw_position = (row.get('position') or '').strip()
            if not is_plain_number(raw_position) or int(raw_position) < 1:
                raise ValueError(f"Line {line_no}: position must be a positive integer, got {raw_position!r}")
            position = int(raw_position)

            group = (row.get('group') or '').strip() or None
            question = (row.get('question') or '').strip()
            answer = (row.get('answer') or '').strip()
            hint = (row.get('clue') or '').strip() or None

            if not question or not answer:
                raise ValueError(f"Line {line_no}: question and answer are required")

            key = (group, position)
            if key in clues:
                raise ValueError(f"Line {line_no}: duplicate clue {position} for group {group or '-'}")

            clues[key] = Clue(
                position=position,
                group_name=group,
                question=question,
                answer=answer,
                clue=hint
            )

    if not clues:
        raise ValueError(f"No clues loaded from {csv_path}")

    logger.info(f"✅ Loaded {len(clues)} clues from {csv_path}")

    return clues
