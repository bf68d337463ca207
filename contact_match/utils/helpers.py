"""Helper utility functions."""

from typing import Optional

GAP = "-"
UNDEFINED = "X"


def matching_to_alignment(
    matching: list[tuple[int, int]],
    length1: int,
    length2: int,
    seq1: Optional[str] = None,
    seq2: Optional[str] = None,
) -> tuple[str, str]:
    """Convert a non-crossing node matching into a pairwise alignment.

    Matched pairs become aligned columns. Unmatched stretches between two
    consecutive matches are aligned position by position as far as both
    allow, and the remainder of the longer stretch is aligned to gaps.
    Positions without a sequence are written as 'X'.

    Args:
        matching: (idx1, idx2) pairs, strictly increasing in both indices.
        length1: Number of positions of the first sequence.
        length2: Number of positions of the second sequence.
        seq1: Optional first sequence (length must equal length1).
        seq2: Optional second sequence (length must equal length2).

    Returns:
        Tuple of (aligned_seq1, aligned_seq2) of equal length.

    Raises:
        ValueError: If a sequence length disagrees or the matching crosses.
    """
    if seq1 is not None and len(seq1) != length1:
        raise ValueError(f"Sequence 1 has length {len(seq1)}, expected {length1}")
    if seq2 is not None and len(seq2) != length2:
        raise ValueError(f"Sequence 2 has length {len(seq2)}, expected {length2}")

    seq1 = seq1 if seq1 is not None else UNDEFINED * length1
    seq2 = seq2 if seq2 is not None else UNDEFINED * length2

    aligned1, aligned2 = [], []

    def fill_between(beg1: int, end1: int, beg2: int, end2: int) -> None:
        len1 = end1 - beg1
        len2 = end2 - beg2
        common = min(len1, len2)
        aligned1.append(seq1[beg1:beg1 + common])
        aligned2.append(seq2[beg2:beg2 + common])
        if len1 > common:
            aligned1.append(seq1[beg1 + common:end1])
            aligned2.append(GAP * (len1 - common))
        elif len2 > common:
            aligned1.append(GAP * (len2 - common))
            aligned2.append(seq2[beg2 + common:end2])

    prev1, prev2 = -1, -1
    for cur1, cur2 in sorted(matching):
        if cur1 <= prev1 or cur2 <= prev2:
            raise ValueError(f"Matching is not non-crossing at ({cur1}, {cur2})")
        if not (0 <= cur1 < length1 and 0 <= cur2 < length2):
            raise ValueError(f"Matched pair ({cur1}, {cur2}) out of range")
        fill_between(prev1 + 1, cur1, prev2 + 1, cur2)
        aligned1.append(seq1[cur1])
        aligned2.append(seq2[cur2])
        prev1, prev2 = cur1, cur2

    fill_between(prev1 + 1, length1, prev2 + 1, length2)

    return "".join(aligned1), "".join(aligned2)


def format_residue_range(residues: list[int]) -> str:
    """Format list of residue numbers as ranges.

    Args:
        residues: List of residue numbers.

    Returns:
        Formatted string like "1-5, 10-15, 20".
    """
    if not residues:
        return ""

    sorted_res = sorted(set(residues))
    ranges = []
    start = sorted_res[0]
    end = sorted_res[0]

    for r in sorted_res[1:]:
        if r == end + 1:
            end = r
        else:
            if start == end:
                ranges.append(str(start))
            else:
                ranges.append(f"{start}-{end}")
            start = end = r

    if start == end:
        ranges.append(str(start))
    else:
        ranges.append(f"{start}-{end}")

    return ", ".join(ranges)
