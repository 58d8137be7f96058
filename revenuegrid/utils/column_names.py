import re
from typing import Iterable


LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

_column_name_pattern = re.compile(r"^[A-Z]+$")


def is_column_name(label: str) -> bool:
    return bool(_column_name_pattern.match(label))


def column_index(name: str) -> int:
    """Zero based index of a spreadsheet column name ("A" -> 0, "AA" -> 26)"""
    if not is_column_name(name):
        raise ValueError(f"'{name}' is not a spreadsheet column name")

    index = 0

    for letter in name:
        index = index * 26 + LETTERS.index(letter) + 1

    return index - 1


def column_name(index: int) -> str:
    """Spreadsheet column name for a zero based index (0 -> "A", 26 -> "AA")"""
    if index < 0:
        raise ValueError(f"Column index can not be negative, got {index}")

    letters = []
    index += 1

    # NOTE: bijective base-26, there is no zero digit
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters.append(LETTERS[remainder])

    return "".join(reversed(letters))


def next_column_name(name: str) -> str:
    # Z -> AA, AZ -> BA, ZZ -> AAA
    return column_name(column_index(name) + 1)


def generate_column_name(existing: Iterable[str]) -> str:
    existing = list(existing)

    if len(existing) == 0:
        return "A"

    last = existing[-1]

    # NOTE: labels like "Dec" do not belong to the letter sequence, start over at "A"
    candidate = next_column_name(last) if is_column_name(last) else "A"

    taken = set(existing)

    while candidate in taken:
        candidate = next_column_name(candidate)

    return candidate
