from __future__ import annotations

QUOTE = '"'
DELIMITER = ","


def tokenize(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    A double quote only toggles the quoted state and is never kept, so a
    doubled quote inside a quoted span yields no quote character. Commas inside
    a quoted span are literal. An unterminated quote is not an error; the text
    collected so far becomes the last field.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields
