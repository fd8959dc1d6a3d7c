from typing import List, Optional

OPTION_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

def resolve_option_index(options: List[str], answer: str) -> Optional[int]:
    """
    Find the option an answer refers to

    An answer names an option either by its letter ("A" is the first option)
    or by the option's exact text. Blank options never match.

    Returns:
        Index into ``options``, or None when the answer matches nothing
    """
    answer = (answer or "").strip()
    if not answer:
        return None

    if len(answer) == 1 and answer.upper() in OPTION_LETTERS:
        index = OPTION_LETTERS.index(answer.upper())
        if index < len(options) and options[index].strip():
            return index

    for index, option in enumerate(options):
        if option.strip() and option.strip() == answer:
            return index
    return None

def is_correct_answer(options: List[str], correct_answer: str, answer: str) -> bool:
    given = resolve_option_index(options, answer)
    return given is not None and given == resolve_option_index(options, correct_answer)
