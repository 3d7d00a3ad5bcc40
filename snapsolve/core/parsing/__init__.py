from snapsolve.core.parsing.answers import answer_parser
from snapsolve.core.parsing.base import ParseOutcome, ResponseParser
from snapsolve.core.parsing.debug import debug_parser
from snapsolve.core.parsing.problem import problem_parser
from snapsolve.core.parsing.questions import extract_options_from_text, question_parser
from snapsolve.core.parsing.solution import normalize_complexity, solution_parser

__all__ = [
    "ParseOutcome",
    "ResponseParser",
    "answer_parser",
    "debug_parser",
    "extract_options_from_text",
    "normalize_complexity",
    "problem_parser",
    "question_parser",
    "solution_parser",
]
