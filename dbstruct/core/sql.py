"""
Lexical helpers for statements handed to the database.

These helpers do not parse SQL. They assume that ``LIMIT`` and ``;`` never
appear inside string literals or identifiers, and that ``LIMIT`` arguments are
separated from surrounding words by whitespace. Callers must keep to these
constraints.
"""

import uuid

from dbstruct.core.exceptions import InvalidArgument, MultiStatementNotAllowed

STATEMENT_TERMINATOR = ";"


def normalize_statement(query: str) -> str:
    """
    Trim a statement and drop one trailing terminator.

    Raises:
        InvalidArgument: The statement is empty.
        MultiStatementNotAllowed: A terminator remains after the trailing one.
    """
    query = query.strip()
    if query.endswith(STATEMENT_TERMINATOR):
        query = query[: -len(STATEMENT_TERMINATOR)].rstrip()

    if not query:
        raise InvalidArgument("The query is empty")

    if STATEMENT_TERMINATOR in query:
        raise MultiStatementNotAllowed()

    return query


def _zero_argument(token: str) -> str:
    """Replace a LIMIT argument with 0, keeping any closing parenthesis suffix."""
    i = token.find(")")
    if i < 0:
        return "0"
    return "0" + token[i:]


def limit_zero(query: str) -> str:
    """
    Rewrite a statement so that it returns no rows.

    The first ``LIMIT`` clause gets its row count (and offset, for the
    ``LIMIT offset, count`` form) set to 0. Statements without ``LIMIT`` get
    ``LIMIT 0`` appended. The column shape of the result is unchanged.

    >>> limit_zero("SELECT * FROM t LIMIT 5, 10")
    'SELECT * FROM t LIMIT 0, 0'
    """
    tokens = query.split()

    try:
        i = next(n for n, token in enumerate(tokens) if token.upper() == "LIMIT")
    except StopIteration:
        return f"{query} LIMIT 0"

    if i + 1 >= len(tokens):
        tokens.append("0")
        return " ".join(tokens)

    argument = tokens[i + 1]
    if argument.endswith(",") and i + 2 < len(tokens):
        # LIMIT offset, count
        tokens[i + 1] = "0,"
        tokens[i + 2] = _zero_argument(tokens[i + 2])
    else:
        tokens[i + 1] = _zero_argument(argument)

    return " ".join(tokens)


def quote_identifier(name: str) -> str:
    """Quote a possibly schema-qualified identifier with backticks."""
    return ".".join("`" + part.replace("`", "``") + "`" for part in name.split("."))


def temp_table_name(prefix: str = "temp_") -> str:
    """Random, collision-resistant name for a throwaway table."""
    return prefix + uuid.uuid4().hex
