from curl_struct import (
    Dialect, HttpMethod, ParsedRequest, ParseError, ParseErrorKind
)
import logging
import re


logger = logging.getLogger(__name__)

MISSING_URL_MESSAGE = "Unable to parse URL from curl command"

# Stage 1 (order matters, carets first)
CARET_CONTINUATION = re.compile(r"\s*\^[ \t]*(?:\r?\n|$)\s*")
BASH_CONTINUATION = re.compile(r"\\\s*\n")
NEWLINE = re.compile(r"\r?\n")

# Quoted argument of -H and -d
BASH_QUOTED = r"'([^']+)'"
CMD_QUOTED = r"""(?:'([^']+)'|\^?"(.+?)\^?"(?=\s|$))"""

METHOD_FLAG = re.compile(r"-X\s+(\w+)")

HEADER_FLAG = {
    Dialect.Bash: re.compile(r"-H\s+" + BASH_QUOTED),
    Dialect.WindowsCmd: re.compile(r"-H\s+" + CMD_QUOTED),
}

BODY_FLAG = {
    Dialect.Bash: re.compile(r"-d\s+" + BASH_QUOTED),
    Dialect.WindowsCmd: re.compile(r"-d\s+" + CMD_QUOTED),
}

# Recognized options with their argument, skipped when looking for the URL
OPTION_ARGUMENT = re.compile(
    r"""(?<!\S)-[XHd]\s+(?:'[^']*'|\^?".*?\^?"(?=\s|$)|[^\s"']+)"""
)
URL_TOKEN = re.compile(
    r"""curl(?:\s+-\S+)*\s+(?:\^?"|')?([^-"'\s^][^"'\s^]*)"""
)

HEADER_SEPARATOR = re.compile(r":\s*")


def parse(raw: str) -> ParsedRequest | ParseError:
    """
    Primary function to translate a curl command, written for bash
    or for Windows CMD, into a request description.

    Never raises for string input: a command without a URL comes
    back as a ParseError, every other missing piece falls back to
    its default (GET, no headers, empty body).
    """
    # parse {{{
    dialect = detect_dialect(raw)
    cleaned = normalize(raw)
    logger.debug("Parsing %s command: %r", dialect.value, cleaned)

    url = _extract_url(cleaned)
    if url is None:
        logger.debug("No URL found in command")
        return ParseError(ParseErrorKind.MissingUrl, MISSING_URL_MESSAGE)

    return ParsedRequest(
        url=url,
        method=_extract_method(cleaned),
        headers=_extract_headers(cleaned, dialect),
        body=_extract_body(cleaned, dialect)
    )
    # }}}


def detect_dialect(raw: str) -> Dialect:
    """
    Any caret at all means Windows CMD. A literal caret in a bash
    URL or header will be misread as CMD.
    """
    # detect_dialect {{{
    if "^" in raw:
        return Dialect.WindowsCmd
    return Dialect.Bash
    # }}}


def normalize(raw: str) -> str:
    """
    Collapses line continuations and line breaks so that the
    command can be scanned as one logical line. Carets that do not
    end a line are escapes and are left for the header stage.
    """
    # normalize {{{
    cleaned = CARET_CONTINUATION.sub(" ", raw)
    cleaned = BASH_CONTINUATION.sub(" ", cleaned)
    cleaned = NEWLINE.sub(" ", cleaned)
    return cleaned
    # }}}


def to_command(request: ParsedRequest,
               dialect: Dialect = Dialect.Bash) -> str:
    """
    Writes a request back out as curl command text, in the form
    parse reads back into the same request. Bash output is a single
    line, CMD output puts each option on its own continued line.
    """
    # to_command {{{
    options = [f"-X {request.method.value}"]

    for key, value in request.headers.items():
        if dialect == Dialect.Bash:
            value = value.replace('"', '\\"')
        options.append(f"-H '{key}: {value}'")

    if request.body != "":
        options.append(f"-d '{request.body}'")

    if dialect == Dialect.Bash:
        return " ".join([f"curl '{request.url}'"] + options)

    separator = " ^\n  "
    return separator.join([f"curl '{request.url}'"] + options)
    # }}}


def _argument(match: re.Match) -> str:
    # _argument {{{
    return next(group for group in match.groups() if group is not None)
    # }}}


def _extract_body(cleaned: str, dialect: Dialect) -> str:
    """
    First -d only, taken literally
    """
    # _extract_body {{{
    match = BODY_FLAG[dialect].search(cleaned)
    if match is None:
        return ""
    return _argument(match)
    # }}}


def _extract_headers(cleaned: str, dialect: Dialect) -> dict:
    """
    Every -H of the command. Later headers overwrite
    earlier headers with the same key.
    """
    # _extract_headers {{{
    headers = {}
    for match in HEADER_FLAG[dialect].finditer(cleaned):
        key, value = _split_header(_argument(match))
        value = _unescape(value, dialect)

        if value.startswith('"') and value.endswith('"'):
            value = value[1:-1]

        headers[key] = value
    return headers
    # }}}


def _extract_method(cleaned: str) -> HttpMethod:
    """
    Anything outside of the known methods is a GET
    """
    # _extract_method {{{
    match = METHOD_FLAG.search(cleaned)
    if match is None:
        return HttpMethod.GET

    method = match.group(1).upper()
    if method in HttpMethod.__members__:
        return HttpMethod(method)
    return HttpMethod.GET
    # }}}


def _extract_url(cleaned: str) -> str | None:
    """
    Responsible for the bare URL token after curl. Options that
    come before it, along with their arguments, are skipped.
    """
    # _extract_url {{{
    remainder = OPTION_ARGUMENT.sub(" ", cleaned)
    match = URL_TOKEN.search(remainder)
    if match is None:
        return None
    return match.group(1)
    # }}}


def _split_header(content: str) -> tuple[str, str]:
    """
    The first colon ends the key. Any later colons in the value
    come back joined by ": ", so "12:30" reads as "12: 30".
    """
    # _split_header {{{
    split = HEADER_SEPARATOR.split(content)
    key = split[0]
    value = ": ".join(split[1:]).strip()
    return (key, value)
    # }}}


def _unescape(value: str, dialect: Dialect) -> str:
    # _unescape {{{
    if dialect == Dialect.WindowsCmd:
        return value.replace('^^"', '"').replace('^"', '"')
    return value.replace('\\"', '"')
    # }}}


if __name__ == "__main__":
    """
    Easily peek into the parsing
    result of a given command file
    """
    import argparse
    import sys

    description = "Test parsing of provided curl command"
    parser = argparse.ArgumentParser(description=description)

    parser.add_argument("file", nargs="?",
                        help="File holding the command (defaults to stdin)")
    arguments = parser.parse_args()

    if arguments.file is not None:
        with open(arguments.file) as o_file:
            command = o_file.read()
    else:
        command = sys.stdin.read()

    print(parse(command))
