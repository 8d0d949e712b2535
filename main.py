import sys
import json
import shutil
import logging
import argparse
import configparser
from enum import Enum
from pathlib import Path
from curl_form import RequestForm
from curl_struct import ParsedRequest
from dataclasses import dataclass, field
from sender import RequestFailed, response_payload, send_request


TITLE = "curlform"      # For main application

ESC = "\x1b"            # Escape
CSI = f"{ESC}["         # Control Sequence Introducer
RESET = f"{CSI}0m"      # Reset all styles

MIN_WIDTH = 20          # Below this lines are not broken

logger = logging.getLogger(__name__)


class ColorMode(Enum):
    """
    Indicates the structure of the escape equence
    """
    # ColorMode {{{
    Bit4 = "4bit"       # Color immediately after CSI
    Bit8 = "8bit"       # Sequence is as follows: 38:5:{color}
    Bit24 = "24bit"     # RGB color sequence
    # }}}


@dataclass
class Theme:
    # Theme {{{
    text_color:  str
    title_color: str
    error_color: str
    # }}}


DEFAULT_THEMES = {
    ColorMode.Bit4: Theme("37", "36", "31"),
    ColorMode.Bit8: Theme("252", "75", "203"),
    ColorMode.Bit24: Theme("220,220,220", "97,175,239", "224,108,117"),
}


@dataclass
class Arguments:
    # Arguments {{{
    file: str = None
    config_file: str = "curlform.ini"
    method: str = None
    headers: list[str] = field(default_factory=list)
    send: bool = False
    color: bool = True
    debug: bool = False
    color_mode: ColorMode = ColorMode.Bit24
    # }}}


@dataclass
class Settings:
    # Settings {{{
    theme: Theme
    timeout: float = 30.0
    verify: bool = True
    log_level: str = "WARNING"
    # }}}


def main() -> None:
    # main {{{
    args = parse_args()
    try:
        status = run(args)
    except Exception as exception:
        print(exception)
        status = 1
    sys.exit(status)
    # }}}


def run(args: Arguments) -> int:
    """
    Parses the command, applies the overrides given on the command
    line and prints the request. When asked to, sends it and prints
    the response. Returns the exit status.
    """
    # run {{{
    settings = parse_config(args)
    level = logging.DEBUG if args.debug else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    command = read_command(args)
    logger.debug("Read %d characters of command text", len(command))

    form = RequestForm()
    form.update(command)
    if form.error is not None:
        print_lines([form.error], settings.theme.error_color, args)
        return 1

    try:
        apply_overrides(form, args)
    except ValueError as exception:
        print_lines([str(exception)], settings.theme.error_color, args)
        return 1

    width = max(shutil.get_terminal_size().columns - 1, MIN_WIDTH)
    request = form.to_request()

    print_lines([TITLE], settings.theme.title_color, args)
    print_lines(populate_request_definition(request, width),
                settings.theme.text_color, args)

    if not args.send:
        return 0

    try:
        response = send_request(request, timeout=settings.timeout,
                                verify=settings.verify)
    except RequestFailed as exception:
        print_lines(populate_response_error(str(exception), width),
                    settings.theme.error_color, args)
        return 1

    print("")
    print_lines(populate_response(response, width),
                settings.theme.text_color, args)
    return 0
    # }}}


def apply_overrides(form: RequestForm, args: Arguments) -> RequestForm:
    """
    Method and headers given as options win over the
    ones found in the command
    """
    # apply_overrides {{{
    if args.method is not None:
        form.set_method(args.method)

    for header in args.headers:
        if ":" not in header:
            raise ValueError(f"Header [{header}] must be 'Key: Value'")
        key, value = header.split(":", 1)
        form.set_header(key.strip(), value.strip())

    return form
    # }}}


def break_line_width(max_w: int, line: str) -> list[str]:
    """
    This breaks a line into a list of strings based on
    a provided width, indenting the broken peices.
    """
    # break_line_width {{{
    line = str(line)
    if len(line) <= max_w:
        return [line]

    indent = "  "
    step = max_w - len(indent)
    result = [line[:max_w]]

    sample = line[max_w:]
    for offset in range(0, len(sample), step):
        result.append(f"{indent}{sample[offset:offset + step]}")

    return result
    # }}}


def get_foreground(color: str, mode: ColorMode) -> str:
    # get_foreground {{{
    match mode:
        case ColorMode.Bit4:
            prefix = f"{CSI}"
            return f"{prefix}{color}m"
        case ColorMode.Bit8:
            prefix = f"{CSI}38;5;"
            return f"{prefix}{color}m"
        case ColorMode.Bit24:
            r, g, b = color.split(",")
            prefix = f"{CSI}38;2;"
            return f"{prefix}{r};{g};{b}m"
    # }}}


def parse_args(argv: list[str] = None) -> Arguments:
    # parse_args {{{
    description = "Turn a curl command into an editable HTTP request"
    parser = argparse.ArgumentParser(description=description)

    parser.add_argument("-f", "--file",
                        help="Path to a file holding the curl command " +
                        "(defaults to reading stdin)")

    parser.add_argument("-c", "--config",
                        help="Path to config file " +
                        "(defaults to 'curlform.ini')")

    parser.add_argument("-m", "--mode",
                        help="Color style: '4bit', '8bit', or '24bit' " +
                        "(defaults to '24bit')")

    parser.add_argument("-X", "--method",
                        help="Replace the method found in the command")

    parser.add_argument("-H", "--header", action="append", default=[],
                        help="Add or replace a header, as 'Key: Value'")

    parser.add_argument("-s", "--send", action="store_true",
                        help="Send the request and print the response")

    parser.add_argument("-n", "--no-color", action="store_true",
                        help="Print without escape sequences")

    parser.add_argument("-g", "--debug", action="store_true",
                        help=argparse.SUPPRESS)

    args = Arguments()
    parsed_args = parser.parse_args(argv)

    args.file = parsed_args.file

    if parsed_args.config is not None:
        args.config_file = parsed_args.config
    else:
        # Ensure we can run this script with anywhere
        scriptdir = Path(__file__).parent
        args.config_file = Path(scriptdir, "curlform.ini")

    if parsed_args.mode is not None:
        mode = (ColorMode)(parsed_args.mode.lower())
        args.color_mode = mode

    args.method = parsed_args.method
    args.headers = parsed_args.header
    args.send = parsed_args.send
    args.color = not parsed_args.no_color
    args.debug = parsed_args.debug

    return args
    # }}}


def parse_config(args: Arguments) -> Settings:
    """
    Reads the ini file. A missing file, section or
    key falls back to the built in defaults.
    """
    # parse_config {{{
    cp = configparser.ConfigParser()
    cp.read(args.config_file)
    mode = args.color_mode.value
    default = DEFAULT_THEMES[args.color_mode]

    theme = Theme(
        text_color=validate_colors(
            "text_color",
            cp.get(mode, "text_color", fallback=default.text_color),
            args.color_mode
        ),
        title_color=validate_colors(
            "title_color",
            cp.get(mode, "title_color", fallback=default.title_color),
            args.color_mode
        ),
        error_color=validate_colors(
            "error_color",
            cp.get(mode, "error_color", fallback=default.error_color),
            args.color_mode
        )
    )

    return Settings(
        theme=theme,
        timeout=cp.getfloat("request", "timeout", fallback=30.0),
        verify=cp.getboolean("request", "verify", fallback=True),
        log_level=cp.get("logging", "level", fallback="WARNING").upper()
    )
    # }}}


def populate_request_definition(request: ParsedRequest,
                                width: int) -> list[str]:
    """
    Renderable lines of the request about to be sent
    """
    # populate_request_definition {{{
    lines = []
    lines.append(f"Method -> {request.method.value}")
    lines += break_line_width(width, f"URL -> {request.url}")

    if request.headers:
        lines.append("")  # Additional after metadata
        lines.append("Headers:")
        for key, value in request.headers.items():
            lines += break_line_width(width, f"{key}: {value}")

    if request.body != "":
        lines.append("")  # Additional separation after headers
        lines.append("Body:")
        for line in request.body.splitlines():
            lines += break_line_width(width, line)

    return lines
    # }}}


def populate_response(response, width: int) -> list[str]:
    """
    Given a response object, this parses the content
    and creates an array of that content for the
    application to use for rendering.
    """
    # populate_response {{{
    content = []
    content.append(f"Status code -> {response.status_code} " +
                   f"{response.reason}")
    content += break_line_width(width, f"URL -> {response.url}")
    content.append("")
    content.append("Headers:")
    for key, value in response.headers.items():
        content += break_line_width(width, f"{key}: {value}")

    payload = response_payload(response)
    if not isinstance(payload, str):
        payload = json.dumps(payload, indent=2)

    if payload != "":
        content.append("")  # Additional separation after headers
        content.append("Body:")
        for line in payload.splitlines():
            content += break_line_width(width, line)

    return content
    # }}}


def populate_response_error(error: str, width: int) -> list[str]:
    # populate_response_error {{{
    content = []
    for line in error.splitlines():
        content += break_line_width(width, line)
    return content
    # }}}


def print_lines(lines: list[str], color: str, args: Arguments) -> None:
    # print_lines {{{
    if not args.color:
        for line in lines:
            print(line)
        return

    foreground = get_foreground(color, args.color_mode)
    for line in lines:
        print(f"{foreground}{line}{RESET}")
    # }}}


def read_command(args: Arguments) -> str:
    # read_command {{{
    if args.file is None:
        return sys.stdin.read()

    file = Path(args.file)
    if not file.exists():
        raise FileNotFoundError(f"No file [{args.file}] found")
    return file.read_text()
    # }}}


def validate_colors(key: str, color: str, mode: ColorMode) -> str:
    """
    We may be expecting an integer value or an array depending
    on the color mode. This validates the expected format.
    """
    # validate_colors {{{
    if mode == ColorMode.Bit24:
        split = color.split(",")
        if len(split) != 3:
            raise Exception(f"Invalid RGB color format for {key}={color}")
        else:
            return color
    else:
        try:
            int(color)
            return color
        except Exception:
            raise Exception(f"Color must be an integer for {key}={color}")
    # }}}


if __name__ == "__main__":
    main()
