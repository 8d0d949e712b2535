from curl_struct import HttpMethod, ParsedRequest, ParseError
from dataclasses import dataclass, field
from curl_parser import parse
import logging


logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGE = "Error parsing curl command. Please check your input."


@dataclass
class RequestForm:
    """
    Editable copy of the most recent successful parse.

    The form is re-fed the raw command text on every change. A
    command that fails to parse only sets the error message, so
    whatever the user had before stays on the form.
    """
    # RequestForm {{{
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers: dict = field(default_factory=dict)
    body: str = ""
    error: str = None

    def update(self, raw: str) -> None:
        # update {{{
        if raw.strip() == "":
            return  # Nothing typed yet

        result = parse(raw)
        if isinstance(result, ParseError):
            logger.debug("Keeping form fields, %s", result)
            self.error = PARSE_ERROR_MESSAGE
            return

        request = result.to_dict()
        self.method = HttpMethod(request["method"])
        self.url = request["url"]
        self.headers = request["headers"]
        self.body = request["body"]
        self.error = None
        # }}}

    def set_method(self, method: str) -> None:
        # set_method {{{
        name = method.upper()
        if name not in HttpMethod.__members__:
            raise ValueError(f"Unsupported method [{method}]")
        self.method = HttpMethod(name)
        # }}}

    def set_url(self, url: str) -> None:
        self.url = url

    def set_body(self, body: str) -> None:
        self.body = body

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def rename_header(self, old_key: str, new_key: str) -> None:
        """
        Re-keys a header, keeping its value. The renamed
        header moves to the end of the list.
        """
        # rename_header {{{
        value = self.headers.pop(old_key)
        self.headers[new_key] = value
        # }}}

    def add_header(self) -> str:
        """
        Adds a blank header under a placeholder key
        and returns that key
        """
        # add_header {{{
        key = f"header{len(self.headers) + 1}"
        self.headers[key] = ""
        return key
        # }}}

    def to_request(self) -> ParsedRequest:
        # to_request {{{
        return ParsedRequest(
            url=self.url,
            method=self.method,
            headers=self.headers,
            body=self.body
        )
        # }}}
    # }}}
