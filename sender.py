from curl_struct import HttpMethod, ParsedRequest
import requests
import logging


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RequestFailed(Exception):
    """
    The derived request could not be sent, or the
    server answered with a non-2xx status
    """
    pass


def send_request(request: ParsedRequest, timeout: float = DEFAULT_TIMEOUT,
                 verify: bool = True) -> requests.Response:
    """
    Sends exactly one request and waits for it. The body is only
    attached to requests that are not a GET.
    """
    # send_request {{{
    if request.url.strip() == "":
        raise RequestFailed("URL is required")

    data = None
    if request.method != HttpMethod.GET and request.body != "":
        data = request.body.encode("utf-8")

    logger.info("Sending %s %s", request.method.value, request.url)
    try:
        response = requests.request(
            request.method.value, request.url,
            headers=dict(request.headers), data=data,
            timeout=timeout, verify=verify)
    except requests.RequestException as exception:
        logger.warning("Request to %s failed: %s", request.url, exception)
        raise RequestFailed(f"Error sending request: {exception}") \
            from exception

    if not 200 <= response.status_code < 300:
        logger.warning("Request to %s answered %s", request.url,
                       response.status_code)
        raise RequestFailed(
            f"Error sending request: {response.status_code} {response.reason}"
        )

    logger.info("Request to %s answered %s", request.url,
                response.status_code)
    return response
    # }}}


def response_payload(response: requests.Response) -> object:
    """
    JSON responses are decoded, anything else is returned as text
    """
    # response_payload {{{
    content_type = response.headers.get("Content-Type")
    if content_type is not None and "application/json" in content_type:
        return response.json()
    return response.text
    # }}}
