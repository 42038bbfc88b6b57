"""
Unit tests for response decoding and the error taxonomy.
"""

import json

import pytest

from binance_client.data.models import Kline, ListenKeyResponse
from binance_client.execution.client_base import list_of
from binance_client.execution.decoder import decode_response
from binance_client.execution.errors import APIError, BinanceError, DecodeError


# =============================================================================
# Success Responses
# =============================================================================

class TestSuccess:
    """2xx responses."""

    def test_raw_json_without_parser(self):
        assert decode_response(200, '{"a": 1}') == {"a": 1}

    def test_parser_applied(self):
        result = decode_response(200, '{"listenKey": "abc123"}', ListenKeyResponse.from_binance)
        assert result == ListenKeyResponse(listen_key="abc123")

    def test_any_2xx_is_success(self):
        assert decode_response(201, "{}") == {}

    def test_invalid_json(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_response(200, "not json")

        assert exc_info.value.text == "not json"
        assert str(exc_info.value).startswith("json parse error: ")

    def test_parser_mismatch(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_response(200, '{"other": 1}', ListenKeyResponse.from_binance)

        assert isinstance(exc_info.value.error, KeyError)
        assert exc_info.value.text == '{"other": 1}'

    def test_short_positional_row(self):
        body = json.dumps([[1, "1"]])

        with pytest.raises(DecodeError) as exc_info:
            decode_response(200, body, list_of(Kline.from_binance))

        assert isinstance(exc_info.value.error, IndexError)
        assert exc_info.value.text == body

    def test_parser_attribute_error(self):
        with pytest.raises(DecodeError):
            decode_response(200, "[1]", lambda value: value.keys())

    def test_deeply_nested_body(self):
        body = "[" * 100000 + "]" * 100000

        with pytest.raises(DecodeError) as exc_info:
            decode_response(200, body)

        assert isinstance(exc_info.value.error, RecursionError)
        assert exc_info.value.text == body

    def test_error_shaped_body_on_200_is_not_an_api_error(self):
        body = '{"code": -1000, "msg": "weird"}'
        assert decode_response(200, body) == {"code": -1000, "msg": "weird"}


# =============================================================================
# Error Responses
# =============================================================================

class TestErrors:
    """Non-2xx responses."""

    def test_binance_error_body(self):
        body = json.dumps({"code": -2011, "msg": "Unknown order sent."})

        with pytest.raises(APIError) as exc_info:
            decode_response(400, body)

        error = exc_info.value
        assert error.code == -2011
        assert error.message == "Unknown order sent."
        assert error.other == {}
        assert str(error) == "code: -2011, msg: Unknown order sent."

    def test_error_body_extra_fields_kept(self):
        body = json.dumps({"code": -1021, "msg": "Timestamp outside recvWindow.", "data": 1})

        with pytest.raises(APIError) as exc_info:
            decode_response(400, body)

        assert exc_info.value.other == {"data": 1}

    def test_empty_body_uses_status(self):
        with pytest.raises(APIError) as exc_info:
            decode_response(502, "")

        assert exc_info.value.code == 502
        assert exc_info.value.message == ""

    def test_html_body_uses_status(self):
        with pytest.raises(APIError) as exc_info:
            decode_response(503, "<html>Service Unavailable</html>")

        assert exc_info.value.code == 503
        assert exc_info.value.message == "<html>Service Unavailable</html>"

    @pytest.mark.parametrize("body", [
        '{"code": "-2011", "msg": "string code"}',
        '{"code": -2011}',
        '{"msg": "no code"}',
        '[1, 2, 3]',
    ])
    def test_body_not_in_error_shape_uses_status(self, body):
        with pytest.raises(APIError) as exc_info:
            decode_response(418, body)

        assert exc_info.value.code == 418
        assert exc_info.value.message == body

    def test_deeply_nested_error_body_uses_status(self):
        body = "[" * 100000 + "]" * 100000

        with pytest.raises(APIError) as exc_info:
            decode_response(500, body)

        assert exc_info.value.code == 500
        assert exc_info.value.message == body

    def test_parser_not_called_on_error(self):
        def parser(value):
            raise AssertionError("parser must not run")

        with pytest.raises(APIError):
            decode_response(400, '{"code": -1, "msg": "x"}', parser)

    def test_errors_share_base(self):
        assert issubclass(APIError, BinanceError)
        assert issubclass(DecodeError, BinanceError)

    def test_from_binance(self):
        error = APIError.from_binance({"code": -1102, "msg": "Mandatory parameter missing."})
        assert (error.code, error.message) == (-1102, "Mandatory parameter missing.")
