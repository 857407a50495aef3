from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import IngestionError, IngestionErrorKind
from perplexity_client import analyze_paper_url


def _mock_resp(body: dict) -> MagicMock:
    mock = MagicMock()
    mock.json.return_value = body
    return mock


def _body(content: str | None, finish_reason: str = "stop") -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": finish_reason}]}


def test_analyze_paper_url_returns_raw_content() -> None:
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", return_value=_mock_resp(_body('{"title": "A"}'))) as mock_post:
        text = analyze_paper_url("https://arxiv.org/abs/1706.03762")

    assert text == '{"title": "A"}'
    payload = mock_post.call_args.kwargs["json"]
    user_message = payload["messages"][-1]["content"]
    assert "https://arxiv.org/abs/1706.03762" in user_message
    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"


def test_analyze_paper_url_requires_api_key() -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(IngestionError, match="PERPLEXITY_API_KEY") as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.SERVICE_FAILURE


def test_network_failure_is_service_failure() -> None:
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", side_effect=requests.Timeout("read timed out")):
        with pytest.raises(IngestionError) as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.SERVICE_FAILURE
    assert "timed out" in exc_info.value.message


def test_http_error_is_service_failure() -> None:
    response = _mock_resp({})
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", return_value=response):
        with pytest.raises(IngestionError) as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.SERVICE_FAILURE


def test_empty_content_is_empty_response() -> None:
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", return_value=_mock_resp(_body(""))):
        with pytest.raises(IngestionError) as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.EMPTY_RESPONSE


def test_content_filter_is_blocked_and_suggests_pdf() -> None:
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", return_value=_mock_resp(_body(None, "content_filter"))):
        with pytest.raises(IngestionError) as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.SERVICE_BLOCKED
    assert "PDF upload" in exc_info.value.message


def test_unexpected_shape_is_service_failure() -> None:
    with patch.dict("os.environ", {"PERPLEXITY_API_KEY": "test-key"}), \
         patch("perplexity_client.requests.post", return_value=_mock_resp({"error": "nope"})):
        with pytest.raises(IngestionError, match="Unexpected Perplexity response shape") as exc_info:
            analyze_paper_url("https://arxiv.org/abs/1706.03762")
    assert exc_info.value.kind is IngestionErrorKind.SERVICE_FAILURE
