from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.genai import errors as genai_errors

from gemini_service import GENERATION_PROFILES, GeminiModelClient, ModelCallError, ModelImage


def make_client():
    client = GeminiModelClient(None)
    client._client = MagicMock()
    return client


def api_error(code, status):
    return genai_errors.APIError(code, {"error": {"code": code, "message": "upstream said no", "status": status}})


def test_unconfigured_client_fails_fast():
    client = GeminiModelClient(None)
    assert client.configured is False
    with pytest.raises(ModelCallError) as excinfo:
        client.generate("hello")
    assert excinfo.value.transient is False


def test_generate_uses_profile_for_use_case():
    client = make_client()
    client._client.models.generate_content.return_value = SimpleNamespace(text="hi there")

    assert client.generate("prompt", use_case="chat") == "hi there"
    kwargs = client._client.models.generate_content.call_args.kwargs
    assert kwargs["contents"] == ["prompt"]
    assert kwargs["config"].temperature == GENERATION_PROFILES["chat"].temperature
    assert kwargs["config"].max_output_tokens == 512


def test_generate_attaches_image():
    client = make_client()
    client._client.models.generate_content.return_value = SimpleNamespace(text="{}")
    client.generate("prompt", image=ModelImage(data=b"\xff\xd8", mime_type="image/jpeg"))
    contents = client._client.models.generate_content.call_args.kwargs["contents"]
    assert len(contents) == 2


def test_missing_text_becomes_empty_string():
    client = make_client()
    client._client.models.generate_content.return_value = SimpleNamespace(text=None)
    assert client.generate("prompt") == ""


@pytest.mark.parametrize("code, status, transient", [
    (503, "UNAVAILABLE", True),
    (429, "RESOURCE_EXHAUSTED", True),
    (400, "INVALID_ARGUMENT", False),
    (403, "PERMISSION_DENIED", False),
])
def test_api_errors_are_tagged(code, status, transient):
    client = make_client()
    client._client.models.generate_content.side_effect = api_error(code, status)
    with pytest.raises(ModelCallError) as excinfo:
        client.generate("prompt")
    assert excinfo.value.transient is transient
