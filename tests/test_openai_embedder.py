"""Tests du fournisseur OpenAI (client simulé, classification des erreurs)."""

from types import SimpleNamespace
from unittest.mock import Mock

import httpx
import openai
import pytest

from mediaplan.domain.errors import ConfigError, ProviderPermanentError, ProviderTransientError
from mediaplan.infra.embeddings.openai_embedder import (
    AzureOpenAIEmbedder,
    OpenAIEmbedder,
    build_embedder,
    classify_openai_error,
)
from tests.fakes import make_settings

DIM = 3
_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


def _response(*vectors_by_index):
    return SimpleNamespace(
        data=[SimpleNamespace(index=i, embedding=v) for i, v in vectors_by_index]
    )


def _status_error(cls, status):
    return cls("error", response=httpx.Response(status, request=_REQUEST), body=None)


def test_embed_orders_by_index():
    client = Mock()
    client.embeddings.create.return_value = _response((1, [0.0, 1.0, 0.0]), (0, [1.0, 0.0, 0.0]))
    embedder = OpenAIEmbedder(api_key="k", dimensions=DIM, client=client)
    assert embedder.embed(["first", "second"]) == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]


def test_dimension_mismatch_is_permanent():
    client = Mock()
    client.embeddings.create.return_value = _response((0, [1.0, 0.0]))
    embedder = OpenAIEmbedder(api_key="k", dimensions=DIM, client=client)
    with pytest.raises(ProviderPermanentError):
        embedder.embed_one("text")


def test_empty_input_makes_no_call():
    client = Mock()
    embedder = OpenAIEmbedder(api_key="k", dimensions=DIM, client=client)
    with pytest.raises(ProviderPermanentError):
        embedder.embed(["  "])
    client.embeddings.create.assert_not_called()


def test_dimensions_parameter_only_for_v3_models():
    client = Mock()
    client.embeddings.create.return_value = _response((0, [1.0, 0.0, 0.0]))
    OpenAIEmbedder(api_key="k", model="text-embedding-3-small", dimensions=DIM, client=client).embed(
        ["x"]
    )
    assert client.embeddings.create.call_args.kwargs["dimensions"] == DIM
    OpenAIEmbedder(api_key="k", dimensions=DIM, client=client).embed(["x"])
    assert "dimensions" not in client.embeddings.create.call_args.kwargs


def test_sdk_errors_are_classified():
    client = Mock()
    client.embeddings.create.side_effect = openai.APITimeoutError(request=_REQUEST)
    embedder = OpenAIEmbedder(api_key="k", dimensions=DIM, client=client)
    with pytest.raises(ProviderTransientError):
        embedder.embed(["x"])


@pytest.mark.parametrize(
    ("cls", "status", "expected"),
    [
        (openai.RateLimitError, 429, ProviderTransientError),
        (openai.InternalServerError, 503, ProviderTransientError),
        (openai.AuthenticationError, 401, ProviderPermanentError),
        (openai.BadRequestError, 400, ProviderPermanentError),
    ],
)
def test_classify_status_errors(cls, status, expected):
    assert isinstance(classify_openai_error(_status_error(cls, status)), expected)


def test_connection_error_is_transient():
    err = classify_openai_error(openai.APIConnectionError(request=_REQUEST))
    assert err.retryable


def test_build_embedder_requires_credentials():
    with pytest.raises(ConfigError):
        build_embedder(make_settings(OPENAI_API_KEY=None))


def test_build_embedder_selects_provider():
    assert isinstance(build_embedder(make_settings()), OpenAIEmbedder)
    azure = build_embedder(
        make_settings(
            EMBEDDINGS_PROVIDER="azure",
            AZURE_OPENAI_API_KEY="k",
            AZURE_OPENAI_INSTANCE="acme",
            AZURE_OPENAI_DEPLOYMENT="embeddings",
        )
    )
    assert isinstance(azure, AzureOpenAIEmbedder)
    assert azure.model == "embeddings"
