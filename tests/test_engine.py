import logging

import pytest
from openai import AsyncAzureOpenAI
from pydantic import ValidationError

from commit_pilot.engine import (
    DEFAULT_MODEL,
    EngineConfig,
    Provider,
    resolve_engine_config,
)
from commit_pilot.errors import ConfigurationError


def test_azure_with_base_path_appends_deployment_segment():
    config = resolve_engine_config(
        "azure", "sk-azure", "https://x.example/", "2023-05-15", model="gpt-4"
    )

    assert config.provider is Provider.AZURE
    assert config.base_url == "https://x.example/openai/deployments/gpt-4"
    assert config.headers == {"api-key": "sk-azure"}
    assert config.query == {"api-version": "2023-05-15"}
    assert config.azure_api_version == "2023-05-15"


def test_azure_without_base_path_keeps_default_root():
    config = resolve_engine_config("azure", "sk-azure", None, "2023-05-15", model="gpt-4")

    assert config.base_url is None
    assert config.headers == {"api-key": "sk-azure"}
    assert config.query == {"api-version": "2023-05-15"}


def test_model_defaults_when_not_given():
    config = resolve_engine_config("openai", "sk-test")

    assert config.model == DEFAULT_MODEL


def test_azure_requires_api_version():
    with pytest.raises(ConfigurationError):
        resolve_engine_config("azure", "sk-azure", "https://x.example/", model="gpt-4")


def test_openai_uses_base_path_verbatim():
    config = resolve_engine_config(
        "openai", "sk-test", "https://proxy.example/v1", "2023-05-15", model="gpt-4"
    )

    assert config.provider is Provider.OPENAI
    assert config.base_url == "https://proxy.example/v1"
    assert config.headers == {}
    assert config.query == {}
    assert config.azure_api_version is None


def test_openai_without_base_path():
    config = resolve_engine_config(Provider.OPENAI, "sk-test", model="gpt-4")

    assert config.base_url is None


def test_unknown_provider_falls_back_to_openai(caplog):
    caplog.set_level(logging.WARNING, logger="commit_pilot.engine")

    config = resolve_engine_config(
        "ollama", "sk-test", "https://local.example/", model="llama3"
    )

    assert config.provider is Provider.OPENAI
    assert config.base_url == "https://local.example/"
    assert any("ollama" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, Provider.OPENAI),
        ("", Provider.OPENAI),
        ("openai", Provider.OPENAI),
        (" AZURE ", Provider.AZURE),
        (Provider.AZURE, Provider.AZURE),
        ("something-else", Provider.OPENAI),
    ],
)
def test_provider_parse(value, expected):
    assert Provider.parse(value) is expected


def test_engine_config_is_immutable():
    config = resolve_engine_config("openai", "sk-test", model="gpt-4")

    with pytest.raises(ValidationError):
        config.model = "gpt-4o"


def test_api_key_is_not_leaked_in_repr():
    config = resolve_engine_config("openai", "sk-secret-value", model="gpt-4")

    assert "sk-secret-value" not in repr(config)
    assert config.api_key.get_secret_value() == "sk-secret-value"


def test_build_client_disables_retries_and_sets_base_url():
    config = resolve_engine_config(
        "azure", "sk-azure", "https://x.example/", "2023-05-15", model="gpt-4"
    )

    client = config.build_client()

    assert client.max_retries == 0
    assert str(client.base_url).startswith("https://x.example/openai/deployments/gpt-4")
    assert client.api_key == "sk-azure"


def test_build_client_uses_azure_client_for_azure():
    config = resolve_engine_config(
        "azure", "sk-azure", "https://x.example/", "2023-05-15", model="gpt-4"
    )

    assert isinstance(config.build_client(), AsyncAzureOpenAI)
    assert not isinstance(
        resolve_engine_config("openai", "sk-test").build_client(), AsyncAzureOpenAI
    )


def test_engine_config_fields_have_no_network_side_effects():
    # Construction alone is pure data.
    config = EngineConfig(provider=Provider.OPENAI, api_key="k", model="m")

    assert config.headers == {}
    assert config.query == {}
