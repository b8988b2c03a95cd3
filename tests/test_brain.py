"""Tests for the AI brains and the refresh heuristic."""

import json

import pytest
from unittest.mock import MagicMock

from brain import BrainError, EdgeFunctionBrain, ProviderBrain, get_brain, should_refresh
from contracts import AiConfig, AiMode, ChatRole
from providers.base import LLMResponse
from store import InMemoryStore


class TestShouldRefresh:
    """Keyword scan over AI replies."""

    @pytest.mark.parametrize("text", [
        "Tarea creada",
        "Proyecto ACTUALIZADO... digo, actualizada",
        "Operación realizada con Éxito",
        "Registro eliminada",
        "confirmado",
    ])
    def test_positive(self, text):
        assert should_refresh(text)

    def test_negative(self):
        assert not should_refresh("Hola, ¿en qué te ayudo?")

    def test_custom_keywords(self):
        assert should_refresh("listo", keywords=["LISTO"])


class TestEdgeFunctionBrain:
    """Tests for the hosted edge function brain."""

    def test_invokes_function_with_body(self):
        client = MagicMock()
        client.functions.invoke.return_value = json.dumps({"response": "Tarea creada"}).encode()
        brain = EdgeFunctionBrain(client=client, function_name="ai-brain")

        assert brain.invoke("crea algo", "s1", "u1") == "Tarea creada"
        client.functions.invoke.assert_called_once_with(
            "ai-brain",
            invoke_options={"body": {"message": "crea algo", "session_id": "s1", "user_id": "u1"}},
        )

    def test_accepts_dict_payload(self):
        client = MagicMock()
        client.functions.invoke.return_value = {"response": " Hola "}
        assert EdgeFunctionBrain(client=client).invoke("hola", "s1", None) == "Hola"

    def test_empty_response(self):
        client = MagicMock()
        client.functions.invoke.return_value = b'{"response": ""}'
        with pytest.raises(BrainError):
            EdgeFunctionBrain(client=client).invoke("hola", "s1", "u1")

    def test_error_payload(self):
        client = MagicMock()
        client.functions.invoke.return_value = {"error": "invalid api key"}
        with pytest.raises(BrainError, match="invalid api key"):
            EdgeFunctionBrain(client=client).invoke("hola", "s1", "u1")

    def test_transport_failure(self):
        client = MagicMock()
        client.functions.invoke.side_effect = RuntimeError("502 Bad Gateway")
        with pytest.raises(BrainError, match="502"):
            EdgeFunctionBrain(client=client).invoke("hola", "s1", "u1")


class TestProviderBrain:
    """Tests for the local LLM brain."""

    @pytest.fixture
    def store(self):
        store = InMemoryStore()
        store.add_project("Alpha")
        store.append_chat_history("s1", ChatRole.USER, "primera")
        store.append_chat_history("s1", ChatRole.ASSISTANT, "respuesta")
        store.append_chat_history("s1", ChatRole.USER, "segunda")
        return store

    @pytest.fixture
    def provider(self):
        provider = MagicMock()
        provider.complete.return_value = LLMResponse(
            content="Listo.", input_tokens=10, output_tokens=2, model="gpt-4o-mini", provider="litellm"
        )
        return provider

    def test_sends_history_without_current_message(self, store, provider):
        brain = ProviderBrain(store, provider=provider, history_turns=10)
        assert brain.invoke("segunda", "s1", "u1") == "Listo."

        kwargs = provider.complete.call_args[1]
        assert kwargs["user_message"] == "segunda"
        assert kwargs["history"] == [
            {"role": "user", "content": "primera"},
            {"role": "assistant", "content": "respuesta"},
        ]
        assert "Alpha" in kwargs["system_prompt"]

    def test_history_window(self, store, provider):
        ProviderBrain(store, provider=provider, history_turns=1).invoke("segunda", "s1", "u1")
        assert provider.complete.call_args[1]["history"] == [{"role": "assistant", "content": "respuesta"}]

    def test_no_history(self, store, provider):
        ProviderBrain(store, provider=provider, history_turns=0).invoke("segunda", "s1", "u1")
        assert provider.complete.call_args[1]["history"] == []

    def test_llm_failure(self, store, provider):
        provider.complete.side_effect = Exception("AuthenticationError")
        with pytest.raises(BrainError, match="AuthenticationError"):
            ProviderBrain(store, provider=provider).invoke("hola", "s1", "u1")

    def test_empty_completion(self, store, provider):
        provider.complete.return_value = LLMResponse(
            content="  ", input_tokens=1, output_tokens=0, model="m", provider="litellm"
        )
        with pytest.raises(BrainError):
            ProviderBrain(store, provider=provider).invoke("hola", "s1", "u1")

    def test_store_failure(self, provider):
        store = InMemoryStore(fail_on={"read_chat_history": "db down"})
        with pytest.raises(BrainError, match="db down"):
            ProviderBrain(store, provider=provider).invoke("hola", "s1", "u1")

    def test_provider_built_from_user_config(self, store, monkeypatch):
        built = {}

        def fake_get_provider(provider_name, model, api_key=None, metadata=None):
            built.update(provider_name=provider_name, model=model, api_key=api_key, metadata=metadata)
            fake = MagicMock()
            fake.complete.return_value = LLMResponse(
                content="ok", input_tokens=1, output_tokens=1, model=model, provider="litellm"
            )
            return fake

        monkeypatch.setattr("brain.provider_brain.get_provider", fake_get_provider)
        config = AiConfig(mode=AiMode.AI, api_key="sk-user", model_name="gpt-4o")
        assert ProviderBrain(store).invoke("hola", "s1", "u1", config=config) == "ok"
        assert built["model"] == "gpt-4o"
        assert built["api_key"] == "sk-user"
        assert built["metadata"] == {"session_id": "s1", "user_id": "u1"}


class TestGetBrain:
    """Tests for the brain factory."""

    def test_edge_function(self):
        assert isinstance(get_brain("edge_function"), EdgeFunctionBrain)

    def test_provider_needs_store(self):
        with pytest.raises(ValueError):
            get_brain("provider")
        assert isinstance(get_brain("provider", store=InMemoryStore()), ProviderBrain)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown brain backend"):
            get_brain("oracle")
