import pytest

from resume_tailor import config, llm_client
from resume_tailor.llm_client import LLMResponse, OpenAIClient, generate_text, get_llm_client


class RecordingClient:
    def __init__(self, reply="  rewritten section \n"):
        self.reply = reply
        self.calls = []

    def chat(self, model, messages):
        self.calls.append((model, messages))
        return LLMResponse(self.reply)


def test_unsupported_provider():
    with pytest.raises(ValueError, match="Unsupported LLM provider"):
        get_llm_client("carrier-pigeon")


def test_openai_client_needs_a_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    with pytest.raises(ValueError, match="API key"):
        OpenAIClient()


def test_generate_text_sends_system_and_user_messages(monkeypatch):
    client = RecordingClient()
    monkeypatch.setattr(llm_client, "_llm_client", client)

    text = generate_text("You are a writer.", "Rewrite this.", model="gpt-4o-mini")

    assert text == "rewritten section"
    model, messages = client.calls[0]
    assert model == "gpt-4o-mini"
    assert messages == [
        {"role": "system", "content": "You are a writer."},
        {"role": "user", "content": "Rewrite this."},
    ]


def test_generate_text_uses_configured_model(monkeypatch):
    client = RecordingClient()
    monkeypatch.setattr(llm_client, "_llm_client", client)
    monkeypatch.setattr(config, "LLM_MODEL", "mistral:7b")

    generate_text("system", "prompt")
    assert client.calls[0][0] == "mistral:7b"


def test_default_model_per_provider(monkeypatch):
    monkeypatch.setattr(config, "LLM_MODEL", None)
    assert config.get_model_for_provider("openai") == "gpt-4o"
    assert config.get_model_for_provider("ollama") == "llama3.1:8b"


def test_provider_errors_propagate(monkeypatch):
    class Broken:
        def chat(self, model, messages):
            raise TimeoutError("no answer")

    monkeypatch.setattr(llm_client, "_llm_client", Broken())
    with pytest.raises(TimeoutError):
        generate_text("system", "prompt", model="gpt-4o")


def test_client_is_built_once(monkeypatch):
    built = []

    def factory(provider=None):
        client = RecordingClient()
        built.append(client)
        return client

    monkeypatch.setattr(llm_client, "_llm_client", None)
    monkeypatch.setattr(llm_client, "get_llm_client", factory)

    llm_client.chat("gpt-4o", [])
    llm_client.chat("gpt-4o", [])
    assert len(built) == 1
    assert len(built[0].calls) == 2


def test_ollama_client_reads_message_attribute(monkeypatch):
    class Message:
        content = "  shorter summary "

    class Response:
        message = Message()

    class FakeOllama:
        def __init__(self, host, timeout):
            self.host = host
            self.timeout = timeout
            self.calls = []

        def chat(self, model, messages):
            self.calls.append((model, messages))
            return Response()

    monkeypatch.setattr(llm_client, "OllamaAPI", FakeOllama)
    client = llm_client.OllamaClient(host="http://ollama:11434", timeout=5)

    rsp = client.chat("llama3.1:8b", [{"role": "user", "content": "hi"}])
    assert rsp.message.content == "  shorter summary "
    assert client.client.host == "http://ollama:11434"
    assert client.client.timeout == 5
