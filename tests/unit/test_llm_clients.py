"""Unit tests for the model-service clients and backend selection."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from funcall_server.capabilities import CapabilityRegistry, ToolCatalog
from funcall_server.config import FuncallServerSettings
from funcall_server.dispatch import FAILURE_REPLY, DispatchLoop
from funcall_server.errors import ModelServiceError
from funcall_server.llm import (
    AssistantMessage,
    OllamaModelClient,
    OpenAIModelClient,
    SystemMessage,
    ToolCallRequest,
    ToolResultMessage,
    UserMessage,
    available_backends,
    create_model_client,
)
from funcall_server.llm.ollama_client import convert_messages_to_ollama_format
from funcall_server.llm.openai_client import convert_messages_to_openai_format

TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "get_stock_price",
            "description": "Get the current stock price",
            "parameters": {
                "type": "object",
                "properties": {"ticker": {"type": "string", "description": "Ticker"}},
                "required": ["ticker"],
            },
        },
    }
]

HISTORY = [
    SystemMessage(content="Be brief."),
    UserMessage(content="AAPL?"),
    AssistantMessage(
        content="",
        tool_calls=[ToolCallRequest(id="call_1", name="get_stock_price", arguments='{"ticker": "AAPL"}')],
    ),
    ToolResultMessage(tool_call_id="call_1", name="get_stock_price", content="Stock price for AAPL: $150.00"),
]


def _openai_completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def mock_openai():
    """Patch openai.AsyncOpenAI and return the mock instance."""
    with patch("funcall_server.llm.openai_client.openai.AsyncOpenAI") as mock_class:
        instance = MagicMock()
        instance.chat.completions.create = AsyncMock()
        instance.models.list = AsyncMock()
        instance.close = AsyncMock()
        mock_class.return_value = instance
        yield instance


@pytest.fixture
def mock_ollama():
    """Patch ollama.AsyncClient and return the mock instance."""
    with patch("funcall_server.llm.ollama_client.ollama.AsyncClient") as mock_class:
        instance = MagicMock()
        instance.chat = AsyncMock()
        instance.list = AsyncMock()
        mock_class.return_value = instance
        yield instance


class TestMessageConversion:
    def test_openai_format(self):
        converted = convert_messages_to_openai_format(HISTORY)

        assert converted[0] == {"role": "system", "content": "Be brief."}
        assert converted[1] == {"role": "user", "content": "AAPL?"}
        assert converted[2] == {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": "call_1",
                    "type": "function",
                    "function": {"name": "get_stock_price", "arguments": '{"ticker": "AAPL"}'},
                }
            ],
        }
        assert converted[3] == {
            "role": "tool",
            "tool_call_id": "call_1",
            "content": "Stock price for AAPL: $150.00",
        }

    def test_ollama_format_decodes_arguments(self):
        converted = convert_messages_to_ollama_format(HISTORY)

        assert converted[2]["tool_calls"] == [
            {"function": {"name": "get_stock_price", "arguments": {"ticker": "AAPL"}}}
        ]
        assert converted[3] == {
            "role": "tool",
            "content": "Stock price for AAPL: $150.00",
            "tool_name": "get_stock_price",
        }

    def test_ollama_format_tolerates_bad_arguments(self):
        message = AssistantMessage(
            tool_calls=[ToolCallRequest(id="c", name="f", arguments="{oops")]
        )

        converted = convert_messages_to_ollama_format([message])

        assert converted[0]["tool_calls"][0]["function"]["arguments"] == {}


class TestOpenAIModelClient:
    @pytest.mark.asyncio
    async def test_decide_sends_tools_with_auto_choice(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _openai_completion(content="Hi")
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        reply = await client.decide(HISTORY[:2], TOOLS)

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["tools"] == TOOLS
        assert kwargs["tool_choice"] == "auto"
        assert "stream" not in kwargs
        assert reply.content == "Hi"
        assert not reply.needs_calls

    @pytest.mark.asyncio
    async def test_decide_without_tools_omits_tool_choice(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _openai_completion(content="Hi")
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        await client.decide(HISTORY[:2], [])

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert "tools" not in kwargs
        assert "tool_choice" not in kwargs

    @pytest.mark.asyncio
    async def test_decide_parses_tool_calls(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _openai_completion(
            tool_calls=[
                _openai_tool_call("call_a", "get_weather", '{"location": "Paris"}'),
                _openai_tool_call("call_b", "get_stock_price", ""),
            ]
        )
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        reply = await client.decide(HISTORY[:2], TOOLS)

        assert reply.content == ""
        assert reply.tool_calls == [
            ToolCallRequest(id="call_a", name="get_weather", arguments='{"location": "Paris"}'),
            ToolCallRequest(id="call_b", name="get_stock_price", arguments="{}"),
        ]

    @pytest.mark.asyncio
    async def test_complete_sends_no_tools(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _openai_completion(content="Done.")
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        reply = await client.complete(HISTORY)

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert reply == "Done."
        assert "tools" not in kwargs
        assert len(kwargs["messages"]) == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["decide", "complete"])
    async def test_request_failure_raises_model_service_error(self, mock_openai, method):
        mock_openai.chat.completions.create.side_effect = RuntimeError("429 rate limited")
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        args = (HISTORY, TOOLS) if method == "decide" else (HISTORY,)
        with pytest.raises(ModelServiceError, match="429 rate limited"):
            await getattr(client, method)(*args)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["decide", "complete"])
    async def test_empty_choices_raise_model_service_error(self, mock_openai, method):
        mock_openai.chat.completions.create.return_value = SimpleNamespace(choices=[])
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        args = (HISTORY, TOOLS) if method == "decide" else (HISTORY,)
        with pytest.raises(ModelServiceError, match="Malformed"):
            await getattr(client, method)(*args)

    @pytest.mark.asyncio
    async def test_tool_call_without_function_raises_model_service_error(self, mock_openai):
        mock_openai.chat.completions.create.return_value = _openai_completion(
            tool_calls=[SimpleNamespace(id="call_x")]
        )
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        with pytest.raises(ModelServiceError, match="Malformed"):
            await client.decide(HISTORY[:2], TOOLS)

    @pytest.mark.asyncio
    async def test_malformed_response_degrades_to_fallback_reply(self, mock_openai):
        """A turn against a malformed response still produces the apology reply."""
        mock_openai.chat.completions.create.return_value = SimpleNamespace(choices=[])
        dispatcher = DispatchLoop(
            registry=CapabilityRegistry(),
            catalog=ToolCatalog(),
            model_client=OpenAIModelClient(model="gpt-4o-mini", api_key="k"),
        )

        result = await dispatcher.handle_user_message("hi")

        assert result.failed
        assert result.reply == FAILURE_REPLY

    @pytest.mark.asyncio
    async def test_check_connection(self, mock_openai):
        client = OpenAIModelClient(model="gpt-4o-mini", api_key="k")

        assert await client.check_connection() is True

        mock_openai.models.list.side_effect = RuntimeError("unauthorized")
        assert await client.check_connection() is False

    def test_host_defaults_to_public_api(self, mock_openai):
        assert OpenAIModelClient(model="m", api_key="k").host == "https://api.openai.com/v1"
        assert (
            OpenAIModelClient(model="m", api_key="k", base_url="http://proxy.local/v1").host
            == "http://proxy.local/v1"
        )

    @pytest.mark.asyncio
    async def test_close(self, mock_openai):
        client = OpenAIModelClient(model="m", api_key="k")

        await client.close()

        mock_openai.close.assert_awaited_once()


class TestOllamaModelClient:
    @pytest.mark.asyncio
    async def test_decide_reencodes_arguments_and_generates_ids(self, mock_ollama):
        mock_ollama.chat.return_value = {
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {"function": {"name": "get_stock_price", "arguments": {"ticker": "MSFT"}}},
                    {"function": {"name": "get_stock_price", "arguments": {"ticker": "AAPL"}}},
                ],
            }
        }
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        reply = await client.decide(HISTORY[:2], TOOLS)

        kwargs = mock_ollama.chat.call_args.kwargs
        assert kwargs["tools"] == TOOLS
        assert kwargs["stream"] is False
        assert [json.loads(c.arguments) for c in reply.tool_calls] == [
            {"ticker": "MSFT"},
            {"ticker": "AAPL"},
        ]
        ids = [c.id for c in reply.tool_calls]
        assert all(call_id.startswith("call_") for call_id in ids)
        assert len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_decide_reads_response_objects(self, mock_ollama):
        mock_ollama.chat.return_value = SimpleNamespace(
            message=SimpleNamespace(content="Plain answer", tool_calls=None)
        )
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        reply = await client.decide(HISTORY[:2], TOOLS)

        assert reply.content == "Plain answer"
        assert reply.tool_calls == []

    @pytest.mark.asyncio
    async def test_complete_sends_no_tools(self, mock_ollama):
        mock_ollama.chat.return_value = {"message": {"content": "Done."}}
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        assert await client.complete(HISTORY) == "Done."
        assert "tools" not in mock_ollama.chat.call_args.kwargs

    @pytest.mark.asyncio
    async def test_failure_raises_model_service_error(self, mock_ollama):
        mock_ollama.chat.side_effect = ConnectionError("connection refused")
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        with pytest.raises(ModelServiceError, match="connection refused"):
            await client.decide(HISTORY[:2], TOOLS)

    @pytest.mark.asyncio
    async def test_malformed_arguments_raise_model_service_error(self, mock_ollama):
        mock_ollama.chat.return_value = {
            "message": {
                "content": "",
                "tool_calls": [{"function": {"name": "get_weather", "arguments": "Paris"}}],
            }
        }
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        with pytest.raises(ModelServiceError, match="Malformed"):
            await client.decide(HISTORY[:2], TOOLS)

    @pytest.mark.asyncio
    async def test_check_connection(self, mock_ollama):
        mock_ollama.list.side_effect = ConnectionError("refused")
        client = OllamaModelClient(host="http://localhost:11434", model="llama3.1")

        assert await client.check_connection() is False


class TestCreateModelClient:
    def test_backends_are_registered(self):
        assert available_backends() == ["ollama", "openai"]

    def test_default_backend_is_openai(self, mock_openai):
        client = create_model_client(FuncallServerSettings(openai_api_key="k"))

        assert isinstance(client, OpenAIModelClient)
        assert client.model == "gpt-4o-mini"

    def test_ollama_backend(self, mock_ollama):
        settings = FuncallServerSettings(
            model_backend="ollama", model="llama3.1", ollama_host="http://gpu-box:11434"
        )

        client = create_model_client(settings)

        assert isinstance(client, OllamaModelClient)
        assert client.host == "http://gpu-box:11434"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="not registered"):
            create_model_client(FuncallServerSettings(model_backend="bard"))
