# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
"""
Unit tests for the Responses API HTTP endpoint.

Tests cover:
- Route registration and agent name validation
- Non-streaming JSON responses
- Server-sent event framing of streaming responses
- Error bodies for invalid requests and agent failures
"""
import json
from typing import Dict, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from agent_responses_runtime.engine.app import create_app
from agent_responses_runtime.engine.config import Settings
from agent_responses_runtime.engine.deployers.adapter.responses import (
    ResponseAPIDefaultAdapter,
    ResponsesProtocolAdapter,
    map_openai_responses,
)
from agent_responses_runtime.engine.deployers.adapter.responses.response_api_protocol_adapter import (  # noqa: E501
    format_sse,
    validate_agent_name,
)
from agent_responses_runtime.engine.schemas.agent_schemas import (
    AgentRunResponse,
    ChatMessage,
    Role,
    UsageDetails,
)
from agent_responses_runtime.engine.schemas.response_api import (
    StreamingErrorEvent,
)

PATH = "/helper/v1/responses"


def parse_sse(body: str) -> List[Dict]:
    frames = []
    for block in body.split("\n\n"):
        if not block.strip():
            continue
        lines = dict(line.split(": ", 1) for line in block.split("\n"))
        data = json.loads(lines["data"])
        assert lines["event"] == data["type"]
        frames.append(data)
    return frames


def make_client(agent, **kwargs) -> TestClient:
    app = FastAPI()
    map_openai_responses(app, "helper", agent, **kwargs)
    return TestClient(app)


@pytest.fixture
def fine_agent(scripted_agent, make_text_update):
    return scripted_agent(
        updates=[make_text_update("I'm "), make_text_update("fine")],
        response=AgentRunResponse(
            messages=[ChatMessage.from_text(Role.ASSISTANT, "I'm fine")],
            usage=UsageDetails(
                input_token_count=10,
                output_token_count=4,
                total_token_count=14,
            ),
        ),
    )


class TestRouteRegistration:
    def test_default_route(self, fine_agent):
        app = FastAPI()

        adapter = map_openai_responses(app, "helper", fine_agent)

        assert adapter.responses_path == PATH
        assert PATH in [route.path for route in app.routes]

    def test_explicit_path(self, fine_agent):
        app = FastAPI()

        adapter = map_openai_responses(
            app,
            "not a url name",
            fine_agent,
            responses_path="/custom/responses",
        )

        assert adapter.responses_path == "/custom/responses"

    @pytest.mark.parametrize("name", ["", "has space", "a/b", "q?x"])
    def test_invalid_agent_name(self, fine_agent, name):
        with pytest.raises(ValueError):
            map_openai_responses(FastAPI(), name, fine_agent)

    @pytest.mark.parametrize("name", ["helper", "my-agent_1", "Agent.v2"])
    def test_valid_agent_name(self, name):
        validate_agent_name(name)

    def test_route_from_display_name(self, fine_agent):
        app = FastAPI()
        adapter = ResponsesProtocolAdapter()

        path = adapter.add_endpoint(app, fine_agent)

        assert path == "/scripted/v1/responses"
        assert adapter.responses_path == path
        assert isinstance(adapter, ResponseAPIDefaultAdapter)


class TestNonStreaming:
    def test_completed_response(self, fine_agent):
        client = make_client(fine_agent)

        result = client.post(PATH, json={"input": "Hello, how are you?"})

        assert result.status_code == 200
        body = result.json()
        assert body["object"] == "response"
        assert body["status"] == "completed"
        assert body["output"][0]["type"] == "message"
        assert body["output"][0]["content"][0]["text"] == "I'm fine"
        assert body["usage"]["total_tokens"] == 14
        assert body["id"].startswith("resp_")

    def test_agent_failure(self, scripted_agent):
        client = make_client(scripted_agent(error=RuntimeError("boom")))

        result = client.post(PATH, json={"input": "hi"})

        assert result.status_code == 500
        assert result.json()["error"]["code"] == "server_error"
        assert result.json()["error"]["message"] == "boom"


class TestInvalidRequests:
    def test_invalid_json(self, fine_agent):
        client = make_client(fine_agent)

        result = client.post(
            PATH,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert result.status_code == 400
        assert result.json()["error"]["code"] == "INVALID_REQUEST"

    @pytest.mark.parametrize(
        "body",
        [{}, {"input": 5}, {"input": "hi", "stream": "sometimes"}],
    )
    def test_invalid_body(self, fine_agent, body):
        client = make_client(fine_agent)

        result = client.post(PATH, json=body)

        assert result.status_code == 400
        assert result.json()["error"]["code"] == "INVALID_REQUEST"

    def test_malformed_conversation_id(self, fine_agent):
        client = make_client(fine_agent)

        result = client.post(
            PATH,
            json={"input": "hi", "conversation": "conv_123"},
        )

        assert result.status_code == 400
        assert result.json()["error"]["code"] == "INVALID_ID"


class TestStreaming:
    def test_event_stream(self, fine_agent):
        client = make_client(fine_agent)

        result = client.post(PATH, json={"input": "Hi", "stream": True})

        assert result.status_code == 200
        assert result.headers["content-type"].startswith("text/event-stream")
        assert result.headers["cache-control"] == "no-cache,no-store"
        frames = parse_sse(result.text)
        assert frames[0]["type"] == "response.created"
        assert frames[-1]["type"] == "response.completed"
        assert [frame["sequence_number"] for frame in frames] == list(
            range(len(frames)),
        )
        deltas = [
            frame["delta"]
            for frame in frames
            if frame["type"] == "response.output_text.delta"
        ]
        assert deltas == ["I'm ", "fine"]
        final = frames[-1]["response"]
        assert final["status"] == "completed"
        assert final["output"][0]["content"][0]["text"] == "I'm fine"

    def test_failure_ends_with_error_event(
        self,
        scripted_agent,
        make_text_update,
    ):
        agent = scripted_agent(
            updates=[make_text_update("partial"), RuntimeError("boom")],
        )
        client = make_client(agent)

        result = client.post(PATH, json={"input": "Hi", "stream": True})

        assert result.status_code == 200
        frames = parse_sse(result.text)
        types = [frame["type"] for frame in frames]
        assert types[-1] == "error"
        assert "response.completed" not in types
        assert frames[-1]["code"] == "server_error"
        assert frames[-1]["message"] == "boom"
        assert (
            frames[-1]["sequence_number"]
            == frames[-2]["sequence_number"] + 1
        )

    def test_streamed_snapshot_matches_json_shape(self, fine_agent):
        client = make_client(fine_agent)

        streamed = parse_sse(
            client.post(PATH, json={"input": "Hi", "stream": True}).text,
        )
        plain = client.post(PATH, json={"input": "Hi"}).json()

        for frame in (streamed[0], streamed[-1]):
            snapshot = frame["response"]
            assert set(snapshot) == set(plain)
            assert snapshot["error"] is None
            assert snapshot["incomplete_details"] is None
            assert snapshot["instructions"] is None

    def test_format_sse(self):
        event = StreamingErrorEvent(
            sequence_number=7,
            code="server_error",
            message="boom",
        )

        frame = format_sse(event)

        assert frame.startswith("event: error\ndata: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame.split("data: ", 1)[1]) == {
            "type": "error",
            "sequence_number": 7,
            "code": "server_error",
            "message": "boom",
            "param": None,
        }


class TestCreateApp:
    def test_health_and_responses(self, fine_agent):
        app = create_app(fine_agent, agent_name="helper", settings=Settings())
        client = TestClient(app)

        health = client.get("/health")
        result = client.post(PATH, json={"input": "Hello"})

        assert health.json() == {"status": "healthy", "agent": "helper"}
        assert result.status_code == 200
        assert app.state.responses_adapter.responses_path == PATH

    def test_path_template_from_settings(self, fine_agent):
        settings = Settings(RESPONSES_PATH_TEMPLATE="/agents/{agent_name}")

        app = create_app(fine_agent, settings=settings)

        assert app.state.responses_adapter.responses_path == (
            "/agents/scripted"
        )
