import json
import logging

import pytest
from flask import Flask

from planmasta.dto import GenerateRequest, Quality
from planmasta.handlers import OpenAIHandler, ReplicateHandler
from planmasta.openai_service import ServiceError
from planmasta.replicate_service import ReplicateError, ReplicateResponse


class FakeOpenAI:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.bodies = []

    def send_request(self, body):
        self.bodies.append(body)
        if self.error is not None:
            raise self.error
        return self.result


class FakeReplicate:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    def send_request(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


def make_client(openai=None, replicate=None, logger=None):
    app = Flask(__name__)
    if openai is not None:
        handler = OpenAIHandler(openai, logger)
        app.add_url_rule("/chat", "chat", handler.chat, methods=["POST"])
    if replicate is not None:
        handler = ReplicateHandler(replicate, logger)
        app.add_url_rule("/replicate", "replicate", handler.generate, methods=["POST"])
    return app.test_client()


def test_chat_relays_body_and_status():
    upstream = b'{"id":"chatcmpl"}'
    service = FakeOpenAI(result=(upstream, 201))
    client = make_client(openai=service)

    response = client.post("/chat", data=b'{"model":"m"}')

    assert response.status_code == 201
    assert response.data == upstream
    assert service.bodies == [b'{"model":"m"}']


def test_chat_failure_uses_error_status():
    service = FakeOpenAI(error=ServiceError("boom", 502))
    client = make_client(openai=service)

    response = client.post("/chat", data=b"{}")

    assert response.status_code == 502
    assert response.headers["Content-Type"] == "application/json"
    assert response.get_json() == {"error": "Failed to process request"}


def test_chat_logs_sent_response(caplog):
    service = FakeOpenAI(result=(b"abcd", 200))
    logger = logging.getLogger("test.handlers.chat")
    client = make_client(openai=service, logger=logger)

    with caplog.at_level(logging.INFO, logger="test.handlers.chat"):
        client.post("/chat", data=b"{}")

    sent = [r for r in caplog.records if r.getMessage() == "Sent response"]
    assert len(sent) == 1
    assert sent[0].size == str(len(b"abcd"))
    assert sent[0].duration >= 0


def test_generate_success():
    result = ReplicateResponse(output="https://example.com/image.png")
    service = FakeReplicate(result=result)
    client = make_client(replicate=service)

    response = client.post("/replicate", data=json.dumps({"quality": "low", "prompt": "a house"}))

    assert response.status_code == 200
    assert response.headers["Content-Type"] == "application/json"
    assert response.get_json() == {"output": "https://example.com/image.png"}
    assert response.data.endswith(b"\n")
    assert service.requests == [GenerateRequest(quality=Quality.LOW, prompt="a house")]


def test_generate_ignores_trailing_data():
    service = FakeReplicate(result=ReplicateResponse(output="x"))
    client = make_client(replicate=service)

    response = client.post("/replicate", data=b'{"prompt":"p"} trailing')

    assert response.status_code == 200
    assert service.requests[0].prompt == "p"


def test_generate_empty_body_is_bad_request():
    service = FakeReplicate(result=ReplicateResponse())
    client = make_client(replicate=service)

    response = client.post("/replicate", data=b"")

    assert response.status_code == 400
    assert response.data == b"EOF"
    assert service.requests == []


@pytest.mark.parametrize("body", [b"{not json", b'{"prompt": 5}', b"[1, 2]"])
def test_generate_invalid_body_is_bad_request(body):
    service = FakeReplicate(result=ReplicateResponse())
    client = make_client(replicate=service)

    response = client.post("/replicate", data=body)

    assert response.status_code == 400
    assert service.requests == []


def test_generate_service_failure():
    service = FakeReplicate(error=ReplicateError("upstream down"))
    client = make_client(replicate=service)

    response = client.post("/replicate", data=b'{"prompt":"p","quality":"high"}')

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to process request"}
    assert service.requests[0].quality == Quality.HIGH