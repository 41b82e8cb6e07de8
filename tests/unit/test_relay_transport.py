"""Unit tests for the HTTP relay transport."""

import pytest
import requests

from career_copilot.exceptions import DecodeError, TransportError
from career_copilot.infrastructure.transport.base import ProviderRequest
from career_copilot.infrastructure.transport.relay import RelayHttpTransport
from career_copilot.interview.testing import ndjson_body, provider_chunk
from tests.conftest import FakeResponse


ENDPOINT = "http://relay.test/api/gemini"


def _request():
    return ProviderRequest(model="gemini-2.5-flash", contents="Tell me about yourself",
                           config={"temperature": 0.7})


@pytest.mark.unit
class TestRelayStream:
    def test_posts_streaming_envelope(self, fake_session):
        session = fake_session(FakeResponse(blocks=[ndjson_body(["Hi"])]))
        transport = RelayHttpTransport(ENDPOINT, session=session)

        list(transport.stream(_request()))

        post = session.posts[0]
        assert post["url"] == ENDPOINT
        assert post["stream"] is True
        assert post["json"] == {
            "isStream": True,
            "args": {
                "model": "gemini-2.5-flash",
                "contents": "Tell me about yourself",
                "config": {"temperature": 0.7},
            },
        }

    def test_yields_chunks_in_order(self, fake_session):
        body = ndjson_body(["<ANSWER>", "Hel", "lo", "</ANSWER>"])
        response = FakeResponse(blocks=[body[:7], body[7:40], body[40:]])
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        texts = [chunk.text for chunk in transport.stream(_request())]

        assert texts == ["<ANSWER>", "Hel", "lo", "</ANSWER>"]
        assert response.closed

    def test_stream_is_lazy(self, fake_session):
        session = fake_session(FakeResponse(blocks=[ndjson_body(["Hi"])]))
        transport = RelayHttpTransport(ENDPOINT, session=session)

        transport.stream(_request())
        assert session.posts == []

    def test_closing_generator_closes_response(self, fake_session):
        response = FakeResponse(blocks=[ndjson_body(["a"]), ndjson_body(["b"]), ndjson_body(["c"])])
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        chunks = transport.stream(_request())
        assert next(chunks).text == "a"
        chunks.close()

        assert response.closed
        assert response.blocks_read == 1

    def test_http_error_with_relay_message(self, fake_session):
        response = FakeResponse(status_code=500, body={"error": "An error occurred while calling the Gemini API."})
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        with pytest.raises(TransportError, match="calling the Gemini API"):
            list(transport.stream(_request()))
        assert response.closed

    def test_http_error_without_json_body(self, fake_session):
        response = FakeResponse(status_code=502, text="<html>Bad Gateway</html>")
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        with pytest.raises(TransportError, match="502"):
            list(transport.stream(_request()))

    def test_connection_failure(self, fake_session, connection_error):
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(connection_error))
        with pytest.raises(TransportError, match="Could not reach relay"):
            list(transport.stream(_request()))

    def test_interrupted_stream_keeps_delivered_chunks(self, fake_session):
        response = FakeResponse(blocks=[
            ndjson_body(["<ANSWER>Par"]),
            requests.exceptions.ChunkedEncodingError("connection broken"),
        ])
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        received = []
        with pytest.raises(TransportError, match="interrupted"):
            for chunk in transport.stream(_request()):
                received.append(chunk.text)

        assert received == ["<ANSWER>Par"]
        assert response.closed

    def test_malformed_chunk(self, fake_session):
        response = FakeResponse(blocks=[b'{"text": "ok"}\n{nope}\n'])
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(response))

        with pytest.raises(DecodeError):
            list(transport.stream(_request()))


@pytest.mark.unit
class TestRelayCall:
    def test_returns_full_response(self, fake_session):
        session = fake_session(FakeResponse(body=provider_chunk("done")))
        transport = RelayHttpTransport(ENDPOINT, session=session)

        assert transport.call(_request()) == provider_chunk("done")
        assert session.posts[0]["json"]["isStream"] is False
        assert session.posts[0]["stream"] is False

    def test_error_status(self, fake_session):
        transport = RelayHttpTransport(
            ENDPOINT, session=fake_session(FakeResponse(status_code=405, body={"error": "Method Not Allowed"}))
        )
        with pytest.raises(TransportError, match="Method Not Allowed"):
            transport.call(_request())

    def test_non_json_body(self, fake_session):
        transport = RelayHttpTransport(ENDPOINT, session=fake_session(FakeResponse(text="plain text")))
        with pytest.raises(DecodeError):
            transport.call(_request())

    def test_close_closes_session(self, fake_session):
        session = fake_session()
        RelayHttpTransport(ENDPOINT, session=session).close()
        assert session.closed
