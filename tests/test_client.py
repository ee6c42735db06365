"""
Tests for the StackExchange search client.
"""

import gzip
import json

import httpx
import pytest

from models.errors import DecodeError, RemoteError
from models.schema import Answer, Config, Question
from stackexchange.client import SE_FILTER, StackExchange, decode_items, rank_answers

from helpers import FakeAPI, envelope_api, gzip_json, raw_api


def answer(answer_id, score, accepted=False):
    return {
        "answer_id": answer_id,
        "score": score,
        "body_markdown": f"answer {answer_id}",
        "is_accepted": accepted,
    }


def question(question_id, answers, score=10):
    return {
        "question_id": question_id,
        "score": score,
        "title": f"Question {question_id}",
        "body_markdown": "How do I exit vim?",
        "answers": answers,
    }


QUESTIONS = [
    question(1, [answer(11, 3), answer(12, 50, accepted=True), answer(13, 3), answer(14, -2), answer(15, 7)]),
    question(2, [answer(21, 0), answer(22, 0)], score=-1),
]


@pytest.fixture
def config():
    return Config(limit=7, sites=["superuser", "unix"], api_key="secret")


class TestSearchRequest:
    """Parameters of the single search request."""

    def test_one_request_with_expected_params(self, config):
        api = envelope_api(QUESTIONS)
        StackExchange(config, client=api.client()).search("exit vim")

        assert len(api.requests) == 1
        request = api.requests[0]
        params = request.url.params
        assert request.url.path == "/2.2/search/advanced"
        assert params["site"] == "superuser"
        assert params["filter"] == SE_FILTER
        assert params["key"] == "secret"
        assert params["q"] == "exit vim"
        assert params["pagesize"] == "7"
        assert params["page"] == "1"
        assert params["answers"] == "1"
        assert params["order"] == "desc"
        assert params["sort"] == "relevance"

    def test_no_key_param_without_api_key(self):
        api = envelope_api([])
        StackExchange(Config(), client=api.client()).search("q")
        assert "key" not in api.requests[0].url.params

    def test_first_configured_site_is_searched(self):
        api = envelope_api([])
        se = StackExchange(Config(sites=["unix", "stackoverflow"]), client=api.client())
        se.search("q")
        assert api.requests[0].url.params["site"] == "unix"
        assert se.site == "unix"


class TestSearchResults:
    """Decoding and answer ranking."""

    def test_answers_sorted_by_score_stable(self, config):
        questions = StackExchange(config, client=envelope_api(QUESTIONS).client()).search("q")

        ids = [a.id for a in questions[0].answers]
        assert ids == [12, 15, 11, 13, 14]
        for q in questions:
            scores = [a.score for a in q.answers]
            assert scores == sorted(scores, reverse=True)
        assert [a.id for a in questions[1].answers] == [21, 22]

    def test_question_order_kept(self, config):
        questions = StackExchange(config, client=envelope_api(QUESTIONS).client()).search("q")
        assert [q.id for q in questions] == [1, 2]
        assert questions[0].title == "Question 1"
        assert questions[0].answers[0].is_accepted == True

    def test_transport_already_decompressed(self, config):
        api = envelope_api(QUESTIONS, header_encoding=True)
        questions = StackExchange(config, client=api.client()).search("q")
        assert len(questions) == 2

    def test_uncompressed_body_accepted(self, config):
        api = raw_api(json.dumps({"items": QUESTIONS}).encode())
        assert len(StackExchange(config, client=api.client()).search("q")) == 2

    def test_empty_result(self, config):
        assert StackExchange(config, client=envelope_api([]).client()).search("q") == []


class TestSearchErrors:
    """Failure mapping."""

    def test_transport_failure(self, config):
        def handler(request):
            raise httpx.ConnectError("network unreachable", request=request)

        with pytest.raises(RemoteError) as exc:
            StackExchange(config, client=FakeAPI(handler).client()).search("q")
        assert "network unreachable" in str(exc.value)

    def test_error_envelope_message(self, config):
        body = gzip_json({"error_id": 400, "error_name": "bad_parameter", "error_message": "key is invalid"})
        with pytest.raises(RemoteError) as exc:
            StackExchange(config, client=raw_api(body, status_code=400).client()).search("q")
        assert "key is invalid" in str(exc.value)
        assert "bad_parameter" in str(exc.value)

    def test_bad_status_without_envelope(self, config):
        with pytest.raises(RemoteError) as exc:
            StackExchange(config, client=raw_api(b"oops", status_code=502).client()).search("q")
        assert "502" in str(exc.value)

    def test_invalid_json(self, config):
        with pytest.raises(DecodeError):
            StackExchange(config, client=raw_api(b"\x1f\x8b broken").client()).search("q")

    def test_corrupt_deflate_stream(self, config):
        body = bytearray(gzip.compress(b'{"items": []}' * 50))
        for i in range(10, 20):
            body[i] ^= 0xFF
        with pytest.raises(DecodeError):
            StackExchange(config, client=raw_api(bytes(body)).client()).search("q")

    def test_corrupt_deflate_stream_in_error_response(self, config):
        body = bytearray(gzip.compress(b'{"error_message": "x"}' * 50))
        for i in range(10, 20):
            body[i] ^= 0xFF
        with pytest.raises(RemoteError) as exc:
            StackExchange(config, client=raw_api(bytes(body), status_code=400).client()).search("q")
        assert "400" in str(exc.value)

    def test_missing_envelope(self, config):
        with pytest.raises(DecodeError):
            StackExchange(config, client=raw_api(gzip_json(QUESTIONS)).client()).search("q")

    def test_missing_question_fields(self, config):
        items = [{"question_id": 1, "score": 2}]
        with pytest.raises(DecodeError):
            StackExchange(config, client=envelope_api(items).client()).search("q")


class TestHelpers:
    """Module-level helpers."""

    def test_rank_answers(self):
        q = Question(
            id=1, score=0, title="t", body="b",
            answers=[
                Answer(id=1, score=1, body="a", is_accepted=False),
                Answer(id=2, score=5, body="b", is_accepted=False),
                Answer(id=3, score=1, body="c", is_accepted=True),
            ],
        )
        assert [a.id for a in rank_answers(q).answers] == [2, 1, 3]

    def test_decode_items(self):
        items = decode_items(gzip_json({"items": QUESTIONS}), Question, "questions")
        assert items[1].score == -1
