"""Tests for src.core.assistant — reply parsing and the model round trip."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.assistant import (
    DEFAULT_REPLY,
    NO_INPUT_PROMPT,
    AssistantAuthError,
    AssistantError,
    _clean_llm_response,
    ask_assistant,
    build_user_message,
    parse_response,
)
from src.core.llm import LLMAuthError, LLMError
from src.data.models import Note, PlannerState


class TestCleanResponse:
    def test_strips_json_fence(self):
        assert _clean_llm_response('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert _clean_llm_response('```\n[]\n```') == "[]"

    def test_plain_text_untouched(self):
        assert _clean_llm_response("  hello  ") == "hello"


class TestParseResponse:
    def test_envelope(self):
        raw = json.dumps({
            "reply": "Added your essay.",
            "commands": [{"name": "add_tasks", "args": {"items": [{"name": "Essay"}]}}],
        })
        resp = parse_response(raw)
        assert resp.text == "Added your essay."
        assert resp.commands == [{"name": "add_tasks", "args": {"items": [{"name": "Essay"}]}}]

    def test_commands_order_preserved(self):
        raw = json.dumps({"reply": "ok", "commands": [
            {"name": "remove_tasks", "args": {"criteria": ["x"]}},
            {"name": "add_tasks", "args": {"items": []}},
        ]})
        assert [c["name"] for c in parse_response(raw).commands] == ["remove_tasks", "add_tasks"]

    def test_fenced_envelope(self):
        raw = '```json\n{"reply": "Hi!", "commands": []}\n```'
        resp = parse_response(raw)
        assert resp.text == "Hi!"
        assert resp.commands == []

    def test_plain_text_has_no_commands(self):
        resp = parse_response("Sure, you have 3 tasks due this week.")
        assert resp.text == "Sure, you have 3 tasks due this week."
        assert resp.commands == []

    def test_bare_list_wrapped(self):
        resp = parse_response('[{"name": "add_notes", "args": {"items": ["x"]}}]')
        assert len(resp.commands) == 1
        assert resp.text == DEFAULT_REPLY

    def test_non_object_commands_dropped(self):
        resp = parse_response('{"reply": "ok", "commands": ["add_notes", 3, {"name": "add_notes"}]}')
        assert resp.commands == [{"name": "add_notes"}]

    def test_commands_not_a_list(self):
        resp = parse_response('{"reply": "ok", "commands": {"name": "add_notes"}}')
        assert resp.commands == []

    def test_missing_reply_defaults(self):
        assert parse_response('{"commands": [{"name": "x"}]}').text == DEFAULT_REPLY
        assert parse_response('{"commands": []}').text == "OK."

    def test_oversized_integer_falls_back_to_text(self):
        raw = '{"reply": "ok", "commands": [{"name": "add_tasks", "args": {"items": [{"criticality": ' + "9" * 5000 + '}]}}]}'
        resp = parse_response(raw)
        assert resp.commands == []
        assert resp.text == raw

    def test_deep_nesting_falls_back_to_text(self):
        raw = "[" * 100000 + "]" * 100000
        resp = parse_response(raw)
        assert resp.commands == []

    def test_scalar_json(self):
        resp = parse_response("42")
        assert resp.text == "42"
        assert resp.commands == []

    def test_empty(self):
        assert parse_response("").text == DEFAULT_REPLY
        assert parse_response(None).commands == []


class TestBuildUserMessage:
    def test_text_only(self):
        assert build_user_message("add a note") == "add a note"

    def test_empty_text_with_attachments(self):
        msg = build_user_message("", transcript="add gym on friday", document_text="Week 1: intro")
        assert msg.startswith(NO_INPUT_PROMPT)
        assert "add gym on friday" in msg
        assert "Week 1: intro" in msg


class TestAskAssistant:
    @pytest.mark.asyncio
    async def test_sends_state_and_parses_reply(self):
        state = PlannerState(notes=(Note(id="n1", content="Pay rent"),))
        reply = json.dumps({"reply": "Noted.", "commands": [{"name": "add_notes", "args": {"items": ["x"]}}]})
        mock_complete = AsyncMock(return_value=reply)

        with patch("src.core.assistant.complete", mock_complete):
            resp = await ask_assistant(state, "remember x")

        assert resp.text == "Noted."
        assert len(resp.commands) == 1
        kwargs = mock_complete.call_args.kwargs
        assert kwargs["json_output"] is True
        assert kwargs["user_message"] == "remember x"
        assert "Pay rent" in kwargs["system"]

    @pytest.mark.asyncio
    async def test_voice_is_transcribed_first(self):
        mock_complete = AsyncMock(return_value='{"reply": "ok", "commands": []}')
        mock_transcribe = AsyncMock(return_value="add football to my hobbies")

        with patch("src.core.assistant.complete", mock_complete), \
             patch("src.core.transcriber.transcribe_audio", mock_transcribe):
            await ask_assistant(PlannerState(), "", audio=b"OggS...")

        mock_transcribe.assert_awaited_once_with(b"OggS...")
        assert "add football to my hobbies" in mock_complete.call_args.kwargs["user_message"]

    @pytest.mark.asyncio
    async def test_document_text_included(self):
        mock_complete = AsyncMock(return_value='{"reply": "ok", "commands": []}')
        mock_extract = MagicMock(return_value="Midterm on March 12")

        with patch("src.core.assistant.complete", mock_complete), \
             patch("src.core.documents.extract_pdf_text", mock_extract):
            await ask_assistant(PlannerState(), "import this", document=b"%PDF-1.4")

        assert "Midterm on March 12" in mock_complete.call_args.kwargs["user_message"]

    @pytest.mark.asyncio
    async def test_auth_error_mapped(self):
        with patch("src.core.assistant.complete", AsyncMock(side_effect=LLMAuthError("bad key"))):
            with pytest.raises(AssistantAuthError):
                await ask_assistant(PlannerState(), "hi")

    @pytest.mark.asyncio
    async def test_transport_error_mapped(self):
        with patch("src.core.assistant.complete", AsyncMock(side_effect=LLMError("timeout"))):
            with pytest.raises(AssistantError) as exc_info:
                await ask_assistant(PlannerState(), "hi")
        assert not isinstance(exc_info.value, AssistantAuthError)
