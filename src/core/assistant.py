"""
Agenda Assistant — Assistant Client.

Brain of the planner: sends the user's request (typed text, transcribed
voice, extracted PDF text) together with the current planner snapshot to the
configured LLM, and parses the reply into a short answer plus an ordered
list of raw commands for the dispatcher.

The commands are NOT validated here: the dispatcher validates each one and
skips the bad ones, so a single malformed command never loses the batch.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

from src.core.llm import LLMAuthError, LLMError, complete
from src.data.models import PlannerState

logger = logging.getLogger(__name__)

DEFAULT_REPLY = "Done — your planner has been updated."
NO_INPUT_PROMPT = "Process the user's request from the attached audio or document."


class AssistantError(Exception):
    """Raised when the assistant can't be reached (network, quota, server)."""


class AssistantAuthError(AssistantError):
    """Raised when the assistant rejects our credentials."""


@dataclass
class AssistantResponse:
    """One model reply: text for the user and zero or more raw commands."""
    text: str
    commands: list[dict] = field(default_factory=list)


# ---------------------------------------------------------------------------
# System prompt for LLM
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = """\
You are the planning assistant of a personal agenda with four collections:
tasks, a weekly class/study schedule, notes and hobbies.
The user may ask you to ADD, CHANGE or REMOVE any item. You act by emitting commands.

Today is {today}.

Current planner state (JSON):
{state}

**ALWAYS answer with a single JSON object**:
{{"reply": "short message for the user", "commands": [ ... ]}}

Each command is {{"name": "<command>", "args": {{...}}}}. Available commands:

- add_tasks: {{"items": [{{"name": "string", "start_date": "YYYY-MM-DD", "due_date": "YYYY-MM-DD", "criticality": 1-10, "priority": "Low" | "Medium" | "High"}}]}}
- remove_tasks: {{"criteria": ["name fragment", ...]}}
- add_schedule_events: {{"items": [{{"day": "Monday", "start_time": "HH:MM", "end_time": "HH:MM", "activity": "string", "kind": "class" | "study" | "break", "modality": "Virtual" | "Hybrid" | "In-person"}}]}}
- remove_schedule_events: {{"criteria": [{{"day": "Monday", "activity": "activity fragment"}}]}}
- add_notes: {{"items": ["note text", ...]}}
- remove_notes: {{"criteria": ["content fragment", ...]}}
- add_hobbies: {{"items": ["hobby name", ...]}}
- remove_hobbies: {{"criteria": ["name fragment", ...]}}

**Rules:**
- "remove the Monday math class" → remove_schedule_events; "delete the history task" → remove_tasks;
  "delete the note about the payment" → remove_notes; "I don't play football anymore" → remove_hobbies.
- "day" is the full English weekday name, capitalized (Monday ... Sunday).
- To CHANGE an item, first remove the old one, then add the new one — in that order.
- Commands run in the order you list them.
- "modality" is optional. Interpret relative dates ("tomorrow", "next Friday") relative to today.
- If a document is attached, extract every assignment, exam and class block it describes.
- If nothing needs to change (a question, a greeting), return "commands": [].
- Return ONLY the JSON object. No markdown, no explanation, no extra text.
"""


# ---------------------------------------------------------------------------
# Response Cleaning Functions
# ---------------------------------------------------------------------------

def _clean_llm_response(raw_text: str) -> str:
    """Remove markdown code block delimiters from LLM's raw response."""
    cleaned_text = raw_text.strip()
    if cleaned_text.startswith("```json"):
        cleaned_text = cleaned_text.removeprefix("```json")
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text.removeprefix("```")
    if cleaned_text.endswith("```"):
        cleaned_text = cleaned_text.removesuffix("```")
    return cleaned_text.strip()


def parse_response(raw_text: str) -> AssistantResponse:
    """Turn the model's raw reply into an AssistantResponse.

    - {"reply": ..., "commands": [...]} → both fields (non-object commands dropped)
    - [...] → commands only, default reply
    - anything that isn't JSON → informational reply, no commands
    """
    cleaned = _clean_llm_response(raw_text or "")
    if not cleaned:
        return AssistantResponse(text=DEFAULT_REPLY)

    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError):
        # JSONDecodeError, oversized integers and runaway nesting all land here
        logger.info("Assistant replied with plain text, no commands")
        return AssistantResponse(text=cleaned)

    # Defensive wrapping: a bare command list instead of the envelope
    if isinstance(data, list):
        data = {"commands": data}

    if not isinstance(data, dict):
        logger.warning("Assistant returned unexpected type: %s", type(data).__name__)
        return AssistantResponse(text=cleaned)

    raw_commands = data.get("commands")
    if raw_commands is None:
        raw_commands = []
    if not isinstance(raw_commands, list):
        logger.warning("Assistant 'commands' is %s, not a list — ignoring", type(raw_commands).__name__)
        raw_commands = []

    commands = []
    for item in raw_commands:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object command: %s", item)
            continue
        commands.append(item)

    reply = data.get("reply")
    if not isinstance(reply, str) or not reply.strip():
        reply = DEFAULT_REPLY if commands else "OK."

    logger.info("Assistant returned %d command(s)", len(commands))
    return AssistantResponse(text=reply.strip(), commands=commands)


# ---------------------------------------------------------------------------
# Model client
# ---------------------------------------------------------------------------


def _today(tz_name: str) -> str:
    now = datetime.now(ZoneInfo(tz_name))
    return f"{now.strftime('%A')}, {now.date().isoformat()}"


def build_user_message(
    text: str, transcript: str | None = None, document_text: str | None = None,
) -> str:
    """Assemble the user turn from typed text, voice transcript and document text."""
    parts = [text.strip() if text and text.strip() else NO_INPUT_PROMPT]
    if transcript:
        parts.append(f"Voice message transcript:\n{transcript}")
    if document_text:
        parts.append(f"Attached document text:\n<<<\n{document_text}\n>>>")
    return "\n\n".join(parts)


async def ask_assistant(
    state: PlannerState,
    text: str,
    audio: bytes | None = None,
    document: bytes | None = None,
) -> AssistantResponse:
    """Ask the LLM what to do with the user's request.

    Args:
        state: Snapshot used only to give the model context. The returned
            commands are applied later to whatever state is current then.
        text: Typed request (may be empty when audio/document is given).
        audio: Raw voice bytes, transcribed with Whisper first.
        document: Raw PDF bytes, reduced to text first.

    Raises:
        AssistantAuthError: Credentials missing or rejected.
        AssistantError: Any other transport failure.
        TranscriptionError / DocumentError: The attachment couldn't be read.
    """
    from src.config import settings

    transcript = None
    if audio:
        from src.core.transcriber import transcribe_audio
        transcript = await transcribe_audio(audio)

    document_text = None
    if document:
        from src.core.documents import extract_pdf_text
        document_text = extract_pdf_text(document, max_chars=settings.MAX_DOCUMENT_CHARS)

    system_prompt = _SYSTEM_PROMPT.format(
        today=_today(settings.TIMEZONE),
        state=json.dumps(state.to_dict(), ensure_ascii=False),
    )
    user_message = build_user_message(text, transcript, document_text)

    try:
        raw_text = await complete(
            system=system_prompt,
            user_message=user_message,
            max_tokens=settings.ASSISTANT_MAX_TOKENS,
            json_output=True,
        )
    except LLMAuthError as exc:
        raise AssistantAuthError(str(exc)) from exc
    except LLMError as exc:
        raise AssistantError(str(exc)) from exc

    logger.debug("LLM raw response: %s", raw_text)
    return parse_response(raw_text)
