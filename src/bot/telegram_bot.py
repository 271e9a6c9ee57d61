"""
Agenda Assistant — Telegram Bot.

Telegram is the only user interface. Direct edits (task form, status
changes, deletes, toggles) and assistant requests (text, voice, PDF) all
flow through this bot, and all state changes go through the user's
StateContainer.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine
from zoneinfo import ZoneInfo

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from src.bot.render import (
    WEEKDAYS,
    render_batch_summary,
    render_hobbies,
    render_notes,
    render_schedule,
    render_tasks,
)
from src.config import settings
from src.core import edits
from src.core.assistant import AssistantAuthError, AssistantError, ask_assistant
from src.core.dispatcher import dispatch
from src.core.documents import PDF_MIME_TYPE, DocumentError
from src.core.normalizer import Normalizer
from src.core.transcriber import TranscriptionError
from src.data.models import Priority, TaskStatus, coerce_enum

if TYPE_CHECKING:
    from src.core.state_container import ContainerRegistry, StateContainer

logger = logging.getLogger(__name__)

BUSY_KEY = "assistant_busy"

# Telegram rejects inline buttons whose callback_data exceeds 64 bytes
_CALLBACK_DATA_LIMIT = 64


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that silently ignores messages from unauthorized users.

    Does NOT send any response to strangers — the bot must not reveal
    its existence to unauthorized users.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return None  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _container(update: Update, context: ContextTypes.DEFAULT_TYPE) -> StateContainer:
    registry: ContainerRegistry = context.bot_data["registry"]
    return registry.get(update.effective_user.id)


def _normalizer(context: ContextTypes.DEFAULT_TYPE) -> Normalizer:
    return context.bot_data["normalizer"]


def _pick(collection: tuple, args: list[str] | None) -> Any | None:
    """Return the entity for a 1-based index argument, or None."""
    if not args:
        return None
    try:
        index = int(args[0])
    except ValueError:
        return None
    if 1 <= index <= len(collection):
        return collection[index - 1]
    return None


def _parse_iso_date(text: str) -> str | None:
    try:
        return date.fromisoformat(text.strip()).isoformat()
    except ValueError:
        return None


_EVENT_RE = re.compile(
    r"^(?P<day>[A-Za-z]+)\s+(?P<start>\d{1,2}:\d{2})\s*-\s*(?P<end>\d{1,2}:\d{2})\s+(?P<activity>.+)$"
)


def _parse_event_args(text: str) -> tuple[str, str, str, str] | None:
    """Parse 'Monday 08:00-10:00 Algebra' into (day, start, end, activity)."""
    match = _EVENT_RE.match(text.strip())
    if match is None:
        return None
    day = match["day"].capitalize()
    if day not in WEEKDAYS:
        return None
    start = datetime.strptime(match["start"], "%H:%M").strftime("%H:%M")
    end = datetime.strptime(match["end"], "%H:%M").strftime("%H:%M")
    return day, start, end, match["activity"].strip()


# ---------------------------------------------------------------------------
# Assistant: text / voice / document → commands → state
# ---------------------------------------------------------------------------


async def _run_assistant(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    text: str,
    audio: bytes | None = None,
    document: bytes | None = None,
) -> None:
    """Send one request to the assistant and apply the returned commands.

    Only one request per user is in flight; further messages are turned
    away until it resolves. The commands are applied to the state that is
    current when the reply arrives, not the snapshot sent to the model.
    """
    if context.user_data.get(BUSY_KEY):
        await update.message.reply_text("⏳ Still working on your previous request — one moment.")
        return

    container = _container(update, context)
    context.user_data[BUSY_KEY] = True
    try:
        response = await ask_assistant(container.state, text, audio=audio, document=document)
    except AssistantAuthError as exc:
        logger.error("Assistant auth error: %s", exc)
        await update.message.reply_text(f"⚠️ The assistant rejected the API key: {exc}")
        return
    except AssistantError as exc:
        logger.error("Assistant error: %s", exc)
        await update.message.reply_text(f"⚠️ Couldn't reach the assistant. {exc}")
        return
    except TranscriptionError as exc:
        logger.error("Transcription error: %s", exc)
        await update.message.reply_text(f"⚠️ Couldn't understand the voice message: {exc}")
        return
    except DocumentError as exc:
        logger.error("Document error: %s", exc)
        await update.message.reply_text(f"⚠️ Couldn't read the document: {exc}")
        return
    finally:
        context.user_data[BUSY_KEY] = False

    results = dispatch(container, response.commands, _normalizer(context))
    summary = render_batch_summary(results)

    message = response.text
    if summary:
        message += "\n\n" + summary
    await update.message.reply_text(message)


@authorized_only
async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages — ask the assistant."""
    processing_msg = await update.message.reply_text("Processing...")
    await _run_assistant(update, context, update.message.text)
    try:
        await processing_msg.delete()
    except Exception:
        pass  # Non-critical if delete fails


@authorized_only
async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle voice messages — download, then transcribe + ask the assistant."""
    voice = update.message.voice
    try:
        voice_file = await context.bot.get_file(voice.file_id)
        audio = bytes(await voice_file.download_as_bytearray())
    except Exception as exc:
        logger.error("Voice download error: %s", exc)
        await update.message.reply_text(
            "Sorry, I couldn't download your voice message. Please try again."
        )
        return

    await _run_assistant(update, context, update.message.caption or "", audio=audio)


@authorized_only
async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle PDF uploads — extract text, then ask the assistant."""
    document = update.message.document
    if document.mime_type != PDF_MIME_TYPE:
        await update.message.reply_text("Only PDF files are supported.")
        return

    try:
        doc_file = await context.bot.get_file(document.file_id)
        data = bytes(await doc_file.download_as_bytearray())
    except Exception as exc:
        logger.error("Document download error: %s", exc)
        await update.message.reply_text("Sorry, I couldn't download that file. Please try again.")
        return

    await _run_assistant(update, context, update.message.caption or "", document=data)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Agenda Assistant*!\n\n"
        "I keep your tasks, weekly schedule, notes and hobbies:\n"
        "• Tell me (text or voice) what to add, change or remove\n"
        "• Send a PDF syllabus or timetable and I'll extract it\n"
        "• Use /tasks, /schedule, /notes, /hobbies to see everything\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/tasks — List tasks\n"
        "/addtask — Add a task step by step\n"
        "/status <n> — Change a task's status\n"
        "/edittask <n> <field> <value> — Change one field of a task\n"
        "/deltask <n> — Delete a task\n"
        "/schedule — Show the weekly schedule\n"
        "/addevent <Day> <HH:MM>-<HH:MM> <activity> — Add a schedule block\n"
        "/delevent <n> — Delete a schedule block\n"
        "/clearschedule — Remove all schedule blocks\n"
        "/notes, /note <text>, /delnote <n> — Notes\n"
        "/hobbies, /hobby <name>, /togglehobby <n>, /delhobby <n> — Hobbies\n"
        "/reset — Erase everything\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_tasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /tasks — list tasks."""
    await update.message.reply_text(render_tasks(_container(update, context).state), parse_mode="Markdown")


@authorized_only
async def cmd_status(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status <n> — offer the three statuses as buttons."""
    task = _pick(_container(update, context).state.tasks, context.args)
    if task is None:
        await update.message.reply_text("Usage: /status <n>\nUse /tasks to see the numbers.")
        return

    buttons = [(s.value, f"status:{task.id}:{s.value}") for s in TaskStatus]
    if any(len(data.encode()) > _CALLBACK_DATA_LIMIT for _, data in buttons):
        await update.message.reply_text(
            f"Use /edittask {context.args[0]} status <Pending|In-Progress|Done> for this task."
        )
        return

    keyboard = [[InlineKeyboardButton(label, callback_data=data) for label, data in buttons]]
    await update.message.reply_text(
        f"'{task.name}' is {task.status.value}. New status?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_status_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the inline button tap that sets a task's status."""
    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    # ids may contain ":", the status never does
    task_id, _, status = query.data.removeprefix("status:").rpartition(":")
    container = _container(update, context)
    try:
        new_state = container.update(lambda s: edits.set_task_status(s, task_id, status))
    except ValueError as exc:
        logger.warning("Rejected status callback %r: %s", query.data, exc)
        await query.edit_message_text("That status change couldn't be applied.")
        return

    task = next((t for t in new_state.tasks if t.id == task_id), None)
    if task is None:
        await query.edit_message_text("That task no longer exists.")
        return
    await query.edit_message_text(f"✅ '{task.name}' is now {task.status.value}.")


_EDITTASK_USAGE = (
    "Usage: /edittask <n> <field> <value>\n"
    "Fields: name, start_date, due_date, criticality, priority, status\n"
    "Dates are YYYY-MM-DD; priority is Low/Medium/High; status is Pending/In-Progress/Done."
)


def _parse_task_field(field: str, text: str) -> Any:
    """Convert the typed value for one task field, or raise ValueError."""
    if field in ("start_date", "due_date"):
        value = _parse_iso_date(text)
        if value is None:
            raise ValueError(f"Invalid date: {text!r}")
        return value
    if field == "criticality":
        return int(text)
    return text


@authorized_only
async def cmd_edittask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /edittask <n> <field> <value> — change one field of a task."""
    container = _container(update, context)
    task = _pick(container.state.tasks, context.args)
    if task is None or len(context.args) < 3:
        await update.message.reply_text(_EDITTASK_USAGE)
        return

    field = context.args[1].lower()
    text = " ".join(context.args[2:])
    try:
        value = _parse_task_field(field, text)
        container.update(lambda s: edits.update_task(s, task.id, **{field: value}))
    except ValueError as exc:
        logger.info("Rejected /edittask %s: %s", context.args, exc)
        await update.message.reply_text(f"{exc}\n\n{_EDITTASK_USAGE}")
        return

    await update.message.reply_text(f"✏️ Task '{task.name}': {field} set to {text}.")


@authorized_only
async def cmd_deltask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /deltask <n> — delete one task."""
    container = _container(update, context)
    task = _pick(container.state.tasks, context.args)
    if task is None:
        await update.message.reply_text("Usage: /deltask <n>\nUse /tasks to see the numbers.")
        return
    container.update(lambda s: edits.remove_task(s, task.id))
    await update.message.reply_text(f"🗑 Task '{task.name}' deleted.")


@authorized_only
async def cmd_schedule(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /schedule — show the weekly schedule."""
    await update.message.reply_text(render_schedule(_container(update, context).state), parse_mode="Markdown")


@authorized_only
async def cmd_addevent(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addevent Monday 08:00-10:00 Algebra."""
    parsed = _parse_event_args(" ".join(context.args or []))
    if parsed is None:
        await update.message.reply_text("Usage: /addevent <Day> <HH:MM>-<HH:MM> <activity>\ne.g. /addevent Monday 08:00-10:00 Algebra")
        return
    day, start, end, activity = parsed
    normalizer = _normalizer(context)
    _container(update, context).update(
        lambda s: edits.add_schedule_event(s, day, start, end, activity, normalizer=normalizer)
    )
    await update.message.reply_text(f"✅ Added {activity} on {day} {start}-{end}.")


@authorized_only
async def cmd_delevent(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delevent <n> — delete one schedule block."""
    container = _container(update, context)
    event = _pick(container.state.schedule_events, context.args)
    if event is None:
        await update.message.reply_text("Usage: /delevent <n>\nUse /schedule to see the numbers.")
        return
    container.update(lambda s: edits.remove_schedule_event(s, event.id))
    await update.message.reply_text(f"🗑 Removed {event.activity} ({event.day}).")


@authorized_only
async def cmd_clearschedule(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clearschedule — remove every schedule block."""
    _container(update, context).update(edits.clear_schedule)
    await update.message.reply_text("🗑 Weekly schedule cleared.")


@authorized_only
async def cmd_notes(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_notes(_container(update, context).state), parse_mode="Markdown")


@authorized_only
async def cmd_note(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /note <text> — add a note."""
    content = " ".join(context.args or []).strip()
    if not content:
        await update.message.reply_text("Usage: /note <text>")
        return
    normalizer = _normalizer(context)
    _container(update, context).update(lambda s: edits.add_note(s, content, normalizer=normalizer))
    await update.message.reply_text("📝 Note saved.")


@authorized_only
async def cmd_delnote(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    container = _container(update, context)
    note = _pick(container.state.notes, context.args)
    if note is None:
        await update.message.reply_text("Usage: /delnote <n>\nUse /notes to see the numbers.")
        return
    container.update(lambda s: edits.remove_note(s, note.id))
    await update.message.reply_text("🗑 Note deleted.")


@authorized_only
async def cmd_hobbies(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(render_hobbies(_container(update, context).state), parse_mode="Markdown")


@authorized_only
async def cmd_hobby(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /hobby <name> — add a hobby."""
    name = " ".join(context.args or []).strip()
    if not name:
        await update.message.reply_text("Usage: /hobby <name>")
        return
    normalizer = _normalizer(context)
    _container(update, context).update(lambda s: edits.add_hobby(s, name, normalizer=normalizer))
    await update.message.reply_text(f"🎯 Hobby '{name}' added.")


@authorized_only
async def cmd_togglehobby(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    container = _container(update, context)
    hobby = _pick(container.state.hobbies, context.args)
    if hobby is None:
        await update.message.reply_text("Usage: /togglehobby <n>\nUse /hobbies to see the numbers.")
        return
    new_state = container.update(lambda s: edits.toggle_hobby(s, hobby.id))
    toggled = next(h for h in new_state.hobbies if h.id == hobby.id)
    mark = "☑️ done" if toggled.completed else "⬜ not done"
    await update.message.reply_text(f"'{toggled.name}' marked {mark}.")


@authorized_only
async def cmd_delhobby(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    container = _container(update, context)
    hobby = _pick(container.state.hobbies, context.args)
    if hobby is None:
        await update.message.reply_text("Usage: /delhobby <n>\nUse /hobbies to see the numbers.")
        return
    container.update(lambda s: edits.remove_hobby(s, hobby.id))
    await update.message.reply_text(f"🗑 Hobby '{hobby.name}' removed.")


@authorized_only
async def cmd_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset — ask for confirmation before erasing everything."""
    keyboard = [[
        InlineKeyboardButton("Yes, erase everything", callback_data="reset:yes"),
        InlineKeyboardButton("Cancel", callback_data="reset:no"),
    ]]
    await update.message.reply_text(
        "This deletes all tasks, schedule blocks, notes and hobbies. Are you sure?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_reset_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    if query.data != "reset:yes":
        await query.edit_message_text("Reset canceled.")
        return

    _container(update, context).update(edits.reset_state)
    logger.info("State reset by user %d", user.id)
    await query.edit_message_text("🧹 Everything has been erased.")


# ---------------------------------------------------------------------------
# /addtask conversation (the task form)
# ---------------------------------------------------------------------------

TASK_NAME, TASK_START, TASK_DUE, TASK_CRITICALITY, TASK_PRIORITY = range(5)

_TASK_KEYS = ("task_name", "task_start", "task_due", "task_criticality")


def _clear_task_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for k in _TASK_KEYS:
        context.user_data.pop(k, None)


@authorized_only
async def cmd_addtask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    await update.message.reply_text("What's the task? (e.g. 'History essay')\n/cancel to stop.")
    return TASK_NAME


async def addtask_name(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    name = update.message.text.strip()
    if not name:
        await update.message.reply_text("Please enter a name for the task.")
        return TASK_NAME
    context.user_data["task_name"] = name
    await update.message.reply_text("Recommended start date? (YYYY-MM-DD)")
    return TASK_START


async def addtask_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    start = _parse_iso_date(update.message.text)
    if start is None:
        await update.message.reply_text("Please use the format YYYY-MM-DD.")
        return TASK_START
    context.user_data["task_start"] = start
    await update.message.reply_text("Due date? (YYYY-MM-DD)")
    return TASK_DUE


async def addtask_due(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    due = _parse_iso_date(update.message.text)
    if due is None:
        await update.message.reply_text("Please use the format YYYY-MM-DD.")
        return TASK_DUE
    context.user_data["task_due"] = due
    await update.message.reply_text("Criticality from 1 to 10?")
    return TASK_CRITICALITY


async def addtask_criticality(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    try:
        criticality = int(update.message.text.strip())
    except ValueError:
        criticality = 0
    if not 1 <= criticality <= 10:
        await update.message.reply_text("Please enter a whole number from 1 to 10.")
        return TASK_CRITICALITY
    context.user_data["task_criticality"] = criticality

    keyboard = ReplyKeyboardMarkup(
        [[p.value for p in Priority]], one_time_keyboard=True, resize_keyboard=True,
    )
    await update.message.reply_text("Priority?", reply_markup=keyboard)
    return TASK_PRIORITY


async def addtask_priority(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    priority = coerce_enum(Priority, update.message.text, None)
    if priority is None:
        await update.message.reply_text("Please pick Low, Medium or High.")
        return TASK_PRIORITY

    data = context.user_data
    name = data["task_name"]
    start, due, criticality = data["task_start"], data["task_due"], data["task_criticality"]
    normalizer = _normalizer(context)
    _container(update, context).update(
        lambda s: edits.add_task(
            s, name, start, due, criticality=criticality, priority=priority, normalizer=normalizer,
        )
    )
    _clear_task_data(context)
    await update.message.reply_text(
        f"✅ Task '{name}' added (due {due}, {priority.value}).",
        reply_markup=ReplyKeyboardRemove(),
    )
    return ConversationHandler.END


async def addtask_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    _clear_task_data(context)
    await update.message.reply_text("Task creation canceled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def _tz_clock() -> datetime:
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


async def _flush_pending_saves(application: Application) -> None:
    """Write any state commits still waiting for their deferred save."""
    application.bot_data["registry"].flush_all()


def build_app(
    registry: ContainerRegistry | None = None,
    normalizer: Normalizer | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        registry: Per-user state containers. Defaults to one backed by StateDB.
        normalizer: Defaulting/ID policy. Defaults to the configured TIMEZONE clock.
    """
    app = (
        ApplicationBuilder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .concurrent_updates(True)  # edits are handled while an assistant call is pending
        .post_shutdown(_flush_pending_saves)
        .build()
    )

    if registry is None:
        from src.core.state_container import ContainerRegistry
        from src.data.db import StateDB
        registry = ContainerRegistry(StateDB())

    app.bot_data["registry"] = registry
    app.bot_data["normalizer"] = normalizer or Normalizer(clock=_tz_clock)

    # Commands
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("tasks", cmd_tasks))
    app.add_handler(CommandHandler("status", cmd_status))
    app.add_handler(CommandHandler("edittask", cmd_edittask))
    app.add_handler(CommandHandler("deltask", cmd_deltask))
    app.add_handler(CommandHandler("schedule", cmd_schedule))
    app.add_handler(CommandHandler("addevent", cmd_addevent))
    app.add_handler(CommandHandler("delevent", cmd_delevent))
    app.add_handler(CommandHandler("clearschedule", cmd_clearschedule))
    app.add_handler(CommandHandler("notes", cmd_notes))
    app.add_handler(CommandHandler("note", cmd_note))
    app.add_handler(CommandHandler("delnote", cmd_delnote))
    app.add_handler(CommandHandler("hobbies", cmd_hobbies))
    app.add_handler(CommandHandler("hobby", cmd_hobby))
    app.add_handler(CommandHandler("togglehobby", cmd_togglehobby))
    app.add_handler(CommandHandler("delhobby", cmd_delhobby))
    app.add_handler(CommandHandler("reset", cmd_reset))
    app.add_handler(CallbackQueryHandler(_handle_status_callback, pattern=r"^status:"))
    app.add_handler(CallbackQueryHandler(_handle_reset_callback, pattern=r"^reset:"))

    # /addtask conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    addtask_conv = ConversationHandler(
        entry_points=[CommandHandler("addtask", cmd_addtask)],
        states={
            TASK_NAME: [MessageHandler(_text, addtask_name)],
            TASK_START: [MessageHandler(_text, addtask_start)],
            TASK_DUE: [MessageHandler(_text, addtask_due)],
            TASK_CRITICALITY: [MessageHandler(_text, addtask_criticality)],
            TASK_PRIORITY: [MessageHandler(_text, addtask_priority)],
        },
        fallbacks=[CommandHandler("cancel", addtask_cancel)],
    )
    app.add_handler(addtask_conv)

    # Text messages (non-command)
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    # Voice messages and PDF uploads
    app.add_handler(MessageHandler(filters.VOICE, handle_voice))
    app.add_handler(MessageHandler(filters.Document.ALL, handle_document))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logger.info("Starting Agenda Assistant bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
