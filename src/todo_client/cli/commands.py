# src/todo_client/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from ..core.errors import ClientError, SessionInvalid, ValidationError
from ..core.models import PasswordChange, ProfileEditRequest, User
from ..core.state import AppState
from ..tasks.task_models import Priority, TaskDraft, TaskItem, TaskPatch

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console front-end (/help, /login, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Service failures are rendered here; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args, emit)
        except SessionInvalid as e:
            return f"{e.user_message}\nUse /login <email> <password> to sign in again."
        except ClientError as e:
            logger.debug("/%s failed: %s", name, e.__class__.__name__)
            return f"Error: {e.user_message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_user(user: User) -> str:
    lines = [
        f"  Name:   {user.name}",
        f"  Email:  {user.email}",
        f"  Role:   {user.role}",
        f"  Status: {user.status}",
    ]
    if user.photo_ref:
        lines.append(f"  Photo:  {user.photo_ref}")
    return "\n".join(lines)


def format_task(item: TaskItem) -> str:
    box = "[x]" if item.completed else "[ ]"
    line = f"{box} #{item.id} ({item.priority.label}) {item.title}"
    if item.due_date:
        line += f"  due {item.due_date.isoformat()}"
    if item.description:
        line += f"\n      {item.description}"
    return line


def format_tasks(items: list[TaskItem]) -> str:
    if not items:
        return "No tasks yet. Add one with /add <title>."
    done = sum(1 for i in items if i.completed)
    lines = [f"Tasks ({done}/{len(items)} done):"]
    lines.extend(format_task(i) for i in items)
    return "\n".join(lines)


# ---- argument helpers ----


def _pipe_fields(args: list[str]) -> list[str]:
    return [p.strip() for p in " ".join(args).split("|")]


def _key_values(args: list[str]) -> dict[str, str]:
    """Parse "k=v | k2=some value" into a dict."""
    out: dict[str, str] = {}
    for part in _pipe_fields(args):
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise ValidationError(f"Expected key=value, got {part!r}.")
        out[key.strip().lower()] = value.strip()
    return out


def _parse_date(raw: str) -> date | None:
    raw = raw.strip()
    if not raw or raw.lower() in ("none", "-"):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Dates must look like YYYY-MM-DD.") from None


async def _find_task(state: AppState, raw_id: str) -> TaskItem:
    item = state.tasks.find(raw_id)
    if item is None:
        await state.tasks.list()
        item = state.tasks.find(raw_id)
    if item is None:
        raise ValidationError(f"No task with id {raw_id}.")
    return item


# ---- commands ----


async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    user = state.session.user
    who = f"{user.name} <{user.email}>" if user else "-"
    return (
        "Status:\n"
        f"  Session: {state.session.state.value}\n"
        f"  User: {who}\n"
        f"  Server: {state.settings.api_base_url}\n"
        f"  Cached tasks: {len(state.tasks.items)}"
    )


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /login <email> <password>
    """
    if len(args) < 2:
        raise ValidationError("Please fill in email and password: /login <email> <password>")
    user = await state.session.login(args[0], args[1])
    return f"Welcome {user.name}!"


async def cmd_register(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /register <name> <email> <password> [photo]
    """
    if len(args) < 3:
        raise ValidationError("Usage: /register <name> <email> <password> [photo]")
    photo = args[3] if len(args) > 3 else None
    user = await state.session.register(args[0], args[1], args[2], photo)
    return f"Account created for {user.name}. Log in with /login {user.email} <password>."


async def cmd_forgot(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    email = args[0] if args else ""
    if not email:
        last = state.credentials.last_registration()
        email = last.email if last else ""
    return await state.session.request_password_reset(email)


async def cmd_logout(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.session.is_logged_in:
        return "You are not logged in."
    await state.session.logout()
    return "Logged out."


async def cmd_profile(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    user = await state.profile.fetch_current_user()
    return "Profile:\n" + format_user(user)


async def cmd_profile_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /profile-edit name=Ana | email=ana@example.com | photo=file:///me.jpg
    Missing keys keep their current value.
    """
    current = state.session.user
    if current is None:
        raise SessionInvalid("You are not logged in.")
    values = _key_values(args)
    unknown = set(values) - {"name", "email", "photo"}
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}.")

    edit = ProfileEditRequest(
        name=values.get("name", current.name),
        email=values.get("email", current.email),
        photo_ref=values.get("photo", current.photo_ref) or None,
    )
    user = await state.profile.update_profile(edit)
    return "Profile updated.\n" + format_user(user)


async def cmd_password(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /password <current> <new> <confirm>
    """
    current = state.session.user
    if current is None:
        raise SessionInvalid("You are not logged in.")
    if len(args) < 3:
        raise ValidationError("Usage: /password <current> <new> <confirm>")

    edit = ProfileEditRequest(
        name=current.name,
        email=current.email,
        photo_ref=current.photo_ref,
        password_change=PasswordChange(current_password=args[0], new_password=args[1]),
    )
    await state.profile.update_profile(edit, confirm_password=args[2])
    return "Password changed."


async def cmd_tasks(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return format_tasks(await state.tasks.list())


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> [| description [| priority [| YYYY-MM-DD]]]
    """
    fields = _pipe_fields(args) + ["", "", ""]
    title, description, priority, due = fields[:4]
    draft = TaskDraft(
        title=title,
        description=description,
        priority=Priority.parse(priority) if priority else Priority.MEDIUM,
        due_date=_parse_date(due),
    )
    result = await state.tasks.create(draft)
    return f"{result.message}\n{format_tasks(result.items)}"


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit <id> title=... | description=... | priority=high | due=2024-05-01 | completed=yes
    """
    if len(args) < 2:
        raise ValidationError("Usage: /edit <id> field=value | field=value ...")
    task_id = args[0]
    values = _key_values(args[1:])

    kwargs: dict[str, object] = {}
    for key, value in values.items():
        if key == "title":
            kwargs["title"] = value
        elif key == "description":
            kwargs["description"] = value or None
        elif key == "priority":
            kwargs["priority"] = Priority.parse(value)
        elif key in ("due", "due_date"):
            kwargs["due_date"] = _parse_date(value)
        elif key in ("completed", "done"):
            kwargs["completed"] = value.lower() in ("1", "true", "yes", "y", "on")
        else:
            raise ValidationError(f"Unknown field: {key}.")

    result = await state.tasks.update(task_id, TaskPatch(**kwargs))
    return f"{result.message}\n{format_tasks(result.items)}"


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /done <id>  -> toggle completion
    """
    if not args:
        raise ValidationError("Usage: /done <id>")
    item = await _find_task(state, args[0])
    result = await state.tasks.toggle_completed(item)
    return format_tasks(result.items)


async def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        raise ValidationError("Usage: /del <id>")
    if emit:
        emit(f"Deleting task #{args[0]}...")
    result = await state.tasks.delete(args[0])
    return f"{result.message}\n{format_tasks(result.items)}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session and server status.")
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register(
    "register", cmd_register, help_text="Create an account: /register <name> <email> <password> [photo]."
)
registry.register("forgot", cmd_forgot, help_text="Send a temporary password: /forgot <email>.")
registry.register("logout", cmd_logout, help_text="Log out (also on the server).")
registry.register("profile", cmd_profile, help_text="Show your profile.", aliases=["me"])
registry.register(
    "profile-edit", cmd_profile_edit, help_text="Edit profile: /profile-edit name=.. | email=.. | photo=.."
)
registry.register("password", cmd_password, help_text="Change password: /password <current> <new> <confirm>.")
registry.register("tasks", cmd_tasks, help_text="List your tasks.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add title | description | priority | YYYY-MM-DD.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> title=.. | priority=.. | due=..")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.")
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["rm"])
