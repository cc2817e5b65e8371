"""
studio/services/command_executor.py -- The single mutation gateway.

Every change to the project or the settings is a named command with a
typed payload.  Consumers (settings panel, console, scripts) only know the
command vocabulary, never the shape of the store.

Each command kind has:

    - a pydantic payload model (unknown fields are rejected);
    - a handler that computes the next ProjectData or AppSettings from the
      current one, touching only the slice the command owns.

The executor validates the payload, runs the handler, and replaces the
store's state with a single assignment.  A rejected command leaves the
store untouched.  Persistence follows from the store's change signal.

Usage::

    executor = CommandExecutor(store, bus)
    executor.execute("setTheme", {"theme": "tokyo-night"})
    executor.execute("updateCustomTheme", {"colorKey": "accent", "colorValue": "#ff0088"})
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from conlang.errors import CommandError, InvalidPayload, UnknownCommand
from conlang.models.project import (
    LexiconEntry,
    MorphologyState,
    PhonologyConfig,
    ProjectConstraints,
    ProjectData,
    ScriptConfig,
)
from conlang.models.settings import (
    PALETTE_KEYS,
    AppSettings,
    Color,
    CustomPalette,
    ThemeName,
    validate_language_code,
)
from conlang.models.validators import humanize_validation_error, validate_lexicon_entry
from studio.services.event_bus import EventBus
from studio.services.project_store import ProjectStore
from studio.theme.palettes import DEFAULT_CUSTOM, THEME_PRESETS

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    """The closed command vocabulary."""

    # Settings
    SET_LANGUAGE = "setLanguage"
    SET_THEME = "setTheme"
    UPDATE_CUSTOM_THEME = "updateCustomTheme"
    SET_API_KEY = "setApiKey"
    SET_AI_ENABLED = "setAIEnabled"

    # Project metadata and text
    SET_PROJECT_NAME = "setProjectName"
    SET_PROJECT_AUTHOR = "setProjectAuthor"
    SET_PROJECT_DESCRIPTION = "setProjectDescription"
    SET_GRAMMAR = "setGrammar"
    SET_NOTEBOOK = "setNotebook"

    # Lexicon
    ADD_LEXICON_ENTRY = "addLexiconEntry"
    UPDATE_LEXICON_ENTRY = "updateLexiconEntry"
    REMOVE_LEXICON_ENTRY = "removeLexiconEntry"

    # Structured project parts
    SET_PHONOLOGY = "setPhonology"
    SET_MORPHOLOGY = "setMorphology"
    SET_EVOLUTION_RULES = "setEvolutionRules"
    SET_CONSTRAINTS = "setConstraints"
    SET_SCRIPT_CONFIG = "setScriptConfig"
    LOAD_PROJECT = "loadProject"


# ------------------------------------------------------------------
# Payload models
# ------------------------------------------------------------------

class Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class SetLanguagePayload(Payload):
    language: Annotated[StrictStr, AfterValidator(validate_language_code)]


class SetThemePayload(Payload):
    theme: ThemeName
    custom_theme: Optional[CustomPalette] = None


class UpdateCustomThemePayload(Payload):
    color_key: Literal[PALETTE_KEYS]  # type: ignore[valid-type]
    color_value: Color


class SetApiKeyPayload(Payload):
    api_key: StrictStr


class SetAIEnabledPayload(Payload):
    ai_enabled: StrictBool


class SetProjectNamePayload(Payload):
    name: Annotated[StrictStr, Field(min_length=1)]


class SetProjectAuthorPayload(Payload):
    author: StrictStr


class SetProjectDescriptionPayload(Payload):
    description: StrictStr


class SetGrammarPayload(Payload):
    grammar: StrictStr


class SetNotebookPayload(Payload):
    notebook: StrictStr


class AddLexiconEntryPayload(Payload):
    model_config = ConfigDict(extra="allow")

    word: StrictStr
    id: StrictStr = ""
    ipa: StrictStr = ""
    pos: StrictStr = ""


class UpdateLexiconEntryPayload(Payload):
    model_config = ConfigDict(extra="allow")

    id: Annotated[StrictStr, Field(min_length=1)]
    word: Optional[StrictStr] = None
    ipa: Optional[StrictStr] = None
    pos: Optional[StrictStr] = None


class RemoveLexiconEntryPayload(Payload):
    id: Annotated[StrictStr, Field(min_length=1)]


class SetPhonologyPayload(Payload):
    phonology: PhonologyConfig


class SetMorphologyPayload(Payload):
    morphology: MorphologyState


class SetEvolutionRulesPayload(Payload):
    rules: list[dict[str, Any]]


class SetConstraintsPayload(Payload):
    constraints: dict[str, Any]


class SetScriptConfigPayload(Payload):
    script_config: ScriptConfig


class LoadProjectPayload(Payload):
    project: dict[str, Any]


# ------------------------------------------------------------------
# Handlers: (store, payload) -> next ProjectData or AppSettings
# ------------------------------------------------------------------

State = Union[ProjectData, AppSettings]
Handler = Callable[[ProjectStore, Any], State]


def new_entry_id() -> str:
    return uuid.uuid4().hex[:12]


def _set_language(store: ProjectStore, p: SetLanguagePayload) -> AppSettings:
    return store.settings.model_copy(update={"language": p.language})


def _set_theme(store: ProjectStore, p: SetThemePayload) -> AppSettings:
    settings = store.settings
    if p.custom_theme is not None:
        palette = p.custom_theme
    elif p.theme in THEME_PRESETS:
        # Copy the preset so a custom theme can be derived from it.
        palette = THEME_PRESETS[p.theme]
    else:
        palette = settings.custom_theme or DEFAULT_CUSTOM
    return settings.model_copy(update={"theme": p.theme, "custom_theme": palette})


def _update_custom_theme(store: ProjectStore, p: UpdateCustomThemePayload) -> AppSettings:
    settings = store.settings
    base = settings.custom_theme or DEFAULT_CUSTOM
    return settings.model_copy(
        update={"custom_theme": base.with_color(p.color_key, p.color_value)}
    )


def _set_api_key(store: ProjectStore, p: SetApiKeyPayload) -> AppSettings:
    return store.settings.model_copy(update={"api_key": p.api_key})


def _set_ai_enabled(store: ProjectStore, p: SetAIEnabledPayload) -> AppSettings:
    return store.settings.model_copy(update={"enable_ai": p.ai_enabled})


def _set_field(field: str) -> Handler:
    """Handler replacing one project field with the same-named payload value."""
    def handler(store: ProjectStore, p: Payload) -> ProjectData:
        return store.project.model_copy(update={field: getattr(p, field)})
    handler.__name__ = f"_set_{field}"
    return handler


def _check_entry(kind: CommandKind, entry: LexiconEntry, project: ProjectData) -> None:
    issues = validate_lexicon_entry(entry, project.lexicon, project.constraints)
    if issues:
        raise InvalidPayload(kind.value, issues)


def _add_lexicon_entry(store: ProjectStore, p: AddLexiconEntryPayload) -> ProjectData:
    kind = CommandKind.ADD_LEXICON_ENTRY
    project = store.project
    record = p.model_dump(by_alias=True)
    if not record.get("id"):
        record["id"] = new_entry_id()
    elif project.find_entry(record["id"]) is not None:
        raise InvalidPayload(kind.value, [f"An entry with id '{record['id']}' already exists."])
    try:
        entry = LexiconEntry.model_validate(record)
    except ValidationError as exc:
        raise InvalidPayload(
            kind.value, [humanize_validation_error(e, kind.value) for e in exc.errors()]
        ) from exc
    _check_entry(kind, entry, project)
    return project.model_copy(update={"lexicon": [*project.lexicon, entry]})


def _update_lexicon_entry(store: ProjectStore, p: UpdateLexiconEntryPayload) -> ProjectData:
    kind = CommandKind.UPDATE_LEXICON_ENTRY
    project = store.project
    existing = project.find_entry(p.id)
    if existing is None:
        raise InvalidPayload(kind.value, [f"No lexicon entry with id '{p.id}'."])
    changes = {k: v for k, v in p.model_dump(by_alias=True).items() if v is not None}
    try:
        entry = LexiconEntry.model_validate({**existing.to_record(), **changes})
    except ValidationError as exc:
        raise InvalidPayload(
            kind.value, [humanize_validation_error(e, kind.value) for e in exc.errors()]
        ) from exc
    # Constraints govern words; edits to other fields keep older words valid.
    if entry.word != existing.word:
        _check_entry(kind, entry, project)
    lexicon = [entry if e.id == p.id else e for e in project.lexicon]
    return project.model_copy(update={"lexicon": lexicon})


def _remove_lexicon_entry(store: ProjectStore, p: RemoveLexiconEntryPayload) -> ProjectData:
    project = store.project
    if project.find_entry(p.id) is None:
        raise InvalidPayload(
            CommandKind.REMOVE_LEXICON_ENTRY.value, [f"No lexicon entry with id '{p.id}'."]
        )
    lexicon = [e for e in project.lexicon if e.id != p.id]
    return project.model_copy(update={"lexicon": lexicon})


def _set_evolution_rules(store: ProjectStore, p: SetEvolutionRulesPayload) -> ProjectData:
    return store.project.model_copy(update={"evolution_rules": p.rules})


def _set_constraints(store: ProjectStore, p: SetConstraintsPayload) -> ProjectData:
    kind = CommandKind.SET_CONSTRAINTS
    project = store.project
    try:
        constraints = ProjectConstraints.model_validate(
            {**project.constraints.to_record(), **p.constraints}
        )
    except ValidationError as exc:
        raise InvalidPayload(
            kind.value,
            [humanize_validation_error(e, kind.value) for e in exc.errors()],
        ) from exc
    return project.model_copy(update={"constraints": constraints})


def _load_project(store: ProjectStore, p: LoadProjectPayload) -> ProjectData:
    return ProjectStore.load(p.project)


_REGISTRY: dict[CommandKind, tuple[type[Payload], Handler]] = {
    CommandKind.SET_LANGUAGE: (SetLanguagePayload, _set_language),
    CommandKind.SET_THEME: (SetThemePayload, _set_theme),
    CommandKind.UPDATE_CUSTOM_THEME: (UpdateCustomThemePayload, _update_custom_theme),
    CommandKind.SET_API_KEY: (SetApiKeyPayload, _set_api_key),
    CommandKind.SET_AI_ENABLED: (SetAIEnabledPayload, _set_ai_enabled),
    CommandKind.SET_PROJECT_NAME: (SetProjectNamePayload, _set_field("name")),
    CommandKind.SET_PROJECT_AUTHOR: (SetProjectAuthorPayload, _set_field("author")),
    CommandKind.SET_PROJECT_DESCRIPTION: (SetProjectDescriptionPayload, _set_field("description")),
    CommandKind.SET_GRAMMAR: (SetGrammarPayload, _set_field("grammar")),
    CommandKind.SET_NOTEBOOK: (SetNotebookPayload, _set_field("notebook")),
    CommandKind.ADD_LEXICON_ENTRY: (AddLexiconEntryPayload, _add_lexicon_entry),
    CommandKind.UPDATE_LEXICON_ENTRY: (UpdateLexiconEntryPayload, _update_lexicon_entry),
    CommandKind.REMOVE_LEXICON_ENTRY: (RemoveLexiconEntryPayload, _remove_lexicon_entry),
    CommandKind.SET_PHONOLOGY: (SetPhonologyPayload, _set_field("phonology")),
    CommandKind.SET_MORPHOLOGY: (SetMorphologyPayload, _set_field("morphology")),
    CommandKind.SET_EVOLUTION_RULES: (SetEvolutionRulesPayload, _set_evolution_rules),
    CommandKind.SET_CONSTRAINTS: (SetConstraintsPayload, _set_constraints),
    CommandKind.SET_SCRIPT_CONFIG: (SetScriptConfigPayload, _set_field("script_config")),
    CommandKind.LOAD_PROJECT: (LoadProjectPayload, _load_project),
}


# ------------------------------------------------------------------
# Executor
# ------------------------------------------------------------------

class CommandExecutor:
    """Validates and applies commands to a ProjectStore.

    Parameters
    ----------
    store : ProjectStore
        The store whose state this executor replaces.
    bus : EventBus, optional
        Receives ``command_executed`` / ``command_failed``.
    """

    def __init__(self, store: ProjectStore, bus: EventBus | None = None):
        self._store = store
        self._bus = bus

    @staticmethod
    def vocabulary() -> list[str]:
        """All command names, in declaration order."""
        return [kind.value for kind in CommandKind]

    @staticmethod
    def lookup(name: str, *, ignore_case: bool = False) -> CommandKind | None:
        """Return the command kind called *name*, or None."""
        for kind in CommandKind:
            if kind.value == name or (ignore_case and kind.value.upper() == name.upper()):
                return kind
        return None

    def execute(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        """Apply command *name* with *payload*.

        Raises
        ------
        UnknownCommand
            If *name* is not in the vocabulary.
        InvalidPayload
            If the payload is malformed or the change violates a rule.
        """
        try:
            self._apply(name, payload)
        except CommandError as exc:
            self.report_rejection(exc)
            raise
        logger.debug("Command %s applied", name)
        if self._bus is not None:
            self._bus.command_executed.emit(name)

    def report_rejection(self, exc: CommandError) -> None:
        """Log and announce a command that was refused before it ran.

        Consumers that reject input on their own (such as unparseable
        console arguments) call this so every refusal reaches the bus.
        """
        logger.info("Command %s rejected: %s", exc.command, exc.message)
        if self._bus is not None:
            self._bus.command_failed.emit(exc.command, exc.message)

    def _apply(self, name: str, payload: Mapping[str, Any] | None) -> None:
        kind = self.lookup(name) if isinstance(name, str) else None
        entry = _REGISTRY.get(kind) if kind is not None else None
        if entry is None:
            raise UnknownCommand(str(name))
        payload_model, handler = entry

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise InvalidPayload(kind.value, ["payload must be an object of named fields."])
        try:
            parsed = payload_model.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidPayload(
                kind.value,
                [humanize_validation_error(e, kind.value) for e in exc.errors()],
            ) from exc

        next_state = handler(self._store, parsed)
        if isinstance(next_state, AppSettings):
            self._store.replace_settings(next_state)
        else:
            self._store.replace_project(next_state)
