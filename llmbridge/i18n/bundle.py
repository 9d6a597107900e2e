"""Message bundle for user-facing strings.

English is the source language: its text is the `default` passed at each call
site, so only translations ship as files. `init_bundle` is called once at
startup and the resulting `Bundle` is handed to whatever renders text.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from llmbridge.core.errors import TranslationFileError

BASE_DIR = Path(__file__).resolve().parent

MESSAGE_FILES = ('es.json', 'ko.json')

TranslationFunc = Callable[..., str]


@dataclass(frozen=True)
class Bundle:
    """Immutable `language -> {message id -> text}` table."""

    messages: Mapping[str, Mapping[str, str]]

    def lookup(self, lang: str, message_id: str) -> str | None:
        table = self.messages.get(lang)
        if table is None:
            return None
        return table.get(message_id)


def _normalize_lang(lang: str) -> str:
    return lang.strip().replace('_', '-').lower()


def _read_message_file(path: Path) -> dict[str, str]:
    """Read a go-i18n style file: `{"id": "text"}` or `{"id": {"other": "text"}}`."""
    if not path.exists():
        raise TranslationFileError(f'Message file not found: {path.name}')
    try:
        raw: Any = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as exc:
        raise TranslationFileError(f'Message file is not valid JSON: {path.name}') from exc
    if not isinstance(raw, dict):
        raise TranslationFileError(f'Message file must hold an object: {path.name}')

    messages: dict[str, str] = {}
    for message_id, value in raw.items():
        if isinstance(value, str):
            messages[message_id] = value
        elif isinstance(value, dict) and isinstance(value.get('other'), str):
            messages[message_id] = value['other']
    return messages


def init_bundle(base_dir: Path | None = None, files: tuple[str, ...] = MESSAGE_FILES) -> Bundle:
    """Load every message file into a new bundle.

    Raises:
        TranslationFileError: If a file is missing or malformed.
    """
    directory = base_dir or BASE_DIR
    tables: dict[str, Mapping[str, str]] = {}
    for name in files:
        lang = _normalize_lang(Path(name).stem)
        tables[lang] = MappingProxyType(_read_message_file(directory / name))
    return Bundle(messages=MappingProxyType(tables))


def localizer_func(bundle: Bundle, lang: str) -> TranslationFunc:
    """Return `translate(message_id, default, *params)` bound to `lang`.

    Lookup order is the exact tag (`es-mx`), its base language (`es`), then
    `default`. Params are applied with `%` formatting and never raise.
    """
    tag = _normalize_lang(lang)
    candidates = [tag]
    base = tag.split('-', 1)[0]
    if base != tag:
        candidates.append(base)

    def translate(message_id: str, default: str, *params: Any) -> str:
        text = default
        for candidate in candidates:
            found = bundle.lookup(candidate, message_id)
            if found is not None:
                text = found
                break
        if not params:
            return text
        # A translation with the wrong verbs falls back to the default, then to raw text.
        for template in (text, default):
            try:
                return template % params
            except (TypeError, ValueError):
                continue
        return text

    return translate
