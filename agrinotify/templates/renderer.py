"""Language detection and `{{placeholder}}` substitution for message templates."""

import re
from enum import Enum
from typing import Any, Mapping


PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class Language(str, Enum):
    ENGLISH = "en"
    KANNADA = "kn"
    HINDI = "hi"
    TAMIL = "ta"
    TELUGU = "te"


_LANGUAGE_PREFIXES = {
    "kn": Language.KANNADA,
    # Some clients send the Karnataka region code instead of the ISO language code.
    "ka": Language.KANNADA,
    "hi": Language.HINDI,
    "ta": Language.TAMIL,
    "te": Language.TELUGU,
}


def template_key_name(template_key) -> str:
    """Plain string form of a template key given as a str or an Enum member."""

    return template_key.value if isinstance(template_key, Enum) else str(template_key)


class UnknownTemplateError(KeyError):
    """Raised when a catalog has neither the requested family nor a fallback."""


def parse_language(code: str | Language | None) -> Language:
    """Map a free-form language code (`kn-IN`, `HI`, None, ...) to a supported language."""

    if isinstance(code, Language):
        return code
    if not code:
        return Language.ENGLISH
    return _LANGUAGE_PREFIXES.get(str(code).lower()[:2], Language.ENGLISH)


def substitute(template: str, variables: Mapping[str, Any] | None = None) -> str:
    """Replace every `{{name}}`; unknown or None variables become empty strings."""

    variables = variables or {}

    def _value(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER.sub(_value, template)


def template_variables(template: str) -> set[str]:
    """Names of the placeholders used in one template string."""

    return set(PLACEHOLDER.findall(template))


class TemplateCatalog:
    """Flat `{template_key: {language: text}}` table with English fallback.

    `fallback` is itself a template; `{{template_key}}` inside it is filled with
    the key that was asked for.
    """

    def __init__(self, name: str, families: Mapping[str, Mapping[Language, str]], fallback: str | None = None):
        self.name = name
        self.families = {template_key_name(key): dict(variants) for key, variants in families.items()}
        self.fallback = fallback

    def __contains__(self, template_key: str) -> bool:
        return template_key_name(template_key) in self.families

    def keys(self) -> list[str]:
        return list(self.families)

    def languages(self, template_key: str) -> list[Language]:
        return list(self.families.get(template_key_name(template_key), {}))

    def template(self, template_key: str, language: str | Language | None) -> str:
        key = template_key_name(template_key)
        family = self.families.get(key)
        if family is None:
            if self.fallback is None:
                raise UnknownTemplateError(f"{self.name}: no template family for {key}")
            return substitute(self.fallback, {"template_key": key})
        lang = parse_language(language)
        return family.get(lang) or family[Language.ENGLISH]

    def render(
        self,
        template_key: str,
        language: str | Language | None,
        variables: Mapping[str, Any] | None = None,
    ) -> str:
        return substitute(self.template(template_key, language), variables)


def supported_languages() -> list[Language]:
    return list(Language)
