"""
Field Resolver

Builds the value table for one composition call: every recognized placeholder
key (with all its spellings), the section header literals, and the sample
literals baked into hand-authored templates, each mapped to its resolved value.

Optional fields (website, LinkedIn, driving license) that are absent resolve to
the REMOVE sentinel instead of an empty string, so composition deletes the
markup that references them.

The resolver never raises for missing data: absent fields resolve to "" (or
REMOVE for optional fields).

Example:
    >>> table = resolve_fields(ResumeData(first_name="Ada", surname="Lovelace"))
    >>> table["fullName"]
    'Ada Lovelace'
    >>> table.lookup("FULL_NAME")
    'ADA LOVELACE'
    >>> table.lookup("website") is REMOVE
    True
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from cvforge.contexts.templating.html_patterns import RemovalPatterns, SectionHeaders
from cvforge.contexts.templating.resume_data_structure import ResumeData
from cvforge.utils.text_processing import last_key_segment, normalize_key

DEFAULT_SUMMARY_PLACEHOLDER = "Add a professional summary to introduce yourself."


class Removal(Enum):
    """Sentinel type for optional fields that must vanish from the output."""

    REMOVE = RemovalPatterns.MARKER

    @property
    def marker(self) -> str:
        return self.value


REMOVE = Removal.REMOVE

Value = Union[str, Removal]


@dataclass(frozen=True)
class FieldSpec:
    """
    One canonical field and every key that spells it.

    Attributes:
        canonical: Canonical camelCase key
        synonyms: Alternative camelCase keys resolving to the same value
        resolve: Function computing the value from resume data
        upper_variant: Whether UPPER_SNAKE spellings resolve upper-cased
    """

    canonical: str
    synonyms: Tuple[str, ...]
    resolve: Callable[[ResumeData], Value]
    upper_variant: bool = False

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.canonical,) + self.synonyms


def _optional(name: str) -> Callable[[ResumeData], Value]:
    def resolve(data: ResumeData) -> Value:
        if data.has_additional_field(name):
            return data.additional_field_value(name)
        return REMOVE

    return resolve


def _summary(data: ResumeData) -> str:
    return data.summary_text or DEFAULT_SUMMARY_PLACEHOLDER


def _skills(data: ResumeData) -> str:
    return ", ".join(skill.name for skill in data.skills)


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec(
        "firstName",
        ("fname", "givenName", "forename"),
        lambda d: d.first_name,
        upper_variant=True,
    ),
    FieldSpec(
        "surname",
        ("lastName", "lname", "familyName"),
        lambda d: d.surname,
        upper_variant=True,
    ),
    FieldSpec(
        "fullName",
        ("name", "candidateName", "yourName"),
        lambda d: d.full_name,
        upper_variant=True,
    ),
    FieldSpec(
        "profession",
        ("jobTitle", "title", "position", "role", "headline"),
        lambda d: d.profession,
        upper_variant=True,
    ),
    FieldSpec("email", ("emailAddress", "mail"), lambda d: d.email),
    FieldSpec("phone", ("phoneNumber", "telephone", "tel", "mobile"), lambda d: d.phone),
    FieldSpec("city", ("town",), lambda d: d.city),
    FieldSpec("country", (), lambda d: d.country),
    FieldSpec("postalCode", ("zip", "zipCode", "postcode"), lambda d: d.postal_code),
    FieldSpec("address", ("location", "cityCountry"), lambda d: d.location),
    FieldSpec("photo", ("photoUrl", "profilePhoto", "avatar"), lambda d: d.photo),
    FieldSpec(
        "professionalSummary",
        ("summary", "profile", "aboutMe", "bio", "description", "about", "objective"),
        _summary,
    ),
    FieldSpec("skills", ("skillList", "skillsList"), _skills),
    FieldSpec("website", ("web", "portfolio", "personalWebsite"), _optional("website")),
    FieldSpec("linkedin", ("linkedIn", "linkedinUrl", "linkedinProfile"), _optional("linkedin")),
    FieldSpec(
        "drivingLicense",
        ("drivingLicence", "driversLicense", "license"),
        _optional("drivingLicense"),
    ),
)

# Sample text hard-coded in third-party templates: (literal, resolver).
# Applied case-sensitively, only when the resolved value is non-empty.
SAMPLE_LITERALS: Tuple[Tuple[str, Callable[[ResumeData], str]], ...] = (
    ("SAHIB KHAN", lambda d: d.full_name.upper()),
    ("Stephen John", lambda d: d.full_name),
    ("GRAPHIC DESIGNER", lambda d: d.profession.upper()),
    ("Graphic Designer", lambda d: d.profession),
    ("📞 telephone", lambda d: f"📞 {d.phone}" if d.phone else ""),
    ("✉️ email", lambda d: f"✉️ {d.email}" if d.email else ""),
    ("📍 address, city, st zip code", lambda d: f"📍 {d.location}" if d.location else ""),
    ("moahmed", lambda d: d.first_name),
    ("tabt=rez", lambda d: d.surname),
    ("movewo", lambda d: d.profession),
    ("onewon", lambda d: d.city),
    ("olnvewon", lambda d: d.country),
    ("ovnewon", lambda d: d.postal_code),
)


def _split_camel(key: str) -> List[str]:
    return [part.lower() for part in re.findall(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])", key)]


def spellings(key: str) -> Tuple[List[str], List[str]]:
    """
    Enumerate the spellings of a camelCase key.

    Returns:
        (plain, upper) where plain holds camel/snake/kebab/lower/Pascal forms
        and upper holds the UPPER_SNAKE and UPPER forms.

    Example:
        >>> spellings("firstName")
        (['firstName', 'first_name', 'first-name', 'firstname', 'FirstName'], ['FIRST_NAME', 'FIRSTNAME'])
    """
    words = _split_camel(key)
    plain = [
        key,
        "_".join(words),
        "-".join(words),
        "".join(words),
        "".join(word.capitalize() for word in words),
    ]
    upper = ["_".join(words).upper(), "".join(words).upper()]
    return list(dict.fromkeys(plain)), list(dict.fromkeys(upper))


class ValueTable(Mapping):
    """
    Resolved placeholder values for one composition call.

    Mapping view covers field keys (all spellings) and literal strings.
    Field values are strings or REMOVE; literal values are always strings.

    Attributes:
        fields: Placeholder key -> value
        literals: Ordered (literal, value) pairs, longest literal first
    """

    def __init__(self, fields: Dict[str, Value], literals: List[Tuple[str, str]], normalized: Dict[str, Tuple[Value, Optional[str]]]):
        self.fields = MappingProxyType(dict(fields))
        self.literals = tuple(sorted(literals, key=lambda pair: (-len(pair[0]), pair[0])))
        self.literal_map = MappingProxyType(dict(self.literals))
        self._normalized = MappingProxyType(dict(normalized))
        self._combined = MappingProxyType({**dict(self.literals), **self.fields})

    def __getitem__(self, key: str) -> Value:
        return self._combined[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._combined)

    def __len__(self) -> int:
        return len(self._combined)

    def lookup(self, key: str) -> Optional[Value]:
        """
        Resolve a placeholder key as written in a template.

        Tries the exact key, then the last dotted segment, then the normalized
        spelling. ALL-CAPS keys of name-like fields resolve upper-cased.

        Returns:
            The value, REMOVE, or None for unknown keys
        """
        key = key.strip()
        if key in self.fields:
            return self.fields[key]
        segment = last_key_segment(key)
        if segment in self.fields:
            return self.fields[segment]
        entry = self._normalized.get(normalize_key(segment))
        if entry is None:
            return None
        value, upper_value = entry
        if upper_value is not None and segment.isupper():
            return upper_value
        return value

    def removed_keys(self) -> List[str]:
        return [key for key, value in self.fields.items() if value is REMOVE]


def resolve_fields(resume_data: Any) -> ValueTable:
    """
    Build the value table for resume data.

    Args:
        resume_data: ResumeData or camelCase mapping

    Returns:
        ValueTable with every placeholder spelling, header literal and sample literal

    Raises:
        InvalidResumeDataError: If resume_data is neither ResumeData nor a mapping
    """
    data = ResumeData.coerce(resume_data)

    fields: Dict[str, Value] = {}
    normalized: Dict[str, Tuple[Value, Optional[str]]] = {}

    for spec in FIELD_SPECS:
        value = spec.resolve(data)
        upper_value = value.upper() if spec.upper_variant and isinstance(value, str) else None
        for key in spec.keys:
            plain, upper = spellings(key)
            for spelling in plain:
                fields.setdefault(spelling, value)
            for spelling in upper:
                fields.setdefault(spelling, upper_value if upper_value is not None else value)
            normalized.setdefault(normalize_key(key), (value, upper_value))

    # Optional fields the user added beyond the known ones (e.g. github)
    for name in list(data.additional_fields) + list(data.additional_info):
        if normalize_key(name) in normalized:
            continue
        value = data.additional_field_value(name) if data.has_additional_field(name) else REMOVE
        fields.setdefault(name, value)
        normalized[normalize_key(name)] = (value, None)

    literals: List[Tuple[str, str]] = [(header, header) for header in SectionHeaders.IDENTITY_LITERALS]
    for literal, resolve in SAMPLE_LITERALS:
        value = resolve(data)
        if value:
            literals.append((literal, value))

    return ValueTable(fields, literals, normalized)
