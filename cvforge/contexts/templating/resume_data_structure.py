"""
Resume Data Structures

Defines the structured resume data consumed by composition, and the template
record supplied by template persistence.

Both are built from the camelCase dicts produced by the UI/session layer via
from_dict(). Composition only reads these structures, never mutates them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from cvforge.contexts.templating.exceptions import InvalidResumeDataError
from cvforge.utils.text_processing import join_non_empty

TEMPORARY_ID_PREFIXES = ("temp", "placeholder")


def _text(data: Mapping[str, Any], *keys: str) -> str:
    """Return the first non-empty value among keys as a stripped string."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return ""


def _flag(data: Mapping[str, Any], *keys: str) -> bool:
    for key in keys:
        if key in data and data[key] is not None:
            return bool(data[key])
    return False


@dataclass
class AdditionalField:
    """
    Optional contact field (website, LinkedIn, driving license, ...).

    Attributes:
        value: Field value as entered
        visible: Whether the user chose to show it on the resume
    """

    value: str = ""
    visible: bool = True

    @classmethod
    def from_value(cls, raw: Any) -> "AdditionalField":
        if isinstance(raw, Mapping):
            visible = raw.get("visible")
            return cls(
                value=_text(raw, "value"),
                visible=True if visible is None else bool(visible),
            )
        return cls(value="" if raw is None else str(raw).strip())


@dataclass
class WorkExperienceEntry:
    """
    Single work history entry.

    Identity for de-duplication is (job_title, employer, start_year, start_month),
    compared case-sensitively on the raw strings.
    """

    job_title: str = ""
    employer: str = ""
    location: str = ""
    is_remote: bool = False
    start_month: str = ""
    start_year: str = ""
    end_month: str = ""
    end_year: str = ""
    is_current_job: bool = False
    responsibilities: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkExperienceEntry":
        entry_id = data.get("id")
        return cls(
            job_title=_text(data, "jobTitle", "job_title", "title"),
            employer=_text(data, "employer", "company"),
            location=_text(data, "location"),
            is_remote=_flag(data, "isRemote", "is_remote"),
            # Older previews stored free-form startDate/endDate strings
            start_month=_text(data, "startMonth", "start_month") or _text(data, "startDate"),
            start_year=_text(data, "startYear", "start_year"),
            end_month=_text(data, "endMonth", "end_month") or _text(data, "endDate"),
            end_year=_text(data, "endYear", "end_year"),
            is_current_job=_flag(data, "isCurrentJob", "is_current_job", "isCurrentPosition"),
            responsibilities=_text(data, "responsibilities", "description"),
            id=None if entry_id is None else str(entry_id),
        )

    @property
    def dedup_key(self) -> tuple:
        return (self.job_title, self.employer, self.start_year, self.start_month)

    @property
    def is_temporary(self) -> bool:
        """True for entries the editor created as unsaved placeholders."""
        if not self.id:
            return False
        return self.id.strip().lower().startswith(TEMPORARY_ID_PREFIXES)

    @property
    def date_range(self) -> str:
        """
        Date range as "{start} - Present" for current jobs, else "{start} - {end}".

        Returns an empty string when no dates were entered.
        """
        start = join_non_empty([self.start_month, self.start_year], separator=" ")
        end = "Present" if self.is_current_job else join_non_empty(
            [self.end_month, self.end_year], separator=" "
        )
        if start and end:
            return f"{start} - {end}"
        return start or end

    @property
    def location_line(self) -> str:
        location = self.location
        if self.is_remote:
            location = join_non_empty([location, "Remote"], separator=" / ")
        return join_non_empty([self.employer, location])


@dataclass
class EducationAchievement:
    """Achievement, prize, coursework or activity attached to an education entry."""

    title: str = ""
    type: str = "achievement"
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EducationAchievement":
        return cls(
            title=_text(data, "title"),
            type=_text(data, "type") or "achievement",
            description=_text(data, "description"),
        )


@dataclass
class EducationEntry:
    """Single education entry."""

    degree: str = ""
    field_of_study: str = ""
    institution: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    achievements: List[EducationAchievement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EducationEntry":
        graduation = join_non_empty(
            [_text(data, "graduationMonth"), _text(data, "graduationYear")], separator=" "
        )
        return cls(
            degree=_text(data, "degree"),
            field_of_study=_text(data, "fieldOfStudy", "field_of_study"),
            institution=_text(data, "institution", "schoolName", "school_name"),
            location=_text(data, "location", "schoolLocation", "school_location"),
            start_date=_text(data, "startDate", "start_date"),
            end_date=_text(data, "endDate", "end_date") or graduation,
            description=_text(data, "description"),
            achievements=[
                EducationAchievement.from_dict(item)
                for item in data.get("achievements") or []
                if isinstance(item, Mapping)
            ],
        )

    @property
    def title(self) -> str:
        if self.degree and self.field_of_study:
            return f"{self.degree} in {self.field_of_study}"
        return self.degree or self.field_of_study

    @property
    def institution_line(self) -> str:
        return join_non_empty([self.institution, self.location])

    @property
    def date_range(self) -> str:
        if self.start_date and self.end_date:
            return f"{self.start_date} - {self.end_date}"
        return self.end_date or self.start_date


@dataclass
class SkillEntry:
    """Single skill; templates render the name, optionally with level."""

    name: str = ""
    level: Optional[str] = None
    is_recommended: bool = False

    @classmethod
    def from_value(cls, raw: Any) -> "SkillEntry":
        if isinstance(raw, Mapping):
            level = _text(raw, "level")
            return cls(
                name=_text(raw, "name"),
                level=level or None,
                is_recommended=_flag(raw, "isRecommended", "is_recommended"),
            )
        return cls(name="" if raw is None else str(raw).strip())


@dataclass
class ResumeData:
    """
    Complete resume data for one composition call.

    Optional contact fields exist in two shapes, both supported:
    - additional_fields: {name: AdditionalField(value, visible)}
    - legacy additional_info {name: value} + additional_info_visibility {name: bool}
    """

    first_name: str = ""
    surname: str = ""
    profession: str = ""
    city: str = ""
    country: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""
    photo: str = ""
    summary: str = ""
    professional_summary: str = ""
    work_experience: List[WorkExperienceEntry] = field(default_factory=list)
    education: List[EducationEntry] = field(default_factory=list)
    skills: List[SkillEntry] = field(default_factory=list)
    additional_fields: Dict[str, AdditionalField] = field(default_factory=dict)
    additional_info: Dict[str, str] = field(default_factory=dict)
    additional_info_visibility: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResumeData":
        """
        Build resume data from the camelCase dict used by the editor.

        Missing keys and None values become empty strings/collections.
        """
        additional_fields = {
            str(name): AdditionalField.from_value(raw)
            for name, raw in (data.get("additionalFields") or {}).items()
        }
        additional_info = {
            str(name): "" if value is None else str(value).strip()
            for name, value in (data.get("additionalInfo") or {}).items()
        }
        visibility = {
            str(name): bool(flag)
            for name, flag in (data.get("additionalInfoVisibility") or {}).items()
        }
        return cls(
            first_name=_text(data, "firstName", "first_name"),
            surname=_text(data, "surname", "lastName", "last_name"),
            profession=_text(data, "profession"),
            city=_text(data, "city"),
            country=_text(data, "country"),
            postal_code=_text(data, "postalCode", "postal_code"),
            phone=_text(data, "phone"),
            email=_text(data, "email"),
            photo=_text(data, "photo"),
            summary=_text(data, "summary"),
            professional_summary=_text(data, "professionalSummary", "professional_summary"),
            work_experience=[
                WorkExperienceEntry.from_dict(item)
                for item in data.get("workExperience") or []
                if isinstance(item, Mapping)
            ],
            education=[
                EducationEntry.from_dict(item)
                for item in data.get("education") or []
                if isinstance(item, Mapping)
            ],
            skills=[
                skill
                for skill in (SkillEntry.from_value(raw) for raw in data.get("skills") or [])
                if skill.name
            ],
            additional_fields=additional_fields,
            additional_info=additional_info,
            additional_info_visibility=visibility,
        )

    @classmethod
    def coerce(cls, resume_data: Any) -> "ResumeData":
        """
        Accept either a ResumeData or a mapping.

        Raises:
            InvalidResumeDataError: If resume_data is neither
        """
        if isinstance(resume_data, cls):
            return resume_data
        if isinstance(resume_data, Mapping):
            return cls.from_dict(resume_data)
        raise InvalidResumeDataError(
            f"Resume data must be ResumeData or a mapping, got {type(resume_data).__name__}"
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()

    @property
    def location(self) -> str:
        return join_non_empty([self.city, self.country])

    @property
    def summary_text(self) -> str:
        """Professional summary, falling back to the short summary."""
        return self.professional_summary or self.summary

    def has_additional_field(self, name: str) -> bool:
        """
        Check whether an optional field should appear on the resume.

        Present means a non-empty value AND a true visibility flag. The new
        additional_fields shape is checked first, then the legacy maps.
        A legacy value without a visibility entry counts as visible.
        """
        if name in self.additional_fields:
            entry = self.additional_fields[name]
            return bool(entry.value) and entry.visible
        value = self.additional_info.get(name, "")
        return bool(value) and self.additional_info_visibility.get(name, True)

    def additional_field_value(self, name: str) -> str:
        if name in self.additional_fields:
            return self.additional_fields[name].value
        return self.additional_info.get(name, "")


@dataclass
class TemplateRecord:
    """
    Persisted resume template, as supplied by template management.

    Composition reads html_content only and never writes records back.
    """

    id: Optional[int] = None
    name: str = ""
    html_content: str = ""
    css_content: str = ""
    js_content: Optional[str] = None
    primary_color: str = ""
    secondary_color: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TemplateRecord":
        template_id = data.get("id")
        is_active = data.get("isActive", data.get("is_active"))
        return cls(
            id=None if template_id is None else int(template_id),
            name=_text(data, "name"),
            html_content=data.get("htmlContent") or data.get("html_content") or "",
            css_content=data.get("cssContent") or data.get("css_content") or "",
            js_content=data.get("jsContent") or data.get("js_content"),
            primary_color=_text(data, "primaryColor", "primary_color"),
            secondary_color=_text(data, "secondaryColor", "secondary_color"),
            is_active=True if is_active is None else bool(is_active),
        )
