"""Custom exceptions for templating context."""

from typing import Optional


class TemplateCompositionError(Exception):
    """
    Exception raised when a template cannot be composed at all.

    Only raised for input the engine cannot degrade around (e.g., missing
    template content). Malformed markup never raises.

    Attributes:
        message: Error description
        template_id: Identifier of the template being composed, if known
        html_snippet: The template content that failed
    """

    def __init__(
        self,
        message: str,
        template_id: Optional[int] = None,
        html_snippet: Optional[str] = None,
    ):
        self.message = message
        self.template_id = template_id
        self.html_snippet = html_snippet

        parts = [message]

        if template_id is not None:
            parts.append(f"\nTemplate: {template_id}")

        if html_snippet:
            snippet = html_snippet[:200] + "..." if len(html_snippet) > 200 else html_snippet
            parts.append(f"\nTemplate HTML:\n{snippet}")

        super().__init__("\n".join(parts))


class FragmentRenderError(Exception):
    """
    Exception raised when a repeating-group fragment template fails to render.

    Attributes:
        message: Error description
        fragment_name: Name of the fragment being rendered
        original_error: The original Jinja2 error
    """

    def __init__(
        self,
        message: str,
        fragment_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.fragment_name = fragment_name
        self.original_error = original_error

        parts = [message]

        if fragment_name:
            parts.append(f"\nFragment: {fragment_name}")

        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))


class InvalidResumeDataError(ValueError):
    """
    Exception raised when resume data is neither a ResumeData nor a mapping.
    """

    pass
