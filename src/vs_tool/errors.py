"""Exceptions raised by vs-tool"""

from __future__ import annotations


class VsToolError(Exception):
    """Base class for vs-tool errors"""


class InvalidQuantity(VsToolError, ValueError):
    """A size string is not a valid Kubernetes quantity"""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid quantity: {value!r}")
        self.value: str = value


class NameTaken(VsToolError):
    """A template with this name already exists"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template name already taken: {name}")
        self.name: str = name


class TemplateNotFound(VsToolError):
    """No template is saved under this name"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template {name} not found.")
        self.name: str = name


class SubmissionFailure(VsToolError):
    """The create call returned something other than 201 Created"""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"An unknown error occurred. Code: {status_code}")
        self.status_code: int = status_code


class FlowCancelled(Exception):
    """The operator cancelled a prompt (Ctrl-C or end of input)"""
