"""Question lists for the Virtual Server wizard"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any

from vs_tool.config import MAX_PORT, MAX_PORTS
from vs_tool.descriptor import Descriptor, check_ports
from vs_tool.flow import AnswerSet, Choice, Kind, Question
from vs_tool.pricing import Catalog
from vs_tool.quantity import validate_quantity

# RFC 1123 subdomain, as used for Kubernetes object names
_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

OS_CHOICES = (Choice("linux"), Choice("windows"))


def validate_name(value: str, _: AnswerSet | None = None) -> str | None:
    if not isinstance(value, str) or len(value) > 253 or not _NAME_RE.match(value):
        return "Must be a lowercase name of a-z, 0-9, '-' and '.'"
    return None


def validate_size(value: str, _: AnswerSet | None = None) -> str | None:
    return None if validate_quantity(value) else "Must be a valid quantity."


def validate_required(value: str, _: AnswerSet | None = None) -> str | None:
    return None if isinstance(value, str) and value.strip() else "A value is required."


def validate_count(value: int, _: AnswerSet | None = None) -> str | None:
    return None if isinstance(value, int) and value >= 1 else "Must be at least 1."


def split_ports(value: str | None) -> list[str]:
    return [p.strip() for p in (value or "").split(",") if p.strip()]


def validate_ports(value: str | None, _: AnswerSet | None = None) -> str | None:
    """Accept a comma-separated list of at most 10 ports in (0, 65536]."""
    parts = split_ports(value)
    if len(parts) > MAX_PORTS:
        return f"Maximum of {MAX_PORTS} ports"
    if not all(p.isascii() and p.isdigit() for p in parts):
        return f"Invalid port value. 0 < port <= {MAX_PORT}."
    return check_ports([int(p) for p in parts])


def parse_ports(value: str | None, _: AnswerSet | None = None) -> tuple[int, ...]:
    return tuple(dict.fromkeys(int(p) for p in split_ports(value)))


def _presets(answers: AnswerSet, cls: str) -> list[Choice]:
    spec = answers["definition"].get("spec", {})
    return [Choice(p["type"]) for p in spec.get("presets", []) if p.get("class") == cls]


def _default_os(answers: AnswerSet) -> str | None:
    image = answers.get("image")
    if not image:
        return None
    return "windows" if "windows" in image["metadata"]["name"] else "linux"


def base_questions(
    images: Sequence[Mapping[str, Any]],
    default_namespace: str,
    regions: Sequence[str],
) -> list[Question]:
    """Identity, region, root filesystem source and OS."""
    images = tuple(images)
    has_images = bool(images)

    return [
        Question(
            key="name",
            kind=Kind.TEXT,
            message="Enter a name for your Virtual Server.",
            validate=validate_name,
        ),
        Question(
            key="namespace",
            kind=Kind.TEXT,
            message="Enter the namespace to deploy your Virtual Server to.",
            default=default_namespace,
            validate=validate_name,
        ),
        Question(
            key="region",
            kind=Kind.SINGLE_SELECT,
            message="Select a region.",
            choices=[Choice(r) for r in regions],
        ),
        Question(
            key="image",
            kind=Kind.SINGLE_SELECT,
            message="Select an image.",
            choices=[Choice(i["metadata"]["name"], i) for i in images],
            active=has_images,
        ),
        Question(
            key="image_name",
            kind=Kind.TEXT,
            message="Enter source image PVC name for the root FS.",
            active=not has_images,
            validate=validate_name,
        ),
        Question(
            key="image_namespace",
            kind=Kind.TEXT,
            message="Enter the namespace of the source PVC for the root FS.",
            default=default_namespace,
            active=not has_images,
            validate=validate_name,
        ),
        Question(
            key="image_size",
            kind=Kind.TEXT,
            message="Enter root FS PVC size.",
            default="40Gi",
            active=not has_images,
            validate=validate_size,
        ),
        Question(
            key="image_storage_class",
            kind=Kind.TEXT,
            message="Enter root FS PVC storageClassName.",
            active=not has_images,
            validate=validate_name,
        ),
        Question(
            key="os",
            kind=Kind.SINGLE_SELECT,
            message="Select an OS.",
            default=_default_os,
            choices=OS_CHOICES,
        ),
    ]


def resource_questions(
    definitions: Sequence[Mapping[str, Any]] | None,
    catalog: Catalog,
) -> list[Question]:
    """Instance definition, GPU or CPU selection, memory and swap.

    With definitions available, GPU and CPU types come from the selected
    definition's presets; otherwise from the billing catalog.
    """
    definitions = tuple(definitions or ())
    has_definitions = bool(definitions)

    def compute_choices(cls: str, catalog_ids: list[str]) -> Callable[[AnswerSet], list[Choice]]:
        def choices(answers: AnswerSet) -> list[Choice]:
            if has_definitions:
                return _presets(answers, cls)
            return [Choice(i) for i in catalog_ids]

        return choices

    return [
        Question(
            key="definition",
            kind=Kind.SINGLE_SELECT if has_definitions else Kind.TEXT,
            message="Select a definition." if has_definitions else "Enter a definition.",
            choices=[Choice(d["spec"]["alias"], d) for d in definitions],
            validate=None if has_definitions else validate_name,
            format=lambda v, _: v if isinstance(v, Mapping) else {"spec": {"alias": v}},
        ),
        Question(key="gpu_enabled", kind=Kind.TOGGLE, message="Add a GPU?", default=False),
        Question(
            key="gpu",
            kind=Kind.SINGLE_SELECT,
            message="Select a GPU.",
            choices=compute_choices("gpu", catalog.gpu_ids),
            active=lambda a: a["gpu_enabled"],
            validate=validate_required,
        ),
        Question(
            key="gpu_count",
            kind=Kind.NUMBER,
            message="Select a number of GPU(s).",
            default=1,
            active=lambda a: bool(a.get("gpu")),
            validate=validate_count,
        ),
        Question(
            key="cpu",
            kind=Kind.SINGLE_SELECT,
            message="Select a CPU.",
            choices=compute_choices("cpu", catalog.cpu_ids),
            active=lambda a: not a["gpu_enabled"],
            validate=validate_required,
        ),
        Question(
            key="cpu_count",
            kind=Kind.NUMBER,
            message="Select a number of CPU(s).",
            default=1,
            validate=validate_count,
        ),
        Question(
            key="memory",
            kind=Kind.TEXT,
            message="Enter memory amount.",
            default="1Gi",
            validate=validate_size,
        ),
        Question(key="add_swap", kind=Kind.TOGGLE, message="Add swap?", default=False),
        Question(
            key="swap",
            kind=Kind.TEXT,
            message="Enter swap amount.",
            default="1Gi",
            active=lambda a: a["add_swap"],
            validate=validate_size,
        ),
    ]


def network_questions(services: Sequence[Mapping[str, Any]]) -> list[Question]:
    """Load balancer mode, exposed ports, floating IPs and public IP."""
    services = tuple(services)

    def exposes_ports(answers: AnswerSet) -> bool:
        return bool(
            answers["direct_attach"] or answers.get("tcp_ports") or answers.get("udp_ports")
        )

    return [
        Question(
            key="direct_attach",
            kind=Kind.TOGGLE,
            message="Direct attach load balancer?",
            default=False,
        ),
        Question(
            key="tcp_ports",
            kind=Kind.TEXT,
            message="Enter a comma-separated list of tcp ports to expose.",
            active=lambda a: not a["direct_attach"],
            validate=validate_ports,
            format=parse_ports,
        ),
        Question(
            key="udp_ports",
            kind=Kind.TEXT,
            message="Enter a comma-separated list of udp ports to expose.",
            active=lambda a: not a["direct_attach"],
            validate=validate_ports,
            format=parse_ports,
        ),
        Question(
            key="floating_ips",
            kind=Kind.MULTI_SELECT,
            message="Select any number of floating IP services.",
            choices=[Choice(s["metadata"]["name"], s) for s in services],
            active=bool(services),
        ),
        Question(
            key="public",
            kind=Kind.TOGGLE,
            message="Create a public IP?",
            default=False,
            active=exposes_ports,
        ),
    ]


def identity_questions(descriptor: Descriptor, default_namespace: str) -> list[Question]:
    """New name and namespace for a Virtual Server created from a template."""
    return [
        Question(
            key="name",
            kind=Kind.TEXT,
            message="Enter a name for your Virtual Server.",
            default=descriptor.identity.name,
            validate=validate_name,
        ),
        Question(
            key="namespace",
            kind=Kind.TEXT,
            message="Enter the namespace to deploy your Virtual Server to.",
            default=default_namespace,
            validate=validate_name,
        ),
    ]


def template_choice_question(names: Sequence[str]) -> Question:
    return Question(
        key="template",
        kind=Kind.SINGLE_SELECT,
        message="Select a template.",
        choices=[Choice(n) for n in names],
    )


def save_template_questions(descriptor: Descriptor, taken: Collection[str]) -> list[Question]:
    def validate_template_name(value: str, _: AnswerSet) -> str | None:
        if not value:
            return "Template name is required."
        if value in taken:
            return "Template name already taken."
        return None

    return [
        Question(
            key="save",
            kind=Kind.TOGGLE,
            message="Would you like to save this configuration as a template?",
            default=False,
        ),
        Question(
            key="template_name",
            kind=Kind.TEXT,
            message="Enter a name for the template.",
            default=descriptor.identity.name,
            active=lambda a: a["save"],
            validate=validate_template_name,
        ),
    ]
