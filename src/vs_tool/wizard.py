"""Virtual Server wizard workflows"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from vs_tool.cache import CacheStore
from vs_tool.client import ResourceClient
from vs_tool.config import Settings
from vs_tool.console import print_error, print_status, print_success
from vs_tool.descriptor import Descriptor, build
from vs_tool.flow import FlowEngine, Prompter, collect_users
from vs_tool.lookups import load_catalog, load_definitions, load_images
from vs_tool.pricing import Catalog
from vs_tool.questions import (
    base_questions,
    identity_questions,
    network_questions,
    resource_questions,
    save_template_questions,
    template_choice_question,
)
from vs_tool.submit import Outcome, Submission
from vs_tool.templates import TemplateStore


@dataclass
class WizardSession:
    """Everything a wizard run needs, passed explicitly to each step."""

    settings: Settings
    cache: CacheStore
    templates: TemplateStore
    engine: FlowEngine
    client_factory: Callable[[], ResourceClient]
    _client: ResourceClient | None = field(default=None, repr=False)
    _catalog: Catalog | None = field(default=None, repr=False)

    @classmethod
    def open(
        cls,
        settings: Settings,
        prompter: Prompter,
        client_factory: Callable[[], ResourceClient],
    ) -> WizardSession:
        cache = CacheStore(settings.cache_dir, default_ttl=settings.cache_ttl)
        return cls(
            settings=settings,
            cache=cache,
            templates=TemplateStore(cache),
            engine=FlowEngine(prompter),
            client_factory=client_factory,
        )

    @property
    def client(self) -> ResourceClient:
        """Cluster client, connected on first use."""
        if self._client is None:
            self._client = self.client_factory()
        return self._client

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            self._catalog = load_catalog(self.cache, self.settings.metadata_url)
        return self._catalog

    def submit(self, descriptor: Descriptor) -> Outcome:
        return Submission(descriptor, self.client, self.engine, self.catalog).run()


def collect_answers(session: WizardSession) -> dict[str, Any]:
    """Run the full question flow and return the answers.

    FlowCancelled propagates from any top-level prompt.
    """
    client = session.client
    images = load_images(client, session.cache, session.settings.image_namespace)
    definitions = load_definitions(client, session.cache, session.settings.definition_namespace)

    engine = session.engine
    answers = engine.run(base_questions(images, client.default_namespace, session.settings.regions))
    engine.run(resource_questions(definitions, session.catalog), answers)

    answers.record("users", collect_users(engine))

    services = client.list("services", namespace=answers["namespace"])
    engine.run(network_questions(services), answers)
    return dict(answers)


def offer_save_template(session: WizardSession, descriptor: Descriptor) -> str | None:
    """Ask whether to keep the descriptor as a template; return the saved name."""
    answers = session.engine.run(save_template_questions(descriptor, session.templates.names()))
    if not answers["save"]:
        return None

    name = answers["template_name"]
    print_status(f"Saving template {name}...")
    session.templates.save(name, descriptor)
    print_success("Template saved")
    return name


def run_new(session: WizardSession) -> Outcome:
    """Create a Virtual Server from scratch."""
    print_status("Let's create a new Virtual Server.")
    descriptor = build(collect_answers(session))

    outcome = session.submit(descriptor)
    if outcome is not Outcome.NOT_SUBMITTED:
        offer_save_template(session, descriptor)
    return outcome


def run_template(session: WizardSession, template_name: str | None = None) -> Outcome | None:
    """Create a Virtual Server from a saved template.

    Returns None when there is no template to use.
    """
    names = session.templates.names()
    if not names:
        print_error("No templates available.")
        return None

    if template_name is None:
        template_name = session.engine.ask(template_choice_question(names))

    template = session.templates.get(template_name)
    edits = session.engine.run(identity_questions(template, session.client.default_namespace))
    descriptor = session.templates.instantiate(
        template_name, name=edits["name"], namespace=edits["namespace"]
    )
    return session.submit(descriptor)
