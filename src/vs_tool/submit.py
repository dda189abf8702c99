"""Confirm-and-create loop for a built descriptor"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any

import yaml
from rich.syntax import Syntax

from vs_tool.client import ResourceClient
from vs_tool.console import CONSOLE, print_error, print_status, print_success
from vs_tool.descriptor import Descriptor
from vs_tool.errors import SubmissionFailure
from vs_tool.flow import FlowEngine
from vs_tool.pricing import Catalog, price

CREATED = 201


class SubmissionState(Enum):
    CONFIRMING = "confirming"
    SUBMITTING = "submitting"
    AWAITING_RETRY = "awaiting-retry"
    DONE = "done"


class Outcome(Enum):
    NOT_SUBMITTED = "not-submitted"
    CREATED = "created"
    FAILED = "failed"


def redacted_manifest(descriptor: Descriptor) -> dict[str, Any]:
    """Manifest with user passwords masked, for display."""
    manifest = copy.deepcopy(descriptor.to_manifest())
    for user in manifest["spec"]["users"]:
        user["password"] = "********"
    return manifest


def show_descriptor(descriptor: Descriptor, estimate: str | None) -> None:
    CONSOLE.print(
        Syntax(yaml.safe_dump(redacted_manifest(descriptor), sort_keys=False), "yaml")
    )
    if estimate is not None:
        print_success(
            f"Your Virtual Server will cost approximately ${estimate}/hour on CoreWeave Cloud."
        )
    else:
        print_status("No price estimate available for this configuration.")


class Submission:
    """Shows a descriptor, asks for confirmation and creates it.

    Failed attempts are retried for as long as the operator asks to.
    """

    def __init__(
        self,
        descriptor: Descriptor,
        client: ResourceClient,
        engine: FlowEngine,
        catalog: Catalog,
    ) -> None:
        self.descriptor: Descriptor = descriptor
        self.client: ResourceClient = client
        self.engine: FlowEngine = engine
        self.catalog: Catalog = catalog
        self.state: SubmissionState = SubmissionState.CONFIRMING
        self.outcome: Outcome = Outcome.NOT_SUBMITTED
        self.attempts: int = 0
        self.last_error: Exception | None = None

    def run(self) -> Outcome:
        handlers = {
            SubmissionState.CONFIRMING: self._confirm,
            SubmissionState.SUBMITTING: self._submit,
            SubmissionState.AWAITING_RETRY: self._await_retry,
        }
        while self.state is not SubmissionState.DONE:
            self.state = handlers[self.state]()
        return self.outcome

    def _confirm(self) -> SubmissionState:
        show_descriptor(self.descriptor, price(self.descriptor, self.catalog))
        if self.engine.confirm("Please confirm the Virtual Server spec above."):
            return SubmissionState.SUBMITTING
        print_status("Virtual Server not submitted.")
        self.outcome = Outcome.NOT_SUBMITTED
        return SubmissionState.DONE

    def _submit(self) -> SubmissionState:
        identity = self.descriptor.identity
        print_status(f"Creating your Virtual Server: {identity.namespace}/{identity.name}...")
        self.attempts += 1
        try:
            status = self.client.create(self.descriptor.to_manifest())
            if status != CREATED:
                raise SubmissionFailure(status)
        except Exception as e:
            self.last_error = e
            print_error(f"An error occurred while creating the Virtual Server. {e}")
            return SubmissionState.AWAITING_RETRY

        self.outcome = Outcome.CREATED
        print_success("Virtual Server Created!")
        CONSOLE.print(
            f"Run 'kubectl -n {identity.namespace} get vs {identity.name}' "
            "to check out your new Virtual Server"
        )
        return SubmissionState.DONE

    def _await_retry(self) -> SubmissionState:
        if self.engine.confirm("Try again?"):
            return SubmissionState.SUBMITTING
        self.outcome = Outcome.FAILED
        print_error("Virtual Server was not created.")
        return SubmissionState.DONE
