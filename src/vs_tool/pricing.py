"""Hourly cost estimate for a Virtual Server"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from vs_tool.config import STORAGE_BILLING_RATE
from vs_tool.descriptor import Descriptor
from vs_tool.quantity import to_unit

# Billing rates are per binary gigabyte
BILLING_UNIT = "Gi"


def _rate(record: Mapping[str, Any] | None) -> float:
    if not record:
        return 0.0
    return float(record.get("billingRate") or 0.0)


@dataclass(frozen=True)
class CatalogEntry:
    """Billing rates for one CPU or GPU class."""

    id: str
    kind: str
    billing_rate: float
    memory_billing_rate: float = 0.0

    @classmethod
    def from_metadata(cls, record: Mapping[str, Any]) -> CatalogEntry:
        """Read a record from the instance metadata endpoint.

        Both the flat form ``{id, type, billingRate, memory: {billingRate}}``
        and the nested form ``{id, type, gpu: {...}, cpu: {..., memory: {...}}}``
        are accepted.
        """
        kind = record["type"]
        nested = record.get(kind) if isinstance(record.get(kind), Mapping) else None
        cpu = record.get("cpu") if isinstance(record.get("cpu"), Mapping) else {}
        memory = record.get("memory") or cpu.get("memory")
        return cls(
            id=record["id"],
            kind=kind,
            billing_rate=_rate(record) if "billingRate" in record else _rate(nested),
            memory_billing_rate=_rate(memory),
        )


@dataclass(frozen=True)
class Catalog:
    gpu_options: tuple[CatalogEntry, ...] = ()
    cpu_options: tuple[CatalogEntry, ...] = ()

    @classmethod
    def from_metadata(cls, records: Iterable[Mapping[str, Any]]) -> Catalog:
        entries = [CatalogEntry.from_metadata(r) for r in records]
        return cls(
            gpu_options=tuple(e for e in entries if e.kind == "gpu"),
            cpu_options=tuple(e for e in entries if e.kind == "cpu"),
        )

    @property
    def gpu_ids(self) -> list[str]:
        return [e.id for e in self.gpu_options]

    @property
    def cpu_ids(self) -> list[str]:
        return [e.id for e in self.cpu_options]

    def gpu(self, type_id: str | None) -> CatalogEntry | None:
        return next((e for e in self.gpu_options if e.id == type_id), None)

    def cpu(self, type_id: str | None) -> CatalogEntry | None:
        return next((e for e in self.cpu_options if e.id == type_id), None)


def price(descriptor: Descriptor, catalog: Catalog) -> str | None:
    """Estimated cost in USD per hour, formatted to two decimals.

    Returns None when the selected GPU or CPU type has no catalog entry.
    Raises InvalidQuantity if memory or disk sizes do not parse.
    """
    compute = descriptor.compute
    entry = catalog.gpu(compute.gpu) if compute.gpu else catalog.cpu(compute.cpu)
    if entry is None:
        return None

    gpu_rate = entry.billing_rate * compute.gpu_count if compute.gpu else 0.0
    cpu_rate = entry.billing_rate * compute.cpu_count if not compute.gpu and compute.cpu else 0.0
    mem_rate = entry.memory_billing_rate * to_unit(compute.memory, BILLING_UNIT)

    storage_rate = STORAGE_BILLING_RATE * to_unit(descriptor.storage.root.size, BILLING_UNIT)
    if descriptor.storage.swap:
        storage_rate += STORAGE_BILLING_RATE * to_unit(descriptor.storage.swap, BILLING_UNIT)

    return f"{gpu_rate + cpu_rate + mem_rate + storage_rate:.2f}"
