"""Virtual Server descriptor and its manifest form"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from vs_tool.config import MAX_PORT, MAX_PORTS

API_GROUP = "virtualservers.coreweave.com"
API_VERSION = "v1alpha1"
KIND = "VirtualServer"


def check_ports(ports: Iterable[int]) -> str | None:
    """Return an error message if the port list is not acceptable"""
    ports = list(ports)
    if len(ports) > MAX_PORTS:
        return f"Maximum of {MAX_PORTS} ports"
    if not all(isinstance(p, int) and 0 < p <= MAX_PORT for p in ports):
        return f"Invalid port value. 0 < port <= {MAX_PORT}."
    return None


@dataclass(frozen=True)
class Identity:
    name: str
    namespace: str


@dataclass(frozen=True)
class Compute:
    memory: str
    definition: str | None = None
    cpu: str | None = None
    cpu_count: int = 1
    gpu: str | None = None
    gpu_count: int = 1

    @property
    def system_type(self) -> str:
        return "gpu" if self.gpu else "cpu"


@dataclass(frozen=True)
class SourceRef:
    namespace: str
    name: str


@dataclass(frozen=True)
class RootDisk:
    size: str
    storage_class: str | None
    source: SourceRef


@dataclass(frozen=True)
class Storage:
    root: RootDisk
    swap: str | None = None


@dataclass(frozen=True)
class User:
    username: str
    password: str


@dataclass(frozen=True)
class Network:
    public: bool = False
    direct_attach: bool = False
    tcp_ports: tuple[int, ...] = ()
    udp_ports: tuple[int, ...] = ()
    floating_ips: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for protocol, ports in (("tcp", self.tcp_ports), ("udp", self.udp_ports)):
            error = check_ports(ports)
            if error:
                raise ValueError(f"{protocol} ports: {error}")


@dataclass(frozen=True)
class Descriptor:
    """A complete, immutable Virtual Server specification."""

    identity: Identity
    region: str
    os: str
    compute: Compute
    storage: Storage
    users: tuple[User, ...] = ()
    network: Network = field(default_factory=Network)

    def __post_init__(self) -> None:
        usernames = [u.username for u in self.users]
        if len(usernames) != len(set(usernames)):
            raise ValueError("Usernames must be unique")

    def with_identity(self, name: str | None = None, namespace: str | None = None) -> Descriptor:
        """Copy of this descriptor deployed under a different name and/or namespace."""
        return replace(
            self,
            identity=Identity(
                name=name or self.identity.name,
                namespace=namespace or self.identity.namespace,
            ),
        )

    def to_manifest(self) -> dict[str, Any]:
        compute = self.compute
        resources: dict[str, Any] = {}
        if compute.definition:
            resources["definition"] = compute.definition
        if compute.gpu:
            resources["gpu"] = {"type": compute.gpu, "count": compute.gpu_count}
        cpu: dict[str, Any] = {"count": compute.cpu_count}
        if compute.cpu:
            cpu["type"] = compute.cpu
        resources["cpu"] = cpu
        resources["memory"] = compute.memory

        root = self.storage.root
        root_manifest: dict[str, Any] = {"size": root.size}
        if root.storage_class:
            root_manifest["storageClassName"] = root.storage_class
        root_manifest["source"] = {
            "pvc": {"namespace": root.source.namespace, "name": root.source.name}
        }
        storage: dict[str, Any] = {"root": root_manifest}
        if self.storage.swap:
            storage["swap"] = self.storage.swap

        network: dict[str, Any] = {"public": self.network.public}
        if self.network.direct_attach:
            network["directAttachLoadBalancerIP"] = True
        network["tcp"] = {"ports": list(self.network.tcp_ports)}
        network["udp"] = {"ports": list(self.network.udp_ports)}
        network["floatingIPs"] = [{"serviceName": s} for s in self.network.floating_ips]

        return {
            "apiVersion": f"{API_GROUP}/{API_VERSION}",
            "kind": KIND,
            "metadata": {"name": self.identity.name, "namespace": self.identity.namespace},
            "spec": {
                "region": self.region,
                "os": {"type": self.os},
                "resources": resources,
                "storage": storage,
                "users": [{"username": u.username, "password": u.password} for u in self.users],
                "network": network,
                "initializeRunning": True,
            },
        }

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> Descriptor:
        metadata = manifest["metadata"]
        spec = manifest["spec"]
        resources = spec.get("resources", {})
        gpu = resources.get("gpu") or {}
        cpu = resources.get("cpu") or {}
        root = spec["storage"]["root"]
        pvc = root["source"]["pvc"]
        network = spec.get("network", {})

        return cls(
            identity=Identity(name=metadata["name"], namespace=metadata["namespace"]),
            region=spec["region"],
            os=spec["os"]["type"],
            compute=Compute(
                memory=resources["memory"],
                definition=resources.get("definition"),
                cpu=cpu.get("type"),
                cpu_count=cpu.get("count") or 1,
                gpu=gpu.get("type"),
                gpu_count=gpu.get("count") or 1,
            ),
            storage=Storage(
                root=RootDisk(
                    size=root["size"],
                    storage_class=root.get("storageClassName"),
                    source=SourceRef(namespace=pvc["namespace"], name=pvc["name"]),
                ),
                swap=spec["storage"].get("swap"),
            ),
            users=tuple(User(u["username"], u["password"]) for u in spec.get("users", [])),
            network=Network(
                public=bool(network.get("public", False)),
                direct_attach=bool(network.get("directAttachLoadBalancerIP", False)),
                tcp_ports=tuple(network.get("tcp", {}).get("ports") or ()),
                udp_ports=tuple(network.get("udp", {}).get("ports") or ()),
                floating_ips=tuple(f["serviceName"] for f in network.get("floatingIPs", [])),
            ),
        )


def _root_disk(answers: Mapping[str, Any]) -> RootDisk:
    image = answers.get("image")
    if image:
        metadata = image["metadata"]
        spec = image.get("spec", {})
        return RootDisk(
            size=spec["resources"]["requests"]["storage"],
            storage_class=spec.get("storageClassName"),
            source=SourceRef(namespace=metadata["namespace"], name=metadata["name"]),
        )
    return RootDisk(
        size=answers["image_size"],
        storage_class=answers.get("image_storage_class"),
        source=SourceRef(namespace=answers["image_namespace"], name=answers["image_name"]),
    )


def _definition_alias(answers: Mapping[str, Any]) -> str | None:
    definition = answers.get("definition")
    if not definition:
        return None
    return definition.get("spec", {}).get("alias")


def _user(entry: User | Mapping[str, str]) -> User:
    if isinstance(entry, User):
        return entry
    return User(username=entry["username"], password=entry["password"])


def build(answers: Mapping[str, Any]) -> Descriptor:
    """Assemble a descriptor from the answers of a completed wizard flow."""
    return Descriptor(
        identity=Identity(name=answers["name"], namespace=answers["namespace"]),
        region=answers["region"],
        os=answers["os"],
        compute=Compute(
            memory=answers["memory"],
            definition=_definition_alias(answers),
            cpu=answers.get("cpu") or None,
            cpu_count=answers.get("cpu_count") or 1,
            gpu=answers.get("gpu") or None,
            gpu_count=answers.get("gpu_count") or 1,
        ),
        storage=Storage(root=_root_disk(answers), swap=answers.get("swap") or None),
        users=tuple(_user(u) for u in answers.get("users", ())),
        network=Network(
            public=bool(answers.get("public", False)),
            direct_attach=bool(answers.get("direct_attach", False)),
            tcp_ports=tuple(answers.get("tcp_ports", ())),
            udp_ports=tuple(answers.get("udp_ports", ())),
            floating_ips=tuple(s["metadata"]["name"] for s in answers.get("floating_ips", ())),
        ),
    )
