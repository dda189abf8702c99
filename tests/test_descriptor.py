import dataclasses

import pytest
from conftest import make_image, make_service

from vs_tool.descriptor import Descriptor, User, build, check_ports

BASE_ANSWERS = {
    "name": "vs-1",
    "namespace": "tenant-test",
    "region": "ORD1",
    "os": "linux",
    "definition": {"spec": {"alias": "general"}},
    "gpu_enabled": False,
    "cpu": "cpu-a",
    "cpu_count": 2,
    "memory": "2Gi",
    "add_swap": False,
    "users": [],
    "direct_attach": False,
    "tcp_ports": (22, 443),
    "udp_ports": (),
}


def answers(**overrides):
    return {**BASE_ANSWERS, "image": make_image("ubuntu2004-docker-master-20210722-ord1"), **overrides}


def manual_answers(**overrides):
    return {
        **BASE_ANSWERS,
        "image_name": "my-root",
        "image_namespace": "tenant-test",
        "image_size": "80Gi",
        "image_storage_class": "block-hdd-ord1",
        **overrides,
    }


class TestBuildStorage:
    def test_image_selected_uses_image_metadata(self):
        image = make_image("windows-2019-20210101-ord1", namespace="vd-images", size="60Gi")
        descriptor = build(answers(image=image))
        root = descriptor.storage.root
        assert (root.source.namespace, root.source.name) == ("vd-images", "windows-2019-20210101-ord1")
        assert root.size == "60Gi"
        assert root.storage_class == "block-nvme-ord1"

    def test_manual_entry_uses_typed_answers(self):
        root = build(manual_answers()).storage.root
        assert (root.source.namespace, root.source.name) == ("tenant-test", "my-root")
        assert root.size == "80Gi"
        assert root.storage_class == "block-hdd-ord1"

    def test_swap(self):
        assert build(answers()).storage.swap is None
        assert build(answers(add_swap=True, swap="4Gi")).storage.swap == "4Gi"


class TestBuildCompute:
    def test_cpu_system(self):
        compute = build(answers()).compute
        assert compute.cpu == "cpu-a"
        assert compute.cpu_count == 2
        assert compute.gpu is None
        assert compute.system_type == "cpu"
        assert compute.definition == "general"

    def test_gpu_count_defaults_to_one(self):
        overrides = {k: v for k, v in answers(gpu_enabled=True, gpu="A100").items() if k != "cpu"}
        compute = build(overrides).compute
        assert compute.gpu == "A100"
        assert compute.gpu_count == 1
        assert compute.cpu is None
        assert compute.system_type == "gpu"

    def test_gpu_system_keeps_host_cpu_count(self):
        compute = build(answers(cpu=None, gpu_enabled=True, gpu="A40", gpu_count=4, cpu_count=8)).compute
        assert (compute.gpu, compute.gpu_count, compute.cpu_count) == ("A40", 4, 8)

    def test_cpu_count_defaults_to_one(self):
        data = answers()
        del data["cpu_count"]
        assert build(data).compute.cpu_count == 1


class TestBuildUsersAndNetwork:
    def test_users_in_order(self):
        descriptor = build(
            answers(users=[{"username": "alice", "password": "a"}, {"username": "bob", "password": "b"}])
        )
        assert descriptor.users == (User("alice", "a"), User("bob", "b"))

    def test_duplicate_usernames_rejected(self):
        with pytest.raises(ValueError):
            build(answers(users=[{"username": "a", "password": "1"}, {"username": "a", "password": "2"}]))

    def test_floating_ips_are_projected_to_names(self):
        network = build(answers(floating_ips=[make_service("ip-a"), make_service("ip-b")])).network
        assert network.floating_ips == ("ip-a", "ip-b")

    def test_public_defaults_to_false(self):
        network = build(answers(tcp_ports=(), udp_ports=())).network
        assert network.public is False
        assert network.tcp_ports == ()

    def test_direct_attach_skips_ports(self):
        data = answers(direct_attach=True, public=True)
        del data["tcp_ports"], data["udp_ports"]
        network = build(data).network
        assert network.direct_attach and network.public
        assert network.tcp_ports == network.udp_ports == ()


class TestDescriptor:
    def test_is_immutable(self):
        descriptor = build(answers())
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.region = "EWR1"

    def test_with_identity(self):
        descriptor = build(answers())
        renamed = descriptor.with_identity(name="vs-2", namespace="other")
        assert renamed.identity.name == "vs-2"
        assert renamed.identity.namespace == "other"
        assert renamed.compute == descriptor.compute
        assert descriptor.identity.name == "vs-1"

    def test_manifest_shape(self):
        manifest = build(
            answers(users=[{"username": "alice", "password": "pw"}], floating_ips=[make_service("ip-a")])
        ).to_manifest()
        assert manifest["apiVersion"] == "virtualservers.coreweave.com/v1alpha1"
        assert manifest["kind"] == "VirtualServer"
        assert manifest["metadata"] == {"name": "vs-1", "namespace": "tenant-test"}
        spec = manifest["spec"]
        assert spec["os"] == {"type": "linux"}
        assert spec["resources"] == {
            "definition": "general",
            "cpu": {"count": 2, "type": "cpu-a"},
            "memory": "2Gi",
        }
        assert spec["storage"]["root"]["source"] == {
            "pvc": {"namespace": "vd-images", "name": "ubuntu2004-docker-master-20210722-ord1"}
        }
        assert spec["network"]["tcp"] == {"ports": [22, 443]}
        assert spec["network"]["floatingIPs"] == [{"serviceName": "ip-a"}]
        assert spec["users"] == [{"username": "alice", "password": "pw"}]
        assert spec["initializeRunning"] is True

    def test_from_manifest_restores_descriptor(self):
        descriptor = build(
            answers(
                cpu=None,
                gpu_enabled=True,
                gpu="A100",
                gpu_count=2,
                add_swap=True,
                swap="2Gi",
                direct_attach=True,
                users=[{"username": "alice", "password": "pw"}],
            )
        )
        assert Descriptor.from_manifest(descriptor.to_manifest()) == descriptor


class TestCheckPorts:
    def test_accepts_valid(self):
        assert check_ports([1, 22, 65536]) is None
        assert check_ports(list(range(1, 11))) is None

    @pytest.mark.parametrize("ports", [[0], [65537], [-1], [22, 0]])
    def test_rejects_out_of_range(self, ports):
        assert check_ports(ports) is not None

    def test_rejects_more_than_ten(self):
        assert check_ports(list(range(1, 12))) == "Maximum of 10 ports"
