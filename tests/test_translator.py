"""Tests for buildtask.translator.

Tests cover:
- End-to-end translation of a minimal Build
- Container ordering across credential, source and step stages
- Task metadata (owner reference, labels, annotations, generateName)
- Input immutability and repeatability
- Error propagation (no partial Task)
"""

import json
import logging

import pytest

from buildtask.config import ImageConfig
from buildtask.errors import (
    InvalidVolumeError,
    LookupFailureError,
    MissingFieldError,
    NotFoundError,
)
from buildtask.schemas import (
    Build,
    Container,
    EnvVar,
    ObjectMeta,
    ObjectReference,
    Secret,
    ServiceAccount,
    SourceSpec,
    Volume,
    VolumeMount,
)
from buildtask.store import IdentityStore, InMemoryIdentityStore
from buildtask.translator import BuildToTaskTranslator, make_task
from buildtask.utils import StructuredFormatter


class TestMinimalBuild:
    """One named step, no sources, default service account without secrets."""

    def test_init_container_names(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.init_container_names() == [
            "build-step-credential-initializer",
            "build-step-build",
        ]

    def test_single_nop_container(self, store, make_build, images):
        task = make_task(make_build(), store, images=images)
        assert len(task.spec.containers) == 1
        nop = task.spec.containers[0]
        assert nop.name == "nop"
        assert nop.image == "nop:test"
        assert nop.args == ()

    def test_step_has_home_env(self, store, make_build):
        task = make_task(make_build(), store)
        step = task.get_init_container("build-step-build")
        assert step.env == (EnvVar("HOME", "/builder/home"),)

    def test_step_has_implicit_mounts(self, store, make_build):
        task = make_task(make_build(), store)
        step = task.get_init_container("build-step-build")
        assert [(m.name, m.mount_path) for m in step.volume_mounts] == [
            ("workspace", "/workspace"),
            ("home", "/builder/home"),
        ]

    def test_step_working_dir(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.get_init_container("build-step-build").working_dir == "/workspace"

    def test_implicit_volumes(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.spec.volumes == (
            Volume("workspace", {"emptyDir": {}}),
            Volume("home", {"emptyDir": {}}),
        )

    def test_restart_policy_never(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.spec.restart_policy == "Never"

    def test_default_images(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.spec.init_containers[0].image == "override-with-creds:latest"
        assert task.spec.containers[0].image == "override-with-nop:latest"


class TestTaskMetadata:
    """Tests for identity and ownership of the Task."""

    def test_namespace_inherited(self, make_build):
        store = InMemoryIdentityStore([ServiceAccount(name="default", namespace="team-a")])
        build = Build(
            metadata=ObjectMeta(name="b", namespace="team-a"),
            spec=make_build().spec,
        )
        task = make_task(build, store)
        assert task.metadata.namespace == "team-a"

    def test_generate_name(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.metadata.generate_name == "build-1-"
        assert task.metadata.name == ""

    def test_owner_reference(self, store, make_build):
        task = make_task(make_build(), store)
        (owner,) = task.metadata.owner_references
        assert owner.api_version == "build.knative.dev/v1alpha1"
        assert owner.kind == "Build"
        assert owner.name == "build-1"
        assert owner.uid == "uid-1234"
        assert owner.controller is True
        assert owner.block_owner_deletion is True

    def test_sidecar_annotation(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.metadata.annotations == {"sidecar.istio.io/inject": "false"}

    def test_build_name_label(self, store, make_build):
        task = make_task(make_build(), store)
        assert task.metadata.labels == {"build.knative.dev/buildName": "build-1"}

    def test_scheduling_passthrough(self, store, make_build):
        affinity = {"nodeAffinity": {"requiredDuringSchedulingIgnoredDuringExecution": {}}}
        build = make_build(node_selector={"disk": "ssd"}, affinity=affinity)
        task = make_task(build, store)
        assert task.spec.node_selector == {"disk": "ssd"}
        assert task.spec.affinity == affinity

    def test_service_account_passthrough_is_raw_value(self, store, make_build):
        """An empty service account stays empty on the Task."""
        task = make_task(make_build(), store)
        assert task.spec.service_account_name == ""

    def test_named_service_account_passthrough(self, make_build):
        store = InMemoryIdentityStore([ServiceAccount(name="builder")])
        task = make_task(make_build(service_account_name="builder"), store)
        assert task.spec.service_account_name == "builder"


class TestContainerOrdering:
    """Credential, then git/gcs sources, then custom sources and steps."""

    def test_full_ordering(self, store, make_build):
        build = make_build(
            source=SourceSpec.from_git("https://github.com/a/b", "main"),
            sources=(
                SourceSpec.from_gcs("gs://bucket/src.tar.gz", name="archive"),
                SourceSpec.from_custom(Container(image="fetcher"), name="extra"),
            ),
            steps=(
                Container(name="compile", image="gcc"),
                Container(image="busybox"),
            ),
        )
        task = make_task(build, store)
        assert task.init_container_names() == [
            "build-step-credential-initializer",
            "build-step-git-source-0",
            "build-step-gcs-source-archive",
            "build-step-custom-source-extra",
            "build-step-compile",
            "build-step-unnamed-2",
        ]

    def test_later_custom_source_runs_first(self, store, make_build):
        build = make_build(
            sources=(
                SourceSpec.from_custom(Container(image="first"), name="a"),
                SourceSpec.from_custom(Container(image="second"), name="b"),
            ),
        )
        task = make_task(build, store)
        assert task.init_container_names() == [
            "build-step-credential-initializer",
            "build-step-custom-source-b",
            "build-step-custom-source-a",
            "build-step-build",
        ]

    def test_custom_source_is_normalized(self, store, make_build):
        build = make_build(sources=(SourceSpec.from_custom(Container(image="fetcher")),))
        task = make_task(build, store)
        custom = task.get_init_container("build-step-custom-source")
        assert custom.image == "fetcher"
        assert custom.get_env("HOME") == "/builder/home"
        assert custom.working_dir == "/workspace"
        assert {m.name for m in custom.volume_mounts} == {"workspace", "home"}

    def test_unknown_source_kind_skipped(self, store, make_build):
        build = make_build(sources=(SourceSpec.from_dict({"oci": {"ref": "x"}}),))
        task = make_task(build, store)
        assert task.init_container_names() == [
            "build-step-credential-initializer",
            "build-step-build",
        ]

    def test_workspace_sub_path_applied_to_steps(self, store, make_build):
        build = make_build(source=SourceSpec.from_git("https://x/y", "v1", sub_path="app"))
        task = make_task(build, store)
        step = task.get_init_container("build-step-build")
        workspace = next(m for m in step.volume_mounts if m.name == "workspace")
        assert workspace.sub_path == "app"

    def test_workspace_sub_path_not_applied_to_source_containers(self, store, make_build):
        build = make_build(source=SourceSpec.from_git("https://x/y", "v1", sub_path="app"))
        task = make_task(build, store)
        git = task.get_init_container("build-step-git-source-0")
        assert all(m.sub_path == "" for m in git.volume_mounts)

    def test_last_sub_path_wins(self, store, make_build):
        build = make_build(
            source=SourceSpec.from_git("https://x/y", "v1", sub_path="first"),
            sources=(SourceSpec.from_gcs("gs://b/o", sub_path="second"),),
        )
        task = make_task(build, store)
        step = task.get_init_container("build-step-build")
        workspace = next(m for m in step.volume_mounts if m.name == "workspace")
        assert workspace.sub_path == "second"


class TestCredentials:
    """Secrets flow into the credential container and the volume set."""

    @pytest.fixture
    def secret_store(self):
        return InMemoryIdentityStore([
            ServiceAccount(
                name="builder",
                secrets=(ObjectReference("git-creds"), ObjectReference("plain")),
            ),
            Secret(
                name="git-creds",
                type="kubernetes.io/basic-auth",
                annotations={"build.knative.dev/git-0": "https://github.com"},
            ),
            Secret(name="plain"),
        ])

    def test_secret_volume_appended_last(self, secret_store, make_build):
        build = make_build(
            service_account_name="builder",
            volumes=(Volume("cache", {"emptyDir": {}}),),
        )
        task = make_task(build, secret_store)
        assert [v.name for v in task.spec.volumes] == [
            "cache",
            "workspace",
            "home",
            "secret-volume-git-creds",
        ]

    def test_credential_args(self, secret_store, make_build):
        task = make_task(make_build(service_account_name="builder"), secret_store)
        cred = task.spec.init_containers[0]
        assert cred.args == ("-basic-git=git-creds=https://github.com",)

    def test_secret_mount_not_added_to_steps(self, secret_store, make_build):
        task = make_task(make_build(service_account_name="builder"), secret_store)
        step = task.get_init_container("build-step-build")
        assert "secret-volume-git-creds" not in {m.name for m in step.volume_mounts}


class TestImmutability:
    """The translator never modifies its input and is repeatable."""

    def test_input_not_modified(self, store, make_build):
        build = make_build(
            sources=(SourceSpec.from_custom(Container(image="fetcher")),),
            steps=(Container(name="s", image="i", env=(EnvVar("A", "1"),)),),
        )
        before = build.to_dict()
        make_task(build, store)
        assert build.to_dict() == before
        assert build.spec.steps[0].name == "s"
        assert len(build.spec.steps) == 1

    def test_translating_twice_is_identical(self, store, make_build):
        build = make_build(
            source=SourceSpec.from_git("https://x/y", "v1"),
            steps=(Container(image="a"), Container(name="b", image="b")),
        )
        translator = BuildToTaskTranslator(store)
        first = translator.translate(build)
        second = translator.translate(build)
        assert first == second
        assert first.to_dict() == second.to_dict()


class _FailingStore(IdentityStore):
    def get_service_account(self, namespace, name):
        raise LookupFailureError("backend unavailable")

    def get_secret(self, namespace, name):
        raise LookupFailureError("backend unavailable")


class TestErrors:
    """Every failure aborts the translation."""

    def test_missing_service_account(self, make_build):
        with pytest.raises(NotFoundError) as exc_info:
            make_task(make_build(), InMemoryIdentityStore())
        assert exc_info.value.kind == "ServiceAccount"
        assert exc_info.value.name == "default"

    def test_missing_secret(self, make_build):
        store = InMemoryIdentityStore([
            ServiceAccount(name="default", secrets=(ObjectReference("gone"),)),
        ])
        with pytest.raises(NotFoundError, match="gone"):
            make_task(make_build(), store)

    def test_lookup_failure_propagates_unchanged(self, make_build):
        with pytest.raises(LookupFailureError, match="backend unavailable"):
            make_task(make_build(), _FailingStore())

    def test_missing_git_url(self, store, make_build):
        build = make_build(source=SourceSpec.from_git("", "main"))
        with pytest.raises(MissingFieldError) as exc_info:
            make_task(build, store)
        assert exc_info.value.path == "b.spec.source.git.url"

    def test_duplicate_volume_names(self, store, make_build):
        build = make_build(volumes=(Volume("workspace", {"emptyDir": {}}),))
        with pytest.raises(InvalidVolumeError, match="duplicate"):
            make_task(build, store)

    def test_duplicate_user_volumes(self, store, make_build):
        build = make_build(volumes=(
            Volume("cache", {"emptyDir": {}}),
            Volume("cache", {"emptyDir": {}}),
        ))
        with pytest.raises(InvalidVolumeError):
            make_task(build, store)


class TestTranslatorConfiguration:
    """Images and builders are injected through the constructor."""

    def test_images_used(self, store, make_build, images):
        build = make_build(
            source=SourceSpec.from_git("https://x/y", "v1"),
            sources=(SourceSpec.from_gcs("gs://b/o"),),
        )
        task = BuildToTaskTranslator(store, images=images).translate(build)
        assert [c.image for c in task.spec.init_containers[:3]] == [
            "creds:test", "git:test", "gcs:test",
        ]
        assert task.spec.containers[0].image == "nop:test"

    def test_partial_override(self, store, make_build):
        images = ImageConfig().override(nop_image="custom-nop:1")
        task = BuildToTaskTranslator(store, images=images).translate(make_build())
        assert task.spec.containers[0].image == "custom-nop:1"
        assert task.spec.init_containers[0].image == "override-with-creds:latest"

    def test_no_builders_matches_nothing(self, make_build):
        store = InMemoryIdentityStore([
            ServiceAccount(name="default", secrets=(ObjectReference("creds"),)),
            Secret(
                name="creds",
                type="kubernetes.io/basic-auth",
                annotations={"build.knative.dev/git-0": "https://github.com"},
            ),
        ])
        task = BuildToTaskTranslator(store, builders=[]).translate(make_build())
        assert task.spec.init_containers[0].args == ()
        assert [v.name for v in task.spec.volumes] == ["workspace", "home"]


class TestPodManifest:
    """Task.to_dict renders a Pod manifest."""

    def test_manifest_shape(self, store, make_build):
        manifest = make_task(make_build(), store).to_dict()
        assert manifest["apiVersion"] == "v1"
        assert manifest["kind"] == "Pod"
        assert manifest["metadata"]["generateName"] == "build-1-"
        assert manifest["spec"]["restartPolicy"] == "Never"
        assert [c["name"] for c in manifest["spec"]["initContainers"]] == [
            "build-step-credential-initializer",
            "build-step-build",
        ]
        assert manifest["spec"]["containers"] == [
            {"name": "nop", "image": "override-with-nop:latest"}
        ]

    def test_user_mount_kept_in_manifest(self, store, make_build):
        build = make_build(
            steps=(Container(
                name="s",
                image="i",
                volume_mounts=(VolumeMount("cache", "/workspace/"),),
            ),),
            volumes=(Volume("cache", {"emptyDir": {}}),),
        )
        manifest = make_task(build, store).to_dict()
        step = manifest["spec"]["initContainers"][1]
        assert step["volumeMounts"] == [
            {"name": "cache", "mountPath": "/workspace/"},
            {"name": "home", "mountPath": "/builder/home"},
        ]


class TestLogging:
    """Translation log records carry the build and stage."""

    def test_records_tagged(self, store, make_build, caplog):
        caplog.set_level(logging.DEBUG, logger="buildtask")
        make_task(make_build(), store)

        records = [r for r in caplog.records if r.name == "buildtask.translator"]
        assert {r.build for r in records} == {"default/build-1"}
        assert [r.stage for r in records if hasattr(r, "stage")] == [
            "credentials", "sources", "assembly",
        ]

    def test_structured_output_includes_extras(self, store, make_build, caplog):
        caplog.set_level(logging.DEBUG, logger="buildtask")
        make_task(make_build(), store)

        record = next(r for r in caplog.records if getattr(r, "stage", None) == "sources")
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["build"] == "default/build-1"
        assert entry["stage"] == "sources"
        assert entry["logger"] == "buildtask.translator"
