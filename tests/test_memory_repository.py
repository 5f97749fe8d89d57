"""Tests for the in-memory resource store and its use by the realizer."""

import asyncio
import copy

import pytest
import structlog

from runstamp.core.errors import RepositoryError
from runstamp.models import (
    ConditionStatus,
    ObjectMeta,
    Pipeline,
    PipelineSpec,
    RunTemplate,
    TemplateReference,
)
from runstamp.realizer import PipelineRealizer
from runstamp.repository import InMemoryRepository

TEMPLATE = RunTemplate(
    metadata=ObjectMeta(name="config-run", namespace="ci"),
    template=b"""{
        "apiVersion": "example.dev/v1",
        "kind": "Run",
        "metadata": {"generateName": "$(pipeline.metadata.name)$-"},
        "spec": {"message": "$(pipeline.spec.inputs.message)$"}
    }""",
    outputs={"result": "status.result"},
)


def config_map(**metadata):
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"namespace": "ci", **metadata},
        "data": {"key": "value"},
    }


@pytest.fixture
def repository():
    return InMemoryRepository(templates=[TEMPLATE])


@pytest.fixture
def pipeline():
    return Pipeline(
        metadata=ObjectMeta(name="build", namespace="ci"),
        spec=PipelineSpec(
            run_template_ref=TemplateReference(name="config-run", namespace="ci"),
            inputs={"message": "hello"},
        ),
    )


class TestGetRunTemplate:
    """Tests for RunTemplate lookup."""

    @pytest.mark.asyncio
    async def test_returns_the_template_model(self, repository):
        model = await repository.get_run_template(TemplateReference(name="config-run", namespace="ci"))

        assert model.name == "config-run"
        assert model.namespace == "ci"
        assert dict(model.output_paths) == {"result": "status.result"}

    @pytest.mark.asyncio
    async def test_missing_template(self, repository):
        with pytest.raises(RepositoryError, match='runtemplates "nope" not found'):
            await repository.get_run_template(TemplateReference(name="nope", namespace="ci"))

    @pytest.mark.asyncio
    async def test_lookup_is_namespaced(self, repository):
        with pytest.raises(RepositoryError):
            await repository.get_run_template(TemplateReference(name="config-run", namespace="other"))

    @pytest.mark.asyncio
    async def test_unsupported_kind(self, repository):
        ref = TemplateReference(name="config-run", kind="ClusterRunTemplate", namespace="ci")

        with pytest.raises(RepositoryError, match='unsupported template kind "ClusterRunTemplate"'):
            await repository.get_run_template(ref)


class TestEnsureObjectExists:
    """Tests for idempotent creation."""

    @pytest.mark.asyncio
    async def test_generate_name_assigns_a_name(self, repository):
        obj = config_map(generateName="cm-")

        await repository.ensure_object_exists_on_cluster(obj, False)

        name = obj["metadata"]["name"]
        assert name.startswith("cm-")
        assert len(name) == len("cm-") + 5
        assert obj["metadata"]["uid"]
        assert obj["metadata"]["creationTimestamp"].endswith("Z")
        assert obj["metadata"]["generation"] == 1

    @pytest.mark.asyncio
    async def test_same_document_is_created_once(self, repository):
        first = config_map(generateName="cm-")
        second = copy.deepcopy(first)

        await repository.ensure_object_exists_on_cluster(first, False)
        await repository.ensure_object_exists_on_cluster(second, False)

        assert len(repository.stored_objects()) == 1
        assert second["metadata"]["name"] == first["metadata"]["name"]

    @pytest.mark.asyncio
    async def test_different_documents_create_separate_objects(self, repository):
        first = config_map(generateName="cm-")
        second = config_map(generateName="cm-")
        second["data"]["key"] = "changed"

        await repository.ensure_object_exists_on_cluster(first, False)
        await repository.ensure_object_exists_on_cluster(second, False)

        stored = repository.stored_objects()
        assert len(stored) == 2
        assert stored[0]["metadata"]["creationTimestamp"] < stored[1]["metadata"]["creationTimestamp"]

    @pytest.mark.asyncio
    async def test_concurrent_submissions_create_once(self, repository):
        documents = [config_map(generateName="cm-") for _ in range(5)]

        await asyncio.gather(
            *(repository.ensure_object_exists_on_cluster(doc, False) for doc in documents)
        )

        assert len(repository.stored_objects()) == 1
        assert len({doc["metadata"]["name"] for doc in documents}) == 1

    @pytest.mark.asyncio
    async def test_named_object_is_not_updated_without_permission(self, repository):
        await repository.ensure_object_exists_on_cluster(config_map(name="cm"), False)
        changed = config_map(name="cm")
        changed["data"]["key"] = "changed"

        await repository.ensure_object_exists_on_cluster(changed, False)

        (stored,) = repository.stored_objects()
        assert stored["data"] == {"key": "value"}

    @pytest.mark.asyncio
    async def test_named_object_is_updated_when_allowed(self, repository):
        original = config_map(name="cm")
        await repository.ensure_object_exists_on_cluster(original, False)
        changed = config_map(name="cm")
        changed["data"]["key"] = "changed"

        await repository.ensure_object_exists_on_cluster(changed, True)

        (stored,) = repository.stored_objects()
        assert stored["data"] == {"key": "changed"}
        assert stored["metadata"]["generation"] == 2
        assert stored["metadata"]["uid"] == original["metadata"]["uid"]

    @pytest.mark.asyncio
    async def test_requires_a_name(self, repository):
        with pytest.raises(RepositoryError, match="resource name may not be empty"):
            await repository.ensure_object_exists_on_cluster(config_map(), False)


class TestListUnstructured:
    """Tests for label-selected listing."""

    @pytest.mark.asyncio
    async def test_filters_by_kind_namespace_and_labels(self, repository):
        wanted = config_map(generateName="a-", labels={"app": "demo", "tier": "web"})
        other_labels = config_map(generateName="b-", labels={"app": "other"})
        other_namespace = config_map(generateName="c-", labels={"app": "demo"})
        other_namespace["metadata"]["namespace"] = "prod"
        for obj in (wanted, other_labels, other_namespace):
            await repository.ensure_object_exists_on_cluster(obj, False)

        listed = await repository.list_unstructured(config_map(labels={"app": "demo"}))

        assert [o["metadata"]["name"] for o in listed] == [wanted["metadata"]["name"]]

    @pytest.mark.asyncio
    async def test_newest_first(self, repository):
        for value in ("one", "two", "three"):
            obj = config_map(generateName="cm-")
            obj["data"]["key"] = value
            await repository.ensure_object_exists_on_cluster(obj, False)

        listed = await repository.list_unstructured(config_map())

        assert [o["data"]["key"] for o in listed] == ["three", "two", "one"]

    @pytest.mark.asyncio
    async def test_returns_copies(self, repository):
        await repository.ensure_object_exists_on_cluster(config_map(name="cm"), False)

        (listed,) = await repository.list_unstructured(config_map())
        listed["data"]["key"] = "mutated"

        (stored,) = repository.stored_objects()
        assert stored["data"]["key"] == "value"


class TestUpdateStatus:
    """Tests for status updates."""

    @pytest.mark.asyncio
    async def test_replaces_status(self, repository):
        obj = config_map(name="cm")
        await repository.ensure_object_exists_on_cluster(obj, False)

        updated = await repository.update_status(obj, {"phase": "Done"})

        assert updated["status"] == {"phase": "Done"}
        assert int(updated["metadata"]["resourceVersion"]) > int(obj["metadata"]["resourceVersion"])

    @pytest.mark.asyncio
    async def test_unknown_object(self, repository):
        with pytest.raises(RepositoryError, match="not found"):
            await repository.update_status(config_map(name="ghost"), {})


class TestRealizeAgainstMemoryRepository:
    """End-to-end realization against the in-memory store."""

    @pytest.mark.asyncio
    async def test_repeated_realization_creates_one_object(self, repository, pipeline):
        realizer = PipelineRealizer()
        logger = structlog.get_logger()

        first = await realizer.realize(pipeline, logger, repository)
        second = await realizer.realize(pipeline, logger, repository)

        assert len(repository.stored_objects()) == 1
        assert first[2]["metadata"]["name"] == second[2]["metadata"]["name"]
        assert first[2]["metadata"]["name"].startswith("build-")
        assert second[2]["spec"] == {"message": "hello"}

    @pytest.mark.asyncio
    async def test_outputs_appear_after_status_update(self, repository, pipeline):
        realizer = PipelineRealizer()
        logger = structlog.get_logger()

        condition, outputs, obj = await realizer.realize(pipeline, logger, repository)
        assert condition.reason == "OutputPathNotSatisfied"
        assert outputs is None

        await repository.update_status(obj, {"result": "passed"})
        condition, outputs, obj = await realizer.realize(pipeline, logger, repository)

        assert condition.status == ConditionStatus.TRUE
        assert outputs == {"result": "passed"}
        assert obj["status"] == {"result": "passed"}

    @pytest.mark.asyncio
    async def test_changed_inputs_create_a_new_object(self, repository, pipeline):
        realizer = PipelineRealizer()
        logger = structlog.get_logger()

        _, _, first = await realizer.realize(pipeline, logger, repository)
        pipeline.spec.inputs["message"] = "goodbye"
        _, _, second = await realizer.realize(pipeline, logger, repository)

        assert len(repository.stored_objects()) == 2
        assert second["metadata"]["name"] != first["metadata"]["name"]
        assert second["spec"] == {"message": "goodbye"}

    @pytest.mark.asyncio
    async def test_missing_template(self, pipeline):
        realizer = PipelineRealizer()

        condition, outputs, obj = await realizer.realize(
            pipeline, structlog.get_logger(), InMemoryRepository()
        )

        assert condition.reason == "RunTemplateNotFound"
        assert condition.message == (
            "could not get RunTemplate 'config-run': runtemplates \"config-run\" not found"
        )
        assert outputs is None
        assert obj is None
