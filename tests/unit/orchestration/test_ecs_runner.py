"""Unit tests for ECSTaskRunner using botocore's Stubber."""

from __future__ import annotations

import pytest
from botocore.stub import Stubber

from twiddle_scheduler.core.exceptions import TaskLaunchError
from twiddle_scheduler.orchestration.ecs_runner import ECSTaskRunner, task_definition_name
from twiddle_scheduler.orchestration.protocols import ITaskRunner

ENV = [
    {"name": "AWS_ACCESS_KEY_ID", "value": "ASIAEXAMPLE"},
    {"name": "AWS_SECRET_ACCESS_KEY", "value": "secret"},
    {"name": "AWS_SESSION_TOKEN", "value": "token"},
    {"name": "ADDON_NAME", "value": "foo"},
    {"name": "ADDON_VERSION", "value": "1.0.0"},
]
TASK = {
    "taskArn": "arn:aws:ecs:us-east-1:123456789012:task/ember-twiddle/0123abcd",
    "clusterArn": "arn:aws:ecs:us-east-1:123456789012:cluster/ember-twiddle",
    "taskDefinitionArn": "arn:aws:ecs:us-east-1:123456789012:task-definition/addon-builder-3-2-0:3",
    "lastStatus": "PROVISIONING",
    "startedBy": "ember-twiddle-scheduler",
}


def _runner(**kwargs):
    runner = ECSTaskRunner(
        cluster="ember-twiddle",
        container_name="addon-builder",
        started_by="ember-twiddle-scheduler",
        **kwargs,
    )
    return runner, Stubber(runner._client)


def _expected(**extra):
    params = {
        "cluster": "ember-twiddle",
        "taskDefinition": "addon-builder-3-2-0",
        "count": 1,
        "overrides": {"containerOverrides": [{"name": "addon-builder", "environment": ENV}]},
        "startedBy": "ember-twiddle-scheduler",
    }
    params.update(extra)
    return params


class TestTaskDefinitionName:
    @pytest.mark.parametrize("version,expected", [
        ("3.2.0", "addon-builder-3-2-0"),
        ("2.18.2", "addon-builder-2-18-2"),
        ("4.0.0-beta.1", "addon-builder-4-0-0-beta-1"),
    ])
    def test_dots_become_hyphens(self, version, expected):
        assert task_definition_name("addon-builder", version) == expected


class TestRunTask:
    def test_satisfies_protocol(self):
        runner, _ = _runner()
        assert isinstance(runner, ITaskRunner)

    def test_launches_one_task_with_environment(self):
        runner, stub = _runner()
        stub.add_response("run_task", {"tasks": [TASK], "failures": []}, _expected())
        with stub:
            task = runner.run_task("addon-builder-3-2-0", ENV)
        stub.assert_no_pending_responses()
        assert task.task_arn == TASK["taskArn"]
        assert task.started_by == "ember-twiddle-scheduler"

    def test_passes_client_token(self):
        runner, stub = _runner()
        stub.add_response("run_task", {"tasks": [TASK], "failures": []}, _expected(clientToken="a" * 64))
        with stub:
            runner.run_task("addon-builder-3-2-0", ENV, client_token="a" * 64)
        stub.assert_no_pending_responses()

    def test_fargate_network_configuration(self):
        runner, stub = _runner(launch_type="FARGATE", subnets=["subnet-1"], security_groups=["sg-1"])
        stub.add_response("run_task", {"tasks": [TASK], "failures": []}, _expected(
            launchType="FARGATE",
            networkConfiguration={"awsvpcConfiguration": {
                "subnets": ["subnet-1"], "securityGroups": ["sg-1"], "assignPublicIp": "DISABLED",
            }},
        ))
        with stub:
            runner.run_task("addon-builder-3-2-0", ENV)
        stub.assert_no_pending_responses()

    def test_reported_failure_raises_with_detail(self):
        runner, stub = _runner()
        failure = {"arn": "arn:aws:ecs:us-east-1:123456789012:container-instance/x", "reason": "RESOURCE:MEMORY"}
        stub.add_response("run_task", {"tasks": [], "failures": [failure]}, _expected())
        with stub, pytest.raises(TaskLaunchError, match="RESOURCE:MEMORY") as err:
            runner.run_task("addon-builder-3-2-0", ENV)
        assert err.value.failures == [failure]

    def test_failure_alongside_task_still_raises(self):
        runner, stub = _runner()
        stub.add_response("run_task", {"tasks": [TASK], "failures": [{"reason": "AGENT"}]}, _expected())
        with stub, pytest.raises(TaskLaunchError):
            runner.run_task("addon-builder-3-2-0", ENV)

    def test_no_task_and_no_failure_raises(self):
        runner, stub = _runner()
        stub.add_response("run_task", {"tasks": [], "failures": []}, _expected())
        with stub, pytest.raises(TaskLaunchError, match="no task returned"):
            runner.run_task("addon-builder-3-2-0", ENV)

    def test_client_error_becomes_launch_error(self):
        runner, stub = _runner()
        stub.add_client_error("run_task", service_error_code="ClientException",
                              service_message="Unable to find task definition", http_status_code=400)
        with stub, pytest.raises(TaskLaunchError, match="ClientException"):
            runner.run_task("addon-builder-3-2-0", ENV)
