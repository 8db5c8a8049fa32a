from __future__ import annotations

import pytest
from pydantic import ValidationError

from helm_broker.domain import InstanceId, PlanId, ServiceId, ServiceInstance
from helm_broker.domain.instance import same_value


def _instance(**parameters: object) -> ServiceInstance:
    return ServiceInstance(
        instance_id=InstanceId("i1"),
        service_id=ServiceId("team.app"),
        plan_id=PlanId("team.app"),
        parameters=dict(parameters),
        namespace="ns1",
        release_name="i1",
    )


def test_boolean_and_integer_parameters_do_not_match() -> None:
    assert not _instance(replicas=1).matches(_instance(replicas=True))
    assert not _instance(enabled=False).matches(_instance(enabled=0))
    assert _instance(replicas=1).matches(_instance(replicas=1.0))


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        ({"a": [1, {"b": True}]}, {"a": [1, {"b": True}]}, True),
        ({"a": [1, {"b": True}]}, {"a": [1, {"b": 1}]}, False),
        ({"a": [1, 2]}, {"a": [1, 2, 3]}, False),
        ({"a": "1"}, {"a": 1}, False),
        ({"a": None}, {"a": False}, False),
        ({"a": {}}, {"a": []}, False),
        ({"a": 1}, {"b": 1}, False),
    ],
)
def test_same_value_is_type_strict(left: object, right: object, expected: bool) -> None:
    assert same_value(left, right) is expected


def test_evolve_validates_changes() -> None:
    instance = _instance(replicas=2)

    updated = instance.evolve(plan_id=PlanId("team.app-large"), parameters={"replicas": 3})

    assert updated.plan_id == "team.app-large"
    assert updated.parameters == {"replicas": 3}
    assert updated.created_at == instance.created_at
    assert instance.parameters == {"replicas": 2}
    with pytest.raises(ValidationError):
        instance.evolve(namespace="")
    with pytest.raises(ValidationError):
        instance.evolve(unknown="field")
