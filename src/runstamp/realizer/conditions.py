"""Constructors for the RunTemplateReady condition, one per reason."""

from __future__ import annotations

from runstamp.models import RUN_TEMPLATE_READY, Condition, ConditionStatus, Reason


def run_template_ready_condition() -> Condition:
    return Condition(
        type=RUN_TEMPLATE_READY,
        status=ConditionStatus.TRUE,
        reason=Reason.READY,
    )


def _failed(reason: Reason, error: Exception | str) -> Condition:
    return Condition(
        type=RUN_TEMPLATE_READY,
        status=ConditionStatus.FALSE,
        reason=reason,
        message=str(error),
    )


def run_template_missing_condition(error: Exception | str) -> Condition:
    return _failed(Reason.RUN_TEMPLATE_NOT_FOUND, error)


def template_stamp_failure_condition(error: Exception | str) -> Condition:
    return _failed(Reason.TEMPLATE_STAMP_FAILURE, error)


def stamped_object_rejected_condition(error: Exception | str) -> Condition:
    return _failed(Reason.STAMPED_OBJECT_REJECTED, error)


def failed_to_list_created_objects_condition(error: Exception | str) -> Condition:
    return _failed(Reason.FAILED_TO_LIST_CREATED_OBJECTS, error)


def output_path_not_satisfied_condition(error: Exception | str) -> Condition:
    return _failed(Reason.OUTPUT_PATH_NOT_SATISFIED, error)
