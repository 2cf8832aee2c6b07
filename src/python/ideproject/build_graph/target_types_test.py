# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import pytest

from ideproject.build_graph.target_types import (
    AppleTestArg,
    BuildRuleType,
    XcodeWorkspaceConfigArg,
    can_generate_implicit_workspace_for_type,
)
from ideproject.testutil.graph_util import target
from ideproject.util.frozendict import FrozenDict


@pytest.mark.parametrize(
    "rule_type, is_test",
    [
        (BuildRuleType.APPLE_TEST, True),
        (BuildRuleType.JAVA_TEST, True),
        (BuildRuleType.ROBOLECTRIC_TEST, True),
        (BuildRuleType.APPLE_LIBRARY, False),
        (BuildRuleType.PROJECT_CONFIG, False),
    ],
)
def test_is_test_rule(rule_type: BuildRuleType, is_test: bool) -> None:
    assert rule_type.is_test_rule is is_test


def test_from_string() -> None:
    assert BuildRuleType.from_string("apple_bundle") == BuildRuleType.APPLE_BUNDLE
    with pytest.raises(ValueError, match="Unknown target type `python_library`"):
        BuildRuleType.from_string("python_library")


def test_implicit_workspace_types() -> None:
    implicit = {t for t in BuildRuleType if can_generate_implicit_workspace_for_type(t)}
    assert implicit == {
        BuildRuleType.APPLE_BINARY,
        BuildRuleType.APPLE_BUNDLE,
        BuildRuleType.APPLE_LIBRARY,
    }


def test_implicit_workspace_arg() -> None:
    arg = XcodeWorkspaceConfigArg.implicit_for(target("//lib:lib"))
    assert arg.src_target == target("//lib:lib")
    assert arg.extra_targets == ()
    assert arg.extra_tests == ()
    assert arg.extra_schemes == FrozenDict()
    assert arg.action_config_names == FrozenDict()
    assert arg.workspace_name is None
    assert arg.is_remote_runnable is None


def test_workspace_arg_is_normalized() -> None:
    arg = XcodeWorkspaceConfigArg(
        src_target=target("//app:app"),
        extra_targets=(target("//b:b"), target("//a:a"), target("//b:b")),
        extra_schemes=FrozenDict({"z": target("//z:z"), "a": target("//a:a")}),
    )
    assert arg.extra_targets == (target("//a:a"), target("//b:b"))
    assert list(arg.extra_schemes) == ["a", "z"]
    assert arg.referenced_targets() == (
        target("//app:app"),
        target("//a:a"),
        target("//b:b"),
        target("//a:a"),
        target("//z:z"),
    )


def test_bundle_settings() -> None:
    host = target("//app:host")
    first = AppleTestArg(info_plist="Info.plist", test_host_app=host, can_group=True)
    second = AppleTestArg(
        source_under_test=(target("//lib:lib"),),
        info_plist="Info.plist",
        test_host_app=host,
    )
    assert first.bundle_settings == second.bundle_settings
    assert first.bundle_settings != AppleTestArg(info_plist="Other.plist").bundle_settings
