from __future__ import annotations

import pytest
from fakes import BIN, EMU, make_system_image, make_toolset

from android_device.artifacts import ArtifactRef
from android_device.rules.dependencies import (
    ToolchainContractError,
    collect_dependencies,
    resolve_system_image,
    system_image_issues,
)
from android_device.rules.selection import Ambiguous, Found, NotFound, select_single


def test_select_single_tagged_results() -> None:
    assert select_single([1, 2, 3], lambda x: x == 2) == Found(2)
    assert select_single([1, 2, 3], lambda x: x > 5) == NotFound()
    result = select_single([1, 2, 3], lambda x: x > 1)
    assert isinstance(result, Ambiguous)
    assert result.count == 2
    assert result.matches == (2, 3)


def test_system_image_with_one_properties_file() -> None:
    group = make_system_image()

    assert system_image_issues(group) == []
    bundle = resolve_system_image(group)
    assert bundle is not None
    assert bundle.source_properties_file.basename == "source.properties"
    assert [a.basename for a in bundle.system_images] == ["system.img", "ramdisk.img"]


def test_system_image_without_properties_file() -> None:
    group = make_system_image(["img/system.img"], label="//img:no_props")

    issues = system_image_issues(group)
    assert [i.field for i in issues] == ["system_image"]
    assert issues[0].message == (
        "No source.properties files exist in this filegroup (//img:no_props)"
    )
    assert resolve_system_image(group) is None


def test_system_image_with_two_properties_files() -> None:
    group = make_system_image(
        ["a/source.properties", "b/source.properties", "a/system.img"], label="//img:dupe"
    )

    issues = system_image_issues(group)
    assert len(issues) == 1
    assert issues[0].message == (
        "Multiple source.properties files exist in this filegroup (//img:dupe)"
    )
    assert resolve_system_image(group) is None


def test_properties_match_is_on_basename_only() -> None:
    group = make_system_image(["img/my.source.properties", "img/source.properties"])
    bundle = resolve_system_image(group)
    assert bundle is not None
    assert bundle.source_properties_file.exec_path == "img/source.properties"
    assert [a.exec_path for a in bundle.system_images] == ["img/my.source.properties"]


def test_common_dependencies_canonical_order() -> None:
    tools = make_toolset()
    bundle = resolve_system_image(make_system_image())
    apk = ArtifactRef.source("apps/platform.apk")

    deps = collect_dependencies(tools, bundle, platform_apks=(apk,))

    expected = [
        tools.adb,
        bundle.source_properties_file,
        *bundle.system_images,
        tools.emulator_arm,
        tools.emulator_x86,
        tools.adb_static,
        *tools.emulator_x86_bios,
        *tools.xvfb_support,
        tools.mksdcard,
        tools.empty_snapshot_fs,
        *tools.unified_launcher.files_to_run,
        *tools.android_runtest_deps,
        *tools.testing_shbase_deps,
        apk,
    ]
    assert list(deps.common) == expected
    assert deps.platform_apks == (apk,)


def test_runtest_and_shbase_selection() -> None:
    deps = collect_dependencies(make_toolset(), resolve_system_image(make_system_image()))

    assert deps.android_runtest == ArtifactRef.source(f"{EMU}/android_runtest.sh")
    assert deps.testing_shbase.basename == "googletest.sh"


def test_runtest_bundle_without_source_file_is_a_contract_error() -> None:
    tools = make_toolset(runtest_deps=[ArtifactRef.derived(BIN, f"{EMU}/generated.sh")])
    with pytest.raises(ToolchainContractError, match="no android_runtest source file"):
        collect_dependencies(tools, resolve_system_image(make_system_image()))


def test_runtest_bundle_with_two_source_files_is_a_contract_error() -> None:
    tools = make_toolset(
        runtest_deps=[ArtifactRef.source("a/runtest.sh"), ArtifactRef.source("b/runtest.sh")]
    )
    with pytest.raises(ToolchainContractError, match="found 2"):
        collect_dependencies(tools, resolve_system_image(make_system_image()))


def test_shbase_bundle_without_googletest_is_a_contract_error() -> None:
    tools = make_toolset(shbase_deps=[ArtifactRef.source("testing/shbase/unittest.bash")])
    with pytest.raises(ToolchainContractError, match="googletest.sh"):
        collect_dependencies(tools, resolve_system_image(make_system_image()))
