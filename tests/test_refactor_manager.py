# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the transforms and the refactor manager on real files."""

import dataclasses

import pytest

from csharp_refactor.config import RefactorSettings
from csharp_refactor.manager import RefactorManager, read_source
from csharp_refactor.protocol import (
    CancellationToken,
    MethodMode,
    RefactorRisk,
    RefactorType,
)
from csharp_refactor.transforms import (
    ConvertToAsyncTransform,
    ConvertToSyncTransform,
    GenerateDependencyConstructorTransform,
)

NEW_CONSTRUCTOR_SOURCE = """\
class ProgramTests
{
    private readonly A _a1, _a2, a3, a4;
}
"""

NEW_CONSTRUCTOR_EXPECTED = """\
class ProgramTests
{
    private readonly A _a1, _a2, a3, a4;

    public ProgramTests(A a1, A a2, A _a3, A _a4)
    {
        _a1 = a1;
        _a2 = a2;
        a3 = _a3;
        a4 = _a4;
    }
}
"""

EXTEND_SOURCE = """\
class ProgramTests
{
    private readonly A _a1, _a2, _a3, a4;

    // this is a comment
    public ProgramTests(A a1, A a2)
    {
        // this is a comment
        _a2 = a2;
        _a1 = a1;
        string x = "x";
    }
}
"""

EXTEND_EXPECTED = """\
class ProgramTests
{
    private readonly A _a1, _a2, _a3, a4;

    // this is a comment
    public ProgramTests(A a1, A a2, A a3, A _a4)
    {
        // this is a comment
        _a2 = a2;
        _a1 = a1;
        string x = "x";
        _a3 = a3;
        a4 = _a4;
    }
}
"""

ASYNC_SOURCE = """\
using System.Threading.Tasks;
class ProgramTests
{
    public async Task<string> Test()
    {
        string x = null;
    }
}
"""

SYNC_SOURCE = """\
using System.Threading.Tasks;
class ProgramTests
{
    public string Test()
    {
        string x = null;
    }
}
"""

VOID_SOURCE = """\
class ProgramTests
{
    public void Test()
    {
    }
}
"""


@pytest.fixture
def manager(tmp_path):
    """Manager rooted in a temporary project."""
    return RefactorManager(project_root=tmp_path, settings=RefactorSettings())


@pytest.fixture
def write_cs(tmp_path):
    """Write a C# file into the temporary project."""

    def _write(source, name="ProgramTests.cs"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


class TestManagerSetup:
    """Tests for transform registration and capabilities."""

    def test_builtin_transforms(self, manager):
        assert isinstance(
            manager.get_transform(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR),
            GenerateDependencyConstructorTransform,
        )
        assert isinstance(manager.get_transform(RefactorType.CONVERT_TO_SYNC), ConvertToSyncTransform)
        assert isinstance(
            manager.get_transform(RefactorType.CONVERT_TO_ASYNC), ConvertToAsyncTransform
        )

    def test_capabilities(self, manager):
        capabilities = manager.get_capabilities()

        assert set(capabilities.supported_refactors) == set(RefactorType)
        assert "c_sharp" in capabilities.supported_languages

    def test_risk_levels(self):
        assert GenerateDependencyConstructorTransform().risk_level == RefactorRisk.MEDIUM
        assert ConvertToSyncTransform().risk_level == RefactorRisk.HIGH

    def test_request_fields(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert [f.name for f in dataclasses.fields(preview.request)] == ["refactor_type", "target"]
        assert [r.name for r in RefactorRisk] == ["SAFE", "LOW", "MEDIUM", "HIGH"]

    def test_backup_dir_from_settings(self, tmp_path):
        settings = RefactorSettings(backup_dir="backups")

        manager = RefactorManager(project_root=tmp_path, settings=settings)

        assert manager.backup_dir == tmp_path / "backups"


class TestDependencyConstructorPreview:
    """Tests for previewing the dependency constructor refactoring."""

    def test_new_constructor_text(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert preview.is_valid
        assert preview.edit_count == 1
        assert preview.affected_files == [path]
        assert manager.render_preview(preview)[path] == (
            NEW_CONSTRUCTOR_SOURCE,
            NEW_CONSTRUCTOR_EXPECTED,
        )

    def test_extend_constructor_text(self, manager, write_cs):
        path = write_cs(EXTEND_SOURCE)

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 6, 12)

        assert preview.edit_count == 2
        _, new_source = manager.render_preview(preview)[path]
        assert new_source == EXTEND_EXPECTED

    def test_preview_does_not_write(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert read_source(path) == NEW_CONSTRUCTOR_SOURCE

    def test_crlf_preserved(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE.replace("\n", "\r\n"))

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        _, new_source = manager.render_preview(preview)[path]
        assert new_source == NEW_CONSTRUCTOR_EXPECTED.replace("\n", "\r\n")

    def test_nothing_missing_warns(self, manager, write_cs):
        path = write_cs(EXTEND_EXPECTED)

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert preview.is_valid
        assert not preview.has_changes
        assert preview.warnings == ["Class 'ProgramTests' has no unassigned dependencies"]

    def test_cursor_on_field(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 3, 10)

        assert not preview.is_valid
        assert preview.errors == ["No class or constructor found at target location"]

    def test_collision_warning(self, manager, write_cs):
        path = write_cs("class C\n{\n    private readonly A x, __x;\n}\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert preview.is_valid
        assert preview.warnings == ["Fields x, __x all map to parameter '_x'"]

    def test_collision_warning_disabled(self, tmp_path, write_cs):
        manager = RefactorManager(
            project_root=tmp_path,
            settings=RefactorSettings(warn_on_parameter_collisions=False),
        )
        path = write_cs("class C\n{\n    private readonly A x, __x;\n}\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert preview.warnings == []

    def test_syntax_error(self, manager, write_cs):
        path = write_cs("class C\n{\n    private readonly A _a\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert not preview.is_valid
        assert preview.errors == [f"Failed to parse {path}"]

    def test_missing_file(self, manager, tmp_path):
        path = tmp_path / "Missing.cs"

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 0)

        assert not preview.is_valid

    def test_cancelled(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)
        token = CancellationToken()
        token.cancel()

        preview = manager.preview(
            RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6, cancellation=token
        )

        assert preview.errors == ["Refactoring was cancelled"]

    def test_one_line_class(self, manager, write_cs):
        path = write_cs("class C { private readonly A _a; }\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        assert manager.render_preview(preview)[path][1] == (
            "class C { private readonly A _a;\n"
            "    public C(A a)\n"
            "    {\n"
            "        _a = a;\n"
            "    }\n"
            "}\n"
        )

    def test_one_line_constructor_body(self, manager, write_cs):
        path = write_cs("class C\n{\n    private readonly A _a;\n    public C() { Run(); }\n}\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 4, 12)

        assert preview.edit_count == 2
        assert manager.render_preview(preview)[path][1] == (
            "class C\n"
            "{\n"
            "    private readonly A _a;\n"
            "    public C(A a) { Run();\n"
            "        _a = a;\n"
            "    }\n"
            "}\n"
        )

    def test_struct_is_not_a_constructor_target(self, manager, write_cs):
        path = write_cs("struct S\n{\n    private readonly A _a;\n}\n")

        preview = manager.preview(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 8)

        assert preview.errors == ["No class or constructor found at target location"]


class TestMethodConversionPreview:
    """Tests for previewing method conversions."""

    def test_to_sync_text(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 4, 30)

        assert preview.is_valid
        assert preview.edit_count == 2
        assert manager.render_preview(preview)[path][1] == SYNC_SOURCE

    def test_to_async_text(self, manager, write_cs):
        path = write_cs(SYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_ASYNC, path, 4, 20)

        assert preview.edit_count == 1
        assert manager.render_preview(preview)[path][1] == ASYNC_SOURCE

    def test_void_to_async(self, manager, write_cs):
        path = write_cs(VOID_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_ASYNC, path, 3, 10)

        _, new_source = manager.render_preview(preview)[path]
        assert "    public async Task Test()\n" in new_source

    def test_to_sync_on_sync_method(self, manager, write_cs):
        path = write_cs(SYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 4, 20)

        assert preview.is_valid
        assert not preview.has_changes
        assert preview.warnings == ["Method 'Test' is already sync"]

    def test_to_async_on_async_method_warns(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_ASYNC, path, 4, 20)

        assert "Method 'Test' is already async" in preview.warnings
        assert "Task<Task<string>>" in manager.render_preview(preview)[path][1]

    def test_cursor_in_body(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 6, 12)

        assert preview.edit_count == 2

    def test_no_method(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE)

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 1, 0)

        assert preview.errors == ["No method found at target location"]


    def test_struct_method_to_sync(self, manager, write_cs):
        path = write_cs(
            "struct S\n{\n    public async Task<int> Foo()\n    {\n        return 1;\n    }\n}\n"
        )

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 3, 20)

        assert preview.is_valid, preview.errors
        _, new_source = manager.render_preview(preview)[path]
        assert "    public int Foo()\n" in new_source

    def test_interface_method_to_sync(self, manager, write_cs):
        path = write_cs("interface I\n{\n    Task<int> Foo();\n}\n")

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 3, 10)

        assert preview.edit_count == 1
        assert manager.render_preview(preview)[path][1] == "interface I\n{\n    int Foo();\n}\n"

    def test_value_task_to_sync(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE.replace("Task<string>", "ValueTask<string>"))

        preview = manager.preview(RefactorType.CONVERT_TO_SYNC, path, 4, 30)

        assert manager.render_preview(preview)[path][1] == SYNC_SOURCE


class TestApply:
    """Tests for applying, backing up and undoing refactorings."""

    def test_generate_writes_file(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        result = manager.generate_dependency_constructor(path, 1, 6)

        assert result.success
        assert result.edits_applied == 1
        assert result.files_modified == [path]
        assert read_source(path) == NEW_CONSTRUCTOR_EXPECTED

    def test_apply_is_idempotent(self, manager, write_cs):
        path = write_cs(EXTEND_SOURCE)

        manager.generate_dependency_constructor(path, 6, 12)
        second = manager.generate_dependency_constructor(path, 6, 12)

        assert second.success
        assert second.edits_applied == 0
        assert read_source(path) == EXTEND_EXPECTED

    def test_backup_and_undo(self, manager, write_cs, tmp_path):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        result = manager.generate_dependency_constructor(path, 1, 6)

        assert result.can_undo()
        assert len(result.backup_paths) == 1
        backup = result.backup_paths[0]
        assert backup.parent == tmp_path / ".refactor_backups"
        assert read_source(backup) == NEW_CONSTRUCTOR_SOURCE

        assert manager.undo(result)
        assert read_source(path) == NEW_CONSTRUCTOR_SOURCE

    def test_no_backup(self, manager, write_cs, tmp_path):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)
        request = manager._build_request(RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR, path, 1, 6)

        result = manager.apply(request, create_backup=False)

        assert result.success
        assert result.backup_paths == []
        assert not (tmp_path / ".refactor_backups").exists()

    def test_failed_apply_leaves_file(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE)

        result = manager.generate_dependency_constructor(path, 3, 10)

        assert not result.success
        assert "No class or constructor found" in result.error_message
        assert read_source(path) == NEW_CONSTRUCTOR_SOURCE

    def test_convert_method(self, manager, write_cs):
        path = write_cs(ASYNC_SOURCE)

        result = manager.convert_method(path, 4, 20, MethodMode.SYNC)

        assert result.success
        assert read_source(path) == SYNC_SOURCE

        result = manager.convert_method(path, 4, 20, MethodMode.ASYNC)

        assert result.success
        assert read_source(path) == ASYNC_SOURCE


class TestSuggestions:
    """Tests for dependency constructor suggestions."""

    def test_suggest_for_file(self, manager, write_cs):
        path = write_cs(NEW_CONSTRUCTOR_SOURCE + EXTEND_EXPECTED.replace("ProgramTests", "Done"))

        suggestions = manager.suggest_refactorings(path)

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert suggestion.refactor_type == RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR
        assert suggestion.target.start_line == 1
        assert "'ProgramTests'" in suggestion.reason
        assert suggestion.auto_fixable
        assert suggestion.risk == RefactorRisk.MEDIUM

    def test_suggest_for_project_skips_build_output(self, manager, write_cs, tmp_path):
        write_cs(NEW_CONSTRUCTOR_SOURCE, "ProgramTests.cs")
        write_cs(EXTEND_EXPECTED, "Done.cs")
        (tmp_path / "obj").mkdir()
        write_cs(NEW_CONSTRUCTOR_SOURCE, "obj/Generated.cs")

        suggestions = manager.suggest_refactorings_for_project()

        assert list(suggestions) == [tmp_path / "ProgramTests.cs"]

    def test_suggest_on_broken_file(self, manager, write_cs):
        path = write_cs("class {")

        assert manager.suggest_refactorings(path) == []
