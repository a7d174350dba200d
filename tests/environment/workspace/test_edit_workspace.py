# filename: test_edit_workspace.py
# @Time    : 2025/11/13 17:00
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
import os

import pytest

from edit4ai.environment.workspace.search import RelativePattern
from edit4ai.environment.workspace.workspace import EditWorkspace
from edit4ai.exceptions import AlreadyExistsError, NotFoundError
from edit4ai.utils import path_to_uri


def test_workspace_file_operations(temp_dir, workspace) -> None:
    """
    测试通过工作区直接调用文件操作，失败时抛出异常
    """
    workspace.create_file(uri="pkg/mod.py")
    target = os.path.join(temp_dir, "pkg", "mod.py")
    assert os.path.isfile(target)
    with pytest.raises(AlreadyExistsError):
        workspace.create_file(uri=path_to_uri(target))
    workspace.create_file(uri=target, ignore_if_exists=True)

    workspace.rename_file(old_uri="pkg", new_uri="lib")
    assert os.path.isfile(os.path.join(temp_dir, "lib", "mod.py"))
    assert workspace.document_store.get(path_to_uri(os.path.join(temp_dir, "lib", "mod.py"))) is not None

    workspace.delete_file(uri="lib", recursive=True)
    assert not os.path.exists(os.path.join(temp_dir, "lib"))
    with pytest.raises(NotFoundError):
        workspace.delete_file(uri="lib")
    workspace.delete_file(uri="lib", ignore_if_not_exists=True)


def test_workspace_open_edit_save(temp_dir, workspace, make_file) -> None:
    path = make_file(os.path.join(temp_dir, "main.py"), "print('hi')\n")
    document = workspace.open_file(uri="main.py")
    assert document.get_value() == "print('hi')\n"
    assert workspace.active_uri == path_to_uri(path)

    ok = workspace.apply_workspace_edit(
        workspace_edit={
            "changes": {
                path_to_uri(path): [
                    {"range": {"start": {"line": 0, "character": 0}, "end": {"line": 0, "character": 0}}, "newText": "# x\n"}
                ]
            }
        }
    )
    assert ok is True
    assert workspace.read_file(uri=path) == "# x\nprint('hi')\n"
    assert workspace.read_file(uri=path, with_line_num=True).splitlines()[0] == "   1\t# x"
    # 光标随插入移动 | the cursor follows the insert
    assert workspace.buffer_host.get_cursor().line == 1

    workspace.save_file(uri=path)
    with open(path, encoding="utf-8") as f:
        assert f.read() == "# x\nprint('hi')\n"

    workspace.close_file(uri=path)
    assert workspace.document_store.get(path_to_uri(path)) is None
    assert workspace.active_uri is None
    with pytest.raises(NotFoundError):
        workspace.save_file(uri=path)


def test_workspace_find_files(temp_dir, make_file) -> None:
    for rel in ["a.py", "src/b.py", "src/c.txt", ".git/config", "node_modules/x.py"]:
        make_file(os.path.join(temp_dir, rel))
    ws = EditWorkspace(root_dir=temp_dir, project_name="find", workspace_setting={"max_search_results": 10})
    try:
        assert ws.find_files(include="**/*.py") == [
            path_to_uri(os.path.join(temp_dir, "a.py")),
            path_to_uri(os.path.join(temp_dir, "src", "b.py")),
        ]
        assert ws.find_files(include="**/*", exclude=[], max_results=1) == [path_to_uri(os.path.join(temp_dir, ".git", "config"))]
        assert ws.find_files(include=RelativePattern(os.path.join(temp_dir, "src"), "*")) == [
            path_to_uri(os.path.join(temp_dir, "src", "b.py")),
            path_to_uri(os.path.join(temp_dir, "src", "c.txt")),
        ]
    finally:
        ws.close()


def test_workspace_open_files(temp_dir, workspace, make_file) -> None:
    a = make_file(os.path.join(temp_dir, "a.txt"), "A")
    b = make_file(os.path.join(temp_dir, "b.txt"), "B")
    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "open_files", "action_args": {"uris": ["a.txt", path_to_uri(b)]}}
    )
    assert reward == 100 and success is True
    assert obs["original_result"] == [path_to_uri(a), path_to_uri(b)]
    assert f"{path_to_uri(a)} (version=0)" in obs["obs"]
    assert workspace.read_file(uri="b.txt") == "B"
    assert workspace.active_uri is None


def test_workspace_step(temp_dir, workspace, make_file) -> None:
    """
    测试 step 的奖励机制：成功 100，失败 0
    """
    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "create_file", "action_args": {"uri": "new.txt"}}
    )
    assert reward == 100 and success is True and done is True
    assert os.path.isfile(os.path.join(temp_dir, "new.txt"))

    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "create_file", "action_args": {"uri": "new.txt"}}
    )
    assert reward == 0 and success is False
    assert "new.txt" in obs["obs"]
    assert "error" in info

    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "find_files", "action_args": "*.txt"}
    )
    assert success is True
    assert obs["original_result"] == [path_to_uri(os.path.join(temp_dir, "new.txt"))]

    make_file(os.path.join(temp_dir, "readme.md"), "hello")
    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "open_file", "action_args": "readme.md"}
    )
    assert obs["obs"] == "hello"

    obs, reward, done, success, info = workspace.step(
        {
            "category": "workspace",
            "action_name": "apply_workspace_edit",
            "action_args": {"workspace_edit": {"documentChanges": [{"kind": "delete", "uri": "term://x"}]}},
        }
    )
    assert reward == 0 and success is False

    obs, reward, done, success, info = workspace.step(
        {"category": "workspace", "action_name": "delete_file", "action_args": {"path": "new.txt"}}
    )
    assert success is False

    with pytest.raises(ValueError):
        workspace.step({"category": "workspace", "action_name": "format_file", "action_args": {}})


def test_workspace_render_and_reset(temp_dir, workspace, make_file) -> None:
    make_file(os.path.join(temp_dir, "src", "app.py"), "x = 1\n")
    workspace.open_file(uri="src/app.py")
    view = workspace.render()
    assert "当前工作区: edit4ai_for_test" in view
    assert "- src/" in view and "  - app.py" in view
    assert f"* {path_to_uri(os.path.join(temp_dir, 'src', 'app.py'))} (version=0)" in view

    obs, info = workspace.reset()
    assert workspace.document_store.uris() == []
    assert workspace.buffer_host.open_paths() == []
    assert "已打开的文档" not in obs["obs"]


def test_workspace_closed(workspace) -> None:
    workspace.close()
    with pytest.raises(ValueError):
        workspace.render()
