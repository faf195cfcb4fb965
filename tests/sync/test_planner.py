import pytest
from inline_snapshot import snapshot

from github_workspace_sync.sync.models import RepoEntry, SyncPlan
from github_workspace_sync.sync.planner import is_sentinel_path, plan_sync, repository_ancestors
from tests.conftest import file, folder


def paths(entries: list[RepoEntry]) -> list[str]:
    return [entry.path for entry in entries]


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("index.file", True),
        ("a/b/index.file", True),
        ("/index.file", True),
        ("index.file.bak", False),
        ("my-index.file", False),
        ("src/index.ts", False),
    ],
)
def test_is_sentinel_path(path: str, expected: bool):
    assert is_sentinel_path(path) is expected


def test_repository_ancestors():
    assert repository_ancestors("a/b/c.py") == ["a", "a/b"]
    assert repository_ancestors("README.md") == []


def test_plan_empty():
    assert plan_sync([]) == SyncPlan()


def test_plan_orders_folders_by_depth():
    entries = [
        folder("src"),
        folder("src/deep/deeper"),
        file("src/deep/deeper/x.ts"),
        folder("docs"),
        folder("src/deep"),
        file("README.md"),
    ]

    plan = plan_sync(entries)

    assert paths(plan.folders) == snapshot(["src", "docs", "src/deep", "src/deep/deeper"])
    assert paths(plan.files) == snapshot(["src/deep/deeper/x.ts", "README.md"])


def test_plan_depth_never_decreases():
    entries = [folder("a/b/c"), folder("a"), folder("x/y"), folder("a/b"), folder("x"), file("a/b/c/d/e.txt")]

    depths = [entry.depth for entry in plan_sync(entries).folders]

    assert depths == sorted(depths)


def test_plan_is_deterministic():
    entries = [folder("b"), folder("a"), file("b/one.txt"), file("a/two.txt"), folder("a/c")]

    assert plan_sync(entries) == plan_sync(entries)


def test_plan_keeps_discovery_order_within_a_depth():
    entries = [folder("zeta"), folder("alpha"), folder("mid")]

    assert paths(plan_sync(entries).folders) == ["zeta", "alpha", "mid"]


def test_plan_filters_sentinel_files():
    entries = [folder("src"), file("src/a.ts", content="x"), file("index.file", content=""), file("a/b/index.file")]

    plan = plan_sync(entries)

    assert paths(plan.files) == ["src/a.ts"]
    assert plan.skipped_paths == ["index.file", "a/b/index.file"]


def test_plan_does_not_synthesize_folders_for_sentinel_files():
    plan = plan_sync([file("ghost/index.file")])

    assert plan.folders == []
    assert plan.synthesized_folders == []


def test_plan_synthesizes_implicit_parent_folders():
    entries = [file("src/lib/util.py"), folder("docs"), file("docs/guide/intro.md")]

    plan = plan_sync(entries)

    assert paths(plan.folders) == snapshot(["src", "docs", "src/lib", "docs/guide"])
    assert plan.synthesized_folders == snapshot(["src", "src/lib", "docs/guide"])


def test_plan_every_parent_precedes_its_children():
    entries = [file("a/b/c/d.txt"), folder("a/b"), file("e/f.txt"), folder("e/g/h")]

    plan = plan_sync(entries)

    scheduled: set[str] = set()

    for entry in plan.folders:
        parent = entry.path.rpartition("/")[0]
        assert parent == "" or parent in scheduled
        scheduled.add(entry.path)

    for entry in plan.files:
        parent = entry.path.rpartition("/")[0]
        assert parent == "" or parent in scheduled


def test_plan_explicit_folder_after_synthesized_one_is_not_skipped():
    plan = plan_sync([file("src/a.ts"), folder("src")])

    assert paths(plan.folders) == ["src"]
    assert plan.skipped_paths == []


def test_plan_drops_duplicates_keeping_the_first():
    entries = [file("a.txt", content="first"), file("a.txt", content="second"), folder("d"), folder("d")]

    plan = plan_sync(entries)

    assert plan.files == [file("a.txt", content="first")]
    assert paths(plan.folders) == ["d"]
    assert plan.skipped_paths == ["a.txt", "d"]


def test_plan_normalizes_paths():
    plan = plan_sync([folder("/src/"), file("/src//main.py", content="print()"), file("")])

    assert paths(plan.folders) == ["src"]
    assert plan.files == [file("src/main.py", content="print()")]


def test_plan_keeps_inline_content():
    plan = plan_sync([file("a.txt", content="inline"), file("b.txt")])

    assert [entry.content for entry in plan.files] == ["inline", None]
