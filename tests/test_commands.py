# tests/test_commands.py

from __future__ import annotations

from taskell.cli.commands import CommandRegistry, Reply, registry
from taskell.core.state import AppState
from taskell.tasks.task_models import TaskStatus


def run(state: AppState, line: str) -> Reply:
    reply = registry.handle(state, line)
    assert reply is not None
    return reply


def test_command_registry_routes_names_and_aliases(memory_state: AppState) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return Reply("ok")

    reg.register("go", handler, "go somewhere", aliases=["g"])

    assert reg.handle(memory_state, "go far away").text == "ok"
    assert reg.handle(memory_state, "G now").text == "ok"
    assert called == [["far", "away"], ["now"]]
    assert reg.is_known("g") and not reg.is_known("stop")


def test_command_registry_unknown_and_empty(memory_state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(memory_state, "   ") is None
    reply = reg.handle(memory_state, "nope")
    assert reply is not None and not reply.ok
    assert "Unknown command" in reply.text


def test_full_lifecycle_through_commands(state: AppState) -> None:
    assert run(state, "add Write spec").ok
    assert not run(state, "start 1").ok

    assert run(state, "delta 1 Spec approved").ok
    started = run(state, "start")
    assert started.ok and "Started task 1" in started.text

    assert run(state, "note first draft done").ok
    done = run(state, "done Shipped")
    assert done.ok and "Shipped" in done.text

    task = state.repo.load().get(1)
    assert task.status == TaskStatus.DONE
    assert task.final_state == "Shipped"
    assert [n.content for n in task.notes] == ["first draft done"]


def test_start_defaults_to_first_ready_task(state: AppState) -> None:
    run(state, "add Alpha")
    run(state, "add Beta")
    run(state, "criteria 2 beta works")
    run(state, "d 1 alpha works")

    assert run(state, "s").ok
    assert state.repo.load().active_task_id == 1

    second = run(state, "start 2")
    assert not second.ok and "already active" in second.text


def test_pause_resume_and_smart_defaults(state: AppState) -> None:
    assert not run(state, "pause").ok
    assert not run(state, "done").ok
    assert not run(state, "resume").ok

    run(state, "add Alpha")
    run(state, "delta 1 ok")
    run(state, "start")
    assert run(state, "pause").ok
    assert state.repo.load().get(1).status == TaskStatus.PAUSED

    assert run(state, "resume").ok
    assert state.repo.load().get(1).status == TaskStatus.ACTIVE


def test_drop_defaults_to_active_and_twice_is_ok(state: AppState) -> None:
    assert not run(state, "drop").ok

    run(state, "add Alpha")
    run(state, "delta 1 ok")
    run(state, "start")
    assert run(state, "drop").ok

    again = run(state, "drop 1")
    assert again.ok and "already dropped" in again.text
    store = state.repo.load()
    assert store.get(1).status == TaskStatus.DROPPED
    assert store.active_task_id is None


def test_note_targets(state: AppState) -> None:
    run(state, "add Alpha")
    run(state, "add Beta")

    # No active task: a leading id picks the task.
    assert run(state, "note 2 remember milk").ok
    assert not run(state, "note just text").ok

    run(state, "delta 1 ok")
    run(state, "start 1")
    assert run(state, "note 3 cups of coffee").ok
    assert run(state, "n 2 for beta").ok

    store = state.repo.load()
    assert [n.content for n in store.get(1).notes] == ["3 cups of coffee"]
    assert [n.content for n in store.get(2).notes] == ["remember milk", "for beta"]


def test_identifiers_accept_unique_substrings(state: AppState) -> None:
    run(state, "add Write spec")
    run(state, "add Write tests")
    run(state, "add Buy coffee")

    ambiguous = run(state, "drop write")
    assert not ambiguous.ok and "several" in ambiguous.text

    assert run(state, "drop coffee").ok
    assert state.repo.load().get(3).status == TaskStatus.DROPPED


def test_edit_rm_show_and_list(state: AppState) -> None:
    run(state, "add Draft")
    run(state, "add Scratch")
    assert run(state, "edit 1 Final draft").ok
    assert run(state, "delta 1 Reviewed").ok

    shown = run(state, "show 1")
    assert shown.ok
    assert "Final draft" in shown.text and "Criteria: Reviewed" in shown.text

    assert run(state, "rm 2").ok
    assert not run(state, "show 2").ok

    listing = run(state, "list")
    assert "Final draft" in listing.text and "Scratch" not in listing.text
    assert "(none)" in run(state, "list done").text
    assert not run(state, "list someday").ok


def test_status_and_help(state: AppState) -> None:
    assert "No active task" in run(state, "status").text
    run(state, "add Alpha")
    run(state, "delta 1 ok")
    assert "Ready: 1" in run(state, "status").text
    run(state, "start")
    assert "Current:" in run(state, "current").text

    help_text = run(state, "help").text
    names = ("add", "delta", "start", "pause", "resume", "done", "drop", "note", "list", "show")
    for name in names:
        assert name in help_text


def test_validation_messages(state: AppState) -> None:
    assert not run(state, "add").ok
    assert not run(state, "delta 1").ok
    assert not run(state, "show").ok
    assert not run(state, "rm").ok


def test_backup_export_import_commands(state: AppState, tmp_path) -> None:
    run(state, "add Alpha")
    assert "Backup written" in run(state, "backup").text

    target = tmp_path / "out.json"
    assert run(state, f"export {target}").ok
    run(state, "rm 1")
    assert len(state.repo.load()) == 0

    assert run(state, f"import {target}").ok
    assert state.repo.load().get(1).content == "Alpha"


def test_storage_error_becomes_failed_reply(state: AppState) -> None:
    state.repo.path.write_text("garbage", "utf-8")
    reply = run(state, "list")
    assert not reply.ok
    assert "Storage error" in reply.text


def test_failed_commands_do_not_save(memory_state: AppState) -> None:
    repo = memory_state.repo
    run(memory_state, "start")
    run(memory_state, "delta 7 nothing")
    assert repo.saves == 0

    run(memory_state, "add Alpha")
    assert repo.saves == 1


def test_non_ascii_digits_are_not_ids(state: AppState) -> None:
    run(state, "add Alpha")

    shown = run(state, "show ²")
    assert not shown.ok and "No task matches" in shown.text

    noted = run(state, "note ² hi")
    assert not noted.ok
    assert state.repo.load().get(1).notes == ()


def test_start_with_timebox(state: AppState) -> None:
    run(state, "add Alpha")
    run(state, "delta 1 ok")

    assert not run(state, "start -t").ok
    assert not run(state, "start 1 -t soon").ok

    started = run(state, "start -t 25")
    assert started.ok
    assert "Started task 1" in started.text and "25 min timebox" in started.text
    assert state.repo.load().active_task_id == 1


def test_rm_joins_words_into_one_identifier(state: AppState) -> None:
    run(state, "add Write spec")
    run(state, "add Write tests")

    assert run(state, "rm Write spec").ok
    assert [t.content for t in state.repo.load().tasks] == ["Write tests"]


def test_clear_reprints_status(state: AppState) -> None:
    assert run(state, "clear").text == run(state, "status").text
    assert registry.is_known("c")
