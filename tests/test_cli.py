import pytest

from gyansathi.cli import GyanSathiCLI, main
from gyansathi.knowledge import KnowledgeItem


@pytest.fixture
def cli(engine, monkeypatch):
    monkeypatch.setattr("gyansathi.cli.time.sleep", lambda _: None)
    cli = GyanSathiCLI()
    cli.engine = engine
    return cli


def test_quit(cli):
    assert cli.handle_command("quit") is False
    assert cli.handle_command("EXIT") is False


def test_question_is_not_a_command(cli):
    assert cli.handle_command("তোমার নাম কি?") is None
    assert cli.handle_command("help me please") is None


def test_qa_command(cli, monkeypatch):
    answers = iter(["তোমার নাম কি?", "সোফিয়া"])
    monkeypatch.setattr(cli, "_ask", lambda label: next(answers))
    assert cli.handle_command("qa") is True
    assert cli.engine.generate_response("তোমার নাম কি?") == "সোফিয়া"


def test_learn_command_requires_both_fields(cli, monkeypatch, capsys):
    monkeypatch.setattr(cli, "_ask", lambda label: "শিরোনাম")
    monkeypatch.setattr(cli, "_ask_multiline", lambda label: "")
    cli.handle_command("learn")
    assert "required" in capsys.readouterr().out
    assert cli.engine.get_knowledge_base() == []


def test_stats_and_list(cli, capsys):
    item = cli.engine.learn_from_text("নদী", "পদ্মা একটি নদী।")
    assert cli.handle_command("stats") is True
    assert cli.handle_command("list") is True
    out = capsys.readouterr().out
    assert "নদী" in out
    assert item.id[:8] in out


def test_delete_by_prefix(cli):
    item = cli.engine.learn_from_text("নদী", "পদ্মা একটি নদী।")
    assert cli.handle_command(f"delete {item.id[:8]}") is True
    assert cli.engine.get_knowledge_base() == []


def test_delete_needs_a_unique_prefix(cli, capsys):
    cli.engine.store.add_knowledge(KnowledgeItem("নদী", "পদ্মা", id="ab1"))
    cli.engine.store.add_knowledge(KnowledgeItem("পাহাড়", "হিমালয়", id="ab2"))
    cli.handle_command("delete ab")
    cli.handle_command("delete ")
    out = capsys.readouterr().out
    assert "No unique entry" in out
    assert "Usage" in out
    assert len(cli.engine.get_knowledge_base()) == 2


def test_bulk_from_file(cli, tmp_path):
    path = tmp_path / "pairs.txt"
    path.write_text("Q: ক?\nA: খ\n\nQ: গ?\nA: ঘ", encoding="utf-8")
    assert cli.handle_command(f"bulk {path}") is True
    assert len(cli.engine.get_question_answer_pairs()) == 2


def test_bulk_missing_file(cli, tmp_path, capsys):
    cli.handle_command(f"bulk {tmp_path / 'missing.txt'}")
    assert "Could not read" in capsys.readouterr().out


def test_clear_needs_confirmation(cli, monkeypatch):
    cli.engine.learn_from_text("নদী", "পদ্মা")
    monkeypatch.setattr(cli, "_ask", lambda label: "no")
    cli.handle_command("clear")
    assert len(cli.engine.get_knowledge_base()) == 1

    monkeypatch.setattr(cli, "_ask", lambda label: "yes")
    cli.handle_command("clear")
    assert cli.engine.get_knowledge_base() == []


def test_about(capsys):
    main(["--about"])
    assert "GyanSathi" in capsys.readouterr().out
