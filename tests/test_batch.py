"""
Tests for the batch driver and the command line entry point.
"""
import pytest

from StepDown.StepDown import StepDown
from StepDown.preferences import Preferences
from StepDown.utils import iter_java_files, load_json
from run_stepdown import get_parser, main

from conftest import java

UNSORTED = java("""
    class Calls {
        void c() {}
        void b() {}
        void a() { b(); c(); }
    }
""")

SORTED = java("""
    class Calls {
        void a() { b(); c(); }
        void b() {}
        void c() {}
    }
""")


@pytest.fixture
def project(tmp_path):
    """A source tree with one sortable, one sorted and one broken unit."""
    src = tmp_path / "src" / "org"
    src.mkdir(parents=True)
    (src / "Calls.java").write_text(UNSORTED, encoding="utf-8")
    (src / "Done.java").write_text(SORTED.replace("Calls", "Done"), encoding="utf-8")
    (src / "README.txt").write_text("not java", encoding="utf-8")
    return tmp_path


def add_broken(project):
    broken = project / "src" / "org" / "Broken.java"
    broken.write_text("class Broken { void m( }", encoding="utf-8")
    return broken


class TestIterJavaFiles:
    def test_walks_directories_in_order(self, project):
        add_broken(project)
        names = [p.rsplit("/", 1)[-1] for p in iter_java_files([str(project)])]
        assert names == ["Broken.java", "Calls.java", "Done.java"]

    def test_missing_path_is_skipped(self, tmp_path):
        assert list(iter_java_files([str(tmp_path / "nope")])) == []


class TestStepDown:
    """Tests for the batch driver."""

    def test_sorts_and_reports(self, project):
        broken = add_broken(project)
        report = project / "out" / "report.json"
        step_down = StepDown(Preferences(ordering_priorities=["INVOCATION", "SOURCE_POSITION"]),
                             show_progress=False)
        metrics = step_down.run([str(project / "src")], report_path=str(report))

        assert (project / "src" / "org" / "Calls.java").read_text(encoding="utf-8") == SORTED
        assert broken.read_text(encoding="utf-8") == "class Broken { void m( }"
        assert metrics.units_seen == 3
        assert metrics.units_changed == 1
        assert metrics.units_unchanged == 1
        assert metrics.units_failed == 1
        assert step_down.has_failures

        data = load_json(str(report))
        assert data["metrics"]["units"]["failed"] == 1
        assert [f["path"] for f in data["failures"]] == [str(broken)]
        calls = [u for u in data["units"] if u["path"].endswith("Calls.java")][0]
        assert calls["ordering"] == ["a()", "b()", "c()"]
        assert calls["written"]

    def test_dry_run_leaves_files(self, project):
        step_down = StepDown(dry_run=True, show_progress=False)
        metrics = step_down.run([str(project)])
        assert (project / "src" / "org" / "Calls.java").read_text(encoding="utf-8") == UNSORTED
        assert metrics.units_changed == 1
        assert not step_down.results[0].written

    def test_progress_display(self, project, capsys):
        StepDown(dry_run=True).run([str(project)])
        assert "Method Sorting Complete!" in capsys.readouterr().out

    def test_interrupt_stops_the_batch(self, project, monkeypatch):
        step_down = StepDown(show_progress=False)

        def interrupt(path, dry_run=False):
            raise KeyboardInterrupt

        monkeypatch.setattr(step_down.sorter, "sort_file", interrupt)
        step_down.run([str(project)])
        assert step_down.interrupted
        assert step_down.metrics.units_seen == 0
        assert (project / "src" / "org" / "Calls.java").read_text(encoding="utf-8") == UNSORTED

    def test_random_order_is_reproducible(self, project):
        first = StepDown(dry_run=True, random_order=True, seed=5, show_progress=False)
        second = StepDown(dry_run=True, random_order=True, seed=5, show_progress=False)
        first.run([str(project)])
        second.run([str(project)])
        assert [r.sorted_source for r in first.results] == [r.sorted_source for r in second.results]


class TestCommandLine:
    """Tests for run_stepdown.main."""

    def test_parser_defaults(self):
        args = get_parser().parse_args(["Foo.java"])
        assert args.paths == ["Foo.java"]
        assert args.priorities is None
        assert not args.dry_run

    def test_success(self, project, tmp_path):
        code = main([str(project / "src"), "--no_progress",
                     "--config_path", str(tmp_path / "missing.yaml"),
                     "--priorities", "INVOCATION#SOURCE_POSITION"])
        assert code == 0
        assert (project / "src" / "org" / "Calls.java").read_text(encoding="utf-8") == SORTED

    def test_failure_exit_code(self, project, tmp_path):
        add_broken(project)
        code = main([str(project), "--no_progress", "--dry_run",
                     "--config_path", str(tmp_path / "missing.yaml")])
        assert code == 1

    def test_invalid_priority(self, project, capsys):
        code = main([str(project), "--no_progress", "--priorities", "INVOCATION#ALPHABET"])
        assert code == 2
        assert "ALPHABET" in capsys.readouterr().err

    def test_report_option(self, project, tmp_path):
        report = tmp_path / "report.json"
        main([str(project), "--no_progress", "--dry_run", "--report", str(report),
              "--config_path", str(tmp_path / "missing.yaml")])
        assert load_json(str(report))["dry_run"] is True
