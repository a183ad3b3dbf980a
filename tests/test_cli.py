"""
Tests for the CLI interface.
"""
import json
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import yaml
from typer.testing import CliRunner

from fincli.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL
from fincli.config.loader import DEFAULT_ALLOCATION
from fincli.core.accounting import create_accounting
from fincli.storage.models import ExpenseWithAmount
from fincli.storage.repository import get_report_store
from fincli.storage.versioning import VersionResolver

runner = CliRunner()


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Point every path option at a temporary directory."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config_path = self.temp_dir / "config.yaml"
        self.catalog_path = self.temp_dir / "expenses.json"
        self.reports_dir = self.temp_dir / "reports"
        self.data_dir = self.temp_dir / "data"

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _invoke(self, *args, input=None):
        options = [
            "--config", str(self.config_path),
            "--catalog", str(self.catalog_path),
            "--reports-dir", str(self.reports_dir),
            "--data-dir", str(self.data_dir),
        ]
        return runner.invoke(app, options + list(args), input=input)

    def _store(self):
        return get_report_store(self.reports_dir, self.data_dir)

    def _seed_report(self):
        store = self._store()
        expenses = [
            ExpenseWithAmount(name="rent", priority=1, amount=1_000_000),
            ExpenseWithAmount(name="gadget", priority=5, amount=200_000),
        ]
        return create_accounting("march", 5_000_000, expenses, DEFAULT_ALLOCATION, store, VersionResolver(store.layout))

    def test_create_command(self):
        """Test the full create prompt sequence."""
        with open(self.catalog_path, 'w', encoding='utf-8') as f:
            json.dump([
                {"name": "gadget", "priority": 5, "tags": []},
                {"name": "rent", "priority": 1, "tags": ["home"]},
            ], f)

        answers = [
            "5000",          # budget, in thousands
            "y", "1000",     # rent
            "n",             # gadget
            "y", "gpt", "5", "ai, work", "100",
            "n",
            "march",
        ]
        result = self._invoke("create", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert "Budget set to: 5,000,000 tomans" in result.output
        assert "Report saved as march-v1" in result.output

        record = self._store().load("march-v1")
        assert [(e.name, e.amount) for e in record.expenses] == [("rent", 1_000_000), ("gpt", 100_000)]
        assert record.expenses[1].tags == ("ai", "work")
        assert record.allocation.daily_expenses_remaining == 1_900_000

        with open(self.catalog_path, encoding='utf-8') as f:
            assert [e["name"] for e in json.load(f)] == ["rent", "gadget", "gpt"]

    def test_create_reprompts_invalid_input(self):
        """Test that invalid numbers are asked again rather than failing."""
        answers = ["abc", "0", "10", "y", "x", "9", "2", "", "-1", "3", "n", "april"]
        result = self._invoke("create", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        record = self._store().load("april-v1")
        assert record.total_budget == 10_000
        assert record.expenses[0].priority == 2
        assert record.expenses[0].amount == 3_000

    def test_create_warns_on_overspend(self):
        """Test that negative results are reported but still saved."""
        answers = ["1000", "y", "shopping", "4", "", "800", "n", "may"]
        result = self._invoke("create", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert "exceed the daily-use share" in result.output
        assert self._store().load("may-v1").allocation.daily_expenses_remaining == -300_000

    def test_list_and_show(self):
        """Test listing and printing saved reports."""
        self._seed_report()

        result = self._invoke("list")
        assert result.exit_code == EXIT_CODE_PASS
        assert "march-v1.txt" in result.output

        result = self._invoke("show", "march-v1.txt")
        assert result.exit_code == EXIT_CODE_PASS
        assert "Total budget: 5,000,000 tomans" in result.output

    def test_show_missing_report_fails(self):
        """Test that an unknown report exits non-zero."""
        result = self._invoke("show", "ghost-v1.txt")
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Report not found" in result.output

    def test_show_undecodable_report_fails(self):
        """Test that a report that is not valid UTF-8 is reported, not raised."""
        self._seed_report()
        (self.reports_dir / "march-v1.txt").write_bytes(b"\xff\xfe broken")

        result = self._invoke("show", "march-v1.txt")
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Error:" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_create_rejects_path_in_name(self):
        """Test that a report name with a directory part exits non-zero."""
        answers = ["1000", "n", "../escape"]
        result = self._invoke("create", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_FAIL
        assert "path separator" in result.output
        assert self._store().list() == []
        assert not (self.temp_dir / "escape-v1.txt").exists()

    def test_edit_amounts_creates_new_version(self):
        """Test that editing amounts writes v2 and keeps v1."""
        original = self._seed_report()
        answers = ["1", "", "300"]
        result = self._invoke("edit", "march-v1.txt", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert "Report saved as march-v2" in result.output
        store = self._store()
        assert store.load("march-v1") == original
        revised = store.load("march-v2")
        assert [e.amount for e in revised.expenses] == [1_000_000, 300_000]
        assert revised.allocation.daily_expenses_remaining == 2_000_000 - 300_000

    def test_edit_selects_from_list(self):
        """Test choosing the report by number and changing the budget."""
        self._seed_report()
        answers = ["1", "3", "6000"]
        result = self._invoke("edit", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert self._store().load("march-v2").total_budget == 6_000_000

    def test_edit_add_expense(self):
        """Test adding a line item during an edit."""
        self._seed_report()
        answers = ["2", "cinema", "4", "fun", "50"]
        result = self._invoke("edit", "march-v1", input="\n".join(answers) + "\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        revised = self._store().load("march-v2")
        assert revised.expenses[-1].name == "cinema"
        assert revised.expenses[-1].amount == 50_000

    def test_edit_raw_text(self):
        """Test that the free-text edit rewrites only the text report."""
        original = self._seed_report()
        with patch("typer.edit", return_value="hand written\n"):
            result = self._invoke("edit", "march-v1.txt", input="4\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        store = self._store()
        assert store.read_raw("march-v1.txt") == "hand written\n"
        assert store.load("march-v1") == original
        assert store.list() == ["march-v1.txt"]

    def test_edit_reconstructed_report(self):
        """Test that a report without its structured copy is flagged and recomputed."""
        self._seed_report()
        os.remove(self.data_dir / "march-v1.json")

        result = self._invoke("edit", "march-v1.txt", input="1\n\n\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert "approximate" in result.output
        assert self._store().load("march-v2").allocation.investments == 1_200_000

    def test_edit_without_reports(self):
        """Test the message when there is nothing to edit."""
        result = self._invoke("edit")
        assert result.exit_code == EXIT_CODE_PASS
        assert "No past accountings found." in result.output

    def test_menu_loop(self):
        """Test that the menu runs actions until quit."""
        result = self._invoke(input="3\n4\n5\n")

        assert result.exit_code == EXIT_CODE_PASS, result.output
        assert "Welcome to FinCLI" in result.output
        assert "Expense Priority Criteria" in result.output
        assert "No past accountings found." in result.output

    def test_config_set_and_show(self):
        """Test saving and displaying percentages."""
        result = self._invoke("config", "set", "-i", "40", "-s", "10", "-d", "50")
        assert result.exit_code == EXIT_CODE_PASS, result.output

        with open(self.config_path, encoding='utf-8') as f:
            assert yaml.safe_load(f)["budgetAllocation"]["investments"] == 40

        result = self._invoke("config", "show")
        assert result.exit_code == EXIT_CODE_PASS
        assert "40%" in result.output

    def test_config_set_rejects_bad_sum(self):
        """Test that percentages not summing to 100 exit non-zero."""
        result = self._invoke("config", "set", "-i", "50", "-s", "50", "-d", "50")
        assert result.exit_code == EXIT_CODE_FAIL
        assert not self.config_path.exists()

    def test_invalid_config_warns_and_uses_defaults(self):
        """Test that a bad config file only produces a warning."""
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump({"budgetAllocation": {"investments": 30, "savings": 20, "dailyExpenses": 49}}, f)

        result = self._invoke("config", "show")
        assert result.exit_code == EXIT_CODE_PASS
        assert "Warning" in result.output
        assert "50%" in result.output
