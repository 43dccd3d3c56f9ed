"""Tests for the spendflow command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from spendflow.cli import app
from spendflow.store import get_cards, get_savings_accounts, get_transactions
from spendflow.store.schema import get_db_path

runner = CliRunner()


@pytest.fixture(autouse=True)
def xdg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return tmp_path


@pytest.fixture
def initialized() -> None:
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output


def add_card(*args: str) -> str:
    before = {card.id for card in get_cards()}
    result = runner.invoke(app, ["add-card", *args])
    assert result.exit_code == 0, result.output
    (card_id,) = {card.id for card in get_cards()} - before
    return card_id


class TestInit:
    """Tests for 'spendflow init'."""

    def test_creates_database_and_config(self, xdg_home: Path) -> None:
        """Should create both files."""
        result = runner.invoke(app, ["init", "--currency", "usd"])

        assert result.exit_code == 0
        assert "Initialization complete" in result.output
        assert get_db_path().exists()
        assert "USD" in (xdg_home / "config" / "spendflow" / "config.toml").read_text()

    def test_refuses_to_overwrite(self, initialized: None) -> None:
        """Should fail without --force when files exist."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_force_recreates_database(self, initialized: None) -> None:
        """--force should start over with an empty database."""
        add_card("--type", "debit", "--balance", "10")

        result = runner.invoke(app, ["init", "--force"])

        assert result.exit_code == 0
        assert get_cards() == []

    def test_rejects_unknown_currency(self) -> None:
        """Should refuse unsupported currency codes."""
        result = runner.invoke(app, ["init", "--currency", "XYZ"])

        assert result.exit_code == 1
        assert "Unsupported currency" in result.output

    def test_commands_need_init(self) -> None:
        """Commands should explain that init is required."""
        result = runner.invoke(app, ["cards"])

        assert result.exit_code == 1
        assert "spendflow init" in result.output


class TestCards:
    """Tests for 'add-card', 'cards' and 'summary'."""

    def test_add_and_list(self, initialized: None) -> None:
        """Added cards should appear in the listing."""
        card_id = add_card("--type", "debit", "--bank", "Monzo", "--balance", "£1,250.00")

        result = runner.invoke(app, ["cards"])

        assert result.exit_code == 0
        assert card_id in result.output
        assert "£1,250.00" in result.output

    def test_credit_card_needs_limit(self, initialized: None) -> None:
        """Should refuse a credit card without a limit."""
        result = runner.invoke(app, ["add-card", "--type", "credit"])

        assert result.exit_code == 1
        assert "--limit" in result.output

    def test_rejects_oversized_balance(self, initialized: None) -> None:
        """A balance too large to store should be refused before anything is written."""
        result = runner.invoke(app, ["add-card", "--type", "debit", "--balance", "99999999999999999999"])

        assert result.exit_code == 1
        assert "--balance cannot exceed £1,000,000,000.00" in result.output
        assert get_cards() == []

    def test_rejects_oversized_limit(self, initialized: None) -> None:
        """The same bound applies to credit limits."""
        result = runner.invoke(app, ["add-card", "--type", "credit", "--limit", "9" * 40])

        assert result.exit_code == 1
        assert "--limit cannot exceed" in result.output
        assert get_cards() == []

    def test_card_limit_reached(self, initialized: None) -> None:
        """Should refuse a third debit card."""
        add_card("--type", "debit")
        add_card("--type", "debit")

        result = runner.invoke(app, ["add-card", "--type", "debit"])

        assert result.exit_code == 1
        assert "Debit Card Limit Reached" in result.output

    def test_summary(self, initialized: None) -> None:
        """Should show the net position and utilization."""
        add_card("--type", "debit", "--balance", "500")
        add_card("--type", "credit", "--balance", "100", "--limit", "1000")

        result = runner.invoke(app, ["summary"])

        assert result.exit_code == 0
        assert "£400.00" in result.output
        assert "10.0%" in result.output


class TestExpenses:
    """Tests for 'expense', 'income' and 'check'."""

    def test_expense_into_overdraft(self, initialized: None) -> None:
        """Should record the expense and warn about the overdraft."""
        card_id = add_card("--type", "debit", "--balance", "50", "--overdraft", "20")

        result = runner.invoke(app, ["expense", "60", "--card", card_id, "--date", "10/01/2025"])

        assert result.exit_code == 0, result.output
        assert "overdraft" in result.output
        (txn,) = get_transactions()
        assert txn.date == "2025-01-10"

    def test_insufficient_funds(self, initialized: None) -> None:
        """Should print the rejection and exit 1."""
        card_id = add_card("--type", "debit", "--balance", "50")

        result = runner.invoke(app, ["expense", "60", "--card", card_id])

        assert result.exit_code == 1
        assert "Insufficient Funds" in result.output
        assert "enabling overdraft" in result.output
        assert get_transactions() == []

    def test_uses_configured_currency(self) -> None:
        """Messages should use the currency chosen at init."""
        runner.invoke(app, ["init", "--currency", "EUR"])
        card_id = add_card("--type", "debit", "--balance", "5")

        result = runner.invoke(app, ["expense", "10", "--card", card_id])

        assert "€5.00" in result.output

    def test_income(self, initialized: None) -> None:
        """Income should always be accepted."""
        card_id = add_card("--type", "debit")

        result = runner.invoke(app, ["income", "2500", "--card", card_id, "--source", "Salary"])

        assert result.exit_code == 0
        assert "£2,500.00" in result.output

    def test_no_card_selected(self, initialized: None) -> None:
        """Should reject an expense without --card."""
        result = runner.invoke(app, ["expense", "10"])

        assert result.exit_code == 1
        assert "No Card Selected" in result.output

    def test_invalid_date(self, initialized: None) -> None:
        """Should refuse an unparseable date."""
        card_id = add_card("--type", "debit", "--balance", "50")

        result = runner.invoke(app, ["expense", "10", "--card", card_id, "--date", "not a date"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_check_does_not_record(self, initialized: None) -> None:
        """'check' should validate without writing."""
        card_id = add_card("--type", "credit", "--balance", "200", "--limit", "500")

        ok = runner.invoke(app, ["check", "300", "--card", card_id])
        too_much = runner.invoke(app, ["check", "350", "--card", card_id])

        assert ok.exit_code == 0
        assert too_much.exit_code == 1
        assert "Credit Limit Exceeded" in too_much.output
        assert get_transactions() == []


class TestRefunds:
    """Tests for 'refund' and 'refundable'."""

    def test_refund_flow(self, initialized: None) -> None:
        """Partial refund, oversized refund, then refund the rest."""
        card_id = add_card("--type", "debit", "--balance", "200")
        runner.invoke(app, ["expense", "100", "--card", card_id, "-d", "Shoes"])
        (expense,) = get_transactions()

        partial = runner.invoke(app, ["refund", str(expense.id), "60"])
        listed = runner.invoke(app, ["refundable"])
        too_much = runner.invoke(app, ["refund", str(expense.id), "41"])
        rest = runner.invoke(app, ["refund", str(expense.id)])
        after = runner.invoke(app, ["refundable"])

        assert partial.exit_code == 0
        assert "£40.00 still refundable" in partial.output
        assert "Shoes" in listed.output
        assert too_much.exit_code == 1
        assert "Refund Too Large" in too_much.output
        assert rest.exit_code == 0, rest.output
        assert "fully refunded" in rest.output
        assert "No refundable transactions" in after.output

    def test_refund_unknown_transaction(self, initialized: None) -> None:
        """Should fail for a transaction that doesn't exist."""
        result = runner.invoke(app, ["refund", "42"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestTransfers:
    """Tests for 'transfer' and 'list'."""

    def test_transfer_and_list(self, initialized: None) -> None:
        """Should move money and show the transfer in the listing."""
        source = add_card("--type", "debit", "--balance", "100")
        destination = add_card("--type", "debit")

        result = runner.invoke(app, ["transfer", "40", "--from", source, "--to", destination])
        listed = runner.invoke(app, ["list"])

        assert result.exit_code == 0, result.output
        assert "Transferred £40.00" in result.output
        assert "transfer" in listed.output
        assert {c.id: c.balance for c in get_cards()}[destination] == 40

    def test_same_account(self, initialized: None) -> None:
        """Should refuse a transfer to the same card."""
        card_id = add_card("--type", "debit", "--balance", "100")

        result = runner.invoke(app, ["transfer", "40", "--from", card_id, "--to", card_id])

        assert result.exit_code == 1
        assert "Invalid Transfer" in result.output

    def test_list_empty(self, initialized: None) -> None:
        """Should say when there are no transactions."""
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No transactions found" in result.output


def open_savings(*args: str) -> str:
    before = {account.id for account in get_savings_accounts()}
    result = runner.invoke(app, ["open-savings", *args])
    assert result.exit_code == 0, result.output
    (account_id,) = {account.id for account in get_savings_accounts()} - before
    return account_id


class TestSavings:
    """Tests for the savings account commands."""

    def test_savings_flow(self, initialized: None) -> None:
        """Open, pay in, take out and list a savings account."""
        card_id = add_card("--type", "debit", "--balance", "500")
        account_id = open_savings("Holiday", "--goal", "1000", "--balance", "100", "--card", card_id)

        saved = runner.invoke(app, ["save", "50", "--to", account_id])
        withdrawn = runner.invoke(app, ["withdraw", "30", "--from", account_id])
        listed = runner.invoke(app, ["savings"])

        assert saved.exit_code == 0, saved.output
        assert "Saved £50.00" in saved.output
        assert withdrawn.exit_code == 0, withdrawn.output
        assert "Withdrew £30.00" in withdrawn.output
        assert "Holiday" in listed.output
        assert "£120.00" in listed.output
        assert "12%" in listed.output
        assert {c.id: c.balance for c in get_cards()}[card_id] == 480

    def test_summary_includes_savings(self, initialized: None) -> None:
        """Savings should count towards the net position."""
        add_card("--type", "debit", "--balance", "500")
        add_card("--type", "credit", "--balance", "100", "--limit", "1000")
        open_savings("Holiday", "--goal", "1000", "--balance", "250")

        result = runner.invoke(app, ["summary"])

        assert result.exit_code == 0
        assert "Savings" in result.output
        assert "£250.00" in result.output
        assert "£650.00" in result.output

    def test_second_account_refused(self, initialized: None) -> None:
        """Only one savings account is allowed by default."""
        open_savings("Holiday", "--goal", "1000")

        result = runner.invoke(app, ["open-savings", "Car", "--goal", "5000"])

        assert result.exit_code == 1
        assert "Savings Account Limit Reached" in result.output

    def test_withdraw_more_than_saved(self, initialized: None) -> None:
        """Should refuse to take out more than the account holds."""
        card_id = add_card("--type", "debit")
        account_id = open_savings("Holiday", "--goal", "1000", "--balance", "20", "--card", card_id)

        result = runner.invoke(app, ["withdraw", "30", "--from", account_id])

        assert result.exit_code == 1
        assert "Insufficient Funds" in result.output

    def test_close_pays_out(self, initialized: None) -> None:
        """Closing should return the balance to the card and remove the account."""
        card_id = add_card("--type", "debit", "--balance", "10")
        account_id = open_savings("Holiday", "--goal", "1000", "--balance", "75", "--card", card_id)

        result = runner.invoke(app, ["close-savings", account_id])

        assert result.exit_code == 0, result.output
        assert "Closed savings account: Holiday" in result.output
        assert "£75.00 paid out" in result.output
        assert get_savings_accounts() == []
        assert {c.id: c.balance for c in get_cards()}[card_id] == 85

    def test_list_shows_savings_name(self, initialized: None) -> None:
        """Savings transfers should name the account in the listing."""
        card_id = add_card("--type", "debit", "--balance", "100")
        account_id = open_savings("Holiday", "--goal", "1000", "--card", card_id)
        runner.invoke(app, ["save", "40", "--to", account_id])

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Holiday" in result.output
        assert len(get_transactions()) == 1

    def test_no_accounts(self, initialized: None) -> None:
        """Should explain how to open one."""
        result = runner.invoke(app, ["savings"])

        assert result.exit_code == 0
        assert "No savings accounts yet" in result.output
