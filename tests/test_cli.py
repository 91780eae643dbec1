"""Console commands."""

from typer.testing import CliRunner

from wage_ticker.cli import app

runner = CliRunner()


def test_quote_halfway_through_the_day():
    result = runner.invoke(app, ["quote", "--rate", "800", "--at", "13:30"])
    assert result.exit_code == 0, result.output
    assert "¥400.00 RMB" in result.output
    assert "worked 04:30:00" in result.output
    assert "¥88.89/h" in result.output
    assert "50.0%" in result.output


def test_quote_in_secondary_unit():
    result = runner.invoke(
        app, ["quote", "--rate", "800", "--at", "13:30", "--unit", "usd"]
    )
    assert result.exit_code == 0, result.output
    assert "$57.14 USD" in result.output


def test_quote_before_the_day_starts():
    result = runner.invoke(app, ["quote", "--rate", "600", "--start", "10:00", "--at", "08:15"])
    assert result.exit_code == 0, result.output
    assert "¥0.00" in result.output
    assert "0.0%" in result.output


def test_quote_rejects_bad_input():
    assert runner.invoke(app, ["quote", "--rate", "0", "--at", "13:30"]).exit_code != 0
    assert runner.invoke(app, ["quote", "--rate", "800", "--end", "08:00"]).exit_code != 0
    assert runner.invoke(app, ["quote", "--rate", "800", "--unit", "EUR"]).exit_code != 0
    assert runner.invoke(app, ["quote", "--rate", "800", "--at", "noon"]).exit_code != 0
