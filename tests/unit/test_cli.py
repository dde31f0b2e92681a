from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from angie import cli
from angicleans.catalog.models import AddOn
from angicleans.settings import Settings


class TestQuoteCommand:
    def test_prices_with_quantities(self) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "quote",
                "Deep Clean (FURNISHED)",
                "3-bed/2-bath",
                "--add-on",
                "Ironing Standard Basket=2",
                "--add-on",
                "Int/Ext Window Cleaning=5",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Base (3-bed/2-bath): R 1600.00" in result.output
        assert "Ironing Standard Basket x2: R 300.00" in result.output
        assert "Int/Ext Window Cleaning x5: R 250.00" in result.output
        assert "R 2150.00" in result.output

    def test_normalizes_alias(self) -> None:
        result = CliRunner().invoke(
            cli, ["quote", "Pre and Post Tenancy Clean (UNFURNISHED)", "4-bed/2+-bath"]
        )

        assert result.exit_code == 0, result.output
        assert "Pre and Post Tenancy Deposit Clean (UNFURNISHED)" in result.output
        assert "end-of-lease" in result.output
        assert "R 2500.00" in result.output

    def test_warns_about_unknown_keys(self) -> None:
        result = CliRunner().invoke(
            cli, ["quote", "Office Clean", "1-bed/1-bath", "--add-on", "Oven Clean"]
        )

        assert result.exit_code == 0, result.output
        assert "not in the catalog, priced as zero: Office Clean" in result.output
        assert "not in the catalog, priced as zero: Oven Clean" in result.output

    def test_rejects_bad_quantity(self) -> None:
        result = CliRunner().invoke(
            cli,
            ["quote", "Deep Clean (FURNISHED)", "1-bed/1-bath", "--add-on", "x=lots"],
        )

        assert result.exit_code != 0
        assert "quantity must be a number" in result.output

    def test_rejects_unknown_size(self) -> None:
        result = CliRunner().invoke(cli, ["quote", "Deep Clean (FURNISHED)", "castle"])

        assert result.exit_code != 0


class TestAddOnsCommand:
    def test_lists_every_add_on(self) -> None:
        result = CliRunner().invoke(cli, ["add-ons"])

        assert result.exit_code == 0
        for add_on in AddOn:
            assert add_on.value in result.output


class TestPreviewEmailCommand:
    def test_writes_sample(self, tmp_path: Path, logo_path: Path) -> None:
        output = tmp_path / "preview.html"
        settings = Settings(_env_file=None, logo_path=logo_path)

        with patch("angie.get_settings", return_value=settings):
            result = CliRunner().invoke(cli, ["preview-email", str(output)])

        assert result.exit_code == 0, result.output
        assert "with logo" in result.output
        html = output.read_text(encoding="utf-8")
        assert "QUOTATION" in html
        assert "R 2150.00" in html
