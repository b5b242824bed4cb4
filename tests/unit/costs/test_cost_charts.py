"""Tests for ASCII cost charts and text summaries."""

import pytest

from nimure.costs.charts import (
    bar_length,
    currency_symbol,
    format_cost_summary,
    format_resource_costs,
    render_daily_chart,
    render_service_chart,
    trend_line,
    truncate,
)
from nimure.costs.models import (
    CostPeriod,
    CostSummary,
    CostTrend,
    DailyCost,
    ResourceCostDetail,
    ServiceCost,
    TrendDirection,
)


def summary(**overrides) -> CostSummary:
    values = {
        "total_cost": 25.0,
        "currency": "EUR",
        "services": (ServiceCost("VM", 17.5, 2, "EUR"), ServiceCost("Storage", 7.5, 1, "EUR")),
        "daily_costs": (DailyCost("2024-01-01", 20.0), DailyCost("2024-01-02", 5.0)),
        "period": CostPeriod("2024-01-01", "2024-01-02"),
    }
    values.update(overrides)
    return CostSummary(**values)


class TestHelpers:
    """Tests for small formatting helpers."""

    @pytest.mark.parametrize(
        ("code", "symbol"), [("USD", "$"), ("EUR", "€"), ("GBP", "£"), ("XYZ", "XYZ "), (None, "$")]
    )
    def test_currency_symbol(self, code, symbol):
        """Known codes map to symbols; unknown codes are shown as-is."""
        assert currency_symbol(code) == symbol

    def test_truncate(self):
        """Long text is cut to the limit including the ellipsis."""
        assert truncate("short", 25) == "short"
        assert truncate("x" * 30, 25) == "x" * 22 + "..."
        assert len(truncate("x" * 30, 25)) == 25

    @pytest.mark.parametrize(
        ("value", "maximum", "expected"), [(20, 20, 50), (5, 20, 12), (0, 20, 0), (1, 0, 0)]
    )
    def test_bar_length(self, value, maximum, expected):
        """Bars are floor(value / max * scale)."""
        assert bar_length(value, maximum, 50) == expected


class TestRenderDailyChart:
    """Tests for render_daily_chart()."""

    def test_bars(self):
        """Each day is one row with a proportional bar."""
        lines = render_daily_chart([DailyCost("2024-01-01", 20.0), DailyCost("2024-01-02", 5.0)], width=4)

        assert lines == [
            "Daily Costs (Max: 20.00)",
            "─" * 14,
            "01-01 │████ 20.00",
            "01-02 │█    5.00",
            "─" * 14,
        ]

    def test_empty(self):
        """No data gives a single message row."""
        assert render_daily_chart([]) == ["No cost data available"]

    def test_all_zero(self):
        """Zero spend gives a single message row."""
        assert render_daily_chart([DailyCost("2024-01-01", 0.0)]) == ["No costs recorded for this period"]

    def test_truncated(self):
        """Only the first 20 days are drawn, followed by a summary row."""
        days = [DailyCost(f"2024-01-{i:02d}", float(i)) for i in range(1, 26)]

        lines = render_daily_chart(days)

        assert "... 5 more days" in lines
        assert sum(1 for line in lines if "│" in line) == 20

    def test_deterministic(self):
        """The same input renders the same lines."""
        days = [DailyCost("2024-01-01", 3.0), DailyCost("2024-01-02", 7.0)]

        assert render_daily_chart(days) == render_daily_chart(list(days))


class TestRenderServiceChart:
    """Tests for render_service_chart()."""

    def test_percentages(self):
        """Each service shows its share of the total."""
        lines = render_service_chart(summary().services)

        assert lines[0] == "Service Breakdown (Total: 25.00 EUR)"
        assert "70.0% (17.50)" in lines[2]
        assert "30.0% (7.50)" in lines[3]

    def test_long_names_truncated(self):
        """Names longer than 25 characters are cut."""
        name = "Azure Database for PostgreSQL Flexible Server"
        lines = render_service_chart([ServiceCost(name, 1.0, 1)])

        assert lines[2].startswith("Azure Database for Pos... │")

    def test_more_services(self):
        """Services past the limit are summarized."""
        services = [ServiceCost(f"svc{i}", float(12 - i), 1) for i in range(12)]

        assert "... and 2 more services" in render_service_chart(services)

    def test_empty(self):
        """No services gives a single message row."""
        assert render_service_chart([]) == ["No service cost data available"]


class TestFormatCostSummary:
    """Tests for format_cost_summary()."""

    def test_headline(self):
        """Total, period, service count, average and top services are shown."""
        lines = format_cost_summary(summary())

        assert "Total Cost: €25.00 EUR" in lines
        assert "Period: 2024-01-01 to 2024-01-02" in lines
        assert "Services: 2" in lines
        assert "Daily Average: €12.50 EUR" in lines
        assert "   1. VM: €17.50 (70.0%)" in lines

    def test_none(self):
        """Missing data gives a message."""
        assert format_cost_summary(None) == ["No cost data available"]

    def test_zero_total(self):
        """An empty summary has no average and no top services."""
        lines = format_cost_summary(CostSummary.empty("2024-01-01", "2024-01-31"))

        assert "Total Cost: $0.00 USD" in lines
        assert not any(line.startswith("Daily Average") for line in lines)


class TestFormatResourceCosts:
    """Tests for format_resource_costs()."""

    def test_with_usage(self):
        """Usage rows show their date and cost."""
        detail = ResourceCostDetail(
            resource_name="frontend",
            resource_type="Microsoft.Web/sites",
            total_cost=4.0,
            currency="USD",
            usage_items=((2.5, 20240101, "USD"), (1.5, 20240102, "USD")),
            resource_group="rg-web",
            note="Showing costs for resource group 'rg-web' (period: 2024-01-01 to 2024-01-31)",
        )

        lines = format_resource_costs(detail)

        assert "Total Cost: $4.00 USD" in lines
        assert "Usage Records: 2" in lines
        assert detail.note in lines
        assert "   2024-01-01: $2.50" in lines

    def test_zero_cost_without_note(self):
        """Zero cost without a note says nothing was recorded."""
        detail = ResourceCostDetail(resource_name="x", resource_type="t")

        assert format_resource_costs(detail)[-1] == "No costs recorded for this resource in the selected period."

    def test_zero_cost_with_note(self):
        """The note replaces the empty message."""
        detail = ResourceCostDetail(resource_name="x", resource_type="t", note="No access")

        lines = format_resource_costs(detail)

        assert "No access" in lines
        assert "No costs recorded for this resource in the selected period." not in lines


class TestTrendLine:
    """Tests for trend_line()."""

    def test_up(self):
        """Up trends show the rising indicator and percentage."""
        trend = CostTrend(TrendDirection.UP, change_percent=28.571)

        assert trend_line(trend) == "📈 Trending up (28.6%)"

    def test_insufficient(self):
        """Insufficient data uses the neutral indicator."""
        assert trend_line(CostTrend(TrendDirection.INSUFFICIENT_DATA)) == "📊 Insufficient data"
