"""
Tests for the betting calculator tool.
"""

from unittest.mock import patch

from oddsy.tools.math_solver import calculate, create_calculator_tool, preprocess_expression


class TestMathSolver:
    """Tests for the calculate function."""

    def test_basic_arithmetic(self):
        """Test basic arithmetic operations."""
        result = calculate("2 + 2")
        assert result.ok is True
        assert result.data == {"expression": "2 + 2", "result": 4}

    def test_implied_probability_underdog(self):
        """+150 implies 100 / (150 + 100)."""
        result = calculate("100 / (150 + 100)")
        assert result.ok is True
        assert result.data["result"] == 0.4

    def test_implied_probability_favorite(self):
        """-150 implies 150 / (150 + 100)."""
        result = calculate("150 / (150 + 100)")
        assert result.data["result"] == 0.6

    def test_result_rounded(self):
        result = calculate("1 / 3")
        assert result.data["result"] == 0.333333

    def test_caret_power(self):
        """Test caret exponentiation."""
        result = calculate("2^10")
        assert result.data["result"] == 1024

    def test_thousands_separator(self):
        result = calculate("1,000 * 2")
        assert result.ok is True
        assert result.data["result"] == 2000

    def test_ceil_alias(self):
        assert calculate("ceil(3.2)").data["result"] == 4

    def test_sqrt_function(self):
        """Test square root function."""
        assert calculate("sqrt(144)").data["result"] == 12

    def test_empty_expression(self):
        result = calculate("   ")
        assert result.ok is False
        assert "Expression is empty" in result.error

    def test_invalid_syntax(self):
        """Test handling of invalid syntax."""
        result = calculate("2 +* 2")
        assert result.ok is False
        assert result.error

    def test_import_call_rejected(self):
        result = calculate("__import__('os').getpid()")
        assert result.ok is False
        assert "may only contain" in result.error

    def test_unknown_name_rejected(self):
        result = calculate("exec(1) + x")
        assert result.ok is False
        assert "Unsupported name 'exec'" in result.error

    def test_attribute_access_rejected(self):
        result = calculate("pi.evalf(2)")
        assert result.ok is False
        assert "evalf" in result.error

    def test_scientific_notation_allowed(self):
        assert calculate("1.5e3 / 3").data["result"] == 500

    def test_min_max_and_constants(self):
        assert calculate("max(1, 2) + min(3, 4)").data["result"] == 5
        assert calculate("floor(pi)").data["result"] == 3


class TestPreprocess:
    """Tests for expression preprocessing."""

    def test_keeps_function_argument_commas(self):
        assert preprocess_expression("max(1, 2)") == "max(1, 2)"

    def test_strips_thousands_commas(self):
        assert preprocess_expression("1,250,000 / 5") == "1250000 / 5"


class TestCalculatorTool:
    """Tests for the calculator ToolSpec."""

    def test_runs_through_spec(self):
        result = create_calculator_tool().run('{"expression": "0.55 * 1.91 - 1"}')
        assert result.ok is True
        assert result.data["result"] == 0.0505

    def test_missing_expression(self):
        result = create_calculator_tool().run("{}")
        assert result.ok is False
        assert "expression" in result.error

    def test_os_system_call_not_executed(self):
        with patch("os.system") as system:
            result = create_calculator_tool().run(
                {"expression": "__import__(\"os\").system(\"id\")"}
            )

        assert result.ok is False
        system.assert_not_called()
