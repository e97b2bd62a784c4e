"""Answer validation tests."""

import pytest

from costseg_flow.validation import AnswerValidationError, parse_amount, validate_answer


class TestValidateAnswer:

    def test_trims_answer(self, make_question):
        assert validate_answer(make_question("a"), "  hello ") == "hello"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_rejected(self, make_question, raw):
        with pytest.raises(AnswerValidationError, match="requires a response"):
            validate_answer(make_question("a"), raw)

    def test_choice_must_be_option(self, make_question):
        q = make_question("use", "single_select", options=["Office building", "Retail space"])
        assert validate_answer(q, "Retail space") == "Retail space"
        with pytest.raises(AnswerValidationError, match="not an option"):
            validate_answer(q, "Warehouse")

    def test_confirmation_must_be_option(self, make_question):
        q = make_question("greeting", "confirmation", options=["Yes, let's begin"])
        with pytest.raises(AnswerValidationError):
            validate_answer(q, "yes")

    @pytest.mark.parametrize("raw", ["500000", "$500,000", "1250.50"])
    def test_numeric_accepts_amounts(self, make_question, raw):
        assert validate_answer(make_question("basis", "numeric"), raw) == raw

    @pytest.mark.parametrize("raw", ["five hundred", "-100", "0"])
    def test_numeric_rejects(self, make_question, raw):
        with pytest.raises(AnswerValidationError):
            validate_answer(make_question("basis", "numeric"), raw)

    def test_numeric_zero_when_allowed(self, make_question):
        q = make_question("improvements", "numeric", allows_zero=True)
        assert validate_answer(q, "0") == "0"
        with pytest.raises(AnswerValidationError, match="zero or more"):
            validate_answer(q, "-1")

    @pytest.mark.parametrize("raw", ["01/15/2020", "2020-01-15"])
    def test_date_formats(self, make_question, raw):
        assert validate_answer(make_question("d", "date"), raw) == raw

    @pytest.mark.parametrize("raw", ["15/01/2020", "January 2020", "02/30/2020"])
    def test_date_rejects(self, make_question, raw):
        with pytest.raises(AnswerValidationError, match="MM/DD/YYYY"):
            validate_answer(make_question("d", "date"), raw)

    def test_completion_marker_takes_no_answer(self, make_question):
        with pytest.raises(AnswerValidationError, match="does not accept answers"):
            validate_answer(make_question("done", "summary"), "ok")

    def test_error_is_value_error_with_prefix(self, make_question):
        with pytest.raises(ValueError) as exc_info:
            validate_answer(make_question("a"), "")
        assert str(exc_info.value).startswith("Invalid answer:")


class TestParseAmount:

    def test_parse(self):
        assert parse_amount("$1,250,000") == 1250000.0
        assert parse_amount("12.5") == 12.5
        assert parse_amount("12 dollars") is None
