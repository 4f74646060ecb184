"""Tests for business rule and validation detection"""

from rpgdoc.static_analysis.business_rule_detector import BusinessRuleDetector
from rpgdoc.static_analysis.message_extractor import MessageTableBuilder
from rpgdoc.static_analysis.source_lines import split_lines
from rpgdoc.static_analysis.validation_extractor import (
    EMPTY_FIELD_CHECK, MESSAGE_FILE_REFERENCE, NUMERIC_RANGE_VALIDATION,
    RECORD_EXISTENCE_CHECK, ValidationExtractor,
)


def _rules(source):
    return BusinessRuleDetector().detect(split_lines(source))


def _validations(source, annotation=None):
    catalog = MessageTableBuilder().build(annotation)
    return ValidationExtractor().extract(split_lines(source), catalog)


class TestBusinessRuleDetector:
    """Conditional, loop and selection rules"""

    def test_rules_in_source_order(self, maintenance_program):
        rules = _rules(maintenance_program)

        assert [r.name for r in rules] == ['Business Rule 1', 'Business Rule 2',
                                           'Business Rule 3']
        assert rules[0].description == 'Selection structure for conditional processing'
        assert rules[1].description == "Conditional check: CUSTNAME = ''"
        assert rules[2].description == 'Conditional check: %FOUND(CUSTMAST)'

    def test_loop_rule(self, read_loop_program):
        rules = _rules(read_loop_program)

        assert len(rules) == 1
        assert rules[0].description == 'Loop condition: DOW NOT *IN99'

    def test_indicator_bookkeeping_is_skipped(self):
        """Error flag housekeeping alone is not a business rule.

        User Outcome at Risk: Report buries real rules under indicator noise.
        """
        source = ("     C                   SETON                                        31\n"
                  "     C                   EVAL      *IN32 = *ON\n"
                  "     C                   MOVE      *OFF          *IN33\n")

        assert _rules(source) == []

    def test_screen_filter_has_its_own_counter(self):
        source = ("     C                   IF        SFLOPT = 'X'\n"
                  "     C                   IF        AMOUNT > 100\n"
                  "     C     OPTION        IFEQ      '2'\n")

        rules = _rules(source)

        assert [r.name for r in rules] == ['Screen Filter Rule 1', 'Business Rule 1',
                                           'Screen Filter Rule 2']
        assert rules[0].description == "Screen filter condition: SFLOPT = 'X'"
        assert rules[2].description == "Screen filter condition: OPTION = '2'"

    def test_comments_are_ignored(self):
        assert _rules("     C*                  IF        A = B\n") == []

    def test_screen_words_inside_literals_are_not_screen_fields(self):
        rules = _rules("     C                   IF        CUSTNAME = 'SELECT'\n")

        assert [r.name for r in rules] == ['Business Rule 1']


class TestValidationExtractor:
    """Validation categories and nearest message ids"""

    def test_scenario_d_empty_field_with_message(self, message_table):
        """Empty-string comparison picks up the message two lines below.

        User Outcome at Risk: Validation is documented without its message.
        """
        source = ("     C                   IF        CUSTNAME = ''\n"
                  "     C                   EVAL      *IN31 = *ON\n"
                  "     C                   EVAL      MSGID = 'USR0001'\n"
                  "     C                   ENDIF\n")

        validations = _validations(source, message_table)

        assert len(validations) == 1
        assert validations[0].validation_type == EMPTY_FIELD_CHECK
        assert validations[0].message_id == 'USR0001'
        assert validations[0].message_text == 'Customer name is required'

    def test_message_beyond_window_is_not_attached(self, message_table):
        source = ("     C                   IF        CUSTNAME = *BLANKS\n" +
                  "     C                   EVAL      COUNT = COUNT + 1\n" * 5 +
                  "     C                   EVAL      MSGID = 'USR0001'\n")

        validation = _validations(source, message_table)[0]

        assert validation.message_id == 'N/A'
        assert validation.message_text == ''

    def test_unresolved_message_has_no_text(self):
        source = ("     C                   IF        AMOUNT < 0\n"
                  "     C                   EVAL      MSGID = 'USR0002'\n")

        validation = _validations(source)[0]

        assert validation.validation_type == NUMERIC_RANGE_VALIDATION
        assert validation.message_id == 'USR0002'
        assert validation.message_text == ''

    def test_one_conditional_two_categories(self):
        source = "     C                   IF        NAME = '' OR AGE > 120\n"

        types = [v.validation_type for v in _validations(source)]

        assert types == [EMPTY_FIELD_CHECK, NUMERIC_RANGE_VALIDATION]

    def test_record_existence_check(self, update_program):
        validations = _validations(update_program)

        assert [v.validation_type for v in validations] == [RECORD_EXISTENCE_CHECK]
        assert 'MASTFILE' in validations[0].description

    def test_keyed_read_without_status_test(self):
        source = ("     C     CUSTNO        CHAIN     MASTFILE\n"
                  "     C                   EVAL      NAME = MNAME\n")

        assert _validations(source) == []

    def test_message_file_reference(self):
        source = "     C                   EVAL      MSGF = 'MSGF(*LIBL/CUSTMSG)'\n"

        validations = _validations(source)

        assert validations[0].validation_type == MESSAGE_FILE_REFERENCE
        assert validations[0].message_id == 'N/A'
        assert 'CUSTMSG' in validations[0].description

    def test_declared_msgf_field_is_not_a_reference(self):
        source = "     D MSGF            S             10A\n"

        assert _validations(source) == []

    def test_status_window_edge(self):
        """A status test on the fifth line after a keyed read counts, the sixth does not.

        User Outcome at Risk: Existence checks are reported for unrelated status tests.
        """
        chain = "     C     CUSTNO        CHAIN     MASTFILE\n"
        filler = "     C                   EXSR      LOADSR\n"
        status = "     C                   IF        %FOUND(MASTFILE)\n"

        inside = _validations(chain + filler * 4 + status)
        outside = _validations(chain + filler * 5 + status)

        assert [v.validation_type for v in inside] == [RECORD_EXISTENCE_CHECK]
        assert outside == []
