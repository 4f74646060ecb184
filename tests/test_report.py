"""Tests for the report formatter and the end-to-end documentation run"""

import pytest

from rpgdoc import analyze
from rpgdoc.report_formatter import pad_cell
from rpgdoc.static_analysis.documentation_generator import (
    DocumentationGenerator, SourceRejectedError,
)

BANNER = "═" * 71

SECTION_TITLES = [
    "SECTION 1 - PROGRAM OVERVIEW",
    "SECTION 2 - FILE OPERATIONS",
    "SECTION 3 - BUSINESS RULES",
    "SECTION 4 - CALL STACK",
    "SECTION 5 - DEPENDENCIES",
    "SECTION 6 - SCREEN ACTIONS",
    "SECTION 7 - VALIDATIONS AND MESSAGES",
    "SECTION 8 - DATA MAPPINGS",
    "SECTION 9 - MESSAGES USED IN PROGRAM",
    "SECTION 10 - DETAILED PROCESSING",
]


class TestPadCell:
    """Fixed-width cells"""

    @pytest.mark.parametrize("width", [3, 11, 12, 22])
    def test_truncation_is_exact(self, width):
        """Overflowing values render as exactly the column width, ending in '...'.

        User Outcome at Risk: Table borders no longer line up.
        """
        value = "X" * (width + 5)

        cell = pad_cell(value, width)

        assert len(cell) == width
        assert cell.endswith("...")
        assert cell == value[:width - 3] + "..."

    def test_short_value_is_padded(self):
        assert pad_cell("CUSTMAST", 12) == "CUSTMAST    "

    def test_value_at_width_is_unchanged(self):
        assert pad_cell("ABCDEFGHIJKL", 12) == "ABCDEFGHIJKL"


class TestReportLayout:
    """Section order, banners and placeholders"""

    def test_sections_in_fixed_order(self, maintenance_program):
        report = analyze(maintenance_program)
        positions = [report.index(title) for title in SECTION_TITLES]

        assert positions == sorted(positions)
        assert report.startswith(BANNER + "\nMESSAGE LIST\n" + BANNER)
        assert report.endswith(BANNER + "\nEND OF DOCUMENTATION\n" + BANNER + "\n")

    def test_placeholders_for_empty_facets(self, calculation_only_program):
        report = analyze(calculation_only_program)

        assert "No message list provided." in report
        assert "No file operations detected." in report
        assert "No program calls detected." in report
        assert "No screen actions detected." in report
        assert "No validations detected." in report
        assert "No messages detected in program." in report
        assert "Step 1: Main Processing" in report

    def test_file_table_rows_have_fixed_width(self, maintenance_program):
        report = analyze(maintenance_program)
        section = report[report.index("SECTION 2"):report.index("SECTION 3")]
        table = [line for line in section.splitlines() if line and line[0] in "┌│├└"]

        assert len({len(line) for line in table}) == 1
        assert "│ CUSTMAST     │ Update       │ Keyed       │ CUSTNO, CMPNO          │ Composite Key │" \
            in table

    def test_long_key_fields_are_truncated(self):
        source = ("     FMASTFILE  IF   E           K DISK\n"
                  "     C     LONGKEY       KLIST\n"
                  "     C                   KFLD                    CUSTOMERNO\n"
                  "     C                   KFLD                    ORDERNUMBER\n"
                  "     C                   KFLD                    LINENUMBER\n"
                  "     C     LONGKEY       CHAIN     MASTFILE\n")

        report = analyze(source)

        assert "│ CUSTOMERNO, ORDERNU... │" in report

    def test_scenario_c_guidance_echoed_verbatim(self, update_program):
        """Annotation without table rows appears verbatim as instructions.

        User Outcome at Risk: Reviewer's instructions silently dropped.
        """
        guidance = "Focus on the update path.\nMention USR0001 where relevant."

        report = analyze(update_program, guidance)

        assert report.startswith(BANNER + "\nCUSTOM INSTRUCTIONS\n" + BANNER)
        assert guidance in report
        assert "MESSAGE LIST" not in report

    def test_message_table_block(self, maintenance_program, message_table):
        report = analyze(maintenance_program, message_table)

        assert "USR0001  Customer name is required" in report
        assert "Message ID: USR0001\nMessage Text: Customer name is required" in report

    def test_truncated_pseudocode_is_noted(self):
        body = "".join(f"     C                   EVAL      F{i} = {i}\n" for i in range(65))
        source = "     C     BIGSR         BEGSR\n" + body + "     C                   ENDSR\n"

        assert "(pseudocode truncated after 60 lines)" in analyze(source)


class TestDocumentationGenerator:
    """End-to-end analysis"""

    def test_deterministic(self, maintenance_program, message_table):
        """Same input, byte-identical report.

        User Outcome at Risk: Regenerated documentation shows spurious diffs.
        """
        assert analyze(maintenance_program, message_table) == \
            analyze(maintenance_program, message_table)

    @pytest.mark.parametrize("source", ["", "   \n\t\n", None])
    def test_blank_source_is_rejected(self, source):
        with pytest.raises(SourceRejectedError):
            analyze(source)

    def test_rejection_is_a_value_error(self):
        assert issubclass(SourceRejectedError, ValueError)

    def test_garbage_input_degrades_to_defaults(self):
        report = analyze("this is not rpg at all\n!!!\n")

        assert "Program Name: UNKNOWN_PROGRAM" in report
        assert "Program Type: Batch" in report
        assert "Step 1: Main Processing" in report

    def test_model_to_dict(self, maintenance_program, message_table):
        model = DocumentationGenerator().build_model(maintenance_program, message_table)
        data = model.to_dict()

        assert data["metadata"]["name"] == "CUSTMNT"
        assert data["metadata"]["kind"] == "Interactive/Screen"
        assert data["message_catalog"]["kind"] == "message_table"
        assert [s["process_name"] for s in data["processing_steps"]] == \
            ["ADDREC", "CHGREC", "DLTREC"]
        assert data["validations"][0]["type"] == "Empty Field Check"
        assert data["validations"][0]["message_text"] == "Customer name is required"
